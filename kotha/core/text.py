import math
import re
from typing import Optional

_TAG_RE = re.compile(r"<[^>]*>")


def escape_like(term: str, escape_char: str = "\\") -> str:
    """Escape LIKE wildcards so ``term`` matches literally."""
    return (
        term.replace(escape_char, escape_char * 2)
        .replace("%", f"{escape_char}%")
        .replace("_", f"{escape_char}_")
    )


def highlight_text(text: Optional[str], term: str, tag: str = "mark") -> Optional[str]:
    """
    Wrap every case-insensitive occurrence of ``term`` in ``text`` with
    ``<tag>...</tag>``, keeping the original casing of the match.

    Matches inside longer words are highlighted too.
    """
    if not text or not term:
        return text
    pattern = re.compile(re.escape(term), re.IGNORECASE)
    return pattern.sub(lambda m: f"<{tag}>{m.group(0)}</{tag}>", text)


def strip_tags(html: str) -> str:
    return _TAG_RE.sub(" ", html or "")


def compute_read_time(content: str, words_per_minute: int = 200) -> int:
    """Reading time in whole minutes for rich-text ``content``."""
    words = strip_tags(content).split()
    if not words:
        return 0
    return math.ceil(len(words) / words_per_minute)
