"""
Slug generation for posts and categories.

Slugs keep Bengali script (U+0980-U+09FF), ASCII lowercase letters and
digits so that Bengali and English titles both produce readable URLs.
"""
import logging
import re
import time
from typing import Any, Awaitable, Callable, Optional

from kotha.core.exceptions import SlugExhaustedError

logger = logging.getLogger(__name__)

SlugExistsCheck = Callable[[str, Optional[Any]], Awaitable[bool]]

DEFAULT_MAX_ATTEMPTS = 10_000

_DISALLOWED = re.compile(r"[^\u0980-\u09FFa-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")

SLUG_PATTERN = re.compile(r"^[\u0980-\u09FFa-z0-9]+(-[\u0980-\u09FFa-z0-9]+)*$")


def slugify_title(title: str) -> str:
    """Turn a free-text title into a slug. May return an empty string."""
    slug = (title or "").lower()
    slug = _DISALLOWED.sub("", slug)
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHENS.sub("-", slug)
    return slug.strip().strip("-")


def fallback_slug(prefix: str) -> str:
    return f"{prefix}-{int(time.time() * 1000)}"


def is_valid_slug(value: str) -> bool:
    return bool(value) and SLUG_PATTERN.match(value) is not None


async def resolve_slug(
    title: str,
    exists: SlugExistsCheck,
    exclude_id: Optional[Any] = None,
    prefix: str = "post",
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> str:
    """
    Derive a slug from ``title`` that ``exists`` reports as free.

    ``exists(candidate, exclude_id)`` is awaited once per candidate, in
    order: ``base``, ``base-1``, ``base-2``... The store may change between
    calls, so candidates are never checked in bulk. Errors raised by
    ``exists`` propagate to the caller.
    """
    base = slugify_title(title) or fallback_slug(prefix)

    candidate = base
    suffix = 0
    while await exists(candidate, exclude_id):
        suffix += 1
        if suffix > max_attempts:
            raise SlugExhaustedError(
                f"No free slug for '{base}' after {max_attempts} attempts; "
                "check the unique index on slugs"
            )
        candidate = f"{base}-{suffix}"

    if suffix:
        logger.info("Slug '%s' taken, using '%s'", base, candidate)
    return candidate
