import re

import pytest

from kotha.core.exceptions import SlugExhaustedError
from kotha.core.slugs import is_valid_slug, resolve_slug, slugify_title

SLUG_CHARS = re.compile(r"^[\u0980-\u09FFa-z0-9-]+$")


def taken(*slugs, owner=None):
    """An existence check backed by a set; ``owner`` owns every slug in it."""
    calls = []

    async def exists(candidate, exclude_id=None):
        calls.append(candidate)
        if owner is not None and exclude_id == owner:
            return False
        return candidate in slugs

    exists.calls = calls
    return exists


def test_slugify_english_title():
    assert slugify_title("Hello World") == "hello-world"
    assert slugify_title("  Top 10   Tips -- for 2024!  ") == "top-10-tips-for-2024"

def test_slugify_keeps_bengali():
    assert slugify_title("বাংলা ব্লগ") == "বাংলা-ব্লগ"
    assert slugify_title("ঢাকা Travel Guide ২০২৪") == "ঢাকা-travel-guide-২০২৪"

def test_slugify_drops_other_scripts_and_punctuation():
    assert slugify_title("Café & Crème: ¿Qué?") == "caf-crme-qu"
    assert slugify_title("Привет world") == "world"

@pytest.mark.parametrize("title", [
    "বাংলা ও English 123 mixed",
    "---Leading and trailing---",
    "Multiple    spaces\tand\nnewlines",
    "Hyphen - between - words",
    "আমার প্রথম পোস্ট!!! (Part 2)",
])
def test_slugify_mixed_titles_are_well_formed(title):
    slug = slugify_title(title)
    assert SLUG_CHARS.match(slug)
    assert not slug.startswith("-") and not slug.endswith("-")
    assert "--" not in slug
    assert is_valid_slug(slug)

def test_slugify_symbols_only_is_empty():
    assert slugify_title("🎉🔥!!!") == ""

@pytest.mark.asyncio
async def test_symbol_title_falls_back_to_prefix():
    slug = await resolve_slug("🎉🔥 ???", taken(), prefix="post")
    assert re.match(r"^post-\d{13}$", slug)

    slug = await resolve_slug("***", taken(), prefix="category")
    assert slug.startswith("category-")

@pytest.mark.asyncio
async def test_free_slug_is_returned_unchanged():
    exists = taken()
    assert await resolve_slug("Foo", exists) == "foo"
    assert exists.calls == ["foo"]

@pytest.mark.asyncio
async def test_suffix_increments_until_free():
    exists = taken("foo", "foo-1")
    assert await resolve_slug("Foo", exists) == "foo-2"
    # One check per candidate, in order
    assert exists.calls == ["foo", "foo-1", "foo-2"]

@pytest.mark.asyncio
async def test_exclude_id_keeps_own_slug():
    exists = taken("my-post", owner="post-1")
    assert await resolve_slug("MY Post", exists, exclude_id="post-1") == "my-post"
    assert await resolve_slug("MY Post", exists, exclude_id="post-2") == "my-post-1"

@pytest.mark.asyncio
async def test_exclude_id_is_passed_to_check():
    seen = []

    async def exists(candidate, exclude_id=None):
        seen.append(exclude_id)
        return False

    await resolve_slug("Title", exists, exclude_id=42)
    assert seen == [42]

@pytest.mark.asyncio
async def test_attempt_cap_raises():
    async def always_taken(candidate, exclude_id=None):
        return True

    with pytest.raises(SlugExhaustedError):
        await resolve_slug("Foo", always_taken, max_attempts=5)

@pytest.mark.asyncio
async def test_check_errors_propagate():
    async def broken(candidate, exclude_id=None):
        raise ConnectionError("store unavailable")

    with pytest.raises(ConnectionError):
        await resolve_slug("Foo", broken)
