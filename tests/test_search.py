import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from kotha.core.exceptions import InvalidFilterError, InvalidIdentifierError
from kotha.services.search import SearchService


class ExplodingSession:
    """Fails the test if the search touches the database."""

    def __getattr__(self, name):
        raise AssertionError(f"database was used: {name}")


@pytest.mark.asyncio
@pytest.mark.parametrize("term", ["", "a", " a ", "   "])
async def test_short_term_returns_empty_without_query(term):
    service = SearchService(ExplodingSession())
    result = await service.search_posts(term)
    assert result.results == []
    assert result.total == 0
    assert result.total_pages == 0
    assert result.has_next is False

@pytest.mark.asyncio
async def test_pagination(db_session: AsyncSession, seed_posts):
    await seed_posts(25, title=lambda i: f"Travel diary {i}")
    service = SearchService(db_session)

    result = await service.search_posts("travel", page=3, per_page=10)
    assert len(result.results) == 5
    assert result.total == 25
    assert result.total_pages == 3
    assert result.has_next is False
    assert result.has_prev is True

    first = await service.search_posts("travel", page=1, per_page=10)
    assert first.has_next is True
    assert first.has_prev is False
    # Newest publish date first
    assert first.results[0].slug == "seeded-post-24"

@pytest.mark.asyncio
@pytest.mark.parametrize("page, per_page", [(0, 0), (-1, -5), (None, None)])
async def test_non_positive_paging_uses_defaults(db_session: AsyncSession, seed_posts, page, per_page):
    await seed_posts(12, title=lambda i: f"Travel diary {i}")
    result = await SearchService(db_session).search_posts("travel", page=page, per_page=per_page)
    assert result.page == 1
    assert result.per_page == 10
    assert len(result.results) == 10
    assert result.total_pages == 2

@pytest.mark.asyncio
async def test_highlights_title_and_excerpt_only(db_session: AsyncSession, seed_posts):
    await seed_posts(
        1,
        title="My Blogging Journey",
        excerpt="Why I started a blog",
        content="<p>" + "blog " * 30 + "</p>",
    )
    result = await SearchService(db_session).search_posts("blog")
    item = result.results[0]
    assert item.title == "My <mark>Blog</mark>ging Journey"
    assert item.excerpt == "Why I started a <mark>blog</mark>"
    assert not hasattr(item, "content")

@pytest.mark.asyncio
async def test_metacharacters_match_literally(db_session: AsyncSession, seed_posts):
    titles = ["Learning C++ basics", "C and C# compared", "Discount 50% off", "Top 500 deals"]
    await seed_posts(len(titles), title=lambda i: titles[i])
    service = SearchService(db_session)

    result = await service.search_posts("C++")
    assert [r.title for r in result.results] == ["Learning <mark>C++</mark> basics"]

    result = await service.search_posts("50%")
    assert result.total == 1
    assert result.results[0].title == "Discount <mark>50%</mark> off"

    result = await service.search_posts("café")
    assert result.total == 0

@pytest.mark.asyncio
async def test_matches_body_and_tags(db_session: AsyncSession, seed_posts):
    await seed_posts(
        3,
        title=lambda i: f"Post {i}",
        excerpt="Nothing here",
        content=lambda i: "<p>" + ("deep learning " if i == 0 else "filler text ") * 20 + "</p>",
        tags=lambda i: ["Bangladesh"] if i == 1 else ["misc"],
    )
    service = SearchService(db_session)

    result = await service.search_posts("deep learning")
    assert [r.slug for r in result.results] == ["seeded-post-0"]

    result = await service.search_posts("bangladesh")
    assert [r.slug for r in result.results] == ["seeded-post-1"]
    assert result.results[0].tags == ["Bangladesh"]

@pytest.mark.asyncio
async def test_valid_term_without_matches(db_session: AsyncSession, seed_posts):
    await seed_posts(3)
    result = await SearchService(db_session).search_posts("nonexistent")
    assert result.results == []
    assert result.total == 0
    assert result.total_pages == 0
    assert result.has_next is False

@pytest.mark.asyncio
async def test_status_filter(db_session: AsyncSession, seed_posts):
    await seed_posts(4, status=lambda i: "draft" if i % 2 else "published")
    service = SearchService(db_session)

    assert (await service.search_posts("seeded")).total == 2
    assert (await service.search_posts("seeded", status="draft")).total == 2
    assert (await service.search_posts("seeded", status="all")).total == 4

    with pytest.raises(InvalidFilterError):
        await service.search_posts("seeded", status="deleted")

@pytest.mark.asyncio
async def test_category_filter(db_session: AsyncSession, seed_posts, category):
    await seed_posts(2)
    service = SearchService(db_session)

    result = await service.search_posts("seeded", category=str(category.id))
    assert result.total == 2
    assert result.results[0].category.kind == "resolved"
    assert result.results[0].category.slug == "technology"

    result = await service.search_posts("seeded", category="00000000-0000-0000-0000-000000000000")
    assert result.total == 0

    with pytest.raises(InvalidIdentifierError):
        await service.search_posts("seeded", category="not-an-id")

# API

@pytest.mark.asyncio
async def test_search_endpoint(client: AsyncClient, seed_posts):
    await seed_posts(15, title=lambda i: f"Python tips {i}")

    response = await client.get("/api/v1/search/", params={"q": "python", "limit": 10, "page": 2})
    assert response.status_code == 200
    data = response.json()
    assert data["query"] == "python"
    assert data["total"] == 15
    assert data["page"] == 2
    assert data["totalPages"] == 2
    assert data["hasNextPage"] is False
    assert data["hasPrevPage"] is True
    assert len(data["posts"]) == 5
    assert data["posts"][0]["title"].startswith("<mark>Python</mark>")

@pytest.mark.asyncio
async def test_search_endpoint_short_query(client: AsyncClient):
    response = await client.get("/api/v1/search/", params={"q": "a"})
    assert response.status_code == 200
    data = response.json()
    assert data["posts"] == []
    assert data["total"] == 0
    assert data["totalPages"] == 0
    assert "at least 2 characters" in data["message"]

@pytest.mark.asyncio
async def test_search_endpoint_invalid_category(client: AsyncClient):
    response = await client.get("/api/v1/search/", params={"q": "python", "category": "xyz"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid category ID"

@pytest.mark.asyncio
async def test_search_drafts_requires_editor(client: AsyncClient, seed_posts, editor_token_headers, reader_token_headers):
    await seed_posts(2, status="draft")

    response = await client.get("/api/v1/search/", params={"q": "seeded", "status": "draft"})
    assert response.status_code == 403

    response = await client.get(
        "/api/v1/search/", params={"q": "seeded", "status": "draft"}, headers=reader_token_headers
    )
    assert response.status_code == 403

    response = await client.get(
        "/api/v1/search/", params={"q": "seeded", "status": "draft"}, headers=editor_token_headers
    )
    assert response.status_code == 200
    assert response.json()["total"] == 2

@pytest.mark.asyncio
async def test_search_endpoint_without_query(client: AsyncClient, seed_posts):
    await seed_posts(2)

    response = await client.get("/api/v1/search/")
    assert response.status_code == 200
    data = response.json()
    assert data["query"] == ""
    assert data["posts"] == []
    assert data["total"] == 0
    assert data["hasNextPage"] is False
    assert "at least 2 characters" in data["message"]

@pytest.mark.asyncio
async def test_unknown_status_is_rejected_for_everyone(client: AsyncClient, editor_token_headers):
    for headers in ({}, editor_token_headers):
        response = await client.get("/api/v1/search/", params={"q": "seeded", "status": "deleted"}, headers=headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Unknown status 'deleted'"

    response = await client.get("/api/v1/posts/", params={"status": "deleted"})
    assert response.status_code == 400
