import logging
import math
from typing import Any, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.sql.elements import ColumnElement

from kotha.config import settings
from kotha.core.exceptions import InvalidFilterError, InvalidIdentifierError
from kotha.core.text import escape_like, highlight_text
from kotha.models.post import Post, PostStatus, PostTag
from kotha.schemas.post import author_summary, category_ref
from kotha.schemas.search import SearchPage, SearchResultItem

logger = logging.getLogger(__name__)

ALL_STATUSES = "all"


def parse_identifier(value: Any, what: str = "category") -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise InvalidIdentifierError(f"Invalid {what} ID")


def build_search_filter(term: str, include_tags: bool = True) -> ColumnElement:
    """
    Case-insensitive literal substring match on title, content and excerpt,
    OR a case-insensitive exact match on any tag.
    """
    pattern = f"%{escape_like(term)}%"
    clauses = [
        Post.title.ilike(pattern, escape="\\"),
        Post.content.ilike(pattern, escape="\\"),
        Post.excerpt.ilike(pattern, escape="\\"),
    ]
    if include_tags:
        clauses.append(Post.tag_links.any(func.lower(PostTag.name) == term.lower()))
    return or_(*clauses)


def status_filter(status: Optional[str]) -> Optional[ColumnElement]:
    if not status or status == ALL_STATUSES:
        return None
    if status not in {s.value for s in PostStatus}:
        raise InvalidFilterError(f"Unknown status '{status}'")
    return Post.status == status


def normalize_paging(page: Optional[int], per_page: Optional[int]) -> Tuple[int, int]:
    """Non-positive or missing values fall back to defaults; per_page is capped."""
    if not page or page < 1:
        page = 1
    if not per_page or per_page < 1:
        per_page = settings.SEARCH_RESULTS_PER_PAGE
    return page, min(per_page, settings.SEARCH_MAX_PER_PAGE)


def listing_order() -> List[ColumnElement]:
    return [Post.published_at.desc().nulls_last(), Post.created_at.desc(), Post.id]


class SearchService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def search_posts(
        self,
        term: str,
        page: Optional[int] = 1,
        per_page: Optional[int] = None,
        category: Optional[Any] = None,
        status: Optional[str] = PostStatus.PUBLISHED.value,
    ) -> SearchPage:
        page, per_page = normalize_paging(page, per_page)
        term = (term or "").strip()

        if len(term) < settings.SEARCH_MIN_QUERY_LENGTH:
            return SearchPage(
                results=[], total=0, page=page, per_page=per_page,
                total_pages=0, has_next=False, has_prev=False,
            )

        conditions = [build_search_filter(term)]
        if category:
            conditions.append(Post.category_id == parse_identifier(category))
        by_status = status_filter(status)
        if by_status is not None:
            conditions.append(by_status)

        # Count total
        total = await self.db.scalar(select(func.count(Post.id)).where(*conditions)) or 0

        # Get items
        query = (
            select(Post)
            .where(*conditions)
            .options(selectinload(Post.category), selectinload(Post.author))
            .order_by(*listing_order())
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        result = await self.db.execute(query)
        posts = result.scalars().all()

        total_pages = math.ceil(total / per_page)
        logger.debug("Search %r matched %d posts", term, total)

        return SearchPage(
            results=[self._to_result(post, term) for post in posts],
            total=total,
            page=page,
            per_page=per_page,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )

    def _to_result(self, post: Post, term: str) -> SearchResultItem:
        tag = settings.SEARCH_HIGHLIGHT_TAG
        return SearchResultItem(
            id=post.id,
            title=highlight_text(post.title, term, tag),
            slug=post.slug,
            excerpt=highlight_text(post.excerpt, term, tag),
            featured_image=post.featured_image,
            category=category_ref(post),
            author=author_summary(post),
            tags=post.tags,
            published_at=post.published_at,
            created_at=post.created_at,
            view_count=post.view_count or 0,
            read_time=post.read_time or 0,
        )
