import logging
from datetime import datetime, timezone
from typing import Any, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from kotha.config import settings
from kotha.core.exceptions import InvalidReferenceError
from kotha.core.slugs import is_valid_slug
from kotha.core.text import compute_read_time
from kotha.models.category import Category
from kotha.models.post import Post, PostStatus, PostTag
from kotha.schemas.post import PostCreate, PostUpdate, SlugFix
from kotha.services.search import build_search_filter, parse_identifier, status_filter
from kotha.services.slugged import SluggedService

logger = logging.getLogger(__name__)

# Columns that may be cleared by an update
NULLABLE_FIELDS = {"seo_title", "seo_description", "published_at"}


class PostService(SluggedService):
    model = Post
    slug_prefix = "post"

    def __init__(self, db: AsyncSession):
        super().__init__(db)

    async def get_post(self, post_id: UUID) -> Optional[Post]:
        result = await self.db.execute(
            select(Post)
            .where(Post.id == post_id)
            .options(selectinload(Post.category), selectinload(Post.author))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_post_by_slug(self, slug: str) -> Optional[Post]:
        result = await self.db.execute(
            select(Post)
            .where(Post.slug == slug)
            .options(selectinload(Post.category), selectinload(Post.author))
        )
        return result.scalar_one_or_none()

    async def get_posts(
        self,
        page: int = 1,
        per_page: int = 10,
        category: Optional[Any] = None,
        tag: Optional[str] = None,
        search: Optional[str] = None,
        status: Optional[str] = PostStatus.PUBLISHED.value,
    ) -> Tuple[List[Post], int]:
        conditions = []
        if category:
            conditions.append(Post.category_id == parse_identifier(category))
        if tag and tag.strip():
            conditions.append(Post.tag_links.any(func.lower(PostTag.name) == tag.strip().lower()))
        if search and search.strip():
            conditions.append(build_search_filter(search.strip(), include_tags=False))
        by_status = status_filter(status)
        if by_status is not None:
            conditions.append(by_status)

        # Count total
        total = await self.db.scalar(select(func.count(Post.id)).where(*conditions))

        # Get items
        query = (
            select(Post)
            .where(*conditions)
            .options(selectinload(Post.category), selectinload(Post.author))
            .order_by(Post.created_at.desc(), Post.id)
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all()), total or 0

    async def get_tag_counts(self, limit: int = 50) -> List[Tuple[str, int]]:
        """Tags of published posts, most used first."""
        count = func.count(PostTag.post_id)
        result = await self.db.execute(
            select(PostTag.name, count)
            .join(Post, Post.id == PostTag.post_id)
            .where(Post.status == PostStatus.PUBLISHED.value)
            .group_by(PostTag.name)
            .order_by(count.desc(), PostTag.name)
            .limit(limit)
        )
        return [(name, total) for name, total in result.all()]

    async def create_post(self, post_in: PostCreate, author_id: UUID) -> Post:
        await self._ensure_category(post_in.category_id)
        data = post_in.model_dump()

        for attempt in range(settings.SLUG_CONFLICT_RETRIES + 1):
            db_post = Post(**data, author_id=author_id)
            self._apply_derived_fields(db_post, content_changed=True)
            if db_post.status == PostStatus.PUBLISHED.value:
                db_post.published_at = datetime.now(timezone.utc)
            db_post.slug = await self.resolve_slug(db_post.title)

            self.db.add(db_post)
            if await self.commit_slugged(db_post.slug, None, attempt):
                logger.info("Created post %s with slug '%s'", db_post.id, db_post.slug)
                return await self.get_post(db_post.id)

    async def update_post(self, post_id: UUID, post_in: PostUpdate) -> Optional[Post]:
        update_data = {
            field: value
            for field, value in post_in.model_dump(exclude_unset=True).items()
            if value is not None or field in NULLABLE_FIELDS
        }
        if "category_id" in update_data:
            await self._ensure_category(update_data["category_id"])

        for attempt in range(settings.SLUG_CONFLICT_RETRIES + 1):
            db_post = await self.get_post(post_id)
            if not db_post:
                return None

            was_published = db_post.status == PostStatus.PUBLISHED.value
            for field, value in update_data.items():
                setattr(db_post, field, value)

            self._apply_derived_fields(db_post, content_changed="content" in update_data)
            if (
                db_post.status == PostStatus.PUBLISHED.value
                and not was_published
                and db_post.published_at is None
            ):
                db_post.published_at = datetime.now(timezone.utc)

            if "title" in update_data:
                db_post.slug = await self.resolve_slug(db_post.title, exclude_id=db_post.id)

            if await self.commit_slugged(db_post.slug, db_post.id, attempt):
                logger.info("Updated post %s", db_post.id)
                return await self.get_post(db_post.id)

    async def delete_post(self, post_id: UUID) -> bool:
        db_post = await self.get_post(post_id)
        if not db_post:
            return False
        await self.db.delete(db_post)
        await self.db.commit()
        logger.info("Deleted post %s", post_id)
        return True

    async def increment_view_count(self, post_id: UUID) -> None:
        await self.db.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(view_count=Post.view_count + 1)
        )
        await self.db.commit()

    async def fix_broken_slugs(self) -> List[SlugFix]:
        """Give every post whose slug is missing or malformed a resolved one."""
        rows = await self.db.execute(select(Post.id, Post.slug))
        broken_ids = [post_id for post_id, slug in rows.all() if not is_valid_slug(slug)]
        if not broken_ids:
            return []

        result = await self.db.execute(
            select(Post).where(Post.id.in_(broken_ids)).order_by(Post.created_at, Post.id)
        )
        fixes = []
        for db_post in result.scalars().all():
            old_slug = db_post.slug
            db_post.slug = await self.resolve_slug(db_post.title, exclude_id=db_post.id)
            # Flush so the next post in this batch sees the slug as taken
            await self.db.flush()
            fixes.append(SlugFix(id=db_post.id, title=db_post.title, old_slug=old_slug, new_slug=db_post.slug))

        await self.db.commit()
        logger.info("Repaired %d post slugs", len(fixes))
        return fixes

    async def _ensure_category(self, category_id: UUID) -> None:
        if await self.db.get(Category, category_id) is None:
            raise InvalidReferenceError("Category not found")

    def _apply_derived_fields(self, db_post: Post, content_changed: bool) -> None:
        if content_changed:
            db_post.read_time = compute_read_time(db_post.content, settings.READ_WORDS_PER_MINUTE)
        if not db_post.seo_title:
            db_post.seo_title = db_post.title[:60]
        if not db_post.seo_description:
            db_post.seo_description = (db_post.excerpt or db_post.content)[:160]
        if not db_post.seo_keywords:
            db_post.seo_keywords = list(db_post.tags)
