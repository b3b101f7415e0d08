"""
Shared write path for tables that carry a derived, unique ``slug``.

Slugs are resolved explicitly by the service before persistence. The
existence check is only a pre-check: the unique index on ``slug`` is what
actually guarantees uniqueness, and a commit rejected because another
writer took the slug in the meantime is retried with a fresh resolution.
"""
import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from kotha.config import settings
from kotha.core.exceptions import SlugConflictError
from kotha.core.slugs import resolve_slug

logger = logging.getLogger(__name__)


class SluggedService:
    model: Any = None
    slug_prefix: str = "item"

    def __init__(self, db: AsyncSession):
        self.db = db

    async def slug_exists(self, candidate: str, exclude_id: Optional[Any] = None) -> bool:
        query = select(self.model.id).where(self.model.slug == candidate)
        if exclude_id is not None:
            query = query.where(self.model.id != exclude_id)
        return (await self.db.scalar(query.limit(1))) is not None

    async def resolve_slug(self, title: str, exclude_id: Optional[Any] = None) -> str:
        with self.db.no_autoflush:
            return await resolve_slug(
                title,
                self.slug_exists,
                exclude_id=exclude_id,
                prefix=self.slug_prefix,
                max_attempts=settings.SLUG_MAX_ATTEMPTS,
            )

    async def commit_slugged(self, slug: str, exclude_id: Optional[Any], attempt: int) -> bool:
        """
        Commit the pending write.

        Returns False when the commit lost a race for ``slug`` and the caller
        should resolve again. Integrity errors unrelated to the slug are
        re-raised.
        """
        try:
            await self.db.commit()
            return True
        except IntegrityError:
            await self.db.rollback()
            if not await self.slug_exists(slug, exclude_id):
                raise
            if attempt >= settings.SLUG_CONFLICT_RETRIES:
                raise SlugConflictError(f"Slug '{slug}' is already in use")
            logger.warning(
                "Slug '%s' was taken concurrently (attempt %d), resolving again",
                slug, attempt + 1,
            )
            return False
