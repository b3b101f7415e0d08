import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from kotha.config import settings
from kotha.core.exceptions import DuplicateCategoryError
from kotha.models.category import Category
from kotha.schemas.category import CategoryCreate, CategoryUpdate
from kotha.services.slugged import SluggedService

logger = logging.getLogger(__name__)


class CategoryService(SluggedService):
    model = Category
    slug_prefix = "category"

    def __init__(self, db: AsyncSession):
        super().__init__(db)

    async def get_category(self, category_id: UUID) -> Optional[Category]:
        return await self.db.get(Category, category_id, populate_existing=True)

    async def get_category_by_slug(self, slug: str) -> Optional[Category]:
        result = await self.db.execute(select(Category).where(Category.slug == slug))
        return result.scalar_one_or_none()

    async def get_categories(self, language: Optional[str] = None) -> List[Category]:
        query = select(Category)
        if language:
            query = query.where(Category.language == language)
        result = await self.db.execute(query.order_by(Category.name))
        return list(result.scalars().all())

    async def create_category(self, category_in: CategoryCreate) -> Category:
        await self._ensure_unique_name(category_in.name, category_in.language)

        for attempt in range(settings.SLUG_CONFLICT_RETRIES + 1):
            db_category = Category(**category_in.model_dump())
            db_category.slug = await self.resolve_slug(db_category.name)
            self.db.add(db_category)
            if await self._commit(db_category.slug, None, attempt, category_in.name, category_in.language):
                await self.db.refresh(db_category)
                logger.info("Created category '%s' (%s)", db_category.name, db_category.slug)
                return db_category

    async def update_category(
        self, category_id: UUID, category_in: CategoryUpdate
    ) -> Optional[Category]:
        update_data = {
            field: value
            for field, value in category_in.model_dump(exclude_unset=True).items()
            if value is not None or field == "description"
        }

        for attempt in range(settings.SLUG_CONFLICT_RETRIES + 1):
            db_category = await self.get_category(category_id)
            if not db_category:
                return None

            name = update_data.get("name", db_category.name)
            language = update_data.get("language", db_category.language)
            if (name, language) != (db_category.name, db_category.language):
                await self._ensure_unique_name(name, language, exclude_id=db_category.id)

            for field, value in update_data.items():
                setattr(db_category, field, value)

            if "name" in update_data:
                db_category.slug = await self.resolve_slug(db_category.name, exclude_id=db_category.id)

            if await self._commit(db_category.slug, category_id, attempt, name, language):
                await self.db.refresh(db_category)
                return db_category

    async def _commit(
        self, slug: str, exclude_id: Optional[UUID], attempt: int, name: str, language: str
    ) -> bool:
        try:
            return await self.commit_slugged(slug, exclude_id, attempt)
        except IntegrityError:
            # Another writer may have taken the (name, language) pair after the pre-check
            await self._ensure_unique_name(name, language, exclude_id=exclude_id)
            raise

    async def _ensure_unique_name(
        self, name: str, language: str, exclude_id: Optional[UUID] = None
    ) -> None:
        query = select(Category.id).where(Category.name == name, Category.language == language)
        if exclude_id is not None:
            query = query.where(Category.id != exclude_id)
        if await self.db.scalar(query.limit(1)) is not None:
            raise DuplicateCategoryError("A category with this name already exists")
