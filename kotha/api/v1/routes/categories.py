from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from kotha.api.v1 import dependencies
from kotha.database import get_db
from kotha.schemas.category import Category, CategoryCreate, CategoryList, CategoryUpdate, Language
from kotha.services.category import CategoryService

router = APIRouter()

@router.get("/", response_model=CategoryList)
async def list_categories(
    language: Optional[Language] = None,
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    List categories by name, optionally for one language.
    """
    service = CategoryService(db)
    return {"categories": await service.get_categories(language)}

@router.get("/{slug}", response_model=Category)
async def get_category(
    slug: str,
    db: AsyncSession = Depends(get_db)
) -> Any:
    service = CategoryService(db)
    category = await service.get_category_by_slug(slug)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category

@router.post(
    "/",
    response_model=Category,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(dependencies.require_author)],
)
async def create_category(
    category_in: CategoryCreate,
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    Create a category. The slug is derived from the name.
    """
    service = CategoryService(db)
    return await service.create_category(category_in)

@router.patch(
    "/{category_id}",
    response_model=Category,
    dependencies=[Depends(dependencies.require_author)],
)
async def update_category(
    category_id: UUID,
    category_in: CategoryUpdate,
    db: AsyncSession = Depends(get_db)
) -> Any:
    service = CategoryService(db)
    category = await service.update_category(category_id, category_in)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category
