from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from kotha.api.v1 import dependencies
from kotha.database import get_db
from kotha.models.category import Category
from kotha.models.post import Post
from kotha.schemas.post import Post as PostSchema, SlugFixReport
from kotha.services.post import PostService

router = APIRouter(dependencies=[Depends(dependencies.require_admin)])

@router.get("/stats")
async def get_stats(
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    Get dashboard statistics.
    """
    # Posts per status
    status_result = await db.execute(
        select(Post.status, func.count(Post.id)).group_by(Post.status)
    )
    posts_by_status = {status: count for status, count in status_result.all()}

    # Total views
    views_query = select(func.sum(Post.view_count)).select_from(Post)
    total_views = await db.scalar(views_query) or 0

    total_categories = await db.scalar(select(func.count(Category.id))) or 0

    # Most viewed
    popular_query = (
        select(Post)
        .options(selectinload(Post.category), selectinload(Post.author))
        .order_by(Post.view_count.desc())
        .limit(5)
    )
    popular_result = await db.execute(popular_query)
    popular_posts = popular_result.scalars().all()

    return {
        "total_posts": sum(posts_by_status.values()),
        "posts_by_status": posts_by_status,
        "total_views": total_views,
        "total_categories": total_categories,
        "popular_posts": [PostSchema.from_model(p) for p in popular_posts]
    }

@router.post("/fix-slugs", response_model=SlugFixReport)
async def fix_slugs(
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    Regenerate slugs of posts whose slug is empty or a bare hyphen.
    """
    fixes = await PostService(db).fix_broken_slugs()
    return SlugFixReport(fixed_count=len(fixes), results=fixes)
