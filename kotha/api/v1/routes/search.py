from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from kotha.api.v1 import dependencies
from kotha.config import settings
from kotha.database import get_db
from kotha.schemas.search import SearchResponse
from kotha.schemas.user import AuthSession
from kotha.services.search import SearchService

router = APIRouter()

@router.get("/", response_model=SearchResponse)
async def search_posts(
    q: str = Query("", description="Search query (at least 2 characters)"),
    page: int = 1,
    limit: int = settings.SEARCH_RESULTS_PER_PAGE,
    category: Optional[str] = None,
    status: str = "published",
    db: AsyncSession = Depends(get_db),
    session: Optional[AuthSession] = Depends(dependencies.get_optional_session),
) -> Any:
    """
    Search posts by title, body, excerpt and tags.
    """
    dependencies.ensure_can_view_status(status, session)

    service = SearchService(db)
    result = await service.search_posts(
        q, page=page, per_page=limit, category=category, status=status
    )

    message = None
    if len(q.strip()) < settings.SEARCH_MIN_QUERY_LENGTH:
        message = f"Search query must be at least {settings.SEARCH_MIN_QUERY_LENGTH} characters long"

    return SearchResponse(
        query=q,
        posts=result.results,
        total=result.total,
        page=result.page,
        total_pages=result.total_pages,
        has_next_page=result.has_next,
        has_prev_page=result.has_prev,
        message=message,
    )
