import math
from typing import Any, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from kotha.api.v1 import dependencies
from kotha.database import get_db
from kotha.schemas.post import Pagination, Post, PostCreate, PostList, PostUpdate, TagCount
from kotha.schemas.user import AuthSession
from kotha.services.post import PostService
from kotha.services.search import normalize_paging

router = APIRouter()

# Public Endpoints

@router.get("/", response_model=PostList)
async def list_posts(
    page: int = 1,
    limit: int = 10,
    category: Optional[str] = None,
    tag: Optional[str] = None,
    search: Optional[str] = None,
    status: str = "published",
    db: AsyncSession = Depends(get_db),
    session: Optional[AuthSession] = Depends(dependencies.get_optional_session),
) -> Any:
    """
    List posts, newest first. Drafts and archived posts need an editor session.
    """
    dependencies.ensure_can_view_status(status, session)
    page, limit = normalize_paging(page, limit)

    service = PostService(db)
    items, total = await service.get_posts(
        page=page, per_page=limit, category=category, tag=tag, search=search, status=status
    )
    total_pages = math.ceil(total / limit)

    return PostList(
        posts=[Post.from_model(p) for p in items],
        pagination=Pagination(
            current_page=page,
            total_pages=total_pages,
            total_posts=total,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        ),
    )

@router.get("/tags", response_model=List[TagCount])
async def list_tags(
    limit: int = 50,
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    Tags used by published posts, most used first.
    """
    service = PostService(db)
    return [TagCount(name=name, count=count) for name, count in await service.get_tag_counts(limit)]

@router.get("/slug/{slug}", response_model=Post)
async def get_post_by_slug(
    slug: str,
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    Get a published post by slug and count the view.
    """
    if len(slug) < 2:
        raise HTTPException(status_code=400, detail="Invalid slug")

    service = PostService(db)
    post = await service.get_post_by_slug(slug)
    if not post or post.status != "published":
        raise HTTPException(status_code=404, detail="Post not found")

    response = Post.from_model(post)
    await service.increment_view_count(post.id)
    return response

@router.get("/{post_id}", response_model=Post)
async def get_post(
    post_id: UUID,
    db: AsyncSession = Depends(get_db),
    session: Optional[AuthSession] = Depends(dependencies.get_optional_session),
) -> Any:
    """
    Get a post by id.
    """
    service = PostService(db)
    post = await service.get_post(post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    if post.status != "published" and (session is None or not session.can_author):
        raise HTTPException(status_code=404, detail="Post not found")
    return Post.from_model(post)

# Authoring Endpoints

@router.post("/", response_model=Post, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_in: PostCreate,
    db: AsyncSession = Depends(get_db),
    session: AuthSession = Depends(dependencies.require_author),
) -> Any:
    """
    Create a post. The slug is derived from the title.
    """
    service = PostService(db)
    post = await service.create_post(post_in, author_id=session.user_id)
    return Post.from_model(post)

@router.patch("/{post_id}", response_model=Post)
async def update_post(
    post_id: UUID,
    post_in: PostUpdate,
    db: AsyncSession = Depends(get_db),
    session: AuthSession = Depends(dependencies.require_author),
) -> Any:
    """
    Update a post. A new title re-derives the slug.
    """
    service = PostService(db)
    post = await service.get_post(post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    dependencies.ensure_can_modify(post, session)

    post = await service.update_post(post_id, post_in)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return Post.from_model(post)

@router.delete("/{post_id}")
async def delete_post(
    post_id: UUID,
    db: AsyncSession = Depends(get_db),
    session: AuthSession = Depends(dependencies.require_author),
) -> Any:
    """
    Delete a post.
    """
    service = PostService(db)
    post = await service.get_post(post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    dependencies.ensure_can_modify(post, session)

    await service.delete_post(post_id)
    return {"status": "ok"}
