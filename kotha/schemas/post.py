from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field, ConfigDict
from sqlalchemy import inspect

from kotha.models.post import Post as PostModel, PostStatus

class CategoryUnresolved(BaseModel):
    kind: Literal["unresolved"] = "unresolved"
    id: UUID

class CategoryResolved(BaseModel):
    kind: Literal["resolved"] = "resolved"
    id: UUID
    name: str
    slug: str
    language: str

CategoryRef = Annotated[Union[CategoryResolved, CategoryUnresolved], Field(discriminator="kind")]

class AuthorSummary(BaseModel):
    id: UUID
    name: str

    model_config = ConfigDict(from_attributes=True)


def category_ref(post: PostModel) -> Union[CategoryResolved, CategoryUnresolved]:
    """Expose the post's category as resolved only if the query loaded it."""
    if "category" in inspect(post).unloaded or post.category is None:
        return CategoryUnresolved(id=post.category_id)
    category = post.category
    return CategoryResolved(
        id=category.id, name=category.name, slug=category.slug, language=category.language
    )


def author_summary(post: PostModel) -> Optional[AuthorSummary]:
    if "author" in inspect(post).unloaded or post.author is None:
        return None
    return AuthorSummary.model_validate(post.author)


class PostBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=100)
    excerpt: str = Field(..., min_length=1, max_length=300)
    featured_image: str = Field(..., min_length=1, max_length=500)
    category_id: UUID
    tags: List[str] = []
    status: PostStatus = PostStatus.DRAFT
    is_featured: bool = False
    seo_title: Optional[str] = Field(None, max_length=60)
    seo_description: Optional[str] = Field(None, max_length=160)
    seo_keywords: Optional[List[str]] = None
    content_images: List[str] = []

    model_config = ConfigDict(use_enum_values=True)

class PostCreate(PostBase):
    pass

class PostUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=100)
    excerpt: Optional[str] = Field(None, min_length=1, max_length=300)
    featured_image: Optional[str] = Field(None, min_length=1, max_length=500)
    category_id: Optional[UUID] = None
    tags: Optional[List[str]] = None
    status: Optional[PostStatus] = None
    is_featured: Optional[bool] = None
    seo_title: Optional[str] = Field(None, max_length=60)
    seo_description: Optional[str] = Field(None, max_length=160)
    seo_keywords: Optional[List[str]] = None
    content_images: Optional[List[str]] = None
    published_at: Optional[datetime] = None

    model_config = ConfigDict(use_enum_values=True)

class Post(BaseModel):
    id: UUID
    title: str
    slug: str
    content: str
    excerpt: str
    featured_image: str
    category: CategoryRef
    author: Optional[AuthorSummary] = None
    tags: List[str]
    status: PostStatus
    is_featured: bool
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    seo_keywords: List[str] = []
    content_images: List[str] = []
    read_time: int
    view_count: int
    like_count: int
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, post: PostModel) -> "Post":
        return cls(
            id=post.id,
            title=post.title,
            slug=post.slug,
            content=post.content,
            excerpt=post.excerpt,
            featured_image=post.featured_image,
            category=category_ref(post),
            author=author_summary(post),
            tags=post.tags,
            status=post.status,
            is_featured=post.is_featured,
            seo_title=post.seo_title,
            seo_description=post.seo_description,
            seo_keywords=post.seo_keywords or [],
            content_images=post.content_images or [],
            read_time=post.read_time or 0,
            view_count=post.view_count or 0,
            like_count=post.like_count or 0,
            published_at=post.published_at,
            created_at=post.created_at,
            updated_at=post.updated_at,
        )

class Pagination(BaseModel):
    current_page: int = Field(serialization_alias="currentPage")
    total_pages: int = Field(serialization_alias="totalPages")
    total_posts: int = Field(serialization_alias="totalPosts")
    has_next_page: bool = Field(serialization_alias="hasNextPage")
    has_prev_page: bool = Field(serialization_alias="hasPrevPage")

class PostList(BaseModel):
    posts: List[Post]
    pagination: Pagination

class TagCount(BaseModel):
    name: str
    count: int

class SlugFix(BaseModel):
    id: UUID
    title: str
    old_slug: Optional[str]
    new_slug: str

class SlugFixReport(BaseModel):
    fixed_count: int
    results: List[SlugFix]
