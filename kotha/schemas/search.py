from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from kotha.schemas.post import AuthorSummary, CategoryRef

class SearchResultItem(BaseModel):
    id: UUID
    title: str
    slug: str
    excerpt: Optional[str]
    featured_image: Optional[str]
    category: CategoryRef
    author: Optional[AuthorSummary] = None
    tags: List[str]
    published_at: Optional[datetime]
    created_at: datetime
    view_count: int
    read_time: int

class SearchPage(BaseModel):
    results: List[SearchResultItem]
    total: int
    page: int
    per_page: int
    total_pages: int
    has_next: bool
    has_prev: bool

class SearchResponse(BaseModel):
    query: str
    posts: List[SearchResultItem]
    total: int
    page: int
    total_pages: int = Field(serialization_alias="totalPages")
    has_next_page: bool = Field(serialization_alias="hasNextPage")
    has_prev_page: bool = Field(serialization_alias="hasPrevPage")
    message: Optional[str] = None
