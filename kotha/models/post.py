"""
Post models for Kotha

Tags live in their own table so that tag membership can be matched
case-insensitively on every backend; ``Post.tags`` exposes them as a
plain list of strings.
"""
import enum
from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID, uuid4

from sqlalchemy import String, Text, Boolean, DateTime, Integer, ForeignKey, Index, JSON, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kotha.database import Base
from kotha.models.category import Category
from kotha.models.user import User


class PostStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


def normalize_tags(names: Iterable[str]) -> List[str]:
    """Strip, drop blanks and de-duplicate (case-insensitively), keeping order."""
    seen = set()
    cleaned = []
    for name in names or []:
        name = (name or "").strip()
        if not name or name.lower() in seen:
            continue
        seen.add(name.lower())
        cleaned.append(name)
    return cleaned


class PostTag(Base):
    __tablename__ = "post_tags"

    post_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True
    )
    name: Mapped[str] = mapped_column(String(100), primary_key=True)

    __table_args__ = (
        Index("idx_post_tags_name", "name"),
    )


class Post(Base):
    __tablename__ = "posts"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    excerpt: Mapped[str] = mapped_column(String(300), nullable=False)
    featured_image: Mapped[str] = mapped_column(String(500), nullable=False)

    author_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    category_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("categories.id"), nullable=False)

    status: Mapped[str] = mapped_column(String(20), default=PostStatus.DRAFT.value, nullable=False)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False)

    seo_title: Mapped[Optional[str]] = mapped_column(String(60))
    seo_description: Mapped[Optional[str]] = mapped_column(String(160))
    seo_keywords: Mapped[List[str]] = mapped_column(JSON, default=list)
    content_images: Mapped[List[str]] = mapped_column(JSON, default=list)

    read_time: Mapped[int] = mapped_column(Integer, default=0)
    view_count: Mapped[int] = mapped_column(Integer, default=0)
    like_count: Mapped[int] = mapped_column(Integer, default=0)

    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    # category/author are only loaded when a query asks for them; see
    # kotha.schemas.post.category_ref for how the unloaded case is exposed.
    category: Mapped[Category] = relationship(lazy="raise")
    author: Mapped[User] = relationship(lazy="raise")
    tag_links: Mapped[List[PostTag]] = relationship(
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by=PostTag.name,
    )

    __table_args__ = (
        Index("idx_posts_status_published", "status", "published_at"),
        Index("idx_posts_category_status", "category_id", "status"),
    )

    @property
    def tags(self) -> List[str]:
        return [link.name for link in self.tag_links]

    @tags.setter
    def tags(self, names: Iterable[str]) -> None:
        existing = {link.name: link for link in self.tag_links}
        self.tag_links = [existing.get(name) or PostTag(name=name) for name in normalize_tags(names)]
