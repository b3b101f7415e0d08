import os
from datetime import datetime, timezone
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kotha.config import settings
from kotha.database import get_db
from kotha.models.category import Category
from kotha.models.post import Post, PostStatus
from kotha.services.post import PostService

router = APIRouter()
templates = Jinja2Templates(
    directory=os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates")
)

STATIC_PAGES = ["", "/blog", "/about", "/contact"]

DISALLOWED_PATHS = ["/admin/", "/api/auth/", "/private/"]


def _lastmod(value: datetime) -> str:
    return value.date().isoformat()


@router.get("/sitemap.xml")
async def sitemap(
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    base_url = settings.SITE_URL.rstrip("/")
    today = _lastmod(datetime.now(timezone.utc))

    entries = [
        {
            "loc": f"{base_url}{page}",
            "lastmod": today,
            "changefreq": "daily" if page == "" else "weekly",
            "priority": "1.0" if page == "" else "0.8",
        }
        for page in STATIC_PAGES
    ]

    posts = await db.execute(
        select(Post.slug, Post.created_at, Post.updated_at)
        .where(Post.status == PostStatus.PUBLISHED.value)
        .order_by(Post.created_at.desc())
    )
    for slug, created_at, updated_at in posts.all():
        entries.append({
            "loc": f"{base_url}/blog/{quote(slug)}",
            "lastmod": _lastmod(updated_at or created_at),
            "changefreq": "weekly",
            "priority": "0.7",
        })

    categories = await db.execute(select(Category.slug).order_by(Category.name))
    for slug in categories.scalars().all():
        entries.append({
            "loc": f"{base_url}/blog/category/{quote(slug)}",
            "lastmod": today,
            "changefreq": "weekly",
            "priority": "0.6",
        })

    for tag, _ in await PostService(db).get_tag_counts(limit=100):
        entries.append({
            "loc": f"{base_url}/blog/tag/{quote(tag)}",
            "lastmod": today,
            "changefreq": "weekly",
            "priority": "0.5",
        })

    return templates.TemplateResponse(
        request,
        "sitemap.xml",
        {"entries": entries},
        media_type="application/xml",
    )


@router.get("/robots.txt", response_class=PlainTextResponse)
async def robots():
    base_url = settings.SITE_URL.rstrip("/")
    lines = ["User-agent: *", "Allow: /"]
    lines += [f"Disallow: {path}" for path in DISALLOWED_PATHS]
    lines += ["", f"Sitemap: {base_url}/sitemap.xml", f"Host: {base_url}"]
    return "\n".join(lines) + "\n"
