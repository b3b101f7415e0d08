import os
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

# Settings() is instantiated on import, so the environment must be ready first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from kotha.core.security import create_access_token
from kotha.database import Base, get_db
from kotha.main import app
from kotha.models.category import Category
from kotha.models.post import Post
from kotha.models.user import User
from kotha.schemas.category import CategoryCreate
from kotha.schemas.user import UserCreate
from kotha.services.auth import AuthService
from kotha.services.category import CategoryService

LONG_CONTENT = (
    "<p>This is a long enough body for a post. It talks about many things and "
    "keeps going so that the minimum content length is always satisfied.</p>"
)


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    # One shared in-memory database per test
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()

@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()

async def _create_user(db_session: AsyncSession, email: str, role: str) -> User:
    return await AuthService(db_session).register_user(
        UserCreate(name=role.title(), email=email, password="password"), role=role
    )

@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "admin@kotha.io", "admin")

@pytest.fixture
async def editor_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "editor@kotha.io", "editor")

@pytest.fixture
async def reader_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "reader@kotha.io", "user")

@pytest.fixture
async def admin_token_headers(client: AsyncClient, admin_user: User) -> dict:
    response = await client.post(
        "/api/v1/auth/login", data={"username": "admin@kotha.io", "password": "password"}
    )
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}

@pytest.fixture
def editor_token_headers(editor_user: User) -> dict:
    token = create_access_token(subject=editor_user.id)
    return {"Authorization": f"Bearer {token}"}

@pytest.fixture
def reader_token_headers(reader_user: User) -> dict:
    token = create_access_token(subject=reader_user.id)
    return {"Authorization": f"Bearer {token}"}

@pytest.fixture
async def category(db_session: AsyncSession) -> Category:
    return await CategoryService(db_session).create_category(
        CategoryCreate(name="Technology", language="en")
    )

@pytest.fixture
def post_payload(category: Category):
    def make(**overrides) -> dict:
        payload = {
            "title": "A Post",
            "content": LONG_CONTENT,
            "excerpt": "A short excerpt",
            "featured_image": "https://res.cloudinary.com/demo/image/upload/sample.jpg",
            "category_id": str(category.id),
            "tags": [],
            "status": "published",
        }
        payload.update(overrides)
        return payload
    return make

@pytest.fixture
def seed_posts(db_session: AsyncSession, editor_user: User, category: Category):
    """Insert posts directly, bypassing the write path."""
    async def seed(count: int, **fields) -> list:
        base_time = datetime(2025, 1, 1, tzinfo=timezone.utc)
        posts = []
        for i in range(count):
            values = {
                "title": f"Seeded post {i}",
                "slug": f"seeded-post-{i}",
                "content": LONG_CONTENT,
                "excerpt": f"Seeded excerpt {i}",
                "featured_image": "https://example.com/image.jpg",
                "author_id": editor_user.id,
                "category_id": category.id,
                "status": "published",
                "published_at": base_time + timedelta(days=i),
            }
            values.update({k: (v(i) if callable(v) else v) for k, v in fields.items()})
            posts.append(Post(**values))
        db_session.add_all(posts)
        await db_session.commit()
        # Later queries should load fresh rows, as a new request would
        db_session.expunge_all()
        return posts
    return seed
