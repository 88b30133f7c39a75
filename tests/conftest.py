"""
Pytest configuration and fixtures.

Each test gets a throwaway SQLite event store (aiosqlite) with the full
schema, plus an EventStore helper for inserting timestamped rows.
"""
import os

# Must be set before admin_api.config builds its Settings instance
os.environ.setdefault("OTEL_ENABLED", "false")
os.environ.setdefault("JWT_SECRET", "test-secret-with-at-least-32-bytes!!")

from datetime import datetime
from typing import Optional

import jwt
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from admin_api import models  # noqa: F401  (registers tables)
from admin_api.config import settings
from admin_api.database import Base, get_session_factory
from admin_api.models import Comment, Like, Post, User


class EventStore:
    """Inserts users, posts, likes and comments with explicit timestamps."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self.session_factory = session_factory
        self._user_seq = 0

    async def _save(self, row):
        async with self.session_factory() as session:
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return row

    async def user(self, created_at: datetime, username: Optional[str] = None) -> User:
        self._user_seq += 1
        name = username or f"user{self._user_seq}"
        return await self._save(User(username=name, email=f"{name}@example.com", created_at=created_at))

    async def post(self, author: User, created_at: datetime, content: Optional[str] = "hello") -> Post:
        return await self._save(Post(user_id=author.id, content=content, created_at=created_at))

    async def like(self, post: Post, created_at: datetime, user: Optional[User] = None) -> Like:
        # (user_id, post_id) is the primary key; a fresh liker keeps it unique
        user = user or await self.user(created_at)
        return await self._save(Like(user_id=user.id, post_id=post.id, created_at=created_at))

    async def likes(self, post: Post, count: int, created_at: datetime) -> None:
        for _ in range(count):
            await self.like(post, created_at)

    async def comment(self, post: Post, created_at: datetime, user: Optional[User] = None) -> Comment:
        user = user or await self.user(created_at)
        return await self._save(
            Comment(post_id=post.id, user_id=user.id, content="nice", created_at=created_at)
        )


@pytest.fixture
async def session_factory(tmp_path):
    db_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'events.db'}")
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=db_engine, expire_on_commit=False)
    await db_engine.dispose()


@pytest.fixture
async def unreachable_session_factory(tmp_path):
    """Points at a database file that cannot be opened."""
    db_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'dir' / 'events.db'}"
    )
    yield async_sessionmaker(bind=db_engine, expire_on_commit=False)
    await db_engine.dispose()


@pytest.fixture
def store(session_factory) -> EventStore:
    return EventStore(session_factory)


def make_token(user_id: int = 1, username: str = "admin", secret: Optional[str] = None) -> str:
    return jwt.encode(
        {"id": user_id, "username": username},
        secret or settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )


def _client_for(factory: async_sessionmaker) -> AsyncClient:
    from admin_api.main import create_app

    app = create_app()
    app.dependency_overrides[get_session_factory] = lambda: factory
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.fixture
async def client(session_factory):
    async with _client_for(session_factory) as http:
        yield http


@pytest.fixture
async def offline_client(unreachable_session_factory):
    async with _client_for(unreachable_session_factory) as http:
        yield http
