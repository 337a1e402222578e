"""
Database engine and session management.
"""

from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

import newsletter.models  # noqa: F401  (populates SQLModel.metadata)


def create_engine(url: str | URL, echo: bool = False) -> AsyncEngine:
    """Create the pooled async engine shared by every request."""
    return create_async_engine(url, echo=echo, future=True)


def create_session_factory(engine: AsyncEngine) -> sessionmaker:
    return sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """Create all tables for development and tests. Production uses Alembic migrations."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions.

    Workflows commit explicitly; anything left uncommitted when the request
    fails is rolled back here.
    """
    async with request.app.state.context.session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
