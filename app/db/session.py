"""Async engine, session factory and the get_db dependency."""
from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from app.core.config import get_settings


class Base(DeclarativeBase):
    pass


def make_engine(url: str, echo: bool = False):
    kwargs = {"echo": echo, "future": True}
    # aiosqlite connections must not outlive the event loop that opened them
    if url.startswith("sqlite"):
        kwargs["poolclass"] = NullPool
    return create_async_engine(url, **kwargs)


settings = get_settings()
engine = make_engine(settings.database_url, echo=settings.debug)
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)


async def get_db() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionLocal() as db:
        yield db
