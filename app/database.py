"""Store client for the URL shortener.

This module wraps the SQLAlchemy async engine and session factory in an explicit
``Database`` value. The process that owns it (the service manager) decides when
it is opened and disposed; the registry only borrows sessions from it.

Flow Diagram — Store Operations
===============================
::
    ┌─────────────┐
    │  Registry   │
    │  operation  │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ database.   │
    │ session()   │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ execute /   │
    │ commit      │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Auto-close   │
    │ (async with) │
    └─────────────┘

How to Use
===========
**Step 1 — Open on startup**::
    database = Database.from_settings(get_settings())
    await database.create_all()

**Step 2 — Borrow a session per operation**::
    async with database.session() as session:
        result = await session.execute(select(URL))

**Step 3 — Cleanup on shutdown**::
    await database.dispose()

Key Behaviours
===============
- Every session is short-lived and closed when the ``async with`` block exits.
- SQLite URLs skip pool sizing; other backends get a pre-pinged pool.
- Tables are created by ``create_all()``, which is idempotent.

Classes:
    Base:  SQLAlchemy declarative base for all models.
    Database:  Engine + session factory with an explicit lifecycle.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import Settings

__all__ = ["Base", "Database"]


class Base(DeclarativeBase):
    pass


class Database:
    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._sessionmaker = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        engine_kwargs: dict = {"echo": settings.DATABASE_ECHO}
        if not settings.DATABASE_URL.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=settings.DATABASE_POOL_SIZE,
                max_overflow=settings.DATABASE_MAX_OVERFLOW,
                pool_pre_ping=True,
            )
        return cls(create_async_engine(settings.DATABASE_URL, **engine_kwargs))

    def session(self) -> AsyncSession:
        return self._sessionmaker()

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        await self.engine.dispose()
