"""Shared fixtures: a throwaway SQLite database per test."""

import os
from collections.abc import AsyncGenerator
from pathlib import Path

# Must be set before epg_inventory.config is imported
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.pop("DISABLE_AUTO_SKU_GENERATION", None)
os.environ.pop("SKU_FAIL_ON_EXHAUSTION", None)

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

import epg_inventory.models  # noqa: E402, F401
from epg_inventory.db import get_session  # noqa: E402
from epg_inventory.main import app  # noqa: E402
from epg_inventory.services.sku.allocator import SkuAllocator  # noqa: E402
from epg_inventory.services.sku.settings_service import AutoGenerationSettings  # noqa: E402


def sqlite_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


def make_engine(path: Path) -> AsyncEngine:
    # One connection per session (NullPool) so concurrent sessions really contend
    return create_async_engine(
        sqlite_url(path),
        poolclass=NullPool,
        connect_args={"timeout": 30},
    )


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine]:
    engine = make_engine(tmp_path / "epg.sqlite3")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture(scope="function")
def session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def session(session_maker: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession]:
    async with session_maker() as sess:
        yield sess


@pytest.fixture
def allocator(session: AsyncSession) -> SkuAllocator:
    """Allocator with the built-in prefix tables and auto-generation not forced off."""
    return SkuAllocator(session, auto_generation=AutoGenerationSettings(session, env_disabled=False))


@pytest_asyncio.fixture(scope="function")
async def client(session_maker: async_sessionmaker[AsyncSession]) -> AsyncGenerator[httpx.AsyncClient]:
    async def override_get_session() -> AsyncGenerator[AsyncSession]:
        async with session_maker() as sess:
            yield sess

    app.dependency_overrides[get_session] = override_get_session
    transport = httpx.ASGITransport(app=app)
    try:
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
