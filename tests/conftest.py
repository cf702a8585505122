"""Shared pytest fixtures: a throwaway SQLite store per test, core components and an API client."""

import logging
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.config import Settings
from app.dependencies import ServiceManager, get_service_manager
from app.main import app
from app.registry import URLRegistry
from app.resolver import RedirectResolver
from app.service import ShorteningService


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'urls.db'}",
        BASE_URL="",
        NOT_FOUND_REDIRECT_URL="",
    )


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("urlshortener.tests")


@pytest_asyncio.fixture(scope="function")
async def manager(settings: Settings) -> AsyncGenerator[ServiceManager, None]:
    service_manager = ServiceManager()
    await service_manager.initialize(settings)
    yield service_manager
    await service_manager.cleanup()


@pytest.fixture
def registry(manager: ServiceManager) -> URLRegistry:
    return manager.registry


@pytest.fixture
def service(manager: ServiceManager) -> ShorteningService:
    return manager.shortening_service


@pytest.fixture
def resolver(manager: ServiceManager) -> RedirectResolver:
    return manager.resolver


@pytest_asyncio.fixture(scope="function")
async def client(manager: ServiceManager) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_service_manager() -> ServiceManager:
        return manager

    app.dependency_overrides[get_service_manager] = override_get_service_manager

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
