"""Redirect endpoint behavior tests."""

import pytest
from httpx import AsyncClient

from app.dependencies import ServiceManager


@pytest.mark.asyncio
async def test_redirect_valid_code(client: AsyncClient) -> None:
    create_resp = await client.post("/api/shorten", json={"original_url": "https://www.google.com"})
    short_code = create_resp.json()["short_code"]

    # httpx won't follow redirects by default
    response = await client.get(f"/{short_code}", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == "https://www.google.com"


@pytest.mark.asyncio
async def test_redirect_invalid_code(client: AsyncClient) -> None:
    response = await client.get("/nonexistent", follow_redirects=False)
    assert response.status_code == 404
    assert response.json()["detail"]["error"] == "not_found"


@pytest.mark.asyncio
async def test_redirect_unknown_code_uses_fallback(client: AsyncClient, manager: ServiceManager) -> None:
    manager.settings.NOT_FOUND_REDIRECT_URL = "/?error=notfound"
    response = await client.get("/nonexistent", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == "/?error=notfound"


@pytest.mark.asyncio
async def test_redirect_favicon_is_not_resolved(client: AsyncClient) -> None:
    response = await client.get("/favicon.ico", follow_redirects=False)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_redirect_increments_clicks(client: AsyncClient, manager: ServiceManager) -> None:
    create_resp = await client.post("/api/shorten", json={"original_url": "https://www.python.org"})
    short_code = create_resp.json()["short_code"]

    for _ in range(3):
        await client.get(f"/{short_code}", follow_redirects=False)
    await manager.resolver.drain()

    stats_resp = await client.get(f"/api/stats/{short_code}")
    assert stats_resp.status_code == 200
    assert stats_resp.json()["click_count"] == 3


@pytest.mark.asyncio
async def test_redirect_with_custom_code(client: AsyncClient) -> None:
    await client.post(
        "/api/shorten",
        json={"original_url": "https://www.github.com", "custom_code": "ghub"},
    )
    response = await client.get("/ghub", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == "https://www.github.com"
