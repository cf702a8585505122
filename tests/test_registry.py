"""URL registry tests against a real SQLite store."""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from app.errors import DuplicateCodeError, InvalidInputError, InvalidUrlError, StoreUnavailableError
from app.registry import URLRegistry, validate_original_url


@pytest.mark.parametrize(
    "original_url",
    ["https://example.com/page", "http://www.python.org", "https://example.com/search?q=short+links"],
)
def test_validate_original_url_accepts_absolute_urls(original_url: str) -> None:
    assert validate_original_url(original_url) == original_url


@pytest.mark.parametrize("original_url", ["not-a-url", "", "   ", None, "example.com", "/relative/path"])
def test_validate_original_url_rejects_malformed(original_url) -> None:
    with pytest.raises(InvalidUrlError):
        validate_original_url(original_url)


@pytest.mark.asyncio
async def test_insert_creates_mapping_with_defaults(registry: URLRegistry) -> None:
    url = await registry.insert("https://example.com/page", "abc123")

    assert url.id is not None
    assert url.short_code == "abc123"
    assert url.original_url == "https://example.com/page"
    assert url.click_count == 0
    assert url.created_at is not None
    assert await registry.exists("abc123")


@pytest.mark.asyncio
async def test_exists_is_case_sensitive(registry: URLRegistry) -> None:
    await registry.insert("https://example.com", "AbC123")

    assert await registry.exists("AbC123")
    assert not await registry.exists("abc123")


@pytest.mark.asyncio
async def test_insert_duplicate_code_fails(registry: URLRegistry) -> None:
    await registry.insert("https://example.com/first", "dup001")

    with pytest.raises(DuplicateCodeError):
        await registry.insert("https://example.com/second", "dup001")

    url = await registry.find_by_code("dup001")
    assert url.original_url == "https://example.com/first"


@pytest.mark.asyncio
async def test_insert_rejects_invalid_url(registry: URLRegistry) -> None:
    with pytest.raises(InvalidInputError):
        await registry.insert("not-a-url", "bad001")

    assert not await registry.exists("bad001")


@pytest.mark.asyncio
async def test_insert_rejects_empty_code(registry: URLRegistry) -> None:
    with pytest.raises(InvalidInputError):
        await registry.insert("https://example.com", "")


@pytest.mark.asyncio
async def test_ids_increase_monotonically(registry: URLRegistry) -> None:
    first = await registry.insert("https://example.com/1", "one111")
    second = await registry.insert("https://example.com/2", "two222")

    assert second.id > first.id


@pytest.mark.asyncio
async def test_find_by_code_missing_returns_none(registry: URLRegistry) -> None:
    assert await registry.find_by_code("doesnotexist") is None


@pytest.mark.asyncio
async def test_increment_clicks(registry: URLRegistry) -> None:
    await registry.insert("https://example.com", "clk001")

    await registry.increment_clicks("clk001")
    await registry.increment_clicks("clk001")

    url = await registry.find_by_code("clk001")
    assert url.click_count == 2


@pytest.mark.asyncio
async def test_increment_clicks_unknown_code_is_noop(registry: URLRegistry) -> None:
    await registry.insert("https://example.com", "known1")

    await registry.increment_clicks("unknown")

    assert (await registry.find_by_code("known1")).click_count == 0
    assert await registry.find_by_code("unknown") is None


@pytest.mark.asyncio
async def test_list_all_newest_first(registry: URLRegistry) -> None:
    await registry.insert("https://example.com/older", "older1")
    await registry.insert("https://example.com/newer", "newer1")

    urls = await registry.list_all()

    assert [url.short_code for url in urls] == ["newer1", "older1"]


@pytest.mark.asyncio
async def test_list_all_empty(registry: URLRegistry) -> None:
    assert await registry.list_all() == []


@pytest.mark.asyncio
async def test_store_failure_surfaces_as_store_unavailable(registry: URLRegistry) -> None:
    failure = OperationalError("SELECT 1", {}, Exception("database is locked"))

    with patch.object(registry._database, "session", side_effect=failure):
        with pytest.raises(StoreUnavailableError):
            await registry.exists("abc123")
        with pytest.raises(StoreUnavailableError):
            await registry.find_by_code("abc123")
        with pytest.raises(StoreUnavailableError):
            await registry.insert("https://example.com", "abc123")
        with pytest.raises(StoreUnavailableError):
            await registry.increment_clicks("abc123")
        with pytest.raises(StoreUnavailableError):
            await registry.list_all()


@pytest.mark.asyncio
async def test_insert_rejects_code_longer_than_column(registry: URLRegistry) -> None:
    with pytest.raises(InvalidInputError):
        await registry.insert("https://example.com", "x" * 65)

    assert await registry.list_all() == []
