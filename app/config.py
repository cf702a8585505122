"""Configuration management for the URL shortener application.

This module provides centralized configuration management using Pydantic BaseSettings
with environment variable support and caching for performance.

Flow Diagram — get_settings()
=============================
::
    ┌─────────────┐
    │  Call get_  │
    │  settings() │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Check cache  │
    │ (lru_cache)  │
    └──────┬──────┘
    HIT?  │
    ┌─────┴─────┐
    │ NO         │ YES
    ▼            ▼
┌─────────┐  ┌─────────┐
│ Create  │  │ Return  │
│ Settings│  │ cached  │
│ instance│  │ value   │
└─────────┘  └─────────┘

How to Use
===========
**Step 1 — Import**::
    from app.config import get_settings

**Step 2 — Get settings**::
    settings = get_settings()
    db_url = settings.DATABASE_URL

**Step 3 — Override for a single process (tests, scripts)**::
    settings = Settings(DATABASE_URL="sqlite+aiosqlite:///./scratch.db")

Key Behaviours
===============
- Settings are cached after first access for performance.
- Environment variables (and a local .env file) override defaults.
- An empty BASE_URL means short URLs are built from the incoming request host.
- An empty NOT_FOUND_REDIRECT_URL means unknown codes answer 404.

Classes:
    Settings:  Pydantic model for all configuration values.

"""

__all__ = ["Settings", "get_settings"]

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    APP_NAME: str = "url-shortener"
    APP_ENV: str = "development"
    BASE_URL: str = ""

    # Store (SQLite file by default, PostgreSQL via postgresql+asyncpg://...)
    DATABASE_URL: str = "sqlite+aiosqlite:///./urls.db"
    DATABASE_ECHO: bool = False
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 10

    # Short URL config
    SHORT_CODE_LENGTH: int = 6
    NOT_FOUND_REDIRECT_URL: str = ""

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
