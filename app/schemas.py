"""Pydantic schemas for request/response validation in the URL shortener.

Schema Hierarchy
=================
::
    ShortenRequest (Input)
    ├─ original_url: str | None   (alias: originalUrl)
    └─ custom_code: str | None    (alias: customCode)

    ShortenResponse (Output)
    ├─ original_url: str
    ├─ short_code: str
    └─ short_url: str (computed by the route)

    URLStats (Output)
    ├─ id: int
    ├─ original_url: str
    ├─ short_code: str
    ├─ click_count: int
    ├─ created_at: datetime
    └─ short_url: str (computed by the route)

    HealthResponse (Output)
    ├─ status: HealthStatus
    └─ database: HealthStatus

Key Behaviours
===============
- Request bodies accept both snake_case and camelCase keys.
- URL well-formedness is NOT checked here: the shortening service owns that
  rule so every caller gets the same InvalidUrlError, not only HTTP clients.
- Models are configured for ORM attribute mapping.
"""

import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field

from app.enums import HealthStatus

__all__ = [
    "ShortenRequest",
    "ShortenResponse",
    "URLStats",
    "HealthResponse",
]


class ShortenRequest(BaseModel):
    original_url: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("original_url", "originalUrl"),
        description="Absolute URL to shorten, e.g. 'https://example.com/page'",
    )
    custom_code: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("custom_code", "customCode"),
        description="Optional caller-chosen short code; surrounding whitespace is trimmed.",
    )


class ShortenResponse(BaseModel):
    original_url: str
    short_code: str
    short_url: str

    model_config = {"from_attributes": True}


class URLStats(BaseModel):
    id: int
    original_url: str
    short_code: str
    click_count: int
    created_at: datetime.datetime
    short_url: str

    model_config = {"from_attributes": True}


class HealthResponse(BaseModel):
    status: HealthStatus
    database: HealthStatus
