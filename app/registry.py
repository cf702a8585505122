"""URL Registry - the authoritative store of short code mappings.

The registry is the only component that talks to the database. It owns
uniqueness enforcement (through the unique index on ``short_code``) and the
click counter increment. Each operation borrows its own short-lived session
from the ``Database`` store client, so operations are independent of one
another and of any HTTP request session.

Insert Flow
===========
::
    ┌─────────────┐
    │ insert(url, │
    │ code)       │
    └──────┬──────┘
           ▼
    ┌─────────────┐   invalid   ┌──────────────────┐
    │ Validate    ├────────────►│ InvalidInputError│
    │ URL + code  │             └──────────────────┘
    └──────┬──────┘
           ▼
    ┌─────────────┐  IntegrityError  ┌─────────────┐  yes  ┌───────────────────┐
    │ INSERT +    ├─────────────────►│ exists(code)├──────►│ DuplicateCodeError│
    │ COMMIT      │                  └──────┬──────┘       └───────────────────┘
    └──────┬──────┘                         │ no
           ▼                                ▼
    ┌─────────────┐              ┌──────────────────────┐
    │ Return URL  │              │ StoreUnavailableError│
    └─────────────┘              └──────────────────────┘

Key Behaviours
===============
- ``exists()`` is advisory; only the INSERT's unique constraint is final.
- An insert is a single commit: either the full row is visible or nothing is.
- ``increment_clicks()`` is one atomic UPDATE and silently ignores unknown codes.
- ``list_all()`` returns newest first (created_at, then id, descending).
- Any unexpected SQLAlchemy error surfaces as ``StoreUnavailableError``.
"""

import logging
from typing import Optional, Union

import validators
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.database import Database
from app.errors import DuplicateCodeError, InvalidInputError, InvalidUrlError, StoreUnavailableError
from app.models import SHORT_CODE_MAX_LENGTH, URL

__all__ = ["URLRegistry", "validate_original_url"]


def validate_original_url(original_url: Optional[str]) -> str:
    """Return ``original_url`` if it is a well-formed absolute URL.

    Raises:
        InvalidUrlError: If the value is missing, empty or fails URL parsing.
    """
    if not isinstance(original_url, str) or not original_url.strip():
        raise InvalidUrlError("Original URL is required")
    if not validators.url(original_url, simple_host=True):
        raise InvalidUrlError(f"Invalid URL: {original_url!r}")
    return original_url


class URLRegistry:
    """Mapping store: short code -> original URL -> click count."""

    def __init__(self, database: Database, logger: Union[logging.Logger, logging.LoggerAdapter]):
        self._database = database
        self._logger = logger

    async def exists(self, short_code: str) -> bool:
        try:
            async with self._database.session() as session:
                result = await session.execute(select(URL.id).where(URL.short_code == short_code))
                return result.first() is not None
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Existence check failed for '{short_code}': {exc}") from exc

    async def insert(self, original_url: str, short_code: str) -> URL:
        """Create a mapping, relying on the unique index to reject collisions.

        Raises:
            InvalidUrlError: ``original_url`` is empty or malformed.
            InvalidInputError: ``short_code`` is empty or longer than the column allows.
            DuplicateCodeError: ``short_code`` already exists at commit time.
            StoreUnavailableError: Any other store failure.
        """
        validate_original_url(original_url)
        if not short_code:
            raise InvalidInputError("Short code must not be empty")
        if len(short_code) > SHORT_CODE_MAX_LENGTH:
            raise InvalidInputError(f"Short code must be at most {SHORT_CODE_MAX_LENGTH} characters")

        try:
            async with self._database.session() as session:
                url = URL(original_url=original_url, short_code=short_code)
                session.add(url)
                try:
                    await session.commit()
                except IntegrityError as exc:
                    await session.rollback()
                    integrity_error = exc
                else:
                    await session.refresh(url)
                    self._logger.debug(f"Inserted mapping {short_code} (id={url.id})")
                    return url
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Insert failed for '{short_code}': {exc}") from exc

        # The constraint violation is authoritative; confirm it is the short_code one.
        if await self.exists(short_code):
            self._logger.warning(f"Unique constraint rejected short code: {short_code}")
            raise DuplicateCodeError(f"Short code '{short_code}' already exists") from integrity_error
        raise StoreUnavailableError(f"Insert failed for '{short_code}': {integrity_error}") from integrity_error

    async def find_by_code(self, short_code: str) -> Optional[URL]:
        try:
            async with self._database.session() as session:
                result = await session.execute(select(URL).where(URL.short_code == short_code))
                return result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Lookup failed for '{short_code}': {exc}") from exc

    async def increment_clicks(self, short_code: str) -> None:
        try:
            async with self._database.session() as session:
                result = await session.execute(
                    update(URL).where(URL.short_code == short_code).values(click_count=URL.click_count + 1)
                )
                await session.commit()
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Click increment failed for '{short_code}': {exc}") from exc

        if result.rowcount == 0:
            self._logger.debug(f"Click increment matched no mapping: {short_code}")

    async def list_all(self) -> list[URL]:
        try:
            async with self._database.session() as session:
                result = await session.execute(select(URL).order_by(URL.created_at.desc(), URL.id.desc()))
                return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Listing mappings failed: {exc}") from exc
