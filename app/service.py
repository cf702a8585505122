"""Shortening Service - create short code mappings.

Orchestrates the code generator and the URL registry to turn an original URL
(and optionally a caller-chosen custom code) into a stored mapping.

Flow Diagram — shorten()
========================
::
    ┌─────────────┐
    │ shorten(url,│
    │ custom_code)│
    └──────┬──────┘
           ▼
    ┌─────────────┐   invalid   ┌────────────────┐
    │ Validate URL├────────────►│ InvalidUrlError│
    └──────┬──────┘             └────────────────┘
           ▼
    ┌─────────────┐
    │ custom code?│
    └──────┬──────┘
    ┌──────┴────────────┐
    │ YES               │ NO
    ▼                   ▼
┌──────────┐      ┌──────────┐
│ trim;    │      │ generate │
│ exists?  │      │ exists?  │
└────┬─────┘      └────┬─────┘
     │ taken            │ taken
     ▼                  ▼
┌──────────────┐  ┌──────────────┐
│CodeTakenError│  │ regenerate   │
└──────────────┘  │ once, no     │
                  │ re-check     │
                  └──────┬───────┘
           ┌─────────────┘
           ▼
    ┌─────────────┐  collision  ┌───────────────────┐
    │ insert()    ├────────────►│ DuplicateCodeError│
    └──────┬──────┘             └───────────────────┘
           ▼
    ┌─────────────┐
    │ Return URL  │
    └─────────────┘

Key Behaviours
===============
- Validation happens before any store access; invalid input has no side effects.
- Custom codes are never replaced: a taken custom code is a terminal error.
- Auto-generated codes are regenerated at most once. A second collision is
  caught by the store's unique constraint and reported, never looped on.
- Custom codes that shadow the service's own routes count as taken.
- Custom codes longer than the short_code column or containing '/' are
  rejected as invalid input before the store is touched.
"""

import logging
import time
from typing import Callable, Iterable, Optional, Union

from prometheus_client import Counter, Histogram

from app.codes import generate_short_code
from app.enums import RequestStatus
from app.errors import CodeTakenError, DuplicateCodeError, InvalidInputError, ShortenerError
from app.models import SHORT_CODE_MAX_LENGTH, URL
from app.registry import URLRegistry, validate_original_url

__all__ = ["RESERVED_CODES", "ShorteningService"]

RESERVED_CODES = frozenset({"api", "health", "metrics", "docs", "redoc", "openapi.json", "favicon.ico"})

SHORTEN_REQUESTS_TOTAL = Counter(
    "url_shortener_shorten_requests_total",
    "Total shorten requests by outcome",
    ["status"],
)
SHORTEN_DURATION = Histogram(
    "url_shortener_shorten_duration_seconds",
    "Time taken to create short URLs",
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)
SHORT_CODE_COLLISIONS_TOTAL = Counter(
    "url_shortener_short_code_collisions_total",
    "Auto-generated short codes that already existed",
)

_STATUS_BY_ERROR = {
    "invalid_input": RequestStatus.VALIDATION_ERROR,
    "invalid_url": RequestStatus.VALIDATION_ERROR,
    "code_taken": RequestStatus.CONFLICT,
}


class ShorteningService:
    """Create mappings with custom-code and single-retry collision policy.

    Example:
        >>> service = ShorteningService(registry, logger)
        >>> url = await service.shorten("https://example.com/page")
        >>> url.short_code
        'V1StGX'
    """

    def __init__(
        self,
        registry: URLRegistry,
        logger: Union[logging.Logger, logging.LoggerAdapter],
        generator: Callable[[], str] = generate_short_code,
        reserved_codes: Iterable[str] = RESERVED_CODES,
    ):
        self._registry = registry
        self._logger = logger
        self._generate = generator
        self._reserved_codes = frozenset(reserved_codes)

    async def shorten(self, original_url: str, custom_code: Optional[str] = None) -> URL:
        """Create a mapping for ``original_url``.

        Args:
            original_url: Absolute URL to shorten.
            custom_code: Optional caller-chosen code, used verbatim after trimming.

        Returns:
            URL: The stored mapping.

        Raises:
            InvalidUrlError: ``original_url`` is missing or malformed.
            InvalidInputError: ``custom_code`` is blank after trimming.
            CodeTakenError: ``custom_code`` is already in use or reserved.
            DuplicateCodeError: The auto-generated code collided twice.
            StoreUnavailableError: The store failed.
        """
        start_time = time.perf_counter()
        try:
            url = await self._shorten(original_url, custom_code)
        except ShortenerError as exc:
            SHORTEN_DURATION.observe(time.perf_counter() - start_time)
            SHORTEN_REQUESTS_TOTAL.labels(status=_STATUS_BY_ERROR.get(exc.kind, RequestStatus.ERROR)).inc()
            if exc.status_code >= 500:
                self._logger.error(f"URL shortening failed: {exc}")
            else:
                self._logger.warning(f"URL shortening rejected: {exc}")
            raise

        duration = time.perf_counter() - start_time
        SHORTEN_DURATION.observe(duration)
        SHORTEN_REQUESTS_TOTAL.labels(status=RequestStatus.SUCCESS).inc()
        self._logger.info(f"URL shortened: {url.short_code} -> {url.original_url} in {duration:.3f}s")
        return url

    async def stats(self) -> list[URL]:
        return await self._registry.list_all()

    async def get_stats(self, short_code: str) -> Optional[URL]:
        return await self._registry.find_by_code(short_code)

    async def _shorten(self, original_url: str, custom_code: Optional[str]) -> URL:
        validate_original_url(original_url)

        if custom_code:
            return await self._shorten_with_custom_code(original_url, custom_code.strip())

        short_code = self._generate()
        if await self._registry.exists(short_code):
            SHORT_CODE_COLLISIONS_TOTAL.inc()
            self._logger.warning(f"Generated short code collided, regenerating once: {short_code}")
            short_code = self._generate()

        return await self._registry.insert(original_url, short_code)

    async def _shorten_with_custom_code(self, original_url: str, short_code: str) -> URL:
        if not short_code:
            raise InvalidInputError("Custom code must not be blank")
        if len(short_code) > SHORT_CODE_MAX_LENGTH:
            raise InvalidInputError(f"Custom code must be at most {SHORT_CODE_MAX_LENGTH} characters")
        # Codes are served from a single path segment.
        if "/" in short_code:
            raise InvalidInputError(f"Custom code '{short_code}' must not contain '/'")
        if short_code in self._reserved_codes:
            raise CodeTakenError(f"Custom code '{short_code}' is reserved")
        if await self._registry.exists(short_code):
            raise CodeTakenError(f"Custom code '{short_code}' is already taken")

        try:
            return await self._registry.insert(original_url, short_code)
        except DuplicateCodeError as exc:
            # Lost a race with a concurrent writer between exists() and insert().
            raise CodeTakenError(f"Custom code '{short_code}' is already taken") from exc
