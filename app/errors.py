"""Error taxonomy for the shortening and redirect core.

Every failure the core can report is a ``ShortenerError`` subclass carrying a
stable ``kind`` (used in API error bodies and metrics) and the HTTP status the
route layer answers with. Store-level failures are chained to the original
SQLAlchemy exception with ``raise ... from exc``.
"""

__all__ = [
    "ShortenerError",
    "InvalidInputError",
    "InvalidUrlError",
    "CodeTakenError",
    "DuplicateCodeError",
    "StoreUnavailableError",
    "NotFoundError",
]


class ShortenerError(Exception):
    """Base class for all errors raised by the URL shortener core."""

    kind = "error"
    status_code = 500


class InvalidInputError(ShortenerError, ValueError):
    """Input rejected before any store access."""

    kind = "invalid_input"
    status_code = 400


class InvalidUrlError(InvalidInputError):
    """The original URL is missing or not a well-formed absolute URL."""

    kind = "invalid_url"


class CodeTakenError(ShortenerError, ValueError):
    """A requested custom code already maps to another URL."""

    kind = "code_taken"
    status_code = 409


class DuplicateCodeError(ShortenerError):
    """The store's unique constraint rejected a short code on insert."""

    kind = "duplicate_code"
    status_code = 500


class StoreUnavailableError(ShortenerError):
    """The backing store failed for a reason other than a code collision."""

    kind = "store_unavailable"
    status_code = 503


class NotFoundError(ShortenerError, LookupError):
    """No mapping exists for the requested short code."""

    kind = "not_found"
    status_code = 404
