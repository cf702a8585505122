"""Random short-code generation.

Codes are drawn with nanoid from a URL-safe alphabet, so they can be dropped
into a path segment without escaping. With 64 symbols and 6 characters there
are 64**6 (~6.9e10) possible codes; collisions are rare but possible, and the
shortening service handles them.
"""

from nanoid import generate

from app.config import get_settings

__all__ = ["ALPHABET", "generate_short_code"]

settings = get_settings()

ALPHABET = "_-0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"


def generate_short_code(length: int = settings.SHORT_CODE_LENGTH) -> str:
    assert isinstance(length, int) and length > 0, f"length must be a positive integer, got {length!r}"
    return generate(ALPHABET, length)
