"""Unit tests for short-code generation."""

import pytest

from app.codes import ALPHABET, generate_short_code


def test_generate_short_code_default_length() -> None:
    code = generate_short_code()
    assert len(code) == 6


def test_generate_short_code_custom_length() -> None:
    code = generate_short_code(length=10)
    assert len(code) == 10


def test_generate_short_code_only_url_safe_characters() -> None:
    for _ in range(100):
        code = generate_short_code()
        assert all(c in ALPHABET for c in code)


def test_alphabet_is_url_safe() -> None:
    assert len(ALPHABET) == 64
    assert len(set(ALPHABET)) == 64
    assert all(c.isalnum() or c in "-_" for c in ALPHABET)


def test_generate_short_code_uniqueness() -> None:
    codes = {generate_short_code() for _ in range(1000)}
    # With 64^6 possibilities, 1000 codes should all be unique
    assert len(codes) == 1000


def test_generate_short_code_rejects_non_positive_length() -> None:
    with pytest.raises(AssertionError):
        generate_short_code(length=0)
