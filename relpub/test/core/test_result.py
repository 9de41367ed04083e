"""Tests for relpub.core.result module."""

from __future__ import annotations

import pytest

from relpub.core.result import Err, Ok, Result


def _half(n: int) -> Result[int, str]:
    if n % 2:
        return Err(f"{n} is odd")
    return Ok(n // 2)


def test_repr() -> None:
    assert repr(Ok("x")) == "Ok('x')"
    assert repr(Err(3)) == "Err(3)"


def test_equality() -> None:
    assert _half(4) == Ok(2)
    assert _half(3) == Err("3 is odd")
    assert Ok(1) != Err(1)


def test_frozen() -> None:
    result = Ok(1)
    with pytest.raises(AttributeError):
        result.value = 2  # type: ignore[misc]


def test_pattern_matching() -> None:
    match _half(3):
        case Ok(value):
            pytest.fail(f"unexpected value {value}")
        case Err(error):
            assert error == "3 is odd"
