"""Typed lookups of environment variables with fallbacks."""

from __future__ import annotations

import os
import re

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def get_string(key: str, fallback: str) -> str:
    """Return the variable's value, or ``fallback`` when it is not set."""
    return os.environ.get(key, fallback)


def get_int(key: str, fallback: int) -> int:
    """Return the variable as an integer, or ``fallback`` if unset or malformed."""
    value = os.environ.get(key)
    if value is None or not _INT_PATTERN.fullmatch(value):
        return fallback
    number = int(value)
    if not _INT64_MIN <= number <= _INT64_MAX:
        return fallback
    return number


def get_bool(key: str, fallback: bool) -> bool:
    """Return the variable as a boolean, or ``fallback`` if unset or malformed."""
    value = os.environ.get(key)
    if value in _TRUE_WORDS:
        return True
    if value in _FALSE_WORDS:
        return False
    return fallback