"""Zipcode extraction from loosely shaped user rows and synthetic code generation."""

from __future__ import annotations

import math
import re
import unicodedata
from typing import Any, Mapping, Optional, Sequence

from ...models.territory import is_synthetic

ZIPCODE_CHARACTERS = re.compile(r"^[A-Za-z0-9\s\-]+$")
MIN_ZIPCODE_LENGTH = 2
MAX_ZIPCODE_LENGTH = 15
# Substrings that mark a column as possibly holding a postal code.
ZIPCODE_FIELD_HINTS = ("zip", "postal", "pin", "code")


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def locate_zipcode(record: Mapping[str, Any], candidate_fields: Sequence[str]) -> Optional[tuple[str, str]]:
    """``(column, value)`` of the first non-empty zipcode-like value.

    Known field names are checked first, then any column whose name hints at a
    postal code.
    """
    for field in candidate_fields:
        value = _text(record.get(field))
        if value:
            return field, value
    for key, raw in record.items():
        if key in candidate_fields:
            continue
        lowered = key.lower()
        if any(hint in lowered for hint in ZIPCODE_FIELD_HINTS):
            value = _text(raw)
            if value:
                return key, value
    return None


def extract_zipcode(record: Mapping[str, Any], candidate_fields: Sequence[str]) -> Optional[str]:
    located = locate_zipcode(record, candidate_fields)
    return located[1] if located else None


def locate_real_zipcode(record: Mapping[str, Any], candidate_fields: Sequence[str]) -> Optional[tuple[str, str]]:
    """Like :func:`locate_zipcode`, but only for values that look like genuine postal data."""
    located = locate_zipcode(record, candidate_fields)
    if located is None:
        return None
    value = located[1]
    if not MIN_ZIPCODE_LENGTH <= len(value) <= MAX_ZIPCODE_LENGTH:
        return None
    if not ZIPCODE_CHARACTERS.match(value):
        return None
    if is_synthetic(value):
        return None
    return located


def real_zipcode(record: Mapping[str, Any], candidate_fields: Sequence[str]) -> Optional[str]:
    """The record's zipcode if it looks like genuine postal data, else ``None``."""
    located = locate_real_zipcode(record, candidate_fields)
    return located[1] if located else None


def city_code(city: str) -> str:
    """Three uppercase ASCII letters derived from a city name, padded with ``X``."""
    decomposed = unicodedata.normalize("NFKD", city).upper()
    letters = [char for char in decomposed if "A" <= char <= "Z"]
    return "".join(letters[:3]).ljust(3, "X")


def synthetic_zipcode(city: str, sequence: int) -> str:
    return f"{city_code(city)}{sequence:03d}"


def synthetic_code_count(user_count: int, users_per_code: int, max_codes: int) -> int:
    if user_count <= 0:
        return 0
    return min(math.ceil(user_count / users_per_code), max_codes)


def zipcode_sort_key(value: str) -> tuple[int, int, str]:
    if value.isdigit():
        return (0, int(value), value)
    return (1, 0, value)
