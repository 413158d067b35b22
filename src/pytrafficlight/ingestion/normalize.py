"""Normalization helpers.

Centralizes defensive parsing of loosely-typed payload values.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from typing import Any

_INT_PATTERN = re.compile(r"[+-]?\d+")
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


def coerce_int(value: Any) -> int | None:
    """Coerce a native int, float or numeric string to ``int``.

    Floats are truncated toward zero. Strings must be a bare signed decimal
    (no surrounding whitespace) within the 32-bit range producers use.
    Booleans, non-finite floats, other strings and any other type yield
    ``None``.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return int(value)
    if isinstance(value, str):
        if not _INT_PATTERN.fullmatch(value):
            return None
        parsed = int(value)
        if not _INT32_MIN <= parsed <= _INT32_MAX:
            return None
        return parsed
    return None


def get_int(payload: Mapping[str, Any], key: str, default: int) -> int:
    """Extract *key* from *payload* as an integer, falling back to *default*.

    Never raises: missing keys and malformed values both yield *default*.
    """
    if key not in payload:
        return default
    parsed = coerce_int(payload[key])
    return default if parsed is None else parsed


def non_negative_or_zero(value: int) -> int:
    return 0 if value < 0 else value
