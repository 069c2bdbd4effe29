"""
Small shared utilities.
"""
from __future__ import annotations

import math
from typing import Any


def to_float(value: Any) -> float | None:
    """Parse a query-string number, returning None when it isn't one."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None
