"""Numeric helpers shared by the scoring engines."""

from __future__ import annotations

import math
from typing import Any, Iterable, Optional, TypeVar

T = TypeVar("T")


def clean_number(value: Any) -> Optional[float]:
    """Coerce *value* to ``float``; ``None`` for missing, non-numeric, NaN or inf."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def clamp(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    """Restrict *value* to [lo, hi]."""
    return max(lo, min(hi, value))


def round_half_up(value: float, digits: int = 0) -> float:
    """Round half away from zero (``round()`` uses banker's rounding)."""
    factor = 10 ** digits
    scaled = abs(value) * factor
    rounded = math.floor(scaled + 0.5) / factor
    return math.copysign(rounded, value) if rounded else 0.0


def round_score(score: float) -> int:
    """Round a 0-100 score to an int; NaN maps to 0."""
    if score is None or math.isnan(score):
        return 0
    return int(round_half_up(clamp(score, 0.0, 100.0)))


def dedupe(items: Iterable[T]) -> list[T]:
    """Exact-match dedupe that keeps first occurrences in order."""
    return list(dict.fromkeys(items))
