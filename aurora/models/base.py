"""Shared helpers for the frozen domain dataclasses."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Iterable, Optional

import numpy as np

from aurora.utils.numbers import clean_number


def _jsonify(obj: Any) -> Any:
    """Recursively convert tuples and numpy scalars to plain Python types."""
    if isinstance(obj, dict):
        return {str(k): _jsonify(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_jsonify(v) for v in obj]
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return clean_number(float(obj))
    return obj


class Serializable:
    """Mixin giving frozen dataclasses a JSON-friendly ``to_dict``."""

    def to_dict(self) -> dict[str, Any]:
        return _jsonify(asdict(self))


def clean_numeric_fields(obj: Any, names: Iterable[str]) -> None:
    """Replace NaN/inf/non-numeric values with ``None`` on a frozen dataclass."""
    for name in names:
        object.__setattr__(obj, name, clean_number(getattr(obj, name)))


def freeze_list(obj: Any, name: str) -> None:
    """Store a list-like field as a tuple so the instance stays immutable."""
    object.__setattr__(obj, name, tuple(getattr(obj, name) or ()))


def require_member(value: Optional[str], allowed: frozenset[str], label: str) -> None:
    if value not in allowed:
        raise ValueError(f"Invalid {label}: {value!r} (expected one of {sorted(allowed)})")
