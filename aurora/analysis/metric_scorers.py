"""Map single raw metrics onto normalized [0, 1] sub-scores.

Two missing-value policies coexist:

* the scorers themselves treat an absent value as neutral (0.5), so an
  unknown input neither helps nor hurts when scored in isolation;
* composite quality scores use :func:`score_or_zero`, where an absent
  metric contributes nothing to the weighted sum.
"""

from __future__ import annotations

from typing import Callable, Optional

from aurora.utils.numbers import clean_number

MetricScorer = Callable[[Optional[float], float, float], float]

NEUTRAL_SCORE = 0.5
_MIN_SPAN = 1e-4


def score_positive_metric(value: Optional[float], strong: float, weak: float) -> float:
    """Higher is better: 1 at or above *strong*, 0 at or below *weak*."""
    value = clean_number(value)
    if value is None:
        return NEUTRAL_SCORE
    if value >= strong:
        return 1.0
    if value <= weak:
        return 0.0
    return (value - weak) / max(strong - weak, _MIN_SPAN)


def score_negative_metric(value: Optional[float], strong: float, weak: float) -> float:
    """Lower is better (e.g. debt/equity): 1 at or below *strong*, 0 at or above *weak*."""
    value = clean_number(value)
    if value is None:
        return NEUTRAL_SCORE
    if value <= strong:
        return 1.0
    if value >= weak:
        return 0.0
    return 1.0 - (value - strong) / max(weak - strong, _MIN_SPAN)


def score_or_zero(
    value: Optional[float],
    scorer: MetricScorer,
    strong: float,
    weak: float,
) -> float:
    """Score *value* with *scorer*, or 0 when the metric is absent."""
    if clean_number(value) is None:
        return 0.0
    return scorer(value, strong, weak)
