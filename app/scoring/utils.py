"""Decimal utilities shared by the workshop engines.

Benefit, confidence and matrix calculations run in Decimal so that repeated
runs over the same inputs produce identical totals.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Sequence, Tuple

MONEY = Decimal("0.01")
SCORE = Decimal("0.0001")


def to_decimal(value: float, places: int = 4) -> Decimal:
    """Convert a number to Decimal with explicit precision and ROUND_HALF_UP rounding.

    Args:
        value: Numeric value to convert.
        places: Number of decimal places to quantize to.

    Returns:
        Decimal with the specified precision.
    """
    if isinstance(value, Decimal):
        return value.quantize(Decimal(10) ** -places, rounding=ROUND_HALF_UP)
    return Decimal(str(value)).quantize(
        Decimal(10) ** -places,
        rounding=ROUND_HALF_UP,
    )


def to_money(value: float) -> Decimal:
    """Quantize a USD amount to cents."""
    return to_decimal(value, places=2)


def clamp(
    value: Decimal,
    min_val: Decimal = Decimal(0),
    max_val: Decimal = Decimal(100),
) -> Decimal:
    """Clamp a Decimal value to [min_val, max_val]."""
    return max(min_val, min(max_val, value))


def weighted_mean(values: List[Decimal], weights: List[Decimal]) -> Decimal:
    """Weighted mean of Decimal values, normalized by the weight total.

    Raises:
        ValueError: If lengths differ.
    """
    if len(values) != len(weights):
        raise ValueError("Values and weights must have the same length")
    total_weight = sum(weights, Decimal(0))
    if not values or total_weight == Decimal(0):
        return Decimal(0)
    total = sum((v * w for v, w in zip(values, weights)), Decimal(0))
    return (total / total_weight).quantize(SCORE, rounding=ROUND_HALF_UP)


def safe_ratio(numerator: Decimal, denominator: Decimal) -> Decimal:
    """numerator / denominator, or 0 when the denominator is 0."""
    if denominator == Decimal(0):
        return Decimal(0)
    return (numerator / denominator).quantize(SCORE, rounding=ROUND_HALF_UP)


def interpolate(x: Decimal, points: Sequence[Tuple[Decimal, Decimal]]) -> Decimal:
    """Piecewise-linear interpolation through ``points`` (sorted by x).

    Inputs outside the covered range take the value of the nearest end point.
    """
    if x <= points[0][0]:
        return points[0][1]
    for (x0, y0), (x1, y1) in zip(points, points[1:]):
        if x <= x1:
            return y0 + (y1 - y0) * (x - x0) / (x1 - x0)
    return points[-1][1]


def log_scale(
    value: Decimal,
    floor: Decimal,
    ceiling: Decimal,
    low: Decimal = Decimal(1),
    high: Decimal = Decimal(10),
) -> Decimal:
    """Map ``value`` onto [low, high] on a log scale between floor and ceiling.

    Values at or below the floor map to ``low``; at or above the ceiling to ``high``.
    """
    if value <= floor:
        return low
    if value >= ceiling:
        return high
    position = (value.ln() - floor.ln()) / (ceiling.ln() - floor.ln())
    return clamp(low + (high - low) * position, low, high)


def mean(values: List[Decimal]) -> Optional[Decimal]:
    """Arithmetic mean, or None for an empty list."""
    if not values:
        return None
    return (sum(values, Decimal(0)) / Decimal(len(values))).quantize(
        SCORE, rounding=ROUND_HALF_UP
    )
