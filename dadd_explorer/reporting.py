"""
Report View-Models

Shapes gateway rows into what the report templates render.
"""

import math
from typing import Any, List, Mapping, Optional, Sequence

from pydantic import BaseModel


class CountryValue(BaseModel):
    """A country and its value for one decade."""
    country_name: str
    dadd_value: Optional[float]


class DecadeSummary(BaseModel):
    """Record count and average value for one decade."""
    total_countries: int
    avg_dadd: Optional[float]


class TrendPoint(BaseModel):
    """One decade of a country trend with its relative bar width (0-100)."""
    decade_id: int
    dadd_value: Optional[float]
    bar_width: int


def parse_selection(value: Optional[str]) -> Optional[int]:
    """
    Read a dropdown selection from the query string.

    Blank or non-numeric selections count as "not selected".
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _as_number(value: Any) -> float:
    """Numeric value for bar scaling; missing or non-numeric counts as 0."""
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_relative_bars(values: Sequence[Any]) -> List[int]:
    """
    Scale each value against the series maximum.

    Example:
        >>> compute_relative_bars([10, 5, 20])
        [50, 25, 100]
    """
    numbers = [_as_number(v) for v in values]
    max_value = max(numbers, default=0.0)
    if max_value <= 0:
        return [0 for _ in numbers]
    return [min(100, max(0, _round_half_up(n / max_value * 100))) for n in numbers]


def build_trend(rows: Sequence[Mapping[str, Any]]) -> List[TrendPoint]:
    """Attach bar widths to (decade_id, dadd_value) rows, keeping their order."""
    bars = compute_relative_bars([row.get("dadd_value") for row in rows])
    return [
        TrendPoint(
            decade_id=row["decade_id"],
            dadd_value=_optional_float(row.get("dadd_value")),
            bar_width=bar,
        )
        for row, bar in zip(rows, bars)
    ]


def build_summary(row: Optional[Mapping[str, Any]]) -> Optional[DecadeSummary]:
    if row is None:
        return None
    return DecadeSummary(
        total_countries=row["total_countries"] or 0,
        avg_dadd=_optional_float(row.get("avg_dadd")),
    )


def build_country_value(row: Optional[Mapping[str, Any]]) -> Optional[CountryValue]:
    if row is None:
        return None
    return CountryValue(
        country_name=row["country_name"],
        dadd_value=_optional_float(row.get("dadd_value")),
    )


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
