"""Aggregate normalized points into chart-ready timelines."""

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from .disciplines import DisciplineMetric
from .models import Direction, NormalizedPoint, ProgressBand, TimelineView
from .wind import WIND_LIMIT

logger = logging.getLogger(__name__)

ALL_YEARS = "all"

# Series longer than this are shown as one best mark per year.
CONDENSE_THRESHOLD = 10

BAND_THRESHOLDS = (
    (0.95, ProgressBand.ELITE),
    (0.80, ProgressBand.STRONG),
    (0.60, ProgressBand.MODERATE),
)


@dataclass
class TimelineConfig:
    """Thresholds used when building timelines."""

    wind_limit: float = WIND_LIMIT
    condense_threshold: int = CONDENSE_THRESHOLD


def _best_by_key(points: Iterable[NormalizedPoint], direction: Direction, key) -> list[NormalizedPoint]:
    """Keep the best point per key; ties keep the first seen."""
    best: dict[str, NormalizedPoint] = {}
    for point in points:
        bucket = key(point)
        current = best.get(bucket)
        if current is None or direction.is_better(point.value, current.value):
            best[bucket] = point
    return sorted(best.values(), key=lambda p: p.timestamp)


def best_per_day(points: Iterable[NormalizedPoint], direction: Direction) -> list[NormalizedPoint]:
    """Collapse same-day marks to the best one, sorted chronologically."""
    return _best_by_key(points, Direction(direction), lambda p: p.date)


def condense_by_year(points: Iterable[NormalizedPoint], direction: Direction) -> list[NormalizedPoint]:
    """One best mark per year, sorted chronologically."""
    ordered = sorted(points, key=lambda p: p.timestamp)
    return _best_by_key(ordered, Direction(direction), lambda p: p.year)


def build_timeline(
    points: Iterable[NormalizedPoint],
    direction: Direction,
    selected_year: Union[str, int] = ALL_YEARS,
    condense_threshold: int = CONDENSE_THRESHOLD,
) -> TimelineView:
    """
    Build the chart projection of a discipline's points.

    Points are reduced to the best mark per day and sorted. A specific
    year restricts the series to that year. With "all" years, a series of
    more than `condense_threshold` days is replaced by one best mark per
    year.
    """
    direction = Direction(direction)
    selected = str(selected_year)
    daily = best_per_day(points, direction)

    if selected != ALL_YEARS:
        return TimelineView(
            selected_year=selected,
            points=[p for p in daily if p.year == selected],
            is_condensed=False,
        )

    if len(daily) > condense_threshold:
        condensed = condense_by_year(daily, direction)
        logger.debug(f"Condensed {len(daily)} daily marks into {len(condensed)} yearly bests")
        return TimelineView(selected_year=selected, points=condensed, is_condensed=True)

    return TimelineView(selected_year=selected, points=daily, is_condensed=False)


def available_years(points: Iterable[NormalizedPoint]) -> list[str]:
    """Distinct years present in the points, newest first."""
    return sorted({p.year for p in points if p.year}, reverse=True)


def personal_best(points: Iterable[NormalizedPoint], direction: Direction) -> Optional[NormalizedPoint]:
    """The best point overall; the earliest one wins ties."""
    direction = Direction(direction)
    best = None
    for point in sorted(points, key=lambda p: p.timestamp):
        if best is None or direction.is_better(point.value, best.value):
            best = point
    return best


def season_best(points: Iterable[NormalizedPoint], direction: Direction) -> Optional[NormalizedPoint]:
    """The best point of the most recent year present."""
    points = list(points)
    years = available_years(points)
    if not years:
        return None
    return personal_best([p for p in points if p.year == years[0]], direction)


def _usable(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value) and value > 0


def progress_ratio(record: Optional[float], comparison: Optional[float], direction: Direction) -> float:
    """
    How close a mark is to the record, as a ratio in [0, 1].

    For times the ratio is record / comparison, for distances and points
    comparison / record. Missing, non-finite or non-positive inputs give 0.
    """
    if not (_usable(record) and _usable(comparison)):
        return 0.0

    if Direction(direction) is Direction.LOWER:
        ratio = record / comparison
    else:
        ratio = comparison / record

    return min(1.0, max(0.0, ratio))


def progress_band(ratio: float) -> ProgressBand:
    """Qualitative band of a progress ratio."""
    for threshold, band in BAND_THRESHOLDS:
        if ratio >= threshold:
            return band
    return ProgressBand.LOW


def describe_trend(points: list[NormalizedPoint], metric: DisciplineMetric) -> Optional[str]:
    """
    Describe the change between the first and last point.

    Returns None with fewer than two points and "Stable" when the change is
    below the metric's delta threshold.
    """
    if len(points) < 2:
        return None

    delta = points[-1].value - points[0].value
    if abs(delta) < metric.delta_threshold:
        return "Stable"

    sign = "+" if delta > 0 else "-"
    return f"{sign}{metric.format_value(abs(delta), 'compact')} vs first"
