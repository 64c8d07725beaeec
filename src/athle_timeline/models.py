"""Data models for athletics performance records."""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional, Union


class MetricKind(str, Enum):
    """How a discipline's marks are measured."""

    TIME_SHORT = "time-short"
    TIME_LONG = "time-long"
    TIME_MARATHON = "time-marathon"
    DISTANCE = "distance"
    POINTS = "points"

    @property
    def is_time(self) -> bool:
        return self in (MetricKind.TIME_SHORT, MetricKind.TIME_LONG, MetricKind.TIME_MARATHON)


class Direction(str, Enum):
    """Whether smaller or larger values are better."""

    LOWER = "lower"
    HIGHER = "higher"

    def is_better(self, candidate: float, current: float) -> bool:
        """Strict comparison: equal values are never better."""
        if self is Direction.LOWER:
            return candidate < current
        return candidate > current


class ProgressBand(str, Enum):
    """Qualitative banding of a progress ratio."""

    ELITE = "elite"
    STRONG = "strong"
    MODERATE = "moderate"
    LOW = "low"


class ParseError(ValueError):
    """A performance string could not be turned into a number."""


class InvalidPerformance(ParseError):
    """The performance carries an invalidity marker (DNF, DNS, DQ...)."""


class UnparseablePerformance(ParseError):
    """The performance matches no known numeric or time notation."""


class DateError(ValueError):
    """A date token could not be resolved to a calendar date."""


class WindExclusion(Exception):
    """The mark is wind-assisted beyond the legal limit."""

    def __init__(self, wind: float, limit: float):
        super().__init__(f"wind {wind:+.1f} m/s exceeds {limit:+.1f} m/s")
        self.wind = wind
        self.limit = limit


@dataclass
class RawPerformanceEntry:
    """A single reported result, as found in a feed or typed in by an athlete."""

    discipline: str
    date_token: str
    year_hint: Optional[int] = None
    raw_performance: Optional[str] = None
    wind: Optional[Union[str, float]] = None
    place: Optional[Union[str, int]] = None
    meeting: Optional[str] = None
    notes: Optional[str] = None
    race_round: Optional[str] = None
    level: Optional[str] = None
    points: Optional[int] = None
    location: Optional[str] = None

    @property
    def has_place(self) -> bool:
        if self.place is None:
            return False
        return bool(str(self.place).strip())


@dataclass(frozen=True)
class NormalizedPoint:
    """A dated, numeric, comparable mark."""

    date: str
    timestamp: int
    value: float
    year: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class WindReading:
    """A wind measurement attached to a mark."""

    meters_per_second: float

    def is_legal(self, limit: float = 2.0) -> bool:
        return self.meters_per_second <= limit


@dataclass
class TimelineView:
    """A projection of one discipline's points for charting."""

    selected_year: str
    points: list[NormalizedPoint] = field(default_factory=list)
    is_condensed: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.points

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "selectedYear": self.selected_year,
            "points": [p.to_dict() for p in self.points],
            "isCondensed": self.is_condensed,
        }


@dataclass
class TableRow:
    """One line of the detailed results table.

    Unlike timeline points, rows are kept for wind-assisted marks and for
    entries that only carry a place.
    """

    date: str
    value: Optional[float]
    label: str
    legal: bool
    wind: Optional[float] = None
    place: Optional[str] = None
    meeting: Optional[str] = None
    location: Optional[str] = None
    points: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "value": self.value,
            "label": self.label,
            "legal": self.legal,
            "wind": self.wind,
            "place": self.place,
            "meeting": self.meeting,
            "location": self.location,
            "points": self.points,
        }
