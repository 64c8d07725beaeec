"""Classify discipline labels into metric kinds and comparison directions."""

import re
import unicodedata
from dataclasses import dataclass
from typing import Optional

from .models import MetricKind, Direction
from .performance import format_value

POINTS_KEYWORDS = ("decathlon", "heptathlon", "pentathlon", "octathlon", "triathlon")

DISTANCE_KEYWORDS = (
    "saut",
    "longueur",
    "hauteur",
    "perche",
    "triple",
    "poids",
    "disque",
    "marteau",
    "javelot",
    "lancer",
    "vortex",
)

LONG_KEYWORDS = ("km", "cross", "fond", "steeple", "marche", "route", "trail", "mile")
SHORT_KEYWORDS = ("sprint", "haies", "hurdles", "relais", "relay")
MARATHON_KEYWORDS = ("marathon", "semi")

SEMI_MARATHON_METERS = 21097.5
MARATHON_METERS = 42195.0
MILE_METERS = 1609.344

# Events run in about three minutes or less are sprints.
SHORT_MAX_METERS = 1000
MARATHON_MIN_METERS = 20000

RELAY_RE = re.compile(r"(\d+)\s*x\s*(\d+)\s*m\b")
LENGTH_RE = re.compile(r"(\d+(?:[.,]\d+)?)\s*(km|miles?|m)\b")
# Thousands separators, as in "10 000m"
DIGIT_GROUP_RE = re.compile(r"(?<=\d)[\s\u202f](?=\d{3}(?!\d))")


@dataclass(frozen=True)
class DisciplineMetric:
    """How to compare and display marks of one metric kind."""

    kind: MetricKind
    direction: Direction
    table_label: str
    subtitle: str
    delta_threshold: float

    def format_value(self, value: float, variant: str = "default") -> str:
        """Render a value in this metric's units."""
        return format_value(value, self.kind, variant)


METRICS = {
    MetricKind.TIME_SHORT: DisciplineMetric(
        kind=MetricKind.TIME_SHORT,
        direction=Direction.LOWER,
        table_label="Chrono (s)",
        subtitle="ISO dates, time in seconds",
        delta_threshold=0.01,
    ),
    MetricKind.TIME_LONG: DisciplineMetric(
        kind=MetricKind.TIME_LONG,
        direction=Direction.LOWER,
        table_label="Chrono (min:s)",
        subtitle="ISO dates, time in mm:ss",
        delta_threshold=0.1,
    ),
    MetricKind.TIME_MARATHON: DisciplineMetric(
        kind=MetricKind.TIME_MARATHON,
        direction=Direction.LOWER,
        table_label="Chrono (h:min:s)",
        subtitle="ISO dates, time in h:mm:ss",
        delta_threshold=1.0,
    ),
    MetricKind.DISTANCE: DisciplineMetric(
        kind=MetricKind.DISTANCE,
        direction=Direction.HIGHER,
        table_label="Performance (m)",
        subtitle="ISO dates, distance in meters",
        delta_threshold=0.01,
    ),
    MetricKind.POINTS: DisciplineMetric(
        kind=MetricKind.POINTS,
        direction=Direction.HIGHER,
        table_label="Points",
        subtitle="ISO dates, total points",
        delta_threshold=5.0,
    ),
}


def normalize_label(label: str) -> str:
    """Lower-case a discipline label and strip its accents."""
    decomposed = unicodedata.normalize("NFD", label.strip().lower())
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def estimate_distance_meters(discipline: str) -> Optional[float]:
    """
    Race distance in meters read from a discipline label.

    Handles "4x100m", "800m", "10 km", "1 mile", "Semi-marathon", "Marathon".
    """
    label = DIGIT_GROUP_RE.sub("", normalize_label(discipline or ""))

    match = RELAY_RE.search(label)
    if match:
        legs, leg_distance = match.groups()
        return float(int(legs) * int(leg_distance))

    match = LENGTH_RE.search(label)
    if match:
        amount = float(match.group(1).replace(",", "."))
        unit = match.group(2)
        if unit == "km":
            return amount * 1000
        if unit.startswith("mile"):
            return amount * MILE_METERS
        return amount

    compact = re.sub(r"[\s-]", "", label)
    if "semimarathon" in compact:
        return SEMI_MARATHON_METERS
    if "marathon" in compact:
        return MARATHON_METERS
    return None


def _classify_kind(label: str) -> MetricKind:
    if any(k in label for k in POINTS_KEYWORDS):
        return MetricKind.POINTS

    if any(k in label for k in DISTANCE_KEYWORDS):
        return MetricKind.DISTANCE

    if any(k in label for k in MARATHON_KEYWORDS):
        return MetricKind.TIME_MARATHON

    meters = estimate_distance_meters(label)
    if meters is not None:
        if meters >= MARATHON_MIN_METERS:
            return MetricKind.TIME_MARATHON
        if meters > SHORT_MAX_METERS:
            return MetricKind.TIME_LONG
        return MetricKind.TIME_SHORT

    if any(k in label for k in LONG_KEYWORDS):
        return MetricKind.TIME_LONG
    if any(k in label for k in SHORT_KEYWORDS):
        return MetricKind.TIME_SHORT

    # Unknown events are scored as sprints, never as field events.
    return MetricKind.TIME_SHORT


def classify(discipline: Optional[str]) -> DisciplineMetric:
    """Return the metric description for a discipline label."""
    if not discipline or not discipline.strip():
        return METRICS[MetricKind.TIME_SHORT]
    return METRICS[_classify_kind(normalize_label(discipline))]
