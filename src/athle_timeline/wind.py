"""Wind extraction and legality checks for performance entries."""

import logging
import math
import re
from typing import Optional

from .models import RawPerformanceEntry, WindReading
from .performance import has_invalidity_marker

logger = logging.getLogger(__name__)

# Outdoor wind-assistance limit for records and rankings.
WIND_LIMIT = 2.0

NUMBER_RE = re.compile(r"[-+]?\d+(?:\.\d+)?")
INLINE_MS_RE = re.compile(r"([-+]?\s*\d+(?:[.,]\d+)?)\s*m\s*/\s*s", re.IGNORECASE)
VENT_RE = re.compile(r"\bvent\b\s*:?\s*([-+]?\s*\d+(?:[.,]\d+)?)", re.IGNORECASE)
SIGNED_RE = re.compile(r"(?<![\d'.,])([-+]\s*\d+(?:[.,]\d+)?)(?![\d'])")


def _to_float(text: str) -> Optional[float]:
    value = float(re.sub(r"\s+", "", text).replace(",", "."))
    return value if math.isfinite(value) else None


def parse_wind_value(raw) -> Optional[float]:
    """
    Parse an explicit wind field.

    Accepts numbers and strings like "+1.8", "-0,4", "1.2 m/s". Empty
    strings and "NWI" (no wind information) give None.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw) if math.isfinite(raw) else None

    cleaned = str(raw).replace(",", ".")
    cleaned = re.sub(r"m\s*/?\s*s", "", cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(r"([-+])\s+", r"\1", cleaned).strip()
    match = NUMBER_RE.search(cleaned)
    if not match:
        return None
    return _to_float(match.group(0))


def _wind_from_text(text: str) -> Optional[float]:
    """Inline "+1.8 m/s" first, then a signed or "vent"-prefixed number."""
    match = INLINE_MS_RE.search(text)
    if match:
        return _to_float(match.group(1))

    match = VENT_RE.search(text)
    if match:
        return _to_float(match.group(1))

    # An unsigned number here could be part of the chrono itself.
    match = SIGNED_RE.search(text)
    if match:
        return _to_float(match.group(1))

    return None


def extract_wind(entry: RawPerformanceEntry) -> Optional[float]:
    """
    Find the wind reading of an entry, in m/s.

    Precedence: the explicit wind field, then the raw performance text,
    then a "vent" marker in the meeting or notes.
    """
    wind = parse_wind_value(entry.wind)
    if wind is not None:
        return wind

    if entry.raw_performance:
        wind = _wind_from_text(str(entry.raw_performance))
        if wind is not None:
            return wind

    for text in (entry.meeting, entry.notes):
        if not text:
            continue
        match = VENT_RE.search(text)
        if match:
            return _to_float(match.group(1))

    return None


def read_wind(entry: RawPerformanceEntry) -> Optional[WindReading]:
    """The wind of an entry as a WindReading, or None when unknown."""
    wind = extract_wind(entry)
    if wind is None:
        return None
    return WindReading(meters_per_second=wind)


def is_legal(entry: RawPerformanceEntry, limit: float = WIND_LIMIT) -> bool:
    """
    Whether the mark may appear in progression charts.

    Entries with an invalidity marker are never legal. Otherwise the mark
    is legal unless its wind is strictly above the limit; a missing wind
    reading counts as legal.
    """
    if has_invalidity_marker(str(entry.raw_performance or "")):
        return False

    reading = read_wind(entry)
    if reading is None:
        return True

    if not reading.is_legal(limit):
        logger.debug(
            f"Wind-assisted mark {entry.raw_performance!r} ({reading.meters_per_second:+.1f} m/s)"
        )
        return False
    return True
