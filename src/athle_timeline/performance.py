"""Parse performance strings into numbers and format numbers back for display."""

import math
import re
from typing import Union

from .models import MetricKind, InvalidPerformance, UnparseablePerformance

INVALIDITY_RE = re.compile(
    r"\b(?:dnf|dns|dq|dsq|np|nc|did\s+not\s+finish|did\s+not\s+start)\b",
    re.IGNORECASE,
)

PAREN_RE = re.compile(r"\(([^)]*)\)")

# "(+1.8)", "(-0,4 m/s)", "(1.2m/s)", "(vent +1,2)"
WIND_GROUP_RE = re.compile(
    r"^\s*(?:vent\b.*"
    r"|[+-]\s*\d+(?:[.,]\d+)?\s*(?:m\s*/?\s*s)?"
    r"|\d+(?:[.,]\d+)?\s*m\s*/\s*s)\s*$",
    re.IGNORECASE,
)

SINGLE_PRIMES = str.maketrans({"’": "'", "′": "'", "‘": "'", "´": "'", "`": "'"})
DOUBLE_PRIME_RE = re.compile(r"[″“”\"]")

HOURS_RE = re.compile(r"^(\d+)h(\d{1,2})(?:'(\d{1,2})(?:''?(\d{1,2}))?)?")
MIN_SEC_RE = re.compile(r"^(\d+)'(\d{1,2})(?:(?:''|'|\.|,)(\d{1,2}))?")
SEC_RE = re.compile(r"^(\d{1,3})''(\d{1,2})?")
DECIMAL_RE = re.compile(r"\d+(?:[.,]\d+)?")
SIGNED_DECIMAL_RE = re.compile(r"[-+]?\d+(?:[.,]\d+)?")
FRENCH_METERS_RE = re.compile(r"^(\d+)m(\d{1,2})$", re.IGNORECASE)

# A parenthesized group replaces the mark only when all of it is a chrono.
TIME_GROUP_RE = re.compile(
    r"\d+h\d{1,2}(?:'\d{1,2}(?:''?\d{1,2})?)?(?:'')?"
    r"|\d+'\d{1,2}(?:(?:''|'|\.|,)\d{1,2})?(?:'')?"
    r"|\d{1,3}''\d{0,2}"
    r"|\d+(?::\d{1,2}){1,2}(?:[.,]\d*)?"
    r"|\d+[.,]\d+"
)

Kind = Union[MetricKind, str]


def has_invalidity_marker(text: str) -> bool:
    """Return True when the text carries DNF/DNS/DQ/DSQ/NP/NC or their long forms."""
    if not text:
        return False
    return bool(INVALIDITY_RE.search(text))


def _normalize_primes(text: str) -> str:
    text = text.translate(SINGLE_PRIMES)
    return DOUBLE_PRIME_RE.sub("''", text)


def _fraction(digits: str) -> float:
    """Centiseconds from one or two digits; a lone digit is tenths."""
    if not digits:
        return 0.0
    return int(digits.ljust(2, "0")) / 100


def _to_float(text: str) -> float:
    return float(text.replace(",", "."))


def _parse_colon_time(text: str) -> float | None:
    """
    Convert a colon-separated chrono to seconds.

    Handles formats:
    - "1:02.45" (minutes:seconds.hundredths)
    - "1:02:45.67" (hours:minutes:seconds.hundredths)
    """
    if text.count(":") == 2:
        match = re.match(r"(\d+):(\d+):(\d+(?:[.,]\d*)?)", text)
        if match:
            hours, minutes, seconds = match.groups()
            return int(hours) * 3600 + int(minutes) * 60 + _to_float(seconds)

    if ":" in text:
        match = re.match(r"(\d+):(\d+(?:[.,]\d*)?)", text)
        if match:
            minutes, seconds = match.groups()
            return int(minutes) * 60 + _to_float(seconds)

    return None


def _parse_time(text: str) -> float | None:
    """
    Convert an FFA chrono to seconds.

    Handles formats:
    - "10''52" (seconds''centiseconds)
    - "1'52''34" (minutes'seconds''centiseconds)
    - "2h15'30''" (hours h minutes'seconds'')
    - "1:52.34", "2:15:30" (colon notation)
    - "10.52", "10,52" (plain decimal)
    """
    compact = re.sub(r"\s+", "", text)

    match = HOURS_RE.match(compact)
    if match:
        hours, minutes, seconds, centis = match.groups()
        total = int(hours) * 3600 + int(minutes) * 60 + int(seconds or 0) + _fraction(centis)
        return round(total, 3)

    match = MIN_SEC_RE.match(compact)
    if match:
        minutes, seconds, centis = match.groups()
        return round(int(minutes) * 60 + int(seconds) + _fraction(centis), 3)

    match = SEC_RE.match(compact)
    if match:
        seconds, centis = match.groups()
        return round(int(seconds) + _fraction(centis), 3)

    colon = _parse_colon_time(compact)
    if colon is not None:
        return round(colon, 3)

    match = DECIMAL_RE.search(compact)
    if match:
        return _to_float(match.group(0))

    return None


def _parse_measure(text: str) -> float | None:
    """Meters or points: "7.60m", "6m45", "5230 pts"."""
    compact = re.sub(r"\s+", "", text)

    match = FRENCH_METERS_RE.match(compact)
    if match:
        meters, centis = match.groups()
        return int(meters) + _fraction(centis)

    match = SIGNED_DECIMAL_RE.search(compact)
    if match:
        return _to_float(match.group(0))

    return None


def _candidate_texts(text: str, kind: MetricKind) -> list[str]:
    """Texts to try in order: parenthesized groups first for chronos."""
    groups = [g.strip() for g in PAREN_RE.findall(text)]
    groups = [g for g in groups if g and not WIND_GROUP_RE.match(g)]
    if kind.is_time:
        groups = [g for g in groups if TIME_GROUP_RE.fullmatch(re.sub(r"\s+", "", g))]
    outside = PAREN_RE.sub(" ", text).strip()

    candidates = groups + [outside] if kind.is_time else [outside] + groups
    return [c for c in candidates if c]


def parse_magnitude(raw: str, kind: Kind) -> float:
    """
    Convert a raw performance string into canonical units.

    Seconds for timed kinds, meters for distance, points for combined
    events.

    Raises:
        InvalidPerformance: the text carries an invalidity marker
        UnparseablePerformance: no usable number was found
    """
    kind = MetricKind(kind)
    if raw is None:
        raise UnparseablePerformance("empty performance")

    text = _normalize_primes(str(raw)).strip()
    if not text:
        raise UnparseablePerformance("empty performance")

    if has_invalidity_marker(text):
        raise InvalidPerformance(f"invalid performance '{raw}'")

    parser = _parse_time if kind.is_time else _parse_measure
    for candidate in _candidate_texts(text, kind):
        value = parser(candidate)
        if value is None:
            continue
        if not math.isfinite(value):
            raise UnparseablePerformance(f"non-finite performance '{raw}'")
        if kind is not MetricKind.POINTS and value <= 0:
            raise UnparseablePerformance(f"non-positive performance '{raw}'")
        return value

    raise UnparseablePerformance(f"unrecognized performance '{raw}'")


def _format_time(value: float, compact: bool) -> str:
    centis = int(round(value * 100))

    if centis >= 360000:
        total = int(math.floor(value + 0.5))
        hours, rest = divmod(total, 3600)
        minutes, seconds = divmod(rest, 60)
        return f"{hours}:{minutes:02d}:{seconds:02d}"

    if centis >= 6000:
        minutes, rest = divmod(centis, 6000)
        return f"{minutes}:{rest // 100:02d}.{rest % 100:02d}"

    text = f"{centis // 100}.{centis % 100:02d}"
    return text if compact else f"{text} s"


def format_value(value: float, kind: Kind, variant: str = "default") -> str:
    """
    Render a canonical value for display.

    - time: "10.52 s", "1:52.34", "2:08:15"
    - distance: "7.60 m"
    - points: "5230 pts"

    The "compact" variant drops the unit suffix.
    """
    kind = MetricKind(kind)
    compact = variant == "compact"

    if kind.is_time:
        return _format_time(value, compact)

    if kind is MetricKind.DISTANCE:
        text = f"{value:.2f}"
        return text if compact else f"{text} m"

    text = str(int(math.floor(value + 0.5)))
    return text if compact else f"{text} pts"
