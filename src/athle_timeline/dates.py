"""Normalize federation date tokens to ISO calendar dates."""

import re
import unicodedata
from datetime import date, datetime, timezone
from typing import Optional

MONTHS = {
    "janvier": 1,
    "janv": 1,
    "jan": 1,
    "fevrier": 2,
    "fevr": 2,
    "fev": 2,
    "mars": 3,
    "mar": 3,
    "avril": 4,
    "avr": 4,
    "mai": 5,
    "juin": 6,
    "juillet": 7,
    "juil": 7,
    "aout": 8,
    "septembre": 9,
    "sept": 9,
    "sep": 9,
    "octobre": 10,
    "oct": 10,
    "novembre": 11,
    "nov": 11,
    "decembre": 12,
    "dec": 12,
}

ISO_RE = re.compile(r"^\s*(\d{4})-(\d{2})-(\d{2})")
FRENCH_RE = re.compile(r"^(\d{1,2})(?:er)?\s+([^\s\d]+?)\.?(?:\s+(\d{4}))?$")
NUMERIC_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2}|\d{4})$")


def normalize_month(value: str) -> Optional[int]:
    """Month number from a French month name, accents and case ignored."""
    decomposed = unicodedata.normalize("NFD", value.strip().lower())
    key = "".join(c for c in decomposed if "a" <= c <= "z")
    return MONTHS.get(key)


def _iso(year: int, month: int, day: int) -> Optional[str]:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def to_iso_date(token: Optional[str], year_hint: Optional[int] = None) -> Optional[str]:
    """
    Convert a date token into "YYYY-MM-DD".

    Handles formats:
    - "2025-02-16T18:30:00.000Z" (ISO, truncated to the calendar day)
    - "18 janv." / "1er mai" (FFA results, year from year_hint)
    - "18 janv. 2025" (explicit year wins over year_hint)
    - "18/01/2025", "18/01/25"

    Returns None when the token cannot be resolved.
    """
    if not token:
        return None

    match = ISO_RE.match(token)
    if match:
        year, month, day = (int(g) for g in match.groups())
        return _iso(year, month, day)

    cleaned = " ".join(token.split())

    match = NUMERIC_RE.match(cleaned)
    if match:
        day, month, year = match.groups()
        full_year = int(year) + 2000 if len(year) == 2 else int(year)
        return _iso(full_year, int(month), int(day))

    match = FRENCH_RE.match(cleaned)
    if not match:
        return None

    day, month_name, year = match.groups()
    month = normalize_month(month_name)
    if month is None:
        return None

    if year:
        resolved_year = int(year)
    elif year_hint:
        resolved_year = int(year_hint)
    else:
        resolved_year = date.today().year

    return _iso(resolved_year, month, int(day))


def to_timestamp(iso_date: str) -> int:
    """Epoch milliseconds at noon UTC of the given day."""
    day = date.fromisoformat(iso_date)
    moment = datetime(day.year, day.month, day.day, 12, tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)
