"""Transform raw result rows into normalized timelines and JSON reports."""

import csv
import json
import logging
import re
from pathlib import Path
from typing import Iterable, Optional, Union

from .dates import to_iso_date, to_timestamp
from .disciplines import DisciplineMetric, classify, normalize_label
from .models import (
    RawPerformanceEntry,
    NormalizedPoint,
    TableRow,
    ParseError,
    DateError,
    WindExclusion,
)
from .performance import parse_magnitude
from .timeline import (
    ALL_YEARS,
    TimelineConfig,
    available_years,
    build_timeline,
    describe_trend,
    personal_best,
    progress_band,
    progress_ratio,
    season_best,
)
from .wind import extract_wind, is_legal

logger = logging.getLogger(__name__)

# Row keys as written by the scraper (English) or found in FFA exports (French).
FIELD_ALIASES = {
    "discipline": ("discipline", "epreuve", "event"),
    "date": ("date",),
    "year": ("year", "annee"),
    "performance": ("performance", "perf", "mark"),
    "wind": ("wind", "vent"),
    "place": ("place", "rank"),
    "round": ("round", "tour"),
    "level": ("level", "niveau"),
    "points": ("points",),
    "location": ("location", "lieu", "city"),
    "meeting": ("meeting",),
    "notes": ("notes",),
}


def _field(row: dict, name: str):
    for key in FIELD_ALIASES[name]:
        value = row.get(key)
        if value is None:
            continue
        if isinstance(value, str):
            value = value.strip()
            if not value:
                continue
        return value
    return None


def _to_int(value) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    match = re.search(r"\d+", str(value))
    return int(match.group(0)) if match else None


def load_csv(filepath: Path) -> list[dict]:
    """Load result rows from a CSV file."""
    with open(filepath, "r", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))

    logger.info(f"Loaded {len(rows)} rows from {filepath}")
    return rows


def load_json(filepath: Path) -> list[dict]:
    """
    Load result rows from a JSON file.

    Accepts a plain list of rows, the scraper payload
    ({"disciplines": {name: [rows]}}), or a {name: [rows]} mapping.
    """
    with open(filepath, "r", encoding="utf-8") as f:
        payload = json.load(f)

    if isinstance(payload, dict) and "disciplines" in payload:
        payload = payload["disciplines"]

    if isinstance(payload, list):
        rows = payload
    elif isinstance(payload, dict):
        rows = []
        for discipline, entries in payload.items():
            if not isinstance(entries, list):
                continue
            for entry in entries:
                rows.append({"discipline": discipline, **entry})
    else:
        raise ValueError(f"Unsupported JSON layout in {filepath}")

    logger.info(f"Loaded {len(rows)} rows from {filepath}")
    return rows


def load_rows(filepath: Path) -> list[dict]:
    """Load result rows from a CSV or JSON file."""
    if filepath.suffix.lower() == ".csv":
        return load_csv(filepath)
    return load_json(filepath)


def entry_from_row(row: dict) -> Optional[RawPerformanceEntry]:
    """
    Map a raw row into a RawPerformanceEntry.

    Returns None if the row has no discipline or no date.
    """
    discipline = _field(row, "discipline")
    date_token = _field(row, "date")
    if not discipline or not date_token:
        logger.warning(f"Skipping incomplete row: {row}")
        return None

    performance = _field(row, "performance")
    return RawPerformanceEntry(
        discipline=str(discipline),
        date_token=str(date_token),
        year_hint=_to_int(_field(row, "year")),
        raw_performance=str(performance) if performance is not None else None,
        wind=_field(row, "wind"),
        place=_field(row, "place"),
        meeting=_field(row, "meeting"),
        notes=_field(row, "notes"),
        race_round=_field(row, "round"),
        level=_field(row, "level"),
        points=_to_int(_field(row, "points")),
        location=_field(row, "location"),
    )


def entries_from_rows(rows: Iterable[dict]) -> list[RawPerformanceEntry]:
    """Map rows to entries, skipping incomplete ones."""
    entries = []
    for row in rows:
        entry = entry_from_row(row)
        if entry:
            entries.append(entry)
    return entries


def normalize_entry(
    entry: RawPerformanceEntry,
    metric: Optional[DisciplineMetric] = None,
    wind_limit: Optional[float] = None,
) -> NormalizedPoint:
    """
    Turn one entry into a NormalizedPoint.

    When wind_limit is given, wind-assisted marks are rejected.

    Raises:
        DateError: the date token could not be resolved
        ParseError: the performance is invalid or unparseable
        WindExclusion: the wind exceeds wind_limit
    """
    metric = metric or classify(entry.discipline)

    iso_date = to_iso_date(entry.date_token, entry.year_hint)
    if iso_date is None:
        raise DateError(f"unresolvable date '{entry.date_token}'")

    value = parse_magnitude(entry.raw_performance, metric.kind)

    if wind_limit is not None and not is_legal(entry, wind_limit):
        raise WindExclusion(extract_wind(entry), wind_limit)

    return NormalizedPoint(
        date=iso_date,
        timestamp=to_timestamp(iso_date),
        value=value,
        year=iso_date[:4],
    )


def select_discipline(
    entries: Iterable[RawPerformanceEntry], discipline: Optional[str]
) -> list[RawPerformanceEntry]:
    """Entries whose label matches the discipline, accents and case ignored."""
    if not discipline:
        return list(entries)
    wanted = normalize_label(discipline)
    return [e for e in entries if normalize_label(e.discipline) == wanted]


def group_by_discipline(entries: Iterable[RawPerformanceEntry]) -> dict[str, list[RawPerformanceEntry]]:
    """Group entries by discipline, keyed by the first label seen."""
    labels: dict[str, str] = {}
    grouped: dict[str, list[RawPerformanceEntry]] = {}
    for entry in entries:
        if not entry.discipline.strip():
            continue
        key = normalize_label(entry.discipline)
        label = labels.setdefault(key, entry.discipline.strip())
        grouped.setdefault(label, []).append(entry)
    return grouped


def normalize_entries(
    entries: Iterable[RawPerformanceEntry],
    discipline: Optional[str] = None,
    config: Optional[TimelineConfig] = None,
) -> list[NormalizedPoint]:
    """
    Normalize the legal, parseable entries of a discipline.

    Entries that fail are dropped one by one; the rest are kept.
    """
    config = config or TimelineConfig()
    selected = select_discipline(entries, discipline)
    metric = classify(discipline or (selected[0].discipline if selected else None))

    points = []
    dropped = {"date": 0, "performance": 0, "wind": 0}
    for entry in selected:
        try:
            points.append(normalize_entry(entry, metric, wind_limit=config.wind_limit))
        except DateError as e:
            dropped["date"] += 1
            logger.debug(f"Dropping {entry.discipline} entry: {e}")
        except ParseError as e:
            dropped["performance"] += 1
            logger.debug(f"Dropping {entry.discipline} entry: {e}")
        except WindExclusion as e:
            dropped["wind"] += 1
            logger.debug(f"Dropping {entry.discipline} entry from chart: {e}")

    logger.debug(f"Normalized {len(points)} of {len(selected)} entries ({dropped})")
    return points


def _meeting_label(entry: RawPerformanceEntry) -> Optional[str]:
    if entry.meeting:
        return entry.meeting
    label = entry.race_round or ""
    if entry.level:
        label = f"{label} ({entry.level})".strip()
    return label or None


def build_table_rows(
    entries: Iterable[RawPerformanceEntry],
    discipline: Optional[str] = None,
    config: Optional[TimelineConfig] = None,
) -> list[TableRow]:
    """
    Rows of the detailed results table, newest first.

    Wind-assisted marks stay in the table, flagged as not legal. Entries
    without a usable performance are kept only when they carry a place.
    """
    config = config or TimelineConfig()
    selected = select_discipline(entries, discipline)
    metric = classify(discipline or (selected[0].discipline if selected else None))

    rows = []
    for entry in selected:
        iso_date = to_iso_date(entry.date_token, entry.year_hint)
        if iso_date is None:
            logger.debug(f"Dropping {entry.discipline} row: unresolvable date '{entry.date_token}'")
            continue

        try:
            value = parse_magnitude(entry.raw_performance, metric.kind)
        except ParseError:
            if not entry.has_place:
                continue
            value = None

        rows.append(
            TableRow(
                date=iso_date,
                value=value,
                label=metric.format_value(value, "compact") if value is not None else (entry.raw_performance or "-"),
                legal=value is not None and is_legal(entry, config.wind_limit),
                wind=extract_wind(entry),
                place=str(entry.place) if entry.has_place else None,
                meeting=_meeting_label(entry),
                location=entry.location,
                points=entry.points,
            )
        )

    rows.sort(key=lambda r: r.date, reverse=True)
    return rows


def build_discipline_report(
    entries: Iterable[RawPerformanceEntry],
    discipline: str,
    selected_year: Union[str, int] = ALL_YEARS,
    config: Optional[TimelineConfig] = None,
) -> dict:
    """Everything a progression chart and results table need for one discipline."""
    config = config or TimelineConfig()
    entries = select_discipline(entries, discipline)
    metric = classify(discipline)

    points = normalize_entries(entries, discipline, config)
    view = build_timeline(points, metric.direction, selected_year, config.condense_threshold)

    record = personal_best(points, metric.direction)
    season = season_best(points, metric.direction)
    ratio = progress_ratio(
        record.value if record else None,
        season.value if season else None,
        metric.direction,
    )

    latest = view.points[-1] if view.points else None
    best = personal_best(view.points, metric.direction)

    return {
        "discipline": discipline,
        "kind": metric.kind.value,
        "direction": metric.direction.value,
        "tableLabel": metric.table_label,
        "subtitle": metric.subtitle,
        "availableYears": available_years(points),
        "timeline": view.to_dict(),
        "labels": [metric.format_value(p.value, "compact") for p in view.points],
        "latest": metric.format_value(latest.value) if latest else None,
        "best": metric.format_value(best.value) if best else None,
        "trend": describe_trend(view.points, metric),
        "record": metric.format_value(record.value, "compact") if record else None,
        "seasonBest": metric.format_value(season.value, "compact") if season else None,
        "progress": ratio,
        "progressBand": progress_band(ratio).value,
        "rows": [r.to_dict() for r in build_table_rows(entries, discipline, config)],
    }


def summarize_disciplines(
    entries: Iterable[RawPerformanceEntry],
    limit: int = 3,
    config: Optional[TimelineConfig] = None,
) -> list[dict]:
    """
    Record and latest season best for each discipline.

    Disciplines without a legal mark are left out. A limit of 0 or less
    returns every discipline.
    """
    config = config or TimelineConfig()
    highlights = []

    for label, group in group_by_discipline(entries).items():
        metric = classify(label)
        points = normalize_entries(group, label, config)
        record = personal_best(points, metric.direction)
        if record is None:
            continue
        season = season_best(points, metric.direction)
        ratio = progress_ratio(record.value, season.value, metric.direction)
        highlights.append(
            {
                "discipline": label,
                "record": metric.format_value(record.value, "compact"),
                "recordDate": record.date,
                "seasonBest": metric.format_value(season.value, "compact"),
                "seasonYear": season.year,
                "progress": ratio,
                "progressBand": progress_band(ratio).value,
            }
        )

    logger.info(f"Summarized {len(highlights)} discipline(s)")
    return highlights[:limit] if limit > 0 else highlights


def write_json(payload, output_path: Path, pretty: bool = True) -> None:
    """Write a payload to a JSON file, creating parent directories."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        if pretty:
            json.dump(payload, f, indent=2, ensure_ascii=False)
        else:
            json.dump(payload, f, ensure_ascii=False)
    logger.info(f"Saved JSON to {output_path}")


def transform_file(
    input_path: Path,
    discipline: str,
    selected_year: Union[str, int] = ALL_YEARS,
    output_path: Optional[Path] = None,
    pretty: bool = True,
    config: Optional[TimelineConfig] = None,
) -> dict:
    """
    Build the report of one discipline from a CSV or JSON results file.

    Args:
        input_path: Path to the results file
        discipline: Discipline label, e.g. "100m"
        selected_year: "all" or a year
        output_path: Path for output JSON file (optional)
        pretty: Whether to format JSON with indentation

    Returns:
        The report dictionary
    """
    entries = entries_from_rows(load_rows(input_path))
    report = build_discipline_report(entries, discipline, selected_year, config)

    logger.info(
        f"{discipline}: {len(report['timeline']['points'])} chart point(s), "
        f"{len(report['rows'])} table row(s)"
    )

    if output_path:
        write_json(report, output_path, pretty)

    return report


def generate_ndjson(
    records: list[dict],
    output_path: Path,
) -> None:
    """
    Generate newline-delimited JSON (NDJSON) for streaming imports.

    Args:
        records: List of record dictionaries
        output_path: Path for output file
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", encoding="utf-8") as f:
        for record in records:
            f.write(json.dumps(record, ensure_ascii=False) + "\n")

    logger.info(f"Generated NDJSON file with {len(records)} records")
