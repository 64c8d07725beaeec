"""Results providers and the progression service built on top of them.

The service never reaches for module-level data: the source of results is
passed in, so demo and offline modes use a StaticResultsProvider.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from .models import RawPerformanceEntry, TimelineView
from .disciplines import classify
from .scraper import AthleScraper, ScraperConfig
from .timeline import ALL_YEARS, TimelineConfig, build_timeline
from .transformer import (
    build_discipline_report,
    entries_from_rows,
    group_by_discipline,
    load_rows,
    normalize_entries,
    summarize_disciplines,
)

logger = logging.getLogger(__name__)


class ResultsProvider(ABC):
    """Source of raw performance entries for an athlete."""

    @abstractmethod
    def fetch_entries(self, athlete_id: str) -> list[RawPerformanceEntry]:
        """Return every known entry of the athlete."""
        pass


class StaticResultsProvider(ResultsProvider):
    """In-memory entries, for demos, offline mode and tests."""

    def __init__(self, entries_by_athlete: dict[str, list[RawPerformanceEntry]]):
        self._entries = {k: list(v) for k, v in entries_by_athlete.items()}

    def fetch_entries(self, athlete_id: str) -> list[RawPerformanceEntry]:
        return list(self._entries.get(athlete_id, []))


class FileResultsProvider(ResultsProvider):
    """Entries read from "<athlete_id>_results.json" or ".csv" files."""

    def __init__(self, directory: Path):
        self.directory = directory

    def fetch_entries(self, athlete_id: str) -> list[RawPerformanceEntry]:
        for suffix in (".json", ".csv"):
            path = self.directory / f"{athlete_id}_results{suffix}"
            if path.exists():
                return entries_from_rows(load_rows(path))

        logger.warning(f"No results file for athlete {athlete_id} in {self.directory}")
        return []


class ScraperResultsProvider(ResultsProvider):
    """Entries scraped live from athle.fr."""

    def __init__(self, years: list[int], output_dir: Path, headless: bool = True, delay: float = 2.0):
        self.years = years
        self.output_dir = output_dir
        self.headless = headless
        self.delay = delay

    def fetch_entries(self, athlete_id: str) -> list[RawPerformanceEntry]:
        config = ScraperConfig(
            athlete_id=athlete_id,
            output_dir=self.output_dir,
            years=self.years,
            delay_between_requests=self.delay,
            headless=self.headless,
        )
        scraped = AthleScraper(config).scrape_all_raw()

        rows = []
        for records in scraped.values():
            rows.extend(records)
        return entries_from_rows(rows)


class ProgressionService:
    """Progression views of an athlete, recomputed from the provider on each call."""

    def __init__(self, provider: ResultsProvider, config: Optional[TimelineConfig] = None):
        self.provider = provider
        self.config = config or TimelineConfig()

    def disciplines(self, athlete_id: str) -> list[str]:
        """Discipline labels the athlete has results in."""
        return list(group_by_discipline(self.provider.fetch_entries(athlete_id)))

    def timeline(
        self,
        athlete_id: str,
        discipline: str,
        selected_year: Union[str, int] = ALL_YEARS,
    ) -> TimelineView:
        """Chart points of one discipline, optionally limited to a year."""
        entries = self.provider.fetch_entries(athlete_id)
        points = normalize_entries(entries, discipline, self.config)
        direction = classify(discipline).direction
        return build_timeline(points, direction, selected_year, self.config.condense_threshold)

    def discipline_report(
        self,
        athlete_id: str,
        discipline: str,
        selected_year: Union[str, int] = ALL_YEARS,
    ) -> dict:
        """Full report of one discipline: timeline, records and table rows."""
        entries = self.provider.fetch_entries(athlete_id)
        return build_discipline_report(entries, discipline, selected_year, self.config)

    def highlights(self, athlete_id: str, limit: int = 3) -> list[dict]:
        """Record and season best of each discipline."""
        entries = self.provider.fetch_entries(athlete_id)
        return summarize_disciplines(entries, limit, self.config)
