"""Scraper for athle.fr athlete results using Selenium."""

import csv
import json
import re
import time
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urljoin

from selenium import webdriver
from selenium.webdriver.common.by import By
from selenium.webdriver.support.ui import WebDriverWait
from selenium.webdriver.support import expected_conditions as EC
from selenium.common.exceptions import TimeoutException
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

ATHLE_BASE_URL = "https://www.athle.fr"
RESULTS_URL = ATHLE_BASE_URL + "/ajax/fiche-athlete-resultats.aspx?seq={athlete_id}&annee={year}"

# Column order of the athle.fr results table
RESULT_COLUMNS = [
    "date",
    "discipline",
    "performance",
    "wind",
    "round",
    "place",
    "level",
    "points",
    "location",
]

CSV_FIELDS = RESULT_COLUMNS + ["year", "competition_url"]

PAGE_RE = re.compile(r"data-page=\"(\d+)\"|[?&;]page=(\d+)", re.IGNORECASE)


@dataclass
class ScraperConfig:
    """Configuration for the scraper."""

    athlete_id: str
    output_dir: Path
    years: list[int] = field(default_factory=lambda: [date.today().year])
    delay_between_requests: float = 2.0
    timeout: int = 30
    max_pages: int = 20
    headless: bool = True
    save_debug_html: bool = False


def clean_text(value: str) -> str:
    """Collapse whitespace, including non-breaking spaces."""
    return " ".join((value or "").replace("\u00a0", " ").split())


def parse_results_table(html: str, year: Optional[int] = None) -> list[dict]:
    """
    Parse result rows out of an athle.fr results page.

    Rows with fewer than nine cells and expandable detail rows are skipped.
    """
    soup = BeautifulSoup(html, "lxml")

    rows = soup.select("#res_athlete tbody tr")
    if not rows:
        # The ajax fragment ships the rows without the surrounding table id
        rows = soup.find_all("tr")

    records = []
    for row in rows:
        if "detail-row" in (row.get("class") or []):
            continue

        cells = row.find_all("td")
        if len(cells) < len(RESULT_COLUMNS):
            continue

        record = {
            column: clean_text(cell.get_text(" "))
            for column, cell in zip(RESULT_COLUMNS, cells)
        }
        if not record["discipline"]:
            continue

        link = cells[8].find("a")
        href = link.get("href") if link else None
        record["competition_url"] = urljoin(ATHLE_BASE_URL, href) if href else ""
        record["year"] = str(year) if year else ""
        records.append(record)

    logger.debug(f"Parsed {len(records)} result rows")
    return records


def find_max_page(html: str) -> int:
    """Highest page number linked from a results page."""
    pages = [int(a or b) for a, b in PAGE_RE.findall(html)]
    return max([1] + pages)


def rows_by_discipline(records: list[dict]) -> dict[str, list[dict]]:
    """Group scraped rows by discipline label."""
    grouped: dict[str, list[dict]] = {}
    for record in records:
        grouped.setdefault(record["discipline"], []).append(record)
    return grouped


def build_payload(athlete_id: str, records: list[dict]) -> dict:
    """JSON payload of scraped rows, grouped by discipline."""
    grouped = rows_by_discipline(records)
    return {
        "source": ATHLE_BASE_URL,
        "scrapedAt": datetime.now(timezone.utc).isoformat(),
        "summary": {
            "athleteId": athlete_id,
            "disciplineCount": len(grouped),
            "entryCount": len(records),
        },
        "disciplines": grouped,
    }


class AthleScraper:
    """Scraper for athle.fr athlete results using Selenium."""

    def __init__(self, config: ScraperConfig):
        self.config = config
        self.driver = None

    def _create_driver(self) -> webdriver.Chrome:
        """Create a headless Chrome browser instance."""
        options = webdriver.ChromeOptions()
        if self.config.headless:
            options.add_argument("--headless=new")
        options.add_argument("--no-sandbox")
        options.add_argument("--disable-dev-shm-usage")
        options.add_argument("--disable-gpu")
        options.add_argument(
            "user-agent=Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
            "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        )
        return webdriver.Chrome(options=options)

    def scrape_all_raw(self) -> dict[int, list[dict]]:
        """Scrape result rows for every configured year, keyed by year."""
        results = {}

        try:
            self.driver = self._create_driver()
            logger.info(f"Browser started. Scraping athlete {self.config.athlete_id}...")

            for year in self.config.years:
                logger.info(f"Fetching {year} results for athlete {self.config.athlete_id}...")

                try:
                    records = self._scrape_year(year)
                except Exception as e:
                    logger.error(f"Failed {year}: {e}")
                    continue

                if records:
                    logger.info(f"  Found {len(records)} results for {year}")
                    results[year] = records
                else:
                    logger.info(f"  No results found for {year}")

                time.sleep(self.config.delay_between_requests)

        finally:
            if self.driver:
                self.driver.quit()
                logger.info("Browser closed.")

        return results

    def scrape_all(self) -> list[Path]:
        """Scrape all configured years and save one CSV per year plus a JSON payload."""
        self.config.output_dir.mkdir(parents=True, exist_ok=True)
        scraped = self.scrape_all_raw()

        output_files = []
        all_records = []
        for year, records in sorted(scraped.items()):
            output_file = self._save_to_csv(records, year)
            output_files.append(output_file)
            all_records.extend(records)
            logger.info(f"  Saved {len(records)} results to {output_file.name}")

        if all_records:
            json_path = self.config.output_dir / f"{self.config.athlete_id}_results.json"
            with open(json_path, "w", encoding="utf-8") as f:
                json.dump(build_payload(self.config.athlete_id, all_records), f, indent=2, ensure_ascii=False)
            output_files.append(json_path)
            logger.info(f"  Saved combined payload to {json_path.name}")

        return output_files

    def _load_page(self, url: str, label: str) -> str:
        """Open a URL and return its HTML once result rows are present."""
        self.driver.get(url)

        wait = WebDriverWait(self.driver, self.config.timeout)
        try:
            wait.until(EC.presence_of_element_located((By.TAG_NAME, "tr")))
        except TimeoutException:
            logger.warning(f"No result rows appeared on {url}")
            self._dump_page_source(f"empty_{label}")

        if self.config.save_debug_html:
            self._dump_page_source(label)

        return self.driver.page_source

    def _scrape_year(self, year: int) -> list[dict]:
        """Scrape every page of results for a given year."""
        base_url = RESULTS_URL.format(athlete_id=self.config.athlete_id, year=year)

        html = self._load_page(base_url, f"results_{year}_1")
        records = parse_results_table(html, year)

        max_page = min(find_max_page(html), self.config.max_pages)
        for page in range(2, max_page + 1):
            time.sleep(self.config.delay_between_requests)
            html = self._load_page(f"{base_url}&page={page}", f"results_{year}_{page}")
            records.extend(parse_results_table(html, year))

        logger.debug(f"Parsed {len(records)} rows over {max_page} page(s) for {year}")
        return records

    def _save_to_csv(self, records: list[dict], year: int) -> Path:
        """Save records to CSV file."""
        filename = f"{self.config.athlete_id}_{year}_results.csv"
        filepath = self.config.output_dir / filename

        with open(filepath, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
            writer.writeheader()
            writer.writerows(records)

        return filepath

    def _dump_page_source(self, label: str) -> None:
        """Save current page HTML for debugging."""
        debug_dir = self.config.output_dir / "debug"
        debug_dir.mkdir(parents=True, exist_ok=True)
        path = debug_dir / f"{label}.html"
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.driver.page_source)
        logger.debug(f"Saved debug HTML to {path}")


def scrape_athlete_results(
    athlete_id: str,
    output_dir: Path,
    years: list[int] | None = None,
    delay: float = 2.0,
    headless: bool = True,
    save_debug_html: bool = False,
) -> list[Path]:
    """
    Main entry point for scraping an athlete's results.

    Args:
        athlete_id: athle.fr athlete identifier (the "seq" parameter)
        output_dir: Directory to save CSV and JSON files
        years: List of years to scrape (default: current year)
        delay: Seconds to wait between requests
        headless: Run browser in headless mode
        save_debug_html: Save page HTML for debugging

    Returns:
        List of file paths created
    """
    if years is None:
        years = [date.today().year]

    config = ScraperConfig(
        athlete_id=athlete_id,
        output_dir=output_dir,
        years=years,
        delay_between_requests=delay,
        headless=headless,
        save_debug_html=save_debug_html,
    )

    scraper = AthleScraper(config)
    return scraper.scrape_all()
