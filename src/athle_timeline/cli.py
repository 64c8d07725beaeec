"""Command-line interface for athle-timeline."""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

from .scraper import scrape_athlete_results
from .timeline import ALL_YEARS, CONDENSE_THRESHOLD, TimelineConfig
from .transformer import (
    entries_from_rows,
    generate_ndjson,
    load_rows,
    summarize_disciplines,
    transform_file,
    write_json,
)
from .wind import WIND_LIMIT


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_years(years_str: str) -> list[int]:
    """Parse a year range string like '2015-2025' or '2020,2021,2023' into a list of ints."""
    if "-" in years_str and "," not in years_str:
        parts = years_str.split("-")
        return list(range(int(parts[0]), int(parts[1]) + 1))
    return [int(y.strip()) for y in years_str.split(",")]


def _timeline_config(args: argparse.Namespace) -> TimelineConfig:
    """Build the engine thresholds from command-line flags."""
    return TimelineConfig(wind_limit=args.wind_limit, condense_threshold=args.condense_threshold)


def cmd_scrape(args: argparse.Namespace) -> int:
    """Run the scraper command."""
    output_dir = Path(args.output)
    years = parse_years(args.years)

    logging.info(f"Scraping results for athlete: {args.athlete}")
    logging.info(f"Years: {years[0]}-{years[-1]}")

    try:
        files = scrape_athlete_results(
            athlete_id=args.athlete,
            output_dir=output_dir,
            years=years,
            delay=args.delay,
            headless=not args.show_browser,
            save_debug_html=args.debug_html,
        )

        logging.info(f"Created {len(files)} files:")
        for f in files:
            logging.info(f"  - {f}")

        return 0

    except Exception as e:
        logging.error(f"Scraping failed: {e}")
        return 1


def cmd_timeline(args: argparse.Namespace) -> int:
    """Build the progression report of one discipline."""
    input_path = Path(args.input)
    if not input_path.is_file():
        logging.error(f"Input file does not exist: {input_path}")
        return 1

    output_path = Path(args.output) if args.output else None

    try:
        report = transform_file(
            input_path=input_path,
            discipline=args.discipline,
            selected_year=args.year,
            output_path=output_path,
            pretty=not args.minify,
            config=_timeline_config(args),
        )
    except Exception as e:
        logging.error(f"Timeline failed: {e}")
        return 1

    view = report["timeline"]
    if not view["points"]:
        logging.info(f"No data for {args.discipline}")
        return 0

    suffix = " (best per year)" if view["isCondensed"] else ""
    logging.info(f"{args.discipline} progression{suffix}:")
    for point, label in zip(view["points"], report["labels"]):
        logging.info(f"  {point['date']}  {label}")
    logging.info(f"  Record: {report['record']}  Season: {report['seasonBest']}  Trend: {report['trend']}")
    return 0


def cmd_summary(args: argparse.Namespace) -> int:
    """Summarize records and season bests for every discipline."""
    input_path = Path(args.input)
    if not input_path.is_file():
        logging.error(f"Input file does not exist: {input_path}")
        return 1

    try:
        entries = entries_from_rows(load_rows(input_path))
        highlights = summarize_disciplines(entries, args.limit, _timeline_config(args))

        for item in highlights:
            logging.info(
                f"  {item['discipline']}: record {item['record']} ({item['recordDate']}),"
                f" season {item['seasonYear']} {item['seasonBest']}"
                f" [{item['progressBand']}]"
            )

        if args.output:
            write_json(highlights, Path(args.output), pretty=not args.minify)

        if args.ndjson:
            generate_ndjson(highlights, Path(args.ndjson))

        return 0

    except Exception as e:
        logging.error(f"Summary failed: {e}")
        return 1


def cmd_all(args: argparse.Namespace) -> int:
    """Run scrape + summary."""
    result = cmd_scrape(args)
    if result != 0:
        return result

    args.input = str(Path(args.output) / f"{args.athlete}_results.json")
    args.output = args.summary_output
    return cmd_summary(args)


def _add_timeline_options(parser: argparse.ArgumentParser) -> None:
    """Add the wind limit and condensation options."""
    parser.add_argument(
        "--wind-limit",
        type=float,
        default=WIND_LIMIT,
        help=f"Maximum legal wind in m/s (default: {WIND_LIMIT})",
    )
    parser.add_argument(
        "--condense-threshold",
        type=int,
        default=CONDENSE_THRESHOLD,
        help=f"Show one mark per year above this many days (default: {CONDENSE_THRESHOLD})",
    )


def _add_scrape_options(parser: argparse.ArgumentParser) -> None:
    """Add the athlete, years and browser options shared by scrape and all."""
    parser.add_argument("--athlete", "-a", required=True, help="athle.fr athlete id")
    parser.add_argument(
        "--years",
        "-y",
        default=str(date.today().year),
        help="Year range (e.g., 2020-2025) or comma-separated (e.g., 2022,2024)",
    )
    parser.add_argument(
        "--delay",
        "-d",
        type=float,
        default=2.0,
        help="Delay between requests in seconds (default: 2.0)",
    )
    parser.add_argument(
        "--show-browser",
        action="store_true",
        help="Show browser window (default: headless)",
    )
    parser.add_argument(
        "--debug-html",
        action="store_true",
        help="Save raw HTML pages for debugging",
    )


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Normalize athletics results into progression timelines",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Scrape an athlete's results
  athle-timeline scrape --athlete 3134018 --years 2022-2025 --output ./data

  # 100m progression, all years
  athle-timeline timeline --input ./data/3134018_results.json --discipline 100m

  # Long jump progression for 2024 only
  athle-timeline timeline --input ./data/3134018_results.json --discipline "Longueur" --year 2024

  # Records and season bests for every discipline
  athle-timeline summary --input ./data/3134018_results.json --limit 0 --output ./data/summary.json

  # Do both in one command
  athle-timeline all --athlete 3134018 --output ./data --summary-output ./data/summary.json
        """,
    )

    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Scrape command
    scrape_parser = subparsers.add_parser("scrape", help="Scrape results from athle.fr")
    _add_scrape_options(scrape_parser)
    scrape_parser.add_argument(
        "--output", "-o", default="./output", help="Output directory for CSV and JSON"
    )
    scrape_parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    scrape_parser.set_defaults(func=cmd_scrape)

    # Timeline command
    timeline_parser = subparsers.add_parser("timeline", help="Progression of one discipline")
    timeline_parser.add_argument("--input", "-i", required=True, help="Results CSV or JSON file")
    timeline_parser.add_argument("--discipline", required=True, help="Discipline label, e.g. 100m")
    timeline_parser.add_argument(
        "--year", default=ALL_YEARS, help="Year to show, or 'all' (default: all)"
    )
    timeline_parser.add_argument("--output", "-o", help="Write the report to this JSON file")
    timeline_parser.add_argument("--minify", "-m", action="store_true", help="Minify JSON output")
    _add_timeline_options(timeline_parser)
    timeline_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    timeline_parser.set_defaults(func=cmd_timeline)

    # Summary command
    summary_parser = subparsers.add_parser("summary", help="Records and season bests")
    summary_parser.add_argument("--input", "-i", required=True, help="Results CSV or JSON file")
    summary_parser.add_argument(
        "--limit", "-l", type=int, default=3, help="Number of disciplines, 0 for all (default: 3)"
    )
    summary_parser.add_argument("--output", "-o", help="Write the summary to this JSON file")
    summary_parser.add_argument("--ndjson", "-n", help="Write the summary to this NDJSON file")
    summary_parser.add_argument("--minify", "-m", action="store_true", help="Minify JSON output")
    _add_timeline_options(summary_parser)
    summary_parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    summary_parser.set_defaults(func=cmd_summary)

    # All command (scrape + summary)
    all_parser = subparsers.add_parser("all", help="Scrape and summarize in one step")
    _add_scrape_options(all_parser)
    all_parser.add_argument(
        "--output", "-o", default="./output", help="Output directory for CSV and JSON"
    )
    all_parser.add_argument(
        "--summary-output", default=None, help="Write the summary to this JSON file"
    )
    all_parser.add_argument(
        "--limit", "-l", type=int, default=0, help="Number of disciplines, 0 for all (default: 0)"
    )
    all_parser.add_argument("--ndjson", "-n", help="Write the summary to this NDJSON file")
    all_parser.add_argument("--minify", "-m", action="store_true", help="Minify JSON output")
    _add_timeline_options(all_parser)
    all_parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    all_parser.set_defaults(func=cmd_all)

    args = parser.parse_args()
    setup_logging(args.verbose)

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
