"""
Tests for the athle.fr results page parsing. No browser is started.
"""

import csv

from athle_timeline.scraper import (
    CSV_FIELDS,
    AthleScraper,
    ScraperConfig,
    build_payload,
    clean_text,
    find_max_page,
    parse_results_table,
    rows_by_discipline,
)

RESULTS_HTML = """
<table id="res_athlete">
  <thead><tr><th>Date</th><th>Epreuve</th></tr></thead>
  <tbody>
    <tr>
      <td>18 Janv.</td><td>60m</td><td>7''12</td><td></td><td>Finale</td>
      <td>1er</td><td>N1</td><td>1050</td>
      <td><a href="/competitions/abc123">Metz</a></td>
    </tr>
    <tr class="detail-row"><td colspan="9">Details</td></tr>
    <tr>
      <td>25&nbsp;Mai</td><td>100m</td><td>10''50</td><td>+2.5</td><td>Série</td>
      <td>2</td><td>IR</td><td></td><td>Lyon</td>
    </tr>
    <tr><td>incomplete</td><td>row</td></tr>
  </tbody>
</table>
<div class="pagination">
  <a data-page="2">2</a>
  <a data-page="3">3</a>
  <a href="?seq=1&amp;annee=2025&amp;page=5">5</a>
</div>
"""


class TestParseResultsTable:
    """Result rows are read cell by cell."""

    def test_rows(self):
        records = parse_results_table(RESULTS_HTML, 2025)
        assert len(records) == 2

        first = records[0]
        assert first["date"] == "18 Janv."
        assert first["discipline"] == "60m"
        assert first["performance"] == "7''12"
        assert first["wind"] == ""
        assert first["round"] == "Finale"
        assert first["place"] == "1er"
        assert first["points"] == "1050"
        assert first["location"] == "Metz"
        assert first["competition_url"] == "https://www.athle.fr/competitions/abc123"
        assert first["year"] == "2025"

    def test_non_breaking_spaces(self):
        second = parse_results_table(RESULTS_HTML)[1]
        assert second["date"] == "25 Mai"
        assert second["wind"] == "+2.5"
        assert second["competition_url"] == ""
        assert second["year"] == ""

    def test_ajax_fragment_without_table_id(self):
        fragment = "<table><tr>" + "".join(f"<td>{v}</td>" for v in range(9)) + "</tr></table>"
        records = parse_results_table(fragment)
        assert len(records) == 1
        assert records[0]["discipline"] == "1"

    def test_empty_page(self):
        assert parse_results_table("<html><body>Aucun résultat</body></html>") == []


def test_find_max_page():
    assert find_max_page(RESULTS_HTML) == 5
    assert find_max_page("<table></table>") == 1


def test_clean_text():
    assert clean_text("  7''12   (+1.2) ") == "7''12 (+1.2)"
    assert clean_text(None) == ""


def test_build_payload():
    records = parse_results_table(RESULTS_HTML, 2025)
    payload = build_payload("3134018", records)
    assert payload["summary"] == {"athleteId": "3134018", "disciplineCount": 2, "entryCount": 2}
    assert list(payload["disciplines"]) == ["60m", "100m"]
    assert rows_by_discipline(records)["100m"][0]["performance"] == "10''50"


def test_save_to_csv(tmp_path):
    config = ScraperConfig(athlete_id="3134018", output_dir=tmp_path, years=[2025])
    scraper = AthleScraper(config)

    path = scraper._save_to_csv(parse_results_table(RESULTS_HTML, 2025), 2025)

    assert path.name == "3134018_2025_results.csv"
    with open(path, encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        assert reader.fieldnames == CSV_FIELDS
        rows = list(reader)
    assert [r["discipline"] for r in rows] == ["60m", "100m"]
