"""
Tests for date normalization.
"""

from datetime import date

import pytest

from athle_timeline.dates import normalize_month, to_iso_date, to_timestamp


class TestToIsoDate:
    """Federation and ISO tokens resolve to calendar dates."""

    def test_french_abbreviated_month(self):
        assert to_iso_date("18 janv.", 2025) == "2025-01-18"

    def test_iso_datetime_is_truncated(self):
        assert to_iso_date("2025-02-16T18:30:00.000Z") == "2025-02-16"

    def test_unknown_month(self):
        assert to_iso_date("32 foo", 2025) is None

    @pytest.mark.parametrize(
        "token, expected",
        [
            ("3 Févr.", "2025-02-03"),
            ("15 août", "2025-08-15"),
            ("1er mai", "2025-05-01"),
            ("7 sept", "2025-09-07"),
            ("24  DÉC.", "2025-12-24"),
            ("9 juillet", "2025-07-09"),
        ],
    )
    def test_month_variants(self, token, expected):
        assert to_iso_date(token, 2025) == expected

    def test_explicit_year_wins_over_hint(self):
        assert to_iso_date("18 janv. 2023", 2025) == "2023-01-18"

    def test_current_year_without_hint(self):
        assert to_iso_date("18 janv.") == f"{date.today().year}-01-18"

    def test_numeric_dates(self):
        assert to_iso_date("18/01/2025") == "2025-01-18"
        assert to_iso_date("18/01/25") == "2025-01-18"

    @pytest.mark.parametrize("token", ["30 févr.", "32 janv.", "2025-13-01", "", None, "janv."])
    def test_impossible_or_empty(self, token):
        assert to_iso_date(token, 2025) is None


def test_normalize_month_ignores_accents_and_case():
    assert normalize_month("Févr.") == 2
    assert normalize_month("AOÛT") == 8
    assert normalize_month("brumaire") is None


def test_timestamp_is_noon_utc():
    assert to_timestamp("1970-01-01") == 12 * 3600 * 1000
    assert to_timestamp("2025-01-19") - to_timestamp("2025-01-18") == 24 * 3600 * 1000
