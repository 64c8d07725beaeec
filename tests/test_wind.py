"""
Tests for wind extraction and legality.
"""

import pytest

from athle_timeline.models import RawPerformanceEntry, WindReading
from athle_timeline.wind import (
    WIND_LIMIT,
    extract_wind,
    is_legal,
    parse_wind_value,
    read_wind,
)


def make_entry(**kwargs) -> RawPerformanceEntry:
    defaults = {"discipline": "100m", "date_token": "2025-06-01", "raw_performance": "10''52"}
    defaults.update(kwargs)
    return RawPerformanceEntry(**defaults)


class TestParseWindValue:
    """Explicit wind fields accept numbers and loose strings."""

    def test_numbers(self):
        assert parse_wind_value(1.5) == pytest.approx(1.5)
        assert parse_wind_value(0) == pytest.approx(0.0)

    def test_strings(self):
        assert parse_wind_value("+2.3") == pytest.approx(2.3)
        assert parse_wind_value("-0,4 m/s") == pytest.approx(-0.4)
        assert parse_wind_value("+ 1,1") == pytest.approx(1.1)

    @pytest.mark.parametrize("raw", [None, "", "NWI", float("nan")])
    def test_absent(self, raw):
        assert parse_wind_value(raw) is None


class TestExtractWind:
    """Wind is looked up in the field, then the text, then meeting notes."""

    def test_explicit_field(self):
        assert extract_wind(make_entry(wind="+2.3")) == pytest.approx(2.3)

    def test_explicit_field_takes_precedence(self):
        entry = make_entry(wind="+1.0", raw_performance="10''52 (+3.0)")
        assert extract_wind(entry) == pytest.approx(1.0)

    def test_inline_meters_per_second(self):
        entry = make_entry(raw_performance="10''52 +2.4 m/s")
        assert extract_wind(entry) == pytest.approx(2.4)

    def test_signed_number_in_text(self):
        entry = make_entry(raw_performance="10''52 (+1,8)")
        assert extract_wind(entry) == pytest.approx(1.8)

    def test_vent_word_in_text(self):
        entry = make_entry(raw_performance="10''52 vent 0,9")
        assert extract_wind(entry) == pytest.approx(0.9)

    def test_chrono_digits_are_not_wind(self):
        assert extract_wind(make_entry(raw_performance="1'52''34")) is None
        assert extract_wind(make_entry(raw_performance="10.52")) is None

    def test_meeting_marker(self):
        entry = make_entry(meeting="Finale (N1), vent +2,1")
        assert extract_wind(entry) == pytest.approx(2.1)

    def test_notes_marker(self):
        entry = make_entry(notes="PB ! vent: -1.0")
        assert extract_wind(entry) == pytest.approx(-1.0)

    def test_no_wind_anywhere(self):
        assert extract_wind(make_entry(meeting="Meeting de Metz")) is None

    def test_read_wind(self):
        assert read_wind(make_entry(wind=1.2)) == WindReading(meters_per_second=1.2)
        assert read_wind(make_entry()) is None


class TestIsLegal:
    """Marks above +2.0 m/s and invalid marks are not legal."""

    def test_limit_is_inclusive(self):
        assert WIND_LIMIT == 2.0
        assert is_legal(make_entry(wind="+2.0"))

    def test_tailwind_over_limit(self):
        assert not is_legal(make_entry(wind="+2.1"))
        assert not is_legal(make_entry(wind="+2.3"))

    def test_headwind_is_legal(self):
        assert is_legal(make_entry(wind="-3.0"))

    def test_missing_wind_is_legal(self):
        assert is_legal(make_entry())

    def test_invalid_mark_is_never_legal(self):
        assert not is_legal(make_entry(raw_performance="DNF", wind="0.0"))

    def test_custom_limit(self):
        assert is_legal(make_entry(wind="+2.3"), limit=4.0)

    def test_wind_reading_legality(self):
        assert WindReading(2.0).is_legal()
        assert not WindReading(2.01).is_legal()
