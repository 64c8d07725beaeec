"""
Tests for discipline classification.
"""

import pytest

from athle_timeline.disciplines import (
    METRICS,
    classify,
    estimate_distance_meters,
    normalize_label,
)
from athle_timeline.models import Direction, MetricKind


class TestClassify:
    """Labels map to a metric kind and comparison direction."""

    @pytest.mark.parametrize(
        "label, kind",
        [
            ("100m", MetricKind.TIME_SHORT),
            ("60m (Salle)", MetricKind.TIME_SHORT),
            ("110m Haies", MetricKind.TIME_SHORT),
            ("400m", MetricKind.TIME_SHORT),
            ("800m", MetricKind.TIME_SHORT),
            ("4x100m", MetricKind.TIME_SHORT),
            ("1500m", MetricKind.TIME_LONG),
            ("3000m Steeple", MetricKind.TIME_LONG),
            ("4x400m", MetricKind.TIME_LONG),
            ("10 km", MetricKind.TIME_LONG),
            ("10 000m", MetricKind.TIME_LONG),
            ("3 000m Steeple", MetricKind.TIME_LONG),
            ("1 500m", MetricKind.TIME_LONG),
            ("Cross court", MetricKind.TIME_LONG),
            ("1 mile", MetricKind.TIME_LONG),
            ("Semi-Marathon", MetricKind.TIME_MARATHON),
            ("Marathon", MetricKind.TIME_MARATHON),
            ("Saut en longueur", MetricKind.DISTANCE),
            ("Triple saut", MetricKind.DISTANCE),
            ("Saut à la perche", MetricKind.DISTANCE),
            ("Lancer du poids (7,26 kg)", MetricKind.DISTANCE),
            ("Javelot", MetricKind.DISTANCE),
            ("Marteau", MetricKind.DISTANCE),
            ("Décathlon", MetricKind.POINTS),
            ("Heptathlon", MetricKind.POINTS),
        ],
    )
    def test_kinds(self, label, kind):
        assert classify(label).kind is kind

    def test_time_kinds_are_lower_is_better(self):
        for label in ("100m", "1500m", "Marathon"):
            assert classify(label).direction is Direction.LOWER

    def test_field_and_combined_events_are_higher_is_better(self):
        assert classify("Hauteur").direction is Direction.HIGHER
        assert classify("Pentathlon").direction is Direction.HIGHER

    def test_unknown_label_defaults_to_short_time(self):
        metric = classify("Quidditch")
        assert metric.kind is MetricKind.TIME_SHORT
        assert metric.direction is Direction.LOWER

    @pytest.mark.parametrize("label", [None, "", "   "])
    def test_missing_label_defaults_to_short_time(self, label):
        assert classify(label) is METRICS[MetricKind.TIME_SHORT]

    def test_metric_formats_values(self):
        assert classify("100m").format_value(10.5) == "10.50 s"
        assert classify("Longueur").format_value(7.6, "compact") == "7.60"

    def test_delta_thresholds(self):
        assert classify("100m").delta_threshold == pytest.approx(0.01)
        assert classify("5000m").delta_threshold == pytest.approx(0.1)
        assert classify("Marathon").delta_threshold == pytest.approx(1.0)
        assert classify("Longueur").delta_threshold == pytest.approx(0.01)
        assert classify("Décathlon").delta_threshold == pytest.approx(5.0)


class TestEstimateDistance:
    """Race distances are read from labels."""

    def test_relay(self):
        assert estimate_distance_meters("4x100m") == 400

    def test_meters_and_kilometers(self):
        assert estimate_distance_meters("800m") == 800
        assert estimate_distance_meters("10 km") == 10000
        assert estimate_distance_meters("21,1 km") == pytest.approx(21100)

    def test_thousands_separator(self):
        assert estimate_distance_meters("10 000m") == 10000
        assert estimate_distance_meters("3 000m Steeple") == 3000

    def test_named_road_races(self):
        assert estimate_distance_meters("Semi-marathon") == pytest.approx(21097.5)
        assert estimate_distance_meters("Marathon") == pytest.approx(42195)

    def test_field_event_has_no_distance(self):
        assert estimate_distance_meters("Longueur") is None


def test_normalize_label_strips_accents():
    assert normalize_label("  Décathlon ") == "decathlon"
    assert normalize_label("Saut à la Perche") == "saut a la perche"
