"""Tests for short course / long course time conversion."""

import pytest

from meetsync.calculation.time_converter import (
    TURN_FACTORS,
    Converted,
    Unchanged,
    convert_lc_to_sc,
    convert_sc_to_lc,
    format_swim_time,
    get_time_for_course,
    get_turn_factor,
    lc_to_sc,
    parse_swim_time,
    sc_to_lc,
)
from meetsync.models.enums import Course, Stroke

# A realistic time for each distance, slow enough for every stroke
TYPICAL_TIMES = {50: 30.0, 100: 60.0, 200: 130.0, 400: 280.0, 800: 560.0, 1500: 1000.0}

SUPPORTED_EVENTS = [
    (distance, stroke) for distance, strokes in TURN_FACTORS.items() for stroke in strokes
]


class TestScToLc:
    """Tests for 25m -> 50m conversion."""

    def test_100_free(self):
        """60.00 SC 100 Free is about 61.38 LC."""
        lc = sc_to_lc(60.0, 100, "FREE")
        assert lc > 60.0
        assert lc == pytest.approx(61.38, abs=0.1)

    def test_200_breast(self):
        """Breaststroke carries the largest conversion gap."""
        lc = sc_to_lc(150.0, 200, "BREAST")
        assert lc > 150.0
        assert lc == pytest.approx(153.5, abs=1.0)

    def test_50_free_has_small_difference(self):
        """A single turn gives well under a second at 50m."""
        lc = sc_to_lc(30.0, 50, "FREE")
        assert 0.5 < lc - 30.0 < 1.0

    def test_400_im(self):
        lc = sc_to_lc(300.0, 400, Stroke.IM)
        assert lc > 300.0
        assert lc == pytest.approx(305.0, abs=2.0)

    def test_unsupported_event_is_identity(self):
        """400m Breaststroke has no turn factor."""
        assert sc_to_lc(120.0, 400, "BREAST") == 120.0

    def test_none_time(self):
        assert sc_to_lc(None, 100, "FREE") is None

    @pytest.mark.parametrize("value", [0, -1])
    def test_non_positive_time_is_returned(self, value):
        assert sc_to_lc(value, 100, "FREE") == value


class TestLcToSc:
    """Tests for 50m -> 25m conversion."""

    def test_100_free(self):
        """60.00 LC 100 Free is about 58.59 SC."""
        sc = lc_to_sc(60.0, 100, "FREE")
        assert sc < 60.0
        assert sc == pytest.approx(58.59, abs=0.1)

    def test_200_fly(self):
        sc = lc_to_sc(140.0, 200, "FLY")
        assert sc < 140.0
        assert sc == pytest.approx(138.0, abs=1.0)

    def test_1500_free_difference_is_large(self):
        """Many turns make the 1500m gap several seconds."""
        assert 1000.0 - lc_to_sc(1000.0, 1500, "FREE") > 5.0

    def test_unsupported_event_is_identity(self):
        """400m Backstroke has no turn factor."""
        assert lc_to_sc(120.0, 400, "BACK") == 120.0

    def test_none_time(self):
        assert lc_to_sc(None, 100, "FREE") is None

    def test_correction_larger_than_time_falls_back(self):
        """An impossibly fast 1500 would go negative, so the input is kept."""
        result = convert_lc_to_sc(10.0, 1500, "FREE")
        assert isinstance(result, Unchanged)
        assert result.value == 10.0


class TestConversionProperties:
    """Properties that hold for every event with a turn factor."""

    @pytest.mark.parametrize("distance,stroke", SUPPORTED_EVENTS)
    def test_sc_lc_sc_round_trip(self, distance, stroke):
        original = TYPICAL_TIMES[distance]
        assert lc_to_sc(sc_to_lc(original, distance, stroke), distance, stroke) == pytest.approx(
            original, abs=0.01
        )

    @pytest.mark.parametrize("distance,stroke", SUPPORTED_EVENTS)
    def test_lc_sc_lc_round_trip(self, distance, stroke):
        original = TYPICAL_TIMES[distance]
        assert sc_to_lc(lc_to_sc(original, distance, stroke), distance, stroke) == pytest.approx(
            original, abs=0.01
        )

    @pytest.mark.parametrize("distance,stroke", SUPPORTED_EVENTS)
    def test_direction_of_conversion(self, distance, stroke):
        """LC is never faster than SC; SC is never slower than LC."""
        t = TYPICAL_TIMES[distance]
        assert sc_to_lc(t, distance, stroke) >= t
        assert lc_to_sc(t, distance, stroke) <= t

    @pytest.mark.parametrize(
        "distance,stroke",
        [(400, "BACK"), (800, "IM"), (1500, "BREAST"), (25, "FREE"), (100, "IM")],
    )
    def test_missing_turn_factor_is_identity_both_ways(self, distance, stroke):
        assert get_turn_factor(distance, stroke) is None
        assert lc_to_sc(100.0, distance, stroke) == 100.0
        assert sc_to_lc(100.0, distance, stroke) == 100.0

    def test_variant_reports_conversion(self):
        assert isinstance(convert_sc_to_lc(60.0, 100, "FREE"), Converted)
        unchanged = convert_sc_to_lc(60.0, 400, "BACK")
        assert isinstance(unchanged, Unchanged)
        assert "turn factor" in unchanged.reason


class TestTurnFactors:
    def test_50_and_100_share_factors(self):
        assert TURN_FACTORS[50] == TURN_FACTORS[100]

    def test_only_200_and_400_have_im(self):
        assert [d for d, strokes in TURN_FACTORS.items() if Stroke.IM in strokes] == [200, 400]

    def test_lookup_accepts_lowercase_names(self):
        assert get_turn_factor(200, "im") == 49.7


class TestGetTimeForCourse:
    def test_lc_requested(self):
        assert get_time_for_course(60.0, 59.0, "LC") == 60.0

    def test_sc_requested(self):
        assert get_time_for_course(60.0, 59.0, Course.SC) == 59.0

    def test_defaults_to_lc(self):
        assert get_time_for_course(60.0, 59.0, None) == 60.0

    def test_falls_back_to_sc_when_lc_missing(self):
        assert get_time_for_course(None, 59.0, None) == 59.0


class TestSwimTimeText:
    @pytest.mark.parametrize("text,expected", [
        ("1:02.34", 62.34),
        ("62.34", 62.34),
        ("16:40.00", 1000.0),
        ("125.5", 125.5),
        ("29.9", 29.9),
    ])
    def test_parse(self, text, expected):
        assert parse_swim_time(text) == pytest.approx(expected)

    @pytest.mark.parametrize("text", ["", "fast", "1:xx", "-3"])
    def test_parse_rejects_garbage(self, text):
        with pytest.raises(ValueError):
            parse_swim_time(text)

    @pytest.mark.parametrize("seconds,expected", [
        (62.34, "1:02.34"),
        (29.9, "29.90"),
        (1000.0, "16:40.00"),
    ])
    def test_format(self, seconds, expected):
        assert format_swim_time(seconds) == expected
