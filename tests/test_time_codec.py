"""
Tests for the time and duration codec.
"""

import pytest

from spaslotfinder.domain.exceptions import ParseError
from spaslotfinder.domain.models import OperatingWindow
from spaslotfinder.domain.time_codec import ARABIC_MARKERS, LATIN_MARKERS, TimeCodec


@pytest.fixture
def codec() -> TimeCodec:
    return TimeCodec(OperatingWindow())


class TestParseTimeOfDay:
    """Tests for TimeCodec.parse_time_of_day."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("09:00 ص", 0),
            ("02:00 م", 300),
            ("9:00 AM", 0),
            ("2:00 PM", 300),
            ("2:30 pm", 330),
            ("12:00 م", 180),
            ("12:30 PM", 210),
            ("14:00", 300),
            ("  06:45 م  ", 585),
        ],
    )
    def test_parses_both_alphabets(self, codec, text, expected):
        """Test times in Arabic, Latin and 24-hour notation."""
        assert codec.parse_time_of_day(text) == expected

    def test_midnight_morning_marker(self, codec):
        """Test 12 with a morning marker means hour zero."""
        assert codec.parse_time_of_day("12:15 AM") == 15 - 540
        assert codec.parse_time_of_day("12:00 ص") == -540

    def test_outside_window_is_not_clamped(self, codec):
        """Test times before opening or after closing are returned as-is."""
        assert codec.parse_time_of_day("08:00 ص") == -60
        assert codec.parse_time_of_day("08:00 م") == 660

    def test_afternoon_marker_wins(self, codec):
        """Test a string carrying both markers is read as afternoon."""
        assert codec.parse_time_of_day("03:00 PM ص") == 360

    @pytest.mark.parametrize("text", ["", "noon", "9 AM", "25:00", "9:75 AM"])
    def test_malformed_time_raises(self, codec, text):
        """Test that unmatched input fails instead of defaulting to zero."""
        with pytest.raises(ParseError) as exc_info:
            codec.parse_time_of_day(text)

        assert exc_info.value.text == text

    @pytest.mark.parametrize("text", ["123:45", "09:000 ص", "13:00 PM", "00:30 ص", "14:00 م"])
    def test_extra_digits_and_bad_marker_hours_raise(self, codec, text):
        """Test extra digits and marker hours outside 1-12 are rejected."""
        with pytest.raises(ParseError):
            codec.parse_time_of_day(text)


class TestFormatMinutes:
    """Tests for TimeCodec.format_minutes."""

    def test_twelve_hour_arabic(self, codec):
        assert codec.format_minutes(0) == "09:00 ص"
        assert codec.format_minutes(180) == "12:00 م"
        assert codec.format_minutes(300) == "02:00 م"
        assert codec.format_minutes(585) == "06:45 م"

    def test_twelve_hour_latin(self):
        codec = TimeCodec(OperatingWindow(), markers=LATIN_MARKERS)

        assert codec.format_minutes(0) == "09:00 AM"
        assert codec.format_minutes(330) == "02:30 PM"

    def test_twenty_four_hour(self, codec):
        assert codec.format_minutes(0, use_24_hour=True) == "09:00"
        assert codec.format_minutes(300, use_24_hour=True) == "14:00"

    def test_midnight_renders_as_twelve(self):
        """Test hour zero is shown as 12 with the morning marker."""
        codec = TimeCodec(OperatingWindow(day_start_minutes=0, day_end_minutes=120))

        assert codec.format_minutes(0) == "12:00 ص"

    @pytest.mark.parametrize("use_24_hour", [True, False])
    @pytest.mark.parametrize("markers", [ARABIC_MARKERS, LATIN_MARKERS])
    def test_round_trip_on_grid(self, use_24_hour, markers):
        """Test format then parse returns every on-grid minute."""
        window = OperatingWindow()
        codec = TimeCodec(window, markers=markers)

        for minutes in range(0, window.length_minutes, 15):
            text = codec.format_minutes(minutes, use_24_hour)
            assert codec.parse_time_of_day(text) == minutes, text

    def test_hour_label(self, codec):
        assert codec.hour_label(9) == "9 ص"
        assert codec.hour_label(12) == "12 م"
        assert codec.hour_label(14) == "2 م"
        assert codec.hour_label(0) == "12 ص"


class TestParseDuration:
    """Tests for TimeCodec.parse_duration."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("30 mins", 30),
            ("45 minutes", 45),
            ("90 MIN", 90),
            ("30 دقيقة", 30),
            ("1 hr", 60),
            ("1.5 hr", 90),
            ("2 hours", 120),
            (".5 hr", 30),
        ],
    )
    def test_parses_catalog_values(self, text, expected):
        assert TimeCodec.parse_duration(text) == expected

    @pytest.mark.parametrize("text", ["", "hr", "mins", "abc"])
    def test_missing_number_raises(self, text):
        with pytest.raises(ParseError):
            TimeCodec.parse_duration(text)

    def test_zero_duration_raises(self):
        with pytest.raises(ParseError, match="positive"):
            TimeCodec.parse_duration("0 mins")

    def test_non_whole_minutes_raise(self):
        """Test hour values that are not minute-exact are reported, not truncated."""
        with pytest.raises(ParseError, match="whole number of minutes"):
            TimeCodec.parse_duration("1.01 hr")

    @pytest.mark.parametrize(
        "minutes, expected",
        [(30, "30 mins"), (45, "45 mins"), (60, "1 hr"), (75, "75 mins"), (90, "1.5 hr"), (600, "10 hr")],
    )
    def test_format_duration(self, minutes, expected):
        assert TimeCodec.format_duration(minutes) == expected
