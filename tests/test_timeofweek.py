"""曜日+分 の時刻値のテスト"""
from datetime import datetime
import pytest

from open_status.services.timeofweek import TimeOfWeek, InvalidTimeError, parse_clock


class TestParseClock:
    @pytest.mark.parametrize("value,expected", [
        ("0000", 0),
        ("0930", 570),
        ("1200", 720),
        ("2359", 1439),
    ])
    def test_valid(self, value, expected):
        assert parse_clock(value) == expected

    @pytest.mark.parametrize("value", ["", "930", "09:30", "2400", "1260", "abcd", None, 930])
    def test_invalid(self, value):
        with pytest.raises(InvalidTimeError):
            parse_clock(value)


class TestTimeOfWeek:
    def test_parse(self):
        t = TimeOfWeek.parse(5, "2200")
        assert (t.day, t.minute) == (5, 1320)
        assert t.day_name == "Friday"
        assert str(t) == "Friday 22:00"

    @pytest.mark.parametrize("day,minute", [(-1, 0), (7, 0), (0, -1), (0, 1440), (True, 0), ("1", 0)])
    def test_out_of_range(self, day, minute):
        with pytest.raises(InvalidTimeError):
            TimeOfWeek(day, minute)

    def test_invalid_time_error_is_value_error(self):
        with pytest.raises(ValueError):
            TimeOfWeek.parse(1, "99")

    def test_forward_to_wraps_week(self):
        sat_night = TimeOfWeek(6, 23 * 60)
        sun_morning = TimeOfWeek(0, 60)
        assert sat_night.forward_to(sun_morning) == 120
        assert sun_morning.forward_to(sat_night) == 7 * 1440 - 120
        assert sat_night.forward_to(sat_night) == 0

    def test_from_datetime_sunday_is_zero(self):
        # 2026-10-18 は日曜日
        assert TimeOfWeek.from_datetime(datetime(2026, 10, 18, 8, 15)) == TimeOfWeek(0, 495)
        assert TimeOfWeek.from_datetime(datetime(2026, 10, 24, 23, 59)) == TimeOfWeek(6, 1439)

    def test_ordering(self):
        assert TimeOfWeek(1, 0) < TimeOfWeek(1, 1) < TimeOfWeek(2, 0)
