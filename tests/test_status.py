"""営業状況取得（店舗特定・キャッシュ・ローカル時刻変換）のテスト"""
import logging
from datetime import datetime, timezone

import pytest

from open_status.services import places
from open_status.services.status import (
    lookup_status, build_hours, timezone_label, local_time, PlaceNotFound,
)

# 2026-10-19 (月) 15:00 UTC
NOW_UTC = datetime(2026, 10, 19, 15, 0, tzinfo=timezone.utc)


def weekday_periods(open_time="0900", close_time="1700"):
    return [
        {"open": {"day": d, "time": open_time}, "close": {"day": d, "time": close_time}}
        for d in range(1, 6)
    ]


def details(utc_offset=0, periods=None, **extra):
    result = {
        "place_id": "place-1",
        "name": "Corner Pharmacy",
        "formatted_address": "1 Main St",
        "utc_offset": utc_offset,
        "opening_hours": {"periods": weekday_periods() if periods is None else periods},
    }
    result.update(extra)
    return result


@pytest.fixture
def fake_places(monkeypatch):
    calls = {"search": 0, "details": 0}
    state = {"details": details(), "nearest": {"place_id": "place-1", "name": "Corner Pharmacy", "vicinity": "1 Main St"}}

    def find_nearest_place(query, lat, lng):
        calls["search"] += 1
        return state["nearest"]

    def place_details(place_id):
        calls["details"] += 1
        return state["details"]

    monkeypatch.setattr(places, "find_nearest_place", find_nearest_place)
    monkeypatch.setattr(places, "place_details", place_details)
    return calls, state


class TestTimezone:
    @pytest.mark.parametrize("offset,label", [
        (None, "UTC"), (0, "UTC"), (540, "UTC+9"), (-300, "UTC-5"), (330, "UTC+5:30"), (-210, "UTC-3:30"),
    ])
    def test_label(self, offset, label):
        assert timezone_label(offset) == label

    def test_local_time_shifts_day(self):
        # UTC 月曜 15:00 → UTC+10 は月曜 25:00 = 火曜 01:00
        assert local_time(NOW_UTC, 600).weekday() == 1


class TestBuildHours:
    def test_open_with_close_label(self):
        hours = build_hours(details(), datetime(2026, 10, 19, 10, 0))
        assert hours["is_open"] is True
        assert hours["open_now"] is True
        assert hours["closes_at"] == "5:00 PM"
        assert hours["opens_at"] is None
        assert len(hours["weekday_text"]) == 7
        assert hours["weekday_text"][1] == "Monday: 9:00 AM – 5:00 PM"

    def test_provider_open_now_mismatch_is_logged(self, caplog):
        data = details()
        data["opening_hours"]["open_now"] = False
        with caplog.at_level(logging.INFO, logger="open_status.services.status"):
            hours = build_hours(data, datetime(2026, 10, 19, 10, 0))
        assert hours["is_open"] is True
        messages = [r.getMessage() for r in caplog.records]
        assert any("place-1 at Monday 10:00" in m for m in messages)

    def test_friday_evening_opens_monday(self):
        hours = build_hours(details(), datetime(2026, 10, 23, 18, 0))
        assert hours["is_open"] is False
        assert hours["opens_at"] == "9:00 AM Monday"
        assert hours["closes_at"] is None

    def test_no_periods_is_hours_unknown(self):
        hours = build_hours({"opening_hours": {"open_now": True, "weekday_text": ["x"]}}, datetime(2026, 10, 19))
        assert hours == {"is_open": False, "open_now": False, "weekday_text": []}

    def test_no_opening_hours(self):
        hours = build_hours({}, datetime(2026, 10, 19))
        assert hours["weekday_text"] == []

    def test_all_periods_malformed_is_hours_unknown(self):
        hours = build_hours(details(periods=[{"open": {"day": 9, "time": "0900"}}]), datetime(2026, 10, 19))
        assert hours["is_open"] is False
        assert hours["weekday_text"] == []


class TestLookup:
    def test_by_query_then_cached(self, db, fake_places):
        calls, _ = fake_places
        data, hit = lookup_status(db, query="pharmacy", lat=40.0, lng=-74.0, now_utc=NOW_UTC)
        assert hit is False
        assert data["place_id"] == "place-1"
        assert data["place_name"] == "Corner Pharmacy"
        assert data["business_status"] == "OPERATIONAL"
        assert data["timezone"] == "UTC"
        assert data["is_open"] is True
        assert data["closes_at"] == "5:00 PM"

        data2, hit2 = lookup_status(db, query="pharmacy", lat=40.0, lng=-74.0, now_utc=NOW_UTC)
        assert hit2 is True
        assert data2 == data
        assert calls == {"search": 1, "details": 1}

    def test_local_time_from_utc_offset(self, db, fake_places):
        _, state = fake_places
        # UTC 15:00 → UTC-8 は 07:00（開店前）
        state["details"] = details(utc_offset=-480)
        data, _ = lookup_status(db, place_id="place-1", now_utc=NOW_UTC)
        assert data["is_open"] is False
        assert data["opens_at"] == "9:00 AM"
        assert data["timezone"] == "UTC-8"

    def test_not_found_by_search(self, db, fake_places):
        _, state = fake_places
        state["nearest"] = None
        with pytest.raises(PlaceNotFound):
            lookup_status(db, query="nothing", lat=0.0, lng=0.0, now_utc=NOW_UTC)

    def test_not_found_by_details(self, db, fake_places):
        _, state = fake_places
        state["details"] = None
        with pytest.raises(PlaceNotFound):
            lookup_status(db, place_id="missing", now_utc=NOW_UTC)

    def test_missing_params(self, db):
        with pytest.raises(ValueError):
            lookup_status(db, query="x")

    def test_business_status_passthrough(self, db, fake_places):
        _, state = fake_places
        state["details"] = details(business_status="CLOSED_TEMPORARILY")
        data, _ = lookup_status(db, place_id="place-1", now_utc=NOW_UTC)
        assert data["business_status"] == "CLOSED_TEMPORARILY"
