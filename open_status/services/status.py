"""営業状況の取得: 店舗特定 → 詳細取得 → ローカル時刻で判定

検索結果・詳細はキャッシュし、判定は毎回 schedule.resolve で計算し直す。
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from . import places
from .cache import get_cached_search, set_cached_search, get_cached_status, set_cached_status
from .schedule import ScheduleQuery, parse_periods, resolve, describe_transition, CLOSES, OPENS

logger = logging.getLogger(__name__)


class PlaceNotFound(Exception):
    """検索・詳細取得で店舗が見つからない"""


def timezone_label(utc_offset: Optional[int]) -> str:
    """utc_offset（分）→ "UTC+9" / "UTC-3:30" / "UTC" """
    if not utc_offset:
        return "UTC"
    sign = "+" if utc_offset >= 0 else "-"
    hours, minutes = divmod(abs(utc_offset), 60)
    return f"UTC{sign}{hours}" + (f":{minutes:02d}" if minutes else "")


def local_time(now_utc: datetime, utc_offset: Optional[int]) -> datetime:
    return now_utc + timedelta(minutes=utc_offset or 0)


def build_hours(details: dict, now_local: datetime) -> dict:
    """詳細データと店舗ローカル時刻から営業状況部分を組み立てる

    periods がなければ「営業時間不明」として isOpen=False, weekdayText=[]。
    """
    opening_hours = details.get("opening_hours") or {}
    periods = parse_periods(opening_hours.get("periods"))
    if not periods:
        return {"is_open": False, "open_now": False, "weekday_text": []}

    query = ScheduleQuery.from_datetime(now_local)
    result = resolve(periods, query)
    transition = result.next_transition

    provider_open = opening_hours.get("open_now")
    if provider_open is not None and provider_open != result.is_open_now:
        logger.info(
            f"open_now mismatch for {details.get('place_id')} at {query}: "
            f"provider={provider_open} computed={result.is_open_now}"
        )

    return {
        "is_open": result.is_open_now,
        "open_now": result.is_open_now,
        "closes_at": describe_transition(transition) if transition and transition.kind == CLOSES else None,
        "opens_at": describe_transition(transition) if transition and transition.kind == OPENS else None,
        "weekday_text": list(result.weekday_summary),
    }


def _resolve_place_id(db: Session, query: str, lat: float, lng: float) -> Tuple[str, bool]:
    cached = get_cached_search(db, query, lat, lng)
    if cached:
        return cached["place_id"], True

    nearest = places.find_nearest_place(query, lat, lng)
    if not nearest:
        raise PlaceNotFound(f'No "{query}" found nearby')
    set_cached_search(db, query, lat, lng, nearest)
    return nearest["place_id"], False


def _fetch_details(db: Session, place_id: str) -> Tuple[dict, bool]:
    cached = get_cached_status(db, place_id)
    if cached:
        return cached, True

    details = places.place_details(place_id)
    if not details:
        raise PlaceNotFound("Place not found")
    set_cached_status(db, place_id, details)
    return details, False


def lookup_status(
    db: Session,
    place_id: Optional[str] = None,
    query: Optional[str] = None,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    now_utc: Optional[datetime] = None,
) -> Tuple[dict, bool]:
    """営業状況を返す。(レスポンス用dict, キャッシュヒット有無)

    place_id があればそれを使い、なければ query+座標で最寄りの店舗を探す。
    """
    cache_hit = False
    if not place_id:
        if query is None or lat is None or lng is None:
            raise ValueError("Either place_id or query+lat+lng required")
        place_id, cache_hit = _resolve_place_id(db, query, lat, lng)

    details, details_hit = _fetch_details(db, place_id)
    cache_hit = cache_hit or details_hit

    now_utc = now_utc or datetime.now(timezone.utc)
    utc_offset = details.get("utc_offset")
    hours = build_hours(details, local_time(now_utc, utc_offset))

    return {
        **hours,
        "timezone": timezone_label(utc_offset),
        "business_status": details.get("business_status") or "OPERATIONAL",
        "place_name": details.get("name", ""),
        "address": details.get("formatted_address", ""),
        "place_id": details.get("place_id", place_id),
    }, cache_hit
