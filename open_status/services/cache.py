"""TTL付きキーバリューキャッシュ（cache_entries テーブル）

読み書きの失敗はキャッシュミス扱い。リクエスト自体は失敗させない。
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import CACHE_TTL_STATUS, CACHE_TTL_SEARCH
from ..models import CacheEntry

logger = logging.getLogger(__name__)


def status_key(place_id: str) -> str:
    return f"status:{place_id}"


def search_key(query: str, lat: float, lng: float) -> str:
    # 座標は小数4桁（約11m）に丸めて近接リクエストを同じキーにまとめる
    return f"search:{query}:{lat:.4f}:{lng:.4f}"


def cache_get(db: Session, key: str, now: Optional[datetime] = None) -> Optional[Any]:
    """有効期限内の値を返す。なければ None"""
    now = now or datetime.utcnow()
    try:
        entry = db.get(CacheEntry, key)
    except SQLAlchemyError as e:
        logger.warning(f"Cache read error ({key}): {e}")
        db.rollback()
        return None
    if entry is None or entry.expires_at <= now:
        return None
    return entry.value


def cache_set(db: Session, key: str, value: Any, ttl: int, now: Optional[datetime] = None) -> None:
    now = now or datetime.utcnow()
    try:
        db.merge(CacheEntry(
            key=key,
            value=value,
            expires_at=now + timedelta(seconds=ttl),
            created_at=now,
        ))
        db.commit()
    except SQLAlchemyError as e:
        logger.warning(f"Cache write error ({key}): {e}")
        db.rollback()


def purge_expired(db: Session, now: Optional[datetime] = None) -> int:
    """期限切れエントリを削除。削除件数を返す"""
    now = now or datetime.utcnow()
    try:
        count = db.query(CacheEntry).filter(CacheEntry.expires_at <= now).delete()
        db.commit()
        return count
    except SQLAlchemyError as e:
        logger.warning(f"Cache purge error: {e}")
        db.rollback()
        return 0


def get_cached_status(db: Session, place_id: str) -> Optional[dict]:
    return cache_get(db, status_key(place_id))


def set_cached_status(db: Session, place_id: str, details: dict) -> None:
    cache_set(db, status_key(place_id), details, CACHE_TTL_STATUS)


def get_cached_search(db: Session, query: str, lat: float, lng: float) -> Optional[dict]:
    return cache_get(db, search_key(query, lat, lng))


def set_cached_search(db: Session, query: str, lat: float, lng: float, place: dict) -> None:
    cache_set(db, search_key(query, lat, lng), place, CACHE_TTL_SEARCH)
