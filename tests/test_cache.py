"""キャッシュ層のテスト"""
from datetime import datetime, timedelta

from sqlalchemy.exc import OperationalError

from open_status.models import CacheEntry
from open_status.services.cache import (
    cache_get, cache_set, purge_expired, search_key, status_key,
    get_cached_search, set_cached_search,
)

T0 = datetime(2026, 10, 19, 12, 0)


def test_keys():
    assert status_key("abc") == "status:abc"
    assert search_key("starbucks", 37.77491, -122.41941) == "search:starbucks:37.7749:-122.4194"


def test_set_then_get_within_ttl(db):
    cache_set(db, "k", {"a": 1}, ttl=300, now=T0)
    assert cache_get(db, "k", now=T0 + timedelta(seconds=299)) == {"a": 1}


def test_expired_is_miss(db):
    cache_set(db, "k", {"a": 1}, ttl=300, now=T0)
    assert cache_get(db, "k", now=T0 + timedelta(seconds=300)) is None


def test_overwrite_same_key(db):
    cache_set(db, "k", {"v": 1}, ttl=60, now=T0)
    cache_set(db, "k", {"v": 2}, ttl=60, now=T0)
    assert cache_get(db, "k", now=T0) == {"v": 2}
    assert db.query(CacheEntry).count() == 1


def test_purge_expired(db):
    cache_set(db, "old", {}, ttl=10, now=T0)
    cache_set(db, "new", {}, ttl=1000, now=T0)
    assert purge_expired(db, now=T0 + timedelta(seconds=100)) == 1
    assert db.get(CacheEntry, "old") is None
    assert db.get(CacheEntry, "new") is not None


def test_search_cache_rounds_coordinates(db):
    set_cached_search(db, "target", 30.123456, -97.654321, {"place_id": "p"})
    assert get_cached_search(db, "target", 30.12346, -97.65432) == {"place_id": "p"}


def test_read_error_is_miss(db, monkeypatch):
    def broken_get(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("db down"))
    monkeypatch.setattr(db, "get", broken_get)
    assert cache_get(db, "k") is None
