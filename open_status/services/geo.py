"""位置計算ユーティリティ — 検索候補を距離順に並べるためのhaversine"""
import math

EARTH_RADIUS_KM = 6371.0
KM_TO_MILES = 0.621371


def haversine(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """2点間の距離をkmで返す（haversine公式）"""
    lat1, lng1, lat2, lng2 = map(math.radians, [lat1, lng1, lat2, lng2])
    dlat = lat2 - lat1
    dlng = lng2 - lng1
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def distance_to_place(lat: float, lng: float, place: dict) -> float:
    """Places API の結果（geometry.location）までの距離km"""
    location = place["geometry"]["location"]
    return haversine(lat, lng, location["lat"], location["lng"])


def km_to_miles(km: float) -> float:
    return km * KM_TO_MILES
