"""Google Places / Geocoding API クライアント

「見つからない」は None、通信・API側の失敗は PlacesUpstreamError で区別する。
"""
import logging
import re
from typing import Optional, List, Tuple

import requests

from .. import config
from .geo import distance_to_place, km_to_miles

logger = logging.getLogger(__name__)

DETAIL_FIELDS = "place_id,name,formatted_address,opening_hours,utc_offset,business_status"


class PlacesError(Exception):
    """Places API 関連の失敗"""


class PlacesConfigError(PlacesError):
    """APIキー未設定"""


class PlacesUpstreamError(PlacesError):
    """HTTPエラー・ネットワーク障害・想定外のAPIステータス"""


# 一般的な語 → 検索クエリと place type
GENERIC_TERM_MAP = {
    # 飲食
    "food": ("restaurant", "restaurant"),
    "eat": ("restaurant", "restaurant"),
    "eating": ("restaurant", "restaurant"),
    "restaurant": ("restaurant", "restaurant"),
    "restaurants": ("restaurant", "restaurant"),
    "dinner": ("restaurant", "restaurant"),
    "lunch": ("restaurant", "restaurant"),
    "breakfast": ("breakfast restaurant", None),
    "brunch": ("brunch restaurant", None),
    "pizza": ("pizza restaurant", None),
    "burgers": ("burger restaurant", None),
    "sushi": ("sushi restaurant", None),
    "mexican": ("mexican restaurant", None),
    "chinese": ("chinese restaurant", None),
    "italian": ("italian restaurant", None),
    "thai": ("thai restaurant", None),
    "indian": ("indian restaurant", None),
    "fast food": ("fast food restaurant", "restaurant"),
    "fastfood": ("fast food restaurant", "restaurant"),
    # カフェ・バー
    "coffee": ("coffee shop", "cafe"),
    "cafe": ("cafe", "cafe"),
    "tea": ("tea shop", "cafe"),
    "boba": ("boba tea shop", None),
    "drinks": ("bar", "bar"),
    "bar": ("bar", "bar"),
    "bars": ("bar", "bar"),
    "beer": ("bar", "bar"),
    # 車
    "gas": ("gas station", "gas_station"),
    "fuel": ("gas station", "gas_station"),
    "gasoline": ("gas station", "gas_station"),
    "petrol": ("gas station", "gas_station"),
    "gas station": ("gas station", "gas_station"),
    "carwash": ("car wash", "car_wash"),
    "car wash": ("car wash", "car_wash"),
    "mechanic": ("auto repair", "car_repair"),
    "auto repair": ("auto repair", "car_repair"),
    "tires": ("tire shop", None),
    # 買い物
    "grocery": ("grocery store", "supermarket"),
    "groceries": ("grocery store", "supermarket"),
    "supermarket": ("supermarket", "supermarket"),
    "store": ("store", None),
    "shopping": ("shopping mall", "shopping_mall"),
    "mall": ("shopping mall", "shopping_mall"),
    "clothes": ("clothing store", "clothing_store"),
    "clothing": ("clothing store", "clothing_store"),
    "shoes": ("shoe store", "shoe_store"),
    "electronics": ("electronics store", "electronics_store"),
    "hardware": ("hardware store", "hardware_store"),
    # 医療・健康
    "pharmacy": ("pharmacy", "pharmacy"),
    "drugstore": ("pharmacy", "pharmacy"),
    "medicine": ("pharmacy", "pharmacy"),
    "doctor": ("doctor", "doctor"),
    "hospital": ("hospital", "hospital"),
    "urgent": ("urgent care", None),
    "urgent care": ("urgent care", None),
    "dentist": ("dentist", "dentist"),
    "gym": ("gym", "gym"),
    "fitness": ("gym", "gym"),
    # 金融
    "bank": ("bank", "bank"),
    "atm": ("atm", "atm"),
    # サービス
    "haircut": ("hair salon", "hair_care"),
    "salon": ("hair salon", "hair_care"),
    "hair salon": ("hair salon", "hair_care"),
    "barber": ("barber shop", "hair_care"),
    "nails": ("nail salon", None),
    "spa": ("spa", "spa"),
    "laundry": ("laundromat", "laundry"),
    "laundromat": ("laundromat", "laundry"),
    "dry cleaning": ("dry cleaner", None),
    "dry cleaner": ("dry cleaner", None),
    # 娯楽
    "movies": ("movie theater", "movie_theater"),
    "theater": ("movie theater", "movie_theater"),
    "cinema": ("movie theater", "movie_theater"),
    "bowling": ("bowling alley", "bowling_alley"),
    # コンビニ・酒
    "convenience": ("convenience store", "convenience_store"),
    "convenience store": ("convenience store", "convenience_store"),
    "liquor": ("liquor store", "liquor_store"),
    "liquor store": ("liquor store", "liquor_store"),
    # その他
    "hotel": ("hotel", "lodging"),
    "hotels": ("hotel", "lodging"),
    "parking": ("parking", "parking"),
    "post": ("post office", "post_office"),
    "post office": ("post office", "post_office"),
    "library": ("library", "library"),
}

NEARBY_SUFFIX = re.compile(r"\s*(near\s*me|nearby|near\s*by|close\s*by)\s*$", re.IGNORECASE)


def enhance_query(query: str) -> Tuple[str, Optional[str]]:
    """一般語なら (検索クエリ, place type) に置き換える。それ以外はそのまま"""
    normalized = query.lower().strip()
    if normalized in GENERIC_TERM_MAP:
        return GENERIC_TERM_MAP[normalized]
    stripped = NEARBY_SUFFIX.sub("", normalized).strip()
    if stripped != normalized and stripped in GENERIC_TERM_MAP:
        return GENERIC_TERM_MAP[stripped]
    return query, None


def normalize_for_matching(text: str) -> str:
    text = text.lower().replace("'", "").replace("’", "")
    text = re.sub(r"[^a-z0-9\s]", "", text)
    return re.sub(r"\s+", " ", text).strip()


def name_matches_query(name: str, query: str) -> bool:
    """店名が検索語に一致するか（部分一致 or 3文字以上の語がすべて含まれる）"""
    normalized_name = normalize_for_matching(name)
    normalized_query = normalize_for_matching(query)
    if normalized_query in normalized_name:
        return True

    query_words = [w for w in normalized_query.split(" ") if len(w) > 2]
    name_words = normalized_name.split(" ")
    return all(
        any(nw in qw or qw in nw for nw in name_words)
        for qw in query_words
    )


def _get(endpoint: str, params: dict, ok_statuses=("OK",)) -> dict:
    if not config.GOOGLE_PLACES_API_KEY:
        raise PlacesConfigError("Google Places API key not configured")

    url = f"{config.PLACES_BASE_URL}/{endpoint}/json"
    try:
        r = requests.get(
            url,
            params={"key": config.GOOGLE_PLACES_API_KEY, **params},
            timeout=config.HTTP_TIMEOUT,
        )
    except requests.RequestException as e:
        logger.error(f"{endpoint} request failed: {e}")
        raise PlacesUpstreamError(f"Google Places API unreachable: {e}") from e

    if not r.ok:
        logger.error(f"{endpoint} error: {r.status_code} {r.text[:200]}")
        raise PlacesUpstreamError(f"Google Places API error: {r.status_code}")

    try:
        data = r.json()
    except ValueError as e:
        raise PlacesUpstreamError("Google Places API returned invalid JSON") from e

    status = data.get("status")
    if status not in ok_statuses:
        logger.error(f"{endpoint} returned status {status}: {data.get('error_message', '')}")
        raise PlacesUpstreamError(f"Google Places API error: {status}")
    return data


def text_search(query: str, lat: float, lng: float, place_type: Optional[str] = None) -> List[dict]:
    """Text Search。結果なしは空リスト"""
    params = {
        "query": query,
        "location": f"{lat},{lng}",
        "radius": str(config.SEARCH_RADIUS_M),
    }
    if place_type:
        params["type"] = place_type
    data = _get("place/textsearch", params, ok_statuses=("OK", "ZERO_RESULTS"))
    return data.get("results") or []


def find_nearest_place(query: str, lat: float, lng: float) -> Optional[dict]:
    """店名が一致する最寄りの1件を {place_id, name, vicinity} で返す"""
    results = text_search(query, lat, lng)
    matching = [p for p in results if name_matches_query(p.get("name", ""), query)]
    if not matching:
        if results:
            names = ", ".join(p.get("name", "") for p in results[:5])
            logger.info(f'No matching results for "{query}". Got: {names}')
        return None

    place = min(matching, key=lambda p: distance_to_place(lat, lng, p))
    return {
        "place_id": place["place_id"],
        "name": place["name"],
        "vicinity": place.get("formatted_address"),
    }


def search_nearby(query: str, lat: float, lng: float, limit: int = 6) -> List[dict]:
    """一覧検索。一般語を拡張し、距離順に limit 件"""
    search_query, place_type = enhance_query(query)
    if search_query != query or place_type:
        logger.info(f'Search: "{query}" -> "{search_query}"' + (f" (type: {place_type})" if place_type else ""))

    results = []
    for place in text_search(search_query, lat, lng, place_type):
        dist = distance_to_place(lat, lng, place)
        results.append({
            "place_id": place["place_id"],
            "name": place["name"],
            "address": place.get("formatted_address"),
            "distance": round(dist, 2),
            "distance_miles": round(km_to_miles(dist), 2),
            "is_open": (place.get("opening_hours") or {}).get("open_now"),
        })

    results.sort(key=lambda x: x["distance"])
    return results[:limit]


def place_details(place_id: str) -> Optional[dict]:
    """Place Details。存在しない place_id は None"""
    data = _get(
        "place/details",
        {"place_id": place_id, "fields": DETAIL_FIELDS},
        ok_statuses=("OK", "NOT_FOUND"),
    )
    if data.get("status") == "NOT_FOUND":
        return None
    return data.get("result")


def geocode(query: Optional[str] = None, lat: Optional[float] = None, lng: Optional[float] = None) -> Optional[dict]:
    """住所→座標 / 座標→住所。見つからなければ None"""
    if lat is not None and lng is not None:
        params = {"latlng": f"{lat},{lng}"}
    elif query:
        params = {"address": query}
    else:
        raise ValueError("query or lat/lng required")

    data = _get("geocode", params, ok_statuses=("OK", "ZERO_RESULTS"))
    if not data.get("results"):
        return None

    result = data["results"][0]
    location = result["geometry"]["location"]

    city = ""
    state = ""
    for component in result.get("address_components", []):
        types = component.get("types", [])
        if not city and any(t in types for t in ("locality", "sublocality_level_1", "neighborhood")):
            city = component["long_name"]
        if "administrative_area_level_1" in types:
            state = component["short_name"]

    return {
        "lat": location["lat"],
        "lng": location["lng"],
        "city": city,
        "state": state,
        "formatted_address": result.get("formatted_address"),
    }
