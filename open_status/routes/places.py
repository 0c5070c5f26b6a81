"""店舗検索・ジオコーディングエンドポイント"""
import logging
from typing import Optional
from fastapi import APIRouter, Query, HTTPException

from .. import config
from ..schemas import SearchResultsOut, NearbyPlaceOut, GeocodeOut
from ..services import places

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["places"])


def _upstream_call(fn, *args, **kwargs):
    """Places API の例外を HTTP ステータスに変換"""
    try:
        return fn(*args, **kwargs)
    except places.PlacesConfigError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except places.PlacesUpstreamError as e:
        logger.error(f"{fn.__name__} failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/search", response_model=SearchResultsOut)
def search(
    query: str = Query(..., min_length=1, description="店名・一般語（coffee, gas nearby 等）"),
    lat: float = Query(..., ge=-90, le=90, description="緯度"),
    lng: float = Query(..., ge=-180, le=180, description="経度"),
    limit: int = Query(config.SEARCH_LIMIT, ge=1, le=20),
):
    results = _upstream_call(places.search_nearby, query, lat, lng, limit=limit)
    return SearchResultsOut(
        query=query,
        results=[NearbyPlaceOut(**r) for r in results],
    )


@router.get("/geocode", response_model=GeocodeOut)
def geocode(
    query: Optional[str] = Query(None, description="住所・地名"),
    zip: Optional[str] = Query(None, description="郵便番号"),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
):
    query = query or zip
    has_coords = lat is not None and lng is not None
    if not has_coords and not query:
        raise HTTPException(status_code=400, detail="Location query or coordinates required")

    if has_coords:
        result = _upstream_call(places.geocode, lat=lat, lng=lng)
    else:
        result = _upstream_call(places.geocode, query=query)
    if not result:
        raise HTTPException(status_code=404, detail="Location not found")
    return GeocodeOut(**result)
