"""営業状況エンドポイント"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, HTTPException, Response
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas import StatusOut, ResolveRequest, ResolveOut, TransitionOut
from ..services.places import PlacesConfigError, PlacesUpstreamError
from ..services.schedule import ScheduleQuery, parse_periods, resolve, describe_transition
from ..services.status import lookup_status, PlaceNotFound

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["status"])


@router.get("/status", response_model=StatusOut, response_model_exclude_none=True)
def get_status(
    response: Response,
    place_id: Optional[str] = Query(None, description="Google Place ID"),
    query: Optional[str] = Query(None, description="店名・チェーン名"),
    chain_slug: Optional[str] = Query(None, description="query の旧名", include_in_schema=False),
    lat: Optional[float] = Query(None, ge=-90, le=90, description="緯度"),
    lng: Optional[float] = Query(None, ge=-180, le=180, description="経度"),
    db: Session = Depends(get_db),
):
    query = query or chain_slug
    if not place_id and (not query or lat is None or lng is None):
        raise HTTPException(status_code=400, detail="Either place_id or query+lat+lng required")

    try:
        data, cache_hit = lookup_status(db, place_id=place_id, query=query, lat=lat, lng=lng)
    except PlaceNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PlacesConfigError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except PlacesUpstreamError as e:
        logger.error(f"Status lookup failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    response.headers["X-Cache"] = "HIT" if cache_hit else "MISS"
    return StatusOut(**data)


@router.post("/schedule/resolve", response_model=ResolveOut, response_model_exclude_none=True)
def resolve_schedule(body: ResolveRequest):
    """営業区間と基準時刻（店舗ローカル）から営業状態を判定"""
    periods = parse_periods(body.periods)
    result = resolve(periods, ScheduleQuery(body.day, body.minute))
    transition = result.next_transition

    return ResolveOut(
        is_open_now=result.is_open_now,
        next_transition=TransitionOut(
            kind=transition.kind,
            at_day=transition.at_day,
            at_time=transition.at_time,
            day_offset=transition.day_offset,
            minutes_until=transition.minutes_until,
        ) if transition else None,
        weekday_summary=list(result.weekday_summary),
        label=f"{transition.kind} {describe_transition(transition)}" if transition else None,
    )


@router.get("/health")
def health():
    return {"status": "ok"}
