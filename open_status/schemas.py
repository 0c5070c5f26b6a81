"""Pydantic スキーマ定義"""
from typing import Any, Optional, List
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """JSONはcamelCase、Python側はsnake_case"""
    class Config:
        alias_generator = to_camel
        populate_by_name = True


# === リクエスト ===

class ResolveRequest(BaseModel):
    # Places API の opening_hours.periods と同じ形。不正な要素は判定時に除外する
    periods: List[Any] = []
    day: int = Field(..., ge=0, le=6, description="曜日 (0:日曜 … 6:土曜)")
    minute: int = Field(..., ge=0, le=1439, description="0時からの分")


# === レスポンス ===

class StatusOut(CamelModel):
    is_open: bool
    open_now: bool
    closes_at: Optional[str] = None  # "9:30 PM"
    opens_at: Optional[str] = None   # "7:00 AM tomorrow"
    weekday_text: List[str]
    timezone: str
    business_status: str
    place_name: str
    address: str
    place_id: str


class NearbyPlaceOut(CamelModel):
    place_id: str
    name: str
    address: Optional[str] = None
    distance: float
    distance_miles: float
    is_open: Optional[bool] = None


class SearchResultsOut(BaseModel):
    query: str
    results: List[NearbyPlaceOut]


class GeocodeOut(BaseModel):
    lat: float
    lng: float
    city: str
    state: str
    formatted_address: Optional[str] = None


class TransitionOut(CamelModel):
    kind: str
    at_day: int
    at_time: int
    day_offset: int
    minutes_until: int


class ResolveOut(CamelModel):
    is_open_now: bool
    next_transition: Optional[TransitionOut] = None
    weekday_summary: List[str]
    label: Optional[str] = None
