from typing import Any

from pydantic import BaseModel


class LatLng(BaseModel):
    lat: float
    lng: float


class Geometry(BaseModel):
    location: LatLng | None = None


class OpeningHours(BaseModel):
    open_now: bool | None = None


class TextSearchResult(BaseModel):
    place_id: str | None = None
    name: str | None = None
    formatted_address: str | None = None
    vicinity: str | None = None
    rating: float | None = None
    user_ratings_total: int | None = None
    opening_hours: OpeningHours | None = None
    geometry: Geometry | None = None
    business_status: str | None = None


class TextSearchResponse(BaseModel):
    status: str = "OK"
    error_message: str | None = None
    # Items are validated one by one so a bad entry does not sink the batch
    results: list[Any] = []
