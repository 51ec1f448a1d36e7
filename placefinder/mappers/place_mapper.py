import logging
import math
from typing import Any

from pydantic import ValidationError

from placefinder.exceptions.custom import PlacesDecodeError
from placefinder.schemas.google_places import TextSearchResult
from placefinder.schemas.location import Position
from placefinder.schemas.places import Place

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometers between two lat/lon points."""
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(dlon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def _rating(value: float | None) -> float | None:
    # Upstream reports 0 for places nobody has rated yet
    if value is None or not 1.0 <= value <= 5.0:
        return None
    return value


def to_place(result: TextSearchResult, origin: Position | None = None) -> Place | None:
    """Build a Place from one upstream item, or None if it has no usable name."""
    name = (result.name or "").strip()
    if not name:
        return None

    distance = None
    if origin is not None and result.geometry and result.geometry.location:
        loc = result.geometry.location
        distance = round(haversine_km(origin.latitude, origin.longitude, loc.lat, loc.lng), 3)

    return Place(
        name=name,
        address=result.formatted_address or result.vicinity or "",
        rating=_rating(result.rating),
        open_now=result.opening_hours.open_now if result.opening_hours else None,
        distance_km=distance,
    )


def decode_places(items: list[Any], origin: Position | None = None) -> list[Place]:
    """Decode upstream items in order, skipping malformed ones.

    Raises PlacesDecodeError when there were items but none could be decoded.
    """
    places: list[Place] = []
    for index, item in enumerate(items):
        try:
            place = to_place(TextSearchResult.model_validate(item), origin)
        except ValidationError as exc:
            logger.debug("Skipping malformed result #%d: %s", index, exc)
            continue
        if place is None:
            logger.debug("Skipping nameless result #%d", index)
            continue
        places.append(place)

    if items and not places:
        raise PlacesDecodeError(f"None of {len(items)} results could be decoded")
    return places
