"""Reverse geocoding through OpenStreetMap Nominatim."""

import logging

import httpx
from pydantic import BaseModel

from placefinder.exceptions.custom import RateLimitError, ReverseGeocodeError

logger = logging.getLogger(__name__)

NOMINATIM_URL = "https://nominatim.openstreetmap.org/reverse"

_CITY_FIELDS = ("city", "town", "village", "municipality", "hamlet", "suburb")


class PlaceLabel(BaseModel):
    city: str | None = None
    state: str | None = None
    country: str | None = None

    @property
    def short_label(self) -> str | None:
        """Concise label, preferring city/state when available."""
        if self.city and self.state:
            parts = [self.city, self.state]
        elif self.city and self.country:
            parts = [self.city, self.country]
        elif self.state and self.country:
            parts = [self.state, self.country]
        elif self.city:
            parts = [self.city]
        elif self.country:
            parts = [self.country]
        else:
            return None
        return ", ".join(parts)


def parse_address(address: dict) -> PlaceLabel:
    city = next((address[f] for f in _CITY_FIELDS if address.get(f)), None)
    return PlaceLabel(
        city=city,
        state=address.get("state") or address.get("region"),
        country=address.get("country"),
    )


class NominatimGeocoder:
    def __init__(
        self,
        client: httpx.AsyncClient,
        user_agent: str,
        base_url: str = NOMINATIM_URL,
    ):
        self._client = client
        self._base_url = base_url
        self._headers = {"User-Agent": user_agent}

    async def reverse(self, latitude: float, longitude: float) -> PlaceLabel | None:
        """Return the locality for the coordinates, or None if there is none."""
        params = {
            "lat": f"{latitude:.6f}",
            "lon": f"{longitude:.6f}",
            "format": "jsonv2",
            "addressdetails": "1",
            "zoom": "10",
        }

        try:
            resp = await self._client.get(self._base_url, params=params, headers=self._headers)
        except httpx.HTTPError as exc:
            raise ReverseGeocodeError(str(exc)) from exc

        if resp.status_code == 429:
            raise RateLimitError("Nominatim")
        if resp.status_code >= 400:
            raise ReverseGeocodeError(resp.text, status_code=resp.status_code)

        try:
            payload = resp.json()
        except ValueError as exc:
            raise ReverseGeocodeError(f"Unreadable reverse geocode response: {exc}") from exc

        address = payload.get("address") if isinstance(payload, dict) else None
        if not isinstance(address, dict) or not address:
            logger.info("No address for %.4f,%.4f", latitude, longitude)
            return None

        label = parse_address(address)
        return label if label.short_label else None
