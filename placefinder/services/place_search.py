import asyncio
import logging

import httpx

from placefinder.exceptions.custom import GooglePlacesError, PlacesDecodeError, RateLimitError
from placefinder.mappers.place_mapper import decode_places
from placefinder.schemas.google_places import TextSearchResponse
from placefinder.schemas.location import Position
from placefinder.schemas.search import ErrorKind, SearchOutcome

logger = logging.getLogger(__name__)

SEARCH_URL = "https://maps.googleapis.com/maps/api/place/textsearch/json"
DEFAULT_RADIUS_M = 5000

_SUCCESS_STATUSES = frozenset({"OK", "ZERO_RESULTS"})


def build_search_params(query: str, near: Position, radius_m: int, api_key: str) -> dict[str, str]:
    return {
        "query": query,
        "location": f"{near.latitude},{near.longitude}",
        "radius": str(radius_m),
        "key": api_key,
    }


class SearchHandle:
    """A single in-flight search.

    Once cancelled, ``wait()`` returns None even if the request went on to
    complete; the result is never handed out.
    """

    def __init__(self, sequence: int, task: "asyncio.Task[SearchOutcome]") -> None:
        self._sequence = sequence
        self._task = task
        self._cancelled = False

    @property
    def sequence(self) -> int:
        return self._sequence

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self._task.done()

    def cancel(self) -> None:
        self._cancelled = True
        self._task.cancel()

    async def wait(self) -> SearchOutcome | None:
        # asyncio.wait does not propagate our own cancellation into the task
        await asyncio.wait({self._task})
        if self._cancelled or self._task.cancelled():
            return None
        return self._task.result()


class PlaceSearchClient:
    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        radius_m: int = DEFAULT_RADIUS_M,
    ):
        self._client = client
        self._api_key = api_key
        self._radius_m = radius_m

    @property
    def radius_m(self) -> int:
        return self._radius_m

    def search(self, query: str, near: Position, *, sequence: int = 0) -> SearchHandle:
        """Start one text search around ``near`` and return its handle."""
        query = query.strip()
        if not query:
            raise ValueError("search query must not be blank")
        task = asyncio.create_task(self._run(query, near, sequence))
        return SearchHandle(sequence, task)

    async def _fetch(self, query: str, near: Position) -> TextSearchResponse:
        params = build_search_params(query, near, self._radius_m, self._api_key)

        resp = await self._client.get(SEARCH_URL, params=params)

        if resp.status_code == 429:
            raise RateLimitError("Google Places")
        if resp.status_code >= 400:
            raise GooglePlacesError(resp.text, status_code=resp.status_code)

        try:
            data = TextSearchResponse.model_validate(resp.json())
        except ValueError as exc:
            raise PlacesDecodeError(f"Unreadable search response: {exc}") from exc

        if data.status == "OVER_QUERY_LIMIT":
            raise RateLimitError("Google Places")
        if data.status not in _SUCCESS_STATUSES:
            raise GooglePlacesError(data.error_message or data.status, status_code=resp.status_code)
        return data

    async def _run(self, query: str, near: Position, sequence: int) -> SearchOutcome:
        try:
            data = await self._fetch(query, near)
            places = decode_places(data.results, origin=near)
        except (httpx.HTTPError, GooglePlacesError, RateLimitError) as exc:
            logger.warning("Search #%d for %r failed: %s", sequence, query, exc)
            return SearchOutcome(sequence=sequence, error=ErrorKind.network_failure)
        except PlacesDecodeError as exc:
            logger.warning("Search #%d for %r could not be decoded: %s", sequence, query, exc.message)
            return SearchOutcome(sequence=sequence, error=ErrorKind.decode_failure)

        if not places:
            logger.info("No results for query: %s", query)
        return SearchOutcome(sequence=sequence, places=places)
