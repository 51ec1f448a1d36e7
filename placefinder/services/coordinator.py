import asyncio
import logging

from placefinder.observable import Observable
from placefinder.schemas.location import (
    LocationState,
    PermissionDeniedLocation,
    Position,
    ResolvedLocation,
    ResolvingLocation,
)
from placefinder.schemas.search import ErrorKind, SearchOutcome, SearchPhase, SearchState
from placefinder.services.place_search import PlaceSearchClient, SearchHandle
from placefinder.services.position_provider import PositionProvider

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.4
DEFAULT_MIN_QUERY_LENGTH = 2

_ACTIVE_PHASES = (SearchPhase.debouncing, SearchPhase.searching)


class SearchCoordinator:
    """Turns query edits and location changes into place searches.

    Every scheduled search carries the generation current when it was
    scheduled; an outcome is applied only if its sequence still matches, so
    the most recently issued request always wins.
    """

    def __init__(
        self,
        search_client: PlaceSearchClient,
        position_provider: PositionProvider,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        min_query_length: int = DEFAULT_MIN_QUERY_LENGTH,
    ):
        self._search_client = search_client
        self._positions = position_provider
        self._debounce_seconds = debounce_seconds
        self._min_query_length = min_query_length

        self.state: Observable[SearchState] = Observable(SearchState())
        self._generation = 0
        self._task: asyncio.Task | None = None
        self._handle: SearchHandle | None = None
        self._deferred_query: str | None = None

        self._location_subscription = position_provider.state.subscribe(self._on_location_change)

    @property
    def generation(self) -> int:
        return self._generation

    def set_query(self, text: str) -> None:
        current = self.state.value
        if text == current.query and current.phase in _ACTIVE_PHASES:
            return
        self._schedule(text)

    def retry(self) -> None:
        """Run the current query again; the only way a failed search is retried."""
        self._schedule(self.state.value.query)

    def _schedule(self, text: str) -> None:
        query = text.strip()
        self._cancel_pending()

        if len(query) < self._min_query_length:
            self._publish(
                query=text,
                phase=SearchPhase.idle,
                is_loading=False,
                results=(),
                last_error=None,
            )
            return

        if isinstance(self._positions.state.value, PermissionDeniedLocation):
            logger.info("Rejecting search for %r, location permission denied", query)
            self._publish(
                query=text,
                phase=SearchPhase.idle,
                is_loading=False,
                results=(),
                last_error=ErrorKind.permission_denied,
            )
            return

        # is_loading is left alone so a superseded search keeps showing progress
        self._publish(query=text, phase=SearchPhase.debouncing, last_error=None)
        self._task = asyncio.create_task(self._debounce(self._generation, query))

    async def _debounce(self, generation: int, query: str) -> None:
        await asyncio.sleep(self._debounce_seconds)
        if generation != self._generation:
            return

        location = self._positions.state.value
        if isinstance(location, ResolvedLocation):
            await self._search(generation, query, location.position)
        else:
            logger.debug("Query %r ready, waiting for a position", query)
            self._deferred_query = query

    async def _search(self, generation: int, query: str, position: Position) -> None:
        self._deferred_query = None
        handle = self._search_client.search(query, position, sequence=generation)
        self._handle = handle
        self._publish(phase=SearchPhase.searching, is_loading=True)

        outcome = await handle.wait()
        if outcome is None or outcome.sequence != self._generation:
            logger.debug("Discarding stale search #%d for %r", generation, query)
            return
        self._handle = None
        self._apply(outcome)

    def _apply(self, outcome: SearchOutcome) -> None:
        if outcome.error is None:
            self._publish(
                phase=SearchPhase.completed,
                is_loading=False,
                results=tuple(outcome.places),
                last_error=None if outcome.places else ErrorKind.empty_result,
            )
        else:
            # Failed searches keep the last good results on screen
            self._publish(
                phase=SearchPhase.failed,
                is_loading=False,
                last_error=outcome.error,
            )

    def _on_location_change(self, location: LocationState) -> None:
        if isinstance(location, PermissionDeniedLocation):
            if self.state.value.phase in _ACTIVE_PHASES:
                logger.info("Location permission revoked, cancelling search")
                self._cancel_pending()
                self._publish(
                    phase=SearchPhase.idle,
                    is_loading=False,
                    results=(),
                    last_error=ErrorKind.permission_denied,
                )
            else:
                self._deferred_query = None
        elif isinstance(location, ResolvingLocation) and location.error is not None:
            if self._deferred_query is not None:
                # Query stays deferred; a later fix or retry() still issues it
                logger.info("No position for %r: %s", self._deferred_query, location.error)
                self._publish(
                    phase=SearchPhase.failed,
                    is_loading=False,
                    last_error=location.error,
                )
        elif isinstance(location, ResolvedLocation) and self._deferred_query is not None:
            query, self._deferred_query = self._deferred_query, None
            self._task = asyncio.create_task(
                self._search(self._generation, query, location.position)
            )

    def _cancel_pending(self) -> None:
        self._generation += 1
        self._deferred_query = None
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def _publish(self, **changes) -> None:
        self.state.set(self.state.value.model_copy(update=changes))

    async def wait_until_settled(self) -> None:
        """Wait for the pending debounce or search, including ones started meanwhile."""
        while self._task is not None and not self._task.done():
            await asyncio.wait({self._task})

    async def aclose(self) -> None:
        self._cancel_pending()
        self._location_subscription.cancel()
