from fastapi import APIRouter
from pydantic import BaseModel

from placefinder.dependencies import CoordinatorDep
from placefinder.mappers.error_messages import describe_error
from placefinder.schemas.responses import SearchStateResponse
from placefinder.schemas.search import SearchState

router = APIRouter(prefix="/search", tags=["search"])


class QueryUpdate(BaseModel):
    text: str


def _to_response(state: SearchState) -> SearchStateResponse:
    return SearchStateResponse(
        query=state.query,
        phase=state.phase,
        is_loading=state.is_loading,
        results=list(state.results),
        last_error=state.last_error,
        message=describe_error(state.last_error),
    )


@router.get("", response_model=SearchStateResponse)
async def get_search_state(coordinator: CoordinatorDep) -> SearchStateResponse:
    return _to_response(coordinator.state.value)


@router.put("/query", response_model=SearchStateResponse)
async def update_query(update: QueryUpdate, coordinator: CoordinatorDep) -> SearchStateResponse:
    coordinator.set_query(update.text)
    return _to_response(coordinator.state.value)


@router.post("/retry", response_model=SearchStateResponse)
async def retry_search(coordinator: CoordinatorDep) -> SearchStateResponse:
    coordinator.retry()
    return _to_response(coordinator.state.value)


@router.post("/sync", response_model=SearchStateResponse)
async def search_sync(update: QueryUpdate, coordinator: CoordinatorDep) -> SearchStateResponse:
    coordinator.set_query(update.text)
    await coordinator.wait_until_settled()
    return _to_response(coordinator.state.value)
