import asyncio

import httpx
import pytest
import respx
from httpx import Response

from placefinder.schemas.location import Position
from placefinder.schemas.search import ErrorKind
from placefinder.services.place_search import SEARCH_URL, PlaceSearchClient, build_search_params

NEAR = Position(latitude=23.03, longitude=72.58)


def test_build_params():
    params = build_search_params("atm", NEAR, 5000, "test-key")

    assert params == {
        "query": "atm",
        "location": "23.03,72.58",
        "radius": "5000",
        "key": "test-key",
    }


@respx.mock
@pytest.mark.asyncio
async def test_search_success_sends_one_request():
    route = respx.get(SEARCH_URL).mock(
        return_value=Response(
            200,
            json={
                "status": "OK",
                "results": [
                    {"name": "HDFC ATM", "formatted_address": "CG Road", "rating": 4.2},
                    {"name": "SBI ATM", "formatted_address": "Ashram Road"},
                ],
            },
        )
    )

    async with httpx.AsyncClient() as client:
        service = PlaceSearchClient(client, "test-key", radius_m=1500)
        handle = service.search("  atm ", NEAR, sequence=7)
        outcome = await handle.wait()

    assert route.call_count == 1
    params = route.calls.last.request.url.params
    assert params["query"] == "atm"
    assert params["location"] == "23.03,72.58"
    assert params["radius"] == "1500"
    assert params["key"] == "test-key"

    assert outcome.sequence == 7
    assert outcome.error is None
    assert [p.name for p in outcome.places] == ["HDFC ATM", "SBI ATM"]
    assert outcome.places[1].rating is None


@respx.mock
@pytest.mark.asyncio
async def test_zero_results_is_success():
    respx.get(SEARCH_URL).mock(
        return_value=Response(200, json={"status": "ZERO_RESULTS", "results": []})
    )

    async with httpx.AsyncClient() as client:
        outcome = await PlaceSearchClient(client, "test-key").search("atm", NEAR).wait()

    assert outcome.error is None
    assert outcome.places == []


@respx.mock
@pytest.mark.asyncio
async def test_http_error_is_network_failure():
    respx.get(SEARCH_URL).mock(return_value=Response(500, text="boom"))

    async with httpx.AsyncClient() as client:
        outcome = await PlaceSearchClient(client, "test-key").search("atm", NEAR).wait()

    assert outcome.error == ErrorKind.network_failure
    assert outcome.places == []


@respx.mock
@pytest.mark.asyncio
async def test_rate_limit_is_network_failure():
    respx.get(SEARCH_URL).mock(return_value=Response(429, text="slow down"))

    async with httpx.AsyncClient() as client:
        outcome = await PlaceSearchClient(client, "test-key").search("atm", NEAR).wait()

    assert outcome.error == ErrorKind.network_failure


@respx.mock
@pytest.mark.asyncio
async def test_upstream_denied_status_is_network_failure():
    respx.get(SEARCH_URL).mock(
        return_value=Response(
            200,
            json={"status": "REQUEST_DENIED", "error_message": "The provided API key is invalid."},
        )
    )

    async with httpx.AsyncClient() as client:
        outcome = await PlaceSearchClient(client, "test-key").search("atm", NEAR).wait()

    assert outcome.error == ErrorKind.network_failure
    assert outcome.places == []


@respx.mock
@pytest.mark.asyncio
async def test_transport_error_is_network_failure():
    respx.get(SEARCH_URL).mock(side_effect=httpx.ConnectError("no route"))

    async with httpx.AsyncClient() as client:
        outcome = await PlaceSearchClient(client, "test-key").search("atm", NEAR).wait()

    assert outcome.error == ErrorKind.network_failure


@respx.mock
@pytest.mark.asyncio
async def test_unparseable_body_is_decode_failure():
    respx.get(SEARCH_URL).mock(return_value=Response(200, text="<html>oops</html>"))

    async with httpx.AsyncClient() as client:
        outcome = await PlaceSearchClient(client, "test-key").search("atm", NEAR).wait()

    assert outcome.error == ErrorKind.decode_failure
    assert outcome.places == []


@respx.mock
@pytest.mark.asyncio
async def test_all_items_malformed_is_decode_failure():
    respx.get(SEARCH_URL).mock(
        return_value=Response(200, json={"status": "OK", "results": [{"rating": 4}, "x"]})
    )

    async with httpx.AsyncClient() as client:
        outcome = await PlaceSearchClient(client, "test-key").search("atm", NEAR).wait()

    assert outcome.error == ErrorKind.decode_failure


@pytest.mark.asyncio
async def test_cancel_while_in_flight_never_delivers():
    release = asyncio.Event()

    async def slow_response(request):
        await release.wait()
        return Response(200, json={"status": "OK", "results": [{"name": "Late ATM"}]})

    async with httpx.AsyncClient(transport=httpx.MockTransport(slow_response)) as client:
        handle = PlaceSearchClient(client, "test-key").search("atm", NEAR)
        await asyncio.sleep(0)
        handle.cancel()
        release.set()
        outcome = await handle.wait()

    assert handle.cancelled
    assert handle.done
    assert outcome is None


@respx.mock
@pytest.mark.asyncio
async def test_cancel_after_completion_still_discards():
    respx.get(SEARCH_URL).mock(
        return_value=Response(200, json={"status": "OK", "results": [{"name": "ATM"}]})
    )

    async with httpx.AsyncClient() as client:
        handle = PlaceSearchClient(client, "test-key").search("atm", NEAR)
        while not handle.done:
            await asyncio.sleep(0)
        handle.cancel()
        outcome = await handle.wait()

    assert outcome is None


@pytest.mark.asyncio
async def test_blank_query_is_rejected_before_any_request():
    async with httpx.AsyncClient() as client:
        service = PlaceSearchClient(client, "test-key")
        with pytest.raises(ValueError):
            service.search("   ", NEAR)
