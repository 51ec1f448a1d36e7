import respx
from httpx import AsyncClient, Response

from placefinder.main import app

SEARCH_URL = "https://maps.googleapis.com/maps/api/place/textsearch/json"
NOMINATIM_URL = "https://nominatim.openstreetmap.org/reverse"


async def _locate(client: AsyncClient):
    respx.get(NOMINATIM_URL).mock(
        return_value=Response(200, json={"address": {"city": "Ahmedabad", "state": "Gujarat"}})
    )
    await client.post("/location/authorization", json={"status": "authorized_when_in_use"})
    await client.post("/location/fix", json={"latitude": 23.03, "longitude": 72.58})


def _mock_search_ok():
    return respx.get(SEARCH_URL).mock(
        return_value=Response(
            200,
            json={
                "status": "OK",
                "results": [
                    {"name": "HDFC Bank ATM", "formatted_address": "CG Road", "rating": 4.2},
                    {"name": "SBI ATM", "formatted_address": "Ashram Road"},
                ],
            },
        )
    )


async def test_initial_search_state(client: AsyncClient):
    resp = await client.get("/search")

    assert resp.status_code == 200
    data = resp.json()
    assert data["phase"] == "idle"
    assert data["results"] == []
    assert data["message"] is None


@respx.mock
async def test_short_query_stays_idle(client: AsyncClient):
    await _locate(client)
    route = _mock_search_ok()

    resp = await client.post("/search/sync", json={"text": "a"})

    assert resp.json()["phase"] == "idle"
    assert route.call_count == 0


@respx.mock
async def test_update_query_starts_debounce(client: AsyncClient):
    await _locate(client)
    _mock_search_ok()

    resp = await client.put("/search/query", json={"text": "atm"})

    data = resp.json()
    assert data["query"] == "atm"
    assert data["phase"] == "debouncing"


@respx.mock
async def test_sync_search_returns_results(client: AsyncClient):
    await _locate(client)
    route = _mock_search_ok()

    resp = await client.post("/search/sync", json={"text": "atm"})

    assert route.call_count == 1
    assert route.calls.last.request.url.params["key"] == "test-key"
    data = resp.json()
    assert data["phase"] == "completed"
    assert data["is_loading"] is False
    assert [p["name"] for p in data["results"]] == ["HDFC Bank ATM", "SBI ATM"]
    assert data["results"][0]["rating"] == 4.2
    assert data["results"][1]["rating"] is None
    assert data["results"][1]["open_now"] is None


@respx.mock
async def test_failure_message_is_generic(client: AsyncClient):
    await _locate(client)
    respx.get(SEARCH_URL).mock(return_value=Response(500, text="Internal upstream stacktrace"))

    resp = await client.post("/search/sync", json={"text": "atm"})

    data = resp.json()
    assert data["phase"] == "failed"
    assert data["last_error"] == "network_failure"
    assert data["message"] == "Search is unavailable right now. Try again."
    assert "stacktrace" not in resp.text


@respx.mock
async def test_retry_after_failure(client: AsyncClient):
    await _locate(client)
    route = respx.get(SEARCH_URL)
    route.side_effect = [
        Response(500, text="down"),
        Response(200, json={"status": "OK", "results": [{"name": "HDFC Bank ATM"}]}),
    ]

    await client.post("/search/sync", json={"text": "atm"})
    resp = await client.post("/search/retry")
    assert resp.json()["phase"] == "debouncing"

    coordinator = app.state.coordinator
    await coordinator.wait_until_settled()

    resp = await client.get("/search")
    data = resp.json()
    assert data["phase"] == "completed"
    assert [p["name"] for p in data["results"]] == ["HDFC Bank ATM"]
    assert route.call_count == 2


@respx.mock
async def test_denied_permission_rejects_search(client: AsyncClient):
    route = _mock_search_ok()
    await client.post("/location/authorization", json={"status": "denied"})

    resp = await client.post("/search/sync", json={"text": "atm"})

    data = resp.json()
    assert data["phase"] == "idle"
    assert data["last_error"] == "permission_denied"
    assert data["message"] == "Turn on location access to search nearby places."
    assert route.call_count == 0
