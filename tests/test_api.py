import asyncio

import httpx
import pytest
from httpx import AsyncClient, ASGITransport

from cyclelk_booking.api.app import create_app

BACKEND = "http://localhost:50001/api"

LOCATIONS = {
    "loc-colombo": {"_id": "loc-colombo", "name": "Colombo"},
    "loc-kandy": {"_id": "loc-kandy", "name": "Kandy"},
    "loc-jaffna": {"_id": "loc-jaffna", "name": "Jaffna"},
}
BIKE = {
    "_id": "bike1",
    "name": "Trek FX 3",
    "type": "hybrid",
    "pricing": {"perDay": 1000, "deliveryFee": 200},
    "currentPartnerId": "partner-pickup",
}
PARTNERS = {
    "partner-pickup": {"_id": "partner-pickup", "companyName": "Colombo Cycles", "address": "45 Galle Rd"},
    "p1": {"_id": "p1", "companyName": "Kandy Cycles", "address": "12 Temple Rd"},
}
USER = {"_id": "u1", "firstName": "Nimal", "lastName": "Perera"}


class FakeBackend:
    """Answers the rental backend routes the booking flow uses."""

    def __init__(self):
        self.bookings = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path[len("/api"):]
        token = request.headers.get("x-auth-token")

        if path.startswith("/locations/"):
            loc = LOCATIONS.get(path.rsplit("/", 1)[1])
            return httpx.Response(200, json=loc) if loc else httpx.Response(404, json={"message": "Location not found"})
        if path == "/bikes":
            if request.url.params.get("location") == "loc-jaffna":
                return httpx.Response(200, json=[])
            return httpx.Response(200, json=[BIKE])
        if path == "/bikes/bike1":
            return httpx.Response(200, json=BIKE)
        if path.startswith("/partners/location/"):
            return httpx.Response(200, json=[PARTNERS["p1"]])
        if path.startswith("/partners/"):
            partner = PARTNERS.get(path.rsplit("/", 1)[1])
            return httpx.Response(200, json=partner) if partner else httpx.Response(404, json={"message": "Partner not found"})
        if path == "/auth/me":
            if token != "good-token":
                return httpx.Response(401, json={"message": "Token is not valid"})
            return httpx.Response(200, json=USER)
        if path == "/bookings" and request.method == "POST":
            if token != "good-token":
                return httpx.Response(401, json={"message": "No token, authorization denied"})
            self.bookings.append(request)
            return httpx.Response(201, json={"_id": "bk1", "status": "requested"})
        return httpx.Response(404, json={"message": "Not found"})


@pytest.fixture
def backend(monkeypatch):
    backend = FakeBackend()
    transport = httpx.MockTransport(backend)
    original_client = httpx.AsyncClient

    def client_factory(*args, **kwargs):
        kwargs.setdefault("transport", transport)
        return original_client(*args, **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", client_factory)
    monkeypatch.setenv("API_BASE_URL", BACKEND)
    monkeypatch.setenv("REDIRECT_COUNTDOWN_SECONDS", "0")
    return backend


@pytest.fixture
def app(backend):
    return create_app()


async def walk_to_confirm(ac, pickup="loc-colombo"):
    resp = await ac.post("/booking/sessions")
    assert resp.status_code == 201
    sid = resp.json()["session_id"]

    resp = await ac.post(
        f"/booking/sessions/{sid}/locations",
        json={"pickup_location_id": pickup, "dropoff_location_id": "loc-kandy"},
    )
    assert resp.status_code == 200
    assert resp.json()["step"] == 2

    resp = await ac.post(f"/booking/sessions/{sid}/bike", json={"bike_id": "bike1"})
    assert resp.json()["step"] == 3

    resp = await ac.post(
        f"/booking/sessions/{sid}/rental-period",
        json={
            "start_date": "2030-03-01",
            "start_time": "09:00",
            "end_date": "2030-03-03",
            "end_time": "18:00",
            "delivery_address": "42 Lake Rd",
        },
    )
    assert resp.json()["step"] == 4

    resp = await ac.get(f"/booking/sessions/{sid}/dropoff-options")
    options = resp.json()
    assert [p["id"] for p in options["partners"]] == ["p1"]
    assert options["pickup_partner"]["companyName"] == "Colombo Cycles"

    resp = await ac.post(f"/booking/sessions/{sid}/dropoff", json={"partner_id": "p1"})
    assert resp.json()["step"] == 5
    return sid, resp.json()


@pytest.mark.asyncio
async def test_health(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        resp = await ac.get("/health/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
    assert resp.headers["X-Frame-Options"] == "DENY"


@pytest.mark.asyncio
async def test_login_detour_keeps_wizard_state(app, backend):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        sid, snapshot = await walk_to_confirm(ac)
        assert snapshot["quote"]["total"] == 3200
        assert snapshot["quote"]["days"] == 3

        resp = await ac.post(f"/booking/sessions/{sid}/confirm")
        assert resp.status_code == 401
        assert resp.json()["redirect"] == "/login"
        assert backend.bookings == []

        headers = {"x-auth-token": "good-token"}
        resp = await ac.post(f"/booking/sessions/{sid}/confirm", headers=headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["display_state"] == "booking_succeeded"
        assert body["booking"]["id"] == "bk1"
        assert body["selected_bike"]["id"] == "bike1"
        assert len(backend.bookings) == 1

        await asyncio.sleep(0)
        resp = await ac.get(f"/booking/sessions/{sid}", headers=headers)
        assert resp.json()["redirect"] == "/dashboard"


@pytest.mark.asyncio
async def test_no_bikes_then_change_location(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        sid = (await ac.post("/booking/sessions")).json()["session_id"]
        resp = await ac.post(
            f"/booking/sessions/{sid}/locations",
            json={"pickup_location_id": "loc-jaffna", "dropoff_location_id": "loc-kandy"},
        )
        assert resp.json()["display_state"] == "no_bikes_available"

        resp = await ac.post(f"/booking/sessions/{sid}/change-location")
        assert resp.json()["step"] == 1
        assert resp.json()["display_state"] == "step"


@pytest.mark.asyncio
async def test_back_then_forward(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        sid, confirm = await walk_to_confirm(ac)
        await ac.post(f"/booking/sessions/{sid}/back")
        resp = await ac.post(f"/booking/sessions/{sid}/back")
        assert resp.json()["step"] == 3
        assert resp.json()["rental_period"] == confirm["rental_period"]
        assert resp.json()["selected_partner"]["id"] == "p1"


@pytest.mark.asyncio
async def test_out_of_order_step_is_rejected(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        sid = (await ac.post("/booking/sessions")).json()["session_id"]
        resp = await ac.post(f"/booking/sessions/{sid}/bike", json={"bike_id": "bike1"})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_past_rental_period_is_rejected(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        sid = (await ac.post("/booking/sessions")).json()["session_id"]
        await ac.post(
            f"/booking/sessions/{sid}/locations",
            json={"pickup_location_id": "loc-colombo", "dropoff_location_id": "loc-kandy"},
        )
        await ac.post(f"/booking/sessions/{sid}/bike", json={"bike_id": "bike1"})
        resp = await ac.post(
            f"/booking/sessions/{sid}/rental-period",
            json={"start_date": "2020-01-01", "end_date": "2020-01-02"},
        )
    assert resp.status_code == 400
    assert "future" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_unknown_location_and_session(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        resp = await ac.get("/booking/sessions/missing")
        assert resp.status_code == 404

        sid = (await ac.post("/booking/sessions")).json()["session_id"]
        resp = await ac.post(
            f"/booking/sessions/{sid}/locations",
            json={"pickup_location_id": "loc-mars", "dropoff_location_id": "loc-kandy"},
        )
        assert resp.status_code == 404

        resp = await ac.delete(f"/booking/sessions/{sid}")
        assert resp.status_code == 204
        resp = await ac.get(f"/booking/sessions/{sid}")
        assert resp.status_code == 404


@pytest.mark.asyncio
async def test_bike_rates(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        resp = await ac.get("/booking/bikes/bike1/rates")
    body = resp.json()
    assert body["weekly"] == 6000
    assert body["monthly"] == 25000
    assert body["currency"] == "LKR"
