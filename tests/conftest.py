import datetime
import json
from collections.abc import AsyncIterator, Callable
from typing import Any

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from travelbook import BookingClient, BookingGateway, ContactInfo, ServiceId, ServiceOffering

BOOKINGS_KEY = web.AppKey("bookings", list[dict[str, Any]])
RESPONSE_KEY = web.AppKey("response", dict[str, Any])


def tariff(**prices: float) -> dict[str, dict[str, Any]]:
    return {name: {"price": price, "available": True} for name, price in prices.items()}


@pytest.fixture
def contact() -> ContactInfo:
    return {"name": "Asha Rao", "email": "asha@example.com", "phone": "+919800000001"}


@pytest.fixture
def travel_day() -> datetime.date:
    return datetime.date(2026, 12, 24)


@pytest.fixture
def flight() -> ServiceOffering:
    return {"id": ServiceId("flight_123"), "name": "Delhi to Mumbai", "category": "flights",
            "tariff": {**tariff(economy=5000, business=12000), "first": {"price": 30000, "available": False}}}


@pytest.fixture
def train() -> ServiceOffering:
    return {"id": ServiceId("train_123"), "name": "Rajdhani Express", "category": "trains",
            "tariff": tariff(sleeper=600, ac3=1200, ac2=1800, ac1=3000)}


@pytest.fixture
def bus() -> ServiceOffering:
    return {"id": ServiceId("bus_123"), "name": "Bangalore to Goa", "category": "bus", "duration": 600,
            "tariff": tariff(seater=500, sleeper=800, semiSleeper=650, ac=900)}


@pytest.fixture
def cab() -> ServiceOffering:
    return {"id": ServiceId("cab_123"), "name": "Airport Transfer", "category": "cab",
            "tariff": tariff(sedan=800, suv=1200, premium=2000)}


@pytest.fixture
def hotel() -> ServiceOffering:
    return {"id": ServiceId("hotel_123"), "name": "Luxury Hotel Mumbai", "category": "hotels",
            "tariff": tariff(standard=3000, deluxe=4500, suite=8000)}


@pytest.fixture
def package() -> ServiceOffering:
    return {"id": ServiceId("package_123"), "name": "Kerala Backwaters", "category": "packages",
            "tariff": tariff(standard=9000, deluxe=13000, luxury=20000)}


async def create_booking(request: web.Request) -> web.Response:
    body = await request.json()
    request.app[BOOKINGS_KEY].append(body)
    if request.app[RESPONSE_KEY]:
        response = request.app[RESPONSE_KEY]
        return web.json_response(response["body"], status=response["status"])
    if not body.get("serviceId"):
        return web.json_response({"success": False, "message": "serviceId is required"}, status=400)
    notes = json.loads(body["customerNotes"])
    prefix = body["serviceId"].split("_")[0]
    number = {"flight": "FLT", "hotel": "HTL", "train": "TRN", "bus": "BUS", "cab": "CAB", "package": "PKG"}[prefix]
    return web.json_response({"success": True, "data": {
        "_id": f"booking_{len(request.app[BOOKINGS_KEY])}",
        "bookingNumber": f"{number}-{12345677 + len(request.app[BOOKINGS_KEY])}",
        "pricing": {"total": notes["totalPrice"]},
        "status": "pending",
    }}, status=201)


async def list_bookings(request: web.Request) -> web.Response:
    limit = int(request.query["limit"])
    offset = int(request.query["offset"])
    rows = [{"_id": f"booking_{i}", "bookingNumber": f"HTL-{10000000 + i}", "status": "confirmed"}
            for i in range(45)]
    if "status" in request.query:
        rows = [r for r in rows if r["status"] == request.query["status"]]
    page = rows[offset:offset + limit]
    return web.json_response({"success": True, "data": {
        "bookings": page, "total": len(rows), "hasMore": offset + limit < len(rows)}})


async def get_booking(request: web.Request) -> web.Response:
    booking_id = request.match_info["booking_id"]
    if booking_id == "missing":
        return web.json_response({"success": False, "message": "Booking not found"}, status=404)
    return web.json_response({"success": True, "data": {"_id": booking_id, "status": "confirmed"}})


async def cancel_booking(request: web.Request) -> web.Response:
    body = await request.json()
    return web.json_response({"success": True, "data": {
        "_id": request.match_info["booking_id"], "status": "cancelled", "reason": body.get("reason")}})


@pytest.fixture
def backend() -> web.Application:
    app = web.Application()
    app[BOOKINGS_KEY] = []
    app[RESPONSE_KEY] = {}
    app.router.add_post("/api/service-bookings", create_booking)
    app.router.add_get("/api/service-bookings", list_bookings)
    app.router.add_get("/api/service-bookings/{booking_id}", get_booking)
    app.router.add_patch("/api/service-bookings/{booking_id}/cancel", cancel_booking)
    return app


@pytest.fixture
def respond(backend: web.Application) -> Callable[[int, Any], None]:
    """Make the next create-booking call return a canned response."""
    def _respond(status: int, body: Any) -> None:
        backend[RESPONSE_KEY] = {"status": status, "body": body}
    return _respond


@pytest.fixture
async def server(aiohttp_server: Any, backend: web.Application) -> TestServer:
    return await aiohttp_server(backend)


@pytest.fixture
async def client(server: TestServer) -> AsyncIterator[BookingClient]:
    async with BookingClient("test-token", str(server.make_url("")), page_size=20) as client:
        yield client


@pytest.fixture
def gateway(client: BookingClient) -> BookingGateway:
    return BookingGateway(client)


@pytest.fixture
def submitted(backend: web.Application) -> list[dict[str, Any]]:
    return backend[BOOKINGS_KEY]


@pytest.fixture
def flight_selection(contact: ContactInfo, travel_day: datetime.date) -> dict[str, Any]:
    return {"category": "flights", "flightClass": "economy", "tripType": "one-way",
            "passengers": {"adults": 2, "children": 1, "infants": 0}, "departureDate": travel_day,
            "extras": {"seatSelection": True},
            "passengerDetails": [{"firstName": "Asha", "lastName": "Rao", "dateOfBirth": "1990-01-01"}],
            "contactInfo": contact}


@pytest.fixture
def train_selection(contact: ContactInfo, travel_day: datetime.date) -> dict[str, Any]:
    return {"category": "trains", "trainClass": "ac3", "tripType": "one-way",
            "passengers": {"adults": 2, "children": 1}, "travelDate": travel_day, "contactInfo": contact}


@pytest.fixture
def bus_selection(contact: ContactInfo, travel_day: datetime.date) -> dict[str, Any]:
    return {"category": "bus", "busClass": "sleeper", "tripType": "round-trip",
            "passengers": {"adults": 2, "children": 1}, "travelDate": travel_day,
            "returnDate": travel_day + datetime.timedelta(days=3), "contactInfo": contact}


@pytest.fixture
def cab_selection(contact: ContactInfo, travel_day: datetime.date) -> dict[str, Any]:
    return {"category": "cab", "vehicleType": "sedan", "tripType": "one-way",
            "passengers": {"adults": 1, "children": 0}, "pickupDate": travel_day, "pickupTime": "06:30",
            "pickupLocation": "Andheri", "dropoffLocation": "T2 Airport",
            "extras": {"driver": True, "tollCharges": True}, "contactInfo": contact}


@pytest.fixture
def hotel_selection(contact: ContactInfo, travel_day: datetime.date) -> dict[str, Any]:
    return {"category": "hotels", "roomType": "standard", "rooms": 1, "checkIn": travel_day,
            "checkOut": travel_day + datetime.timedelta(days=2), "guests": {"adults": 2, "children": 0},
            "extras": {"breakfast": True}, "contactInfo": contact}


@pytest.fixture
def package_selection(contact: ContactInfo, travel_day: datetime.date) -> dict[str, Any]:
    return {"category": "packages", "accommodationType": "deluxe", "travelers": 3, "travelDate": travel_day,
            "nights": 4, "mealPlan": "fullBoard",
            "addons": {"transfers": True, "travelInsurance": True, "guide": True}, "contactInfo": contact}
