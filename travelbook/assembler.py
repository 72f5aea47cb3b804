import json
import logging
import re
from typing import Any, assert_never

from travelbook import typedefs as t
from travelbook.dates import booking_date, iso_date, package_nights, slot_for
from travelbook.errors import SerializationError


logger = logging.getLogger(__name__)

BOOKING_PREFIXES: dict[t.Category, str] = {
    "flights": "FLT",
    "hotels": "HTL",
    "trains": "TRN",
    "bus": "BUS",
    "cab": "CAB",
    "packages": "PKG",
}
BOOKING_NUMBER_RE = re.compile(r"^(FLT|HTL|TRN|BUS|CAB|PKG)-\d{8}$")


def booking_prefix(category: t.Category) -> str:
    return BOOKING_PREFIXES[category]


def matches_category(booking_number: str, category: t.Category) -> bool:
    """Whether a backend-issued booking number is well formed for ``category``."""
    match = BOOKING_NUMBER_RE.match(booking_number)
    return match is not None and match.group(1) == BOOKING_PREFIXES[category]


def _details(selection: t.TripSelection, key: str) -> list[dict[str, Any]]:
    return [dict(d) for d in selection.get(key, ())]  # type: ignore[attr-defined]


def _mix(passengers: t.PassengerMix, with_infants: bool = False) -> dict[str, int]:
    mix = {"adults": passengers["adults"], "children": passengers["children"]}
    if with_infants:
        mix["infants"] = passengers.get("infants", 0)
    return mix


def _return_date(selection: t.TripSelection) -> str | None:
    if selection.get("tripType") == "round-trip" and "returnDate" in selection:
        return iso_date(selection["returnDate"])  # type: ignore[typeddict-item]
    return None


def build_notes(selection: t.TripSelection, breakdown: t.PriceBreakdown) -> dict[str, Any]:
    """Build the category payload stored in ``customerNotes``.

    ``totalPrice`` is what the user is charged. Anything displaying the booking
    later reads the price from here.
    """
    notes: dict[str, Any]
    match selection["category"]:
        case "flights":
            flight: t.FlightSelection = selection  # type: ignore[assignment]
            notes = {
                "tripType": flight["tripType"],
                "returnDate": _return_date(flight),
                "passengers": _mix(flight["passengers"], with_infants=True),
                "flightClass": flight["flightClass"],
                "selectedExtras": dict(flight.get("extras", {})),
                "passengerDetails": _details(flight, "passengerDetails"),
            }
        case "trains":
            train: t.TrainSelection = selection  # type: ignore[assignment]
            notes = {
                "tripType": train["tripType"],
                "returnDate": _return_date(train),
                "passengers": _mix(train["passengers"]),
                "trainClass": train["trainClass"],
                "selectedExtras": dict(train.get("extras", {})),
                "passengerDetails": _details(train, "passengerDetails"),
            }
        case "bus":
            bus: t.BusSelection = selection  # type: ignore[assignment]
            notes = {
                "tripType": bus["tripType"],
                "returnDate": _return_date(bus),
                "passengers": _mix(bus["passengers"]),
                "busClass": bus["busClass"],
                "selectedExtras": dict(bus.get("extras", {})),
                "passengerDetails": _details(bus, "passengerDetails"),
            }
        case "cab":
            cab: t.CabSelection = selection  # type: ignore[assignment]
            notes = {
                "tripType": cab["tripType"],
                "pickupLocation": cab["pickupLocation"],
                "dropoffLocation": cab["dropoffLocation"],
                "pickupTime": cab["pickupTime"],
                "passengers": _mix(cab["passengers"]),
                "vehicleType": cab["vehicleType"],
                "selectedExtras": dict(cab["extras"]),
                "passengerDetails": _details(cab, "passengerDetails"),
            }
        case "hotels":
            hotel: t.HotelSelection = selection  # type: ignore[assignment]
            guests = hotel.get("guests", {"adults": 1, "children": 0})
            notes = {
                "checkInDate": iso_date(hotel["checkIn"]),
                "checkOutDate": iso_date(hotel["checkOut"]),
                "rooms": hotel["rooms"],
                "roomType": hotel["roomType"],
                "guests": _mix(guests),
                "selectedExtras": dict(hotel["extras"]),
                "guestDetails": _details(hotel, "guestDetails"),
            }
        case "packages":
            pkg: t.PackageSelection = selection  # type: ignore[assignment]
            notes = {
                "travelDate": iso_date(pkg["travelDate"]),
                "returnDate": iso_date(pkg["returnDate"]) if "returnDate" in pkg else None,
                "nights": package_nights(pkg),
                "travelers": pkg["travelers"],
                "accommodationType": pkg["accommodationType"],
                "mealPlan": pkg["mealPlan"],
                "selectedAddons": dict(pkg["addons"]),
                "travelerDetails": _details(pkg, "travelerDetails"),
            }
        case other:
            assert_never(other)

    notes["contactInfo"] = dict(selection["contactInfo"])
    notes["totalPrice"] = breakdown["total"]
    return notes


def encode_notes(payload: dict[str, Any]) -> str:
    """Serialize ``payload`` and confirm it decodes back unchanged."""
    try:
        text = json.dumps(payload, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"customerNotes cannot be encoded: {e}") from e
    if decode_notes(text) != payload:
        raise SerializationError("customerNotes does not survive a JSON round trip")
    return text


def decode_notes(text: str) -> dict[str, Any]:
    try:
        payload = json.loads(text)
    except ValueError as e:
        raise SerializationError(f"customerNotes is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise SerializationError("customerNotes must be a JSON object")
    if "totalPrice" not in payload:
        raise SerializationError("customerNotes has no totalPrice")
    return payload


def assemble(
    offering: t.ServiceOffering,
    selection: t.TripSelection,
    breakdown: t.PriceBreakdown,
    payment_method: t.PaymentMethod = "online"
) -> t.BookingRequest:
    """Build the request sent to the booking backend.

    Raises :class:`SerializationError` if the notes payload cannot be encoded
    losslessly. Such a request must not be submitted.
    """
    request: t.BookingRequest = {
        "serviceId": offering["id"],
        "bookingDate": booking_date(selection),
        "timeSlot": slot_for(offering, selection),
        "serviceType": "offline" if offering.get("inPerson") else "online",
        "customerNotes": encode_notes(build_notes(selection, breakdown)),
        "paymentMethod": payment_method,
    }
    logger.debug("Assembled %s request for %s: %s", booking_prefix(selection["category"]),
                 offering["id"], request["timeSlot"])
    return request
