"""Pre-submission checks for a booking selection.

:func:`validate` runs the checks in a fixed order and stops at the first one
that fails. A failure is returned as a :class:`ValidationError` value for the
caller to show to the user, never raised.
"""

import logging
from typing import NamedTuple, get_args

from travelbook import typedefs as t
from travelbook.dates import is_after
from travelbook.pricing import MEAL_RATE, price_selection, variant_of


logger = logging.getLogger(__name__)

PASSENGER_CATEGORIES: frozenset[t.Category] = frozenset({"flights", "trains", "bus", "cab"})
FARE_CATEGORIES: frozenset[t.Category] = frozenset({"flights", "trains", "bus"})
INFANT_CATEGORIES: frozenset[t.Category] = frozenset({"flights"})
TRIP_TYPES: tuple[t.TripType, ...] = get_args(t.TripType)


class ValidationError(NamedTuple):
    title: str
    detail: str

    @property
    def reason(self) -> str:
        return f"{self.title}: {self.detail}"


class Valid(NamedTuple):
    breakdown: t.PriceBreakdown


ValidationResult = Valid | ValidationError


def _blank(value: object) -> bool:
    return not isinstance(value, str) or not value.strip()


def check_contact(selection: t.TripSelection) -> ValidationError | None:
    contact = selection.get("contactInfo") or {}
    name, email, phone = contact.get("name"), contact.get("email"), contact.get("phone")
    if _blank(name) or (_blank(email) and _blank(phone)):
        return ValidationError("Missing Information", "contact details")
    if not _blank(email) and "@" not in email:  # type: ignore[operator]
        return ValidationError("Invalid Email", "Please enter a valid email address")
    if selection["category"] == "cab":
        if _blank(selection.get("pickupLocation")) or _blank(selection.get("dropoffLocation")):
            return ValidationError("Missing Information", "pickup and dropoff locations")
    return None


def check_variant(offering: t.ServiceOffering, selection: t.TripSelection) -> ValidationError | None:
    if offering["category"] != selection["category"]:
        return ValidationError("Invalid Selection",
                               f"{offering['name']} is not bookable as {selection['category']}")
    variant = variant_of(selection)
    entry = offering["tariff"].get(variant)
    if entry is None:
        return ValidationError("Unavailable", f"{variant} is not offered by {offering['name']}")
    if entry.get("available") is not True:
        return ValidationError("Unavailable", f"{variant} is not available for {offering['name']}")
    return None


def _check_passengers(category: t.Category, passengers: t.PassengerMix) -> ValidationError | None:
    adults = passengers.get("adults", 0)
    children = passengers.get("children", 0)
    infants = passengers.get("infants", 0)
    if min(adults, children, infants) < 0:
        return ValidationError("Invalid Selection", "passenger counts cannot be negative")
    if adults < 1:
        return ValidationError("Invalid Selection", "at least one adult is required")
    if infants:
        if category in FARE_CATEGORIES and category not in INFANT_CATEGORIES:
            return ValidationError("Invalid Selection", f"infant fares are not offered for {category}")
        if infants > adults:
            return ValidationError("Invalid Selection", "each infant must travel with an adult")
    return None


def check_counts(selection: t.TripSelection) -> ValidationError | None:
    category = selection["category"]
    if category in PASSENGER_CATEGORIES:
        trip_type = selection["tripType"]  # type: ignore[typeddict-item]
        if trip_type not in TRIP_TYPES:
            return ValidationError("Invalid Selection", f"unknown trip type {trip_type!r}")
        return _check_passengers(category, selection["passengers"])  # type: ignore[typeddict-item]
    if category == "hotels":
        if selection["rooms"] < 1:  # type: ignore[typeddict-item]
            return ValidationError("Invalid Selection", "at least one room is required")
        if "guests" in selection:
            return _check_passengers(category, selection["guests"])  # type: ignore[typeddict-item]
        return None
    if selection["travelers"] < 1:  # type: ignore[typeddict-item]
        return ValidationError("Invalid Selection", "at least one traveler is required")
    meal_plan = selection["mealPlan"]  # type: ignore[typeddict-item]
    if meal_plan not in MEAL_RATE:
        return ValidationError("Invalid Selection", f"unknown meal plan {meal_plan!r}")
    if "nights" in selection and selection["nights"] < 1:  # type: ignore[typeddict-item]
        return ValidationError("Invalid Selection", "a package needs at least one night")
    return None


def check_dates(selection: t.TripSelection) -> ValidationError | None:
    match selection["category"]:
        case "hotels":
            if not is_after(selection["checkIn"], selection["checkOut"]):  # type: ignore[typeddict-item]
                return ValidationError("Invalid Dates", "Check-out date must be after check-in date")
        case "packages":
            if "returnDate" in selection:
                if not is_after(selection["travelDate"], selection["returnDate"]):  # type: ignore[typeddict-item]
                    return ValidationError("Invalid Dates", "Return date must be after travel date")
            elif "nights" not in selection:
                return ValidationError("Missing Information", "number of nights or a return date")
        case "flights" | "trains" | "bus":
            if selection["tripType"] == "round-trip" and "returnDate" in selection:  # type: ignore[typeddict-item]
                start = selection.get("departureDate") or selection.get("travelDate")
                if not is_after(start, selection["returnDate"]):  # type: ignore[arg-type, typeddict-item]
                    return ValidationError("Invalid Date", "Return date must be after departure date")
    return None


def validate(offering: t.ServiceOffering, selection: t.TripSelection) -> ValidationResult:
    """Check ``selection`` and price it.

    Returns :class:`Valid` carrying the price breakdown, or the first
    :class:`ValidationError` found.
    """
    error = (check_contact(selection)
             or check_variant(offering, selection)
             or check_counts(selection)
             or check_dates(selection))
    if error is None:
        result = price_selection(offering, selection)
        if result["total"] > 0:
            return Valid(result)
        error = ValidationError("Invalid Total", "the booking total must be greater than zero")

    logger.debug("Rejected %s selection for %s: %s", selection["category"], offering["id"], error.reason)
    return error
