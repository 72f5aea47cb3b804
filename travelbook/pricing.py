"""Price rules for each booking category.

Every function here is pure and returns a :class:`~travelbook.typedefs.PriceBreakdown`
whose ``total`` is the sum of its three components. Amounts are kept in full
currency units and never rounded.
"""

from collections.abc import Mapping
from typing import assert_never

from travelbook import typedefs as t
from travelbook.dates import nights_between, package_nights, trip_legs
from travelbook.errors import PricingError


CHILD_RATE: dict[t.Category, float] = {"flights": 0.75, "trains": 0.5, "bus": 0.5}
INFANT_RATE: dict[t.Category, float] = {"flights": 0.1}

# Per passenger, added once regardless of trip direction.
TRANSPORT_EXTRAS: dict[t.Category, dict[str, int]] = {
    "flights": {},
    "trains": {"meals": 200, "bedding": 150, "insurance": 100},
    "bus": {"meals": 150, "insurance": 100, "cancellation": 50},
}

CAB_EXTRAS = {"driver": 200, "tollCharges": 100, "parking": 50, "waitingTime": 150}

HOTEL_NIGHTLY_EXTRAS = {"breakfast": 500, "wifi": 200, "parking": 300}
HOTEL_FLAT_EXTRAS = {"lateCheckout": 1000}

MEAL_RATE: dict[t.MealPlan, int] = {"none": 0, "breakfast": 500, "halfBoard": 1500, "fullBoard": 2500}
PACKAGE_TRANSFERS = 2000
PACKAGE_INSURANCE_PER_TRAVELER = 1000
PACKAGE_GUIDE_PER_NIGHT = 3000


def breakdown(base: float, adjustments: float = 0, addons: float = 0) -> t.PriceBreakdown:
    return {
        "base": base,
        "perPassengerOrUnitAdjustments": adjustments,
        "addonsTotal": addons,
        "total": base + adjustments + addons,
    }


def _require_positive(**counts: int) -> None:
    for name, value in counts.items():
        if value < 1:
            raise PricingError(f"{name} must be at least 1, got {value}")


def _require_non_negative(**counts: int) -> None:
    for name, value in counts.items():
        if value < 0:
            raise PricingError(f"{name} cannot be negative, got {value}")


def _selected(extras: Mapping[str, object] | None, fees: Mapping[str, int]) -> int:
    if not extras:
        return 0
    return sum(fee for key, fee in fees.items() if extras.get(key))


def price_transport(
    category: t.Category,
    base: float,
    passengers: t.PassengerMix,
    trip_type: t.TripType,
    extras: Mapping[str, object] | None = None
) -> t.PriceBreakdown:
    """Passenger-scaled fare for flights, trains and buses.

    One-way cost is ``base*adults + base*child_rate*children`` plus
    ``base*infant_rate*infants`` where the category has an infant tier.
    A round trip costs exactly twice the one-way fare.
    """
    if category not in CHILD_RATE:
        raise PricingError(f"{category} is not priced per passenger")
    adults = passengers["adults"]
    children = passengers["children"]
    infants = passengers.get("infants", 0)
    _require_positive(adults=adults)
    _require_non_negative(children=children, infants=infants)
    if infants and category not in INFANT_RATE:
        raise PricingError(f"{category} has no infant fare")

    legs = trip_legs(trip_type)
    adjustments = base * CHILD_RATE[category] * children
    if category in INFANT_RATE:
        adjustments += base * INFANT_RATE[category] * infants
    addons = _selected(extras, TRANSPORT_EXTRAS[category]) * (adults + children)
    return breakdown(base * adults * legs, adjustments * legs, addons)


def price_flight(base: float, passengers: t.PassengerMix, trip_type: t.TripType,
                 extras: Mapping[str, object] | None = None) -> t.PriceBreakdown:
    return price_transport("flights", base, passengers, trip_type, extras)


def price_train(base: float, passengers: t.PassengerMix, trip_type: t.TripType,
                extras: Mapping[str, object] | None = None) -> t.PriceBreakdown:
    return price_transport("trains", base, passengers, trip_type, extras)


def price_bus(base: float, passengers: t.PassengerMix, trip_type: t.TripType,
              extras: Mapping[str, object] | None = None) -> t.PriceBreakdown:
    return price_transport("bus", base, passengers, trip_type, extras)


def price_cab(base: float, trip_type: t.TripType, extras: t.CabExtras | None = None) -> t.PriceBreakdown:
    """Cab fare: the tariff per leg plus flat add-on fees."""
    return breakdown(base * trip_legs(trip_type), 0, _selected(extras, CAB_EXTRAS))


def price_hotel(base: float, nights: int, rooms: int, extras: t.HotelExtras | None = None) -> t.PriceBreakdown:
    _require_positive(nights=nights, rooms=rooms)
    addons = _selected(extras, HOTEL_NIGHTLY_EXTRAS) * nights * rooms + _selected(extras, HOTEL_FLAT_EXTRAS)
    return breakdown(base * nights * rooms, 0, addons)


def price_package(
    base: float,
    travelers: int,
    nights: int,
    meal_plan: t.MealPlan,
    addons: t.PackageAddons | None = None
) -> t.PriceBreakdown:
    """Package price.

    The accommodation tariff already covers the whole stay per traveler, so it
    is scaled by travelers only. Meals scale by nights and travelers.
    """
    _require_positive(travelers=travelers, nights=nights)
    if meal_plan not in MEAL_RATE:
        raise PricingError(f"Unknown meal plan: {meal_plan!r}")

    addons = addons or {}
    addon_total = 0
    if addons.get("transfers"):
        addon_total += PACKAGE_TRANSFERS
    if addons.get("travelInsurance"):
        addon_total += PACKAGE_INSURANCE_PER_TRAVELER * travelers
    if addons.get("guide"):
        addon_total += PACKAGE_GUIDE_PER_NIGHT * nights
    return breakdown(base * travelers, nights * travelers * MEAL_RATE[meal_plan], addon_total)


def variant_of(selection: t.TripSelection) -> str:
    """Name of the tariff entry a selection refers to."""
    match selection["category"]:
        case "flights":
            return selection["flightClass"]  # type: ignore[typeddict-item]
        case "trains":
            return selection["trainClass"]  # type: ignore[typeddict-item]
        case "bus":
            return selection["busClass"]  # type: ignore[typeddict-item]
        case "cab":
            return selection["vehicleType"]  # type: ignore[typeddict-item]
        case "hotels":
            return selection["roomType"]  # type: ignore[typeddict-item]
        case "packages":
            return selection["accommodationType"]  # type: ignore[typeddict-item]
        case other:
            assert_never(other)


def price_selection(offering: t.ServiceOffering, selection: t.TripSelection) -> t.PriceBreakdown:
    """Price ``selection`` against the offering's tariff.

    Raises :class:`KeyError` for a variant missing from the tariff and
    :class:`PricingError` for counts that cannot be priced. Run the validator
    first to get these as user-facing messages instead.
    """
    base = offering["tariff"][variant_of(selection)]["price"]
    match selection["category"]:
        case "flights" | "trains" | "bus":
            sel: t.TransportSelection = selection  # type: ignore[assignment]
            return price_transport(sel["category"], base, sel["passengers"], sel["tripType"], sel.get("extras"))
        case "cab":
            return price_cab(base, selection["tripType"], selection["extras"])  # type: ignore[typeddict-item]
        case "hotels":
            nights = nights_between(selection["checkIn"], selection["checkOut"])  # type: ignore[typeddict-item]
            return price_hotel(base, nights, selection["rooms"], selection["extras"])  # type: ignore[typeddict-item]
        case "packages":
            pkg: t.PackageSelection = selection  # type: ignore[assignment]
            return price_package(base, pkg["travelers"], package_nights(pkg), pkg["mealPlan"], pkg["addons"])
        case other:
            assert_never(other)
