import datetime

import pytest

from travelbook.dates import booking_date, nights_between, package_nights, slot_for, time_slot, trip_legs
from travelbook.errors import InvalidDateRange
from travelbook.typedefs import ContactInfo, ServiceOffering


def test_nights_whole_days() -> None:
    assert nights_between(datetime.date(2026, 12, 24), datetime.date(2026, 12, 27)) == 3


def test_nights_partial_day_rounds_up() -> None:
    check_in = datetime.datetime(2026, 12, 24, 14)
    assert nights_between(check_in, check_in + datetime.timedelta(hours=1)) == 1
    assert nights_between(check_in, check_in + datetime.timedelta(days=1, minutes=1)) == 2


@pytest.mark.parametrize("days", (0, -1))
def test_nights_requires_check_out_after_check_in(days: int) -> None:
    day = datetime.date(2026, 12, 24)
    with pytest.raises(InvalidDateRange):
        nights_between(day, day + datetime.timedelta(days=days))


def test_trip_legs() -> None:
    assert trip_legs("one-way") == 1
    assert trip_legs("round-trip") == 2
    with pytest.raises(ValueError):
        trip_legs("multi-city")  # type: ignore[arg-type]


def test_time_slot_wraps_midnight() -> None:
    assert time_slot("09:00", 120) == {"start": "09:00", "end": "11:00"}
    assert time_slot("22:45", 90) == {"start": "22:45", "end": "00:15"}
    assert time_slot("8:05", 480) == {"start": "08:05", "end": "16:05"}


def test_time_slot_rejects_bad_clock() -> None:
    with pytest.raises(ValueError):
        time_slot("25:00", 60)


def test_package_nights(contact: ContactInfo) -> None:
    pkg = {"category": "packages", "accommodationType": "standard", "travelers": 2,
           "travelDate": datetime.date(2026, 12, 24), "returnDate": datetime.date(2026, 12, 28),
           "mealPlan": "none", "addons": {}, "contactInfo": contact}
    assert package_nights(pkg) == 4  # type: ignore[arg-type]
    assert package_nights({**pkg, "nights": 2}) == 2  # type: ignore[arg-type]
    del pkg["returnDate"]
    with pytest.raises(InvalidDateRange):
        package_nights(pkg)  # type: ignore[arg-type]


def test_default_slots(bus: ServiceOffering, hotel: ServiceOffering, contact: ContactInfo) -> None:
    day = datetime.date(2026, 12, 24)
    bus_selection = {"category": "bus", "busClass": "sleeper", "tripType": "one-way",
                     "passengers": {"adults": 1, "children": 0}, "travelDate": day, "contactInfo": contact}
    assert slot_for(bus, bus_selection) == {"start": "08:00", "end": "18:00"}  # type: ignore[arg-type]
    assert slot_for(bus, {**bus_selection, "departureTime": "21:30"}) == {  # type: ignore[arg-type]
        "start": "21:30", "end": "07:30"}

    hotel_selection = {"category": "hotels", "roomType": "standard", "rooms": 1,
                       "checkIn": datetime.datetime(2026, 12, 24, 15), "checkOut": day + datetime.timedelta(days=2),
                       "extras": {}, "contactInfo": contact}
    assert slot_for(hotel, hotel_selection) == {"start": "14:00", "end": "11:00"}  # type: ignore[arg-type]
    assert booking_date(hotel_selection) == day  # type: ignore[arg-type]


def test_train_slot_ignores_offering_duration(train: ServiceOffering, contact: ContactInfo) -> None:
    selection = {"category": "trains", "trainClass": "ac3", "tripType": "one-way",
                 "passengers": {"adults": 1, "children": 0}, "travelDate": datetime.date(2026, 12, 24),
                 "contactInfo": contact}
    offering: ServiceOffering = {**train, "duration": 300}
    assert slot_for(offering, selection) == {"start": "08:00", "end": "16:00"}  # type: ignore[arg-type]
    assert slot_for(offering, {**selection, "departureTime": "20:15"}) == {  # type: ignore[arg-type]
        "start": "20:15", "end": "04:15"}
