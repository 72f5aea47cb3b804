import math
from datetime import date, datetime, time, timedelta

from travelbook import typedefs as t
from travelbook.errors import InvalidDateRange


DAY = timedelta(days=1)

# (start, duration in minutes) used when a selection gives no departure time.
DEFAULT_SLOTS: dict[t.Category, tuple[str, int]] = {
    "flights": ("09:00", 120),
    "trains": ("08:00", 480),
    "bus": ("08:00", 480),
    "cab": ("09:00", 60),
}
HOTEL_CHECK_IN = "14:00"
HOTEL_CHECK_OUT = "11:00"
PACKAGE_DAY = ("10:00", "18:00")


def _as_datetime(value: t.DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time())


def nights_between(start: t.DateLike, end: t.DateLike) -> int:
    """Return the number of nights between ``start`` and ``end``.

    Partial days count as a full night. ``end`` must be strictly after ``start``,
    so the result is always at least 1.
    """
    delta = _as_datetime(end) - _as_datetime(start)
    if delta <= timedelta(0):
        raise InvalidDateRange(f"{end} is not after {start}")
    return math.ceil(delta / DAY)


def is_after(start: t.DateLike, end: t.DateLike) -> bool:
    return _as_datetime(end) > _as_datetime(start)


def trip_legs(trip_type: t.TripType) -> int:
    if trip_type == "round-trip":
        return 2
    if trip_type == "one-way":
        return 1
    raise ValueError(f"Unknown trip type: {trip_type!r}")


def package_nights(selection: t.PackageSelection) -> int:
    """Nights of a package stay: explicit ``nights`` wins over the date range."""
    if "nights" in selection:
        return selection["nights"]
    if "returnDate" in selection:
        return nights_between(selection["travelDate"], selection["returnDate"])
    raise InvalidDateRange("package needs either nights or a return date")


def parse_clock(value: str) -> tuple[int, int]:
    hours, _, mins = value.partition(":")
    h, m = int(hours), int(mins)
    if not (0 <= h < 24 and 0 <= m < 60):
        raise ValueError(f"Invalid time of day: {value!r}")
    return h, m


def format_clock(hours: int, mins: int) -> str:
    return f"{hours:02d}:{mins:02d}"


def time_slot(start: str, duration_minutes: int) -> t.TimeSlot:
    h, m = parse_clock(start)
    end = (h * 60 + m + duration_minutes) % (24 * 60)
    return {"start": format_clock(h, m), "end": format_clock(*divmod(end, 60))}


def iso_date(value: t.DateLike) -> str:
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def booking_date(selection: t.TripSelection) -> date:
    """Calendar day the booking starts on."""
    match selection["category"]:
        case "flights":
            value = selection["departureDate"]  # type: ignore[typeddict-item]
        case "trains" | "bus" | "packages":
            value = selection["travelDate"]  # type: ignore[typeddict-item]
        case "cab":
            value = selection["pickupDate"]  # type: ignore[typeddict-item]
        case "hotels":
            value = selection["checkIn"]  # type: ignore[typeddict-item]
        case other:
            raise ValueError(f"Unknown category: {other!r}")
    return value.date() if isinstance(value, datetime) else value


def slot_for(offering: t.ServiceOffering, selection: t.TripSelection) -> t.TimeSlot:
    category = selection["category"]
    if category == "hotels":
        return {"start": HOTEL_CHECK_IN, "end": HOTEL_CHECK_OUT}
    if category == "packages":
        return {"start": PACKAGE_DAY[0], "end": PACKAGE_DAY[1]}

    start, duration = DEFAULT_SLOTS[category]
    if category == "cab":
        start = selection["pickupTime"]  # type: ignore[typeddict-item]
    else:
        start = selection.get("departureTime", start)  # type: ignore[union-attr]
    if category == "bus":
        duration = offering.get("duration", duration)
    return time_slot(start, duration)
