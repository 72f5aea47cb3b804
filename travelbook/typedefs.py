from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Literal, NewType, NotRequired, TypedDict


BookingId = NewType("BookingId", str)
BookingNumber = NewType("BookingNumber", str)  # <PREFIX>-<8 digits>
BookingStatus = Literal["pending", "confirmed", "in_progress", "completed", "cancelled", "no_show"]
Category = Literal["flights", "hotels", "trains", "bus", "cab", "packages"]
MealPlan = Literal["none", "breakfast", "halfBoard", "fullBoard"]
PaymentMethod = Literal["online", "cash", "wallet"]
ServiceId = NewType("ServiceId", str)
ServiceType = Literal["online", "offline"]
TripType = Literal["one-way", "round-trip"]

DateLike = date | datetime


class TariffEntry(TypedDict):
    price: float
    available: bool


class ServiceOffering(TypedDict):
    """Catalogue entry for a bookable service, read-only for this package."""

    id: ServiceId
    name: str
    category: Category
    tariff: Mapping[str, TariffEntry]
    duration: NotRequired[int]  # minutes
    inPerson: NotRequired[bool]


class PassengerMix(TypedDict):
    adults: int
    children: int
    infants: NotRequired[int]


class ContactInfo(TypedDict):
    name: str
    email: str
    phone: str


class PassengerDetail(TypedDict, total=False):
    firstName: str
    lastName: str
    age: int
    gender: Literal["male", "female", "other"]
    dateOfBirth: str  # YYYY-MM-DD
    berthPreference: str
    seatPreference: str


class FlightExtras(TypedDict, total=False):
    baggage: str
    meals: bool
    seatSelection: bool
    specialAssistance: str


class TrainExtras(TypedDict, total=False):
    meals: bool
    bedding: bool
    insurance: bool


class BusExtras(TypedDict, total=False):
    meals: bool
    insurance: bool
    cancellation: bool


class CabExtras(TypedDict, total=False):
    driver: bool
    tollCharges: bool
    parking: bool
    waitingTime: bool


class HotelExtras(TypedDict, total=False):
    breakfast: bool
    wifi: bool
    parking: bool
    lateCheckout: bool


class PackageAddons(TypedDict, total=False):
    sightseeing: bool
    transfers: bool
    travelInsurance: bool
    guide: bool


class FlightSelection(TypedDict):
    category: Literal["flights"]
    flightClass: str
    tripType: TripType
    passengers: PassengerMix
    departureDate: DateLike
    returnDate: NotRequired[DateLike]
    departureTime: NotRequired[str]  # HH:MM
    extras: NotRequired[FlightExtras]
    passengerDetails: NotRequired[list[PassengerDetail]]
    contactInfo: ContactInfo


class TrainSelection(TypedDict):
    category: Literal["trains"]
    trainClass: str
    tripType: TripType
    passengers: PassengerMix
    travelDate: DateLike
    returnDate: NotRequired[DateLike]
    departureTime: NotRequired[str]
    extras: NotRequired[TrainExtras]
    passengerDetails: NotRequired[list[PassengerDetail]]
    contactInfo: ContactInfo


class BusSelection(TypedDict):
    category: Literal["bus"]
    busClass: str
    tripType: TripType
    passengers: PassengerMix
    travelDate: DateLike
    returnDate: NotRequired[DateLike]
    departureTime: NotRequired[str]
    extras: NotRequired[BusExtras]
    passengerDetails: NotRequired[list[PassengerDetail]]
    contactInfo: ContactInfo


class CabSelection(TypedDict):
    category: Literal["cab"]
    vehicleType: str
    tripType: TripType
    passengers: PassengerMix
    pickupDate: DateLike
    pickupTime: str
    pickupLocation: str
    dropoffLocation: str
    extras: CabExtras
    passengerDetails: NotRequired[list[PassengerDetail]]
    contactInfo: ContactInfo


class HotelSelection(TypedDict):
    category: Literal["hotels"]
    roomType: str
    rooms: int
    checkIn: DateLike
    checkOut: DateLike
    guests: NotRequired[PassengerMix]
    extras: HotelExtras
    guestDetails: NotRequired[list[PassengerDetail]]
    contactInfo: ContactInfo


class PackageSelection(TypedDict):
    category: Literal["packages"]
    accommodationType: str
    travelers: int
    travelDate: DateLike
    nights: NotRequired[int]
    returnDate: NotRequired[DateLike]
    mealPlan: MealPlan
    addons: PackageAddons
    travelerDetails: NotRequired[list[PassengerDetail]]
    contactInfo: ContactInfo


TransportSelection = FlightSelection | TrainSelection | BusSelection
TripSelection = FlightSelection | TrainSelection | BusSelection | CabSelection | HotelSelection | PackageSelection


class PriceBreakdown(TypedDict):
    base: float
    perPassengerOrUnitAdjustments: float
    addonsTotal: float
    total: float


class TimeSlot(TypedDict):
    start: str  # HH:MM
    end: str  # HH:MM


class BookingRequest(TypedDict):
    serviceId: ServiceId
    bookingDate: date
    timeSlot: TimeSlot
    serviceType: ServiceType
    customerNotes: str  # JSON payload, always carries totalPrice
    paymentMethod: PaymentMethod


class BookingRecord(TypedDict):
    _id: BookingId
    bookingNumber: BookingNumber


class _FieldError(TypedDict):
    field: str
    message: str


class _Response(TypedDict):
    """Envelope returned by every backend endpoint."""

    success: bool
    data: NotRequired[Any]
    message: NotRequired[str]
    error: NotRequired[str]
    errors: NotRequired[list[_FieldError]]


class BookingSummary(TypedDict):
    _id: BookingId
    bookingNumber: BookingNumber
    status: BookingStatus
    bookingDate: str
    timeSlot: TimeSlot
    customerNotes: NotRequired[str]
