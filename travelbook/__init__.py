__version__ = "0.3.0"

from travelbook.assembler import BOOKING_PREFIXES, assemble, booking_prefix, decode_notes, encode_notes
from travelbook.booking import Booked, Failed, Prepared, book, prepare, quote
from travelbook.client import BookingClient, BookingGateway
from travelbook.config import PROD, SANDBOX, Settings
from travelbook.dates import nights_between
from travelbook.errors import (
    BookingUnconfirmedError,
    GatewayError,
    GatewayNetworkError,
    GatewayRejectedError,
    GatewayUnknownError,
    SerializationError,
    SubmissionInProgressError,
)
from travelbook.pricing import price_selection
from travelbook.typedefs import (
    BookingRecord,
    BookingRequest,
    BusSelection,
    CabSelection,
    ContactInfo,
    FlightSelection,
    HotelSelection,
    PackageSelection,
    PassengerMix,
    PriceBreakdown,
    ServiceId,
    ServiceOffering,
    TrainSelection,
    TripSelection,
)
from travelbook.validation import Valid, ValidationError, validate

__all__ = (
    "BOOKING_PREFIXES", "PROD", "SANDBOX", "Booked", "BookingClient", "BookingGateway", "BookingRecord",
    "BookingRequest", "BookingUnconfirmedError", "BusSelection", "CabSelection", "ContactInfo", "Failed",
    "FlightSelection", "GatewayError", "GatewayNetworkError", "GatewayRejectedError", "GatewayUnknownError",
    "HotelSelection", "PackageSelection", "PassengerMix", "Prepared", "PriceBreakdown", "SerializationError",
    "ServiceId", "ServiceOffering", "Settings", "SubmissionInProgressError", "TrainSelection", "TripSelection",
    "Valid", "ValidationError", "assemble", "book", "booking_prefix", "decode_notes", "encode_notes",
    "nights_between", "prepare", "price_selection", "quote", "validate",
)
