"""Exceptions raised by travelbook.

Validation problems are not exceptions: see :class:`travelbook.validation.ValidationError`.
"""

from travelbook.typedefs import BookingRecord


class TravelbookError(Exception):
    """Base class for all travelbook exceptions."""


class PricingError(TravelbookError, ValueError):
    """Rule function called with counts or options it cannot price."""


class InvalidDateRange(TravelbookError, ValueError):
    """End of a date range is not strictly after its start."""


class SerializationError(TravelbookError):
    """customerNotes payload could not be encoded or decoded losslessly."""


class GatewayError(TravelbookError):
    """Booking backend call failed."""

    retryable = False

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.status = status


class GatewayNetworkError(GatewayError):
    """Connection failure or timeout. Safe to offer a retry."""

    retryable = True


class GatewayRejectedError(GatewayError):
    """Backend refused the request. ``message`` is the server's own text."""


class GatewayUnknownError(GatewayError):
    """Server error or a response that could not be understood."""

    def __init__(self, message: str = "Failed to create booking. Please try again.", status: int | None = None):
        super().__init__(message, status)


class SubmissionInProgressError(TravelbookError, RuntimeError):
    """A booking was submitted while the previous one is still pending."""


class BookingUnconfirmedError(GatewayUnknownError):
    """Backend created a booking but its number does not match the category.

    ``record`` is what the backend returned, so the booking can be traced.
    """

    def __init__(self, record: BookingRecord, status: int | None = None):
        super().__init__(
            f"Booking {record['bookingNumber']} was created but could not be confirmed. "
            "Please contact support before booking again.",
            status,
        )
        self.record = record
