"""Booking pipeline: validate, price, assemble, submit.

The functions here never raise for an ordinary failure. Each one returns
either a success value or :class:`Failed`, so callers can show a single
message without catching exceptions.
"""

import logging
from typing import NamedTuple

from travelbook import typedefs as t
from travelbook.assembler import assemble
from travelbook.client import BookingGateway
from travelbook.errors import BookingUnconfirmedError, GatewayError, SerializationError
from travelbook.validation import ValidationError, ValidationResult, validate


logger = logging.getLogger(__name__)


class Prepared(NamedTuple):
    request: t.BookingRequest
    breakdown: t.PriceBreakdown


class Booked(NamedTuple):
    record: t.BookingRecord
    request: t.BookingRequest
    breakdown: t.PriceBreakdown


class Failed(NamedTuple):
    error: ValidationError | SerializationError | GatewayError

    @property
    def message(self) -> str:
        if isinstance(self.error, ValidationError):
            return self.error.reason
        if isinstance(self.error, GatewayError):
            return self.error.message
        return "Failed to complete booking. Please try again."

    @property
    def retryable(self) -> bool:
        return isinstance(self.error, GatewayError) and self.error.retryable

    @property
    def record(self) -> t.BookingRecord | None:
        """Booking the backend created despite the failure, if any."""
        if isinstance(self.error, BookingUnconfirmedError):
            return self.error.record
        return None


def quote(offering: t.ServiceOffering, selection: t.TripSelection) -> ValidationResult:
    """Price a selection for display, with the same checks a booking gets."""
    return validate(offering, selection)


def prepare(
    offering: t.ServiceOffering,
    selection: t.TripSelection,
    payment_method: t.PaymentMethod = "online"
) -> Prepared | Failed:
    result = validate(offering, selection)
    if isinstance(result, ValidationError):
        return Failed(result)
    try:
        request = assemble(offering, selection, result.breakdown, payment_method)
    except SerializationError as e:
        logger.error("Could not serialize %s booking for %s: %s", selection["category"], offering["id"], e)
        return Failed(e)
    return Prepared(request, result.breakdown)


async def book(
    gateway: BookingGateway,
    offering: t.ServiceOffering,
    selection: t.TripSelection,
    payment_method: t.PaymentMethod = "online"
) -> Booked | Failed:
    """Run a selection through the whole pipeline and submit it.

    The gateway is only called for a selection that validated and serialized
    cleanly. :class:`~travelbook.errors.SubmissionInProgressError` is the one
    exception let through: submitting twice at once is a caller bug.
    """
    prepared = prepare(offering, selection, payment_method)
    if isinstance(prepared, Failed):
        return prepared

    try:
        record = await gateway.submit(prepared.request, selection["category"])
    except GatewayError as e:
        return Failed(e)
    return Booked(record, prepared.request, prepared.breakdown)
