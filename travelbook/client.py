import json
import logging
from collections import deque
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from functools import partial
from textwrap import indent
from types import TracebackType
from typing import Any, Generic, NoReturn, Self, TypeVar

import aiojobs
from aiohttp import (
    ClientConnectionError,
    ClientError,
    ClientPayloadError,
    ClientResponse,
    ClientSession,
    ClientTimeout,
    ContentTypeError,
)
from yarl import URL

from travelbook import typedefs as t
from travelbook.assembler import matches_category
from travelbook.config import PROD, Settings
from travelbook.errors import (
    BookingUnconfirmedError,
    GatewayError,
    GatewayNetworkError,
    GatewayRejectedError,
    GatewayUnknownError,
    SubmissionInProgressError,
)


_T = TypeVar("_T")

logger = logging.getLogger(__name__)

BOOKINGS_PATH = "/api/service-bookings"
TIMEOUT_STATUSES = frozenset({408, 504})
PREFETCH_BELOW = 10


class CustomEncoder(json.JSONEncoder):
    def default(self, obj: object) -> Any:
        if isinstance(obj, date):
            return obj.isoformat()

        return super().default(obj)


@contextmanager
def network_errors() -> Iterator[None]:
    """Turn transport failures into :class:`GatewayError` subclasses.

    Dropped connections, truncated bodies and timeouts are retryable network
    errors. Any other aiohttp client error is unknown.
    """
    try:
        yield
    except ClientConnectionError as e:
        raise GatewayNetworkError(f"Could not reach booking service: {e}") from e
    except ClientPayloadError as e:
        raise GatewayNetworkError(f"Booking service response was cut off: {e}") from e
    except TimeoutError as e:
        raise GatewayNetworkError("Booking service timed out") from e
    except ClientError as e:
        logger.warning("Booking service call failed: %r", e)
        raise GatewayUnknownError() from e


async def raise_error(resp: ClientResponse) -> NoReturn:
    try:
        result = await resp.json()
    except (ContentTypeError, ValueError):
        result = None
    if not isinstance(result, dict):
        result = None
        msg = repr(await resp.read())
    else:
        msg = result.get("message") or result.get("error") or resp.reason or ""
        if result.get("errors"):
            msg += "\n" + indent("\n".join(f"- {e.get('field')}: {e.get('message')}" for e in result["errors"]), "  ")

    if resp.status in TIMEOUT_STATUSES:
        raise GatewayNetworkError(msg or "Booking service timed out", resp.status)
    if 400 <= resp.status < 500 and result is not None:
        raise GatewayRejectedError(msg, resp.status)
    logger.warning("Booking service returned %s: %s", resp.status, msg)
    raise GatewayUnknownError(status=resp.status)


async def read_data(resp: ClientResponse) -> Any:
    """Return the ``data`` member of a successful response envelope."""
    if not resp.ok:
        await raise_error(resp)
    try:
        result: t._Response = await resp.json()
    except (ContentTypeError, ValueError) as e:
        raise GatewayUnknownError(status=resp.status) from e
    if not isinstance(result, dict):
        raise GatewayUnknownError(status=resp.status)
    if not result.get("success"):
        raise GatewayRejectedError(result.get("error") or result.get("message") or "Booking was not accepted",
                                   resp.status)
    return result.get("data")


class ResultsIterator(Generic[_T]):
    """Walk an offset-paginated listing, fetching the next page in the background."""

    def __init__(self, client: ClientSession, scheduler: aiojobs.Scheduler, path: str,
                 query: dict[str, str | int], page_size: int, key: str):
        self._client = client
        self._scheduler = scheduler
        self._path = path
        self._query = query
        self._page_size = page_size
        self._key = key
        self._results: deque[_T] = deque()
        self._task: aiojobs.Job[None] | None = None
        self._offset = 0
        self._more = True
        self.total: int | None = None

    async def _fetch(self) -> None:
        query = {**self._query, "limit": self._page_size, "offset": self._offset}
        with network_errors():
            async with self._client.get(self._path, params=query) as resp:
                data = await read_data(resp)

        items = data[self._key]
        self._results.extend(items)
        self._offset += len(items)
        self._more = bool(items) and bool(data.get("hasMore"))
        self.total = data.get("total", self.total)
        self._task = None

    def __aiter__(self) -> Self:
        return self

    async def __anext__(self) -> _T:
        if self._more and not self._task and len(self._results) < PREFETCH_BELOW:
            self._task = await self._scheduler.spawn(self._fetch())

        if not self._results:
            if self._task:
                await self._task.wait()
            if not self._results:
                raise StopAsyncIteration()

        return self._results.popleft()


class BookingClient:
    '''
    Async client for the service-booking backend.

    Use it as an async context manager; the HTTP session lives for the duration of the block.
    '''
    def __init__(self, token: str, base_url: str = PROD, timeout: float = 30, page_size: int = 20):
        self._token = token
        self._base_url = URL(base_url)
        self._timeout = ClientTimeout(total=timeout)
        self._page_size = page_size

    @classmethod
    def from_settings(cls, settings: Settings) -> Self:
        return cls(settings.API_TOKEN.get_secret_value(), settings.API_URL,
                   timeout=settings.TIMEOUT_SECONDS, page_size=settings.PAGE_SIZE)

    async def create_booking(self, request: t.BookingRequest) -> t.BookingRecord:
        with network_errors():
            async with self._client.post(BOOKINGS_PATH, json=request) as resp:
                data = await read_data(resp)

        if not isinstance(data, dict) or not data.get("bookingNumber"):
            raise GatewayUnknownError()
        booking_id = data.get("_id") or data.get("id")
        if not booking_id:
            raise GatewayUnknownError()
        return {"_id": t.BookingId(booking_id), "bookingNumber": t.BookingNumber(data["bookingNumber"])}

    async def get_booking(self, booking_id: t.BookingId) -> Any:
        with network_errors():
            async with self._client.get(f"{BOOKINGS_PATH}/{booking_id}") as resp:
                return await read_data(resp)

    async def cancel_booking(self, booking_id: t.BookingId, reason: str | None = None) -> Any:
        body = {"reason": reason} if reason else {}
        with network_errors():
            async with self._client.patch(f"{BOOKINGS_PATH}/{booking_id}/cancel", json=body) as resp:
                data = await read_data(resp)
        logger.info("Cancelled booking %s", booking_id)
        return data

    def list_bookings(self, status: t.BookingStatus | None = None) -> ResultsIterator[t.BookingSummary]:
        query: dict[str, str | int] = {}
        if status is not None:
            query["status"] = status
        return ResultsIterator[t.BookingSummary](self._client, self._scheduler, BOOKINGS_PATH, query,
                                                 self._page_size, "bookings")

    async def __aenter__(self) -> Self:
        self._client = ClientSession(
            base_url=self._base_url,
            headers={"Authorization": f"Bearer {self._token}"},
            timeout=self._timeout,
            json_serialize=partial(json.dumps, cls=CustomEncoder),
        )
        self._scheduler = aiojobs.Scheduler(wait_timeout=0)
        await self._client.__aenter__()
        await self._scheduler.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None
    ) -> None:
        await self._scheduler.__aexit__(exc_type, exc_val, exc_tb)
        await self._client.__aexit__(exc_type, exc_val, exc_tb)


class BookingGateway:
    """Submits assembled requests, one at a time.

    Failures surface as :class:`~travelbook.errors.GatewayError` subclasses.
    Nothing is retried here; :attr:`GatewayError.retryable` tells the caller
    whether offering a retry makes sense.
    """

    def __init__(self, client: BookingClient):
        self._client = client
        self._pending = False

    @property
    def pending(self) -> bool:
        return self._pending

    async def submit(self, request: t.BookingRequest, category: t.Category) -> t.BookingRecord:
        if self._pending:
            raise SubmissionInProgressError("A booking is already being submitted")

        self._pending = True
        try:
            logger.info("Submitting %s booking for service %s on %s", category, request["serviceId"],
                        request["bookingDate"])
            record = await self._client.create_booking(request)
        except GatewayError as e:
            logger.warning("Booking for service %s failed (%s): %s", request["serviceId"],
                           type(e).__name__, e.message)
            raise
        finally:
            self._pending = False

        if not matches_category(record["bookingNumber"], category):
            logger.warning("Unexpected booking number %r for %s, booking %s needs reconciling",
                           record["bookingNumber"], category, record["_id"])
            raise BookingUnconfirmedError(record)
        logger.info("Booked %s (%s)", record["bookingNumber"], record["_id"])
        return record
