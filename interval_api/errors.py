"""
Booking error taxonomy

Every failure the action endpoints can report maps to one of these types.
The router turns them into `{"message": ...}` JSON with the matching status.
"""

from typing import Optional

UNAVAILABLE_MESSAGE = "Slot not found or not available"


class BookingError(Exception):
    status_code = 500
    default_message = "An unknown error occurred"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BookingError):
    """Malformed or missing request fields"""

    status_code = 400
    default_message = "Invalid request"


class NotFound(BookingError):
    status_code = 400
    default_message = UNAVAILABLE_MESSAGE


class StateConflict(BookingError):
    """Slot is no longer available (already booked or lost the race)"""

    status_code = 400
    default_message = UNAVAILABLE_MESSAGE


class UpstreamFailure(BookingError):
    status_code = 500
    default_message = "Upstream service failed"


class InternalError(BookingError):
    status_code = 500


# Reservation engine failures


class SlotNotFound(NotFound):
    pass


class SlotUnavailable(StateConflict):
    pass


class InvalidPrice(ValidationError):
    default_message = "Invalid slot price"


class InvalidPayer(ValidationError):
    default_message = 'Invalid "account" (wallet) provided'


# External ledger


class LedgerRpcError(UpstreamFailure):
    default_message = "Failed to get blockhash"


def describe_schema_error(exc) -> str:
    """First pydantic error as "field: message" for {"error": ...} bodies"""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    error = errors[0]
    field = ".".join(str(part) for part in error.get("loc", ()))
    message = str(error.get("msg", "invalid value")).removeprefix("Value error, ")
    return f"{field}: {message}" if field else message
