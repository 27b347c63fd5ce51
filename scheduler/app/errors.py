# scheduler/app/errors.py
"""Errors raised by the scheduler client."""

GENERIC_BOOKING_ERROR = "Failed to book selected slots"
GENERIC_LOAD_ERROR = "Failed to load resource"

AUTH_REQUIRED_MESSAGE = "Please login to continue, If you don't have an account do well to register"
FORBIDDEN_MESSAGE = "Only customers or administrators can book resources"
EMPTY_SELECTION_MESSAGE = "Please select at least one time slot to book"


class BookingError(Exception):
    """Base error with a user-facing message."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ApiTransportError(BookingError):
    """Request never produced a response (timeout, DNS, connection reset)."""


class ResourceLoadError(BookingError):
    """Resource could not be fetched or decoded."""
