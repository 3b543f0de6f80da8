"""Domain error codes for the bookings module.

Errors fall into four categories that handlers map to HTTP responses:
NotFoundError, ValidationError, UnauthorizedError and ConflictError.
Only concrete subclasses are raised.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND"
    WAITLIST_ENTRY_NOT_FOUND = "WAITLIST_ENTRY_NOT_FOUND"
    INVALID_ID = "INVALID_ID"
    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_SEAT = "INVALID_SEAT"
    INVALID_RATING = "INVALID_RATING"
    INELIGIBLE_USER = "INELIGIBLE_USER"
    UNAUTHORIZED = "UNAUTHORIZED"
    DUPLICATE_BOOKING = "DUPLICATE_BOOKING"
    SESSION_NOT_BOOKABLE = "SESSION_NOT_BOOKABLE"
    SEAT_TAKEN = "SEAT_TAKEN"
    NO_SEATS_AVAILABLE = "NO_SEATS_AVAILABLE"
    SEATS_AVAILABLE = "SEATS_AVAILABLE"
    ALREADY_WAITLISTED = "ALREADY_WAITLISTED"
    NO_MANAGER = "NO_MANAGER"
    INVALID_TRANSITION = "INVALID_TRANSITION"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class NotFoundError(DomainError):
    """A referenced entity does not exist."""


class ValidationError(DomainError):
    """Input is malformed or out of range."""


class UnauthorizedError(DomainError):
    """The caller may not perform this action on this entity."""


class ConflictError(DomainError):
    """The request conflicts with current state."""


class SessionNotFoundError(NotFoundError):
    def __init__(self, session_id: object) -> None:
        super().__init__(code=ErrorCode.SESSION_NOT_FOUND, message="Session not found")
        self.session_id = session_id


class BookingNotFoundError(NotFoundError):
    def __init__(self, booking_id: object) -> None:
        super().__init__(code=ErrorCode.BOOKING_NOT_FOUND, message="Booking not found")
        self.booking_id = booking_id


class WaitlistEntryNotFoundError(NotFoundError):
    def __init__(self, entry_id: object) -> None:
        super().__init__(
            code=ErrorCode.WAITLIST_ENTRY_NOT_FOUND,
            message="Waitlist entry not found",
        )
        self.entry_id = entry_id


class InvalidIdError(ValidationError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self, kind: str) -> None:
        super().__init__(code=ErrorCode.INVALID_ID, message=f"Invalid {kind} ID format")


class InvalidRequestError(ValidationError):
    """Raised when a request body is missing fields or has the wrong types."""

    def __init__(self, message: str = "Invalid request body") -> None:
        super().__init__(code=ErrorCode.INVALID_REQUEST, message=message)


class InvalidSeatError(ValidationError):
    """Raised when a seat number is outside 1..total seats."""

    def __init__(self, seat_number: int, total_seats: int | None) -> None:
        super().__init__(
            code=ErrorCode.INVALID_SEAT,
            message=f"Invalid seat number. Please choose between 1 and {total_seats}.",
        )
        self.seat_number = seat_number


class InvalidRatingError(ValidationError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_RATING,
            message="Rating must be between 1 and 5",
        )


class IneligibleUserError(UnauthorizedError):
    """Raised when the user fails the role/location eligibility check."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INELIGIBLE_USER,
            message="You are not eligible to book this session",
        )


class NotAuthorizedError(UnauthorizedError):
    """Raised when the acting user is not the owner or the owner's manager."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.UNAUTHORIZED, message=message)


class DuplicateBookingError(ConflictError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_BOOKING,
            message="User already has a booking for this session",
        )


class SessionNotBookableError(ConflictError):
    """Raised when a session is not scheduled or has already started."""

    def __init__(self, reason: str) -> None:
        super().__init__(code=ErrorCode.SESSION_NOT_BOOKABLE, message=reason)


class SeatTakenError(ConflictError):
    def __init__(self, seat_number: int) -> None:
        super().__init__(
            code=ErrorCode.SEAT_TAKEN,
            message=f"Seat {seat_number} is already booked. Please select a different seat.",
        )
        self.seat_number = seat_number


class NoSeatsAvailableError(ConflictError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.NO_SEATS_AVAILABLE,
            message="Session no longer has available seats",
        )


class SeatsAvailableError(ConflictError):
    """Raised when joining a waitlist for a session that still has seats."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.SEATS_AVAILABLE,
            message="This session has available seats. Please book directly instead",
        )


class AlreadyWaitlistedError(ConflictError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_WAITLISTED,
            message="You are already in the waitlist for this session",
        )


class NoManagerError(ConflictError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.NO_MANAGER,
            message="No manager is assigned to approve this request",
        )


class InvalidTransitionError(ConflictError):
    """Raised when the transition table has no entry for (status, event)."""

    def __init__(self, status: object, event: object) -> None:
        super().__init__(
            code=ErrorCode.INVALID_TRANSITION,
            message=f"Cannot {getattr(event, 'label', event)} a booking in status "
            f"{getattr(status, 'value', status)}",
        )
        self.status = status
        self.event = event
