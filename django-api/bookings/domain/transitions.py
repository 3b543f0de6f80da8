"""Booking status enum and the table of legal status transitions.

Every status change in the engine goes through ``next_status``. A
(status, event) pair that is missing from ``TRANSITIONS`` is illegal.
"""

from enum import Enum

from bookings.domain.errors import InvalidTransitionError


class BookingStatus(Enum):
    """Lifecycle status of a booking."""

    PENDING = "PENDING"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    CONFIRMED = "CONFIRMED"
    PENDING_CANCELLATION = "PENDING_CANCELLATION"
    WAITLISTED = "WAITLISTED"
    CANCELLED = "CANCELLED"
    REJECTED = "REJECTED"
    NO_SHOW = "NO_SHOW"
    COMPLETED = "COMPLETED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def is_active(self) -> bool:
        """Active bookings block rebooking and keep their seat number."""
        return self not in RELEASED_STATUSES

    @property
    def holds_capacity(self) -> bool:
        """Whether a booking in this status is counted against available seats."""
        return self in CAPACITY_HOLDING_STATUSES


TERMINAL_STATUSES = frozenset(
    {
        BookingStatus.CANCELLED,
        BookingStatus.REJECTED,
        BookingStatus.COMPLETED,
        BookingStatus.NO_SHOW,
    }
)

RELEASED_STATUSES = frozenset({BookingStatus.CANCELLED, BookingStatus.REJECTED})

# Seats released on cancel come from these statuses only.
SEAT_RELEASING_STATUSES = frozenset(
    {
        BookingStatus.PENDING_APPROVAL,
        BookingStatus.CONFIRMED,
        BookingStatus.PENDING_CANCELLATION,
    }
)

CAPACITY_HOLDING_STATUSES = SEAT_RELEASING_STATUSES | {
    BookingStatus.COMPLETED,
    BookingStatus.NO_SHOW,
}


class BookingEvent(Enum):
    """Things that can happen to an existing booking."""

    APPROVE = "approve"
    REJECT = "reject"
    SELECT_SEAT = "select_seat"
    CHANGE_SEAT = "change_seat"
    CANCEL = "cancel"
    REQUEST_CANCELLATION = "request_cancellation"
    APPROVE_CANCELLATION = "approve_cancellation"
    REJECT_CANCELLATION = "reject_cancellation"
    MARK_ABSENT = "mark_absent"
    COMPLETE = "complete"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


_S = BookingStatus
_E = BookingEvent

TRANSITIONS: dict[tuple[BookingStatus, BookingEvent], BookingStatus] = {
    (_S.PENDING, _E.APPROVE): _S.CONFIRMED,
    (_S.PENDING_APPROVAL, _E.APPROVE): _S.CONFIRMED,
    (_S.PENDING_APPROVAL, _E.REJECT): _S.REJECTED,
    (_S.PENDING, _E.SELECT_SEAT): _S.CONFIRMED,
    (_S.CONFIRMED, _E.CHANGE_SEAT): _S.CONFIRMED,
    (_S.PENDING, _E.CANCEL): _S.CANCELLED,
    (_S.PENDING_APPROVAL, _E.CANCEL): _S.CANCELLED,
    (_S.CONFIRMED, _E.CANCEL): _S.CANCELLED,
    (_S.PENDING_CANCELLATION, _E.CANCEL): _S.CANCELLED,
    (_S.WAITLISTED, _E.CANCEL): _S.CANCELLED,
    (_S.CONFIRMED, _E.REQUEST_CANCELLATION): _S.PENDING_CANCELLATION,
    (_S.PENDING_CANCELLATION, _E.APPROVE_CANCELLATION): _S.CANCELLED,
    (_S.PENDING_CANCELLATION, _E.REJECT_CANCELLATION): _S.CONFIRMED,
    (_S.CONFIRMED, _E.MARK_ABSENT): _S.NO_SHOW,
    (_S.NO_SHOW, _E.MARK_ABSENT): _S.NO_SHOW,
    (_S.CONFIRMED, _E.COMPLETE): _S.COMPLETED,
    (_S.COMPLETED, _E.COMPLETE): _S.COMPLETED,
}


def next_status(current: BookingStatus, event: BookingEvent) -> BookingStatus:
    """Return the status reached from ``current`` on ``event``.

    Raises:
        InvalidTransitionError: If the pair is not in the transition table.
    """
    try:
        return TRANSITIONS[(current, event)]
    except KeyError:
        raise InvalidTransitionError(current, event) from None


def can_transition(current: BookingStatus, event: BookingEvent) -> bool:
    return (current, event) in TRANSITIONS
