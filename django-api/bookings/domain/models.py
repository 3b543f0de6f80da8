"""Domain models representing persisted state.

These are pure domain objects with no API input rules. They are immutable:
every state change returns a new instance that the caller must save.
Django ORM models are in bookings/models.py (persistence layer).
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Self

from bookings.domain.errors import InvalidRatingError, InvalidSeatError
from bookings.domain.transitions import BookingEvent, BookingStatus, next_status
from bookings.domain.value_objects import (
    BookingId,
    BookingReference,
    FeedbackRating,
    SessionId,
    UserId,
    WaitlistEntryId,
)


class SessionStatus(Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    POSTPONED = "POSTPONED"


class NominationType(Enum):
    RECOMMENDED = "RECOMMENDED"
    MANDATORY = "MANDATORY"


class AttendanceStatus(Enum):
    NOT_MARKED = "NOT_MARKED"
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    PARTIAL = "PARTIAL"


class CompletionStatus(Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    INCOMPLETE = "INCOMPLETE"


class WaitlistStatus(Enum):
    WAITING = "WAITING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"
    REMOVED = "REMOVED"


@dataclass(frozen=True)
class LearningSession:
    """Domain representation of a session and its seat counter.

    ``available_seats`` only moves through ``with_seat_taken`` and
    ``with_seat_released``, which clamp to ``0..total_seats``.
    """

    id: SessionId
    title: str
    status: SessionStatus
    starts_at: datetime
    ends_at: datetime
    total_seats: int | None
    available_seats: int | None

    def has_available_seats(self) -> bool:
        return self.available_seats is not None and self.available_seats > 0

    def with_seat_taken(self) -> Self:
        """Decrement available seats; a no-op at zero or when unset."""
        if self.available_seats is None or self.available_seats <= 0:
            return self
        return replace(self, available_seats=self.available_seats - 1)

    def with_seat_released(self) -> Self:
        """Increment available seats, capped at total seats when it is known."""
        if self.available_seats is None:
            restored = 1 if self.total_seats is None else min(self.total_seats, 1)
            return replace(self, available_seats=restored)
        if self.total_seats is not None and self.available_seats >= self.total_seats:
            return self
        return replace(self, available_seats=self.available_seats + 1)

    def with_status(self, status: SessionStatus) -> Self:
        return replace(self, status=status)

    def is_bookable_at(self, now: datetime) -> bool:
        return self.status is SessionStatus.SCHEDULED and self.starts_at > now

    def check_seat_in_range(self, seat_number: int) -> None:
        """Raise InvalidSeatError unless 1 <= seat_number <= total_seats."""
        if self.total_seats is None or not 1 <= seat_number <= self.total_seats:
            raise InvalidSeatError(seat_number, self.total_seats)


@dataclass(frozen=True)
class Booking:
    """Domain representation of a Booking."""

    id: BookingId
    reference: BookingReference
    session_id: SessionId
    user_id: UserId
    status: BookingStatus
    booked_at: datetime
    seat_number: int | None = None
    nomination_type: NominationType | None = None
    notes: str | None = None
    confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    approved_by: UserId | None = None
    approved_at: datetime | None = None
    rejected_by: UserId | None = None
    rejected_at: datetime | None = None
    rejection_reason: str | None = None
    manager_notified: bool = False
    manager_notified_at: datetime | None = None
    attendance_status: AttendanceStatus = AttendanceStatus.NOT_MARKED
    attendance_marked_at: datetime | None = None
    completion_status: CompletionStatus = CompletionStatus.NOT_STARTED
    completed_at: datetime | None = None
    feedback_rating: FeedbackRating | None = None
    feedback_comments: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status.is_active

    @property
    def holds_capacity(self) -> bool:
        return self.status.holds_capacity

    @property
    def is_mandatory(self) -> bool:
        return self.nomination_type is NominationType.MANDATORY

    def _move(self, event: BookingEvent, **changes) -> Self:
        return replace(self, status=next_status(self.status, event), **changes)

    def approve(self, approver: UserId, at: datetime) -> Self:
        return self._move(
            BookingEvent.APPROVE, confirmed_at=at, approved_by=approver, approved_at=at
        )

    def reject(self, rejecter: UserId, reason: str | None, at: datetime) -> Self:
        return self._move(
            BookingEvent.REJECT,
            rejected_by=rejecter,
            rejected_at=at,
            rejection_reason=reason,
        )

    def select_seat(self, seat_number: int, at: datetime) -> Self:
        return self._move(BookingEvent.SELECT_SEAT, seat_number=seat_number, confirmed_at=at)

    def change_seat(self, seat_number: int) -> Self:
        return self._move(BookingEvent.CHANGE_SEAT, seat_number=seat_number)

    def cancel(self, reason: str | None, at: datetime) -> Self:
        return self._move(BookingEvent.CANCEL, cancelled_at=at, cancellation_reason=reason)

    def request_cancellation(self, reason: str | None, at: datetime) -> Self:
        # A fresh request wipes the outcome of any earlier rejected request.
        return self._move(
            BookingEvent.REQUEST_CANCELLATION,
            cancellation_reason=reason,
            cancelled_at=at,
            rejected_by=None,
            rejected_at=None,
            rejection_reason=None,
        )

    def approve_cancellation(self, at: datetime) -> Self:
        return self._move(BookingEvent.APPROVE_CANCELLATION, cancelled_at=at)

    def reject_cancellation(self, manager: UserId, reason: str | None, at: datetime) -> Self:
        return self._move(
            BookingEvent.REJECT_CANCELLATION,
            cancellation_reason=None,
            cancelled_at=None,
            rejected_by=manager,
            rejected_at=at,
            rejection_reason=reason,
        )

    def mark_attendance(self, attendance: AttendanceStatus, at: datetime) -> Self:
        if attendance is AttendanceStatus.ABSENT:
            return self._move(
                BookingEvent.MARK_ABSENT,
                attendance_status=attendance,
                attendance_marked_at=at,
            )
        return replace(self, attendance_status=attendance, attendance_marked_at=at)

    def mark_completion(self, completion: CompletionStatus, at: datetime) -> Self:
        if completion is CompletionStatus.COMPLETED:
            return self._move(BookingEvent.COMPLETE, completion_status=completion, completed_at=at)
        return replace(self, completion_status=completion)

    def with_feedback(self, rating: int, comments: str | None) -> Self:
        try:
            score = FeedbackRating(rating)
        except ValueError:
            raise InvalidRatingError() from None
        return replace(self, feedback_rating=score, feedback_comments=comments)

    def with_manager_notified(self, at: datetime) -> Self:
        return replace(self, manager_notified=True, manager_notified_at=at)


@dataclass(frozen=True)
class WaitlistEntry:
    """Domain representation of a place in a session's waitlist."""

    id: WaitlistEntryId
    session_id: SessionId
    user_id: UserId
    position: int
    status: WaitlistStatus
    joined_at: datetime
    notes: str | None = None
    notified_at: datetime | None = None

    @property
    def is_waiting(self) -> bool:
        return self.status is WaitlistStatus.WAITING

    def at_position(self, position: int) -> Self:
        return replace(self, position=position)

    def with_status(self, status: WaitlistStatus) -> Self:
        return replace(self, status=status)


@dataclass(frozen=True)
class WaitlistedOutcome:
    """Returned instead of a booking when a full session queues the user."""

    entry: WaitlistEntry

    @property
    def position(self) -> int:
        return self.entry.position
