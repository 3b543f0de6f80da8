"""Unit tests for domain primitives.

These test invariants that must hold at construction time and the booking
transition table.
Run with: pytest tests/test_domain.py -v
"""

import uuid
from dataclasses import FrozenInstanceError
from datetime import UTC, datetime, timedelta

import pytest

from bookings.domain import (
    AttendanceStatus,
    Booking,
    BookingEvent,
    BookingId,
    BookingReference,
    BookingStatus,
    CompletionStatus,
    FeedbackRating,
    LearningSession,
    NominationType,
    SessionId,
    SessionStatus,
    UserId,
)
from bookings.domain.errors import (
    ConflictError,
    ErrorCode,
    InvalidRatingError,
    InvalidSeatError,
    InvalidTransitionError,
    SessionNotFoundError,
)
from bookings.domain.transitions import TRANSITIONS, can_transition, next_status

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


def make_session(total_seats=3, available_seats=3, status=SessionStatus.SCHEDULED):
    return LearningSession(
        id=SessionId(uuid.uuid4()),
        title="Kafka basics",
        status=status,
        starts_at=NOW + timedelta(days=1),
        ends_at=NOW + timedelta(days=1, hours=2),
        total_seats=total_seats,
        available_seats=available_seats,
    )


def make_booking(status=BookingStatus.CONFIRMED, **fields):
    return Booking(
        id=BookingId.new(),
        reference=BookingReference.generate(),
        session_id=SessionId(uuid.uuid4()),
        user_id=UserId(uuid.uuid4()),
        status=status,
        booked_at=NOW,
        **fields,
    )


class TestIds:
    """Tests for identifier value objects."""

    def test_from_string_valid_uuid(self):
        """SessionId.from_string parses a valid UUID."""
        raw = "3f2b8a52-7c1e-4a55-9b0e-1d2c3b4a5f60"
        assert SessionId.from_string(raw).value == uuid.UUID(raw)
        assert str(SessionId.from_string(raw)) == raw

    def test_from_string_invalid_uuid(self):
        """BookingId.from_string raises ValueError for invalid UUID."""
        with pytest.raises(ValueError):
            BookingId.from_string("not-a-uuid")

    def test_new_ids_are_unique(self):
        assert BookingId.new() != BookingId.new()


class TestBookingReference:
    def test_generate_has_expected_shape(self):
        reference = BookingReference.generate()
        assert reference.value.startswith("BK-")
        assert len(reference.value) == 11
        assert reference.value[3:] == reference.value[3:].upper()

    def test_rejects_malformed_reference(self):
        with pytest.raises(ValueError):
            BookingReference("ABC-123")


class TestFeedbackRating:
    @pytest.mark.parametrize("value", [1, 3, 5])
    def test_accepts_one_to_five(self, value):
        assert FeedbackRating(value).value == value

    @pytest.mark.parametrize("value", [0, 6, -1])
    def test_rejects_out_of_range(self, value):
        with pytest.raises(ValueError):
            FeedbackRating(value)


class TestLearningSessionSeats:
    """Tests for the seat counter on LearningSession."""

    def test_seat_taken_decrements(self):
        assert make_session(available_seats=2).with_seat_taken().available_seats == 1

    def test_seat_taken_at_zero_is_noop(self):
        session = make_session(available_seats=0)
        assert session.with_seat_taken() == session

    def test_seat_taken_when_unset_is_noop(self):
        session = make_session(total_seats=None, available_seats=None)
        assert session.with_seat_taken() == session

    def test_seat_released_is_capped_at_total(self):
        session = make_session(total_seats=3, available_seats=3)
        assert session.with_seat_released() == session

    def test_seat_released_without_total_is_unbounded(self):
        session = make_session(total_seats=None, available_seats=7)
        assert session.with_seat_released().available_seats == 8

    def test_seat_released_when_unset_restores_one(self):
        session = make_session(total_seats=5, available_seats=None)
        assert session.with_seat_released().available_seats == 1

    def test_has_available_seats(self):
        assert make_session(available_seats=1).has_available_seats()
        assert not make_session(available_seats=0).has_available_seats()
        assert not make_session(total_seats=None, available_seats=None).has_available_seats()

    def test_bookable_only_when_scheduled_and_in_future(self):
        assert make_session().is_bookable_at(NOW)
        assert not make_session().is_bookable_at(NOW + timedelta(days=2))
        assert not make_session(status=SessionStatus.POSTPONED).is_bookable_at(NOW)

    @pytest.mark.parametrize("seat", [0, 4, -2])
    def test_seat_out_of_range_raises(self, seat):
        with pytest.raises(InvalidSeatError):
            make_session(total_seats=3).check_seat_in_range(seat)

    def test_any_seat_is_out_of_range_without_total(self):
        with pytest.raises(InvalidSeatError):
            make_session(total_seats=None, available_seats=None).check_seat_in_range(1)


class TestTransitionTable:
    """Tests for the centralized booking transition table."""

    def test_terminal_statuses_have_no_exit_except_idempotent_marks(self):
        for (status, event), target in TRANSITIONS.items():
            if status.is_terminal:
                assert target is status

    def test_unknown_pair_raises_invalid_transition(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            next_status(BookingStatus.CANCELLED, BookingEvent.CANCEL)
        assert exc_info.value.code is ErrorCode.INVALID_TRANSITION
        assert "cancel" in exc_info.value.message
        assert isinstance(exc_info.value, ConflictError)

    @pytest.mark.parametrize(
        "status",
        [
            BookingStatus.PENDING,
            BookingStatus.PENDING_APPROVAL,
            BookingStatus.CONFIRMED,
            BookingStatus.PENDING_CANCELLATION,
            BookingStatus.WAITLISTED,
        ],
    )
    def test_every_non_terminal_status_can_be_cancelled(self, status):
        assert next_status(status, BookingEvent.CANCEL) is BookingStatus.CANCELLED

    def test_completed_cannot_be_cancelled(self):
        assert not can_transition(BookingStatus.COMPLETED, BookingEvent.CANCEL)

    def test_released_statuses_are_not_active(self):
        assert not BookingStatus.CANCELLED.is_active
        assert not BookingStatus.REJECTED.is_active
        assert BookingStatus.NO_SHOW.is_active
        assert BookingStatus.PENDING.is_active

    def test_pending_does_not_hold_capacity(self):
        assert not BookingStatus.PENDING.holds_capacity
        assert BookingStatus.PENDING_APPROVAL.holds_capacity


class TestBooking:
    """Tests for Booking transitions."""

    def test_approve_sets_approval_fields(self):
        approver = UserId(uuid.uuid4())
        approved = make_booking(BookingStatus.PENDING_APPROVAL).approve(approver, NOW)
        assert approved.status is BookingStatus.CONFIRMED
        assert approved.approved_by == approver
        assert approved.confirmed_at == NOW

    def test_booking_is_immutable(self):
        booking = make_booking()
        with pytest.raises(FrozenInstanceError):
            booking.status = BookingStatus.CANCELLED

    def test_reject_cancellation_clears_cancellation_fields(self):
        manager = UserId(uuid.uuid4())
        booking = make_booking(nomination_type=NominationType.MANDATORY)
        requested = booking.request_cancellation("Conflicting workshop", NOW)
        restored = requested.reject_cancellation(manager, "Training is required", NOW)
        assert restored.status is BookingStatus.CONFIRMED
        assert restored.cancellation_reason is None
        assert restored.cancelled_at is None
        assert restored.rejected_by == manager
        assert restored.rejection_reason == "Training is required"

    def test_new_cancellation_request_clears_previous_rejection(self):
        booking = make_booking(
            rejected_by=UserId(uuid.uuid4()), rejected_at=NOW, rejection_reason="No"
        )
        requested = booking.request_cancellation("Sick", NOW)
        assert requested.rejection_reason is None
        assert requested.rejected_by is None

    def test_absent_marks_no_show(self):
        marked = make_booking().mark_attendance(AttendanceStatus.ABSENT, NOW)
        assert marked.status is BookingStatus.NO_SHOW
        assert marked.attendance_marked_at == NOW

    def test_present_keeps_status(self):
        marked = make_booking().mark_attendance(AttendanceStatus.PRESENT, NOW)
        assert marked.status is BookingStatus.CONFIRMED
        assert marked.attendance_status is AttendanceStatus.PRESENT

    def test_absent_on_pending_booking_is_invalid(self):
        with pytest.raises(InvalidTransitionError):
            make_booking(BookingStatus.PENDING).mark_attendance(AttendanceStatus.ABSENT, NOW)

    def test_completion_completed_moves_status(self):
        completed = make_booking().mark_completion(CompletionStatus.COMPLETED, NOW)
        assert completed.status is BookingStatus.COMPLETED
        assert completed.completed_at == NOW

    def test_feedback_out_of_range_raises(self):
        with pytest.raises(InvalidRatingError):
            make_booking().with_feedback(6, None)

    def test_feedback_is_recorded(self):
        booking = make_booking().with_feedback(4, "Useful labs")
        assert booking.feedback_rating == FeedbackRating(4)
        assert booking.feedback_comments == "Useful labs"


class TestErrors:
    def test_error_keeps_context(self):
        session_id = SessionId(uuid.uuid4())
        error = SessionNotFoundError(session_id)
        assert error.session_id == session_id
        assert str(error) == "SESSION_NOT_FOUND: Session not found"
