"""Django ORM implementation of the BookingStore.

``atomic`` opens a transaction and locks the session row with
SELECT ... FOR UPDATE, which serializes every unit on that session on
databases with row locks. Rows are written with ``save()`` so model signals
fire for cache invalidation.
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager

from django.db import transaction

from bookings import models
from bookings.domain import (
    AttendanceStatus,
    Booking,
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
    WaitlistEntry,
    WaitlistEntryId,
    WaitlistStatus,
)
from bookings.stores.interfaces import BookingStore


def _user(value) -> UserId | None:
    return UserId(value) if value is not None else None


def _session_to_domain(row: models.LearningSession) -> LearningSession:
    return LearningSession(
        id=SessionId(row.id),
        title=row.title,
        status=SessionStatus(row.status),
        starts_at=row.starts_at,
        ends_at=row.ends_at,
        total_seats=row.total_seats,
        available_seats=row.available_seats,
    )


def _booking_to_domain(row: models.Booking) -> Booking:
    return Booking(
        id=BookingId(row.id),
        reference=BookingReference(row.reference),
        session_id=SessionId(row.session_id),
        user_id=UserId(row.user_id),
        status=BookingStatus(row.status),
        booked_at=row.booked_at,
        seat_number=row.seat_number,
        nomination_type=NominationType(row.nomination_type) if row.nomination_type else None,
        notes=row.notes,
        confirmed_at=row.confirmed_at,
        cancelled_at=row.cancelled_at,
        cancellation_reason=row.cancellation_reason,
        approved_by=_user(row.approved_by),
        approved_at=row.approved_at,
        rejected_by=_user(row.rejected_by),
        rejected_at=row.rejected_at,
        rejection_reason=row.rejection_reason,
        manager_notified=row.manager_notified,
        manager_notified_at=row.manager_notified_at,
        attendance_status=AttendanceStatus(row.attendance_status),
        attendance_marked_at=row.attendance_marked_at,
        completion_status=CompletionStatus(row.completion_status),
        completed_at=row.completed_at,
        feedback_rating=FeedbackRating(row.feedback_rating) if row.feedback_rating else None,
        feedback_comments=row.feedback_comments,
    )


def _booking_fields(booking: Booking) -> dict:
    return {
        "reference": booking.reference.value,
        "session_id": booking.session_id.value,
        "user_id": booking.user_id.value,
        "status": booking.status.value,
        "booked_at": booking.booked_at,
        "seat_number": booking.seat_number,
        "nomination_type": booking.nomination_type.value if booking.nomination_type else None,
        "notes": booking.notes,
        "confirmed_at": booking.confirmed_at,
        "cancelled_at": booking.cancelled_at,
        "cancellation_reason": booking.cancellation_reason,
        "approved_by": booking.approved_by.value if booking.approved_by else None,
        "approved_at": booking.approved_at,
        "rejected_by": booking.rejected_by.value if booking.rejected_by else None,
        "rejected_at": booking.rejected_at,
        "rejection_reason": booking.rejection_reason,
        "manager_notified": booking.manager_notified,
        "manager_notified_at": booking.manager_notified_at,
        "attendance_status": booking.attendance_status.value,
        "attendance_marked_at": booking.attendance_marked_at,
        "completion_status": booking.completion_status.value,
        "completed_at": booking.completed_at,
        "feedback_rating": booking.feedback_rating.value if booking.feedback_rating else None,
        "feedback_comments": booking.feedback_comments,
    }


def _entry_to_domain(row: models.WaitlistEntry) -> WaitlistEntry:
    return WaitlistEntry(
        id=WaitlistEntryId(row.id),
        session_id=SessionId(row.session_id),
        user_id=UserId(row.user_id),
        position=row.position,
        status=WaitlistStatus(row.status),
        joined_at=row.joined_at,
        notes=row.notes,
        notified_at=row.notified_at,
    )


class DjangoBookingStore(BookingStore):
    """Relational store using the Django ORM."""

    @contextmanager
    def atomic(self, session_id: SessionId) -> Iterator[None]:
        with transaction.atomic():
            # Row lock on the session is the serialization point for its seats.
            list(
                models.LearningSession.objects.select_for_update()
                .filter(pk=session_id.value)
                .values_list("pk", flat=True)
            )
            yield

    @contextmanager
    def savepoint(self, session_id: SessionId) -> Iterator[None]:
        with transaction.atomic():
            yield

    def on_commit(self, callback: Callable[[], None]) -> None:
        transaction.on_commit(callback)

    def get_session(self, session_id: SessionId) -> LearningSession | None:
        row = models.LearningSession.objects.filter(pk=session_id.value).first()
        return _session_to_domain(row) if row else None

    def save_session(self, session: LearningSession) -> None:
        models.LearningSession.objects.update_or_create(
            pk=session.id.value,
            defaults={
                "title": session.title,
                "status": session.status.value,
                "starts_at": session.starts_at,
                "ends_at": session.ends_at,
                "total_seats": session.total_seats,
                "available_seats": session.available_seats,
            },
        )

    def get_booking(self, booking_id: BookingId) -> Booking | None:
        row = models.Booking.objects.filter(pk=booking_id.value).first()
        return _booking_to_domain(row) if row else None

    def get_active_booking(self, session_id: SessionId, user_id: UserId) -> Booking | None:
        row = (
            models.Booking.objects.filter(session_id=session_id.value, user_id=user_id.value)
            .exclude(status__in=models.RELEASED_STATUS_VALUES)
            .first()
        )
        return _booking_to_domain(row) if row else None

    def list_bookings(
        self, session_id: SessionId, statuses: frozenset[BookingStatus] | None = None
    ) -> list[Booking]:
        rows = models.Booking.objects.filter(session_id=session_id.value)
        if statuses is not None:
            rows = rows.filter(status__in=[s.value for s in statuses])
        return [_booking_to_domain(row) for row in rows.order_by("booked_at", "created_at")]

    def save_booking(self, booking: Booking) -> None:
        models.Booking.objects.update_or_create(
            pk=booking.id.value, defaults=_booking_fields(booking)
        )

    def delete_booking(self, booking_id: BookingId) -> None:
        row = models.Booking.objects.filter(pk=booking_id.value).first()
        if row is not None:
            row.delete()

    def get_waitlist_entry(self, entry_id: WaitlistEntryId) -> WaitlistEntry | None:
        row = models.WaitlistEntry.objects.filter(pk=entry_id.value).first()
        return _entry_to_domain(row) if row else None

    def list_waiting(self, session_id: SessionId) -> list[WaitlistEntry]:
        rows = models.WaitlistEntry.objects.filter(
            session_id=session_id.value, status=WaitlistStatus.WAITING.value
        ).order_by("position")
        return [_entry_to_domain(row) for row in rows]

    def has_waitlist_entry(self, session_id: SessionId, user_id: UserId) -> bool:
        return models.WaitlistEntry.objects.filter(
            session_id=session_id.value, user_id=user_id.value
        ).exists()

    def save_waitlist_entry(self, entry: WaitlistEntry) -> None:
        models.WaitlistEntry.objects.update_or_create(
            pk=entry.id.value,
            defaults={
                "session_id": entry.session_id.value,
                "user_id": entry.user_id.value,
                "position": entry.position,
                "status": entry.status.value,
                "joined_at": entry.joined_at,
                "notes": entry.notes,
                "notified_at": entry.notified_at,
            },
        )

    def delete_waitlist_entry(self, entry_id: WaitlistEntryId) -> None:
        row = models.WaitlistEntry.objects.filter(pk=entry_id.value).first()
        if row is not None:
            row.delete()
