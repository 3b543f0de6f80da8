"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
The constraints here back up the engine's invariants at the database level.
"""

import uuid

from django.db import models

from bookings.domain import (
    AttendanceStatus,
    BookingStatus,
    CompletionStatus,
    NominationType,
    SessionStatus,
    WaitlistStatus,
)

RELEASED_STATUS_VALUES = [BookingStatus.CANCELLED.value, BookingStatus.REJECTED.value]


def _choices(enum_cls) -> list[tuple[str, str]]:
    return [(member.value, member.value.replace("_", " ").title()) for member in enum_cls]


class LearningSession(models.Model):
    """Persistence model for a learning session and its seat counter."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    status = models.CharField(
        max_length=20, choices=_choices(SessionStatus), default=SessionStatus.SCHEDULED.value
    )
    starts_at = models.DateTimeField()
    ends_at = models.DateTimeField()
    total_seats = models.PositiveIntegerField(null=True, blank=True)
    available_seats = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["starts_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_seats__isnull=True)
                | models.Q(available_seats__isnull=True)
                | models.Q(available_seats__lte=models.F("total_seats")),
                name="available_seats_within_total",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.title} - {self.starts_at}"


class Booking(models.Model):
    """Persistence model for bookings."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    reference = models.CharField(max_length=11, unique=True)
    session = models.ForeignKey(
        LearningSession, on_delete=models.CASCADE, related_name="bookings"
    )
    user_id = models.UUIDField()
    status = models.CharField(max_length=24, choices=_choices(BookingStatus))
    seat_number = models.PositiveIntegerField(null=True, blank=True)
    nomination_type = models.CharField(
        max_length=16, choices=_choices(NominationType), null=True, blank=True
    )
    notes = models.TextField(null=True, blank=True)
    booked_at = models.DateTimeField()
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.TextField(null=True, blank=True)
    approved_by = models.UUIDField(null=True, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_by = models.UUIDField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(null=True, blank=True)
    manager_notified = models.BooleanField(default=False)
    manager_notified_at = models.DateTimeField(null=True, blank=True)
    attendance_status = models.CharField(
        max_length=16,
        choices=_choices(AttendanceStatus),
        default=AttendanceStatus.NOT_MARKED.value,
    )
    attendance_marked_at = models.DateTimeField(null=True, blank=True)
    completion_status = models.CharField(
        max_length=16,
        choices=_choices(CompletionStatus),
        default=CompletionStatus.NOT_STARTED.value,
    )
    completed_at = models.DateTimeField(null=True, blank=True)
    feedback_rating = models.PositiveSmallIntegerField(null=True, blank=True)
    feedback_comments = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["booked_at"]
        indexes = [
            models.Index(fields=["session", "status"], name="booking_session_status_idx"),
            models.Index(fields=["user_id"], name="booking_user_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["session", "user_id"],
                condition=~models.Q(status__in=RELEASED_STATUS_VALUES),
                name="one_active_booking_per_user",
            ),
            models.UniqueConstraint(
                fields=["session", "seat_number"],
                condition=models.Q(seat_number__isnull=False)
                & ~models.Q(status__in=RELEASED_STATUS_VALUES),
                name="one_active_booking_per_seat",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.reference} ({self.status})"


class WaitlistEntry(models.Model):
    """Persistence model for waitlist entries."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    session = models.ForeignKey(
        LearningSession, on_delete=models.CASCADE, related_name="waitlist_entries"
    )
    user_id = models.UUIDField()
    position = models.PositiveIntegerField()
    status = models.CharField(
        max_length=16, choices=_choices(WaitlistStatus), default=WaitlistStatus.WAITING.value
    )
    joined_at = models.DateTimeField()
    notified_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["position"]
        indexes = [
            models.Index(fields=["session", "status", "position"], name="waitlist_queue_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["session", "user_id"], name="one_waitlist_entry_per_user"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} @ {self.position} ({self.status})"
