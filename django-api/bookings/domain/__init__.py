from bookings.domain.models import (
    AttendanceStatus,
    Booking,
    CompletionStatus,
    LearningSession,
    NominationType,
    SessionStatus,
    WaitlistedOutcome,
    WaitlistEntry,
    WaitlistStatus,
)
from bookings.domain.transitions import BookingEvent, BookingStatus
from bookings.domain.value_objects import (
    BookingId,
    BookingReference,
    FeedbackRating,
    SessionId,
    UserId,
    WaitlistEntryId,
)

__all__ = [
    "AttendanceStatus",
    "Booking",
    "BookingEvent",
    "BookingStatus",
    "CompletionStatus",
    "LearningSession",
    "NominationType",
    "SessionStatus",
    "WaitlistedOutcome",
    "WaitlistEntry",
    "WaitlistStatus",
    "BookingId",
    "BookingReference",
    "FeedbackRating",
    "SessionId",
    "UserId",
    "WaitlistEntryId",
]
