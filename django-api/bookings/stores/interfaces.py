"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.

Every read-check-write on a session's seats, bookings or waitlist happens
inside ``atomic(session_id)``. Implementations serialize all units for the
same session and let different sessions proceed in parallel. ``atomic`` is
re-entrant for the calling thread.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from contextlib import AbstractContextManager

from bookings.domain import (
    Booking,
    BookingId,
    BookingStatus,
    LearningSession,
    SessionId,
    UserId,
    WaitlistEntry,
    WaitlistEntryId,
)


class BookingStore(ABC):
    """Interface for session, booking and waitlist persistence."""

    @abstractmethod
    def atomic(self, session_id: SessionId) -> AbstractContextManager[None]:
        """Serialize with every other unit on this session; roll back on error."""
        ...

    @abstractmethod
    def savepoint(self, session_id: SessionId) -> AbstractContextManager[None]:
        """Nested unit inside ``atomic``; only its own changes roll back on error."""
        ...

    @abstractmethod
    def on_commit(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` once the outermost unit commits. Dropped on rollback."""
        ...

    # Sessions

    @abstractmethod
    def get_session(self, session_id: SessionId) -> LearningSession | None:
        """Return a session by ID, or None if not found."""
        ...

    @abstractmethod
    def save_session(self, session: LearningSession) -> None:
        """Insert or update a session."""
        ...

    # Bookings

    @abstractmethod
    def get_booking(self, booking_id: BookingId) -> Booking | None:
        """Return a booking by ID, or None if not found."""
        ...

    @abstractmethod
    def get_active_booking(self, session_id: SessionId, user_id: UserId) -> Booking | None:
        """Return the user's booking for the session that is not CANCELLED/REJECTED."""
        ...

    @abstractmethod
    def list_bookings(
        self, session_id: SessionId, statuses: frozenset[BookingStatus] | None = None
    ) -> list[Booking]:
        """Return bookings for a session ordered by booked_at, optionally filtered."""
        ...

    @abstractmethod
    def save_booking(self, booking: Booking) -> None:
        """Insert or update a booking."""
        ...

    @abstractmethod
    def delete_booking(self, booking_id: BookingId) -> None:
        """Physically delete a booking. Only used by the legacy waitlist migration."""
        ...

    # Waitlist

    @abstractmethod
    def get_waitlist_entry(self, entry_id: WaitlistEntryId) -> WaitlistEntry | None:
        """Return a waitlist entry by ID, or None if not found."""
        ...

    @abstractmethod
    def list_waiting(self, session_id: SessionId) -> list[WaitlistEntry]:
        """Return WAITING entries for a session ordered by position ascending."""
        ...

    @abstractmethod
    def has_waitlist_entry(self, session_id: SessionId, user_id: UserId) -> bool:
        """Check if the user has an entry for the session in any status."""
        ...

    @abstractmethod
    def save_waitlist_entry(self, entry: WaitlistEntry) -> None:
        """Insert or update a waitlist entry."""
        ...

    @abstractmethod
    def delete_waitlist_entry(self, entry_id: WaitlistEntryId) -> None:
        """Delete a waitlist entry consumed by promotion."""
        ...
