"""Waitlist queue - an ordered, per-session FIFO of waiting users.

WAITING positions for a session are always 1..N with no gaps; every
operation that takes an entry out of WAITING re-densifies the rest.
"""

import logging

from bookings.domain import (
    SessionId,
    UserId,
    WaitlistEntry,
    WaitlistEntryId,
    WaitlistStatus,
)
from bookings.domain.errors import (
    AlreadyWaitlistedError,
    DuplicateBookingError,
    NotAuthorizedError,
    SeatsAvailableError,
    SessionNotFoundError,
    WaitlistEntryNotFoundError,
)
from bookings.services.collaborators import Clock, system_clock
from bookings.stores.interfaces import BookingStore

logger = logging.getLogger(__name__)


class WaitlistService:
    """Service for waitlist queue operations."""

    def __init__(self, store: BookingStore, clock: Clock = system_clock) -> None:
        self._store = store
        self._clock = clock

    def join(self, session_id: SessionId, user_id: UserId, notes: str | None = None) -> WaitlistEntry:
        """Append the user to a full session's waitlist.

        Raises:
            SessionNotFoundError: If the session does not exist.
            AlreadyWaitlistedError: If the user has an entry in any status.
            DuplicateBookingError: If the user already holds an active booking.
            SeatsAvailableError: If the session still has free seats.
        """
        with self._store.atomic(session_id):
            session = self._store.get_session(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            if self._store.has_waitlist_entry(session_id, user_id):
                raise AlreadyWaitlistedError()
            if self._store.get_active_booking(session_id, user_id) is not None:
                raise DuplicateBookingError()
            if session.has_available_seats():
                raise SeatsAvailableError()
            return self.enqueue(session_id, user_id, notes)

    def enqueue(self, session_id: SessionId, user_id: UserId, notes: str | None = None) -> WaitlistEntry:
        """Append without the capacity and booking guards. Caller holds the session unit."""
        waiting = self._store.list_waiting(session_id)
        position = waiting[-1].position + 1 if waiting else 1
        entry = WaitlistEntry(
            id=WaitlistEntryId.new(),
            session_id=session_id,
            user_id=user_id,
            position=position,
            status=WaitlistStatus.WAITING,
            joined_at=self._clock(),
            notes=notes,
        )
        self._store.save_waitlist_entry(entry)
        logger.info("User %s joined waitlist for session %s at position %s", user_id, session_id, position)
        return entry

    def remove(self, entry_id: WaitlistEntryId, user_id: UserId) -> WaitlistEntry:
        """Take the user out of the queue at their own request."""
        entry = self._store.get_waitlist_entry(entry_id)
        if entry is None:
            raise WaitlistEntryNotFoundError(entry_id)
        with self._store.atomic(entry.session_id):
            entry = self._store.get_waitlist_entry(entry_id)
            if entry is None:
                raise WaitlistEntryNotFoundError(entry_id)
            if entry.user_id != user_id:
                logger.warning(
                    "User %s attempted to remove waitlist entry %s owned by %s",
                    user_id,
                    entry_id,
                    entry.user_id,
                )
                raise NotAuthorizedError("You are not authorized to remove this waitlist entry")
            if not entry.is_waiting:
                raise WaitlistEntryNotFoundError(entry_id)
            removed = entry.with_status(WaitlistStatus.REMOVED)
            self._store.save_waitlist_entry(removed)
            self.reorder(entry.session_id)
        logger.info("User %s removed from waitlist for session %s", user_id, entry.session_id)
        return removed

    def cancel_all_for_session(self, session_id: SessionId) -> int:
        """Cancel every WAITING entry of a session that is itself being cancelled."""
        with self._store.atomic(session_id):
            waiting = self._store.list_waiting(session_id)
            for entry in waiting:
                self._store.save_waitlist_entry(entry.with_status(WaitlistStatus.CANCELLED))
        logger.info("Cancelled %s waitlist entries for session %s", len(waiting), session_id)
        return len(waiting)

    def take_front(self, session_id: SessionId, count: int) -> list[WaitlistEntry]:
        """Return up to ``count`` WAITING entries from the front. Read-only."""
        if count <= 0:
            return []
        return self._store.list_waiting(session_id)[:count]

    def waiting(self, session_id: SessionId) -> list[WaitlistEntry]:
        return self._store.list_waiting(session_id)

    def position_of(self, session_id: SessionId, user_id: UserId) -> int | None:
        for entry in self._store.list_waiting(session_id):
            if entry.user_id == user_id:
                return entry.position
        return None

    def is_waiting(self, session_id: SessionId, user_id: UserId) -> bool:
        return self.position_of(session_id, user_id) is not None

    def consume(self, entry: WaitlistEntry) -> None:
        """Delete an entry that has been turned into a booking."""
        self._store.delete_waitlist_entry(entry.id)

    def reorder(self, session_id: SessionId) -> None:
        """Renumber WAITING entries 1..N keeping their relative order."""
        waiting = self._store.list_waiting(session_id)
        for position, entry in enumerate(waiting, start=1):
            if entry.position != position:
                self._store.save_waitlist_entry(entry.at_position(position))
        logger.info("Reordered %s waitlist entries for session %s", len(waiting), session_id)
