"""Seat counter operations for a session.

Callers must already hold ``store.atomic(session_id)``.
"""

import logging

from bookings.domain import LearningSession, SessionId
from bookings.domain.errors import SessionNotFoundError
from bookings.stores.interfaces import BookingStore

logger = logging.getLogger(__name__)


class CapacityService:
    """Atomic increment/decrement of a session's available seats."""

    def __init__(self, store: BookingStore) -> None:
        self._store = store

    def _session(self, session_id: SessionId) -> LearningSession:
        session = self._store.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def has_available_seats(self, session_id: SessionId) -> bool:
        return self._session(session_id).has_available_seats()

    def decrement_available(self, session_id: SessionId) -> bool:
        """Take one seat. Returns False when the counter was already at zero.

        Reaching zero is not an error here; callers check availability first.
        """
        session = self._session(session_id)
        updated = session.with_seat_taken()
        if updated == session:
            logger.warning(
                "Decrement skipped for session %s: available seats already %s",
                session_id,
                session.available_seats,
            )
            return False
        self._store.save_session(updated)
        logger.debug("Seat taken for session %s, %s left", session_id, updated.available_seats)
        return True

    def increment_available(self, session_id: SessionId) -> bool:
        """Release one seat. Returns False when the counter was already at total."""
        session = self._session(session_id)
        updated = session.with_seat_released()
        if updated == session:
            logger.warning(
                "Increment skipped for session %s: already at %s of %s seats",
                session_id,
                session.available_seats,
                session.total_seats,
            )
            return False
        self._store.save_session(updated)
        logger.debug("Seat released for session %s, %s left", session_id, updated.available_seats)
        return True
