"""Waitlist promotion.

Drains the front of a session's waitlist into bookings while seats are
free. Runs inside the unit of whatever freed the seat; calling it again
with no free seats does nothing.
"""

import logging

from bookings.domain import (
    Booking,
    BookingId,
    BookingReference,
    BookingStatus,
    SessionId,
    WaitlistEntry,
)
from bookings.domain.errors import DuplicateBookingError, SessionNotFoundError
from bookings.services.capacity_service import CapacityService
from bookings.services.collaborators import (
    Clock,
    ManagerDirectory,
    NotificationKind,
    Notifier,
    notify_on_commit,
    system_clock,
)
from bookings.services.waitlist_service import WaitlistService
from bookings.stores.interfaces import BookingStore

logger = logging.getLogger(__name__)


class PromotionService:
    """Service that turns waitlist entries into bookings."""

    def __init__(
        self,
        store: BookingStore,
        capacity: CapacityService,
        waitlist: WaitlistService,
        directory: ManagerDirectory,
        notifier: Notifier,
        clock: Clock = system_clock,
    ) -> None:
        self._store = store
        self._capacity = capacity
        self._waitlist = waitlist
        self._directory = directory
        self._notifier = notifier
        self._clock = clock

    def process(self, session_id: SessionId) -> list[Booking]:
        """Promote as many waiting users as there are free seats.

        Each entry is promoted in its own savepoint. A failure is logged and
        rolled back for that entry only; the rest of the queue still runs.
        """
        with self._store.atomic(session_id):
            session = self._store.get_session(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            available = session.available_seats or 0
            if available <= 0:
                return []

            front = self._waitlist.take_front(session_id, available)
            if not front:
                return []

            promoted = []
            for entry in front:
                try:
                    with self._store.savepoint(session_id):
                        promoted.append(self._promote(entry))
                except Exception:
                    logger.exception(
                        "Failed to promote waitlist entry %s for session %s",
                        entry.id,
                        session_id,
                    )
            self._waitlist.reorder(session_id)

        logger.info(
            "Promoted %s of %s waitlisted users for session %s",
            len(promoted),
            len(front),
            session_id,
        )
        return promoted

    def _promote(self, entry: WaitlistEntry) -> Booking:
        if self._store.get_active_booking(entry.session_id, entry.user_id) is not None:
            raise DuplicateBookingError()

        now = self._clock()
        needs_approval = self._directory.manager_of(entry.user_id) is not None
        booking = Booking(
            id=BookingId.new(),
            reference=BookingReference.generate(),
            session_id=entry.session_id,
            user_id=entry.user_id,
            status=BookingStatus.PENDING_APPROVAL if needs_approval else BookingStatus.CONFIRMED,
            booked_at=now,
            notes=entry.notes,
            confirmed_at=None if needs_approval else now,
        )
        self._store.save_booking(booking)
        self._capacity.decrement_available(entry.session_id)
        self._waitlist.consume(entry)

        if needs_approval:
            logger.info("Promoted user %s to pending approval booking %s", entry.user_id, booking.id)
        else:
            logger.info("Promoted user %s to confirmed booking %s", entry.user_id, booking.id)
            notify_on_commit(
                self._store,
                self._notifier,
                entry.user_id,
                NotificationKind.WAITLIST_PROMOTED,
                booking.id,
            )
        return booking
