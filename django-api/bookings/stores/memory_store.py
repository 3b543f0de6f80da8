"""In-process implementation of the BookingStore.

State is partitioned per session and each session has its own re-entrant
lock, so units on different sessions never block each other. A savepoint
snapshots the session's partition and restores it if the unit fails.
"""

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

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
from bookings.stores.interfaces import BookingStore


@dataclass
class _Partition:
    session: LearningSession | None = None
    bookings: dict[BookingId, Booking] = field(default_factory=dict)
    entries: dict[WaitlistEntryId, WaitlistEntry] = field(default_factory=dict)

    def copy(self) -> "_Partition":
        return _Partition(self.session, dict(self.bookings), dict(self.entries))


class InMemoryBookingStore(BookingStore):
    """Thread-safe store keeping domain objects in dictionaries."""

    def __init__(self) -> None:
        self._registry_lock = threading.Lock()
        self._locks: dict[SessionId, threading.RLock] = {}
        self._partitions: dict[SessionId, _Partition] = {}
        self._booking_index: dict[BookingId, SessionId] = {}
        self._entry_index: dict[WaitlistEntryId, SessionId] = {}
        self._local = threading.local()

    def _lock_for(self, session_id: SessionId) -> threading.RLock:
        with self._registry_lock:
            return self._locks.setdefault(session_id, threading.RLock())

    def _partition(self, session_id: SessionId) -> _Partition:
        with self._registry_lock:
            return self._partitions.setdefault(session_id, _Partition())

    def _pending(self) -> list[Callable[[], None]]:
        return self._local.__dict__.setdefault("callbacks", [])

    @contextmanager
    def atomic(self, session_id: SessionId) -> Iterator[None]:
        with self._lock_for(session_id):
            depth = getattr(self._local, "depth", 0)
            self._local.depth = depth + 1
            try:
                with self.savepoint(session_id):
                    yield
            finally:
                self._local.depth = depth
        if depth == 0:
            callbacks = self._pending()[:]
            self._pending().clear()
            for callback in callbacks:
                callback()

    @contextmanager
    def savepoint(self, session_id: SessionId) -> Iterator[None]:
        snapshot = self._partition(session_id).copy()
        mark = len(self._pending())
        try:
            yield
        except BaseException:
            with self._registry_lock:
                self._partitions[session_id] = snapshot
            del self._pending()[mark:]
            raise

    def on_commit(self, callback: Callable[[], None]) -> None:
        if getattr(self._local, "depth", 0) == 0:
            callback()
        else:
            self._pending().append(callback)

    def get_session(self, session_id: SessionId) -> LearningSession | None:
        return self._partition(session_id).session

    def save_session(self, session: LearningSession) -> None:
        self._partition(session.id).session = session

    def get_booking(self, booking_id: BookingId) -> Booking | None:
        session_id = self._booking_index.get(booking_id)
        if session_id is None:
            return None
        return self._partition(session_id).bookings.get(booking_id)

    def get_active_booking(self, session_id: SessionId, user_id: UserId) -> Booking | None:
        for booking in list(self._partition(session_id).bookings.values()):
            if booking.user_id == user_id and booking.is_active:
                return booking
        return None

    def list_bookings(
        self, session_id: SessionId, statuses: frozenset[BookingStatus] | None = None
    ) -> list[Booking]:
        bookings = [
            b
            for b in list(self._partition(session_id).bookings.values())
            if statuses is None or b.status in statuses
        ]
        return sorted(bookings, key=lambda b: b.booked_at)

    def save_booking(self, booking: Booking) -> None:
        self._partition(booking.session_id).bookings[booking.id] = booking
        self._booking_index[booking.id] = booking.session_id

    def delete_booking(self, booking_id: BookingId) -> None:
        session_id = self._booking_index.get(booking_id)
        if session_id is not None:
            self._partition(session_id).bookings.pop(booking_id, None)

    def get_waitlist_entry(self, entry_id: WaitlistEntryId) -> WaitlistEntry | None:
        session_id = self._entry_index.get(entry_id)
        if session_id is None:
            return None
        return self._partition(session_id).entries.get(entry_id)

    def list_waiting(self, session_id: SessionId) -> list[WaitlistEntry]:
        waiting = [e for e in list(self._partition(session_id).entries.values()) if e.is_waiting]
        return sorted(waiting, key=lambda e: e.position)

    def has_waitlist_entry(self, session_id: SessionId, user_id: UserId) -> bool:
        entries = list(self._partition(session_id).entries.values())
        return any(e.user_id == user_id for e in entries)

    def save_waitlist_entry(self, entry: WaitlistEntry) -> None:
        self._partition(entry.session_id).entries[entry.id] = entry
        self._entry_index[entry.id] = entry.session_id

    def delete_waitlist_entry(self, entry_id: WaitlistEntryId) -> None:
        session_id = self._entry_index.get(entry_id)
        if session_id is not None:
            self._partition(session_id).entries.pop(entry_id, None)
