"""Interfaces for the collaborators the engine calls but does not own.

- Eligibility: role/location predicate for a user and a session.
- ManagerDirectory: who (if anyone) approves a user's bookings.
- Notifier: fire-and-forget delivery of booking events.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from enum import Enum
from functools import partial

from bookings.domain import BookingId, LearningSession, UserId
from bookings.stores.interfaces import BookingStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    return datetime.now(UTC)


class NotificationKind(Enum):
    BOOKING_CONFIRMED = "BOOKING_CONFIRMED"
    BOOKING_WAITLISTED = "BOOKING_WAITLISTED"
    BOOKING_APPROVED = "BOOKING_APPROVED"
    BOOKING_REJECTED = "BOOKING_REJECTED"
    BOOKING_CANCELLED = "BOOKING_CANCELLED"
    CANCELLATION_APPROVED = "CANCELLATION_APPROVED"
    CANCELLATION_REJECTED = "CANCELLATION_REJECTED"
    WAITLIST_PROMOTED = "WAITLIST_PROMOTED"


class Eligibility(ABC):
    @abstractmethod
    def is_eligible(self, user_id: UserId, session: LearningSession) -> bool:
        """Return True if the user may book the session."""
        ...


class ManagerDirectory(ABC):
    @abstractmethod
    def manager_of(self, user_id: UserId) -> UserId | None:
        """Return the user's direct manager, or None if they have none."""
        ...


class Notifier(ABC):
    @abstractmethod
    def notify(self, user_id: UserId, kind: NotificationKind, booking_id: BookingId | None) -> None:
        """Deliver a notification. May raise; callers isolate failures."""
        ...


class AllowAllEligibility(Eligibility):
    def is_eligible(self, user_id: UserId, session: LearningSession) -> bool:
        return True


class StaticManagerDirectory(ManagerDirectory):
    """Manager lookup backed by a fixed user -> manager mapping."""

    def __init__(self, managers: Mapping[UserId, UserId] | None = None) -> None:
        self._managers = dict(managers or {})

    def manager_of(self, user_id: UserId) -> UserId | None:
        return self._managers.get(user_id)

    def assign(self, user_id: UserId, manager_id: UserId | None) -> None:
        if manager_id is None:
            self._managers.pop(user_id, None)
        else:
            self._managers[user_id] = manager_id


class LoggingNotifier(Notifier):
    """Writes notifications to the log instead of delivering them."""

    def notify(self, user_id: UserId, kind: NotificationKind, booking_id: BookingId | None) -> None:
        logger.info("Notify user %s: %s (booking %s)", user_id, kind.value, booking_id)


def send_safely(
    notifier: Notifier,
    user_id: UserId,
    kind: NotificationKind,
    booking_id: BookingId | None,
) -> None:
    """Deliver a notification, logging and swallowing any failure."""
    try:
        notifier.notify(user_id, kind, booking_id)
    except Exception:
        logger.exception(
            "Failed to send %s notification to user %s for booking %s",
            kind.value,
            user_id,
            booking_id,
        )


def notify_on_commit(
    store: BookingStore,
    notifier: Notifier,
    user_id: UserId,
    kind: NotificationKind,
    booking_id: BookingId | None,
) -> None:
    """Queue a notification for after the current unit commits."""
    store.on_commit(partial(send_safely, notifier, user_id, kind, booking_id))
