"""Pytest configuration and shared fixtures."""

import uuid
from datetime import UTC, datetime, timedelta

import pytest
from rest_framework.test import APIClient

from bookings.domain import LearningSession, SessionId, SessionStatus, UserId
from bookings.services import (
    AllowAllEligibility,
    BookingService,
    Notifier,
    StaticManagerDirectory,
)
from bookings.stores import InMemoryBookingStore

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


class RecordingNotifier(Notifier):
    """Notifier that keeps every delivery for assertions."""

    def __init__(self) -> None:
        self.sent = []

    def notify(self, user_id, kind, booking_id) -> None:
        self.sent.append((user_id, kind, booking_id))

    def kinds_for(self, user_id) -> list:
        return [kind for to, kind, _ in self.sent if to == user_id]


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def store() -> InMemoryBookingStore:
    return InMemoryBookingStore()


@pytest.fixture
def directory() -> StaticManagerDirectory:
    return StaticManagerDirectory()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def service(store, directory, notifier) -> BookingService:
    return BookingService(store, AllowAllEligibility(), directory, notifier, clock=lambda: NOW)


@pytest.fixture
def new_user():
    def _new_user() -> UserId:
        return UserId(uuid.uuid4())

    return _new_user


@pytest.fixture
def make_session(store):
    """Factory saving a scheduled session one week after NOW."""

    def _make(
        total_seats: int | None = 10,
        available_seats: int | None = None,
        status: SessionStatus = SessionStatus.SCHEDULED,
        starts_at: datetime | None = None,
    ) -> LearningSession:
        starts_at = starts_at or NOW + timedelta(days=7)
        session = LearningSession(
            id=SessionId(uuid.uuid4()),
            title="Intro to Data Engineering",
            status=status,
            starts_at=starts_at,
            ends_at=starts_at + timedelta(hours=2),
            total_seats=total_seats,
            available_seats=total_seats if available_seats is None else available_seats,
        )
        store.save_session(session)
        return session

    return _make
