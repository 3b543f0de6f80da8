"""Tests for cache behavior.

Invalidation runs when the write's transaction commits, so tests that
expect cleared keys run the write under django_capture_on_commit_callbacks.
Run with: pytest tests/test_cache.py -v
"""

import uuid
from datetime import timedelta

import pytest
from django.core.cache import cache
from django.utils import timezone

from bookings import models
from bookings.signals import seats_cache_key, waitlist_cache_key


@pytest.fixture
def session_row(db):
    starts_at = timezone.now() + timedelta(days=2)
    return models.LearningSession.objects.create(
        title="Observability 101",
        starts_at=starts_at,
        ends_at=starts_at + timedelta(hours=1),
        total_seats=2,
        available_seats=2,
    )


def prime(session_id):
    cache.set(seats_cache_key(session_id), {"seats": []})
    cache.set(waitlist_cache_key(session_id), {"entries": []})


def is_cleared(session_id) -> bool:
    return cache.get(seats_cache_key(session_id)) is None and cache.get(waitlist_cache_key(session_id)) is None


def create_booking_row(session_row, seat_number=1):
    return models.Booking.objects.create(
        session=session_row,
        reference="BK-0A1B2C3D",
        user_id=uuid.uuid4(),
        status="CONFIRMED",
        seat_number=seat_number,
        booked_at=timezone.now(),
    )


@pytest.mark.django_db
class TestCacheInvalidation:
    """Tests for cache invalidation on model changes."""

    def test_session_save_invalidates_session_caches(self, session_row, django_capture_on_commit_callbacks):
        """Saving a session invalidates the sessions:{id}:seats and :waitlist keys."""
        prime(session_row.id)
        with django_capture_on_commit_callbacks(execute=True):
            session_row.available_seats = 1
            session_row.save()
        assert is_cleared(session_row.id)

    def test_booking_save_invalidates_session_caches(self, session_row, django_capture_on_commit_callbacks):
        prime(session_row.id)
        with django_capture_on_commit_callbacks(execute=True):
            create_booking_row(session_row)
        assert is_cleared(session_row.id)

    def test_waitlist_delete_invalidates_session_caches(self, session_row, django_capture_on_commit_callbacks):
        entry = models.WaitlistEntry.objects.create(
            session=session_row, user_id=uuid.uuid4(), position=1, joined_at=timezone.now()
        )
        prime(session_row.id)
        with django_capture_on_commit_callbacks(execute=True):
            entry.delete()
        assert is_cleared(session_row.id)

    def test_keys_survive_until_commit(self, session_row, django_capture_on_commit_callbacks):
        prime(session_row.id)
        with django_capture_on_commit_callbacks() as callbacks:
            create_booking_row(session_row)
        assert cache.get(seats_cache_key(session_row.id)) == {"seats": []}
        assert len(callbacks) == 1

    def test_reader_caching_before_commit_is_cleared(self, session_row, django_capture_on_commit_callbacks):
        """A seat map cached from pre-commit rows is dropped at commit."""
        with django_capture_on_commit_callbacks(execute=True):
            create_booking_row(session_row, seat_number=1)
            cache.set(seats_cache_key(session_row.id), {"seats": []})
        assert cache.get(seats_cache_key(session_row.id)) is None

    def test_other_session_cache_is_kept(self, session_row, django_capture_on_commit_callbacks):
        other_id = uuid.uuid4()
        prime(other_id)
        with django_capture_on_commit_callbacks(execute=True):
            session_row.save()
        assert cache.get(seats_cache_key(other_id)) == {"seats": []}

    def test_seat_map_view_is_cached_until_booking_changes(
        self, api_client, session_row, django_capture_on_commit_callbacks
    ):
        url = f"/api/sessions/{session_row.id}/seats"
        assert api_client.get(url).data == {"seats": []}
        assert cache.get(seats_cache_key(session_row.id)) == {"seats": []}

        with django_capture_on_commit_callbacks(execute=True):
            api_client.post(
                "/api/bookings",
                {"user_id": str(uuid.uuid4()), "session_id": str(session_row.id), "seat_number": 2},
                format="json",
            )

        assert api_client.get(url).data == {"seats": [{"seat_number": 2, "status": "CONFIRMED"}]}
