"""Tests for the admin configuration.

Run with: pytest tests/test_admin.py -v
"""

from datetime import timedelta

import pytest
from django.contrib import admin
from django.utils import timezone

from bookings import models
from bookings.admin import BookingInline, WaitlistEntryInline


@pytest.fixture
def admin_request(rf, admin_user):
    request = rf.get("/admin/")
    request.user = admin_user
    return request


def new_session_row(total_seats=4):
    starts_at = timezone.now() + timedelta(days=1)
    return models.LearningSession(
        title="Kubernetes basics",
        starts_at=starts_at,
        ends_at=starts_at + timedelta(hours=2),
        total_seats=total_seats,
    )


@pytest.mark.django_db
class TestLearningSessionAdmin:
    """Tests for the session admin."""

    def test_counters_are_read_only_on_change(self, admin_request):
        session = new_session_row()
        session.available_seats = 4
        session.save()
        model_admin = admin.site._registry[models.LearningSession]

        readonly = set(model_admin.get_readonly_fields(admin_request, session))

        assert {"status", "total_seats", "available_seats"} <= readonly

    def test_new_session_starts_with_every_seat_free(self, admin_request):
        session = new_session_row(total_seats=6)
        model_admin = admin.site._registry[models.LearningSession]

        model_admin.save_model(admin_request, session, form=None, change=False)

        session.refresh_from_db()
        assert session.available_seats == 6

    @pytest.mark.parametrize("inline_cls", [BookingInline, WaitlistEntryInline])
    def test_inlines_are_view_only(self, admin_request, inline_cls):
        inline = inline_cls(models.LearningSession, admin.site)
        assert not inline.has_add_permission(admin_request)
        assert not inline.has_change_permission(admin_request)
        assert not inline.can_delete


@pytest.mark.django_db
class TestBookingAndWaitlistAdmin:
    """Tests for the booking and waitlist admins."""

    def test_booking_state_is_read_only(self, admin_request):
        model_admin = admin.site._registry[models.Booking]
        assert {"status", "seat_number"} <= set(model_admin.get_readonly_fields(admin_request))
        assert not model_admin.has_add_permission(admin_request)

    def test_waitlist_queue_is_read_only(self, admin_request):
        model_admin = admin.site._registry[models.WaitlistEntry]
        assert {"position", "status"} <= set(model_admin.get_readonly_fields(admin_request))
        assert not model_admin.has_add_permission(admin_request)
