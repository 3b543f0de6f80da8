"""Integration tests for the bookings API.

Run with: pytest tests/test_api.py -v
"""

import uuid
from datetime import timedelta

import pytest
from django.utils import timezone

from bookings import models


@pytest.fixture
def learning_session(db):
    def _make(total_seats=2):
        starts_at = timezone.now() + timedelta(days=5)
        return models.LearningSession.objects.create(
            title="Secure coding",
            starts_at=starts_at,
            ends_at=starts_at + timedelta(hours=3),
            total_seats=total_seats,
            available_seats=total_seats,
        )

    return _make


@pytest.fixture
def with_manager(settings):
    def _assign(user_id, manager_id):
        managers = dict(settings.BOOKINGS.get("MANAGERS", {}))
        managers[str(user_id)] = str(manager_id)
        settings.BOOKINGS = {**settings.BOOKINGS, "MANAGERS": managers}

    return _assign


def book(api_client, session, user_id, **extra):
    return api_client.post(
        "/api/bookings",
        {"user_id": str(user_id), "session_id": str(session.id), **extra},
        format="json",
    )


@pytest.mark.django_db
class TestCreateBooking:
    """Tests for POST /api/bookings."""

    def test_create_returns_confirmed_booking(self, api_client, learning_session):
        session = learning_session()
        response = book(api_client, session, uuid.uuid4(), seat_number=2)

        assert response.status_code == 201
        assert response.data["status"] == "CONFIRMED"
        assert response.data["seat_number"] == 2
        assert response.data["reference"].startswith("BK-")
        session.refresh_from_db()
        assert session.available_seats == 1

    def test_full_session_returns_waitlisted(self, api_client, learning_session):
        session = learning_session(total_seats=1)
        book(api_client, session, uuid.uuid4())

        response = book(api_client, session, uuid.uuid4())

        assert response.status_code == 202
        assert response.data["status"] == "WAITLISTED"
        assert response.data["position"] == 1

    def test_duplicate_returns_conflict(self, api_client, learning_session):
        session, user = learning_session(), uuid.uuid4()
        book(api_client, session, user)

        response = book(api_client, session, user)

        assert response.status_code == 409
        assert response.data == {
            "code": "DUPLICATE_BOOKING",
            "message": "User already has a booking for this session",
        }

    def test_bad_seat_returns_bad_request(self, api_client, learning_session):
        response = book(api_client, learning_session(total_seats=2), uuid.uuid4(), seat_number=9)
        assert response.status_code == 400
        assert response.data["code"] == "INVALID_SEAT"

    def test_unknown_session_returns_not_found(self, api_client, db):
        response = api_client.post(
            "/api/bookings",
            {"user_id": str(uuid.uuid4()), "session_id": str(uuid.uuid4())},
            format="json",
        )
        assert response.status_code == 404
        assert response.data["code"] == "SESSION_NOT_FOUND"

    def test_malformed_body_returns_bad_request(self, api_client, db):
        response = api_client.post("/api/bookings", {"user_id": "nope"}, format="json")
        assert response.status_code == 400
        assert response.data["code"] == "INVALID_REQUEST"


@pytest.mark.django_db
class TestBookingLifecycle:
    """Tests for the booking transition endpoints."""

    def test_get_booking_with_invalid_id(self, api_client):
        response = api_client.get("/api/bookings/not-a-uuid")
        assert response.status_code == 400
        assert response.data == {"code": "INVALID_ID", "message": "Invalid booking ID format"}

    def test_get_unknown_booking(self, api_client):
        response = api_client.get(f"/api/bookings/{uuid.uuid4()}")
        assert response.status_code == 404

    def test_manager_approves_booking(self, api_client, learning_session, with_manager):
        session, user, manager = learning_session(), uuid.uuid4(), uuid.uuid4()
        with_manager(user, manager)
        booking = book(api_client, session, user).data
        assert booking["status"] == "PENDING_APPROVAL"

        response = api_client.post(
            f"/api/bookings/{booking['id']}/approve", {"actor_id": str(manager)}, format="json"
        )

        assert response.status_code == 200
        assert response.data["status"] == "CONFIRMED"
        assert response.data["approved_by"] == str(manager)

    def test_other_user_cannot_reject(self, api_client, learning_session, with_manager):
        session, user = learning_session(), uuid.uuid4()
        with_manager(user, uuid.uuid4())
        booking = book(api_client, session, user).data

        response = api_client.post(
            f"/api/bookings/{booking['id']}/reject", {"actor_id": str(uuid.uuid4())}, format="json"
        )

        assert response.status_code == 403
        assert response.data["code"] == "UNAUTHORIZED"

    def test_cancel_twice_returns_conflict(self, api_client, learning_session):
        booking = book(api_client, learning_session(), uuid.uuid4()).data
        url = f"/api/bookings/{booking['id']}/cancel"

        assert api_client.post(url, {"reason": "Holiday"}, format="json").status_code == 200
        response = api_client.post(url, {}, format="json")

        assert response.status_code == 409
        assert response.data["code"] == "INVALID_TRANSITION"

    def test_change_seat(self, api_client, learning_session):
        booking = book(api_client, learning_session(total_seats=4), uuid.uuid4(), seat_number=1).data
        response = api_client.put(f"/api/bookings/{booking['id']}/seat", {"seat_number": 4}, format="json")
        assert response.status_code == 200
        assert response.data["seat_number"] == 4

    def test_cancellation_request_flow(self, api_client, learning_session, with_manager):
        session, user, manager = learning_session(), uuid.uuid4(), uuid.uuid4()
        with_manager(user, manager)
        booking = api_client.post(
            "/api/nominations",
            {"user_id": str(user), "session_id": str(session.id), "nomination_type": "MANDATORY"},
            format="json",
        ).data
        assert booking["nomination_type"] == "MANDATORY"

        requested = api_client.post(
            f"/api/bookings/{booking['id']}/cancellation-request",
            {"actor_id": str(user), "reason": "On call"},
            format="json",
        )
        assert requested.data["status"] == "PENDING_CANCELLATION"

        rejected = api_client.post(
            f"/api/bookings/{booking['id']}/cancellation-request/reject",
            {"actor_id": str(manager), "reason": "Mandatory for the team"},
            format="json",
        )
        assert rejected.status_code == 200
        assert rejected.data["status"] == "CONFIRMED"
        assert rejected.data["rejection_reason"] == "Mandatory for the team"

    def test_feedback_out_of_range(self, api_client, learning_session):
        booking = book(api_client, learning_session(), uuid.uuid4()).data
        response = api_client.post(f"/api/bookings/{booking['id']}/feedback", {"rating": 7}, format="json")
        assert response.status_code == 400
        assert response.data["code"] == "INVALID_RATING"

    def test_attendance_absent_marks_no_show(self, api_client, learning_session):
        booking = book(api_client, learning_session(), uuid.uuid4()).data
        response = api_client.post(
            f"/api/bookings/{booking['id']}/attendance", {"attendance_status": "ABSENT"}, format="json"
        )
        assert response.data["status"] == "NO_SHOW"
        assert response.data["attendance_status"] == "ABSENT"


@pytest.mark.django_db
class TestSessionEndpoints:
    """Tests for seat map, waitlist and session-wide endpoints."""

    def test_seat_map(self, api_client, learning_session):
        session = learning_session(total_seats=3)
        book(api_client, session, uuid.uuid4(), seat_number=3)

        response = api_client.get(f"/api/sessions/{session.id}/seats")

        assert response.status_code == 200
        assert response.data == {"seats": [{"seat_number": 3, "status": "CONFIRMED"}]}

    def test_waitlist_join_list_and_leave(self, api_client, learning_session, django_capture_on_commit_callbacks):
        session = learning_session(total_seats=1)
        book(api_client, session, uuid.uuid4())
        user = uuid.uuid4()

        joined = api_client.post(f"/api/sessions/{session.id}/waitlist", {"user_id": str(user)}, format="json")
        assert joined.status_code == 201
        assert joined.data["position"] == 1

        listing = api_client.get(f"/api/sessions/{session.id}/waitlist")
        assert [e["user_id"] for e in listing.data["entries"]] == [str(user)]

        with django_capture_on_commit_callbacks(execute=True):
            left = api_client.delete(f"/api/waitlist/{joined.data['id']}", {"user_id": str(user)}, format="json")
        assert left.status_code == 204
        assert api_client.get(f"/api/sessions/{session.id}/waitlist").data["entries"] == []

    def test_join_open_session_returns_conflict(self, api_client, learning_session):
        session = learning_session(total_seats=3)
        response = api_client.post(
            f"/api/sessions/{session.id}/waitlist", {"user_id": str(uuid.uuid4())}, format="json"
        )
        assert response.status_code == 409
        assert response.data["code"] == "SEATS_AVAILABLE"

    def test_waitlist_of_unknown_session(self, api_client):
        response = api_client.get(f"/api/sessions/{uuid.uuid4()}/waitlist")
        assert response.status_code == 404

    def test_promotion_without_free_seats(self, api_client, learning_session):
        session = learning_session(total_seats=1)
        book(api_client, session, uuid.uuid4())
        response = api_client.post(f"/api/sessions/{session.id}/promotions")
        assert response.status_code == 200
        assert response.data == {"promoted": []}

    def test_session_cancellation(self, api_client, learning_session):
        session = learning_session(total_seats=2)
        book(api_client, session, uuid.uuid4())
        book(api_client, session, uuid.uuid4())

        response = api_client.post(f"/api/sessions/{session.id}/cancellation", {}, format="json")

        assert response.data == {"cancelled_bookings": 2}
        session.refresh_from_db()
        assert session.status == "CANCELLED"
        assert session.available_seats == 2
