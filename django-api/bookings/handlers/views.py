"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

import logging

from django.core.cache import cache
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from bookings import conf
from bookings.domain import (
    AttendanceStatus,
    BookingId,
    CompletionStatus,
    SessionId,
    UserId,
    WaitlistedOutcome,
    WaitlistEntryId,
)
from bookings.domain.errors import (
    ConflictError,
    DomainError,
    InvalidIdError,
    InvalidRequestError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from bookings.handlers import serializers as s
from bookings.services import BookingService
from bookings.signals import seats_cache_key, waitlist_cache_key
from bookings.stores.django_store import DjangoBookingStore

logger = logging.getLogger(__name__)

ERROR_STATUS = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (UnauthorizedError, status.HTTP_403_FORBIDDEN),
    (ConflictError, status.HTTP_409_CONFLICT),
]


def get_booking_service() -> BookingService:
    return BookingService(
        DjangoBookingStore(),
        eligibility=conf.get_eligibility(),
        directory=conf.get_manager_directory(),
        notifier=conf.get_notifier(),
    )


def error_response(error: DomainError) -> Response:
    for error_cls, http_status in ERROR_STATUS:
        if isinstance(error, error_cls):
            break
    else:
        http_status = status.HTTP_400_BAD_REQUEST
    return Response({"code": error.code.value, "message": error.message}, status=http_status)


def parse_id(id_cls, value: str, kind: str):
    try:
        return id_cls.from_string(value)
    except ValueError:
        raise InvalidIdError(kind) from None


def validated(serializer_cls, data) -> dict:
    serializer = serializer_cls(data=data)
    if not serializer.is_valid():
        field = next(iter(serializer.errors))
        raise InvalidRequestError(f"Invalid value for '{field}'")
    return serializer.validated_data


class BookingAPIView(APIView):
    """Base view: builds the service and turns domain errors into responses."""

    def get_service(self) -> BookingService:
        return get_booking_service()

    def handle_exception(self, exc):
        if isinstance(exc, DomainError):
            logger.info("Request failed with %s", exc)
            return error_response(exc)
        return super().handle_exception(exc)


def booking_response(booking, http_status=status.HTTP_200_OK) -> Response:
    return Response(s.BookingSerializer(booking).data, status=http_status)


class BookingListView(BookingAPIView):
    """Handler for POST /api/bookings"""

    def post(self, request: Request) -> Response:
        data = validated(s.CreateBookingSerializer, request.data)
        result = self.get_service().create_booking(
            UserId(data["user_id"]),
            SessionId(data["session_id"]),
            seat_number=data.get("seat_number"),
            notes=data.get("notes"),
        )
        if isinstance(result, WaitlistedOutcome):
            return Response(s.WaitlistedOutcomeSerializer(result).data, status=status.HTTP_202_ACCEPTED)
        return booking_response(result, status.HTTP_201_CREATED)


class NominationView(BookingAPIView):
    """Handler for POST /api/nominations"""

    def post(self, request: Request) -> Response:
        data = validated(s.NominationSerializer, request.data)
        service = self.get_service()
        user_id, session_id = UserId(data["user_id"]), SessionId(data["session_id"])
        if data["nomination_type"] == "MANDATORY":
            booking = service.book_mandatory_nomination(user_id, session_id, data.get("notes"))
        else:
            booking = service.accept_recommendation(user_id, session_id, data.get("notes"))
        return booking_response(booking, status.HTTP_201_CREATED)


class BookingDetailView(BookingAPIView):
    """Handler for GET /api/bookings/{booking_id}"""

    def get(self, request: Request, booking_id: str) -> Response:
        booking_id = parse_id(BookingId, booking_id, "booking")
        return booking_response(self.get_service().get_booking(booking_id))


class ApproveBookingView(BookingAPIView):
    """Handler for POST /api/bookings/{booking_id}/approve"""

    def post(self, request: Request, booking_id: str) -> Response:
        booking_id = parse_id(BookingId, booking_id, "booking")
        data = validated(s.ActorSerializer, request.data)
        return booking_response(self.get_service().approve(booking_id, UserId(data["actor_id"])))


class RejectBookingView(BookingAPIView):
    """Handler for POST /api/bookings/{booking_id}/reject"""

    def post(self, request: Request, booking_id: str) -> Response:
        booking_id = parse_id(BookingId, booking_id, "booking")
        data = validated(s.ActorSerializer, request.data)
        booking = self.get_service().reject(booking_id, UserId(data["actor_id"]), data.get("reason"))
        return booking_response(booking)


class CancelBookingView(BookingAPIView):
    """Handler for POST /api/bookings/{booking_id}/cancel"""

    def post(self, request: Request, booking_id: str) -> Response:
        booking_id = parse_id(BookingId, booking_id, "booking")
        data = validated(s.CancelSerializer, request.data)
        actor = UserId(data["actor_id"]) if data.get("actor_id") else None
        booking = self.get_service().cancel(booking_id, data.get("reason"), cancelled_by=actor)
        return booking_response(booking)


class SelectSeatView(BookingAPIView):
    """Handler for POST /api/bookings/{booking_id}/seat"""

    def post(self, request: Request, booking_id: str) -> Response:
        booking_id = parse_id(BookingId, booking_id, "booking")
        data = validated(s.SeatSerializer, request.data)
        return booking_response(self.get_service().select_seat(booking_id, data["seat_number"]))

    def put(self, request: Request, booking_id: str) -> Response:
        booking_id = parse_id(BookingId, booking_id, "booking")
        data = validated(s.SeatSerializer, request.data)
        return booking_response(self.get_service().change_seat(booking_id, data["seat_number"]))


class CancellationRequestView(BookingAPIView):
    """Handler for POST /api/bookings/{booking_id}/cancellation-request"""

    def post(self, request: Request, booking_id: str) -> Response:
        booking_id = parse_id(BookingId, booking_id, "booking")
        data = validated(s.ActorSerializer, request.data)
        booking = self.get_service().request_cancellation(
            booking_id, UserId(data["actor_id"]), data.get("reason")
        )
        return booking_response(booking)


class CancellationDecisionView(BookingAPIView):
    """Handler for POST /api/bookings/{booking_id}/cancellation-request/{decision}"""

    def post(self, request: Request, booking_id: str, decision: str) -> Response:
        booking_id = parse_id(BookingId, booking_id, "booking")
        data = validated(s.ActorSerializer, request.data)
        manager = UserId(data["actor_id"])
        service = self.get_service()
        if decision == "approve":
            booking = service.approve_cancellation(booking_id, manager)
        elif decision == "reject":
            booking = service.reject_cancellation(booking_id, manager, data.get("reason"))
        else:
            raise InvalidRequestError(f"Unknown decision '{decision}'")
        return booking_response(booking)


class AttendanceView(BookingAPIView):
    """Handler for POST /api/bookings/{booking_id}/attendance"""

    def post(self, request: Request, booking_id: str) -> Response:
        booking_id = parse_id(BookingId, booking_id, "booking")
        data = validated(s.AttendanceSerializer, request.data)
        booking = self.get_service().mark_attendance(
            booking_id, AttendanceStatus(data["attendance_status"])
        )
        return booking_response(booking)


class CompletionView(BookingAPIView):
    """Handler for POST /api/bookings/{booking_id}/completion"""

    def post(self, request: Request, booking_id: str) -> Response:
        booking_id = parse_id(BookingId, booking_id, "booking")
        data = validated(s.CompletionSerializer, request.data)
        booking = self.get_service().mark_completion(
            booking_id, CompletionStatus(data["completion_status"])
        )
        return booking_response(booking)


class FeedbackView(BookingAPIView):
    """Handler for POST /api/bookings/{booking_id}/feedback"""

    def post(self, request: Request, booking_id: str) -> Response:
        booking_id = parse_id(BookingId, booking_id, "booking")
        data = validated(s.FeedbackSerializer, request.data)
        booking = self.get_service().submit_feedback(booking_id, data["rating"], data.get("comments"))
        return booking_response(booking)


class ManagerNotifiedView(BookingAPIView):
    """Handler for POST /api/bookings/{booking_id}/manager-notified"""

    def post(self, request: Request, booking_id: str) -> Response:
        booking_id = parse_id(BookingId, booking_id, "booking")
        return booking_response(self.get_service().mark_manager_notified(booking_id))


class SeatMapView(BookingAPIView):
    """Handler for GET /api/sessions/{session_id}/seats"""

    def get(self, request: Request, session_id: str) -> Response:
        session_id = parse_id(SessionId, session_id, "session")
        key = seats_cache_key(session_id)
        data = cache.get(key)
        if data is None:
            seat_map = self.get_service().seat_map(session_id)
            data = {
                "seats": [
                    {"seat_number": seat, "status": booking_status.value}
                    for seat, booking_status in sorted(seat_map.items())
                ]
            }
            cache.set(key, data, conf.get_setting("SEAT_MAP_CACHE_TIMEOUT"))
        return Response(data)


class WaitlistView(BookingAPIView):
    """Handler for GET/POST /api/sessions/{session_id}/waitlist"""

    def get(self, request: Request, session_id: str) -> Response:
        session_id = parse_id(SessionId, session_id, "session")
        key = waitlist_cache_key(session_id)
        data = cache.get(key)
        if data is None:
            entries = self.get_service().waiting_list(session_id)
            data = {"entries": s.WaitlistEntrySerializer(entries, many=True).data}
            cache.set(key, data, conf.get_setting("SEAT_MAP_CACHE_TIMEOUT"))
        return Response(data)

    def post(self, request: Request, session_id: str) -> Response:
        session_id = parse_id(SessionId, session_id, "session")
        data = validated(s.JoinWaitlistSerializer, request.data)
        entry = self.get_service().waitlist.join(session_id, UserId(data["user_id"]), data.get("notes"))
        return Response(s.WaitlistEntrySerializer(entry).data, status=status.HTTP_201_CREATED)


class WaitlistEntryView(BookingAPIView):
    """Handler for DELETE /api/waitlist/{entry_id}"""

    def delete(self, request: Request, entry_id: str) -> Response:
        entry_id = parse_id(WaitlistEntryId, entry_id, "waitlist entry")
        data = validated(s.UserSerializer, request.data)
        self.get_service().waitlist.remove(entry_id, UserId(data["user_id"]))
        return Response(status=status.HTTP_204_NO_CONTENT)


class PromotionView(BookingAPIView):
    """Handler for POST /api/sessions/{session_id}/promotions"""

    def post(self, request: Request, session_id: str) -> Response:
        session_id = parse_id(SessionId, session_id, "session")
        promoted = self.get_service().process_promotion(session_id)
        return Response({"promoted": s.BookingSerializer(promoted, many=True).data})


class SessionCancellationView(BookingAPIView):
    """Handler for POST /api/sessions/{session_id}/cancellation"""

    def post(self, request: Request, session_id: str) -> Response:
        session_id = parse_id(SessionId, session_id, "session")
        data = validated(s.SessionCancellationSerializer, request.data)
        service = self.get_service()
        if "reason" in data:
            count = service.cancel_bookings_for_session(session_id, data["reason"])
        else:
            count = service.cancel_bookings_for_session(session_id)
        return Response({"cancelled_bookings": count})
