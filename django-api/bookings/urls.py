from django.urls import path

from bookings.handlers import (
    ApproveBookingView,
    AttendanceView,
    BookingDetailView,
    BookingListView,
    CancelBookingView,
    CancellationDecisionView,
    CancellationRequestView,
    CompletionView,
    FeedbackView,
    ManagerNotifiedView,
    NominationView,
    PromotionView,
    RejectBookingView,
    SeatMapView,
    SelectSeatView,
    SessionCancellationView,
    WaitlistEntryView,
    WaitlistView,
)

urlpatterns = [
    path("bookings", BookingListView.as_view(), name="booking-list"),
    path("nominations", NominationView.as_view(), name="nomination"),
    path("bookings/<str:booking_id>", BookingDetailView.as_view(), name="booking-detail"),
    path("bookings/<str:booking_id>/approve", ApproveBookingView.as_view(), name="booking-approve"),
    path("bookings/<str:booking_id>/reject", RejectBookingView.as_view(), name="booking-reject"),
    path("bookings/<str:booking_id>/cancel", CancelBookingView.as_view(), name="booking-cancel"),
    path("bookings/<str:booking_id>/seat", SelectSeatView.as_view(), name="booking-seat"),
    path(
        "bookings/<str:booking_id>/cancellation-request",
        CancellationRequestView.as_view(),
        name="cancellation-request",
    ),
    path(
        "bookings/<str:booking_id>/cancellation-request/<str:decision>",
        CancellationDecisionView.as_view(),
        name="cancellation-decision",
    ),
    path("bookings/<str:booking_id>/attendance", AttendanceView.as_view(), name="booking-attendance"),
    path("bookings/<str:booking_id>/completion", CompletionView.as_view(), name="booking-completion"),
    path("bookings/<str:booking_id>/feedback", FeedbackView.as_view(), name="booking-feedback"),
    path(
        "bookings/<str:booking_id>/manager-notified",
        ManagerNotifiedView.as_view(),
        name="booking-manager-notified",
    ),
    path("sessions/<str:session_id>/seats", SeatMapView.as_view(), name="session-seats"),
    path("sessions/<str:session_id>/waitlist", WaitlistView.as_view(), name="session-waitlist"),
    path("sessions/<str:session_id>/promotions", PromotionView.as_view(), name="session-promotions"),
    path(
        "sessions/<str:session_id>/cancellation",
        SessionCancellationView.as_view(),
        name="session-cancellation",
    ),
    path("waitlist/<str:entry_id>", WaitlistEntryView.as_view(), name="waitlist-entry"),
]
