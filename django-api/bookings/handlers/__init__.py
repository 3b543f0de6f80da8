from bookings.handlers.views import (
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

__all__ = [
    "ApproveBookingView",
    "AttendanceView",
    "BookingDetailView",
    "BookingListView",
    "CancelBookingView",
    "CancellationDecisionView",
    "CancellationRequestView",
    "CompletionView",
    "FeedbackView",
    "ManagerNotifiedView",
    "NominationView",
    "PromotionView",
    "RejectBookingView",
    "SeatMapView",
    "SelectSeatView",
    "SessionCancellationView",
    "WaitlistEntryView",
    "WaitlistView",
]
