from bookings.services.booking_service import BookingService
from bookings.services.capacity_service import CapacityService
from bookings.services.collaborators import (
    AllowAllEligibility,
    Eligibility,
    LoggingNotifier,
    ManagerDirectory,
    NotificationKind,
    Notifier,
    StaticManagerDirectory,
)
from bookings.services.promotion_service import PromotionService
from bookings.services.waitlist_service import WaitlistService

__all__ = [
    "AllowAllEligibility",
    "BookingService",
    "CapacityService",
    "Eligibility",
    "LoggingNotifier",
    "ManagerDirectory",
    "NotificationKind",
    "Notifier",
    "PromotionService",
    "StaticManagerDirectory",
    "WaitlistService",
]
