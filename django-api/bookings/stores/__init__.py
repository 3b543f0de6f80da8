from bookings.stores.interfaces import BookingStore
from bookings.stores.memory_store import InMemoryBookingStore

__all__ = ["BookingStore", "InMemoryBookingStore"]
