"""Django signals for cache invalidation.

Seat maps and waitlists are cached per session; any write to a session's
rows drops both keys once the write's transaction commits.
"""

from functools import partial

from django.core.cache import cache
from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from bookings.models import Booking, LearningSession, WaitlistEntry


def seats_cache_key(session_id) -> str:
    return f"sessions:{session_id}:seats"


def waitlist_cache_key(session_id) -> str:
    return f"sessions:{session_id}:waitlist"


def invalidate_session_caches(session_id) -> None:
    cache.delete_many([seats_cache_key(session_id), waitlist_cache_key(session_id)])


def invalidate_on_commit(session_id) -> None:
    # A reader can repopulate the keys from the old rows until the commit.
    transaction.on_commit(partial(invalidate_session_caches, session_id))


@receiver([post_save, post_delete], sender=LearningSession)
def invalidate_learning_session_cache(sender, instance, **kwargs):
    """Invalidate caches when a session is saved or deleted."""
    invalidate_on_commit(instance.pk)


@receiver([post_save, post_delete], sender=Booking)
def invalidate_booking_cache(sender, instance, **kwargs):
    """Invalidate caches when a booking is saved or deleted."""
    invalidate_on_commit(instance.session_id)


@receiver([post_save, post_delete], sender=WaitlistEntry)
def invalidate_waitlist_cache(sender, instance, **kwargs):
    """Invalidate caches when a waitlist entry is saved or deleted."""
    invalidate_on_commit(instance.session_id)
