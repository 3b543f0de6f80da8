"""Engine settings, read from ``settings.BOOKINGS``.

Example::

    BOOKINGS = {
        "ELIGIBILITY": "bookings.services.collaborators.AllowAllEligibility",
        "MANAGER_DIRECTORY": "bookings.services.collaborators.StaticManagerDirectory",
        "NOTIFIER": "bookings.services.collaborators.LoggingNotifier",
        "MANAGERS": {"<user uuid>": "<manager uuid>"},
        "SEAT_MAP_CACHE_TIMEOUT": 60,
    }
"""

from django.conf import settings
from django.utils.module_loading import import_string

from bookings.domain import UserId
from bookings.services.collaborators import (
    Eligibility,
    ManagerDirectory,
    Notifier,
    StaticManagerDirectory,
)

DEFAULTS = {
    "ELIGIBILITY": "bookings.services.collaborators.AllowAllEligibility",
    "MANAGER_DIRECTORY": "bookings.services.collaborators.StaticManagerDirectory",
    "NOTIFIER": "bookings.services.collaborators.LoggingNotifier",
    "MANAGERS": {},
    "SEAT_MAP_CACHE_TIMEOUT": 60,
}


def get_setting(name: str):
    return getattr(settings, "BOOKINGS", {}).get(name, DEFAULTS[name])


def get_eligibility() -> Eligibility:
    return import_string(get_setting("ELIGIBILITY"))()


def get_manager_directory() -> ManagerDirectory:
    directory_cls = import_string(get_setting("MANAGER_DIRECTORY"))
    if issubclass(directory_cls, StaticManagerDirectory):
        managers = {
            UserId.from_string(user): UserId.from_string(manager)
            for user, manager in get_setting("MANAGERS").items()
        }
        return directory_cls(managers)
    return directory_cls()


def get_notifier() -> Notifier:
    return import_string(get_setting("NOTIFIER"))()
