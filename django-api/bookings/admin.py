from django.contrib import admin

from bookings.models import Booking, LearningSession, WaitlistEntry

# Seat counters, booking statuses and queue positions only change through
# BookingService, so the admin shows them but never writes them.


class ReadOnlyInline(admin.TabularInline):
    extra = 0
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False


class BookingInline(ReadOnlyInline):
    model = Booking
    fields = ["reference", "user_id", "status", "seat_number"]
    readonly_fields = fields


class WaitlistEntryInline(ReadOnlyInline):
    model = WaitlistEntry
    fields = ["user_id", "position", "status"]
    readonly_fields = fields


@admin.register(LearningSession)
class LearningSessionAdmin(admin.ModelAdmin):
    list_display = ["title", "status", "starts_at", "total_seats", "available_seats"]
    list_filter = ["status"]
    search_fields = ["title"]
    inlines = [BookingInline, WaitlistEntryInline]

    def get_readonly_fields(self, request, obj=None):
        if obj is None:
            return ["available_seats"]
        return ["status", "total_seats", "available_seats"]

    def save_model(self, request, obj, form, change):
        if not change:
            obj.available_seats = obj.total_seats
        super().save_model(request, obj, form, change)


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ["reference", "session", "user_id", "status", "seat_number", "booked_at"]
    list_filter = ["status", "nomination_type"]
    search_fields = ["reference"]
    readonly_fields = ["reference", "session", "user_id", "status", "seat_number", "booked_at"]

    def has_add_permission(self, request):
        return False


@admin.register(WaitlistEntry)
class WaitlistEntryAdmin(admin.ModelAdmin):
    list_display = ["session", "user_id", "position", "status", "joined_at"]
    list_filter = ["status"]
    readonly_fields = ["session", "user_id", "position", "status", "joined_at"]

    def has_add_permission(self, request):
        return False
