"""Serializers for request bodies and for domain models in API responses.

Output serializers read domain dataclasses directly; ids and value objects
render through their ``__str__`` or ``value``.
"""

from rest_framework import serializers

from bookings.domain import AttendanceStatus, CompletionStatus


class BookingSerializer(serializers.Serializer):
    """Serializer for Booking domain model."""

    id = serializers.CharField()
    reference = serializers.CharField(source="reference.value")
    session_id = serializers.CharField()
    user_id = serializers.CharField()
    status = serializers.CharField(source="status.value")
    seat_number = serializers.IntegerField(allow_null=True)
    nomination_type = serializers.CharField(source="nomination_type.value", allow_null=True)
    notes = serializers.CharField(allow_null=True)
    booked_at = serializers.DateTimeField()
    confirmed_at = serializers.DateTimeField(allow_null=True)
    cancelled_at = serializers.DateTimeField(allow_null=True)
    cancellation_reason = serializers.CharField(allow_null=True)
    approved_by = serializers.CharField(allow_null=True)
    approved_at = serializers.DateTimeField(allow_null=True)
    rejected_by = serializers.CharField(allow_null=True)
    rejected_at = serializers.DateTimeField(allow_null=True)
    rejection_reason = serializers.CharField(allow_null=True)
    manager_notified = serializers.BooleanField()
    attendance_status = serializers.CharField(source="attendance_status.value")
    completion_status = serializers.CharField(source="completion_status.value")
    feedback_rating = serializers.IntegerField(source="feedback_rating.value", allow_null=True)
    feedback_comments = serializers.CharField(allow_null=True)


class WaitlistEntrySerializer(serializers.Serializer):
    """Serializer for WaitlistEntry domain model."""

    id = serializers.CharField()
    session_id = serializers.CharField()
    user_id = serializers.CharField()
    position = serializers.IntegerField()
    status = serializers.CharField(source="status.value")
    joined_at = serializers.DateTimeField()
    notes = serializers.CharField(allow_null=True)


class WaitlistedOutcomeSerializer(serializers.Serializer):
    status = serializers.SerializerMethodField()
    position = serializers.IntegerField()
    entry = WaitlistEntrySerializer()

    def get_status(self, outcome) -> str:
        return "WAITLISTED"


# -- request bodies ---------------------------------------------------------


class CreateBookingSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    session_id = serializers.UUIDField()
    seat_number = serializers.IntegerField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class NominationSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    session_id = serializers.UUIDField()
    nomination_type = serializers.ChoiceField(choices=["MANDATORY", "RECOMMENDED"])
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class ActorSerializer(serializers.Serializer):
    """Body naming the acting user, with an optional reason."""

    actor_id = serializers.UUIDField()
    reason = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class CancelSerializer(serializers.Serializer):
    actor_id = serializers.UUIDField(required=False, allow_null=True)
    reason = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class SeatSerializer(serializers.Serializer):
    seat_number = serializers.IntegerField()


class AttendanceSerializer(serializers.Serializer):
    attendance_status = serializers.ChoiceField(choices=[s.value for s in AttendanceStatus])


class CompletionSerializer(serializers.Serializer):
    completion_status = serializers.ChoiceField(choices=[s.value for s in CompletionStatus])


class FeedbackSerializer(serializers.Serializer):
    rating = serializers.IntegerField()
    comments = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class JoinWaitlistSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class UserSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()


class SessionCancellationSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=False)
