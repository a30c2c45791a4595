"""
Serializers for the events app.

`EventSerializer` is the full admin representation; members get
`MemberEventSerializer`, which adds whether the caller already holds a
seat.  `RedeemRequestSerializer` is the only input the redemption
endpoint accepts.
"""
from rest_framework import serializers

from .models import Event, EventRegistration


class EventSerializer(serializers.ModelSerializer):
    """Serializer for Event objects."""
    seats_left = serializers.IntegerField(read_only=True)

    class Meta:
        model = Event
        fields = [
            "id",
            "title",
            "description",
            "location",
            "event_date",
            "points_cost",
            "max_attendees",
            "current_attendees",
            "seats_left",
            "image_url",
            "status",
            "created_at",
            "updated_at",
        ]
        # The attendee counter only moves through the capacity tracker.
        read_only_fields = ["id", "current_attendees", "created_at", "updated_at"]

    def validate_max_attendees(self, value):
        if value <= 0:
            raise serializers.ValidationError("max_attendees must be positive.")
        if self.instance is not None and value < self.instance.current_attendees:
            raise serializers.ValidationError(
                "max_attendees cannot be lower than the number of registered attendees."
            )
        return value


class MemberEventSerializer(EventSerializer):
    is_registered = serializers.SerializerMethodField()

    class Meta(EventSerializer.Meta):
        fields = EventSerializer.Meta.fields + ["is_registered"]
        read_only_fields = EventSerializer.Meta.fields + ["is_registered"]

    def get_is_registered(self, obj) -> bool:
        registered_ids = self.context.get("registered_event_ids")
        if registered_ids is not None:
            return obj.pk in registered_ids
        request = self.context.get("request")
        if not request or not request.user.is_authenticated:
            return False
        return EventRegistration.objects.filter(user_id=request.user.pk, event_id=obj.pk).exists()


class EventRegistrationSerializer(serializers.ModelSerializer):
    event_title = serializers.CharField(source="event.title", read_only=True)
    event_date = serializers.DateTimeField(source="event.event_date", read_only=True)
    user_email = serializers.EmailField(source="user.email", read_only=True)

    class Meta:
        model = EventRegistration
        fields = [
            "id",
            "event",
            "event_title",
            "event_date",
            "user",
            "user_email",
            "points_spent",
            "reservation_code",
            "status",
            "registered_at",
        ]
        read_only_fields = fields


class RedeemRequestSerializer(serializers.Serializer):
    event_id = serializers.IntegerField(min_value=1)
