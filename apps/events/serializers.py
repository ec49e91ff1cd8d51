from rest_framework import serializers
from .models import Event, EventType
from apps.accounts.models import User


class UserMinimalSerializer(serializers.ModelSerializer):
    """Minimal user info for nested serialization."""

    display_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'email', 'display_name']
        read_only_fields = fields

    def get_display_name(self, obj):
        return obj.get_display_name()


class EventSerializer(serializers.ModelSerializer):
    """Main serializer for events."""

    organizer = UserMinimalSerializer(read_only=True)
    participant_count = serializers.SerializerMethodField()

    class Meta:
        model = Event
        fields = [
            'id',
            'name',
            'description',
            'location',
            'event_date',
            'event_type',
            'organizer',
            'invite_slug',
            'is_closed',
            'closed_at',
            'participant_count',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_participant_count(self, obj):
        """Number of active racha participants."""
        return obj.participants.filter(is_active=True).count()


class EventCreateSerializer(serializers.ModelSerializer):
    """Serializer for creating events."""

    event_type = serializers.ChoiceField(choices=EventType.choices, default=EventType.POSTPAID)

    class Meta:
        model = Event
        fields = ['name', 'description', 'location', 'event_date', 'event_type']
