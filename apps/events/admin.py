# ==========================================
# apps/events/admin.py
# ==========================================

from django.contrib import admin
from apps.events.models import Event
from apps.racha.models import Participant


class ParticipantInline(admin.TabularInline):
    """Inline admin for racha participants."""
    model = Participant
    extra = 0
    fields = ['name', 'user', 'is_active', 'created_at']
    readonly_fields = ['created_at']


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    """Admin interface for Events."""

    list_display = [
        'name',
        'organizer',
        'event_type',
        'is_closed',
        'participant_count',
        'created_at'
    ]
    list_filter = ['event_type', 'is_closed', 'created_at']
    search_fields = ['name', 'location', 'organizer__email', 'invite_slug']
    readonly_fields = ['invite_slug', 'closed_at', 'created_at', 'updated_at']
    inlines = [ParticipantInline]
    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    fieldsets = (
        ('Basic Information', {
            'fields': ('name', 'description', 'location', 'event_date', 'organizer')
        }),
        ('Racha', {
            'fields': ('event_type', 'invite_slug', 'is_closed', 'closed_at')
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def participant_count(self, obj):
        """Show number of active participants."""
        return obj.participants.filter(is_active=True).count()
    participant_count.short_description = 'Participants'
