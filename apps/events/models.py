# ==========================================
# apps/events/models.py
# ==========================================

from django.db import models
import uuid
import secrets


def generate_invite_slug():
    return secrets.token_urlsafe(12)[:16]


class EventType(models.TextChoices):
    FREE = 'free', 'Free'
    PREPAID = 'prepaid', 'Pre-paid (tickets)'
    POSTPAID = 'postpaid', 'Post-paid (racha)'


class Event(models.Model):
    """Event organized by a user; post-paid events carry a racha."""
    
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    location = models.CharField(max_length=200, blank=True)
    event_date = models.DateTimeField(null=True, blank=True)
    event_type = models.CharField(
        max_length=20,
        choices=EventType.choices,
        default=EventType.POSTPAID
    )
    organizer = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='organized_events'
    )
    invite_slug = models.CharField(max_length=16, unique=True, db_index=True, editable=False)
    
    # Settlement finality: payments are only accepted once closed
    is_closed = models.BooleanField(default=False)
    closed_at = models.DateTimeField(null=True, blank=True)
    
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    
    class Meta:
        db_table = 'events'
        indexes = [
            models.Index(fields=['organizer', 'created_at'], name='events_organizer_idx'),
            models.Index(fields=['event_type', 'is_closed'], name='events_type_closed_idx'),
        ]
        ordering = ['-created_at']
    
    def __str__(self):
        return self.name
    
    def save(self, *args, **kwargs):
        if not self.invite_slug:
            self.invite_slug = generate_invite_slug()
        super().save(*args, **kwargs)
    
    @property
    def is_postpaid(self):
        return self.event_type == EventType.POSTPAID
    
    def is_organizer(self, user):
        return self.organizer_id == getattr(user, 'id', None)
