"""
Permission classes for racha endpoints.

Racha endpoints are nested under an event, so permissions look the
event up from the ``event_id`` URL kwarg. A missing event is let
through; the service layer answers it with a 404.
"""
import secrets

from django.conf import settings
from rest_framework import permissions

from apps.events.models import Event


def _get_event(view):
    event_id = view.kwargs.get('event_id')
    if event_id is None:
        return None
    return Event.objects.filter(id=event_id).first()


class IsEventOrganizer(permissions.BasePermission):
    """
    Permission: User must organize the event.
    """

    message = 'Only the event organizer can manage the racha.'

    def has_permission(self, request, view):
        event = _get_event(view)
        if event is None:
            return True
        return event.is_organizer(request.user)


class IsEventMember(permissions.BasePermission):
    """
    Permission: User organizes the event or is an active participant in it.
    """

    message = 'You do not take part in this racha.'

    def has_permission(self, request, view):
        event = _get_event(view)
        if event is None:
            return True
        if event.is_organizer(request.user):
            return True
        return event.participants.filter(user=request.user, is_active=True).exists()


class IsEventOrganizerForWrites(IsEventOrganizer):
    """
    Permission: Members may read, only the organizer may write.
    """

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return IsEventMember().has_permission(request, view)
        return super().has_permission(request, view)


class HasWebhookToken(permissions.BasePermission):
    """
    Permission: Request carries the shared payment webhook token.
    """

    message = 'Invalid webhook token.'

    def has_permission(self, request, view):
        expected = settings.PAYMENT_WEBHOOK_TOKEN
        provided = request.headers.get('X-Webhook-Token', '')
        if not expected or not provided:
            return False
        return secrets.compare_digest(provided, expected)
