"""
Event management service.

Handles the slice of event lifecycle the racha depends on: creation
(with organizer enrollment), lookup, and closing the settlement.
"""

import logging
import secrets
from typing import Optional
from uuid import UUID

from django.db import transaction, IntegrityError
from django.db.models import Q, QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.events.models import Event, EventType
from apps.racha.models import Participant

from .exceptions import (
    EventNotFoundError,
    NotPostpaidEventError,
    InsufficientPermissionsError,
)

logger = logging.getLogger(__name__)


def create_event(
    *,
    name: str,
    organizer: User,
    event_type: str = EventType.POSTPAID,
    description: str = '',
    location: str = '',
    event_date=None,
    max_retries: int = 5
) -> Event:
    """
    Create a new event.

    For post-paid events the organizer is enrolled as the first racha
    participant in the same transaction.

    Args:
        name: Event name
        organizer: User organizing the event
        event_type: One of EventType values (default post-paid)
        description: Optional description
        location: Optional location
        event_date: Optional date/time of the event
        max_retries: Maximum attempts to generate a unique invite slug

    Returns:
        Created Event instance

    Raises:
        RuntimeError: If cannot generate unique invite slug after retries
    """
    for attempt in range(max_retries):
        invite_slug = secrets.token_urlsafe(12)[:16]

        try:
            with transaction.atomic():
                event = Event.objects.create(
                    name=name,
                    organizer=organizer,
                    event_type=event_type,
                    description=description,
                    location=location,
                    event_date=event_date,
                    invite_slug=invite_slug
                )

                if event.is_postpaid:
                    Participant.objects.create(
                        event=event,
                        user=organizer,
                        name=organizer.get_display_name(),
                    )

                logger.info(
                    "Event %s (%s) created by %s", event.id, event.event_type, organizer.id
                )
                return event

        except IntegrityError:
            # Invite slug collision (very rare)
            if attempt == max_retries - 1:
                raise RuntimeError(
                    f"Failed to generate unique invite slug after {max_retries} attempts"
                )
            continue

    raise RuntimeError("Unexpected error in event creation")


def get_event_by_id(*, event_id: UUID) -> Event:
    """
    Get an event by ID.

    Raises:
        EventNotFoundError: If event doesn't exist
    """
    try:
        return Event.objects.select_related('organizer').get(id=event_id)
    except Event.DoesNotExist:
        raise EventNotFoundError(f"Event with ID {event_id} not found")


def get_user_events(*, user: User) -> QuerySet[Event]:
    """Events the user organizes or takes part in as an active participant."""
    return (
        Event.objects
        .filter(
            Q(organizer=user) |
            Q(participants__user=user, participants__is_active=True)
        )
        .select_related('organizer')
        .distinct()
    )


@transaction.atomic
def close_settlement(*, event_id: UUID, user: User) -> Event:
    """
    Close the racha of a post-paid event (organizer only).

    After closing, balances are final and payments can be recorded.
    Closing an already closed event returns it unchanged.

    Raises:
        EventNotFoundError: If event doesn't exist
        NotPostpaidEventError: If the event has no racha
        InsufficientPermissionsError: If user is not the organizer
    """
    try:
        event = Event.objects.select_for_update().get(id=event_id)
    except Event.DoesNotExist:
        raise EventNotFoundError(f"Event with ID {event_id} not found")

    if not event.is_postpaid:
        raise NotPostpaidEventError("Only post-paid events have a racha to close")

    if not event.is_organizer(user):
        raise InsufficientPermissionsError("Only the organizer can close the racha")

    if event.is_closed:
        return event

    event.is_closed = True
    event.closed_at = timezone.now()
    event.save(update_fields=['is_closed', 'closed_at', 'updated_at'])

    logger.info("Racha of event %s closed by %s", event.id, user.id)
    return event


def is_settlement_final(*, event_id: UUID) -> bool:
    """
    Return True once the event's racha has been closed.

    Payment recording and payment details check this before acting.
    """
    return Event.objects.filter(id=event_id, is_closed=True).exists()


def get_event_for_update(*, event_id: UUID, require_postpaid: bool = True) -> Event:
    """
    Lock an event row for the rest of the current transaction.

    Per-event racha mutations call this first so they are serialized
    against each other.

    Raises:
        EventNotFoundError: If event doesn't exist
        NotPostpaidEventError: If require_postpaid and the event has no racha
    """
    try:
        event = Event.objects.select_for_update().get(id=event_id)
    except Event.DoesNotExist:
        raise EventNotFoundError(f"Event with ID {event_id} not found")

    if require_postpaid and not event.is_postpaid:
        raise NotPostpaidEventError("Racha operations require a post-paid event")

    return event
