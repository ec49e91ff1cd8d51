"""
Participant management service.

Handles who takes part in an event's racha: adding people (with or
without an account), joining through the event invite link, and linking
an account-less participant to a user.

Adding and joining lock the event row first so they are serialized
with expense recording and removals of the same event.
"""

import logging
from typing import Optional
from uuid import UUID

from django.db import transaction, IntegrityError
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.events.models import Event
from apps.events.services import (
    get_event_for_update,
    EventNotFoundError,
    NotPostpaidEventError,
)
from apps.racha.models import Participant

from .exceptions import (
    DuplicateParticipantError,
    InviteAlreadyClaimedError,
    ParticipantNotFoundError,
)
from .participant_removal import remove_participant

logger = logging.getLogger(__name__)


def _reactivate(participant: Participant) -> Participant:
    participant.is_active = True
    participant.save(update_fields=['is_active'])
    logger.info(
        "Participant %s reactivated in event %s", participant.id, participant.event_id
    )
    return participant


@transaction.atomic
def add_participant(
    *,
    event_id: UUID,
    name: Optional[str] = None,
    user: Optional[User] = None
) -> Participant:
    """
    Add a participant to an event's racha.

    If the user was a participant before and was deactivated, the old
    participant is reactivated instead of creating a new one, so their
    history stays attached to the same row.

    Args:
        event_id: UUID of the post-paid event
        name: Display name (defaults to the user's display name)
        user: Optional account to link

    Returns:
        The created or reactivated Participant

    Raises:
        EventNotFoundError: If event doesn't exist
        NotPostpaidEventError: If the event has no racha
        DuplicateParticipantError: If user is already an active participant
        ValueError: If neither name nor user is given
    """
    event = get_event_for_update(event_id=event_id)

    if user is not None:
        existing = (
            Participant.objects
            .filter(event=event, user=user)
            .first()
        )
        if existing is not None:
            if existing.is_active:
                raise DuplicateParticipantError(
                    f"{user.email} is already a participant of {event.name}"
                )
            return _reactivate(existing)

    display_name = (name or '').strip()
    if not display_name and user is not None:
        display_name = user.get_display_name()
    if not display_name:
        raise ValueError("A participant needs a name or a linked user")

    try:
        participant = Participant.objects.create(
            event=event,
            name=display_name,
            user=user,
        )
    except IntegrityError:
        # Unique (event, user) constraint
        raise DuplicateParticipantError("User is already a participant of this event")

    logger.info("Participant %s added to event %s", participant.id, event.id)
    return participant


def list_active_participants(*, event_id: UUID) -> QuerySet[Participant]:
    """
    Active participants of an event in creation order.

    Raises:
        EventNotFoundError: If event doesn't exist
    """
    if not Event.objects.filter(id=event_id).exists():
        raise EventNotFoundError(f"Event with ID {event_id} not found")

    return (
        Participant.objects
        .filter(event_id=event_id, is_active=True)
        .select_related('user')
        .order_by('created_at', 'id')
    )


def get_participant(*, event_id: UUID, participant_id: UUID) -> Participant:
    """
    Get a participant that belongs to the given event.

    Raises:
        ParticipantNotFoundError: If absent or from another event
    """
    try:
        return (
            Participant.objects
            .select_related('user')
            .get(id=participant_id, event_id=event_id)
        )
    except Participant.DoesNotExist:
        raise ParticipantNotFoundError(
            f"Participant {participant_id} not found in event {event_id}"
        )


@transaction.atomic
def join_event_by_invite(*, invite_slug: str, user: User) -> Participant:
    """
    Join the racha of a post-paid event through its invite link.

    Joining again while active returns the existing participant.

    Raises:
        EventNotFoundError: If no event has this invite slug
        NotPostpaidEventError: If the event has no racha
    """
    try:
        event = Event.objects.select_for_update().get(invite_slug=invite_slug)
    except Event.DoesNotExist:
        raise EventNotFoundError("Invalid invite link")

    if not event.is_postpaid:
        raise NotPostpaidEventError("This event has no racha to join")

    existing = Participant.objects.filter(event=event, user=user).first()
    if existing is not None:
        if existing.is_active:
            return existing
        return _reactivate(existing)

    participant = Participant.objects.create(
        event=event,
        name=user.get_display_name(),
        user=user,
    )
    logger.info("User %s joined event %s as %s", user.id, event.id, participant.id)
    return participant


@transaction.atomic
def claim_participant(*, participant_id: UUID, user: User) -> Participant:
    """
    Link an account-less participant to the logged-in user.

    Claiming a participant already linked to the same user is a no-op.

    Raises:
        ParticipantNotFoundError: If participant doesn't exist
        InviteAlreadyClaimedError: If linked to a different user
        DuplicateParticipantError: If user already holds another
            participant in the same event
    """
    try:
        participant = (
            Participant.objects
            .select_for_update()
            .get(id=participant_id)
        )
    except Participant.DoesNotExist:
        raise ParticipantNotFoundError(f"Participant {participant_id} not found")

    if participant.user_id is not None:
        if participant.user_id == user.id:
            return participant
        raise InviteAlreadyClaimedError("This invite was already claimed by another user")

    if (
        Participant.objects
        .filter(event_id=participant.event_id, user=user)
        .exclude(id=participant.id)
        .exists()
    ):
        raise DuplicateParticipantError("You already take part in this racha")

    participant.user = user
    try:
        participant.save(update_fields=['user'])
    except IntegrityError:
        raise DuplicateParticipantError("You already take part in this racha")

    logger.info("Participant %s claimed by user %s", participant.id, user.id)
    return participant


def deactivate_or_remove(*, event_id: UUID, participant_id: UUID) -> dict:
    """Remove a participant from the racha; see participant_removal."""
    return remove_participant(event_id=event_id, participant_id=participant_id)
