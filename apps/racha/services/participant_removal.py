"""
Participant removal with share redistribution.

Removing a participant moves their shares onto the remaining
shareholders of each affected expense, re-splitting the original total
with the same cent-precise rule used when the expense was recorded.
An expense where the participant is the only shareholder blocks the
removal, since its amount would have nobody left to owe it.
"""

import logging
from uuid import UUID

from django.db import transaction

from apps.events.services import get_event_for_update
from apps.racha.models import Participant, Expense, ExpenseShare

from .exceptions import ParticipantNotFoundError, UniqueShareholderConflictError
from .expense_management import build_shares

logger = logging.getLogger(__name__)


@transaction.atomic
def remove_participant(*, event_id: UUID, participant_id: UUID) -> dict:
    """
    Remove a participant from an event's racha.

    The participant row is deleted when nothing references it any more;
    when they paid an expense or have payments it is deactivated instead,
    so payer attribution and payment history stay resolvable.

    Args:
        event_id: UUID of the post-paid event
        participant_id: UUID of the participant to remove

    Returns:
        Dict with ``participant_id``, ``rebalanced_expense_ids`` and
        ``removed`` (True for a hard delete)

    Raises:
        EventNotFoundError: If event doesn't exist
        ParticipantNotFoundError: If participant is not in the event
        UniqueShareholderConflictError: If the participant is the only
            shareholder of some expense; nothing is changed
    """
    event = get_event_for_update(event_id=event_id)

    try:
        participant = Participant.objects.get(id=participant_id, event=event)
    except Participant.DoesNotExist:
        raise ParticipantNotFoundError(
            f"Participant {participant_id} not found in event {event_id}"
        )

    affected = list(
        Expense.objects
        .filter(event=event, shares__participant=participant)
        .prefetch_related('shares__participant')
        .order_by('created_at', 'id')
    )

    blocking = [
        expense.id for expense in affected
        if all(s.participant_id == participant.id for s in expense.shares.all())
    ]
    if blocking:
        logger.warning(
            "Refused to remove participant %s from event %s: sole shareholder of %s",
            participant.id, event.id, [str(e) for e in blocking]
        )
        raise UniqueShareholderConflictError(
            "Participant is the only shareholder of some expenses; "
            "delete or edit them first",
            expense_ids=blocking,
        )

    for expense in affected:
        remaining = [
            s.participant for s in expense.shares.all()
            if s.participant_id != participant.id
        ]
        ExpenseShare.objects.filter(expense=expense).delete()
        ExpenseShare.objects.bulk_create(build_shares(expense, remaining))

    still_referenced = (
        Expense.objects.filter(payer=participant).exists()
        or participant.payments.exists()
    )
    if still_referenced:
        participant.is_active = False
        participant.save(update_fields=['is_active'])
    else:
        participant.delete()

    rebalanced = [expense.id for expense in affected]
    logger.info(
        "Participant %s %s from event %s, %d expenses rebalanced",
        participant_id,
        'deactivated' if still_referenced else 'deleted',
        event.id,
        len(rebalanced),
    )
    return {
        'participant_id': participant_id,
        'rebalanced_expense_ids': rebalanced,
        'removed': not still_referenced,
    }
