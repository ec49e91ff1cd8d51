"""
Expense ledger service.

Records expenses and splits each one equally, to the cent, among the
participants who share it.
"""

import logging
from decimal import Decimal
from typing import Iterable, List, Tuple
from uuid import UUID

from django.db import transaction
from django.db.models import Prefetch, QuerySet

from apps.events.models import Event
from apps.events.services import get_event_for_update, EventNotFoundError
from apps.racha.models import Participant, Expense, ExpenseShare

from .exceptions import (
    InvalidAmountError,
    EmptyShareSetError,
    InvalidPayerError,
    InvalidShareholderError,
)
from .splitting import split_equally, to_cents

logger = logging.getLogger(__name__)


def build_shares(expense: Expense, shareholders: List[Participant]) -> List[ExpenseShare]:
    """Unsaved share rows splitting expense.total_amount among shareholders."""
    ordered = sorted(shareholders, key=lambda p: (p.created_at, str(p.id)))
    return [
        ExpenseShare(expense=expense, participant=participant, share_amount=amount)
        for participant, amount in split_equally(expense.total_amount, ordered)
    ]


@transaction.atomic
def record_expense(
    *,
    event_id: UUID,
    payer_id: UUID,
    total_amount: Decimal,
    participant_ids: Iterable[UUID],
    description: str = ''
) -> Tuple[Expense, List[ExpenseShare]]:
    """
    Record an expense and split it among participants.

    The remainder cents go to the earliest-added shareholders, so
    ``sum(shares) == total_amount`` always holds.

    Args:
        event_id: UUID of the post-paid event
        payer_id: Participant who paid
        total_amount: Amount paid (positive, whole cents)
        participant_ids: Participants sharing the expense (duplicates ignored)
        description: What was paid for

    Returns:
        Tuple of (Expense, list of ExpenseShare)

    Raises:
        EventNotFoundError: If event doesn't exist
        InvalidAmountError: If total_amount is not positive or has sub-cent precision
        EmptyShareSetError: If no shareholders are given
        InvalidPayerError: If payer is not an active participant of the event
        InvalidShareholderError: If any shareholder is not an active participant
    """
    total_amount = Decimal(total_amount)
    if total_amount <= 0:
        raise InvalidAmountError("Expense amount must be positive")
    to_cents(total_amount)

    # Preserve caller order while collapsing duplicates
    unique_ids = list(dict.fromkeys(str(pid) for pid in participant_ids))
    if not unique_ids:
        raise EmptyShareSetError("An expense needs at least one participant")

    event = get_event_for_update(event_id=event_id)

    active = {
        str(p.id): p
        for p in Participant.objects.filter(event=event, is_active=True)
    }

    payer = active.get(str(payer_id))
    if payer is None:
        raise InvalidPayerError("Payer must be an active participant of this event")

    unknown = [pid for pid in unique_ids if pid not in active]
    if unknown:
        raise InvalidShareholderError(
            "Every shareholder must be an active participant of this event",
            participant_ids=unknown,
        )

    expense = Expense.objects.create(
        event=event,
        payer=payer,
        description=description,
        total_amount=total_amount,
    )
    shares = ExpenseShare.objects.bulk_create(
        build_shares(expense, [active[pid] for pid in unique_ids])
    )

    logger.info(
        "Expense %s of %s recorded in event %s, split among %d",
        expense.id, total_amount, event.id, len(shares)
    )
    return expense, shares


def list_expenses(*, event_id: UUID) -> QuerySet[Expense]:
    """
    Expenses of an event in creation order, with payer and shares loaded.

    Raises:
        EventNotFoundError: If event doesn't exist
    """
    if not Event.objects.filter(id=event_id).exists():
        raise EventNotFoundError(f"Event with ID {event_id} not found")

    return (
        Expense.objects
        .filter(event_id=event_id)
        .select_related('payer')
        .prefetch_related(
            Prefetch(
                'shares',
                queryset=ExpenseShare.objects.select_related('participant').order_by(
                    'participant__created_at', 'participant__id'
                ),
            )
        )
        .order_by('created_at', 'id')
    )
