"""
Settlement calculator.

Balances are derived from the ledger on every read; nothing is stored.
Only active participants take part: expenses paid by someone who left
are skipped, and only shares owed by active participants count. The
payer is credited with exactly the shares that were counted, so the
balances of active participants always sum to zero.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from django.conf import settings
from django.db.models import Sum

from apps.events.services import get_event_by_id, is_settlement_final, NotPostpaidEventError
from apps.racha.models import Participant, Expense, ExpenseShare, Payment, PaymentStatus

from .exceptions import NotSettlementFinalError, ParticipantNotFoundError
from .splitting import to_cents, from_cents

ZERO = Decimal('0.00')


@dataclass
class ParticipantBalance:
    participant_id: UUID
    name: str
    user_id: Optional[UUID]
    total_paid: Decimal = ZERO
    total_share: Decimal = ZERO

    @property
    def balance(self) -> Decimal:
        """Positive: owed money. Negative: owes money."""
        return self.total_paid - self.total_share


@dataclass
class TransferLine:
    to_participant_id: UUID
    to_name: str
    to_user_id: Optional[UUID]
    to_pix_key: Optional[str]
    amount: Decimal
    description: str


@dataclass
class PaymentDetails:
    event_id: UUID
    event_name: str
    participant_id: UUID
    participant_name: str
    total_due: Decimal
    already_paid: Decimal
    remaining: Decimal
    currency: str = 'BRL'
    transfers: List[TransferLine] = field(default_factory=list)

    @property
    def missing_pix_recipients(self) -> List[TransferLine]:
        return [line for line in self.transfers if not line.to_pix_key]


def calculate_balances(
    participants: Iterable[Participant],
    expenses: Iterable[Expense],
    shares: Iterable[ExpenseShare],
) -> List[ParticipantBalance]:
    """
    Compute balances from loaded rows.

    Args:
        participants: Active participants, in the order results should keep
        expenses: All expenses of the event
        shares: Share rows of those expenses

    Returns:
        One ParticipantBalance per active participant
    """
    balances: Dict[UUID, ParticipantBalance] = {}
    for p in participants:
        balances[p.id] = ParticipantBalance(
            participant_id=p.id, name=p.name, user_id=p.user_id
        )

    shares_by_expense: Dict[UUID, List[ExpenseShare]] = {}
    for share in shares:
        shares_by_expense.setdefault(share.expense_id, []).append(share)

    for expense in expenses:
        payer = balances.get(expense.payer_id)
        if payer is None:
            continue

        for share in shares_by_expense.get(expense.id, []):
            ower = balances.get(share.participant_id)
            if ower is None:
                continue
            ower.total_share += share.share_amount
            payer.total_paid += share.share_amount

    return list(balances.values())


def compute_settlement(*, event_id: UUID) -> List[ParticipantBalance]:
    """
    Current balance of every active participant, in creation order.

    Raises:
        EventNotFoundError: If event doesn't exist
    """
    event = get_event_by_id(event_id=event_id)

    participants = list(
        Participant.objects
        .filter(event=event, is_active=True)
        .order_by('created_at', 'id')
    )
    if not participants:
        return []

    expenses = list(Expense.objects.filter(event=event).only('id', 'payer_id'))
    shares = ExpenseShare.objects.filter(
        expense__event=event,
        participant__in=participants,
    ).only('expense_id', 'participant_id', 'share_amount')

    return calculate_balances(participants, expenses, shares)


def get_paid_total(*, event_id: UUID, participant_id: UUID) -> Decimal:
    """Sum of PAID payments of one participant."""
    total = (
        Payment.objects
        .filter(event_id=event_id, participant_id=participant_id, status=PaymentStatus.PAID)
        .aggregate(total=Sum('amount'))['total']
    )
    return total or ZERO


def get_remaining_due(balance: Decimal, paid: Decimal) -> Decimal:
    """
    What a participant still has to pay.

    >>> get_remaining_due(Decimal('-60.00'), Decimal('20.00'))
    Decimal('40.00')
    """
    debt = -balance if balance < 0 else ZERO
    return max(ZERO, debt - paid)


def get_payment_details(*, event_id: UUID, participant_id: UUID) -> PaymentDetails:
    """
    How much a participant owes and to whom they should transfer it.

    The remaining amount is allocated in cents to creditors, largest
    positive balance first, until it is exhausted.

    Raises:
        EventNotFoundError: If event doesn't exist
        NotPostpaidEventError: If the event has no racha
        NotSettlementFinalError: If the racha is still open
        ParticipantNotFoundError: If participant is not active in the event
    """
    event = get_event_by_id(event_id=event_id)

    if not event.is_postpaid:
        raise NotPostpaidEventError("Payment details only exist for post-paid events")
    if not is_settlement_final(event_id=event.id):
        raise NotSettlementFinalError(
            "The racha is still open; payments are available after it is closed"
        )

    balances = compute_settlement(event_id=event_id)
    by_id = {str(b.participant_id): b for b in balances}
    payer = by_id.get(str(participant_id))
    if payer is None:
        raise ParticipantNotFoundError("Participant not found in this racha")

    total_due = -payer.balance if payer.balance < 0 else ZERO
    already_paid = get_paid_total(event_id=event_id, participant_id=payer.participant_id)
    remaining = get_remaining_due(payer.balance, already_paid)

    creditors = sorted(
        (b for b in balances if b.balance > 0),
        key=lambda b: b.balance,
        reverse=True,
    )

    pix_by_participant = dict(
        Participant.objects
        .filter(id__in=[c.participant_id for c in creditors])
        .values_list('id', 'user__pix_key')
    )

    details = PaymentDetails(
        event_id=event.id,
        event_name=event.name,
        participant_id=payer.participant_id,
        participant_name=payer.name,
        total_due=total_due,
        already_paid=already_paid,
        remaining=remaining,
        currency=settings.RACHA_CURRENCY,
    )

    remaining_cents = to_cents(remaining)
    for creditor in creditors:
        if remaining_cents <= 0:
            break
        pay_cents = min(remaining_cents, to_cents(creditor.balance))
        remaining_cents -= pay_cents

        details.transfers.append(TransferLine(
            to_participant_id=creditor.participant_id,
            to_name=creditor.name,
            to_user_id=creditor.user_id,
            to_pix_key=pix_by_participant.get(creditor.participant_id) or None,
            amount=from_cents(pay_cents),
            description=f"Racha settlement - {event.name}",
        ))

    return details
