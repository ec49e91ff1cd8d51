"""
Payment reconciliation service.

Payments can only be recorded once the racha is closed. Provider
notifications move a payment out of PENDING; a PAID outcome is credited
at most once, guarded by a unique idempotency key, so replayed
notifications never double count.
"""

import logging
from decimal import Decimal
from typing import Dict, Optional, Tuple
from uuid import UUID

from django.db import transaction, IntegrityError
from django.db.models import Sum

from apps.events.services import get_event_for_update, is_settlement_final
from apps.racha.models import (
    Participant,
    Payment,
    PaymentCredit,
    PaymentProvider,
    PaymentStatus,
)

from .exceptions import (
    InvalidAmountError,
    InvalidPaymentTransitionError,
    NotSettlementFinalError,
    ParticipantInactiveError,
    ParticipantNotFoundError,
    PaymentNotFoundError,
)
from .splitting import to_cents

logger = logging.getLogger(__name__)


@transaction.atomic
def record_payment(
    *,
    event_id: UUID,
    participant_id: UUID,
    amount: Decimal,
    provider: str = PaymentProvider.PIX,
    provider_payment_id: Optional[str] = None,
    provider_payload: Optional[dict] = None
) -> Payment:
    """
    Record a PENDING payment for a participant of a closed racha.

    Raises:
        EventNotFoundError: If event doesn't exist
        NotSettlementFinalError: If the racha is not closed yet
        ParticipantNotFoundError: If participant is not in the event
        ParticipantInactiveError: If participant left the racha
        InvalidAmountError: If amount is not positive
    """
    amount = Decimal(amount)
    if amount <= 0:
        raise InvalidAmountError("Payment amount must be positive")
    to_cents(amount)

    event = get_event_for_update(event_id=event_id)
    if not is_settlement_final(event_id=event.id):
        raise NotSettlementFinalError(
            "The racha is still open; close it before recording payments"
        )

    try:
        participant = Participant.objects.get(id=participant_id, event=event)
    except Participant.DoesNotExist:
        raise ParticipantNotFoundError(
            f"Participant {participant_id} not found in event {event_id}"
        )

    if not participant.is_active:
        raise ParticipantInactiveError(f"{participant.name} is no longer in this racha")

    try:
        with transaction.atomic():
            payment = Payment.objects.create(
                event=event,
                participant=participant,
                amount=amount,
                provider=provider,
                provider_payment_id=provider_payment_id or None,
                provider_payload=provider_payload,
            )
    except IntegrityError:
        raise InvalidPaymentTransitionError(
            f"A payment with provider id {provider_payment_id} already exists"
        )

    logger.info(
        "Payment %s of %s recorded for participant %s in event %s",
        payment.id, amount, participant.id, event.id
    )
    return payment


def _find_payment_for_update(reference: str) -> Payment:
    locked = Payment.objects.select_for_update()

    payment = locked.filter(provider_payment_id=reference).first()
    if payment is None:
        try:
            payment = locked.filter(id=UUID(str(reference))).first()
        except ValueError:
            payment = None

    if payment is None:
        raise PaymentNotFoundError(f"No payment matches {reference}")
    return payment


@transaction.atomic
def apply_payment_notification(
    *,
    provider_payment_id: str,
    new_status: str,
    provider_payload: Optional[dict] = None
) -> Tuple[Payment, bool]:
    """
    Apply a provider notification to a payment.

    The payment is located by provider id, falling back to its own id.
    Only PENDING payments change state. Receiving the status the payment
    already has is a duplicate and changes nothing.

    Args:
        provider_payment_id: Provider reference (or our payment id)
        new_status: One of PAID, FAILED, CANCELLED
        provider_payload: Raw notification body to keep for auditing

    Returns:
        Tuple of (payment, applied) where applied is False for duplicates

    Raises:
        PaymentNotFoundError: If no payment matches
        InvalidPaymentTransitionError: If the payment is already in a
            different terminal state, or new_status is not terminal
    """
    if new_status not in (PaymentStatus.PAID, PaymentStatus.FAILED, PaymentStatus.CANCELLED):
        raise InvalidPaymentTransitionError(f"Cannot move a payment to {new_status}")

    payment = _find_payment_for_update(provider_payment_id)

    if payment.status == new_status:
        logger.info(
            "Duplicate %s notification for payment %s ignored", new_status, payment.id
        )
        return payment, False

    if payment.is_terminal:
        raise InvalidPaymentTransitionError(
            f"Payment {payment.id} is already {payment.status}"
        )

    if new_status == PaymentStatus.PAID:
        try:
            with transaction.atomic():
                PaymentCredit.objects.create(
                    payment=payment,
                    idempotency_key=payment.idempotency_key,
                    amount=payment.amount,
                )
        except IntegrityError:
            logger.info("Payment %s was already credited", payment.id)
            return payment, False

    payment.status = new_status
    update_fields = ['status', 'updated_at']
    if provider_payload is not None:
        payment.provider_payload = provider_payload
        update_fields.append('provider_payload')
    payment.save(update_fields=update_fields)

    logger.info("Payment %s moved to %s", payment.id, new_status)
    return payment, True


def summarize_payments(*, event_id: UUID) -> Dict[UUID, Decimal]:
    """Total PAID amount per participant of an event."""
    rows = (
        Payment.objects
        .filter(event_id=event_id, status=PaymentStatus.PAID)
        .values('participant_id')
        .annotate(total=Sum('amount'))
        .order_by()
    )
    return {row['participant_id']: row['total'] for row in rows}
