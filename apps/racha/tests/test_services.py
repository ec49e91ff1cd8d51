"""
Service layer unit tests for the racha app.

Tests cover:
- Cent-precise splitting and remainder order
- Settlement balances and zero-sum
- Removal with redistribution and its blocking rule
- Payment recording and idempotent notifications
- Deleting events with a full ledger
"""

import pytest
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import patch
from uuid import uuid4

from django.db.models import RestrictedError

from apps.events.models import Event
from apps.events.services import EventNotFoundError, NotPostpaidEventError, close_settlement
from apps.racha.models import Participant, Expense, ExpenseShare, Payment, PaymentCredit, PaymentStatus
from apps.racha.services import (
    split_equally,
    to_cents,
    add_participant,
    list_active_participants,
    join_event_by_invite,
    claim_participant,
    deactivate_or_remove,
    record_expense,
    list_expenses,
    calculate_balances,
    compute_settlement,
    get_payment_details,
    get_remaining_due,
    remove_participant,
    record_payment,
    apply_payment_notification,
    summarize_payments,
)
from apps.racha.services.exceptions import (
    InvalidAmountError,
    EmptyShareSetError,
    InvalidPayerError,
    InvalidShareholderError,
    DuplicateParticipantError,
    UniqueShareholderConflictError,
    InvalidPaymentTransitionError,
    InviteAlreadyClaimedError,
    ParticipantNotFoundError,
    PaymentNotFoundError,
    NotSettlementFinalError,
    ParticipantInactiveError,
)


def _balances(event):
    return {row.name: row for row in compute_settlement(event_id=event.id)}


def _shares(expense):
    return {
        share.participant.name: share.share_amount
        for share in ExpenseShare.objects.filter(expense=expense).select_related('participant')
    }


# =============================================================================
# Splitting
# =============================================================================

class TestSplitEqually:
    """Tests for the cent-precise split."""

    def test_remainder_goes_to_first_shareholders(self):
        shares = split_equally(Decimal('100.00'), ['a', 'b', 'c'])

        assert shares == [
            ('a', Decimal('33.34')),
            ('b', Decimal('33.33')),
            ('c', Decimal('33.33')),
        ]

    def test_two_cent_remainder(self):
        shares = split_equally(Decimal('0.05'), ['a', 'b', 'c'])

        assert [amount for _, amount in shares] == [
            Decimal('0.02'), Decimal('0.02'), Decimal('0.01')
        ]

    def test_single_cent_among_many(self):
        shares = split_equally(Decimal('0.01'), ['a', 'b', 'c'])

        assert [amount for _, amount in shares] == [
            Decimal('0.01'), Decimal('0.00'), Decimal('0.00')
        ]

    def test_shares_always_sum_to_total(self):
        for total in ['0.01', '1.00', '10.01', '99.99', '1234.57']:
            for count in range(1, 8):
                shares = split_equally(Decimal(total), list(range(count)))
                assert sum(amount for _, amount in shares) == Decimal(total)

    def test_empty_shareholders_rejected(self):
        with pytest.raises(ValueError):
            split_equally(Decimal('10.00'), [])

    def test_sub_cent_amount_rejected(self):
        with pytest.raises(InvalidAmountError):
            to_cents(Decimal('1.005'))

    def test_to_cents(self):
        assert to_cents(Decimal('10')) == 1000
        assert to_cents(Decimal('33.34')) == 3334


# =============================================================================
# Participant Store
# =============================================================================

@pytest.mark.django_db
class TestParticipantManagement:
    """Tests for participant_management.py service functions."""

    def test_organizer_enrolled_on_postpaid_event(self, postpaid_event, organizer):
        participant = Participant.objects.get(event=postpaid_event)

        assert participant.user == organizer
        assert participant.name == 'Ana'
        assert participant.is_active is True

    def test_add_participant_with_user_defaults_name(self, postpaid_event, friend):
        participant = add_participant(event_id=postpaid_event.id, user=friend)

        assert participant.name == 'Bruno'
        assert participant.user == friend

    def test_add_participant_without_account(self, postpaid_event):
        participant = add_participant(event_id=postpaid_event.id, name='  Carla ')

        assert participant.name == 'Carla'
        assert participant.user is None

    def test_add_duplicate_active_user_fails(self, postpaid_event, organizer):
        with pytest.raises(DuplicateParticipantError):
            add_participant(event_id=postpaid_event.id, user=organizer)

    def test_re_adding_inactive_user_reactivates(self, postpaid_event, bruno, friend):
        Participant.objects.filter(id=bruno.id).update(is_active=False)

        participant = add_participant(event_id=postpaid_event.id, user=friend)

        assert participant.id == bruno.id
        assert participant.is_active is True
        assert Participant.objects.filter(event=postpaid_event, user=friend).count() == 1

    def test_add_participant_to_prepaid_event_fails(self, prepaid_event):
        with pytest.raises(NotPostpaidEventError):
            add_participant(event_id=prepaid_event.id, name='Carla')

    def test_add_participant_unknown_event(self):
        with pytest.raises(EventNotFoundError):
            add_participant(event_id=uuid4(), name='Carla')

    def test_list_active_participants_in_creation_order(self, postpaid_event, trio):
        ana, bruno, carla = trio
        Participant.objects.filter(id=bruno.id).update(is_active=False)

        names = [p.name for p in list_active_participants(event_id=postpaid_event.id)]

        assert names == ['Ana', 'Carla']

    def test_join_by_invite_is_idempotent(self, postpaid_event, friend):
        first = join_event_by_invite(invite_slug=postpaid_event.invite_slug, user=friend)
        second = join_event_by_invite(invite_slug=postpaid_event.invite_slug, user=friend)

        assert first.id == second.id
        assert first.name == 'Bruno'

    def test_join_by_invalid_slug(self, friend):
        with pytest.raises(EventNotFoundError):
            join_event_by_invite(invite_slug='nope', user=friend)

    def test_join_prepaid_event_fails(self, prepaid_event, friend):
        with pytest.raises(NotPostpaidEventError):
            join_event_by_invite(invite_slug=prepaid_event.invite_slug, user=friend)

    def test_claim_links_user(self, carla, friend):
        participant = claim_participant(participant_id=carla.id, user=friend)

        assert participant.user == friend
        # Claiming twice is a no-op
        assert claim_participant(participant_id=carla.id, user=friend).id == carla.id

    def test_claim_taken_by_other_user(self, bruno, outsider):
        with pytest.raises(InviteAlreadyClaimedError):
            claim_participant(participant_id=bruno.id, user=outsider)

    def test_claim_when_already_in_event(self, carla, organizer):
        with pytest.raises(DuplicateParticipantError):
            claim_participant(participant_id=carla.id, user=organizer)

    def test_claim_unknown_participant(self, friend):
        with pytest.raises(ParticipantNotFoundError):
            claim_participant(participant_id=uuid4(), user=friend)


# =============================================================================
# Expense Ledger
# =============================================================================

@pytest.mark.django_db
class TestExpenseManagement:
    """Tests for expense_management.py service functions."""

    def test_record_expense_splits_with_remainder(self, postpaid_event, trio):
        ana, bruno, carla = trio

        expense, shares = record_expense(
            event_id=postpaid_event.id,
            payer_id=ana.id,
            total_amount=Decimal('100.00'),
            participant_ids=[ana.id, bruno.id, carla.id],
            description='Meat',
        )

        assert expense.total_amount == Decimal('100.00')
        assert len(shares) == 3
        assert _shares(expense) == {
            'Ana': Decimal('33.34'),
            'Bruno': Decimal('33.33'),
            'Carla': Decimal('33.33'),
        }
        assert expense.shares_total() == Decimal('100.00')

    def test_remainder_follows_creation_order_not_request_order(self, postpaid_event, trio):
        ana, bruno, carla = trio

        expense, _ = record_expense(
            event_id=postpaid_event.id,
            payer_id=carla.id,
            total_amount=Decimal('0.02'),
            participant_ids=[carla.id, bruno.id, ana.id],
        )

        assert _shares(expense) == {
            'Ana': Decimal('0.01'),
            'Bruno': Decimal('0.01'),
            'Carla': Decimal('0.00'),
        }

    def test_duplicate_participant_ids_collapsed(self, postpaid_event, trio):
        ana, bruno, _ = trio

        expense, shares = record_expense(
            event_id=postpaid_event.id,
            payer_id=ana.id,
            total_amount=Decimal('10.00'),
            participant_ids=[bruno.id, bruno.id, ana.id],
        )

        assert len(shares) == 2
        assert _shares(expense) == {'Ana': Decimal('5.00'), 'Bruno': Decimal('5.00')}

    def test_payer_need_not_share(self, postpaid_event, trio):
        ana, bruno, _ = trio

        expense, shares = record_expense(
            event_id=postpaid_event.id,
            payer_id=ana.id,
            total_amount=Decimal('25.00'),
            participant_ids=[bruno.id],
        )

        assert _shares(expense) == {'Bruno': Decimal('25.00')}

    @pytest.mark.parametrize('amount', [Decimal('0'), Decimal('-5.00'), Decimal('1.001')])
    def test_invalid_amount(self, postpaid_event, trio, amount):
        ana, _, _ = trio

        with pytest.raises(InvalidAmountError):
            record_expense(
                event_id=postpaid_event.id,
                payer_id=ana.id,
                total_amount=amount,
                participant_ids=[ana.id],
            )

        assert not Expense.objects.exists()

    def test_empty_share_set(self, postpaid_event, trio):
        ana, _, _ = trio

        with pytest.raises(EmptyShareSetError):
            record_expense(
                event_id=postpaid_event.id,
                payer_id=ana.id,
                total_amount=Decimal('10.00'),
                participant_ids=[],
            )

    def test_inactive_payer_rejected(self, postpaid_event, trio):
        ana, bruno, _ = trio
        Participant.objects.filter(id=bruno.id).update(is_active=False)

        with pytest.raises(InvalidPayerError):
            record_expense(
                event_id=postpaid_event.id,
                payer_id=bruno.id,
                total_amount=Decimal('10.00'),
                participant_ids=[ana.id],
            )

    def test_payer_from_other_event_rejected(self, postpaid_event, trio, friend):
        from apps.events.services import create_event

        other = create_event(name='Other', organizer=friend)
        stranger = Participant.objects.get(event=other)
        ana, _, _ = trio

        with pytest.raises(InvalidPayerError):
            record_expense(
                event_id=postpaid_event.id,
                payer_id=stranger.id,
                total_amount=Decimal('10.00'),
                participant_ids=[ana.id],
            )

    def test_inactive_shareholder_rejected(self, postpaid_event, trio):
        ana, _, carla = trio
        Participant.objects.filter(id=carla.id).update(is_active=False)

        with pytest.raises(InvalidShareholderError) as exc_info:
            record_expense(
                event_id=postpaid_event.id,
                payer_id=ana.id,
                total_amount=Decimal('10.00'),
                participant_ids=[ana.id, carla.id],
            )

        assert exc_info.value.participant_ids == [str(carla.id)]
        assert not Expense.objects.exists()

    def test_list_expenses(self, postpaid_event, shared_dinner):
        expenses = list(list_expenses(event_id=postpaid_event.id))

        assert [e.id for e in expenses] == [shared_dinner.id]
        assert [s.participant.name for s in expenses[0].shares.all()] == ['Ana', 'Bruno', 'Carla']


# =============================================================================
# Settlement Calculator
# =============================================================================

@pytest.mark.django_db
class TestSettlement:
    """Tests for settlement.py service functions."""

    def test_three_way_split(self, postpaid_event, trio):
        ana, bruno, carla = trio
        record_expense(
            event_id=postpaid_event.id,
            payer_id=ana.id,
            total_amount=Decimal('100.00'),
            participant_ids=[ana.id, bruno.id, carla.id],
        )

        balances = _balances(postpaid_event)

        assert balances['Ana'].total_paid == Decimal('100.00')
        assert balances['Ana'].total_share == Decimal('33.34')
        assert balances['Ana'].balance == Decimal('66.66')
        assert balances['Bruno'].balance == Decimal('-33.33')
        assert balances['Carla'].balance == Decimal('-33.33')

    def test_no_expenses_gives_zero_balances(self, postpaid_event, ana, bruno):
        rows = compute_settlement(event_id=postpaid_event.id)

        assert [row.name for row in rows] == ['Ana', 'Bruno']
        for row in rows:
            assert row.total_paid == 0
            assert row.total_share == 0
            assert row.balance == 0

    def test_no_active_participants_gives_empty_list(self, postpaid_event):
        Participant.objects.filter(event=postpaid_event).update(is_active=False)

        assert compute_settlement(event_id=postpaid_event.id) == []

    def test_balances_sum_to_zero(self, postpaid_event, trio):
        ana, bruno, carla = trio
        record_expense(
            event_id=postpaid_event.id, payer_id=ana.id,
            total_amount=Decimal('100.00'), participant_ids=[ana.id, bruno.id, carla.id],
        )
        record_expense(
            event_id=postpaid_event.id, payer_id=bruno.id,
            total_amount=Decimal('17.45'), participant_ids=[bruno.id, carla.id],
        )
        record_expense(
            event_id=postpaid_event.id, payer_id=carla.id,
            total_amount=Decimal('3.01'), participant_ids=[ana.id],
        )
        Participant.objects.filter(id=carla.id).update(is_active=False)

        rows = compute_settlement(event_id=postpaid_event.id)

        assert sum(row.balance for row in rows) == 0

    def test_calculate_balances_skips_inactive_rows(self):
        a, b, gone = uuid4(), uuid4(), uuid4()
        participants = [
            SimpleNamespace(id=a, name='A', user_id=None),
            SimpleNamespace(id=b, name='B', user_id=None),
        ]
        e1, e2 = uuid4(), uuid4()
        expenses = [
            SimpleNamespace(id=e1, payer_id=a),
            SimpleNamespace(id=e2, payer_id=gone),
        ]
        shares = [
            SimpleNamespace(expense_id=e1, participant_id=a, share_amount=Decimal('10.00')),
            SimpleNamespace(expense_id=e1, participant_id=b, share_amount=Decimal('10.00')),
            SimpleNamespace(expense_id=e1, participant_id=gone, share_amount=Decimal('10.00')),
            SimpleNamespace(expense_id=e2, participant_id=b, share_amount=Decimal('50.00')),
        ]

        rows = {row.name: row for row in calculate_balances(participants, expenses, shares)}

        # Payer is only credited the shares that were counted
        assert rows['A'].total_paid == Decimal('20.00')
        assert rows['A'].balance == Decimal('10.00')
        assert rows['B'].total_share == Decimal('10.00')
        assert rows['B'].balance == Decimal('-10.00')

    def test_get_remaining_due(self):
        assert get_remaining_due(Decimal('-60.00'), Decimal('20.00')) == Decimal('40.00')
        assert get_remaining_due(Decimal('-60.00'), Decimal('80.00')) == Decimal('0.00')
        assert get_remaining_due(Decimal('15.00'), Decimal('0.00')) == Decimal('0.00')


@pytest.mark.django_db
class TestPaymentDetails:
    """Tests for get_payment_details."""

    def test_requires_closed_racha(self, postpaid_event, shared_dinner, bruno):
        with pytest.raises(NotSettlementFinalError):
            get_payment_details(event_id=postpaid_event.id, participant_id=bruno.id)

    def test_single_creditor(self, closed_event, bruno):
        details = get_payment_details(event_id=closed_event.id, participant_id=bruno.id)

        assert details.total_due == Decimal('30.00')
        assert details.already_paid == Decimal('0.00')
        assert details.remaining == Decimal('30.00')
        assert len(details.transfers) == 1
        assert details.transfers[0].to_name == 'Ana'
        assert details.transfers[0].amount == Decimal('30.00')
        assert details.transfers[0].to_pix_key == 'ana@pix.example'
        assert details.missing_pix_recipients == []

    def test_amounts_use_configured_currency(self, closed_event, bruno, settings):
        settings.RACHA_CURRENCY = 'USD'

        details = get_payment_details(event_id=closed_event.id, participant_id=bruno.id)

        assert details.currency == 'USD'

    def test_transfers_to_largest_creditor_first(
        self, postpaid_event, organizer, trio, shared_dinner
    ):
        ana, bruno, carla = trio
        record_expense(
            event_id=postpaid_event.id,
            payer_id=carla.id,
            total_amount=Decimal('45.00'),
            participant_ids=[bruno.id],
        )
        close_settlement(event_id=postpaid_event.id, user=organizer)

        details = get_payment_details(event_id=postpaid_event.id, participant_id=bruno.id)

        assert details.total_due == Decimal('75.00')
        assert [(t.to_name, t.amount) for t in details.transfers] == [
            ('Ana', Decimal('60.00')),
            ('Carla', Decimal('15.00')),
        ]
        assert [t.to_name for t in details.missing_pix_recipients] == ['Carla']

    def test_paid_amount_reduces_transfers(self, closed_event, bruno):
        payment = record_payment(
            event_id=closed_event.id, participant_id=bruno.id, amount=Decimal('20.00')
        )
        apply_payment_notification(
            provider_payment_id=str(payment.id), new_status=PaymentStatus.PAID
        )

        details = get_payment_details(event_id=closed_event.id, participant_id=bruno.id)

        assert details.already_paid == Decimal('20.00')
        assert details.remaining == Decimal('10.00')
        assert [t.amount for t in details.transfers] == [Decimal('10.00')]

    def test_creditor_owes_nothing(self, closed_event, ana):
        details = get_payment_details(event_id=closed_event.id, participant_id=ana.id)

        assert details.total_due == Decimal('0.00')
        assert details.remaining == Decimal('0.00')
        assert details.transfers == []


# =============================================================================
# Participant Removal
# =============================================================================

@pytest.mark.django_db
class TestParticipantRemoval:
    """Tests for participant_removal.py service functions."""

    def test_remove_redistributes_shares(self, postpaid_event, trio):
        ana, bruno, carla = trio
        expense, _ = record_expense(
            event_id=postpaid_event.id,
            payer_id=ana.id,
            total_amount=Decimal('100.00'),
            participant_ids=[ana.id, bruno.id, carla.id],
        )

        result = remove_participant(event_id=postpaid_event.id, participant_id=carla.id)

        assert result['rebalanced_expense_ids'] == [expense.id]
        assert result['removed'] is True
        assert not Participant.objects.filter(id=carla.id).exists()
        assert _shares(expense) == {'Ana': Decimal('50.00'), 'Bruno': Decimal('50.00')}
        assert expense.shares_total() == Decimal('100.00')
        assert 'Carla' not in _balances(postpaid_event)

    def test_remove_keeps_totals_with_odd_remainder(self, postpaid_event, trio):
        ana, bruno, carla = trio
        dave = add_participant(event_id=postpaid_event.id, name='Dave')
        expense, _ = record_expense(
            event_id=postpaid_event.id,
            payer_id=ana.id,
            total_amount=Decimal('10.00'),
            participant_ids=[ana.id, bruno.id, carla.id, dave.id],
        )

        remove_participant(event_id=postpaid_event.id, participant_id=bruno.id)

        assert _shares(expense) == {
            'Ana': Decimal('3.34'),
            'Carla': Decimal('3.33'),
            'Dave': Decimal('3.33'),
        }

    def test_sole_shareholder_blocks_removal(self, postpaid_event, trio, shared_dinner):
        ana, _, carla = trio
        solo, _ = record_expense(
            event_id=postpaid_event.id,
            payer_id=ana.id,
            total_amount=Decimal('12.00'),
            participant_ids=[carla.id],
        )

        with pytest.raises(UniqueShareholderConflictError) as exc_info:
            remove_participant(event_id=postpaid_event.id, participant_id=carla.id)

        assert exc_info.value.expense_ids == [solo.id]
        assert _shares(solo) == {'Carla': Decimal('12.00')}
        assert _shares(shared_dinner) == {
            'Ana': Decimal('30.00'), 'Bruno': Decimal('30.00'), 'Carla': Decimal('30.00'),
        }
        assert Participant.objects.get(id=carla.id).is_active is True

    def test_removing_a_payer_deactivates(self, postpaid_event, trio):
        ana, bruno, carla = trio
        record_expense(
            event_id=postpaid_event.id,
            payer_id=bruno.id,
            total_amount=Decimal('20.00'),
            participant_ids=[ana.id, bruno.id],
        )

        result = deactivate_or_remove(event_id=postpaid_event.id, participant_id=bruno.id)

        assert result['removed'] is False
        bruno.refresh_from_db()
        assert bruno.is_active is False
        # The expense keeps its payer but no longer counts
        assert _balances(postpaid_event)['Ana'].balance == 0

    def test_participant_from_other_event_not_found(self, postpaid_event, friend):
        from apps.events.services import create_event

        other = create_event(name='Other', organizer=friend)
        stranger = Participant.objects.get(event=other)

        with pytest.raises(ParticipantNotFoundError):
            remove_participant(event_id=postpaid_event.id, participant_id=stranger.id)


# =============================================================================
# Payment Reconciliation
# =============================================================================

@pytest.mark.django_db
class TestPaymentReconciliation:
    """Tests for payment_reconciliation.py service functions."""

    def test_record_payment_before_close_fails(self, postpaid_event, shared_dinner, bruno):
        with pytest.raises(NotSettlementFinalError):
            record_payment(
                event_id=postpaid_event.id, participant_id=bruno.id, amount=Decimal('30.00')
            )

        assert not Payment.objects.exists()

    def test_record_payment_is_pending(self, closed_event, bruno):
        payment = record_payment(
            event_id=closed_event.id,
            participant_id=bruno.id,
            amount=Decimal('30.00'),
            provider_payment_id='pix-1',
        )

        assert payment.status == PaymentStatus.PENDING
        assert summarize_payments(event_id=closed_event.id) == {}

    def test_record_payment_for_inactive_participant(self, closed_event, bruno):
        Participant.objects.filter(id=bruno.id).update(is_active=False)

        with pytest.raises(ParticipantInactiveError):
            record_payment(
                event_id=closed_event.id, participant_id=bruno.id, amount=Decimal('30.00')
            )

    def test_record_payment_unknown_participant(self, closed_event):
        with pytest.raises(ParticipantNotFoundError):
            record_payment(
                event_id=closed_event.id, participant_id=uuid4(), amount=Decimal('30.00')
            )

    def test_record_payment_invalid_amount(self, closed_event, bruno):
        with pytest.raises(InvalidAmountError):
            record_payment(
                event_id=closed_event.id, participant_id=bruno.id, amount=Decimal('0.00')
            )

    def test_replayed_paid_notification_counts_once(self, closed_event, bruno):
        record_payment(
            event_id=closed_event.id,
            participant_id=bruno.id,
            amount=Decimal('33.33'),
            provider_payment_id='pix-123',
        )

        payment, applied = apply_payment_notification(
            provider_payment_id='pix-123', new_status=PaymentStatus.PAID
        )
        assert applied is True
        assert summarize_payments(event_id=closed_event.id) == {bruno.id: Decimal('33.33')}

        payment, applied = apply_payment_notification(
            provider_payment_id='pix-123', new_status=PaymentStatus.PAID
        )
        assert applied is False
        assert payment.status == PaymentStatus.PAID
        assert summarize_payments(event_id=closed_event.id) == {bruno.id: Decimal('33.33')}
        assert PaymentCredit.objects.filter(payment=payment).count() == 1

    def test_notification_by_payment_id(self, closed_event, bruno):
        payment = record_payment(
            event_id=closed_event.id, participant_id=bruno.id, amount=Decimal('10.00')
        )

        updated, applied = apply_payment_notification(
            provider_payment_id=str(payment.id), new_status=PaymentStatus.PAID
        )

        assert applied is True
        assert updated.id == payment.id
        assert PaymentCredit.objects.get(payment=payment).idempotency_key == str(payment.id)

    def test_failed_payment_does_not_count(self, closed_event, bruno):
        record_payment(
            event_id=closed_event.id,
            participant_id=bruno.id,
            amount=Decimal('30.00'),
            provider_payment_id='pix-9',
        )

        payment, applied = apply_payment_notification(
            provider_payment_id='pix-9', new_status=PaymentStatus.FAILED
        )

        assert applied is True
        assert payment.status == PaymentStatus.FAILED
        assert summarize_payments(event_id=closed_event.id) == {}

    def test_terminal_payment_cannot_change(self, closed_event, bruno):
        record_payment(
            event_id=closed_event.id,
            participant_id=bruno.id,
            amount=Decimal('30.00'),
            provider_payment_id='pix-7',
        )
        apply_payment_notification(provider_payment_id='pix-7', new_status=PaymentStatus.PAID)

        with pytest.raises(InvalidPaymentTransitionError):
            apply_payment_notification(
                provider_payment_id='pix-7', new_status=PaymentStatus.CANCELLED
            )

        assert Payment.objects.get(provider_payment_id='pix-7').status == PaymentStatus.PAID

    def test_pending_is_not_a_notification_status(self, closed_event, bruno):
        record_payment(
            event_id=closed_event.id,
            participant_id=bruno.id,
            amount=Decimal('30.00'),
            provider_payment_id='pix-8',
        )

        with pytest.raises(InvalidPaymentTransitionError):
            apply_payment_notification(
                provider_payment_id='pix-8', new_status=PaymentStatus.PENDING
            )

    def test_unknown_payment(self, closed_event):
        with pytest.raises(PaymentNotFoundError):
            apply_payment_notification(
                provider_payment_id='does-not-exist', new_status=PaymentStatus.PAID
            )

    def test_payment_keeps_participant_on_removal(self, closed_event, trio):
        ana, bruno, carla = trio
        Expense.objects.filter(event=closed_event).delete()
        record_payment(
            event_id=closed_event.id, participant_id=carla.id, amount=Decimal('5.00')
        )

        result = remove_participant(event_id=closed_event.id, participant_id=carla.id)

        assert result['removed'] is False
        assert Participant.objects.get(id=carla.id).is_active is False

    def test_record_payment_asks_settlement_hook(self, closed_event, bruno):
        with patch(
            'apps.racha.services.payment_reconciliation.is_settlement_final',
            return_value=False,
        ) as hook:
            with pytest.raises(NotSettlementFinalError):
                record_payment(
                    event_id=closed_event.id, participant_id=bruno.id, amount=Decimal('30.00')
                )

        hook.assert_called_once_with(event_id=closed_event.id)
        assert not Payment.objects.exists()

    def test_payment_details_ask_settlement_hook(self, closed_event, bruno):
        with patch(
            'apps.racha.services.settlement.is_settlement_final',
            return_value=False,
        ) as hook:
            with pytest.raises(NotSettlementFinalError):
                get_payment_details(event_id=closed_event.id, participant_id=bruno.id)

        hook.assert_called_once_with(event_id=closed_event.id)


# =============================================================================
# Deletion
# =============================================================================

@pytest.mark.django_db
class TestLedgerDeletion:
    """Deleting an event (or its organizer) takes the whole ledger with it."""

    def _fill_ledger(self, event, bruno):
        payment = record_payment(
            event_id=event.id,
            participant_id=bruno.id,
            amount=Decimal('30.00'),
            provider_payment_id='pix-del',
        )
        apply_payment_notification(provider_payment_id='pix-del', new_status=PaymentStatus.PAID)
        return payment

    def test_delete_event_with_ledger(self, closed_event, bruno):
        self._fill_ledger(closed_event, bruno)

        closed_event.delete()

        assert not Event.objects.filter(id=closed_event.id).exists()
        assert not Participant.objects.exists()
        assert not Expense.objects.exists()
        assert not ExpenseShare.objects.exists()
        assert not Payment.objects.exists()
        assert not PaymentCredit.objects.exists()

    def test_delete_organizer_with_ledger(self, closed_event, organizer, bruno):
        self._fill_ledger(closed_event, bruno)

        organizer.delete()

        assert not Event.objects.filter(id=closed_event.id).exists()
        assert not Expense.objects.exists()
        assert not Payment.objects.exists()

    def test_referenced_participant_cannot_be_deleted_alone(self, postpaid_event, ana, shared_dinner):
        with pytest.raises(RestrictedError):
            ana.delete()

        assert Expense.objects.filter(id=shared_dinner.id).exists()
