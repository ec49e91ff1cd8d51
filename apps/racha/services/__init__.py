"""
Racha app services layer.

Participants, expense ledger, settlement, removal with redistribution
and payment reconciliation for post-paid events. Every per-event
mutation locks the event row inside its transaction.
"""

from .exceptions import (
    RachaServiceError,
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

from .splitting import (
    split_equally,
    to_cents,
    from_cents,
)

from .participant_management import (
    add_participant,
    list_active_participants,
    get_participant,
    join_event_by_invite,
    claim_participant,
    deactivate_or_remove,
)

from .expense_management import (
    record_expense,
    list_expenses,
)

from .settlement import (
    ParticipantBalance,
    PaymentDetails,
    TransferLine,
    calculate_balances,
    compute_settlement,
    get_payment_details,
    get_paid_total,
    get_remaining_due,
)

from .participant_removal import (
    remove_participant,
)

from .payment_reconciliation import (
    record_payment,
    apply_payment_notification,
    summarize_payments,
)


__all__ = [
    # Exceptions
    'RachaServiceError',
    'InvalidAmountError',
    'EmptyShareSetError',
    'InvalidPayerError',
    'InvalidShareholderError',
    'DuplicateParticipantError',
    'UniqueShareholderConflictError',
    'InvalidPaymentTransitionError',
    'InviteAlreadyClaimedError',
    'ParticipantNotFoundError',
    'PaymentNotFoundError',
    'NotSettlementFinalError',
    'ParticipantInactiveError',

    # Splitting
    'split_equally',
    'to_cents',
    'from_cents',

    # Participant Management
    'add_participant',
    'list_active_participants',
    'get_participant',
    'join_event_by_invite',
    'claim_participant',
    'deactivate_or_remove',

    # Expense Ledger
    'record_expense',
    'list_expenses',

    # Settlement
    'ParticipantBalance',
    'PaymentDetails',
    'TransferLine',
    'calculate_balances',
    'compute_settlement',
    'get_payment_details',
    'get_paid_total',
    'get_remaining_due',

    # Removal
    'remove_participant',

    # Payments
    'record_payment',
    'apply_payment_notification',
    'summarize_payments',
]
