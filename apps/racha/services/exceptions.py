"""
Domain-specific exceptions for the racha app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.

Taxonomy:
    Validation: InvalidAmountError, EmptyShareSetError, InvalidPayerError,
        InvalidShareholderError
    Conflict: DuplicateParticipantError, UniqueShareholderConflictError,
        InvalidPaymentTransitionError, InviteAlreadyClaimedError
    Not found: ParticipantNotFoundError, PaymentNotFoundError
    Guard: NotSettlementFinalError, ParticipantInactiveError
"""


class RachaServiceError(Exception):
    """Base exception for all racha service errors."""
    pass


# Validation ------------------------------------------------------------------

class InvalidAmountError(RachaServiceError):
    """Raised when an amount is not positive or has sub-cent precision."""
    pass


class EmptyShareSetError(RachaServiceError):
    """Raised when an expense is recorded without anyone to split it."""
    pass


class InvalidPayerError(RachaServiceError):
    """Raised when the payer is not an active participant of the event."""
    pass


class InvalidShareholderError(RachaServiceError):
    """Raised when a shareholder is not an active participant of the event."""

    def __init__(self, message, participant_ids=None):
        super().__init__(message)
        self.participant_ids = list(participant_ids or [])


# Conflict --------------------------------------------------------------------

class DuplicateParticipantError(RachaServiceError):
    """Raised when a user is already an active participant of the event."""
    pass


class UniqueShareholderConflictError(RachaServiceError):
    """Raised when removing a participant would leave an expense with no owers."""

    def __init__(self, message, expense_ids=None):
        super().__init__(message)
        self.expense_ids = list(expense_ids or [])


class InvalidPaymentTransitionError(RachaServiceError):
    """Raised when a payment in a terminal state is asked to change state."""
    pass


class InviteAlreadyClaimedError(RachaServiceError):
    """Raised when a participant invite is already linked to another account."""
    pass


# Not found -------------------------------------------------------------------

class ParticipantNotFoundError(RachaServiceError):
    """Raised when a participant does not exist in the given event."""
    pass


class PaymentNotFoundError(RachaServiceError):
    """Raised when a payment notification matches no payment."""
    pass


# Guards ----------------------------------------------------------------------

class NotSettlementFinalError(RachaServiceError):
    """Raised when a payment is recorded before the racha is closed."""
    pass


class ParticipantInactiveError(RachaServiceError):
    """Raised when a payment is recorded for a participant who left the racha."""
    pass
