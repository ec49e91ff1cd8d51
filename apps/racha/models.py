from django.db import models
from django.db.models import Q
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class PaymentStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PAID = 'paid', 'Paid'
    FAILED = 'failed', 'Failed'
    CANCELLED = 'cancelled', 'Cancelled'


class PaymentProvider(models.TextChoices):
    PIX = 'pix', 'PIX'
    MANUAL = 'manual', 'Manual'


class Participant(models.Model):
    """Person splitting expenses in one event's racha."""
    
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(
        'events.Event',
        on_delete=models.CASCADE,
        related_name='participants'
    )
    name = models.CharField(max_length=100)
    
    # Optional link to an account (invite may be claimed later)
    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='racha_participations'
    )
    
    # Inactive participants keep their history but leave the settlement
    is_active = models.BooleanField(default=True)
    
    created_at = models.DateTimeField(auto_now_add=True)
    
    class Meta:
        db_table = 'racha_participants'
        constraints = [
            models.UniqueConstraint(
                fields=['event', 'user'],
                condition=Q(user__isnull=False),
                name='uniq_racha_participant_event_user',
            ),
        ]
        indexes = [
            models.Index(fields=['event', 'is_active'], name='racha_part_event_active_idx'),
        ]
        ordering = ['created_at', 'id']
    
    def __str__(self):
        state = '' if self.is_active else ' (inactive)'
        return f"{self.name}{state}"


class Expense(models.Model):
    """One outlay paid by a participant on behalf of a set of participants."""
    
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(
        'events.Event',
        on_delete=models.CASCADE,
        related_name='expenses'
    )
    
    # Payer attribution is kept even after the payer leaves the racha
    payer = models.ForeignKey(
        Participant,
        on_delete=models.RESTRICT,
        related_name='expenses_paid'
    )
    description = models.CharField(max_length=200)
    total_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    
    created_at = models.DateTimeField(auto_now_add=True)
    
    class Meta:
        db_table = 'racha_expenses'
        indexes = [
            models.Index(fields=['event', 'created_at'], name='racha_exp_event_created_idx'),
            models.Index(fields=['payer'], name='racha_exp_payer_idx'),
        ]
        ordering = ['created_at', 'id']
    
    def __str__(self):
        return f"{self.description} - {self.total_amount} (paid by {self.payer.name})"
    
    def shares_total(self):
        """Sum of all share rows; equals total_amount for a consistent expense."""
        from django.db.models import Sum
        
        return self.shares.aggregate(total=Sum('share_amount'))['total'] or Decimal('0.00')


class ExpenseShare(models.Model):
    """A participant's portion of one expense."""
    
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    expense = models.ForeignKey(
        Expense,
        on_delete=models.CASCADE,
        related_name='shares'
    )
    participant = models.ForeignKey(
        Participant,
        on_delete=models.RESTRICT,
        related_name='shares'
    )
    share_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    
    class Meta:
        db_table = 'racha_expense_shares'
        unique_together = [['expense', 'participant']]
        indexes = [
            models.Index(fields=['participant'], name='racha_share_participant_idx'),
        ]
    
    def __str__(self):
        return f"{self.participant.name} owes {self.share_amount}"


class Payment(models.Model):
    """Attempt by a participant to pay down their racha balance."""
    
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(
        'events.Event',
        on_delete=models.CASCADE,
        related_name='racha_payments'
    )
    participant = models.ForeignKey(
        Participant,
        on_delete=models.RESTRICT,
        related_name='payments'
    )
    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING
    )
    
    # Provider bookkeeping
    provider = models.CharField(
        max_length=20,
        choices=PaymentProvider.choices,
        default=PaymentProvider.PIX
    )
    provider_payment_id = models.CharField(
        max_length=100,
        unique=True,
        null=True,
        blank=True
    )
    provider_payload = models.JSONField(blank=True, null=True)
    
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    
    class Meta:
        db_table = 'racha_payments'
        indexes = [
            models.Index(fields=['event', 'status'], name='racha_pay_event_status_idx'),
            models.Index(fields=['participant', 'status'], name='racha_pay_part_status_idx'),
        ]
        ordering = ['created_at']
    
    def __str__(self):
        return f"{self.participant.name} pays {self.amount} ({self.status})"
    
    @property
    def is_terminal(self):
        return self.status != PaymentStatus.PENDING
    
    @property
    def idempotency_key(self):
        """Key guarding the PAID credit: provider id, or our own id."""
        return self.provider_payment_id or str(self.id)


class PaymentCredit(models.Model):
    """Record that a payment's PAID outcome has been credited exactly once."""
    
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    payment = models.OneToOneField(
        Payment,
        on_delete=models.CASCADE,
        related_name='credit'
    )
    idempotency_key = models.CharField(max_length=100, unique=True)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)
    
    class Meta:
        db_table = 'racha_payment_credits'
        ordering = ['created_at']
    
    def __str__(self):
        return f"Credit {self.amount} for {self.idempotency_key}"
