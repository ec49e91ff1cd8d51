from rest_framework import serializers
from .models import Participant, Expense, ExpenseShare, Payment, PaymentStatus, PaymentProvider
from apps.accounts.models import User


# =============================================================================
# Input Serializers
# =============================================================================

class ParticipantCreateSerializer(serializers.Serializer):
    """
    Validate input for adding a participant.

    Fields:
        name (str): Display name; optional when a user is linked
        user (UUID): Optional account to link
    """

    name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    user = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(is_active=True),
        required=False,
        allow_null=True
    )

    def validate(self, attrs):
        if not attrs.get('name', '').strip() and not attrs.get('user'):
            raise serializers.ValidationError({
                'name': 'A name is required when no user is linked'
            })
        return attrs


class ExpenseCreateSerializer(serializers.Serializer):
    """
    Validate input for recording an expense.

    Fields:
        payer_id (UUID): Participant who paid
        total_amount (Decimal): Amount paid, two decimal places
        participant_ids (list[UUID]): Participants sharing the expense
        description (str): What was paid for
    """

    payer_id = serializers.UUIDField()
    total_amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    participant_ids = serializers.ListField(
        child=serializers.UUIDField(),
        allow_empty=True
    )
    description = serializers.CharField(max_length=200)


class PaymentCreateSerializer(serializers.Serializer):
    """Validate input for recording a payment."""

    participant_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    provider = serializers.ChoiceField(
        choices=PaymentProvider.choices,
        default=PaymentProvider.PIX
    )
    provider_payment_id = serializers.CharField(max_length=100, required=False, allow_blank=True)


class PaymentNotificationSerializer(serializers.Serializer):
    """
    Validate a payment provider notification.

    Fields:
        provider_payment_id (str): Provider reference, or our payment id
        status (str): New payment status
        payload (dict): Raw provider data kept for auditing
    """

    provider_payment_id = serializers.CharField(max_length=100)
    status = serializers.ChoiceField(choices=[
        PaymentStatus.PAID,
        PaymentStatus.FAILED,
        PaymentStatus.CANCELLED,
    ])
    payload = serializers.JSONField(required=False)


class PaymentDetailsQuerySerializer(serializers.Serializer):
    participant = serializers.UUIDField()


# =============================================================================
# Output Serializers
# =============================================================================

class ParticipantSerializer(serializers.ModelSerializer):
    """Serializer for racha participants."""

    user_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = Participant
        fields = ['id', 'event', 'name', 'user_id', 'is_active', 'created_at']
        read_only_fields = fields


class ExpenseShareSerializer(serializers.ModelSerializer):

    participant_id = serializers.UUIDField(read_only=True)
    participant_name = serializers.CharField(source='participant.name', read_only=True)

    class Meta:
        model = ExpenseShare
        fields = ['participant_id', 'participant_name', 'share_amount']
        read_only_fields = fields


class ExpenseSerializer(serializers.ModelSerializer):
    """Serializer for expenses with their shares."""

    payer_id = serializers.UUIDField(read_only=True)
    payer_name = serializers.CharField(source='payer.name', read_only=True)
    shares = ExpenseShareSerializer(many=True, read_only=True)

    class Meta:
        model = Expense
        fields = [
            'id',
            'event',
            'description',
            'total_amount',
            'payer_id',
            'payer_name',
            'shares',
            'created_at',
        ]
        read_only_fields = fields


class ParticipantBalanceSerializer(serializers.Serializer):
    """One row of the settlement."""

    participant_id = serializers.UUIDField()
    name = serializers.CharField()
    user_id = serializers.UUIDField(allow_null=True)
    total_paid = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_share = serializers.DecimalField(max_digits=12, decimal_places=2)
    balance = serializers.DecimalField(max_digits=12, decimal_places=2)


class RemovalResultSerializer(serializers.Serializer):
    participant_id = serializers.UUIDField()
    rebalanced_expense_ids = serializers.ListField(child=serializers.UUIDField())
    removed = serializers.BooleanField()


class PaymentSerializer(serializers.ModelSerializer):
    """Serializer for payments."""

    participant_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Payment
        fields = [
            'id',
            'event',
            'participant_id',
            'amount',
            'status',
            'provider',
            'provider_payment_id',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class PaymentSummaryRowSerializer(serializers.Serializer):
    participant_id = serializers.UUIDField()
    paid_total = serializers.DecimalField(max_digits=12, decimal_places=2)


class TransferLineSerializer(serializers.Serializer):
    to_participant_id = serializers.UUIDField()
    to_name = serializers.CharField()
    to_user_id = serializers.UUIDField(allow_null=True)
    to_pix_key = serializers.CharField(allow_null=True)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    description = serializers.CharField()


class MissingPixRecipientSerializer(serializers.Serializer):
    to_participant_id = serializers.UUIDField()
    to_name = serializers.CharField()


class PaymentDetailsSerializer(serializers.Serializer):
    """What a participant owes and the transfers that settle it."""

    event_id = serializers.UUIDField()
    event_name = serializers.CharField()
    participant_id = serializers.UUIDField()
    participant_name = serializers.CharField()
    total_due = serializers.DecimalField(max_digits=12, decimal_places=2)
    already_paid = serializers.DecimalField(max_digits=12, decimal_places=2)
    remaining = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField()
    transfers = TransferLineSerializer(many=True)
    missing_pix_recipients = MissingPixRecipientSerializer(many=True)
