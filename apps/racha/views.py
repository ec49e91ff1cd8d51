import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from .serializers import (
    ParticipantCreateSerializer,
    ExpenseCreateSerializer,
    PaymentCreateSerializer,
    PaymentNotificationSerializer,
    PaymentDetailsQuerySerializer,
    ParticipantSerializer,
    ExpenseSerializer,
    ParticipantBalanceSerializer,
    RemovalResultSerializer,
    PaymentSerializer,
    PaymentSummaryRowSerializer,
    PaymentDetailsSerializer,
)
from .permissions import (
    IsEventOrganizer,
    IsEventMember,
    IsEventOrganizerForWrites,
    HasWebhookToken,
)

from apps.events.services import (
    get_event_by_id,
    EventsServiceError,
    EventNotFoundError,
    NotPostpaidEventError,
)
from apps.racha.services import (
    add_participant,
    list_active_participants,
    get_participant,
    join_event_by_invite,
    claim_participant,
    deactivate_or_remove,
    record_expense,
    list_expenses,
    compute_settlement,
    get_payment_details,
    record_payment,
    apply_payment_notification,
    summarize_payments,
    # Exceptions
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

logger = logging.getLogger(__name__)


# Domain error -> HTTP status
ERROR_STATUS = (
    ((EventNotFoundError, ParticipantNotFoundError, PaymentNotFoundError),
     status.HTTP_404_NOT_FOUND),
    ((InvalidAmountError, EmptyShareSetError, InvalidPayerError,
      InvalidShareholderError, NotPostpaidEventError, NotSettlementFinalError,
      ParticipantInactiveError),
     status.HTTP_400_BAD_REQUEST),
    ((DuplicateParticipantError, UniqueShareholderConflictError,
      InvalidPaymentTransitionError, InviteAlreadyClaimedError),
     status.HTTP_409_CONFLICT),
)


def error_response(exc):
    """Convert a domain exception into an error Response."""
    body = {'error': str(exc)}
    if isinstance(exc, UniqueShareholderConflictError):
        body['blocking_expense_ids'] = [str(pk) for pk in exc.expense_ids]
    if isinstance(exc, InvalidShareholderError):
        body['participant_ids'] = exc.participant_ids

    for exc_types, code in ERROR_STATUS:
        if isinstance(exc, exc_types):
            return Response(body, status=code)
    return Response(body, status=status.HTTP_400_BAD_REQUEST)


# =============================================================================
# Participants
# =============================================================================

@extend_schema(
    request=ParticipantCreateSerializer,
    responses={200: ParticipantSerializer(many=True), 201: ParticipantSerializer},
    description="List active participants (members) or add one (organizer).",
    tags=['racha'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsEventOrganizerForWrites])
def participants(request, event_id):
    """List or add participants of an event's racha."""
    if request.method == 'GET':
        try:
            queryset = list_active_participants(event_id=event_id)
        except EventNotFoundError as e:
            return error_response(e)
        return Response(ParticipantSerializer(queryset, many=True).data)

    serializer = ParticipantCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        participant = add_participant(
            event_id=event_id,
            name=serializer.validated_data.get('name'),
            user=serializer.validated_data.get('user'),
        )
    except (EventsServiceError, RachaServiceError) as e:
        return error_response(e)

    return Response(ParticipantSerializer(participant).data, status=status.HTTP_201_CREATED)


@extend_schema(
    responses={200: RemovalResultSerializer},
    description="Remove a participant, redistributing their shares (organizer only).",
    tags=['racha'],
)
@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsEventOrganizer])
def remove_participant(request, event_id, participant_id):
    """Remove a participant from the racha."""
    try:
        result = deactivate_or_remove(event_id=event_id, participant_id=participant_id)
    except (EventsServiceError, RachaServiceError) as e:
        return error_response(e)

    return Response(RemovalResultSerializer(result).data)


@extend_schema(
    request=None,
    responses={200: ParticipantSerializer, 201: ParticipantSerializer},
    description="Join the racha of a post-paid event through its invite link.",
    tags=['racha'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def join_by_invite(request, invite_slug):
    """Join an event's racha with the invite slug."""
    try:
        participant = join_event_by_invite(invite_slug=invite_slug, user=request.user)
    except (EventNotFoundError, NotPostpaidEventError) as e:
        return error_response(e)

    return Response(ParticipantSerializer(participant).data)


@extend_schema(
    request=None,
    responses={200: ParticipantSerializer},
    description="Link an account-less participant to the current user.",
    tags=['racha'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def claim(request, participant_id):
    """Claim a participant invite."""
    try:
        participant = claim_participant(participant_id=participant_id, user=request.user)
    except RachaServiceError as e:
        return error_response(e)

    return Response(ParticipantSerializer(participant).data)


# =============================================================================
# Expenses and settlement
# =============================================================================

@extend_schema(
    request=ExpenseCreateSerializer,
    responses={200: ExpenseSerializer(many=True), 201: ExpenseSerializer},
    description="List expenses (members) or record one (organizer).",
    tags=['racha'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsEventOrganizerForWrites])
def expenses(request, event_id):
    """List or record expenses of an event's racha."""
    if request.method == 'GET':
        try:
            queryset = list_expenses(event_id=event_id)
        except EventNotFoundError as e:
            return error_response(e)
        return Response(ExpenseSerializer(queryset, many=True).data)

    serializer = ExpenseCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    try:
        expense, _shares = record_expense(
            event_id=event_id,
            payer_id=data['payer_id'],
            total_amount=data['total_amount'],
            participant_ids=data['participant_ids'],
            description=data['description'],
        )
    except (EventsServiceError, RachaServiceError) as e:
        return error_response(e)

    expense = list_expenses(event_id=event_id).get(id=expense.id)
    return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)


@extend_schema(
    responses={200: ParticipantBalanceSerializer(many=True)},
    description="Current balance of every active participant.",
    tags=['racha'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsEventMember])
def settlement(request, event_id):
    """Get the racha settlement of an event."""
    try:
        balances = compute_settlement(event_id=event_id)
    except EventNotFoundError as e:
        return error_response(e)

    return Response(ParticipantBalanceSerializer(balances, many=True).data)


# =============================================================================
# Payments
# =============================================================================

@extend_schema(
    request=PaymentCreateSerializer,
    responses={201: PaymentSerializer},
    description="Record a pending payment after the racha is closed.",
    tags=['racha'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsEventMember])
def payments(request, event_id):
    """Record a payment for the organizer or the caller's own participant."""
    serializer = PaymentCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    try:
        event = get_event_by_id(event_id=event_id)
        participant = get_participant(event_id=event_id, participant_id=data['participant_id'])
    except (EventNotFoundError, ParticipantNotFoundError) as e:
        return error_response(e)

    if not event.is_organizer(request.user) and participant.user_id != request.user.id:
        return Response(
            {'error': 'You can only pay for your own participant'},
            status=status.HTTP_403_FORBIDDEN
        )

    try:
        payment = record_payment(
            event_id=event_id,
            participant_id=participant.id,
            amount=data['amount'],
            provider=data['provider'],
            provider_payment_id=data.get('provider_payment_id') or None,
        )
    except (EventsServiceError, RachaServiceError) as e:
        return error_response(e)

    return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)


@extend_schema(
    responses={200: PaymentSummaryRowSerializer(many=True)},
    description="Total PAID amount per participant.",
    tags=['racha'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsEventMember])
def payments_summary(request, event_id):
    """Get paid totals per participant."""
    try:
        get_event_by_id(event_id=event_id)
    except EventNotFoundError as e:
        return error_response(e)

    totals = summarize_payments(event_id=event_id)
    rows = [
        {'participant_id': participant_id, 'paid_total': total}
        for participant_id, total in totals.items()
    ]
    return Response(PaymentSummaryRowSerializer(rows, many=True).data)


@extend_schema(
    parameters=[OpenApiParameter('participant', str, required=True)],
    responses={200: PaymentDetailsSerializer},
    description="What a participant owes and to whom, once the racha is closed.",
    tags=['racha'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsEventMember])
def payment_details(request, event_id):
    """Get payment details for one participant."""
    query = PaymentDetailsQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)
    participant_id = query.validated_data['participant']

    try:
        event = get_event_by_id(event_id=event_id)
        participant = get_participant(event_id=event_id, participant_id=participant_id)
    except (EventNotFoundError, ParticipantNotFoundError) as e:
        return error_response(e)

    if not event.is_organizer(request.user) and participant.user_id != request.user.id:
        return Response(
            {'error': 'You can only see payment details of your own participant'},
            status=status.HTTP_403_FORBIDDEN
        )

    try:
        details = get_payment_details(event_id=event_id, participant_id=participant_id)
    except (EventsServiceError, RachaServiceError) as e:
        return error_response(e)

    return Response(PaymentDetailsSerializer(details).data)


@extend_schema(
    request=PaymentNotificationSerializer,
    responses={200: PaymentSerializer},
    description="Payment provider notification (shared token in X-Webhook-Token).",
    tags=['racha'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([HasWebhookToken])
def payment_notification(request):
    """Apply a payment status notification."""
    serializer = PaymentNotificationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    try:
        payment, applied = apply_payment_notification(
            provider_payment_id=data['provider_payment_id'],
            new_status=data['status'],
            provider_payload=data.get('payload'),
        )
    except RachaServiceError as e:
        logger.warning(
            "Payment notification for %s rejected: %s", data['provider_payment_id'], e
        )
        return error_response(e)

    response = PaymentSerializer(payment).data
    response['applied'] = applied
    return Response(response)
