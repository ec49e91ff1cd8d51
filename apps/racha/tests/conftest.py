import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.events.models import EventType
from apps.events.services import create_event, close_settlement
from apps.racha.models import Participant
from apps.racha.services import add_participant, record_expense


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def organizer(db):
    """Create and return the user organizing the racha."""
    return User.objects.create_user(
        email='organizer@example.com',
        password='TestPass123!',
        name='Ana',
        pix_key='ana@pix.example',
    )


@pytest.fixture
def friend(db):
    """Create and return a user who joins the racha."""
    return User.objects.create_user(
        email='friend@example.com',
        password='TestPass123!',
        name='Bruno',
    )


@pytest.fixture
def outsider(db):
    """Create and return a user with no link to the event."""
    return User.objects.create_user(
        email='outsider@example.com',
        password='TestPass123!',
        name='Outsider',
    )


@pytest.fixture
def postpaid_event(organizer):
    """Post-paid event; the organizer is enrolled as first participant."""
    return create_event(name='Churrasco', organizer=organizer)


@pytest.fixture
def prepaid_event(organizer):
    return create_event(name='Show', organizer=organizer, event_type=EventType.PREPAID)


@pytest.fixture
def ana(postpaid_event, organizer):
    """The organizer's participant."""
    return Participant.objects.get(event=postpaid_event, user=organizer)


@pytest.fixture
def bruno(postpaid_event, friend):
    return add_participant(event_id=postpaid_event.id, user=friend)


@pytest.fixture
def carla(postpaid_event):
    """Participant without an account."""
    return add_participant(event_id=postpaid_event.id, name='Carla')


@pytest.fixture
def trio(ana, bruno, carla):
    """Three active participants in creation order."""
    return ana, bruno, carla


@pytest.fixture
def shared_dinner(postpaid_event, trio):
    """Ana paid 90.00 split among all three."""
    ana, bruno, carla = trio
    expense, _ = record_expense(
        event_id=postpaid_event.id,
        payer_id=ana.id,
        total_amount=Decimal('90.00'),
        participant_ids=[ana.id, bruno.id, carla.id],
        description='Dinner',
    )
    return expense


@pytest.fixture
def closed_event(postpaid_event, organizer, shared_dinner):
    """The racha after the organizer closed it."""
    return close_settlement(event_id=postpaid_event.id, user=organizer)


@pytest.fixture
def organizer_client(organizer):
    """Return API client authenticated as the organizer."""
    return _client_for(organizer)


@pytest.fixture
def friend_client(friend):
    """Return API client authenticated as the friend."""
    return _client_for(friend)


@pytest.fixture
def outsider_client(outsider):
    """Return API client authenticated as the outsider."""
    return _client_for(outsider)
