import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.events.models import EventType
from apps.events.services import create_event


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
    """Create and return a user who organizes events."""
    return User.objects.create_user(
        email='organizer@example.com',
        password='TestPass123!',
        name='Ana',
    )


@pytest.fixture
def other_user(db):
    """Create and return a user who organizes nothing."""
    return User.objects.create_user(
        email='other@example.com',
        password='TestPass123!',
    )


@pytest.fixture
def postpaid_event(organizer):
    return create_event(name='Churrasco', organizer=organizer, location='Praia')


@pytest.fixture
def free_event(organizer):
    return create_event(name='Meetup', organizer=organizer, event_type=EventType.FREE)


@pytest.fixture
def organizer_client(organizer):
    """Return API client authenticated as the organizer."""
    return _client_for(organizer)


@pytest.fixture
def other_client(other_user):
    """Return API client authenticated as the other user."""
    return _client_for(other_user)
