from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from .serializers import EventSerializer, EventCreateSerializer

from apps.events.services import (
    create_event,
    get_user_events,
    close_settlement,
    # Exceptions
    EventNotFoundError,
    NotPostpaidEventError,
    InsufficientPermissionsError,
)


class EventPagination(PageNumberPagination):
    """Custom pagination for events."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class EventViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet
):
    """
    ViewSet for events.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Events the user organizes or takes part in
    create: Create a new event
    retrieve: Get a specific event
    close: Close the racha of a post-paid event (organizer only)
    """

    serializer_class = EventSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = EventPagination

    def get_queryset(self):
        """Return only events the user organizes or takes part in."""
        return get_user_events(user=self.request.user)

    def get_serializer_class(self):
        if self.action == 'create':
            return EventCreateSerializer
        return EventSerializer

    @extend_schema(request=EventCreateSerializer, responses={201: EventSerializer})
    def create(self, request, *args, **kwargs):
        """Create a new event."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        event = create_event(
            name=data['name'],
            organizer=request.user,
            event_type=data['event_type'],
            description=data.get('description', ''),
            location=data.get('location', ''),
            event_date=data.get('event_date'),
        )

        output_serializer = EventSerializer(event, context={'request': request})
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: EventSerializer})
    @action(detail=True, methods=['post'])
    def close(self, request, pk=None):
        """Close the racha so balances are final and payments can start."""
        try:
            event = close_settlement(event_id=pk, user=request.user)
        except EventNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except NotPostpaidEventError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except InsufficientPermissionsError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        return Response(EventSerializer(event, context={'request': request}).data)
