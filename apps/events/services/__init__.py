"""
Events app services layer.

Only the event operations the racha depends on live here.
"""

from .exceptions import (
    EventsServiceError,
    EventNotFoundError,
    NotPostpaidEventError,
    InsufficientPermissionsError,
)

from .event_management import (
    create_event,
    get_event_by_id,
    get_user_events,
    close_settlement,
    is_settlement_final,
    get_event_for_update,
)


__all__ = [
    # Exceptions
    'EventsServiceError',
    'EventNotFoundError',
    'NotPostpaidEventError',
    'InsufficientPermissionsError',

    # Event Management
    'create_event',
    'get_event_by_id',
    'get_user_events',
    'close_settlement',
    'is_settlement_final',
    'get_event_for_update',
]
