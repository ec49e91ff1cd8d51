"""
Domain-specific exceptions for events app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class EventsServiceError(Exception):
    """Base exception for all events service errors."""
    pass


class EventNotFoundError(EventsServiceError):
    """Raised when an event does not exist or is inaccessible."""
    pass


class NotPostpaidEventError(EventsServiceError):
    """Raised when a racha operation targets a free or pre-paid event."""
    pass


class InsufficientPermissionsError(EventsServiceError):
    """Raised when a user lacks required permissions for an action."""
    pass
