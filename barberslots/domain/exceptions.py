"""
Domain-specific exception hierarchy for the booking core.
"""


class BookingSystemError(Exception):
    """Base class for all application-level errors."""


class ValidationError(BookingSystemError):
    """Raised when a request is malformed before any work is done."""


class NotFoundError(BookingSystemError):
    """Raised when a referenced entity does not exist."""


class TenantNotFoundError(NotFoundError):
    pass


class ServiceNotFoundError(NotFoundError):
    pass


class StaffNotFoundError(NotFoundError):
    pass


class BookingNotFoundError(NotFoundError):
    pass


class BookingConflictError(BookingSystemError):
    """Raised when a booking would overlap an active booking of the same staff member."""


class AvailabilityNotFoundError(NotFoundError):
    pass
