"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability import (
    AvailabilityService,
    ScheduleDirectoryProtocol,
    merge_chronologically,
    parse_request_date,
    validate_duration,
)
from .bookings import BookingService, BookingStoreProtocol
from .schedule import AvailabilityStoreProtocol, ScheduleService

__all__ = [
    "AvailabilityService",
    "AvailabilityStoreProtocol",
    "BookingService",
    "BookingStoreProtocol",
    "ScheduleDirectoryProtocol",
    "ScheduleService",
    "merge_chronologically",
    "parse_request_date",
    "validate_duration",
]
