"""
Domain layer - Pure business logic without external dependencies.
"""

from .models import (
    AvailabilityWindow,
    Booking,
    BookingStatus,
    Customer,
    Service,
    Slot,
    StaffMember,
    StaffSchedule,
    Tenant,
    TimeRange,
    parse_time_of_day,
    weekday_index,
)
from .slot_resolver import SlotResolver

__all__ = [
    "AvailabilityWindow",
    "Booking",
    "BookingStatus",
    "Customer",
    "Service",
    "Slot",
    "SlotResolver",
    "StaffMember",
    "StaffSchedule",
    "Tenant",
    "TimeRange",
    "parse_time_of_day",
    "weekday_index",
]
