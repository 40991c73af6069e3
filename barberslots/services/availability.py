"""
Application services for finding bookable slots.

The service resolves tenant, service duration, staff roster, availability
windows and bookings through a directory adapter and delegates the actual
slot computation to the domain-level ``SlotResolver``. Request validation
happens here, before the resolver is invoked.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional, Protocol, Sequence, Union

import pendulum
from pendulum import DateTime

from ..domain.exceptions import (
    ServiceNotFoundError,
    TenantNotFoundError,
    ValidationError,
)
from ..domain.models import (
    AvailabilityWindow,
    Booking,
    Service,
    Slot,
    StaffMember,
    StaffSchedule,
    Tenant,
    TimeRange,
    start_of_utc_day,
    weekday_index,
)
from ..domain.slot_resolver import SlotResolver

logger = logging.getLogger(__name__)

DateInput = Union[str, date]


class ScheduleDirectoryProtocol(Protocol):
    """Protocol describing the lookups the availability service needs."""

    def get_tenant(self, slug: str) -> Optional[Tenant]:
        """Return the tenant with the given slug, if any."""

    def get_service(self, tenant_id: int, service_id: int) -> Optional[Service]:
        """Return a service of the tenant (carries the duration)."""

    def list_staff_for_tenant(self, tenant_id: int) -> List[StaffMember]:
        """Return the tenant's staff roster."""

    def get_staff(self, tenant_id: int, staff_id: int) -> Optional[StaffMember]:
        """Return one staff member of the tenant."""

    def list_staff_availability(self, staff_id: int, weekday: int) -> List[AvailabilityWindow]:
        """Return the staff member's windows for a weekday (0=Sunday)."""

    def list_non_cancelled_bookings(self, staff_id: int, day_range: TimeRange) -> List[Booking]:
        """Return active bookings of the staff member overlapping the range."""


def parse_request_date(value: DateInput) -> DateTime:
    """
    Parse a requested date into midnight UTC.

    Args:
        value: ``YYYY-MM-DD`` string or a date/datetime object

    Returns:
        Pendulum DateTime at 00:00 UTC of that calendar date

    Raises:
        ValidationError: If the value is not a valid calendar date
    """
    if isinstance(value, date):
        return start_of_utc_day(value)

    if not isinstance(value, str) or not value.strip():
        raise ValidationError("A date in YYYY-MM-DD format is required")

    try:
        return pendulum.from_format(value.strip(), "YYYY-MM-DD", tz="UTC").start_of("day")
    except ValueError as e:
        raise ValidationError(f"Invalid date '{value}': expected YYYY-MM-DD") from e


def validate_duration(duration_minutes: int) -> int:
    """Ensure a service duration is a positive number of minutes."""
    if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int):
        raise ValidationError(f"Service duration must be an integer, got {duration_minutes!r}")
    if duration_minutes <= 0:
        raise ValidationError(f"Service duration must be positive, got {duration_minutes}")
    return duration_minutes


def merge_chronologically(slots: Sequence[Slot]) -> List[Slot]:
    """
    Merge slots of several staff members into one chronological view.

    The sort is stable, so slots starting at the same time keep staff order.
    """
    return sorted(slots, key=lambda slot: slot.start)


class AvailabilityService:
    """
    Orchestrates directory lookups and slot resolution for one request.
    """

    def __init__(
        self,
        directory: ScheduleDirectoryProtocol,
        slot_resolver: Optional[SlotResolver] = None,
    ) -> None:
        self._directory = directory
        self._slot_resolver = slot_resolver or SlotResolver()

    def find_slots(
        self,
        *,
        tenant_slug: str,
        service_id: int,
        date: DateInput,
        staff_id: Optional[int] = None,
    ) -> List[Slot]:
        """
        Find bookable slots of a service on a date.

        Args:
            tenant_slug: Shop identifier
            service_id: Service to book (supplies the duration)
            date: Requested calendar date, interpreted in UTC
            staff_id: Restrict to one staff member; all staff when omitted

        Returns:
            Slots in staff, window, chronological order

        Raises:
            ValidationError: Unparseable date or non-positive duration
            TenantNotFoundError: Unknown tenant
            ServiceNotFoundError: Unknown service for this tenant
        """
        day = parse_request_date(date)

        tenant = self._directory.get_tenant(tenant_slug)
        if tenant is None:
            raise TenantNotFoundError(f"Tenant not found: {tenant_slug}")

        service = self._directory.get_service(tenant.id, service_id)
        if service is None:
            raise ServiceNotFoundError(f"Service {service_id} not found for tenant {tenant_slug}")

        duration = validate_duration(service.duration_minutes)

        logger.debug(
            "Availability request: tenant=%s service=%s staff=%s date=%s",
            tenant_slug, service_id, staff_id, day.to_date_string(),
        )

        candidates = self.build_candidates(tenant=tenant, day=day, staff_id=staff_id)

        return self._slot_resolver.resolve_slots(
            day=day,
            duration_minutes=duration,
            candidates=candidates,
        )

    def build_candidates(
        self,
        *,
        tenant: Tenant,
        day: DateTime,
        staff_id: Optional[int] = None,
    ) -> List[StaffSchedule]:
        """Collect windows and bookings of every candidate staff member for the day."""
        if staff_id is not None:
            staff_member = self._directory.get_staff(tenant.id, staff_id)
            if staff_member is None:
                logger.warning("Staff member %s not found for tenant %s", staff_id, tenant.slug)
                return []
            staff_members = [staff_member]
        else:
            staff_members = self._directory.list_staff_for_tenant(tenant.id)

        weekday = weekday_index(day)
        day_range = TimeRange(start=day, end=day.add(days=1))

        candidates: List[StaffSchedule] = []

        for staff_member in staff_members:
            windows = self._directory.list_staff_availability(staff_member.id, weekday)
            bookings = self._directory.list_non_cancelled_bookings(staff_member.id, day_range)
            logger.debug(
                "Staff %s: %d window(s), %d booking(s) on weekday %d",
                staff_member.id, len(windows), len(bookings), weekday,
            )
            candidates.append(
                StaffSchedule(staff=staff_member, windows=windows, bookings=bookings)
            )

        return candidates
