"""
Application services for creating and cancelling bookings.

Overlap protection lives in the store: ``insert_booking_if_free`` checks and
inserts atomically, so two callers that both saw a slot as free cannot both
book it.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Optional, Protocol, Union

import pendulum
from pendulum import DateTime

from ..domain.exceptions import (
    ServiceNotFoundError,
    StaffNotFoundError,
    TenantNotFoundError,
    ValidationError,
)
from ..domain.models import Booking, BookingStatus, Customer, Tenant, TimeRange
from .availability import ScheduleDirectoryProtocol, validate_duration

logger = logging.getLogger(__name__)


class BookingStoreProtocol(ScheduleDirectoryProtocol, Protocol):
    """Directory lookups plus the write operations on bookings."""

    def list_bookings(self, tenant_id: int) -> List[Booking]:
        """Return all bookings of a tenant, cancelled ones included."""

    def insert_booking_if_free(self, booking: Booking) -> Booking:
        """Insert the booking unless it overlaps an active one; return it with its id."""

    def set_booking_status(self, tenant_id: int, booking_id: int, status: BookingStatus) -> Booking:
        """Change the status of a booking and return the updated booking."""


def parse_start_time(value: Union[str, datetime]) -> DateTime:
    """
    Parse a booking start timestamp into UTC.

    Only full timestamps are accepted; a bare date or time of day is
    rejected rather than completed from the clock.
    """
    if isinstance(value, datetime):
        return pendulum.instance(value).in_timezone("UTC")

    try:
        parsed = pendulum.parse(value, exact=True)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid start time '{value}'") from e

    if not isinstance(parsed, DateTime):
        raise ValidationError(f"Start time must include date and time, got '{value}'")

    return parsed.in_timezone("UTC")


class BookingService:
    """
    Creates, cancels and lists bookings of a tenant.
    """

    def __init__(self, store: BookingStoreProtocol) -> None:
        self._store = store

    def create_booking(
        self,
        *,
        tenant_slug: str,
        service_id: int,
        staff_id: int,
        start: Union[str, datetime],
        customer_name: str,
        customer_email: str,
        customer_phone: Optional[str] = None,
    ) -> Booking:
        """
        Book a service with a staff member.

        The end time is derived from the service duration.

        Raises:
            ValidationError: Missing customer data or malformed start time
            NotFoundError: Unknown tenant, service or staff member
            BookingConflictError: The staff member is already booked then
        """
        missing = [
            name for name, value in (
                ("customer_name", customer_name),
                ("customer_email", customer_email),
                ("start", start),
            )
            if not value
        ]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        tenant = self._get_tenant(tenant_slug)

        service = self._store.get_service(tenant.id, service_id)
        if service is None:
            raise ServiceNotFoundError(f"Service {service_id} not found for tenant {tenant_slug}")

        staff_member = self._store.get_staff(tenant.id, staff_id)
        if staff_member is None:
            raise StaffNotFoundError(f"Staff member {staff_id} not found for tenant {tenant_slug}")

        start_time = parse_start_time(start)
        duration = validate_duration(service.duration_minutes)

        booking = Booking(
            id=None,
            tenant_id=tenant.id,
            staff_id=staff_member.id,
            service_id=service.id,
            customer_name=customer_name,
            customer_email=customer_email,
            customer_phone=customer_phone,
            time_range=TimeRange(start=start_time, end=start_time.add(minutes=duration)),
            status=BookingStatus.CONFIRMED,
        )

        created = self._store.insert_booking_if_free(booking)
        logger.info(
            "Booked %s with staff %s at %s (booking %s)",
            service.name, staff_member.label, created.time_range, created.id,
        )
        return created

    def cancel_booking(self, *, tenant_slug: str, booking_id: int) -> Booking:
        """
        Cancel a booking; its time becomes bookable again.

        Raises:
            TenantNotFoundError: Unknown tenant
            BookingNotFoundError: Unknown booking for this tenant
        """
        tenant = self._get_tenant(tenant_slug)
        cancelled = self._store.set_booking_status(tenant.id, booking_id, BookingStatus.CANCELLED)
        logger.info("Cancelled booking %s of tenant %s", booking_id, tenant_slug)
        return cancelled

    def list_bookings(self, *, tenant_slug: str) -> List[Booking]:
        """Return the tenant's bookings ordered by start time."""
        tenant = self._get_tenant(tenant_slug)
        return sorted(self._store.list_bookings(tenant.id), key=lambda b: b.time_range.start)

    def list_customers(self, *, tenant_slug: str) -> List[Customer]:
        """
        Return the distinct customers of a shop, ordered by name.

        Customers are identified by e-mail (case-insensitive); cancelled
        bookings count too. When one e-mail was booked under several names,
        the alphabetically first entry wins.
        """
        tenant = self._get_tenant(tenant_slug)
        ordered = sorted(
            self._store.list_bookings(tenant.id),
            key=lambda b: (b.customer_name.lower(), b.time_range.start),
        )

        customers: Dict[str, Customer] = {}
        for booking in ordered:
            key = booking.customer_email.lower()
            if key not in customers:
                customers[key] = Customer(
                    name=booking.customer_name,
                    email=booking.customer_email,
                    phone=booking.customer_phone,
                )

        return list(customers.values())

    def _get_tenant(self, tenant_slug: str) -> Tenant:
        tenant = self._store.get_tenant(tenant_slug)
        if tenant is None:
            raise TenantNotFoundError(f"Tenant not found: {tenant_slug}")
        return tenant
