"""
In-memory schedule store for shops, staff, availability and bookings.
"""

import logging
import threading
from dataclasses import replace
from typing import Dict, List, Optional, Set

from ..config import AppConfig
from ..domain.exceptions import (
    AvailabilityNotFoundError,
    BookingConflictError,
    BookingNotFoundError,
)
from ..domain.models import (
    AvailabilityWindow,
    Booking,
    BookingStatus,
    Service,
    StaffMember,
    Tenant,
    TimeRange,
)

logger = logging.getLogger(__name__)


class InMemoryScheduleStore:
    """
    Store that keeps all scheduling data in process memory.

    Implements the directory lookups used by the availability service and
    the writes used by the booking and schedule services. Reads and writes
    of windows and bookings go through one lock, which makes
    ``insert_booking_if_free`` an atomic check-and-insert.
    """

    def __init__(self):
        self._tenants: Dict[str, Tenant] = {}
        self._services: Dict[int, List[Service]] = {}
        self._staff: Dict[int, List[StaffMember]] = {}
        self._availability: List[AvailabilityWindow] = []
        self._bookings: Dict[int, Booking] = {}
        self._next_booking_id = 1
        self._next_window_id = 1
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: AppConfig) -> "InMemoryScheduleStore":
        """Build a store from the validated application configuration."""
        store = cls()

        for tenant_config in config.tenants:
            tenant = tenant_config.to_domain()
            store.add_tenant(tenant)

            for service_config in tenant_config.services:
                store.add_service(service_config.to_domain(tenant.id))

            for staff_config in tenant_config.staff:
                store.add_staff(staff_config.to_domain(tenant.id))

            for availability_config in tenant_config.availability:
                store.add_availability(availability_config.to_domain())

            for booking_config in tenant_config.bookings:
                store.add_booking(booking_config.to_domain(tenant.id))

        logger.debug(
            "Loaded %d tenant(s), %d window(s), %d booking(s)",
            len(store._tenants), len(store._availability), len(store._bookings),
        )
        return store

    # -- loading ---------------------------------------------------------

    def add_tenant(self, tenant: Tenant) -> None:
        self._tenants[tenant.slug] = tenant
        self._services.setdefault(tenant.id, [])
        self._staff.setdefault(tenant.id, [])

    def add_service(self, service: Service) -> None:
        self._services.setdefault(service.tenant_id, []).append(service)

    def add_staff(self, staff_member: StaffMember) -> None:
        self._staff.setdefault(staff_member.tenant_id, []).append(staff_member)

    def add_availability(self, window: AvailabilityWindow) -> AvailabilityWindow:
        """Add a window as-is, keeping its configured id."""
        with self._lock:
            if window.id is None:
                window = replace(window, id=self._next_window_id)
            elif any(existing.id == window.id for existing in self._availability):
                raise ValueError(f"Duplicate availability id: {window.id}")
            self._availability.append(window)
            self._next_window_id = max(self._next_window_id, window.id + 1)
        return window

    def add_booking(self, booking: Booking) -> Booking:
        """Add a booking as-is, without an overlap check."""
        with self._lock:
            if booking.id is None:
                booking = replace(booking, id=self._next_booking_id)
            elif booking.id in self._bookings:
                raise ValueError(f"Duplicate booking id: {booking.id}")
            self._bookings[booking.id] = booking
            self._next_booking_id = max(self._next_booking_id, booking.id + 1)
        return booking

    # -- directory lookups -----------------------------------------------

    def get_tenant(self, slug: str) -> Optional[Tenant]:
        return self._tenants.get(slug)

    def list_services(self, tenant_id: int) -> List[Service]:
        return list(self._services.get(tenant_id, []))

    def get_service(self, tenant_id: int, service_id: int) -> Optional[Service]:
        for service in self._services.get(tenant_id, []):
            if service.id == service_id:
                return service
        return None

    def list_staff_for_tenant(self, tenant_id: int) -> List[StaffMember]:
        return list(self._staff.get(tenant_id, []))

    def get_staff(self, tenant_id: int, staff_id: int) -> Optional[StaffMember]:
        for staff_member in self._staff.get(tenant_id, []):
            if staff_member.id == staff_id:
                return staff_member
        return None

    def list_availability(self, tenant_id: int) -> List[AvailabilityWindow]:
        """All windows of a tenant's staff, ordered by staff, weekday, start."""
        staff_ids = self._staff_ids(tenant_id)
        with self._lock:
            windows = [w for w in self._availability if w.staff_id in staff_ids]
        return sorted(windows, key=lambda w: (w.staff_id, w.day_of_week, w.start_time))

    def list_staff_availability(self, staff_id: int, weekday: int) -> List[AvailabilityWindow]:
        with self._lock:
            return [
                window for window in self._availability
                if window.staff_id == staff_id and window.day_of_week == weekday
            ]

    def list_non_cancelled_bookings(self, staff_id: int, day_range: TimeRange) -> List[Booking]:
        with self._lock:
            bookings = list(self._bookings.values())
        return [
            booking for booking in bookings
            if booking.staff_id == staff_id
            and booking.is_active
            and booking.time_range.overlaps(day_range)
        ]

    def list_bookings(self, tenant_id: int) -> List[Booking]:
        with self._lock:
            bookings = list(self._bookings.values())
        return [b for b in bookings if b.tenant_id == tenant_id]

    # -- availability writes ---------------------------------------------

    def insert_availability(self, window: AvailabilityWindow) -> AvailabilityWindow:
        """Insert a new window under a fresh id."""
        with self._lock:
            created = replace(window, id=self._next_window_id)
            self._availability.append(created)
            self._next_window_id += 1
        return created

    def remove_availability(self, tenant_id: int, window_id: int) -> AvailabilityWindow:
        """
        Raises:
            AvailabilityNotFoundError: If the tenant's staff has no such window
        """
        staff_ids = self._staff_ids(tenant_id)
        with self._lock:
            for index, window in enumerate(self._availability):
                if window.id == window_id and window.staff_id in staff_ids:
                    return self._availability.pop(index)
        raise AvailabilityNotFoundError(f"Availability window {window_id} not found")

    def _staff_ids(self, tenant_id: int) -> Set[int]:
        return {staff_member.id for staff_member in self._staff.get(tenant_id, [])}

    # -- booking writes --------------------------------------------------

    def insert_booking_if_free(self, booking: Booking) -> Booking:
        """
        Insert a booking unless it overlaps an active booking of the same staff member.

        Raises:
            BookingConflictError: If the staff member is already booked
        """
        with self._lock:
            for existing in self._bookings.values():
                if (
                    existing.staff_id == booking.staff_id
                    and existing.is_active
                    and existing.time_range.overlaps(booking.time_range)
                ):
                    raise BookingConflictError(
                        f"Staff member {booking.staff_id} is already booked "
                        f"at {existing.time_range} (booking {existing.id})"
                    )

            created = replace(booking, id=self._next_booking_id)
            self._bookings[created.id] = created
            self._next_booking_id += 1

        return created

    def set_booking_status(
        self,
        tenant_id: int,
        booking_id: int,
        status: BookingStatus,
    ) -> Booking:
        """
        Raises:
            BookingNotFoundError: If the tenant has no such booking
        """
        with self._lock:
            booking = self._bookings.get(booking_id)
            if booking is None or booking.tenant_id != tenant_id:
                raise BookingNotFoundError(f"Booking {booking_id} not found")

            updated = replace(booking, status=status)
            self._bookings[booking_id] = updated

        return updated
