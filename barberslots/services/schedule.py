"""
Application services for managing staff availability windows.
"""

from __future__ import annotations

import logging
from typing import List, Protocol

from ..domain.exceptions import StaffNotFoundError, TenantNotFoundError, ValidationError
from ..domain.models import AvailabilityWindow, Tenant, parse_time_of_day
from .availability import ScheduleDirectoryProtocol

logger = logging.getLogger(__name__)


class AvailabilityStoreProtocol(ScheduleDirectoryProtocol, Protocol):
    """Directory lookups plus the write operations on availability windows."""

    def list_availability(self, tenant_id: int) -> List[AvailabilityWindow]:
        """Return all windows of the tenant's staff."""

    def insert_availability(self, window: AvailabilityWindow) -> AvailabilityWindow:
        """Insert a window and return it with its id."""

    def remove_availability(self, tenant_id: int, window_id: int) -> AvailabilityWindow:
        """Remove a window of the tenant's staff and return it."""


class ScheduleService:
    """
    Adds, removes and lists the weekly availability windows of a shop.
    """

    def __init__(self, store: AvailabilityStoreProtocol) -> None:
        self._store = store

    def add_availability(
        self,
        *,
        tenant_slug: str,
        staff_id: int,
        day_of_week: int,
        start: str,
        end: str,
    ) -> AvailabilityWindow:
        """
        Add a weekly window for a staff member.

        Args:
            tenant_slug: Shop identifier
            staff_id: Staff member of that shop
            day_of_week: 0=Sunday ... 6=Saturday
            start: Window start, ``HH:MM`` in UTC
            end: Window end, ``HH:MM`` in UTC

        Raises:
            ValidationError: Bad weekday, malformed times or start not before end
            TenantNotFoundError: Unknown tenant
            StaffNotFoundError: Staff member does not belong to the tenant
        """
        tenant = self._get_tenant(tenant_slug)

        if self._store.get_staff(tenant.id, staff_id) is None:
            raise StaffNotFoundError(f"Staff member {staff_id} not found for tenant {tenant_slug}")

        try:
            window = AvailabilityWindow(
                staff_id=staff_id,
                day_of_week=day_of_week,
                start_time=parse_time_of_day(start),
                end_time=parse_time_of_day(end),
            )
        except ValueError as e:
            raise ValidationError(str(e)) from e

        created = self._store.insert_availability(window)
        logger.info(
            "Added window %s %s-%s for staff %s (window %s)",
            day_of_week, start, end, staff_id, created.id,
        )
        return created

    def remove_availability(self, *, tenant_slug: str, window_id: int) -> AvailabilityWindow:
        """
        Remove a window; slots it offered disappear, existing bookings stay.

        Raises:
            TenantNotFoundError: Unknown tenant
            AvailabilityNotFoundError: Unknown window for this tenant
        """
        tenant = self._get_tenant(tenant_slug)
        removed = self._store.remove_availability(tenant.id, window_id)
        logger.info("Removed window %s of tenant %s", window_id, tenant_slug)
        return removed

    def list_availability(self, *, tenant_slug: str) -> List[AvailabilityWindow]:
        """Return the shop's windows ordered by staff, weekday and start."""
        tenant = self._get_tenant(tenant_slug)
        return self._store.list_availability(tenant.id)

    def _get_tenant(self, tenant_slug: str) -> Tenant:
        tenant = self._store.get_tenant(tenant_slug)
        if tenant is None:
            raise TenantNotFoundError(f"Tenant not found: {tenant_slug}")
        return tenant
