"""
Tests for adding and removing availability windows.
"""

from datetime import time

import pytest

from barberslots.domain.exceptions import (
    AvailabilityNotFoundError,
    StaffNotFoundError,
    TenantNotFoundError,
    ValidationError,
)
from barberslots.services.availability import AvailabilityService
from barberslots.services.schedule import ScheduleService

SHOP = "the-barber-shop"
WEDNESDAY = "2024-11-27"


def _starts(store, day: str, staff_id: int = 10):
    slots = AvailabilityService(directory=store).find_slots(
        tenant_slug=SHOP, service_id=1, date=day, staff_id=staff_id
    )
    return [s.start.format("HH:mm") for s in slots]


class TestAddAvailability:
    """Tests for ScheduleService.add_availability."""

    def test_added_window_offers_slots(self, store):
        assert _starts(store, WEDNESDAY) == []

        window = ScheduleService(store).add_availability(
            tenant_slug=SHOP, staff_id=10, day_of_week=3, start="09:00", end="10:00"
        )

        assert window.id == 4
        assert window.start_time == time(9, 0)
        assert _starts(store, WEDNESDAY) == ["09:00", "09:15", "09:30"]

    @pytest.mark.parametrize(
        "day, start, end",
        [
            (7, "09:00", "10:00"),
            (-1, "09:00", "10:00"),
            (3, "9am", "10:00"),
            (3, "10:00", "09:00"),
            (3, "10:00", "10:00"),
        ],
    )
    def test_invalid_window(self, store, day, start, end):
        with pytest.raises(ValidationError):
            ScheduleService(store).add_availability(
                tenant_slug=SHOP, staff_id=10, day_of_week=day, start=start, end=end
            )

        assert len(store.list_availability(1)) == 3

    def test_staff_of_other_tenant(self, store):
        with pytest.raises(StaffNotFoundError):
            ScheduleService(store).add_availability(
                tenant_slug="empty-shop", staff_id=10, day_of_week=3, start="09:00", end="10:00"
            )

    def test_unknown_tenant(self, store):
        with pytest.raises(TenantNotFoundError):
            ScheduleService(store).list_availability(tenant_slug="nope")


class TestRemoveAvailability:
    """Tests for ScheduleService.remove_availability."""

    def test_removed_window_stops_offering_slots(self, store):
        service = ScheduleService(store)

        removed = service.remove_availability(tenant_slug=SHOP, window_id=1)

        assert removed.staff_id == 10
        assert _starts(store, "2024-11-25") == []
        assert [w.id for w in service.list_availability(tenant_slug=SHOP)] == [2, 3]

    def test_bookings_are_kept(self, store):
        ScheduleService(store).remove_availability(tenant_slug=SHOP, window_id=1)

        assert sorted(b.id for b in store.list_bookings(1)) == [100, 101]

    def test_unknown_window(self, store):
        with pytest.raises(AvailabilityNotFoundError):
            ScheduleService(store).remove_availability(tenant_slug=SHOP, window_id=42)

    def test_window_of_other_tenant(self, store):
        with pytest.raises(AvailabilityNotFoundError):
            ScheduleService(store).remove_availability(tenant_slug="empty-shop", window_id=1)
