"""
Tests for the in-memory schedule store.
"""

from datetime import time

import pendulum
import pytest

from barberslots.adapters.memory_store import InMemoryScheduleStore
from barberslots.domain.exceptions import AvailabilityNotFoundError
from barberslots.domain.models import AvailabilityWindow, Booking, TimeRange


def _booking(booking_id, tenant_id: int = 1, staff_id: int = 10) -> Booking:
    start = pendulum.datetime(2024, 11, 25, 9, 0, tz="UTC")
    return Booking(
        id=booking_id,
        tenant_id=tenant_id,
        staff_id=staff_id,
        service_id=1,
        customer_name="Lee",
        customer_email="lee@example.com",
        time_range=TimeRange(start=start, end=start.add(minutes=30)),
    )


class TestLoading:
    """Loading data keeps configured ids."""

    def test_fixture_ids(self, store):
        assert [w.id for w in store.list_availability(1)] == [1, 2, 3]
        assert sorted(b.id for b in store.list_bookings(1)) == [100, 101]

    def test_same_booking_id_for_two_tenants_is_rejected(self, store):
        with pytest.raises(ValueError, match="Duplicate booking id"):
            store.add_booking(_booking(100, tenant_id=2, staff_id=20))

        assert [b.tenant_id for b in store.list_bookings(1)] == [1, 1]
        assert store.list_bookings(2) == []

    def test_booking_without_id_gets_next_free(self, store):
        assert store.add_booking(_booking(None)).id == 102

    def test_duplicate_window_id_is_rejected(self, store):
        window = AvailabilityWindow(
            id=1, staff_id=11, day_of_week=3, start_time=time(9, 0), end_time=time(10, 0)
        )

        with pytest.raises(ValueError, match="Duplicate availability id"):
            store.add_availability(window)


class TestAvailabilityWrites:
    """Inserting and removing windows."""

    def test_insert_assigns_fresh_id(self, store):
        window = AvailabilityWindow(
            staff_id=10, day_of_week=3, start_time=time(9, 0), end_time=time(10, 0)
        )

        created = store.insert_availability(window)

        assert created.id == 4
        assert store.list_staff_availability(10, 3) == [created]

    def test_remove_window(self, store):
        removed = store.remove_availability(1, 1)

        assert removed.staff_id == 10
        assert store.list_staff_availability(10, 1) == []

    def test_remove_unknown_window(self, store):
        with pytest.raises(AvailabilityNotFoundError):
            store.remove_availability(1, 99)

    def test_remove_window_of_other_tenant(self, store):
        with pytest.raises(AvailabilityNotFoundError):
            store.remove_availability(2, 1)

        assert len(store.list_availability(1)) == 3

    def test_empty_store(self):
        store = InMemoryScheduleStore()

        assert store.list_availability(1) == []
        assert store.get_tenant("the-barber-shop") is None
