"""
Core business logic for resolving bookable slots.

Pure domain logic without any external dependencies (no database, no I/O,
no wall clock). The caller resolves availability windows and bookings first
and hands them over as ``StaffSchedule`` snapshots.
"""

import logging
from datetime import date
from typing import List, Sequence

from .models import (
    AvailabilityWindow,
    Slot,
    StaffSchedule,
    TimeRange,
    start_of_utc_day,
    weekday_index,
)

logger = logging.getLogger(__name__)


class SlotResolver:
    """
    Computes the free slots of a day for a service of fixed duration.

    Algorithm, per staff candidate and per availability window:
    1. Anchor the window onto the requested UTC date
    2. Walk a cursor from the window start in fixed 15 minute steps
    3. Keep every candidate [cursor, cursor + duration) that fits inside
       the window and overlaps no active booking of that staff member
    4. Concatenate results in staff, window, chronological order

    Windows are neither merged nor deduplicated, and slots of different
    staff members are not interleaved.
    """

    STEP_MINUTES = 15

    def resolve_slots(
        self,
        day: date,
        duration_minutes: int,
        candidates: Sequence[StaffSchedule],
    ) -> List[Slot]:
        """
        Resolve all bookable slots for the given day.

        Args:
            day: Calendar date; datetimes are converted to their UTC calendar day
            duration_minutes: Service duration; every slot spans exactly this
            candidates: Staff members to consider, in output order

        Returns:
            List of Slot objects, empty when nothing fits
        """
        if duration_minutes <= 0:
            return []

        day = start_of_utc_day(day)

        slots: List[Slot] = []

        for schedule in candidates:
            slots.extend(self._resolve_for_staff(day, duration_minutes, schedule))

        return slots

    def _resolve_for_staff(
        self,
        day: date,
        duration_minutes: int,
        schedule: StaffSchedule,
    ) -> List[Slot]:
        staff = schedule.staff
        weekday = weekday_index(day)

        busy_ranges = [
            booking.time_range
            for booking in schedule.bookings
            if booking.is_active and booking.staff_id == staff.id
        ]

        slots: List[Slot] = []

        for window in schedule.windows:
            if window.day_of_week != weekday:
                logger.debug(
                    "Skipping window %s-%s of staff %s: weekday %s, requested %s",
                    window.start_time, window.end_time, staff.id, window.day_of_week, weekday,
                )
                continue

            slots.extend(
                self._slice_window(day, window, duration_minutes, busy_ranges, schedule)
            )

        return slots

    def _slice_window(
        self,
        day: date,
        window: AvailabilityWindow,
        duration_minutes: int,
        busy_ranges: List[TimeRange],
        schedule: StaffSchedule,
    ) -> List[Slot]:
        """
        Slice one window into candidate slots and drop the booked ones.

        Example (duration 30):
        Window: 09:00 - 10:00
        Candidates: 09:00-09:30, 09:15-09:45, 09:30-10:00
        """
        window_range = window.anchor_to(day)
        slots: List[Slot] = []

        logger.debug(
            "Slicing window %s for staff %s (%s min)",
            window_range, schedule.staff.id, duration_minutes,
        )

        cursor = window_range.start

        while cursor.add(minutes=duration_minutes) <= window_range.end:
            candidate = TimeRange(start=cursor, end=cursor.add(minutes=duration_minutes))

            if any(candidate.overlaps(busy) for busy in busy_ranges):
                logger.debug("Candidate %s overlaps a booking", candidate)
            else:
                slots.append(
                    Slot(
                        staff_id=schedule.staff.id,
                        staff_label=schedule.staff.label,
                        time_range=candidate,
                    )
                )

            cursor = cursor.add(minutes=self.STEP_MINUTES)

        return slots
