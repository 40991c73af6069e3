"""
Domain models for shops, staff schedules, bookings and slots.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Dict, List, Optional

import pendulum
from pendulum import DateTime

UTC = "UTC"


def start_of_utc_day(day: date) -> DateTime:
    """
    Anchor a calendar date to midnight UTC.

    Datetimes are converted to UTC first, so the UTC calendar day is used
    whatever timezone they carry. Naive datetimes count as UTC.
    """
    if isinstance(day, datetime):
        day = pendulum.instance(day).in_timezone(UTC)
    return pendulum.datetime(day.year, day.month, day.day, tz=UTC)


def weekday_index(day: date) -> int:
    """Return the UTC weekday of a date with 0=Sunday ... 6=Saturday."""
    return start_of_utc_day(day).isoweekday() % 7


def parse_time_of_day(value: str) -> time:
    """Parse an ``HH:MM`` string into a time object."""
    try:
        return datetime.strptime(value, "%H:%M").time()
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Time must use HH:MM format, got {value!r}") from exc


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable time range with start and end datetime.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another. Touching ranges do not overlap."""
        return self.start < other.end and self.end > other.start

    def contains(self, other: "TimeRange") -> bool:
        """Check if another range lies entirely inside this one."""
        return self.start <= other.start and other.end <= self.end

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class AvailabilityWindow:
    """
    A recurring weekly time range during which a staff member takes bookings.

    Weekdays use 0=Sunday, 6=Saturday.
    """
    staff_id: int
    day_of_week: int
    start_time: time
    end_time: time
    id: Optional[int] = None

    def __post_init__(self):
        if self.day_of_week not in range(7):
            raise ValueError(f"day_of_week must be between 0 and 6, got {self.day_of_week}")
        if self.start_time >= self.end_time:
            raise ValueError(
                f"Window start {self.start_time:%H:%M} must be before end {self.end_time:%H:%M}"
            )

    def anchor_to(self, day: date) -> TimeRange:
        """Place the window's time of day onto a UTC calendar date."""
        day_start = start_of_utc_day(day)
        start = day_start.set(hour=self.start_time.hour, minute=self.start_time.minute)
        end = day_start.set(hour=self.end_time.hour, minute=self.end_time.minute)
        return TimeRange(start=start, end=end)


class BookingStatus(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Booking:
    """An existing reservation of a staff member."""
    id: Optional[int]
    tenant_id: int
    staff_id: int
    service_id: int
    customer_name: str
    customer_email: str
    time_range: TimeRange
    customer_phone: Optional[str] = None
    status: BookingStatus = BookingStatus.CONFIRMED

    @property
    def is_active(self) -> bool:
        return self.status != BookingStatus.CANCELLED


@dataclass(frozen=True)
class Customer:
    """A customer as known from the bookings of a shop."""
    name: str
    email: str
    phone: Optional[str] = None


@dataclass(frozen=True)
class Tenant:
    id: int
    slug: str
    name: str


@dataclass(frozen=True)
class Service:
    id: int
    tenant_id: int
    name: str
    duration_minutes: int
    price: Optional[float] = None


@dataclass(frozen=True)
class StaffMember:
    id: int
    tenant_id: int
    email: str
    name: str = ""

    @property
    def label(self) -> str:
        """Display name, falling back to the email address."""
        return self.name or self.email


@dataclass
class StaffSchedule:
    """
    Everything the resolver needs to know about one candidate staff member
    for a single day.
    """
    staff: StaffMember
    windows: List[AvailabilityWindow] = field(default_factory=list)
    bookings: List[Booking] = field(default_factory=list)


@dataclass(frozen=True)
class Slot:
    """
    A bookable, date-anchored interval for one staff member.
    """
    staff_id: int
    staff_label: str
    time_range: TimeRange

    @property
    def start(self) -> DateTime:
        return self.time_range.start

    @property
    def end(self) -> DateTime:
        return self.time_range.end

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with ISO-8601 UTC timestamps."""
        return {
            "staffId": self.staff_id,
            "staffLabel": self.staff_label,
            "startTime": self.start.in_timezone(UTC).to_iso8601_string(),
            "endTime": self.end.in_timezone(UTC).to_iso8601_string(),
        }

    def format_display(self, timezone: str = UTC) -> str:
        """
        Format the slot for display.
        Format: Weekday, DD.MM.YYYY | HH:mm – HH:mm (staff)
        """
        start = self.start.in_timezone(timezone)
        end = self.end.in_timezone(timezone)
        date_str = start.format("dddd, DD.MM.YYYY")
        time_str = f"{start.format('HH:mm')} – {end.format('HH:mm')}"
        return f"{date_str} | {time_str} ({self.staff_label})"
