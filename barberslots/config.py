"""
Configuration management using Pydantic models loaded from YAML.

The configuration file describes the shops served by this instance: their
services, staff, weekly availability windows and existing bookings.
"""

from pathlib import Path
from typing import List, Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import (
    AvailabilityWindow,
    Booking,
    BookingStatus,
    Service,
    StaffMember,
    Tenant,
    TimeRange,
    parse_time_of_day,
)


class ServiceConfig(BaseModel):
    """A bookable service of a shop."""
    id: int
    name: str
    duration_minutes: int
    price: Optional[float] = None

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Ensure service duration is positive."""
        if value <= 0:
            raise ValueError("duration_minutes must be greater than zero")
        return value

    def to_domain(self, tenant_id: int) -> Service:
        return Service(
            id=self.id,
            tenant_id=tenant_id,
            name=self.name,
            duration_minutes=self.duration_minutes,
            price=self.price,
        )


class StaffConfig(BaseModel):
    """Staff member configuration."""
    id: int
    email: str
    name: str = ""

    def to_domain(self, tenant_id: int) -> StaffMember:
        return StaffMember(id=self.id, tenant_id=tenant_id, email=self.email, name=self.name)


class AvailabilityConfig(BaseModel):
    """Weekly availability window (0=Sunday, 6=Saturday)."""
    id: Optional[int] = None
    staff_id: int
    day_of_week: int
    start: str
    end: str

    @field_validator("day_of_week")
    @classmethod
    def validate_day(cls, value: int) -> int:
        """Validate weekday is between 0 and 6."""
        if value not in range(7):
            raise ValueError(f"day_of_week must be between 0 and 6, got {value}")
        return value

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, value: str) -> str:
        parse_time_of_day(value)
        return value

    @model_validator(mode="after")
    def validate_window_order(self) -> "AvailabilityConfig":
        """Ensure the window opens before it closes."""
        if parse_time_of_day(self.end) <= parse_time_of_day(self.start):
            raise ValueError(f"Window end {self.end} must be later than start {self.start}")
        return self

    def to_domain(self) -> AvailabilityWindow:
        return AvailabilityWindow(
            id=self.id,
            staff_id=self.staff_id,
            day_of_week=self.day_of_week,
            start_time=parse_time_of_day(self.start),
            end_time=parse_time_of_day(self.end),
        )

    @classmethod
    def from_domain(cls, window: AvailabilityWindow) -> "AvailabilityConfig":
        return cls(
            id=window.id,
            staff_id=window.staff_id,
            day_of_week=window.day_of_week,
            start=window.start_time.strftime("%H:%M"),
            end=window.end_time.strftime("%H:%M"),
        )


class BookingConfig(BaseModel):
    """Existing booking, timestamps in ISO 8601."""
    id: int
    staff_id: int
    service_id: int
    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None
    start: str
    end: str
    status: BookingStatus = BookingStatus.CONFIRMED

    @field_validator("start", "end")
    @classmethod
    def validate_timestamp(cls, value: str) -> str:
        try:
            parsed = pendulum.parse(value, exact=True)
        except ValueError as exc:
            raise ValueError(f"Invalid timestamp {value!r}") from exc
        if not isinstance(parsed, pendulum.DateTime):
            raise ValueError(f"Timestamp must include date and time, got {value!r}")
        return value

    @model_validator(mode="after")
    def validate_booking_order(self) -> "BookingConfig":
        if pendulum.parse(self.end) <= pendulum.parse(self.start):
            raise ValueError(f"Booking {self.id} must end after it starts")
        return self

    def to_domain(self, tenant_id: int) -> Booking:
        return Booking(
            id=self.id,
            tenant_id=tenant_id,
            staff_id=self.staff_id,
            service_id=self.service_id,
            customer_name=self.customer_name,
            customer_email=self.customer_email,
            customer_phone=self.customer_phone,
            time_range=TimeRange(
                start=pendulum.parse(self.start).in_timezone("UTC"),
                end=pendulum.parse(self.end).in_timezone("UTC"),
            ),
            status=self.status,
        )

    @classmethod
    def from_domain(cls, booking: Booking) -> "BookingConfig":
        return cls(
            id=booking.id,
            staff_id=booking.staff_id,
            service_id=booking.service_id,
            customer_name=booking.customer_name,
            customer_email=booking.customer_email,
            customer_phone=booking.customer_phone,
            start=booking.time_range.start.in_timezone("UTC").to_iso8601_string(),
            end=booking.time_range.end.in_timezone("UTC").to_iso8601_string(),
            status=booking.status,
        )


class TenantConfig(BaseModel):
    """A shop with everything it owns."""
    id: int
    slug: str
    name: str
    services: List[ServiceConfig] = Field(default_factory=list)
    staff: List[StaffConfig] = Field(default_factory=list)
    availability: List[AvailabilityConfig] = Field(default_factory=list)
    bookings: List[BookingConfig] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_references(self) -> "TenantConfig":
        """Ensure ids are unique and every reference points to a known entity."""
        service_ids = _unique_ids("service", [s.id for s in self.services])
        staff_ids = _unique_ids("staff", [s.id for s in self.staff])
        _unique_ids("booking", [b.id for b in self.bookings])

        for window in self.availability:
            if window.staff_id not in staff_ids:
                raise ValueError(f"Availability references unknown staff id {window.staff_id}")

        for booking in self.bookings:
            if booking.staff_id not in staff_ids:
                raise ValueError(f"Booking {booking.id} references unknown staff id {booking.staff_id}")
            if booking.service_id not in service_ids:
                raise ValueError(
                    f"Booking {booking.id} references unknown service id {booking.service_id}"
                )
        return self

    def to_domain(self) -> Tenant:
        return Tenant(id=self.id, slug=self.slug, name=self.name)


class AppConfig(BaseModel):
    """Application configuration."""
    display_timezone: str = "UTC"
    tenants: List[TenantConfig] = Field(default_factory=list)

    @field_validator("display_timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("tenants")
    @classmethod
    def validate_tenants(cls, value: List[TenantConfig]) -> List[TenantConfig]:
        """
        Ensure tenant slugs and ids are unique, and that staff, booking and
        window ids are unique across tenants (the store keys them globally).
        """
        _unique_ids("tenant", [tenant.id for tenant in value])
        seen_slugs: set[str] = set()
        for tenant in value:
            if tenant.slug in seen_slugs:
                raise ValueError(f"Duplicate tenant slug detected: {tenant.slug}")
            seen_slugs.add(tenant.slug)
        _unique_ids("staff", [staff.id for tenant in value for staff in tenant.staff])
        _unique_ids("booking", [booking.id for tenant in value for booking in tenant.bookings])
        _unique_ids(
            "availability",
            [w.id for tenant in value for w in tenant.availability if w.id is not None],
        )
        return value

    @model_validator(mode="after")
    def assign_window_ids(self) -> "AppConfig":
        """Number windows without an id after the highest id in use."""
        windows = [w for tenant in self.tenants for w in tenant.availability]
        next_id = max((w.id for w in windows if w.id is not None), default=0) + 1
        for window in windows:
            if window.id is None:
                window.id = next_id
                next_id += 1
        return self

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    def save_to_yaml(self, config_path: Path) -> None:
        """Write the configuration back to a YAML file."""
        data = self.model_dump(mode="json", exclude_none=True)
        with open(config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)

    def find_tenant(self, slug: str) -> TenantConfig | None:
        """Find a tenant by its slug."""
        for tenant in self.tenants:
            if tenant.slug == slug:
                return tenant
        return None


def _unique_ids(kind: str, ids: List[int]) -> set[int]:
    seen: set[int] = set()
    for value in ids:
        if value in seen:
            raise ValueError(f"Duplicate {kind} id detected: {value}")
        seen.add(value)
    return seen


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
