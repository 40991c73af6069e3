"""
Shared fixtures: one shop with two barbers.

Sam works Monday 09:00-12:00, Kim works Monday 13:00-15:00 and Tuesday
09:00-10:00. Sam has one confirmed booking 10:00-10:30 on 2024-11-25 and
one cancelled booking 11:00-11:30. The windows are numbered 1-3 in the
order listed.
"""

from pathlib import Path

import pytest
import yaml

from barberslots.adapters.memory_store import InMemoryScheduleStore
from barberslots.config import AppConfig


@pytest.fixture
def config_data() -> dict:
    return {
        "display_timezone": "UTC",
        "tenants": [
            {
                "id": 1,
                "slug": "the-barber-shop",
                "name": "The Barber Shop",
                "services": [
                    {"id": 1, "name": "Haircut", "duration_minutes": 30, "price": 25.0},
                    {"id": 2, "name": "Beard trim", "duration_minutes": 15},
                ],
                "staff": [
                    {"id": 10, "email": "sam@example.com", "name": "Sam"},
                    {"id": 11, "email": "kim@example.com"},
                ],
                "availability": [
                    {"staff_id": 10, "day_of_week": 1, "start": "09:00", "end": "12:00"},
                    {"staff_id": 11, "day_of_week": 1, "start": "13:00", "end": "15:00"},
                    {"staff_id": 11, "day_of_week": 2, "start": "09:00", "end": "10:00"},
                ],
                "bookings": [
                    {
                        "id": 100,
                        "staff_id": 10,
                        "service_id": 1,
                        "customer_name": "Alex",
                        "customer_email": "alex@example.com",
                        "start": "2024-11-25T10:00:00Z",
                        "end": "2024-11-25T10:30:00Z",
                    },
                    {
                        "id": 101,
                        "staff_id": 10,
                        "service_id": 1,
                        "customer_name": "Robin",
                        "customer_email": "robin@example.com",
                        "start": "2024-11-25T11:00:00Z",
                        "end": "2024-11-25T11:30:00Z",
                        "status": "cancelled",
                    },
                ],
            },
            {
                "id": 2,
                "slug": "empty-shop",
                "name": "Empty Shop",
                "services": [{"id": 1, "name": "Haircut", "duration_minutes": 30}],
            },
        ],
    }


@pytest.fixture
def app_config(config_data) -> AppConfig:
    return AppConfig(**config_data)


@pytest.fixture
def store(app_config) -> InMemoryScheduleStore:
    return InMemoryScheduleStore.from_config(app_config)


@pytest.fixture
def config_file(tmp_path, config_data) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(config_data), encoding="utf-8")
    return path
