"""
Tests for YAML configuration loading and validation.
"""

import copy
from datetime import time

import pytest
import yaml

from barberslots.config import AppConfig, AvailabilityConfig, BookingConfig, parse_time_of_day


def _tenant(data: dict) -> dict:
    return data["tenants"][0]


class TestAppConfig:
    """Tests for AppConfig."""

    def test_load_from_yaml(self, config_file):
        config = AppConfig.load_from_yaml(config_file)

        shop = config.find_tenant("the-barber-shop")
        assert shop is not None
        assert [s.name for s in shop.services] == ["Haircut", "Beard trim"]
        assert shop.availability[0].to_domain().start_time == time(9, 0)
        assert config.find_tenant("missing") is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppConfig.load_from_yaml(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("tenants: [unclosed", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(path)

    def test_root_must_be_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")

        with pytest.raises(ValueError, match="mapping"):
            AppConfig.load_from_yaml(path)

    def test_save_round_trip(self, tmp_path, app_config):
        path = tmp_path / "saved.yaml"

        app_config.save_to_yaml(path)
        reloaded = AppConfig.load_from_yaml(path)

        assert reloaded == app_config
        assert yaml.safe_load(path.read_text())["tenants"][0]["bookings"][1]["status"] == "cancelled"

    def test_unknown_timezone(self, config_data):
        config_data["display_timezone"] = "Mars/Olympus"

        with pytest.raises(ValueError):
            AppConfig(**config_data)


class TestValidation:
    """Invalid schedule data is rejected at load time."""

    @pytest.mark.parametrize(
        "path, value, message",
        [
            (("services", 0, "duration_minutes"), 0, "greater than zero"),
            (("availability", 0, "day_of_week"), 7, "between 0 and 6"),
            (("availability", 0, "start"), "9am", "HH:MM"),
            (("availability", 0, "end"), "08:00", "later than start"),
            (("availability", 0, "staff_id"), 99, "unknown staff"),
            (("bookings", 0, "service_id"), 99, "unknown service"),
            (("bookings", 0, "end"), "2024-11-25T09:00:00Z", "end after it starts"),
            (("bookings", 1, "id"), 100, "Duplicate booking id"),
            (("staff", 1, "id"), 10, "Duplicate staff id"),
        ],
    )
    def test_invalid_tenant_data(self, config_data, path, value, message):
        data = copy.deepcopy(config_data)
        section, index, key = path
        _tenant(data)[section][index][key] = value

        with pytest.raises(ValueError, match=message):
            AppConfig(**data)

    def test_duplicate_tenant_slug(self, config_data):
        config_data["tenants"][1]["slug"] = "the-barber-shop"

        with pytest.raises(ValueError, match="Duplicate tenant slug"):
            AppConfig(**config_data)

    def test_staff_ids_unique_across_tenants(self, config_data):
        config_data["tenants"][1]["staff"] = [{"id": 10, "email": "other@example.com"}]

        with pytest.raises(ValueError, match="Duplicate staff id"):
            AppConfig(**config_data)

    def test_booking_ids_unique_across_tenants(self, config_data):
        """Two shops may not both own booking 100."""
        config_data["tenants"][1]["staff"] = [{"id": 20, "email": "lee@example.com"}]
        config_data["tenants"][1]["bookings"] = [
            {
                "id": 100,
                "staff_id": 20,
                "service_id": 1,
                "customer_name": "Lee",
                "customer_email": "lee@example.com",
                "start": "2024-11-25T10:00:00Z",
                "end": "2024-11-25T10:30:00Z",
            }
        ]

        with pytest.raises(ValueError, match="Duplicate booking id"):
            AppConfig(**config_data)

    @pytest.mark.parametrize("start", ["09:00", "2024-11-25"])
    def test_partial_booking_timestamp(self, config_data, start):
        _tenant(config_data)["bookings"][0]["start"] = start

        with pytest.raises(ValueError):
            AppConfig(**config_data)

    def test_window_ids_unique_across_tenants(self, config_data):
        _tenant(config_data)["availability"][0]["id"] = 5
        config_data["tenants"][1]["staff"] = [{"id": 20, "email": "lee@example.com"}]
        config_data["tenants"][1]["availability"] = [
            {"id": 5, "staff_id": 20, "day_of_week": 1, "start": "09:00", "end": "10:00"}
        ]

        with pytest.raises(ValueError, match="Duplicate availability id"):
            AppConfig(**config_data)


class TestConversions:
    """Config entries convert to domain objects."""

    def test_parse_time_of_day(self):
        assert parse_time_of_day("07:45") == time(7, 45)
        with pytest.raises(ValueError):
            parse_time_of_day("25:00")

    def test_booking_round_trip(self, config_data):
        booking_config = BookingConfig(**_tenant(config_data)["bookings"][0])

        booking = booking_config.to_domain(tenant_id=1)
        again = BookingConfig.from_domain(booking)

        assert again.to_domain(tenant_id=1) == booking

    def test_windows_without_id_are_numbered(self, config_data):
        _tenant(config_data)["availability"][1]["id"] = 7

        shop = AppConfig(**config_data).find_tenant("the-barber-shop")

        assert [w.id for w in shop.availability] == [8, 7, 9]

    def test_window_round_trip(self, app_config):
        window_config = app_config.tenants[0].availability[2]

        again = AvailabilityConfig.from_domain(window_config.to_domain())

        assert again == window_config
        assert again.start == "09:00"
