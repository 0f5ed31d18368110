"""Shared fixtures for the test suite."""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from uptimechamps.storage.models import (
    ComputerRecord,
    DeviceUptimeRecord,
)
from uptimechamps.uptime import parse_boot_time

NOW_TEXT = "2026-10-18 12:00:00"


def make_record(
    device_id: str,
    uptime_days: int,
    username: str | None = "jdoe",
    email: str | None = "jdoe@example.com",
    name: str | None = None,
) -> DeviceUptimeRecord:
    """Build a record that booted uptime_days (and 2 hours) before NOW_TEXT."""
    now = parse_boot_time(NOW_TEXT)
    boot = now - timedelta(days=uptime_days, hours=2)
    boot_text = boot.strftime("%Y-%m-%d %H:%M:%S")
    return DeviceUptimeRecord(
        device_id=device_id,
        display_name=name if name is not None else f"Mac-{device_id}",
        serial_number=f"C02SERIAL{device_id}",
        username=username,
        email=email,
        boot_time_text=boot_text,
        boot_instant=parse_boot_time(boot_text),
        uptime_days=uptime_days,
        uptime_display=f"{uptime_days}d 2h",
    )


def computer_document(
    device_id: int,
    boot_time: Any = None,
    attribute_name: str = "Uptime",
    extra_attributes: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Build a Classic API /JSSResource/computers/id/{id} response body."""
    attributes = list(extra_attributes or [])
    if boot_time is not None:
        attributes.append(
            {"id": 7, "name": attribute_name, "type": "String", "value": boot_time}
        )
    return {
        "computer": {
            "general": {
                "id": device_id,
                "name": f"Mac-{device_id}",
                "serial_number": f"C02SERIAL{device_id}",
            },
            "location": {
                "username": f"user{device_id}",
                "email_address": f"user{device_id}@example.com",
            },
            "extension_attributes": attributes,
        }
    }


def computer_record(device_id: int, boot_time: Any = None, attribute_name: str = "Uptime") -> ComputerRecord:
    """Build a ComputerRecord as the Jamf client would return it."""
    return ComputerRecord.from_api(computer_document(device_id, boot_time, attribute_name))


def boot_text_days_ago(now_text: str, days: int, hours: int = 0) -> str:
    """Boot time string that lies the given days and hours before now_text."""
    now = parse_boot_time(now_text)
    return (now - timedelta(days=days, hours=hours)).strftime("%Y-%m-%d %H:%M:%S")
