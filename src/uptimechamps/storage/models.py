"""
Data models for uptime reporting.

This module defines the records that flow through a report run: the typed
view of a Jamf computer document, a single uptime observation, and the scan
decision made at the start of each run.

Model Design Decisions:
    - Device IDs are strings everywhere; Jamf's integer IDs are converted on read
    - Timestamps are timezone-aware datetimes
    - Optional Jamf fields are None, never placeholder strings like "N/A"
    - Records are frozen; a scan creates new records rather than updating old ones
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class ExtensionAttribute:
    """A named custom inventory field on a computer record."""

    id: str
    name: str
    value: str | None
    type: str | None = None
    enabled: bool | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExtensionAttribute:
        value = data.get("value")
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            value=None if value is None else str(value),
            type=data.get("type"),
        )


@dataclass(frozen=True)
class ComputerSummary:
    """One entry from the computer listing: id, name, serial."""

    id: str
    name: str
    serial_number: str | None = None


@dataclass(frozen=True)
class ComputerRecord:
    """
    Typed view of a Classic API computer document.

    Attributes:
        id: Jamf computer ID.
        name: Computer name from the general section.
        serial_number: Hardware serial number.
        username: Assigned user from the location section.
        email: Assigned user's email address.
        extension_attributes: All Extension Attributes reported for the computer.
    """

    id: str
    name: str | None
    serial_number: str | None
    username: str | None = None
    email: str | None = None
    extension_attributes: tuple[ExtensionAttribute, ...] = field(default_factory=tuple)

    @classmethod
    def from_api(cls, document: dict[str, Any], fallback_id: str | None = None) -> ComputerRecord:
        """
        Build a record from a ``/JSSResource/computers/...`` response body.

        Args:
            document: Parsed JSON body (with a top-level "computer" key).
            fallback_id: ID to use if the document does not carry one.

        Returns:
            ComputerRecord.

        Raises:
            ValueError: If the document has no "computer" object, or one of
                its sections has the wrong shape.
        """
        computer = document.get("computer") if isinstance(document, dict) else None
        if not isinstance(computer, dict):
            raise ValueError("Response does not contain a computer record")

        general = computer.get("general") or {}
        location = computer.get("location") or {}
        attributes = computer.get("extension_attributes") or []
        if not isinstance(general, dict):
            raise ValueError("Computer 'general' section is not an object")
        if not isinstance(location, dict):
            raise ValueError("Computer 'location' section is not an object")
        if not isinstance(attributes, list):
            raise ValueError("Computer 'extension_attributes' is not a list")

        computer_id = general.get("id", fallback_id)
        return cls(
            id=str(computer_id) if computer_id is not None else "",
            name=_optional_str(general.get("name")),
            serial_number=_optional_str(general.get("serial_number")),
            username=_optional_str(location.get("username")),
            email=_optional_str(location.get("email_address")),
            extension_attributes=tuple(
                ExtensionAttribute.from_dict(ea)
                for ea in attributes
                if isinstance(ea, dict)
            ),
        )

    def attribute_value(self, name: str) -> str | None:
        """
        Get an Extension Attribute value by exact, case-sensitive name.

        Returns:
            The first matching attribute's value, or None if absent.
        """
        for attribute in self.extension_attributes:
            if attribute.name == name:
                return attribute.value
        return None


@dataclass(frozen=True)
class DeviceUptimeRecord:
    """
    One uptime observation of a device.

    Only built for devices with a parseable boot time that is not in the
    future, so every record is rankable.
    """

    device_id: str
    display_name: str | None
    serial_number: str | None
    username: str | None
    email: str | None
    boot_time_text: str
    boot_instant: datetime
    uptime_days: int
    uptime_display: str


class ScanMode(Enum):
    """Which machines a run queries."""

    FULL = "full"
    QUICK = "quick"


@dataclass(frozen=True)
class ScanDecision:
    """
    Outcome of scan planning for one run.

    Attributes:
        mode: FULL enumerates every computer, QUICK re-checks cached ones.
        candidate_ids: Device IDs to fetch, in order.
        cache_age_days: Whole days since the cache was written (None if no cache).
        reason: Short explanation of why this mode was chosen.
    """

    mode: ScanMode
    candidate_ids: list[str]
    cache_age_days: int | None = None
    reason: str = ""

    @property
    def is_quick(self) -> bool:
        return self.mode is ScanMode.QUICK


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
