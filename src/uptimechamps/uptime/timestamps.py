"""
Boot timestamp parsing.

The uptime Extension Attribute reports the last boot as a plain local-time
string (``YYYY-MM-DD HH:MM:SS``) with no zone information. Values are
interpreted in the time zone of the host running the report.
"""

from __future__ import annotations

from datetime import datetime

BOOT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# Values Jamf (or the EA script) reports when no boot time is known
ABSENT_VALUES = frozenset({"", "N/A", "null"})


class TimestampParseError(ValueError):
    """Raised when a boot time string cannot be parsed."""

    def __init__(self, message: str, value: str | None = None) -> None:
        self.value = value
        super().__init__(message)


class MissingTimestampError(TimestampParseError):
    """Raised when the attribute holds an empty or placeholder value."""

    pass


def parse_boot_time(text: str | None) -> datetime:
    """
    Parse a boot time string into an aware local datetime.

    Args:
        text: Raw Extension Attribute value.

    Returns:
        Timezone-aware datetime in the host's local zone.

    Raises:
        MissingTimestampError: If the value is empty, "N/A" or "null".
        TimestampParseError: If the value is not in ``YYYY-MM-DD HH:MM:SS`` form.
    """
    if text is None:
        raise MissingTimestampError("Boot time is not set", value=None)

    value = text.strip()
    if value in ABSENT_VALUES:
        raise MissingTimestampError(f"Boot time is absent ({value!r})", value=text)

    try:
        naive = datetime.strptime(value, BOOT_TIME_FORMAT)
    except ValueError as e:
        raise TimestampParseError(
            f"Invalid boot time {value!r}: expected YYYY-MM-DD HH:MM:SS",
            value=text,
        ) from e

    # astimezone() on a naive datetime assumes local time
    return naive.astimezone()
