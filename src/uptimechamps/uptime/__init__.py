"""
Boot time parsing and uptime calculation.
"""

from uptimechamps.uptime.calculator import (
    InvalidUptimeError,
    Uptime,
    compute_uptime,
)
from uptimechamps.uptime.timestamps import (
    BOOT_TIME_FORMAT,
    MissingTimestampError,
    TimestampParseError,
    parse_boot_time,
)

__all__ = [
    "BOOT_TIME_FORMAT",
    "InvalidUptimeError",
    "MissingTimestampError",
    "TimestampParseError",
    "Uptime",
    "compute_uptime",
    "parse_boot_time",
]
