"""Uptime arithmetic."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

SECONDS_PER_DAY = 86400
SECONDS_PER_HOUR = 3600


class InvalidUptimeError(ValueError):
    """Raised when a boot time lies after the reference time."""

    pass


@dataclass(frozen=True)
class Uptime:
    """
    Elapsed time since boot, floored to whole hours.

    Attributes:
        days: Whole days since boot.
        hours: Whole hours remaining after the days.
        display: Human-readable form, e.g. "12d 3h".
    """

    days: int
    hours: int

    @property
    def display(self) -> str:
        return f"{self.days}d {self.hours}h"


def compute_uptime(boot: datetime, now: datetime) -> Uptime:
    """
    Compute uptime from a boot instant.

    Args:
        boot: When the machine booted (timezone-aware).
        now: Reference time (timezone-aware).

    Returns:
        Uptime with whole days and remaining hours.

    Raises:
        InvalidUptimeError: If boot is after now (clock skew or bad data).
    """
    elapsed = (now - boot).total_seconds()
    if elapsed < 0:
        raise InvalidUptimeError(
            f"Boot time {boot.isoformat()} is after {now.isoformat()}"
        )

    elapsed_seconds = int(elapsed)
    return Uptime(
        days=elapsed_seconds // SECONDS_PER_DAY,
        hours=(elapsed_seconds % SECONDS_PER_DAY) // SECONDS_PER_HOUR,
    )
