"""
Record models and the top-N uptime cache.
"""

from uptimechamps.storage.cache import CacheError, RankedCache
from uptimechamps.storage.models import (
    ComputerRecord,
    ComputerSummary,
    DeviceUptimeRecord,
    ExtensionAttribute,
    ScanDecision,
    ScanMode,
)

__all__ = [
    # Cache
    "RankedCache",
    "CacheError",
    # Models
    "ComputerRecord",
    "ComputerSummary",
    "DeviceUptimeRecord",
    "ExtensionAttribute",
    "ScanDecision",
    "ScanMode",
]
