"""
Device inventory sources.

An inventory source authenticates with a device-management platform,
enumerates managed computers, and returns individual computer records with
their Extension Attributes.

Supported platforms:
    - Jamf Pro (Classic API computer records)
"""

from uptimechamps.inventory.base import (
    AuthenticationError,
    DeviceNotFoundError,
    EnumerationError,
    FetchError,
    InventoryConnectionError,
    InventoryError,
    InventorySource,
)
from uptimechamps.inventory.jamf import JamfClient

__all__ = [
    # Base class
    "InventorySource",
    # Error classes
    "InventoryError",
    "AuthenticationError",
    "InventoryConnectionError",
    "EnumerationError",
    "FetchError",
    "DeviceNotFoundError",
    # Platform sources
    "JamfClient",
]
