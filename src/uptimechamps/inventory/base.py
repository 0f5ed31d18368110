"""
Base inventory source interface.

This module provides the abstract base class for device inventory sources,
along with the error classes raised while talking to them. The report only
needs three things from a source: a token, the list of computers, and one
computer's full record.

Design Principles:
    - All API calls are read-only (no write operations)
    - Calls are sequential with a fixed pause between them
    - Every API call is logged
    - The token is obtained once per run and not refreshed
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uptimechamps.config.settings import Settings
    from uptimechamps.storage.models import (
        ComputerRecord,
        ComputerSummary,
        ExtensionAttribute,
    )


# -----------------------------------------------------------------------------
# Error Classes
# -----------------------------------------------------------------------------


class InventoryError(Exception):
    """Base exception for inventory source errors."""

    def __init__(self, message: str, platform: str | None = None) -> None:
        self.message = message
        self.platform = platform
        super().__init__(f"[{platform}] {message}" if platform else message)


class AuthenticationError(InventoryError):
    """
    Raised when authentication with the inventory source fails.

    This includes rejected client credentials and missing tokens in the
    token response. Never retried.
    """

    pass


class InventoryConnectionError(InventoryError):
    """
    Raised when the inventory source cannot be reached.

    This includes network errors, DNS failures, and timeouts.
    """

    pass


class EnumerationError(InventoryError):
    """Raised when the list of all computers cannot be retrieved."""

    pass


class FetchError(InventoryError):
    """
    Raised when a single computer record cannot be retrieved.

    Attributes:
        device_id: The computer that failed.
    """

    def __init__(
        self,
        message: str,
        platform: str | None = None,
        device_id: str | None = None,
    ) -> None:
        super().__init__(message, platform)
        self.device_id = device_id


class DeviceNotFoundError(FetchError):
    """Raised when the requested computer does not exist."""

    pass


# -----------------------------------------------------------------------------
# Base Inventory Source
# -----------------------------------------------------------------------------


class InventorySource(ABC):
    """
    Abstract base class for inventory sources.

    Features:
        - Fixed delay between API calls
        - Logging of all API calls

    Attributes:
        platform: String identifier for the source (e.g., "jamf").
        settings: Settings object containing connection configuration.
        logger: Logger instance for this source.

    Rate Limiting:
        Subclasses should call _rate_limit() before each API call.
    """

    platform: str = "base"

    # Default delay in seconds between API calls
    default_rate_limit_delay: float = 0.1

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.logger = logging.getLogger(f"uptimechamps.inventory.{self.platform}")

        self._last_api_call: float = 0.0
        self._rate_limit_delay = self.default_rate_limit_delay

    @abstractmethod
    def authenticate(self) -> str:
        """
        Obtain a bearer token.

        Returns:
            Access token string.

        Raises:
            AuthenticationError: If the credentials are rejected.
            InventoryConnectionError: If the source cannot be reached.
        """
        pass

    @abstractmethod
    def list_computers(self) -> list[ComputerSummary]:
        """
        Enumerate every managed computer.

        Raises:
            EnumerationError: If the listing fails.
        """
        pass

    @abstractmethod
    def get_computer(self, device_id: str) -> ComputerRecord:
        """
        Fetch one computer's full record.

        Raises:
            FetchError: If the record cannot be retrieved or parsed.
        """
        pass

    @abstractmethod
    def list_extension_attributes(self) -> list[ExtensionAttribute]:
        """List the computer Extension Attribute definitions."""
        pass

    def list_computer_ids(self) -> list[str]:
        """Enumerate every managed computer ID, in listing order."""
        return [computer.id for computer in self.list_computers()]

    def _rate_limit(self) -> None:
        """
        Apply rate limiting before an API call.

        Sleeps if necessary to maintain the configured delay between calls.
        """
        now = time.time()
        elapsed = now - self._last_api_call
        if elapsed < self._rate_limit_delay:
            sleep_time = self._rate_limit_delay - elapsed
            self.logger.debug(f"Rate limiting: sleeping {sleep_time:.3f}s")
            time.sleep(sleep_time)
        self._last_api_call = time.time()

    def _log_api_call(
        self,
        method: str,
        endpoint: str,
        status_code: int | None = None,
        duration_ms: float | None = None,
    ) -> None:
        """
        Log an API call.

        Args:
            method: HTTP method (GET, POST, etc.).
            endpoint: API endpoint path.
            status_code: Response status code (if available).
            duration_ms: Request duration in milliseconds.
        """
        msg = f"API call: {method} {endpoint}"
        if status_code is not None:
            msg += f" -> {status_code}"
        if duration_ms is not None:
            msg += f" ({duration_ms:.0f}ms)"
        self.logger.info(msg)
