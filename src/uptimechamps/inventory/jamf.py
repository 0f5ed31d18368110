"""
Jamf Pro inventory source.

Reads computer inventory from Jamf Pro for the uptime report. All API calls
are read-only.

Required Jamf Permissions:
    - Read access to Computers
    - Read access to Computer Extension Attributes

Authentication:
    OAuth client credentials from the settings:
    - JAMF_URL: Your Jamf Pro URL (e.g., "https://your-org.jamfcloud.com")
    - JAMF_CLIENT_ID: API client ID
    - JAMF_CLIENT_SECRET: API client secret

    API clients are created in Jamf Pro under:
    Settings > System > API Roles and Clients

API Notes:
    Computer records are read from the Classic API (/JSSResource/*) because
    it returns Extension Attributes by name in a single call per computer.

    The token is requested once and reused for the whole run. It is not
    refreshed, so a scan that outlives the token's lifetime (typically 30
    minutes) will see its remaining device fetches fail.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import requests

from uptimechamps.inventory.base import (
    AuthenticationError,
    DeviceNotFoundError,
    EnumerationError,
    FetchError,
    InventoryConnectionError,
    InventoryError,
    InventorySource,
)
from uptimechamps.storage.models import (
    ComputerRecord,
    ComputerSummary,
    ExtensionAttribute,
)

if TYPE_CHECKING:
    from uptimechamps.config.settings import Settings


class JamfClient(InventorySource):
    """
    Jamf Pro inventory source.

    Example:
        client = JamfClient(settings)
        client.authenticate()
        for computer_id in client.list_computer_ids():
            record = client.get_computer(computer_id)
            print(record.name, record.attribute_value("Uptime"))
    """

    platform = "jamf"

    def __init__(self, settings: Settings) -> None:
        """
        Initialize the Jamf client.

        Args:
            settings: Settings object containing Jamf URL and credentials.
        """
        super().__init__(settings)
        self._rate_limit_delay = settings.jamf.request_delay
        self._timeout = settings.jamf.timeout
        self._base_url: str | None = None
        self._access_token: str | None = None
        self._session: requests.Session | None = None

    def _get_session(self) -> requests.Session:
        """
        Get or create a requests session.

        Returns:
            Configured requests.Session.
        """
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def _get_base_url(self) -> str:
        """
        Get the Jamf Pro base URL.

        Returns:
            Base URL string, https with no trailing slash.

        Raises:
            AuthenticationError: If URL is not configured.
        """
        if self._base_url is not None:
            return self._base_url

        url = self.settings.jamf.url.strip()
        if not url:
            raise AuthenticationError("Jamf URL is not configured", platform=self.platform)
        url = url.rstrip("/")
        if not url.startswith("https://"):
            if url.startswith("http://"):
                url = "https://" + url[7:]
            else:
                url = "https://" + url

        self._base_url = url
        return self._base_url

    def authenticate(self) -> str:
        """
        Get an OAuth access token.

        The token is cached on the client and returned on later calls.

        Returns:
            Access token string.

        Raises:
            AuthenticationError: If authentication fails.
            InventoryConnectionError: If Jamf cannot be reached.
        """
        if self._access_token:
            return self._access_token

        base_url = self._get_base_url()
        session = self._get_session()
        token_url = f"{base_url}/api/oauth/token"

        try:
            self._rate_limit()
            response = session.post(
                token_url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.settings.jamf.client_id,
                    "client_secret": self.settings.jamf.client_secret,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self._timeout,
            )
            self._log_api_call("POST", "/api/oauth/token", response.status_code)

            if response.status_code in (400, 401, 403):
                raise AuthenticationError(
                    "Jamf authentication failed. Check client credentials.",
                    platform=self.platform,
                )

            response.raise_for_status()
            data = response.json()

        except requests.exceptions.ConnectionError as e:
            raise InventoryConnectionError(
                f"Failed to connect to Jamf: {e}",
                platform=self.platform,
            ) from e
        except requests.exceptions.Timeout as e:
            raise InventoryConnectionError(
                f"Jamf token request timed out: {e}",
                platform=self.platform,
            ) from e
        except (requests.exceptions.RequestException, ValueError) as e:
            raise AuthenticationError(
                f"Failed to retrieve Bearer token: {e}",
                platform=self.platform,
            ) from e

        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise AuthenticationError(
                "Failed to retrieve Bearer token: no access_token in response",
                platform=self.platform,
            )

        self._access_token = token
        expires_in = data.get("expires_in")
        self.logger.debug(f"Jamf token obtained, expires in {expires_in}s")
        return self._access_token

    def _api_request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """
        Make an authenticated API request to Jamf.

        Args:
            method: HTTP method.
            endpoint: API endpoint path.
            params: Query parameters.

        Returns:
            Response JSON data ({} for an empty body).

        Raises:
            AuthenticationError: If the token is rejected.
            DeviceNotFoundError: On 404.
            InventoryConnectionError: On connection failure or timeout.
            InventoryError: On any other HTTP error or a non-JSON body.
        """
        base_url = self._get_base_url()
        token = self.authenticate()
        session = self._get_session()

        url = f"{base_url}{endpoint}"
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }

        self._rate_limit()
        start_time = time.time()

        try:
            response = session.request(
                method, url, params=params, headers=headers, timeout=self._timeout
            )
        except requests.exceptions.ConnectionError as e:
            raise InventoryConnectionError(
                f"Failed to connect to Jamf: {e}",
                platform=self.platform,
            ) from e
        except requests.exceptions.Timeout as e:
            raise InventoryConnectionError(
                f"Jamf request timed out: {e}",
                platform=self.platform,
            ) from e
        except requests.exceptions.RequestException as e:
            raise InventoryError(f"Jamf request failed: {e}", platform=self.platform) from e

        duration_ms = (time.time() - start_time) * 1000
        self._log_api_call(method, endpoint, response.status_code, duration_ms)

        if response.status_code == 401:
            raise AuthenticationError(
                "Jamf rejected the access token",
                platform=self.platform,
            )

        if response.status_code == 403:
            raise AuthenticationError(
                "Jamf permission denied. Check API client privileges.",
                platform=self.platform,
            )

        if response.status_code == 404:
            raise DeviceNotFoundError(f"Not found: {endpoint}", platform=self.platform)

        if response.status_code >= 400:
            raise InventoryError(
                f"Jamf returned HTTP {response.status_code} for {endpoint}",
                platform=self.platform,
            )

        if not response.text:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise InventoryError(
                f"Invalid JSON response from {endpoint}",
                platform=self.platform,
            ) from e

    def list_computers(self) -> list[ComputerSummary]:
        """
        Enumerate every managed computer.

        Returns:
            ComputerSummary for each computer, in Jamf's listing order.

        Raises:
            AuthenticationError: If the token is rejected.
            EnumerationError: If the listing cannot be retrieved.
        """
        try:
            data = self._api_request("GET", "/JSSResource/computers")
        except AuthenticationError:
            raise
        except InventoryError as e:
            raise EnumerationError(
                f"Failed to retrieve computer list: {e.message}",
                platform=self.platform,
            ) from e

        computers = data.get("computers") if isinstance(data, dict) else None
        if not isinstance(computers, list):
            raise EnumerationError(
                "Failed to retrieve computer list: unexpected response",
                platform=self.platform,
            )

        summaries = []
        for computer in computers:
            if not isinstance(computer, dict) or computer.get("id") is None:
                continue
            summaries.append(
                ComputerSummary(
                    id=str(computer["id"]),
                    name=str(computer.get("name") or ""),
                    serial_number=computer.get("serial_number"),
                )
            )
        return summaries

    def get_computer(self, device_id: str) -> ComputerRecord:
        """
        Fetch a computer's full record by Jamf ID.

        Raises:
            FetchError: If the record cannot be retrieved or parsed.
        """
        return self._get_computer_record(f"id/{quote(str(device_id), safe='')}", str(device_id))

    def get_computer_by_serial(self, serial_number: str) -> ComputerRecord:
        """
        Fetch a computer's full record by serial number.

        Raises:
            FetchError: If the record cannot be retrieved or parsed.
        """
        return self._get_computer_record(
            f"serialnumber/{quote(serial_number, safe='')}", serial_number
        )

    def _get_computer_record(self, lookup: str, identifier: str) -> ComputerRecord:
        endpoint = f"/JSSResource/computers/{lookup}"
        try:
            data = self._api_request("GET", endpoint)
        except DeviceNotFoundError as e:
            raise DeviceNotFoundError(
                f"Computer {identifier} not found",
                platform=self.platform,
                device_id=identifier,
            ) from e
        except InventoryError as e:
            raise FetchError(
                f"Failed to fetch computer {identifier}: {e.message}",
                platform=self.platform,
                device_id=identifier,
            ) from e

        try:
            return ComputerRecord.from_api(data, fallback_id=identifier)
        except ValueError as e:
            raise FetchError(
                f"Invalid record for computer {identifier}: {e}",
                platform=self.platform,
                device_id=identifier,
            ) from e

    def list_extension_attributes(self) -> list[ExtensionAttribute]:
        """
        List computer Extension Attribute definitions.

        Definitions carry no value, only id, name and whether they are enabled.
        """
        data = self._api_request("GET", "/JSSResource/computerextensionattributes")
        definitions = data.get("computer_extension_attributes") if isinstance(data, dict) else None
        if not isinstance(definitions, list):
            raise InventoryError(
                "Failed to retrieve extension attributes: unexpected response",
                platform=self.platform,
            )

        return [
            ExtensionAttribute(
                id=str(ea.get("id", "")),
                name=str(ea.get("name", "")),
                value=None,
                enabled=bool(ea.get("enabled")),
            )
            for ea in definitions
            if isinstance(ea, dict)
        ]
