"""HTTP client for the webfilter master."""

import json
import logging
from typing import Any, Dict, List, Optional

import requests

from .config import DEFAULT_MASTER, DEFAULT_TIMEOUT, master_url
from .exceptions import ClientInputError, TransportError

logger = logging.getLogger(__name__)


class MasterClient:
    """Client for the master's decision endpoint and admin commands.

    Failed calls are never retried; callers decide whether to try again.
    """

    def __init__(self, addr: str = DEFAULT_MASTER, timeout: int = DEFAULT_TIMEOUT) -> None:
        """
        Initialize the client.

        Args:
            addr: Master address as host:port
            timeout: Request timeout in seconds
        """
        self.base_url = master_url(addr)
        self.timeout = timeout
        self.session = requests.Session()

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "MasterClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def request(
        self,
        method: str,
        endpoint: str,
        json_body: Optional[Dict[str, Any]] = None,
        form: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        """
        Make an HTTP request to the master.

        Args:
            method: HTTP method (GET, POST)
            endpoint: Endpoint path
            json_body: Optional JSON request body
            form: Optional form-encoded request body

        Returns:
            The response (2xx or a redirect)

        Raises:
            ClientInputError: If the master rejected the command (4xx)
            TransportError: If the master is unreachable or failed (5xx)
        """
        url = f"{self.base_url}{endpoint}"
        try:
            response = self.session.request(
                method,
                url,
                json=json_body,
                data=form,
                timeout=self.timeout,
                allow_redirects=False,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Request to master failed: {method} {endpoint}: {e}")
            raise TransportError(f"{method} {url}: {e}")

        if 400 <= response.status_code < 500:
            raise ClientInputError(response.text.strip() or f"HTTP {response.status_code}")
        if response.status_code >= 500:
            raise TransportError(f"{method} {url}: HTTP {response.status_code}")
        return response

    def _json(self, response: requests.Response) -> Any:
        try:
            return response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise TransportError(f"Invalid JSON from master: {e}")

    # -------------------------------------------------------------------------
    # DECISIONS
    # -------------------------------------------------------------------------

    def validate(self, host: str) -> bool:
        """
        Ask the master whether a connection to host is allowed.

        Returns:
            True if allowed, False if blocked

        Raises:
            TransportError: If the call could not be completed
        """
        response = self.request("POST", "/rpc/validate", json_body={"host": host})
        data = self._json(response)
        if not isinstance(data, dict) or not isinstance(data.get("ok"), bool):
            raise TransportError(f"Unexpected response from master: {data!r}")
        return data["ok"]

    # -------------------------------------------------------------------------
    # ADMIN COMMANDS
    # -------------------------------------------------------------------------

    def add(self, suffix: str) -> None:
        """Add a blocked suffix."""
        self.request("POST", "/admin/add", form={"suffix": suffix})

    def open(self, suffix: str, minutes: int) -> None:
        """Open suffix for minutes. Unknown suffixes are silently ignored."""
        self.request("POST", "/admin/open", form={"suffix": suffix, "mins": str(minutes)})

    def close_host(self, suffix: str) -> None:
        """Close suffix. Unknown suffixes are silently ignored."""
        self.request("POST", "/admin/close", form={"suffix": suffix})

    def hosts(self) -> List[Dict[str, Any]]:
        """
        Fetch the current record set.

        Returns:
            List of {"suffix", "closed", "mins_remaining"} dicts
        """
        data = self._json(self.request("GET", "/admin/api/hosts"))
        if not isinstance(data, list):
            raise TransportError(f"Unexpected response from master: {data!r}")
        return data
