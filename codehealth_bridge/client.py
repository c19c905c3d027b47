"""HTTP clients for the SonarQube and Gerrit REST APIs.

Usage:
    sonar  = SonarClient(url="https://sonarcloud.io")
    data   = sonar.get("/api/issues/search", {"projects": "mw-core", "branch": "123-4"})

    gerrit = GerritClient(url="https://gerrit.example.org/r", username="bot", http_password="...")
    reply  = gerrit.post("/a/changes/mw%2Fcore~123/revisions/4/review", {"message": "hi"})
"""

from dataclasses import dataclass
from typing import Any

import requests

DEFAULT_TIMEOUT = 30

# Gerrit prepends this to every JSON reply to defeat XSSI.
GERRIT_XSSI_PREFIX = ")]}'"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ClientError(Exception):
    """Base exception for all client errors."""


class AuthenticationError(ClientError):
    """Raised on HTTP 401/403 — bad or missing credentials."""


class NotFoundError(ClientError):
    """Raised on HTTP 404 — project, change or revision not found."""


class NetworkError(ClientError):
    """Raised on connection timeout or unreachable server."""


# ---------------------------------------------------------------------------
# Shared plumbing
# ---------------------------------------------------------------------------

class _RestClient:
    service = "server"

    def __init__(self, url: str, timeout: int = DEFAULT_TIMEOUT) -> None:
        self.base_url = url.rstrip("/")
        self._timeout = timeout
        self._session = requests.Session()

    def _send(self, method: str, endpoint: str, **kwargs: Any) -> requests.Response:
        url = f"{self.base_url}{endpoint}"
        try:
            response = self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.exceptions.Timeout as exc:
            raise NetworkError(
                f"Request timed out after {self._timeout}s while contacting '{url}'"
            ) from exc
        except requests.exceptions.ConnectionError as exc:
            raise NetworkError(
                f"Unable to reach {self.service} at '{self.base_url}'"
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise NetworkError(f"Request to '{url}' failed: {exc}") from exc

        if response.status_code in (401, 403):
            raise AuthenticationError(
                f"Authentication failed ({response.status_code}) for {url} — check the credentials."
            )
        if response.status_code == 404:
            raise NotFoundError(f"Resource not found: {url}")
        if not response.ok:
            raise ClientError(
                f"Unexpected response {response.status_code} from {url}: {response.text[:200]}"
            )
        return response


# ---------------------------------------------------------------------------
# SonarQube
# ---------------------------------------------------------------------------

class SonarClient(_RestClient):
    """Thin wrapper around the SonarQube Web API (read-only)."""

    service = "SonarQube server"

    def __init__(self, url: str, token: str = "", timeout: int = DEFAULT_TIMEOUT) -> None:
        super().__init__(url, timeout)
        if token:
            # SonarQube auth: token as username, empty password
            self._session.auth = (token, "")

    def get(self, endpoint: str, params: dict[str, Any] | None = None) -> dict:
        """Perform a single GET request and return the parsed JSON response.

        Raises:
            AuthenticationError: HTTP 401/403
            NotFoundError:       HTTP 404
            ClientError:         Any other non-2xx response, or a non-JSON body
            NetworkError:        Timeout or connection failure
        """
        response = self._send("GET", endpoint, params=params or {})
        try:
            return response.json()
        except ValueError as exc:
            raise ClientError(f"Invalid JSON from {response.url}") from exc


# ---------------------------------------------------------------------------
# Gerrit
# ---------------------------------------------------------------------------

@dataclass
class GerritResponse:
    status_code: int
    text: str


class GerritClient(_RestClient):
    """Authenticated writer for the Gerrit REST API."""

    service = "Gerrit"

    def __init__(
        self,
        url: str,
        username: str,
        http_password: str,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        super().__init__(url, timeout)
        self._session.auth = (username, http_password)

    def post(self, endpoint: str, payload: dict[str, Any]) -> GerritResponse:
        """POST *payload* as JSON and return the status with the unguarded body.

        Raises the same exceptions as :meth:`SonarClient.get`.
        """
        response = self._send("POST", endpoint, json=payload)
        text = response.text
        if text.startswith(GERRIT_XSSI_PREFIX):
            text = text[len(GERRIT_XSSI_PREFIX):].lstrip()
        return GerritResponse(status_code=response.status_code, text=text)
