"""HTTP client for the image registry (Docker Hub v2 API).

Only two calls are needed: look a repository up, and create it when the
lookup says it does not exist.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

import httpx

from ..config import RegistryConfig
from ..errors import RegistryError
from ..shared.auth import auth_headers
from ..shared.logging import get_logger

logger = get_logger(__name__)


class RepositoryStatus(Enum):
    """Outcome of ensure_repository."""

    EXISTS = "exists"
    CREATED = "created"


class RegistryClient:
    """Async client for registry repository management."""

    def __init__(
        self,
        config: RegistryConfig,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize client.

        Args:
            config: Registry namespace, API URL and token
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.config = config
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> RegistryClient:
        self._client = httpx.AsyncClient(
            base_url=self.config.api_url,
            timeout=self.timeout,
            headers={"Content-Type": "application/json", **auth_headers(self.config.token)},
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        if not self._client:
            raise RegistryError("Client not initialized. Use 'async with' context.")
        return self._client

    async def _request(self, method: str, path: str, json: dict[str, Any] | None = None) -> httpx.Response:
        client = self._ensure_client()
        try:
            response = await client.request(method, path, json=json)
        except httpx.ConnectError as e:
            raise RegistryError(
                f"Cannot connect to registry at {self.config.api_url}",
                hint="Check your network connection and DCS_REGISTRY_URL.",
            ) from e
        except httpx.TimeoutException as e:
            raise RegistryError(f"Registry request timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise RegistryError(f"Registry request failed: {e}") from e

        logger.debug("registry_response", method=method, path=path, status=response.status_code)
        return response

    async def repository_exists(self, name: str) -> bool:
        """Check whether <namespace>/<name> exists.

        Raises:
            RegistryError: On any status other than 200 or 404
        """
        response = await self._request("GET", f"/repositories/{self.config.namespace}/{name}/")
        if response.status_code == 200:
            return True
        if response.status_code == 404:
            return False
        raise RegistryError(
            f"Error checking repository {name}. Status code: {response.status_code}",
            status_code=response.status_code,
            hint=_auth_hint(response.status_code),
        )

    async def create_repository(self, name: str) -> None:
        """Create a public repository <namespace>/<name>.

        Raises:
            RegistryError: Unless the registry answers 200 or 201
        """
        body = {"namespace": self.config.namespace, "name": name, "is_private": False}
        response = await self._request("POST", "/repositories/", json=body)
        if response.status_code in (200, 201):
            return
        raise RegistryError(
            f"Error creating repository {name}: {_error_detail(response)}",
            status_code=response.status_code,
            hint=_auth_hint(response.status_code),
        )

    async def ensure_repository(self, name: str) -> RepositoryStatus:
        """Make sure the repository exists, creating it if needed."""
        if await self.repository_exists(name):
            return RepositoryStatus.EXISTS

        logger.info("repository_missing", repository=name, namespace=self.config.namespace)
        await self.create_repository(name)
        return RepositoryStatus.CREATED


def _error_detail(response: httpx.Response) -> str:
    """Pull a human-readable message out of an error response."""
    try:
        data = response.json()
    except ValueError:
        return f"HTTP {response.status_code}: {response.text.strip()}"
    if isinstance(data, dict):
        for key in ("message", "detail", "error"):
            if data.get(key):
                return f"HTTP {response.status_code}: {data[key]}"
    return f"HTTP {response.status_code}"


def _auth_hint(status_code: int) -> str | None:
    if status_code in (401, 403):
        return "Check that your Docker Hub token is valid and has write access (--token or DOCKER_TOKEN)."
    return None
