"""
Async registry client for the age filter.

This module provides an async client for the upstream npm-compatible
registry with retry logic and error handling. It fetches package documents
for the filter and forwards every other request unchanged.
"""

import time
from typing import Any
from urllib.parse import quote

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ..config import Config, get_registry_headers
from ..exceptions import PackageNotFoundError, RegistryError
from ..logging import get_logger, log_api_request

# Headers that apply to a single connection and must not be forwarded
HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailers",
        "transfer-encoding",
        "upgrade",
        "host",
        "content-length",
        "content-encoding",
        "accept-encoding",
    }
)


def _is_transient(error: BaseException) -> bool:
    return isinstance(error, RegistryError) and error.is_transient


def filter_headers(headers: Any) -> dict[str, str]:
    """Drop hop-by-hop headers from a request or response header map."""
    return {k: v for k, v in headers.items() if k.lower() not in HOP_BY_HOP_HEADERS}


class RegistryClient:
    """Async client for interacting with an npm-compatible registry."""

    def __init__(self, config: Config, client: httpx.AsyncClient | None = None):
        """
        Initialize the registry client.

        Args:
            config: Configuration instance
            client: HTTP client to use, or None to create one for the
                configured registry
        """
        self.config = config
        self.logger = get_logger(__name__, client="registry")

        self.client = client or httpx.AsyncClient(
            base_url=str(config.registry_url),
            timeout=config.request_timeout,
            headers=get_registry_headers(),
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
        )

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.config.max_retries + 1),
            wait=wait_exponential(multiplier=self.config.retry_backoff, max=10),
            retry=retry_if_exception(_is_transient),
            reraise=True,
        )

    async def get_package(self, name: str) -> dict[str, Any]:
        """
        Get the full package document for a package.

        Transport failures and 5xx responses are retried with exponential
        backoff.

        Args:
            name: Package name (unscoped or ``@scope/name``)

        Returns:
            Decoded package document

        Raises:
            PackageNotFoundError: If the registry has no such package
            RegistryError: If the request fails or the body is not a JSON object
        """
        async for attempt in self._retrying():
            with attempt:
                return await self._fetch_package(name)
        raise RegistryError(f"Could not fetch package {name}")  # pragma: no cover

    async def _fetch_package(self, name: str) -> dict[str, Any]:
        path = f"/{quote(name, safe='@')}"
        start_time = time.time()

        try:
            response = await self.client.get(path)
            duration_ms = (time.time() - start_time) * 1000

            if response.status_code == 404:
                raise PackageNotFoundError(name)

            response.raise_for_status()

            log_api_request(
                self.logger,
                "GET",
                str(response.url),
                response.status_code,
                duration_ms,
                package=name,
            )

            data = response.json()

        except httpx.HTTPStatusError as e:
            raise RegistryError(
                f"HTTP error fetching package {name}: {e}",
                status_code=e.response.status_code,
                response_body=e.response.text,
            ) from e

        except httpx.RequestError as e:
            self.logger.error("Request error fetching package", package=name, error=str(e))
            raise RegistryError(f"Request error fetching package {name}: {e}") from e

        except ValueError as e:
            raise RegistryError(
                f"Invalid JSON in package document for {name}: {e}",
                status_code=response.status_code,
            ) from e

        if not isinstance(data, dict):
            raise RegistryError(
                f"Unexpected package document for {name}",
                status_code=response.status_code,
            )

        return data

    async def forward(
        self,
        method: str,
        path: str,
        query: str = "",
        headers: Any = None,
        content: bytes | None = None,
    ) -> httpx.Response:
        """
        Forward a request to the upstream registry as-is.

        Args:
            method: HTTP method
            path: Request path, already percent-encoded
            query: Raw query string
            headers: Incoming request headers
            content: Request body

        Returns:
            The upstream response, body fully read

        Raises:
            RegistryError: If the upstream cannot be reached
        """
        url = f"{path}?{query}" if query else path
        start_time = time.time()

        try:
            response = await self.client.request(
                method,
                url,
                headers=filter_headers(headers or {}),
                content=content,
            )
        except httpx.RequestError as e:
            self.logger.error("Request error forwarding", method=method, path=path, error=str(e))
            raise RegistryError(f"Request error forwarding {method} {path}: {e}") from e

        log_api_request(
            self.logger,
            method,
            str(response.url),
            response.status_code,
            (time.time() - start_time) * 1000,
        )
        return response

    async def check_health(self) -> dict[str, Any]:
        """
        Check that the upstream registry answers its ping endpoint.

        Returns:
            Dictionary with ``status`` and either ``response_time_ms`` or ``error``
        """
        start_time = time.time()
        try:
            response = await self.client.get("/-/ping")
        except httpx.RequestError as e:
            return {"status": "unhealthy", "error": f"Cannot connect: {e}"}

        response_time_ms = round((time.time() - start_time) * 1000, 1)
        if response.status_code >= 400:
            return {
                "status": "unhealthy",
                "error": f"Registry returned HTTP {response.status_code}",
            }
        return {"status": "healthy", "response_time_ms": response_time_ms}
