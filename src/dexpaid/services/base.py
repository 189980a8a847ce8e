"""Base API client for upstream HTTP calls.

This module provides BaseAPIClient, a thin wrapper around a lazily created
httpx.AsyncClient. Every call is made exactly once: a non-success status or
a transport failure is converted into FetchError for the caller to handle.
"""

from typing import Any

import httpx
import structlog

from dexpaid.core.exceptions import FetchError

log = structlog.get_logger(__name__)


class BaseAPIClient:
    """Base API client with lazy initialization and error mapping.

    Provides HTTP requests with:
    - Lazy client initialization (created on first request)
    - A timeout on every request
    - Non-success responses mapped to FetchError
    - Proper resource cleanup

    Attributes:
        service: Short service name used in logs and errors.
        base_url: Base URL for all requests.
        timeout: Request timeout in seconds.
        headers: Default headers for all requests.

    Example:
        client = BaseAPIClient(
            service="example",
            base_url="https://api.example.com",
        )
        response = await client.get("/endpoint")
        await client.close()
    """

    def __init__(
        self,
        service: str,
        base_url: str,
        timeout: float = 10.0,
        headers: dict[str, str] | None = None,
        log_paths: bool = True,
    ) -> None:
        """Initialize BaseAPIClient.

        Args:
            service: Short service name used in logs and errors.
            base_url: Base URL for all requests.
            timeout: Request timeout in seconds (default: 10).
            headers: Default headers for all requests.
            log_paths: Include request paths in logs. Disable when the
                path itself is a secret (webhook URLs).
        """
        self.service = service
        self.base_url = base_url
        self.timeout = timeout
        self.headers = headers or {}
        self.log_paths = log_paths
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the httpx client (lazy initialization).

        Returns:
            The httpx AsyncClient instance.
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self.headers,
            )
            log.debug("httpx_client_created", service=self.service)
        return self._client

    async def close(self) -> None:
        """Close the httpx client and release resources."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            log.debug("httpx_client_closed", service=self.service)

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Make a single HTTP request.

        Args:
            method: HTTP method (GET, POST).
            path: Request path (appended to base_url) or absolute URL.
            **kwargs: Additional arguments passed to httpx.request.

        Returns:
            httpx.Response on success.

        Raises:
            FetchError: On a non-success status or a transport failure.
        """
        client = await self._get_client()
        shown_path = path if self.log_paths else None

        log.debug("request_sent", service=self.service, method=method, path=shown_path)

        try:
            response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            log.warning(
                "request_connection_error",
                service=self.service,
                method=method,
                path=shown_path,
                error=str(e),
            )
            raise FetchError(
                service=self.service,
                reason=str(e) or type(e).__name__,
                path=shown_path,
            ) from e

        if not response.is_success:
            log.warning(
                "request_failed",
                service=self.service,
                method=method,
                path=shown_path,
                status_code=response.status_code,
                reason=response.reason_phrase,
            )
            raise FetchError(
                service=self.service,
                reason=response.reason_phrase,
                status_code=response.status_code,
                path=shown_path,
            )

        return response

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make a GET request.

        Args:
            path: Request path.
            **kwargs: Additional arguments passed to httpx.

        Returns:
            httpx.Response on success.
        """
        return await self._request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make a POST request.

        Args:
            path: Request path.
            **kwargs: Additional arguments passed to httpx.

        Returns:
            httpx.Response on success.
        """
        return await self._request("POST", path, **kwargs)
