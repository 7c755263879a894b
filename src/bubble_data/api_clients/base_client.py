"""Base Bubble Data API Client.

Provides the shared HTTP session, bearer authentication and error types
for all Bubble Data API operations.
"""

import json
import logging
from typing import Any, Optional

import httpx

from ..config import BubbleConfig

logger = logging.getLogger(__name__)


class BubbleAPIError(Exception):
    """Base exception for Bubble Data API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class EmptyResponseError(BubbleAPIError):
    """Exception raised when Bubble answers without a usable body."""

    def __init__(self, status_code: Optional[int] = None):
        super().__init__("Unexpected response from bubble: no body", status_code)


class CreateFailedError(BubbleAPIError):
    """Exception raised when Bubble does not confirm a create request."""

    def __init__(self, status: Any, status_code: Optional[int] = None):
        super().__init__(f"create request failed with status: {status}", status_code)
        self.status = status


class SearchFailedError(BubbleAPIError):
    """Exception raised when a search response lacks its result payload."""

    def __init__(self, status_code: Optional[int] = None):
        super().__init__("search request failed", status_code)


class MalformedRecordError(BubbleAPIError):
    """Exception raised when returned records do not match the record type."""

    def __init__(self, type_name: str, status_code: Optional[int] = None):
        super().__init__(
            f"Malformed {type_name} payload in response from bubble", status_code
        )
        self.type_name = type_name


class MissingRecordIDError(BubbleAPIError, ValueError):
    """Exception raised when an operation needs a record id that is not set."""

    pass


class BubbleAPIClient:
    """Base API client with authentication and common HTTP functionality."""

    def __init__(
        self,
        config: BubbleConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize base API client.

        Args:
            config: Application name, version label and API key to use
            transport: Optional httpx transport, e.g. an in-process ASGI app
        """
        self.config = config
        self._transport = transport
        self._session: Optional[httpx.AsyncClient] = None

    @property
    def session(self) -> httpx.AsyncClient:
        """Get or create the HTTP session."""
        if self._session is None or self._session.is_closed:
            self._session = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout),
                headers={"Content-Type": "application/json"},
                follow_redirects=True,
                transport=self._transport,
            )
        return self._session

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Make one authenticated request against the Data API.

        The Authorization header is derived from the current configuration
        on every call.

        Args:
            method: HTTP method (GET, POST, PATCH, DELETE)
            url: Absolute request URL
            **kwargs: Additional arguments for httpx request

        Returns:
            HTTP response object with a 2xx status

        Raises:
            httpx.HTTPStatusError: If Bubble returns a 4xx/5xx status
            httpx.TransportError: If the request could not be completed
        """
        headers = dict(kwargs.pop("headers", None) or {})
        headers.update(self.config.auth_headers())

        logger.debug(f"{method} {url}")
        response = await self.session.request(method, url, headers=headers, **kwargs)

        if response.status_code >= 400:
            logger.error(f"{method} {url} failed with HTTP {response.status_code}")
        response.raise_for_status()
        return response

    @staticmethod
    def _json_body(response: httpx.Response) -> Optional[Any]:
        """Decode a JSON response body.

        Returns:
            Decoded body, or None if the body is empty or not JSON
        """
        if not response.content.strip():
            return None
        try:
            return response.json()
        except json.JSONDecodeError:
            logger.warning(
                f"Non-JSON response body from {response.request.url} "
                f"(HTTP {response.status_code})"
            )
            return None

    async def close(self) -> None:
        """Close HTTP session."""
        if self._session and not self._session.is_closed:
            await self._session.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    def __del__(self):
        """Cleanup when object is destroyed."""
        if self._session and not self._session.is_closed:
            # Cannot use await in __del__, so we'll just log a warning
            logger.warning("BubbleAPIClient was not properly closed")
