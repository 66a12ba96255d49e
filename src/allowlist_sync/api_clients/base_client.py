"""Base GraphQL engine metadata API client.

Provides the HTTP session, admin authentication headers and error mapping
shared by all calls to the engine's ``/v1/query`` endpoint.
"""

import json
import logging
from typing import Any, Dict, Optional

import httpx

from .network_error_handler import NetworkErrorHandler

logger = logging.getLogger(__name__)

QUERY_ENDPOINT = "/v1/query"


class APIClientError(Exception):
    """Base exception for API client errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class HasuraAPIError(APIClientError):
    """The engine answered with an HTTP error status.

    ``code`` and ``error`` mirror the engine's JSON error body, e.g.
    ``{"code": "already-exists", "error": "...", "path": "$.args"}``.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        code: Optional[str] = None,
        error: Optional[str] = None,
        payload: Optional[Any] = None,
    ):
        super().__init__(message, status_code=status_code)
        self.code = code
        self.error = error
        self.payload = payload


class HasuraMetadataAPIClient:
    """Base API client posting typed operations to the metadata endpoint."""

    def __init__(
        self,
        server_url: str,
        admin_secret: str,
        role: str = "admin",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize base API client.

        Args:
            server_url: Base URL of the GraphQL engine
            admin_secret: Value for the X-Hasura-Admin-Secret header
            role: Value for the X-Hasura-Role header
            timeout: Transport timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.server_url = server_url.rstrip("/")
        self.admin_secret = admin_secret
        self.role = role
        self.timeout = timeout
        self._transport = transport
        self._session: Optional[httpx.AsyncClient] = None
        self._network_error_handler = NetworkErrorHandler()

    @property
    def auth_headers(self) -> Dict[str, str]:
        return {
            "X-Hasura-Role": self.role,
            "X-Hasura-Admin-Secret": self.admin_secret,
        }

    @property
    def session(self) -> httpx.AsyncClient:
        """Get or create HTTP session."""
        if self._session is None or self._session.is_closed:
            self._session = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers={"Content-Type": "application/json"},
                follow_redirects=True,
                verify=True,
                transport=self._transport,
            )
        return self._session

    async def _post_operation(
        self, operation: str, args: Dict[str, Any]
    ) -> Dict[str, Any]:
        """POST ``{"type": operation, "args": args}`` to the query endpoint.

        Returns:
            Decoded JSON response body

        Raises:
            HasuraAPIError: If the engine returns an error status
            TransportError: If no HTTP response was received
        """
        url = f"{self.server_url}{QUERY_ENDPOINT}"
        payload = {"type": operation, "args": args}
        logger.debug(f"POST {url} type={operation}")

        try:
            response = await self.session.post(
                url, json=payload, headers=self.auth_headers
            )
        except httpx.TransportError as e:
            raise self._network_error_handler.classify_network_error(e) from e

        if response.status_code >= 400:
            raise self._build_api_error(operation, response)

        try:
            return dict(response.json())
        except (json.JSONDecodeError, TypeError, ValueError):
            return {}

    @staticmethod
    def _build_api_error(operation: str, response: httpx.Response) -> HasuraAPIError:
        status_code = response.status_code
        body: Any = None
        code = None
        error = None

        try:
            body = response.json()
        except (json.JSONDecodeError, ValueError):
            body = response.text

        if isinstance(body, dict):
            code = body.get("code")
            error = body.get("error")

        detail = error or (body if isinstance(body, str) and body else None)
        detail = detail or f"HTTP {status_code}"
        message = f"{operation} failed with status {status_code}: {detail}"
        if code:
            message += f" ({code})"

        return HasuraAPIError(
            message, status_code=status_code, code=code, error=error, payload=body
        )

    async def close(self) -> None:
        """Close HTTP session."""
        if self._session and not self._session.is_closed:
            await self._session.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
