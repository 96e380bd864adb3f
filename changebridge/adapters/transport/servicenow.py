"""ServiceNow Table API transport.

Implements TransportPort with httpx against ``/api/now/table/<table>``
using HTTP basic authentication.
"""

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from changebridge.core.errors import TransportError
from changebridge.core.models import ConnectionConfig, RawResponse
from changebridge.core.ports import TransportPort

logger = logging.getLogger(__name__)


class ServiceNowConnector(TransportPort):
    """Performs authenticated Table API calls for one adapter instance."""

    def __init__(
        self,
        config: ConnectionConfig,
        query_limit: int = 1,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the connector.

        Args:
            config: Connection details of the adapter instance.
            query_limit: Value of ``sysparm_limit`` on reads.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used to stub the network.
        """
        self.config = config
        self.query_limit = query_limit
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def table_path(self) -> str:
        """Path of the configured table on the Table API."""
        return f"/api/now/table/{self.config.table_name}"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client.

        Returns:
            httpx.AsyncClient configured with basic auth and JSON headers.
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.service_url.rstrip("/"),
                auth=httpx.BasicAuth(
                    self.config.credentials.username,
                    self.config.credentials.password,
                ),
                headers={
                    "Accept": "application/json",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def __aenter__(self) -> "ServiceNowConnector":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get(self) -> RawResponse:
        """Read records from the configured table."""
        return await self._request(
            "GET", params={"sysparm_limit": self.query_limit}
        )

    async def post(self, options: Mapping[str, Any]) -> RawResponse:
        """Create a record in the configured table from ``options["body"]``."""
        return await self._request("POST", json=dict(options.get("body") or {}))

    async def _request(self, method: str, **kwargs: Any) -> RawResponse:
        """Send one request and wrap the outcome.

        Raises:
            TransportError: On connection failure or a non-2xx status.
        """
        client = await self._get_client()
        try:
            response = await client.request(method, self.table_path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(
                f"{method} {self.table_path} failed: {e}",
                extra={"service_url": self.config.service_url},
            )
            raise TransportError(f"{type(e).__name__}: {e}") from e

        if not response.is_success:
            logger.error(
                f"{method} {self.table_path} returned {response.status_code}",
                extra={"response": response.text},
            )
            raise TransportError(
                f"{method} {self.table_path} failed: {response.reason_phrase}",
                status_code=response.status_code,
            )

        return RawResponse(
            status_code=response.status_code,
            body=self._decode_body(response),
            headers=dict(response.headers),
        )

    @staticmethod
    def _decode_body(response: httpx.Response) -> Any:
        """Decode a JSON body, falling back to text for HTML/plain pages."""
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text
