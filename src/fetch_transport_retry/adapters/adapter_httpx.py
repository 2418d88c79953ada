"""
httpx adapter implementation.

Exposes an httpx.AsyncClient through the verb transport contract. Error
responses raise httpx.HTTPStatusError (carries a status, never retried);
connection failures raise httpx.TransportError (no status, retried).
"""
import logging
from typing import Any, Awaitable, Optional

import httpx

logger = logging.getLogger("fetch_transport_retry.adapters.httpx")


class HttpxVerbTransport:
    """Verb transport over an httpx.AsyncClient."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        raise_for_status: bool = True,
        **client_kwargs: Any,
    ) -> None:
        """
        Create a new HttpxVerbTransport.

        Args:
            client: Existing client to use. When omitted one is created and owned
            raise_for_status: Raise httpx.HTTPStatusError on 4xx/5xx responses. Default: True
            **client_kwargs: Arguments for httpx.AsyncClient when creating one
        """
        if client is not None and client_kwargs:
            raise ValueError("client_kwargs cannot be combined with an existing client")

        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(**client_kwargs)
        self._raise_for_status = raise_for_status
        self._disposed = False

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request and check its status."""
        logger.debug(f"HttpxVerbTransport.request: method={method}, url={url}")
        response = await self._client.request(method, url, **kwargs)
        if self._raise_for_status and response.is_error:
            logger.debug(f"HttpxVerbTransport.request: {method} {url} returned HTTP {response.status_code}")
            response.raise_for_status()
        return response

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """GET request."""
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        """POST request."""
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> httpx.Response:
        """PUT request."""
        return await self.request("PUT", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> httpx.Response:
        """DELETE request."""
        return await self.request("DELETE", url, **kwargs)

    async def patch(self, url: str, **kwargs: Any) -> httpx.Response:
        """PATCH request."""
        return await self.request("PATCH", url, **kwargs)

    async def head(self, url: str, **kwargs: Any) -> httpx.Response:
        """HEAD request."""
        return await self.request("HEAD", url, **kwargs)

    async def options(self, url: str, **kwargs: Any) -> httpx.Response:
        """OPTIONS request."""
        return await self.request("OPTIONS", url, **kwargs)

    def dispose(self) -> Optional[Awaitable[None]]:
        """
        Release the client.

        Returns the client's ``aclose()`` coroutine when this adapter owns
        the client, None when the client is shared or already disposed.
        """
        if self._disposed or not self._owns_client:
            return None
        self._disposed = True
        return self._client.aclose()

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client
