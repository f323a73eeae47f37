"""HTTP fetcher for venue public endpoints.

Wraps a single httpx.AsyncClient per adapter. Responses are decoded with
parse_float=Decimal so numeric fields keep the digits the venue sent.
Every failure is mapped onto TransportError or ParseError; nothing retries.
"""

import json
from decimal import Decimal
from typing import Any

import httpx

from ccex.config import HttpSettings
from ccex.exceptions import ParseError, TransportError
from ccex.logging import get_logger

logger = get_logger(__name__)


class HttpFetcher:
    """Performs GET requests against one venue's base URL.

    Args:
        base_url: Venue root, e.g. "https://api.huobi.pro".
        settings: Timeout and user agent.
        transport: Optional httpx transport (tests pass httpx.MockTransport).
        headers: Extra headers sent with every request.
    """

    def __init__(
        self,
        base_url: str,
        settings: HttpSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._settings = settings or HttpSettings()
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            timeout=self._settings.timeout,
            transport=transport,
            headers=headers,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def url(self, path: str) -> str:
        """Join a path onto the base URL."""
        if not path.startswith("/"):
            path = "/" + path
        return self._base_url + path

    async def get_bytes(self, path: str, params: dict[str, Any] | None = None) -> bytes:
        """Fetch a path and return the raw body.

        Raises:
            TransportError: Connection failure, timeout, or non-2xx status.
        """
        url = self.url(path)
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            logger.debug("venue_request_failed", url=url, error=repr(exc))
            raise TransportError(url, str(exc) or type(exc).__name__) from exc

        if response.is_error:
            raise TransportError(url, f"HTTP {response.status_code}")
        return response.content

    async def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """Fetch a path and decode the JSON body with Decimal floats.

        Raises:
            TransportError: See get_bytes.
            ParseError: The body is not valid JSON.
        """
        body = await self.get_bytes(path, params)
        try:
            return json.loads(body, parse_float=Decimal)
        except ValueError as exc:
            raise ParseError(f"failed to parse json from {self.url(path)}") from exc

    async def aclose(self) -> None:
        """Release pooled connections."""
        await self._client.aclose()
