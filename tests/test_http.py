"""Tests for HttpFetcher error mapping and Decimal decoding."""

from decimal import Decimal

import httpx
import pytest

from ccex.config import HttpSettings
from ccex.exceptions import ParseError, TransportError
from ccex.http import HttpFetcher


def _fetcher(venue, **kwargs) -> HttpFetcher:
    return HttpFetcher("http://localhost:4243/", HttpSettings(), venue.transport, **kwargs)


class TestHttpFetcher:
    """Tests for HttpFetcher."""

    def test_url_join(self, venue) -> None:
        fetcher = _fetcher(venue)

        assert fetcher.base_url == "http://localhost:4243"
        assert fetcher.url("ticker") == "http://localhost:4243/ticker"
        assert fetcher.url("/ticker") == "http://localhost:4243/ticker"

    @pytest.mark.asyncio
    async def test_floats_decode_as_decimal(self, venue) -> None:
        venue.route("/ticker", '{"ltp": 0.1, "volume": 2618.884466247149233010811750}')
        fetcher = _fetcher(venue)

        payload = await fetcher.get_json("/ticker")

        assert payload["ltp"] == Decimal("0.1")
        assert isinstance(payload["volume"], Decimal)
        assert str(payload["volume"]) == "2618.884466247149233010811750"
        await fetcher.aclose()

    @pytest.mark.asyncio
    async def test_query_params_are_sent(self, venue) -> None:
        venue.route("/public", "{}")
        fetcher = _fetcher(venue)

        await fetcher.get_json("/public", params={"command": "returnTicker"})

        assert venue.requests[0].url.params["command"] == "returnTicker"

    @pytest.mark.asyncio
    async def test_extra_headers(self, venue) -> None:
        venue.route("/ping", "{}")
        fetcher = _fetcher(venue, headers={"User-Agent": "test-agent"})

        await fetcher.get_json("/ping")

        assert venue.requests[0].headers["User-Agent"] == "test-agent"

    @pytest.mark.asyncio
    async def test_http_error_status(self, venue) -> None:
        venue.route("/ticker", '{"error": "down"}', status=503)
        fetcher = _fetcher(venue)

        with pytest.raises(TransportError) as exc_info:
            await fetcher.get_json("/ticker")

        assert exc_info.value.url == "http://localhost:4243/ticker"
        assert exc_info.value.reason == "HTTP 503"

    @pytest.mark.asyncio
    async def test_connection_error(self, venue) -> None:
        venue.route("/ticker", httpx.ConnectError("connection refused"))
        fetcher = _fetcher(venue)

        with pytest.raises(TransportError, match="connection refused"):
            await fetcher.get_bytes("/ticker")

    @pytest.mark.asyncio
    async def test_invalid_json(self, venue) -> None:
        venue.route("/ticker", "<html>maintenance</html>")
        fetcher = _fetcher(venue)

        with pytest.raises(ParseError):
            await fetcher.get_json("/ticker")
