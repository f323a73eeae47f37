"""Consolidated order-book aggregator client (Shrimpy-style).

Some venues only expose best bid/ask sizes through their depth endpoint,
one pair per request. An aggregator publishes the top of book for every
market of a venue in a single call; adapters configured with one serve
order_book_tick_map() from it, on a cache with its own timestamp.
"""

from typing import Any, Protocol

import httpx

from ccex.config import AggregatorSettings, HttpSettings
from ccex.exceptions import ParseError
from ccex.http import HttpFetcher
from ccex.logging import get_logger
from ccex.models import Board, BoardSide, CurrencyPair
from ccex.parsing import as_list, field, parse_object_levels, string_field

logger = get_logger(__name__)


class OrderBookSource(Protocol):
    """Upstream supplying top-of-book boards for every market of a venue."""

    async def boards(self, exchange: str) -> dict[CurrencyPair, Board]:
        ...

    async def aclose(self) -> None:
        ...


class ShrimpyClient:
    """Reads /v1/orderbooks from a Shrimpy-compatible aggregator.

    Response shape: a list of markets, each with baseSymbol, quoteSymbol and
    orderBooks[].orderBook.{asks,bids}[] of {price, quantity} strings.
    Markets that fail to parse are skipped.
    """

    def __init__(
        self,
        settings: AggregatorSettings | None = None,
        http_settings: HttpSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or AggregatorSettings()
        self._fetcher = HttpFetcher(self._settings.base_url, http_settings, transport)

    async def boards(self, exchange: str) -> dict[CurrencyPair, Board]:
        payload = await self._fetcher.get_json(
            "/v1/orderbooks", params={"exchange": exchange, "limit": 1}
        )
        result: dict[CurrencyPair, Board] = {}
        for market in as_list(payload, "orderbooks"):
            try:
                pair, board = self._parse_market(market)
            except ParseError as exc:
                logger.debug("aggregator_market_skipped", exchange=exchange, error=str(exc))
                continue
            result[pair] = board
        return result

    @staticmethod
    def _parse_market(market: Any) -> tuple[CurrencyPair, Board]:
        pair = CurrencyPair(string_field(market, "baseSymbol"), string_field(market, "quoteSymbol"))
        books = as_list(field(market, "orderBooks"), "orderBooks")
        if not books:
            raise ParseError(f"no order book for {pair}")
        book = field(books[0], "orderBook")
        return pair, Board(
            asks=parse_object_levels(field(book, "asks"), BoardSide.ASK, "price", "quantity"),
            bids=parse_object_levels(field(book, "bids"), BoardSide.BID, "price", "quantity"),
        )

    async def aclose(self) -> None:
        await self._fetcher.aclose()
