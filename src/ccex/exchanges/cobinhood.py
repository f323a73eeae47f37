"""Cobinhood public market data.

Every response is wrapped as {"success": true, "result": {...}}. Ticker
values are strings; trading_pair_id looks like "ETH-BTC". Order book rows
are [price, order count, size].
"""

from typing import Any, ClassVar

from ccex.cache import OnceCache, SnapshotBuilder
from ccex.exceptions import ParseError
from ccex.exchanges.base import CachedPublicClient, PrecisionMap
from ccex.models import Board, BoardSide, CurrencyPair, OrderBookTick, Precision, precision_of
from ccex.parsing import (
    bool_field,
    decimal_field,
    field,
    list_field,
    parse_levels,
    path,
    string_field,
)

COBINHOOD_BASE_URL = "https://api.cobinhood.com"
BOARD_LIMIT = 10000


class CobinhoodClient(CachedPublicClient):
    """Cobinhood adapter."""

    name: ClassVar[str] = "cobinhood"
    default_base_url: ClassVar[str] = COBINHOOD_BASE_URL

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._pairs: OnceCache[list[CurrencyPair]] = OnceCache(self._fetch_currency_pairs)

    async def _tickers(self) -> list[tuple[CurrencyPair, Any]]:
        payload = await self._fetcher.get_json("/v1/market/tickers")
        tickers = []
        for ticker in list_field(payload, "result.tickers"):
            try:
                pair = CurrencyPair.split(string_field(ticker, "trading_pair_id"), "-")
            except ParseError:
                continue
            tickers.append((pair, ticker))
        return tickers

    async def _fetch_market(self) -> SnapshotBuilder:
        builder = SnapshotBuilder()
        for pair, ticker in await self._tickers():
            builder.add(
                pair,
                rate=decimal_field(ticker, "last_trade_price"),
                volume=decimal_field(ticker, "24h_volume"),
                tick=OrderBookTick(
                    best_ask_price=decimal_field(ticker, "lowest_ask"),
                    best_bid_price=decimal_field(ticker, "highest_bid"),
                ),
            )
        return builder

    async def _fetch_currency_pairs(self) -> list[CurrencyPair]:
        payload = await self._fetcher.get_json("/v1/market/trading_pairs")
        return [
            CurrencyPair(
                string_field(pair, "base_currency_id"),
                string_field(pair, "quote_currency_id"),
            )
            for pair in list_field(payload, "result.trading_pairs")
        ]

    async def currency_pairs(self) -> list[CurrencyPair]:
        return list(await self._pairs.get())

    async def _fetch_precisions(self) -> PrecisionMap:
        precisions: PrecisionMap = {}
        for pair, ticker in await self._tickers():
            precisions.setdefault(pair.trading, {})[pair.settlement] = Precision(
                price_precision=precision_of(decimal_field(ticker, "last_trade_price")),
                amount_precision=precision_of(decimal_field(ticker, "24h_volume")),
            )
        return precisions

    async def _fetch_board(self, pair: CurrencyPair) -> Board:
        payload = await self._fetcher.get_json(
            f"/v1/market/orderbooks/{pair.trading}-{pair.settlement}",
            params={"limit": BOARD_LIMIT},
        )
        book = path(payload, "result.orderbook")
        return Board(
            asks=parse_levels(field(book, "asks"), BoardSide.ASK, amount_index=2),
            bids=parse_levels(field(book, "bids"), BoardSide.BID, amount_index=2),
        )

    async def frozen_currency(self) -> list[str]:
        payload = await self._fetcher.get_json("/v1/market/currencies")
        frozen = []
        for currency in list_field(payload, "result.currencies"):
            try:
                funding_frozen = bool_field(currency, "funding_frozen")
                is_active = bool_field(currency, "is_active")
            except ParseError:
                continue
            if funding_frozen or not is_active:
                frozen.append(string_field(currency, "currency"))
        return frozen
