"""Kucoin public market data.

allTickers returns every market in one response; symbols are "ETH-BTC".
Kucoin refuses requests without a browser User-Agent, so every request of
this client carries HttpSettings.user_agent.
"""

from typing import Any, ClassVar

from ccex.cache import OnceCache, SnapshotBuilder
from ccex.exceptions import ParseError
from ccex.exchanges.base import CachedPublicClient, PrecisionMap
from ccex.logging import get_logger
from ccex.models import Board, BoardSide, CurrencyPair, OrderBookTick, Precision, precision_of
from ccex.parsing import (
    bool_field,
    field,
    list_field,
    optional_decimal,
    parse_levels,
    path,
    string_field,
)

logger = get_logger(__name__)

KUCOIN_BASE_URL = "https://api.kucoin.com"


class KucoinClient(CachedPublicClient):
    """Kucoin adapter."""

    name: ClassVar[str] = "kucoin"
    default_base_url: ClassVar[str] = KUCOIN_BASE_URL
    caches_boards: ClassVar[bool] = True

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._pairs: OnceCache[list[CurrencyPair]] = OnceCache(self._fetch_currency_pairs)

    def _headers(self) -> dict[str, str] | None:
        return {"User-Agent": self._settings.http.user_agent}

    async def _tickers(self) -> dict[CurrencyPair, Any]:
        """Tickers keyed by pair; entries without a symbol or last price are dropped."""
        payload = await self._fetcher.get_json("/api/v1/market/allTickers")
        tickers: dict[CurrencyPair, Any] = {}
        for ticker in list_field(payload, "data.ticker"):
            try:
                pair = CurrencyPair.split(string_field(ticker, "symbol"), "-")
            except ParseError:
                continue
            if ticker.get("last") is None:
                logger.debug("ticker_without_trades", exchange=self.name, pair=str(pair))
                continue
            tickers[pair] = ticker
        return tickers

    async def _fetch_market(self) -> SnapshotBuilder:
        builder = SnapshotBuilder()
        for pair, ticker in (await self._tickers()).items():
            builder.add(
                pair,
                rate=optional_decimal(ticker, "last"),
                volume=optional_decimal(ticker, "vol"),
                tick=OrderBookTick(
                    best_ask_price=optional_decimal(ticker, "sell"),
                    best_bid_price=optional_decimal(ticker, "buy"),
                ),
            )
        return builder

    async def _fetch_currency_pairs(self) -> list[CurrencyPair]:
        payload = await self._fetcher.get_json("/api/v1/symbols")
        pairs = []
        for symbol in list_field(payload, "data"):
            try:
                pairs.append(
                    CurrencyPair(
                        string_field(symbol, "baseCurrency"),
                        string_field(symbol, "quoteCurrency"),
                    )
                )
            except ParseError:
                continue
        return pairs

    async def currency_pairs(self) -> list[CurrencyPair]:
        return list(await self._pairs.get())

    async def _fetch_precisions(self) -> PrecisionMap:
        precisions: PrecisionMap = {}
        for pair, ticker in (await self._tickers()).items():
            # Price precision is the finest of the quoted prices
            price_digits = [
                precision_of(ticker[key])
                for key in ("buy", "sell", "high", "low")
                if ticker.get(key) is not None
            ]
            volume = ticker.get("vol")
            precisions.setdefault(pair.trading, {})[pair.settlement] = Precision(
                price_precision=max(price_digits, default=0),
                amount_precision=precision_of(volume) if volume is not None else 0,
            )
        return precisions

    async def _fetch_board(self, pair: CurrencyPair) -> Board:
        payload = await self._fetcher.get_json(
            "/api/v2/market/orderbook/level2",
            params={"symbol": f"{pair.trading}-{pair.settlement}"},
        )
        data = path(payload, "data")
        return Board(
            asks=parse_levels(field(data, "asks"), BoardSide.ASK),
            bids=parse_levels(field(data, "bids"), BoardSide.BID),
        )

    async def frozen_currency(self) -> list[str]:
        payload = await self._fetcher.get_json("/api/v1/currencies")
        frozen = []
        for currency in list_field(payload, "data"):
            withdraw_enabled = bool_field(currency, "isWithdrawEnabled")
            deposit_enabled = bool_field(currency, "isDepositEnabled")
            name = string_field(currency, "currency")
            if not (withdraw_enabled and deposit_enabled):
                frozen.append(name)
        return frozen
