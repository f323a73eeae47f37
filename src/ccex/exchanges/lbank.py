"""Lbank public market data.

ticker.do?symbol=all lists every market with its latest price and volume,
but no best bid/ask, so order_book_tick_map() is not available here.
Symbols are lower case "eth_btc".
"""

from typing import Any, ClassVar

from ccex.cache import OnceCache, SnapshotBuilder
from ccex.exceptions import ParseError, UnsupportedOperationError
from ccex.exchanges.base import CachedPublicClient, PrecisionMap
from ccex.models import (
    Board,
    BoardSide,
    CurrencyPair,
    OrderBookTickMap,
    Precision,
    precision_of,
)
from ccex.parsing import (
    as_list,
    bool_field,
    decimal_field,
    field,
    parse_levels,
    string_field,
)

LBANK_BASE_URL = "https://api.lbkex.com"
BOARD_DEPTH = 60


def parse_lbank_pair(symbol: str) -> CurrencyPair | None:
    """Parse "eth_btc"; symbols that are not two assets yield None."""
    try:
        return CurrencyPair.split(symbol, "_")
    except ParseError:
        return None


class LbankClient(CachedPublicClient):
    """Lbank adapter."""

    name: ClassVar[str] = "lbank"
    default_base_url: ClassVar[str] = LBANK_BASE_URL
    caches_boards: ClassVar[bool] = True

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._pairs: OnceCache[list[CurrencyPair]] = OnceCache(self._fetch_currency_pairs)

    async def _tickers(self) -> list[tuple[CurrencyPair, Any]]:
        payload = await self._fetcher.get_json("/v1/ticker.do", params={"symbol": "all"})
        tickers = []
        for entry in as_list(payload, "tickers"):
            pair = parse_lbank_pair(string_field(entry, "symbol"))
            ticker = field(entry, "ticker")
            if pair is not None:
                tickers.append((pair, ticker))
        return tickers

    async def _fetch_market(self) -> SnapshotBuilder:
        builder = SnapshotBuilder()
        for pair, ticker in await self._tickers():
            builder.add(
                pair,
                rate=decimal_field(ticker, "latest"),
                volume=decimal_field(ticker, "vol"),
            )
        return builder

    async def order_book_tick_map(self) -> OrderBookTickMap:
        raise UnsupportedOperationError("lbank publishes no best bid/ask in its ticker")

    async def _fetch_currency_pairs(self) -> list[CurrencyPair]:
        payload = await self._fetcher.get_json("/v1/currencyPairs.do")
        pairs = []
        for symbol in as_list(payload, "currency pairs"):
            if not isinstance(symbol, str):
                raise ParseError(f"currency pair is not a string: {symbol!r}")
            pair = parse_lbank_pair(symbol)
            if pair is not None:
                pairs.append(pair)
        return pairs

    async def currency_pairs(self) -> list[CurrencyPair]:
        return list(await self._pairs.get())

    async def _fetch_precisions(self) -> PrecisionMap:
        precisions: PrecisionMap = {}
        for pair, ticker in await self._tickers():
            precisions.setdefault(pair.trading, {})[pair.settlement] = Precision(
                price_precision=precision_of(decimal_field(ticker, "latest")),
                amount_precision=precision_of(decimal_field(ticker, "vol")),
            )
        return precisions

    async def _fetch_board(self, pair: CurrencyPair) -> Board:
        payload = await self._fetcher.get_json(
            "/v1/depth.do",
            params={
                "symbol": f"{pair.trading.lower()}_{pair.settlement.lower()}",
                "size": BOARD_DEPTH,
            },
        )
        return Board(
            asks=parse_levels(field(payload, "asks"), BoardSide.ASK),
            bids=parse_levels(field(payload, "bids"), BoardSide.BID),
        )

    async def frozen_currency(self) -> list[str]:
        payload = await self._fetcher.get_json("/v1/withdrawConfigs.do")
        return [
            string_field(config, "assetCode")
            for config in as_list(payload, "withdraw configs")
            if not bool_field(config, "canWithDraw")
        ]
