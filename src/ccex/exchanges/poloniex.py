"""Poloniex public market data.

returnTicker lists every market in one response keyed "SETTLEMENT_TRADING"
(e.g. BTC_BCN is BCN priced in BTC). Any malformed market fails the whole
refresh, leaving the previous snapshot in place.
"""

from typing import Any, ClassVar

from ccex.cache import SnapshotBuilder
from ccex.exceptions import ParseError
from ccex.exchanges.base import CachedPublicClient, PrecisionMap
from ccex.logging import get_logger
from ccex.models import Board, BoardSide, CurrencyPair, OrderBookTick, Precision, precision_of
from ccex.parsing import decimal_field, field, parse_levels, to_decimal

logger = get_logger(__name__)

POLONIEX_BASE_URL = "https://poloniex.com"


def parse_poloniex_pair(symbol: str) -> CurrencyPair:
    """Parse "BTC_BCN" as BCN priced in BTC."""
    return CurrencyPair.split(symbol, "_", reverse=True)


class PoloniexClient(CachedPublicClient):
    """Poloniex adapter."""

    name: ClassVar[str] = "poloniex"
    default_base_url: ClassVar[str] = POLONIEX_BASE_URL

    async def _command(self, command: str, **params: str) -> Any:
        return await self._fetcher.get_json("/public", params={"command": command, **params})

    async def _tickers(self) -> dict[CurrencyPair, Any]:
        payload = await self._command("returnTicker")
        if not isinstance(payload, dict):
            raise ParseError("returnTicker is not an object")

        tickers: dict[CurrencyPair, Any] = {}
        for symbol, ticker in payload.items():
            try:
                pair = parse_poloniex_pair(symbol)
            except ParseError:
                logger.warning("unparsed_symbol", exchange=self.name, symbol=symbol)
                continue
            tickers[pair] = ticker
        return tickers

    async def _fetch_market(self) -> SnapshotBuilder:
        builder = SnapshotBuilder()
        for pair, ticker in (await self._tickers()).items():
            builder.add(
                pair,
                rate=decimal_field(ticker, "last"),
                volume=decimal_field(ticker, "baseVolume"),
                tick=OrderBookTick(
                    best_ask_price=decimal_field(ticker, "lowestAsk"),
                    best_bid_price=decimal_field(ticker, "highestBid"),
                ),
            )
        return builder

    async def _fetch_precisions(self) -> PrecisionMap:
        precisions: PrecisionMap = {}
        for pair, ticker in (await self._tickers()).items():
            precisions.setdefault(pair.trading, {})[pair.settlement] = Precision(
                price_precision=precision_of(field(ticker, "last")),
                amount_precision=precision_of(field(ticker, "baseVolume")),
            )
        return precisions

    async def _fetch_board(self, pair: CurrencyPair) -> Board:
        payload = await self._command(
            "returnOrderBook", currencyPair=f"{pair.settlement}_{pair.trading}"
        )
        return Board(
            asks=parse_levels(field(payload, "asks"), BoardSide.ASK),
            bids=parse_levels(field(payload, "bids"), BoardSide.BID),
        )

    async def frozen_currency(self) -> list[str]:
        payload = await self._command("returnCurrencies")
        if not isinstance(payload, dict):
            raise ParseError("returnCurrencies is not an object")

        frozen = []
        for currency, info in payload.items():
            if not isinstance(info, dict):
                raise ParseError(f"currency {currency} is not an object")
            flags = (info.get(key, 0) for key in ("frozen", "delisted", "disabled"))
            if any(to_decimal(flag, currency) == 1 for flag in flags):
                frozen.append(currency)
        return sorted(frozen)
