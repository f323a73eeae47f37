"""Bitflyer public market data.

The /ticker endpoint answers for a single product (BTC_JPY by default), so
one request refreshes the whole snapshot. Pairs are derived from that
snapshot and precision from the digits of the same ticker.
"""

from typing import Any, ClassVar

from ccex.cache import SnapshotBuilder
from ccex.exchanges.base import CachedPublicClient, PrecisionMap
from ccex.models import Board, BoardSide, CurrencyPair, OrderBookTick, Precision, precision_of
from ccex.parsing import (
    decimal_field,
    field,
    optional_decimal,
    parse_object_levels,
    string_field,
)

BITFLYER_BASE_URL = "https://api.bitflyer.jp/v1"

SETTLEMENTS = ["JPY"]


class BitflyerClient(CachedPublicClient):
    """Bitflyer adapter; quotes are settled in JPY."""

    name: ClassVar[str] = "bitflyer"
    default_base_url: ClassVar[str] = BITFLYER_BASE_URL

    @staticmethod
    def _pair(ticker: Any) -> CurrencyPair:
        return CurrencyPair.from_suffix(string_field(ticker, "product_code"), SETTLEMENTS)

    async def _fetch_market(self) -> SnapshotBuilder:
        ticker = await self._fetcher.get_json("/ticker")
        pair = self._pair(ticker)

        builder = SnapshotBuilder()
        builder.add(
            pair,
            rate=decimal_field(ticker, "ltp"),
            volume=decimal_field(ticker, "volume"),
            tick=OrderBookTick(
                best_ask_price=decimal_field(ticker, "best_ask"),
                best_bid_price=decimal_field(ticker, "best_bid"),
                best_ask_amount=optional_decimal(ticker, "best_ask_size"),
                best_bid_amount=optional_decimal(ticker, "best_bid_size"),
            ),
        )
        return builder

    async def _fetch_precisions(self) -> PrecisionMap:
        ticker = await self._fetcher.get_json("/ticker")
        pair = self._pair(ticker)
        precision = Precision(
            price_precision=precision_of(field(ticker, "ltp")),
            amount_precision=precision_of(field(ticker, "volume")),
        )
        return {pair.trading: {pair.settlement: precision}}

    async def _fetch_board(self, pair: CurrencyPair) -> Board:
        payload = await self._fetcher.get_json(
            "/board", params={"product_code": f"{pair.trading}_{pair.settlement}"}
        )
        return Board(
            asks=parse_object_levels(field(payload, "asks"), BoardSide.ASK, "price", "size"),
            bids=parse_object_levels(field(payload, "bids"), BoardSide.BID, "price", "size"),
        )

    async def frozen_currency(self) -> list[str]:
        # Bitflyer publishes no per-asset deposit/withdrawal status
        return []
