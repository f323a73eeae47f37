"""Huobi public market data.

Huobi has no all-markets ticker with last price and volume, so a refresh
fans out one /market/detail/merged request per listed pair, at most
cache.fanout_workers in flight. Each worker parses its own response; the
refresh merges successful pairs into one SnapshotBuilder. Pairs whose
request or parse failed are left out of the snapshot.

The pair listing (/v1/common/symbols) is fetched once; if it fails the whole
refresh fails. Depth responses are cached per pair for cache.board_ttl.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, ClassVar

from ccex.cache import OnceCache, SnapshotBuilder
from ccex.exceptions import ParseError
from ccex.exchanges.base import CachedPublicClient, PrecisionMap
from ccex.fanout import fan_out
from ccex.logging import bound_exchange, get_logger
from ccex.models import Board, BoardSide, CurrencyPair, OrderBookTick, Precision
from ccex.parsing import (
    bool_field,
    decimal_field,
    field,
    list_field,
    parse_levels,
    string_field,
    to_decimal,
)

logger = get_logger(__name__)

HUOBI_BASE_URL = "https://api.huobi.pro"


@dataclass(frozen=True)
class HuobiTick:
    """Parsed merged-detail ticker for one pair."""

    rate: Decimal
    volume: Decimal
    tick: OrderBookTick | None


def _ok(payload: Any) -> Any:
    """Reject Huobi error envelopes ({"status": "error", "err-msg": ...})."""
    status = field(payload, "status")
    if status != "ok":
        raise ParseError(f"huobi status {status}: {payload.get('err-msg', '')}")
    return payload


def parse_merged_tick(payload: Any) -> HuobiTick:
    """Extract close, vol and the best ask/bid from a merged-detail response."""
    tick = field(_ok(payload), "tick")
    if not isinstance(tick, dict):
        raise ParseError("tick is not an object")
    return HuobiTick(
        rate=decimal_field(tick, "close"),
        volume=decimal_field(tick, "vol"),
        tick=_best_prices(tick),
    )


def _best_prices(tick: dict[str, Any]) -> OrderBookTick | None:
    # A malformed ask/bid only drops the tick; close and vol are still served
    ask, bid = tick.get("ask"), tick.get("bid")
    if not (isinstance(ask, list) and isinstance(bid, list) and ask and bid):
        return None
    try:
        return OrderBookTick(
            best_ask_price=to_decimal(ask[0], "ask"),
            best_bid_price=to_decimal(bid[0], "bid"),
            best_ask_amount=to_decimal(ask[1], "ask") if len(ask) > 1 else Decimal("0"),
            best_bid_amount=to_decimal(bid[1], "bid") if len(bid) > 1 else Decimal("0"),
        )
    except ParseError:
        return None


class HuobiClient(CachedPublicClient):
    """Huobi adapter with a concurrent per-pair refresh."""

    name: ClassVar[str] = "huobi"
    default_base_url: ClassVar[str] = HUOBI_BASE_URL
    caches_boards: ClassVar[bool] = True

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._pairs: OnceCache[list[CurrencyPair]] = OnceCache(self._fetch_currency_pairs)

    async def _symbols(self) -> list[Any]:
        payload = await self._fetcher.get_json("/v1/common/symbols")
        return list_field(_ok(payload), "data")

    async def _fetch_currency_pairs(self) -> list[CurrencyPair]:
        return [
            CurrencyPair(string_field(s, "base-currency"), string_field(s, "quote-currency"))
            for s in await self._symbols()
        ]

    async def currency_pairs(self) -> list[CurrencyPair]:
        return list(await self._pairs.get())

    async def _fetch_tick(self, pair: CurrencyPair) -> HuobiTick:
        payload = await self._fetcher.get_json(
            "/market/detail/merged",
            params={"symbol": pair.trading.lower() + pair.settlement.lower()},
        )
        return parse_merged_tick(payload)

    async def _fetch_market(self) -> SnapshotBuilder:
        pairs = await self.currency_pairs()
        with bound_exchange(self.name):
            result = await fan_out(
                pairs, self._fetch_tick, workers=self._settings.cache.fanout_workers
            )

        builder = SnapshotBuilder()
        for pair, parsed in result.succeeded:
            builder.add(pair, rate=parsed.rate, volume=parsed.volume, tick=parsed.tick)
        return builder

    async def _fetch_precisions(self) -> PrecisionMap:
        precisions: PrecisionMap = {}
        for symbol in await self._symbols():
            try:
                pair = CurrencyPair(
                    string_field(symbol, "base-currency"), string_field(symbol, "quote-currency")
                )
                precision = Precision(
                    price_precision=int(decimal_field(symbol, "price-precision")),
                    amount_precision=int(decimal_field(symbol, "amount-precision")),
                )
            except ParseError as exc:
                logger.warning("precision_skipped", exchange=self.name, error=str(exc))
                continue
            precisions.setdefault(pair.trading, {})[pair.settlement] = precision
        return precisions

    async def _fetch_board(self, pair: CurrencyPair) -> Board:
        payload = await self._fetcher.get_json(
            "/market/depth",
            params={"symbol": pair.trading.lower() + pair.settlement.lower(), "type": "step0"},
        )
        tick = field(_ok(payload), "tick")
        return Board(
            asks=parse_levels(field(tick, "asks"), BoardSide.ASK),
            bids=parse_levels(field(tick, "bids"), BoardSide.BID),
        )

    async def frozen_currency(self) -> list[str]:
        payload = await self._fetcher.get_json(
            "/v1/settings/currencys", params={"language": "en-US"}
        )
        frozen = []
        for currency in list_field(_ok(payload), "data"):
            try:
                withdraw_enabled = bool_field(currency, "withdraw-enabled")
                deposit_enabled = bool_field(currency, "deposit-enabled")
            except ParseError:
                continue
            if withdraw_enabled and deposit_enabled:
                continue
            frozen.append(string_field(currency, "display-name"))
        return frozen
