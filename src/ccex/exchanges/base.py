"""Abstract public exchange client and the shared cached implementation.

PublicClient is the contract every venue adapter satisfies; callers depend
only on it. CachedPublicClient implements the contract's caching behavior
once: venue subclasses supply the fetch-and-parse steps and inherit the
TTL snapshot cache, the fetch-once precision table, the optional board
cache and the optional aggregator tick path.
"""

import time
from abc import ABC, abstractmethod
from decimal import Decimal
from types import TracebackType
from typing import ClassVar

import httpx

from ccex.aggregator import OrderBookSource
from ccex.cache import (
    Clock,
    MarketCache,
    OnceCache,
    SnapshotBuilder,
    TTLCache,
    copy_table,
    lookup,
)
from ccex.config import AppSettings
from ccex.http import HttpFetcher
from ccex.logging import get_logger
from ccex.models import (
    Board,
    CurrencyPair,
    OrderBookTickMap,
    Precision,
    RateMap,
    VolumeMap,
)

logger = get_logger(__name__)

PrecisionMap = dict[str, dict[str, Precision]]


class PublicClient(ABC):
    """Abstract base class for public market data clients."""

    name: ClassVar[str] = ""

    @abstractmethod
    async def currency_pairs(self) -> list[CurrencyPair]:
        """Return every market the venue lists."""
        ...

    @abstractmethod
    async def rate(self, trading: str, settlement: str) -> Decimal:
        """Last trade price of trading in settlement units."""
        ...

    @abstractmethod
    async def volume(self, trading: str, settlement: str) -> Decimal:
        """Traded volume over the venue's rolling window."""
        ...

    @abstractmethod
    async def rate_map(self) -> RateMap:
        ...

    @abstractmethod
    async def volume_map(self) -> VolumeMap:
        ...

    @abstractmethod
    async def order_book_tick_map(self) -> OrderBookTickMap:
        ...

    @abstractmethod
    async def board(self, trading: str, settlement: str) -> Board:
        """Full order book for one pair."""
        ...

    @abstractmethod
    async def precise(self, trading: str, settlement: str) -> Precision:
        """Price/amount decimal places accepted for orders on one pair."""
        ...

    @abstractmethod
    async def frozen_currency(self) -> list[str]:
        """Assets whose deposits or withdrawals are disabled."""
        ...

    @abstractmethod
    async def aclose(self) -> None:
        """Release network resources."""
        ...

    async def __aenter__(self) -> "PublicClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


class CachedPublicClient(PublicClient):
    """PublicClient backed by a MarketCache.

    Subclasses implement _fetch_market (one refresh worth of tickers),
    _fetch_precisions, _fetch_board and frozen_currency, and may override
    currency_pairs when the venue has a dedicated listing endpoint.

    Args:
        base_url: Override the venue root URL (tests, proxies).
        settings: Application settings; defaults are read from the environment.
        transport: httpx transport shared by every request of this client.
        clock: Monotonic time source for all TTL decisions.
        tick_source: Aggregator serving order_book_tick_map(). The client
            takes ownership and closes it in aclose().
    """

    default_base_url: ClassVar[str] = ""
    # Set by venues whose depth endpoint is rate limited
    caches_boards: ClassVar[bool] = False

    def __init__(
        self,
        base_url: str | None = None,
        settings: AppSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Clock = time.monotonic,
        tick_source: OrderBookSource | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._clock = clock
        self._fetcher = HttpFetcher(
            base_url or self.default_base_url,
            self._settings.http,
            transport,
            headers=self._headers(),
        )
        self._market = MarketCache(
            self._fetch_market,
            ttl=self._settings.cache.rate_ttl,
            clock=clock,
            name=self.name,
        )
        self._precisions: OnceCache[PrecisionMap] = OnceCache(self._load_precisions)
        self._boards: TTLCache[CurrencyPair, Board] | None = (
            TTLCache(self._settings.cache.board_ttl, clock) if self.caches_boards else None
        )
        self._tick_source = tick_source
        self._ticks: MarketCache | None = None
        if tick_source is not None:
            self._ticks = MarketCache(
                self._fetch_aggregated_ticks,
                ttl=self._settings.aggregator.tick_ttl,
                clock=clock,
                name=f"{self.name}:aggregator",
            )

    @property
    def market_cache(self) -> MarketCache:
        return self._market

    def _headers(self) -> dict[str, str] | None:
        return None

    # ──────────────────────────────────────────────
    # Venue hooks
    # ──────────────────────────────────────────────

    @abstractmethod
    async def _fetch_market(self) -> SnapshotBuilder:
        """Fetch and parse one full refresh of rates, volumes and ticks."""
        ...

    @abstractmethod
    async def _fetch_precisions(self) -> PrecisionMap:
        ...

    @abstractmethod
    async def _fetch_board(self, pair: CurrencyPair) -> Board:
        ...

    # ──────────────────────────────────────────────
    # Cached contract
    # ──────────────────────────────────────────────

    async def currency_pairs(self) -> list[CurrencyPair]:
        """Markets present in the current rate snapshot.

        Venues with a listing endpoint override this with a fetch-once list.
        """
        snapshot = await self._market.snapshot()
        return snapshot.pairs()

    async def rate(self, trading: str, settlement: str) -> Decimal:
        trading, settlement = trading.upper(), settlement.upper()
        if trading == settlement:
            return Decimal("1")
        snapshot = await self._market.snapshot()
        return lookup(snapshot.rates, trading, settlement, "rate")

    async def volume(self, trading: str, settlement: str) -> Decimal:
        trading, settlement = trading.upper(), settlement.upper()
        snapshot = await self._market.snapshot()
        return lookup(snapshot.volumes, trading, settlement, "volume")

    async def rate_map(self) -> RateMap:
        snapshot = await self._market.snapshot()
        return copy_table(snapshot.rates)

    async def volume_map(self) -> VolumeMap:
        snapshot = await self._market.snapshot()
        return copy_table(snapshot.volumes)

    async def order_book_tick_map(self) -> OrderBookTickMap:
        cache = self._ticks if self._ticks is not None else self._market
        snapshot = await cache.snapshot()
        return copy_table(snapshot.ticks)

    async def precise(self, trading: str, settlement: str) -> Precision:
        trading, settlement = trading.upper(), settlement.upper()
        if trading == settlement:
            return Precision()
        precisions = await self._precisions.get()
        return lookup(precisions, trading, settlement, "precision")

    async def board(self, trading: str, settlement: str) -> Board:
        pair = CurrencyPair(trading, settlement)
        if self._boards is None:
            return await self._fetch_board(pair)

        cached = self._boards.get(pair)
        if cached is not None:
            return cached
        board = await self._fetch_board(pair)
        self._boards.set(pair, board)
        return board

    async def aclose(self) -> None:
        await self._fetcher.aclose()
        if self._tick_source is not None:
            await self._tick_source.aclose()

    # ──────────────────────────────────────────────
    # Internals
    # ──────────────────────────────────────────────

    async def _load_precisions(self) -> PrecisionMap:
        precisions = await self._fetch_precisions()
        logger.info(
            "precision_loaded",
            exchange=self.name,
            pairs=sum(len(m) for m in precisions.values()),
        )
        return precisions

    async def _fetch_aggregated_ticks(self) -> SnapshotBuilder:
        assert self._tick_source is not None
        boards = await self._tick_source.boards(self.name)
        builder = SnapshotBuilder()
        for pair, board in boards.items():
            builder.add(pair, tick=board.tick())
        return builder

