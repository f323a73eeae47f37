"""In-memory market data caches with TTL-driven lazy refresh.

MarketCache holds one MarketSnapshot (rate, volume and order-book-tick maps
taken by the same refresh) behind an asyncio.Lock. A read that finds the
snapshot stale refreshes it before returning, and concurrent readers in the
same stale window share that single refresh.

Refreshes are atomic: the refresher fills a private SnapshotBuilder and the
cache only publishes a fully built snapshot. A failed refresh leaves the
previous snapshot and its timestamp in place, so the next read retries.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Generic, TypeVar

from ccex.exceptions import ConfigurationError, NotFoundError
from ccex.logging import get_logger
from ccex.models import CurrencyPair, OrderBookTick, OrderBookTickMap, RateMap, VolumeMap

logger = get_logger(__name__)

Clock = Callable[[], float]

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")
V = TypeVar("V")


@dataclass(frozen=True)
class MarketSnapshot:
    """Rate, volume and tick maps produced by one refresh.

    updated_at is the clock reading taken when that refresh started;
    None means the cache has never been filled.
    """

    rates: RateMap = field(default_factory=dict)
    volumes: VolumeMap = field(default_factory=dict)
    ticks: OrderBookTickMap = field(default_factory=dict)
    updated_at: float | None = None

    def pairs(self) -> list[CurrencyPair]:
        """Every pair that has a rate in this snapshot."""
        return [
            CurrencyPair(trading, settlement)
            for trading, by_settlement in self.rates.items()
            for settlement in by_settlement
        ]


class SnapshotBuilder:
    """Accumulates parsed ticker data for one refresh.

    Owned by a single writer (the refresh coroutine); never shared with
    readers until build() hands out an immutable snapshot.
    """

    def __init__(self) -> None:
        self._rates: RateMap = {}
        self._volumes: VolumeMap = {}
        self._ticks: OrderBookTickMap = {}

    def add(
        self,
        pair: CurrencyPair,
        rate: Decimal | None = None,
        volume: Decimal | None = None,
        tick: OrderBookTick | None = None,
    ) -> None:
        """Record whatever the venue reported for one pair."""
        if rate is not None:
            self._rates.setdefault(pair.trading, {})[pair.settlement] = rate
        if volume is not None:
            self._volumes.setdefault(pair.trading, {})[pair.settlement] = volume
        if tick is not None:
            self._ticks.setdefault(pair.trading, {})[pair.settlement] = tick

    def __len__(self) -> int:
        return sum(len(m) for m in self._rates.values())

    def build(self, updated_at: float) -> MarketSnapshot:
        return MarketSnapshot(
            rates=self._rates,
            volumes=self._volumes,
            ticks=self._ticks,
            updated_at=updated_at,
        )


def lookup(table: dict[str, dict[str, V]], trading: str, settlement: str, what: str) -> V:
    """Find table[trading][settlement] or raise NotFoundError."""
    by_settlement = table.get(trading)
    if by_settlement is None or settlement not in by_settlement:
        raise NotFoundError(trading, settlement, what)
    return by_settlement[settlement]


def copy_table(table: dict[str, dict[str, V]]) -> dict[str, dict[str, V]]:
    """Two-level copy so callers cannot mutate a published snapshot."""
    return {trading: dict(by_settlement) for trading, by_settlement in table.items()}


class MarketCache:
    """Lock-guarded market snapshot with time-boxed refresh.

    Args:
        refresher: Coroutine function performing one fetch and returning a
            filled SnapshotBuilder. Called at most once per stale window.
        ttl: Seconds a snapshot stays fresh.
        clock: Monotonic time source; tests inject a fake one.
        name: Exchange name, used in log events.
    """

    def __init__(
        self,
        refresher: Callable[[], Awaitable[SnapshotBuilder]],
        ttl: float,
        clock: Clock = time.monotonic,
        name: str = "",
    ) -> None:
        if ttl <= 0:
            raise ConfigurationError(f"cache ttl must be positive, got {ttl}")
        self._refresher = refresher
        self._ttl = ttl
        self._clock = clock
        self._name = name
        self._snapshot = MarketSnapshot()
        self._lock = asyncio.Lock()
        self._refresh_count = 0

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def refresh_count(self) -> int:
        """Number of successful refreshes so far."""
        return self._refresh_count

    @property
    def current(self) -> MarketSnapshot:
        """The published snapshot, without any freshness check."""
        return self._snapshot

    def is_stale(self, now: float | None = None) -> bool:
        """True when the snapshot is older than the TTL or was never filled."""
        updated_at = self._snapshot.updated_at
        if updated_at is None:
            return True
        if now is None:
            now = self._clock()
        return now - updated_at >= self._ttl

    async def snapshot(self) -> MarketSnapshot:
        """Return a fresh snapshot, refreshing first if the TTL has expired.

        Fresh snapshots are returned without taking the lock. Otherwise the
        staleness check is repeated under the lock, so callers that queued
        behind a refresh see its result instead of fetching again.
        """
        if not self.is_stale():
            return self._snapshot

        async with self._lock:
            now = self._clock()
            if self.is_stale(now):
                await self._refresh(now)
            return self._snapshot

    async def _refresh(self, started_at: float) -> None:
        try:
            builder = await self._refresher()
        except Exception:
            logger.warning("market_cache_refresh_failed", exchange=self._name, exc_info=True)
            raise

        self._snapshot = builder.build(updated_at=started_at)
        self._refresh_count += 1
        logger.debug(
            "market_cache_refreshed",
            exchange=self._name,
            pairs=len(builder),
            refresh_count=self._refresh_count,
        )


class OnceCache(Generic[T]):
    """Value loaded on first use and kept for the client's lifetime.

    Used for data that rarely changes within a process (precision tables,
    currency-pair lists). A failed load is not remembered; the next call
    tries again.
    """

    def __init__(self, loader: Callable[[], Awaitable[T]]) -> None:
        self._loader = loader
        self._value: T | None = None
        self._loaded = False
        self._lock = asyncio.Lock()

    @property
    def loaded(self) -> bool:
        return self._loaded

    def set(self, value: T) -> None:
        """Seed the cache without calling the loader."""
        self._value = value
        self._loaded = True

    async def get(self) -> T:
        if not self._loaded:
            async with self._lock:
                if not self._loaded:
                    self.set(await self._loader())
        return self._value  # type: ignore[return-value]


class TTLCache(Generic[K, V]):
    """Per-key cache whose entries expire ttl seconds after being stored.

    Holds full order books for venues that rate-limit depth requests.
    """

    def __init__(self, ttl: float, clock: Clock = time.monotonic) -> None:
        if ttl <= 0:
            raise ConfigurationError(f"cache ttl must be positive, got {ttl}")
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[K, tuple[V, float]] = {}

    def get(self, key: K) -> V | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, key: K, value: V) -> None:
        now = self._clock()
        # drop expired entries so boards for abandoned pairs do not pile up
        self._entries = {k: e for k, e in self._entries.items() if e[1] > now}
        self._entries[key] = (value, now + self._ttl)

    def __len__(self) -> int:
        return len(self._entries)
