"""Exchange name to client factory mapping.

new_public_client() is the single entry point applications use to obtain a
PublicClient; it wires settings and the optional order-book aggregator.
"""

from collections.abc import Callable
from typing import Any

from ccex.aggregator import ShrimpyClient
from ccex.config import AppSettings
from ccex.exceptions import UnknownExchangeError
from ccex.exchanges.base import CachedPublicClient, PublicClient
from ccex.exchanges.bitflyer import BitflyerClient
from ccex.exchanges.cobinhood import CobinhoodClient
from ccex.exchanges.huobi import HuobiClient
from ccex.exchanges.kucoin import KucoinClient
from ccex.exchanges.lbank import LbankClient
from ccex.exchanges.poloniex import PoloniexClient
from ccex.logging import get_logger

logger = get_logger(__name__)

ClientFactory = Callable[..., PublicClient]

_FACTORIES: dict[str, ClientFactory] = {
    BitflyerClient.name: BitflyerClient,
    PoloniexClient.name: PoloniexClient,
    HuobiClient.name: HuobiClient,
    KucoinClient.name: KucoinClient,
    LbankClient.name: LbankClient,
    CobinhoodClient.name: CobinhoodClient,
}

# Venues the aggregator covers; the others keep serving ticks from their ticker
AGGREGATED_EXCHANGES = frozenset({"poloniex", "huobi", "kucoin"})


def register(name: str, factory: ClientFactory) -> None:
    """Register (or replace) the factory for an exchange name."""
    _FACTORIES[name.lower()] = factory


def available_exchanges() -> list[str]:
    return sorted(_FACTORIES)


def new_public_client(
    name: str, settings: AppSettings | None = None, **kwargs: Any
) -> PublicClient:
    """Create the public client for an exchange.

    Args:
        name: Exchange name, case-insensitive (e.g. "huobi").
        settings: Application settings; read from the environment if omitted.
        **kwargs: Passed to the client constructor (transport, clock, base_url).

    Raises:
        UnknownExchangeError: If no client is registered under name.
    """
    key = name.lower()
    factory = _FACTORIES.get(key)
    if factory is None:
        raise UnknownExchangeError(f"unknown exchange: {name}")

    settings = settings or AppSettings()
    if (
        settings.aggregator.enabled
        and key in AGGREGATED_EXCHANGES
        and "tick_source" not in kwargs
        and isinstance(factory, type)
        and issubclass(factory, CachedPublicClient)
    ):
        kwargs["tick_source"] = ShrimpyClient(
            settings.aggregator, settings.http, transport=kwargs.get("transport")
        )

    logger.debug("public_client_created", exchange=key)
    return factory(settings=settings, **kwargs)
