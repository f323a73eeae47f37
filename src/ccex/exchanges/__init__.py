"""Exchange adapters -- one PublicClient implementation per venue."""

from ccex.exchanges.base import CachedPublicClient, PrecisionMap, PublicClient
from ccex.exchanges.bitflyer import BitflyerClient
from ccex.exchanges.cobinhood import CobinhoodClient
from ccex.exchanges.huobi import HuobiClient
from ccex.exchanges.kucoin import KucoinClient
from ccex.exchanges.lbank import LbankClient
from ccex.exchanges.poloniex import PoloniexClient

__all__ = [
    "BitflyerClient",
    "CachedPublicClient",
    "CobinhoodClient",
    "HuobiClient",
    "KucoinClient",
    "LbankClient",
    "PoloniexClient",
    "PrecisionMap",
    "PublicClient",
]
