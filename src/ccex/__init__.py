"""Public market data clients for cryptocurrency exchanges.

Rates, volumes and best bid/ask for every market of a venue are served
from a short-lived in-memory snapshot that is refreshed at most once per
TTL window, however many callers ask concurrently.
"""

from ccex.config import AppSettings
from ccex.exceptions import ClientError, NotFoundError
from ccex.exchanges.base import PublicClient
from ccex.models import Board, CurrencyPair, OrderBookTick, Precision
from ccex.registry import available_exchanges, new_public_client, register

__all__ = [
    "AppSettings",
    "Board",
    "ClientError",
    "CurrencyPair",
    "NotFoundError",
    "OrderBookTick",
    "Precision",
    "PublicClient",
    "available_exchanges",
    "new_public_client",
    "register",
]
