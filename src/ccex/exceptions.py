"""Custom exceptions for the exchange client library.

Every error raised by the fetcher, the caches and the exchange adapters
lives here so callers can catch ClientError for the whole library.
"""


class ClientError(Exception):
    """Base exception for all exchange client errors."""


class TransportError(ClientError):
    """Raised when a venue cannot be reached or answers with a non-2xx status."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class ParseError(ClientError):
    """Raised when a venue response does not have the expected shape."""


class NotFoundError(ClientError):
    """Raised when a trading/settlement pair is not tracked by the venue."""

    def __init__(self, trading: str, settlement: str, what: str = "rate") -> None:
        super().__init__(f"{what} not found for {trading}/{settlement}")
        self.trading = trading
        self.settlement = settlement


class ConfigurationError(ClientError):
    """Raised when the client is constructed with invalid settings."""


class UnknownExchangeError(ConfigurationError):
    """Raised when no adapter is registered under the requested name."""


class UnsupportedOperationError(ClientError):
    """Raised when a venue's public API cannot serve an operation."""


class InsufficientDepthError(ClientError):
    """Raised when an order book is too thin to fill the requested amount."""
