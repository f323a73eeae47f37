"""Configuration system using pydantic-settings with environment variable loading."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 6.3; WOW64; Trident/7.0; MAFSJS; rv:11.0) like Gecko"
)


class HttpSettings(BaseSettings):
    """HTTP transport settings shared by every venue fetcher."""

    model_config = SettingsConfigDict(env_prefix="CCEX_HTTP_")

    timeout: float = 10.0  # seconds, per request
    user_agent: str = DEFAULT_USER_AGENT  # Kucoin rejects default client agents

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be positive")
        return value


class CacheSettings(BaseSettings):
    """Market data cache parameters.

    rate_ttl governs the shared rate/volume/tick snapshot, board_ttl the
    per-pair order book cache of venues that keep one. fanout_workers bounds
    the number of in-flight per-pair requests during a fan-out refresh.
    """

    model_config = SettingsConfigDict(env_prefix="CCEX_CACHE_")

    rate_ttl: float = 3.0
    board_ttl: float = 3.0
    fanout_workers: int = 10

    @field_validator("rate_ttl", "board_ttl")
    @classmethod
    def _positive_ttl(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("ttl must be positive")
        return value

    @field_validator("fanout_workers")
    @classmethod
    def _positive_workers(cls, value: int) -> int:
        if value < 1:
            raise ValueError("fanout_workers must be at least 1")
        return value


class AggregatorSettings(BaseSettings):
    """Consolidated order-book aggregator used for best bid/ask ticks.

    Disabled by default: adapters then serve ticks from their own ticker
    snapshot so rate, volume and tick maps stay consistent.
    """

    model_config = SettingsConfigDict(env_prefix="CCEX_AGGREGATOR_")

    enabled: bool = False
    base_url: str = "https://dev-api.shrimpy.io"
    tick_ttl: float = 3.0

    @field_validator("tick_ttl")
    @classmethod
    def _positive_tick_ttl(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("tick_ttl must be positive")
        return value


class AppSettings(BaseSettings):
    """Root settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: str = "console"  # "json" or "console"; env LOG_FORMAT
    http: HttpSettings = HttpSettings()
    cache: CacheSettings = CacheSettings()
    aggregator: AggregatorSettings = AggregatorSettings()
