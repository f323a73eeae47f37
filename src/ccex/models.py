"""Shared market data models.

All prices, amounts and volumes use Decimal. Venue JSON is decoded with
parse_float=Decimal so the digits a venue reports survive unchanged; that
matters for Precision, which is inferred from those digits.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from ccex.exceptions import InsufficientDepthError, ParseError

RateMap = dict[str, dict[str, Decimal]]
VolumeMap = dict[str, dict[str, Decimal]]


class BoardSide(str, Enum):
    """Side of an order book level."""

    ASK = "ask"
    BID = "bid"


@dataclass(frozen=True)
class CurrencyPair:
    """A market identified by its trading (base) and settlement (quote) asset.

    Both symbols are upper-cased on construction.
    """

    trading: str
    settlement: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "trading", self.trading.upper())
        object.__setattr__(self, "settlement", self.settlement.upper())

    def __str__(self) -> str:
        return f"{self.trading}/{self.settlement}"

    @classmethod
    def split(cls, symbol: str, separator: str, reverse: bool = False) -> "CurrencyPair":
        """Parse a "BASE<sep>QUOTE" venue symbol.

        With reverse=True the symbol is read as "QUOTE<sep>BASE" (Poloniex).
        """
        parts = symbol.split(separator)
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise ParseError(f"invalid currency pair symbol: {symbol!r}")
        first, second = parts
        if reverse:
            return cls(second, first)
        return cls(first, second)

    @classmethod
    def from_suffix(cls, symbol: str, settlements: list[str]) -> "CurrencyPair":
        """Parse a symbol by matching a known settlement suffix ("BTC_JPY" -> BTC/JPY).

        Separators between the two assets are dropped from the trading part.
        """
        upper = symbol.upper()
        for settlement in settlements:
            settlement = settlement.upper()
            index = upper.rfind(settlement)
            if index > 0 and index == len(upper) - len(settlement):
                trading = upper[:index].replace("_", "").replace("-", "")
                if trading:
                    return cls(trading, settlement)
        raise ParseError(f"pair is not parsed: {symbol!r}")


@dataclass(frozen=True)
class OrderBookTick:
    """Best bid/ask snapshot for one pair."""

    best_ask_price: Decimal
    best_bid_price: Decimal
    best_ask_amount: Decimal = Decimal("0")
    best_bid_amount: Decimal = Decimal("0")


OrderBookTickMap = dict[str, dict[str, OrderBookTick]]


@dataclass(frozen=True)
class Precision:
    """Decimal places a venue accepts for order price and amount.

    The zero value is returned for a self-pair (trading == settlement).
    """

    price_precision: int = 0
    amount_precision: int = 0


def precision_of(value: Decimal | str | int) -> int:
    """Return the number of digits after the decimal point of a reported number.

    "0.00000044" -> 8, "16819.26" -> 2, 31690 -> 0. Trailing zeros count
    because venues pad to the precision they accept.
    """
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0
    try:
        exponent = Decimal(value).as_tuple().exponent
    except ArithmeticError:
        return 0
    if not isinstance(exponent, int) or exponent >= 0:
        return 0
    return -exponent


@dataclass(frozen=True)
class BoardOrder:
    """A single order book level."""

    side: BoardSide
    price: Decimal
    amount: Decimal


@dataclass
class Board:
    """Full order book snapshot for one pair."""

    asks: list[BoardOrder] = field(default_factory=list)
    bids: list[BoardOrder] = field(default_factory=list)

    def _sorted_asks(self) -> list[BoardOrder]:
        return sorted(self.asks, key=lambda o: o.price)

    def _sorted_bids(self) -> list[BoardOrder]:
        return sorted(self.bids, key=lambda o: o.price, reverse=True)

    @property
    def best_ask_price(self) -> Decimal:
        asks = self._sorted_asks()
        return asks[0].price if asks else Decimal("0")

    @property
    def best_ask_amount(self) -> Decimal:
        asks = self._sorted_asks()
        return asks[0].amount if asks else Decimal("0")

    @property
    def best_bid_price(self) -> Decimal:
        bids = self._sorted_bids()
        return bids[0].price if bids else Decimal("0")

    @property
    def best_bid_amount(self) -> Decimal:
        bids = self._sorted_bids()
        return bids[0].amount if bids else Decimal("0")

    def tick(self) -> OrderBookTick:
        """Reduce the board to its best bid/ask."""
        return OrderBookTick(
            best_ask_price=self.best_ask_price,
            best_bid_price=self.best_bid_price,
            best_ask_amount=self.best_ask_amount,
            best_bid_amount=self.best_bid_amount,
        )

    def average_buy_rate(self, amount: Decimal) -> Decimal:
        """Average price received when selling `amount` into the bids.

        Walks the bids from the best price down.
        """
        return _average_rate(self._sorted_bids(), amount, "bids")

    def average_sell_rate(self, amount: Decimal) -> Decimal:
        """Average price paid when buying `amount` from the asks.

        Walks the asks from the best price up.
        """
        return _average_rate(self._sorted_asks(), amount, "asks")


def _average_rate(levels: list[BoardOrder], amount: Decimal, name: str) -> Decimal:
    if not levels:
        raise InsufficientDepthError(f"there are no {name}")
    if amount <= 0:
        raise ValueError("amount must be positive")

    total = Decimal("0")
    remaining = amount
    for level in levels:
        if level.amount >= remaining:
            total += remaining * level.price
            return total / amount
        total += level.amount * level.price
        remaining -= level.amount
    raise InsufficientDepthError(f"not enough {name} to fill {amount}")
