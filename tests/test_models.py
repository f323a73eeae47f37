"""Tests for CurrencyPair parsing, precision inference and Board math."""

from decimal import Decimal

import pytest

from ccex.exceptions import InsufficientDepthError, ParseError
from ccex.models import Board, BoardOrder, BoardSide, CurrencyPair, precision_of


def _board() -> Board:
    return Board(
        asks=[
            BoardOrder(BoardSide.ASK, Decimal("101"), Decimal("2")),
            BoardOrder(BoardSide.ASK, Decimal("100"), Decimal("1")),
        ],
        bids=[
            BoardOrder(BoardSide.BID, Decimal("98"), Decimal("3")),
            BoardOrder(BoardSide.BID, Decimal("99"), Decimal("1")),
        ],
    )


class TestCurrencyPair:
    """Tests for symbol parsing."""

    def test_upper_cases_assets(self) -> None:
        pair = CurrencyPair("eth", "btc")

        assert pair == CurrencyPair("ETH", "BTC")
        assert str(pair) == "ETH/BTC"

    def test_split(self) -> None:
        assert CurrencyPair.split("ETH-BTC", "-") == CurrencyPair("ETH", "BTC")
        assert CurrencyPair.split("BTC_ETH", "_", reverse=True) == CurrencyPair("ETH", "BTC")

    @pytest.mark.parametrize("symbol", ["ETHBTC", "ETH-", "-BTC", "A-B-C"])
    def test_split_rejects_malformed(self, symbol: str) -> None:
        with pytest.raises(ParseError):
            CurrencyPair.split(symbol, "-")

    def test_from_suffix(self) -> None:
        assert CurrencyPair.from_suffix("BTC_JPY", ["JPY"]) == CurrencyPair("BTC", "JPY")
        assert CurrencyPair.from_suffix("fx_btc_jpy", ["JPY"]) == CurrencyPair("FXBTC", "JPY")

    def test_from_suffix_unknown_settlement(self) -> None:
        with pytest.raises(ParseError):
            CurrencyPair.from_suffix("ETH_BTC", ["JPY"])


class TestPrecisionOf:
    """Tests for precision inferred from reported digits."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("0.00000044", 8),
            (Decimal("16819.26"), 2),
            (31690, 0),
            ("6510.00000000", 8),
            ("", 0),
            ("n/a", 0),
        ],
    )
    def test_digits_after_point(self, value: object, expected: int) -> None:
        assert precision_of(value) == expected  # type: ignore[arg-type]


class TestBoard:
    """Tests for best price and average fill rate."""

    def test_best_prices_ignore_input_order(self) -> None:
        board = _board()

        assert board.best_ask_price == Decimal("100")
        assert board.best_ask_amount == Decimal("1")
        assert board.best_bid_price == Decimal("99")
        assert board.best_bid_amount == Decimal("1")

    def test_empty_board(self) -> None:
        tick = Board().tick()

        assert tick.best_ask_price == Decimal("0")
        assert tick.best_bid_amount == Decimal("0")

    def test_average_sell_rate_walks_asks_upward(self) -> None:
        # 1 @ 100 + 1 @ 101
        assert _board().average_sell_rate(Decimal("2")) == Decimal("100.5")

    def test_average_buy_rate_walks_bids_downward(self) -> None:
        # 1 @ 99 + 1 @ 98
        assert _board().average_buy_rate(Decimal("2")) == Decimal("98.5")

    def test_average_within_first_level(self) -> None:
        assert _board().average_sell_rate(Decimal("0.5")) == Decimal("100")

    def test_insufficient_depth(self) -> None:
        with pytest.raises(InsufficientDepthError):
            _board().average_sell_rate(Decimal("10"))

    def test_no_levels(self) -> None:
        with pytest.raises(InsufficientDepthError):
            Board().average_buy_rate(Decimal("1"))

    def test_non_positive_amount(self) -> None:
        with pytest.raises(ValueError):
            _board().average_buy_rate(Decimal("0"))
