"""Tests for BitflyerClient against canned /ticker and /board responses."""

from decimal import Decimal

import pytest

from ccex.exceptions import NotFoundError, TransportError
from ccex.exchanges.bitflyer import BitflyerClient
from ccex.models import CurrencyPair, Precision

TICKER = """{
  "product_code": "BTC_JPY",
  "timestamp": "2015-07-08T02:50:59.97",
  "tick_id": 3579,
  "best_bid": 30000,
  "best_ask": 36640,
  "best_bid_size": 0.1,
  "best_ask_size": 5,
  "total_bid_depth": 15.13,
  "total_ask_depth": 20,
  "ltp": 31690,
  "volume": 16819.26,
  "volume_by_product": 6819.26
}"""

TICKER_WITHOUT_SIZES = """{
  "product_code": "BTC_JPY",
  "best_bid": 30000,
  "best_ask": 36640,
  "ltp": 31690,
  "volume": 16819.26
}"""

BOARD = """{
  "mid_price": 33320,
  "bids": [{"price": 30000, "size": 0.1}, {"price": 25570, "size": 3}],
  "asks": [{"price": 36640, "size": 5}, {"price": 36700, "size": 1.2}]
}"""


@pytest.fixture
def client(venue, make_client) -> BitflyerClient:
    venue.route("/ticker", TICKER)
    venue.route("/board", BOARD)
    return make_client(BitflyerClient)


class TestBitflyerMarket:
    """Rate, volume and tick lookups served from one /ticker call."""

    @pytest.mark.asyncio
    async def test_rate(self, client) -> None:
        assert await client.rate("BTC", "JPY") == Decimal("31690")

    @pytest.mark.asyncio
    async def test_volume(self, client) -> None:
        assert await client.volume("BTC", "JPY") == Decimal("16819.26")

    @pytest.mark.asyncio
    async def test_lookups_share_one_request(self, client, venue) -> None:
        await client.rate("BTC", "JPY")
        await client.volume("btc", "jpy")
        await client.rate_map()
        await client.order_book_tick_map()

        assert venue.count("/ticker") == 1

    @pytest.mark.asyncio
    async def test_refetches_after_ttl(self, client, venue, clock) -> None:
        await client.rate("BTC", "JPY")
        clock.advance(30)
        await client.rate("BTC", "JPY")

        assert venue.count("/ticker") == 2

    @pytest.mark.asyncio
    async def test_order_book_tick(self, client) -> None:
        ticks = await client.order_book_tick_map()
        tick = ticks["BTC"]["JPY"]

        assert tick.best_ask_price == Decimal("36640")
        assert tick.best_bid_price == Decimal("30000")
        assert tick.best_ask_amount == Decimal("5")
        assert tick.best_bid_amount == Decimal("0.1")

    @pytest.mark.asyncio
    async def test_missing_sizes_default_to_zero(self, venue, make_client) -> None:
        venue.route("/ticker", TICKER_WITHOUT_SIZES)
        client = make_client(BitflyerClient)

        tick = (await client.order_book_tick_map())["BTC"]["JPY"]

        assert tick.best_ask_amount == Decimal("0")
        assert await client.rate("BTC", "JPY") == Decimal("31690")

    @pytest.mark.asyncio
    async def test_self_rate_needs_no_request(self, client, venue) -> None:
        assert await client.rate("JPY", "JPY") == Decimal("1")
        assert venue.requests == []

    @pytest.mark.asyncio
    async def test_unknown_pair(self, client) -> None:
        with pytest.raises(NotFoundError):
            await client.rate("ETH", "JPY")

    @pytest.mark.asyncio
    async def test_currency_pairs_from_snapshot(self, client) -> None:
        assert await client.currency_pairs() == [CurrencyPair("BTC", "JPY")]

    @pytest.mark.asyncio
    async def test_maps_are_copies(self, client) -> None:
        rates = await client.rate_map()
        rates["BTC"]["JPY"] = Decimal("0")

        assert await client.rate("BTC", "JPY") == Decimal("31690")

    @pytest.mark.asyncio
    async def test_server_error_surfaces(self, venue, make_client) -> None:
        venue.route("/ticker", "{}", status=500)
        client = make_client(BitflyerClient)

        with pytest.raises(TransportError, match="HTTP 500"):
            await client.rate("BTC", "JPY")


class TestBitflyerReference:
    """Precision, board and frozen currencies."""

    @pytest.mark.asyncio
    async def test_precise(self, client) -> None:
        assert await client.precise("BTC", "JPY") == Precision(
            price_precision=0, amount_precision=2
        )
        assert await client.precise("JPY", "JPY") == Precision()

    @pytest.mark.asyncio
    async def test_board(self, client, venue) -> None:
        board = await client.board("BTC", "JPY")

        assert board.best_bid_price == Decimal("30000")
        assert board.best_ask_price == Decimal("36640")
        assert len(board.asks) == 2
        assert venue.requests[-1].url.params["product_code"] == "BTC_JPY"

    @pytest.mark.asyncio
    async def test_frozen_currency_is_empty(self, client) -> None:
        assert await client.frozen_currency() == []
