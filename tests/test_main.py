"""Tests for the ccex-rates command line entry point."""

from decimal import Decimal

import pytest

import ccex.main as main_module
from ccex.main import _build_arg_parser, format_rows, run
from ccex.models import CurrencyPair

RATES = {"ETH": {"BTC": Decimal("0.05")}, "XRP": {"BTC": Decimal("0.00008")}}
VOLUMES = {"ETH": {"BTC": Decimal("1200.5")}}


class TestFormatRows:
    """Tests for table rendering."""

    def test_all_pairs_sorted(self) -> None:
        rows = format_rows(RATES, VOLUMES)

        assert len(rows) == 2
        assert rows[0].startswith("ETH/BTC")
        assert "0.05" in rows[0] and "1200.5" in rows[0]
        assert rows[1].startswith("XRP/BTC")
        assert rows[1].rstrip().endswith("-")

    def test_selected_pairs(self) -> None:
        rows = format_rows(RATES, VOLUMES, [CurrencyPair("DOGE", "BTC")])

        assert rows == [f"{'DOGE/BTC':<14} {'-':>22} {'-':>28}"]

    def test_small_rates_in_fixed_point(self) -> None:
        rows = format_rows({"BCN": {"BTC": Decimal("4.4E-7")}}, {})

        assert "0.00000044" in rows[0]
        assert "E-" not in rows[0]


class TestArgParser:
    """Tests for command line parsing."""

    def test_defaults(self) -> None:
        args = _build_arg_parser().parse_args(["huobi"])

        assert args.exchange == "huobi"
        assert args.pair == []
        assert args.watch is None
        assert not args.board

    def test_unknown_exchange_rejected(self) -> None:
        with pytest.raises(SystemExit):
            _build_arg_parser().parse_args(["hitbtc"])


class TestRun:
    """End-to-end run against a fake venue."""

    @pytest.mark.asyncio
    async def test_prints_table(self, venue, monkeypatch, capsys, restore_logging) -> None:
        venue.route(
            "/public",
            '{"BTC_ETH":{"last":"0.0346","baseVolume":"1200.5",'
            '"lowestAsk":"0.0350","highestBid":"0.0340"}}',
        )
        real_factory = main_module.new_public_client
        monkeypatch.setattr(
            main_module,
            "new_public_client",
            lambda name, settings: real_factory(name, settings, transport=venue.transport),
        )
        args = _build_arg_parser().parse_args(["poloniex"])
        args.pair = []

        code = await run(args)

        out = capsys.readouterr().out
        assert code == 0
        assert "ETH/BTC" in out
        assert "0.0346" in out

    @pytest.mark.asyncio
    async def test_failure_exit_code(self, venue, monkeypatch, restore_logging) -> None:
        venue.route("/public", "{}", status=500)
        real_factory = main_module.new_public_client
        monkeypatch.setattr(
            main_module,
            "new_public_client",
            lambda name, settings: real_factory(name, settings, transport=venue.transport),
        )
        args = _build_arg_parser().parse_args(["poloniex"])
        args.pair = []

        assert await run(args) == 1

    @pytest.mark.asyncio
    async def test_board_without_pairs_uses_snapshot(
        self, venue, monkeypatch, capsys, restore_logging
    ) -> None:
        bodies = {
            "returnTicker": '{"BTC_ETH":{"last":"0.0346","baseVolume":"1200.5",'
            '"lowestAsk":"0.0350","highestBid":"0.0340"}}',
            "returnOrderBook": '{"asks":[["0.0350",2]],"bids":[["0.0340",3]],"isFrozen":"0"}',
        }
        venue.route("/public", lambda request: bodies[request.url.params["command"]])
        real_factory = main_module.new_public_client
        monkeypatch.setattr(
            main_module,
            "new_public_client",
            lambda name, settings: real_factory(name, settings, transport=venue.transport),
        )
        args = _build_arg_parser().parse_args(["poloniex", "--board"])
        args.pair = []

        code = await run(args)

        out = capsys.readouterr().out
        assert code == 0
        assert "bid 0.0340 x 3" in out
        assert "ask 0.0350 x 2" in out
