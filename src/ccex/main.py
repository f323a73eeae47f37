"""Command line entry point: print rates and volumes for one exchange.

    ccex-rates huobi                 # one table, then exit
    ccex-rates poloniex --watch 5    # refresh every 5 seconds until Ctrl-C
    ccex-rates kucoin --pair ETH/BTC --board

Settings come from the environment / .env (see ccex.config); --ttl overrides
CCEX_CACHE_RATE_TTL for this run.
"""

import argparse
import asyncio
from decimal import Decimal

from ccex.config import AppSettings
from ccex.exceptions import ClientError
from ccex.exchanges.base import PublicClient
from ccex.logging import get_logger, setup_logging
from ccex.models import CurrencyPair
from ccex.registry import available_exchanges, new_public_client


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Print public market data of an exchange")
    parser.add_argument("exchange", choices=available_exchanges())
    parser.add_argument(
        "--pair",
        action="append",
        default=[],
        help="Only show this TRADING/SETTLEMENT pair (repeatable)",
    )
    parser.add_argument("--watch", type=float, default=None, help="Refresh every N seconds")
    parser.add_argument("--ttl", type=float, default=None, help="Rate cache TTL in seconds")
    parser.add_argument("--board", action="store_true", help="Also print the top of each order book")
    parser.add_argument("--frozen", action="store_true", help="Print frozen currencies and exit")
    return parser


def _parse_pair(text: str) -> CurrencyPair:
    return CurrencyPair.split(text, "/")


def _snapshot_pairs(rates: dict[str, dict[str, Decimal]]) -> list[CurrencyPair]:
    return [
        CurrencyPair(trading, settlement)
        for trading, by_settlement in rates.items()
        for settlement in by_settlement
    ]


def _cell(value: Decimal | None) -> str:
    return "-" if value is None else format(value, "f")


def format_rows(
    rates: dict[str, dict[str, Decimal]],
    volumes: dict[str, dict[str, Decimal]],
    pairs: list[CurrencyPair] | None = None,
) -> list[str]:
    """Render a rate/volume table, one line per pair, sorted by pair."""
    if not pairs:
        pairs = _snapshot_pairs(rates)
    rows = []
    for pair in sorted(pairs, key=str):
        rate = rates.get(pair.trading, {}).get(pair.settlement)
        volume = volumes.get(pair.trading, {}).get(pair.settlement)
        rows.append(f"{str(pair):<14} {_cell(rate):>22} {_cell(volume):>28}")
    return rows


async def _print_once(client: PublicClient, pairs: list[CurrencyPair], board: bool) -> None:
    rates = await client.rate_map()
    volumes = await client.volume_map()
    print(f"{'pair':<14} {'rate':>22} {'volume':>28}")
    for row in format_rows(rates, volumes, pairs):
        print(row)
    if board:
        # Without --pair, show the top of book of every pair in the table
        for pair in sorted(pairs or _snapshot_pairs(rates), key=str):
            tick = (await client.board(pair.trading, pair.settlement)).tick()
            print(
                f"{str(pair):<14} bid {_cell(tick.best_bid_price)} x {_cell(tick.best_bid_amount)}"
                f"  ask {_cell(tick.best_ask_price)} x {_cell(tick.best_ask_amount)}"
            )


async def run(args: argparse.Namespace) -> int:
    settings = AppSettings()
    if args.ttl is not None:
        settings.cache.rate_ttl = args.ttl

    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("ccex.main")

    pairs: list[CurrencyPair] = args.pair
    async with new_public_client(args.exchange, settings) as client:
        try:
            if args.frozen:
                for currency in await client.frozen_currency():
                    print(currency)
                return 0

            await _print_once(client, pairs, args.board)
            while args.watch:
                await asyncio.sleep(args.watch)
                print()
                await _print_once(client, pairs, args.board)
        except ClientError as exc:
            logger.error("market_data_failed", exchange=args.exchange, error=str(exc))
            return 1
    return 0


def main() -> int:
    """Synchronous entry point."""
    parser = _build_arg_parser()
    args = parser.parse_args()
    if args.ttl is not None and args.ttl <= 0:
        parser.error("--ttl must be positive")
    try:
        args.pair = [_parse_pair(text) for text in args.pair]
    except ClientError as exc:
        parser.error(str(exc))
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
