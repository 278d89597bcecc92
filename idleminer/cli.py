from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from idleminer.clock import AsyncioClock
from idleminer.definition import default_definition
from idleminer.events import Event
from idleminer.export import write_snapshot
from idleminer.formatting import (
    format_amount,
    format_offline_earnings,
    format_status_report,
)
from idleminer.runtime import GameRuntime
from idleminer.storage import FileStore, default_save_dir

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="idleminer",
        description="idleminer: idle crypto mining game",
    )
    parser.add_argument(
        "--save-dir",
        default=None,
        help="Directory holding the save file (default: $IDLEMINER_HOME or ~/.idleminer)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("status", help="Show balance, hashrate and upgrade prices")
    sub.add_parser("mine", help="Run one manual mining action")

    buy = sub.add_parser("buy", help="Buy one upgrade")
    buy.add_argument("upgrade", choices=default_definition().upgrade_ids())

    withdraw = sub.add_parser("withdraw", help="Withdraw from the balance")
    withdraw.add_argument("amount", help="Amount to withdraw (minimum 100)")
    withdraw.add_argument("destination", help="Wallet address")

    export = sub.add_parser("export", help="Export a snapshot file")
    export.add_argument("--out", default=".", help="Output directory (default: .)")

    run = sub.add_parser("run", help="Run automatic mining in real time")
    run.add_argument(
        "--seconds",
        type=float,
        default=None,
        help="Stop after this many seconds (default: until interrupted)",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    save_dir = Path(args.save_dir) if args.save_dir else default_save_dir()
    store = FileStore(save_dir)

    try:
        return asyncio.run(_session(args, store))
    except KeyboardInterrupt:
        return 0


async def _session(args: argparse.Namespace, store: FileStore) -> int:
    runtime = GameRuntime(clock=AsyncioClock(), store=store)
    symbol = runtime.config.currency_symbol

    earnings = runtime.boot()
    if earnings is not None:
        print(format_offline_earnings(earnings, symbol))

    try:
        if args.command == "status":
            print(format_status_report(runtime))
            return 0

        if args.command == "mine":
            done = asyncio.Event()

            def _on_mined(amount):
                print(f"Mined: {format_amount(amount)} {symbol}")
                done.set()

            runtime.subscribe(Event.MINING_COMPLETED, _on_mined)
            runtime.start_manual_mine()
            await done.wait()
            return 0

        if args.command == "buy":
            result = runtime.buy_upgrade(args.upgrade)
            if not result.success:
                print(f"Error: {result.reason}", file=sys.stderr)
                return 1
            udef = runtime.definition.get_upgrade(args.upgrade)
            print(
                f"Purchased: {udef.display_name} for {result.price:,} {symbol} "
                f"(+{result.hashrate_increment} H/s)"
            )
            return 0

        if args.command == "withdraw":
            result = runtime.withdraw(args.amount, args.destination)
            if not result.success:
                print(f"Error: {result.reason}", file=sys.stderr)
                return 1
            print(
                f"Withdrawal of {format_amount(result.amount)} {symbol} "
                f"to {result.destination} is being processed."
            )
            return 0

        if args.command == "export":
            path = write_snapshot(runtime.export_snapshot(), args.out)
            print(f"Snapshot exported to {path}")
            return 0

        if args.command == "run":
            runtime.start()
            if args.seconds is not None:
                await asyncio.sleep(args.seconds)
            else:
                await asyncio.Event().wait()
            print(format_status_report(runtime))
            return 0

        return 0
    finally:
        runtime.shutdown()
        logger.debug("Session for %r ended", args.command)
