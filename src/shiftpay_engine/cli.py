"""Shift pay command line interface.

Usage:
    shiftpay compute --settings settings.json --input day.json
    shiftpay settings-version --settings settings.json
    shiftpay derive --settings settings.json --date 2025-09-08
    shiftpay serve --port 8000
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, Callable

from shiftpay_engine.calculators.engine import PayCalculator
from shiftpay_engine.calculators.rules import AppSettings
from shiftpay_engine.calculators.types import PayCalculationInput
from shiftpay_engine.config import configure_logging, get_settings
from shiftpay_engine.derivation import TrackerDerivationEngine

logger = logging.getLogger(__name__)


def load_json(path: str) -> Any:
    """Read a JSON document from a file, or stdin for ``-``."""
    if path == "-":
        return json.load(sys.stdin)
    return json.loads(Path(path).read_text(encoding="utf-8"))


def parse_date(s: str) -> date:
    """Parse ISO date string."""
    return date.fromisoformat(s)


class ShiftPayCli:
    """Shift pay command line interface."""

    def __init__(self) -> None:
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="shiftpay",
            description="Per-day shift pay calculation tools",
        )
        parser.add_argument(
            "--log-level",
            default=None,
            help="Logging level (default: LOG_LEVEL or INFO)",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        # compute command
        compute = subparsers.add_parser(
            "compute",
            help="Compute a pay breakdown for one day",
        )
        compute.add_argument(
            "--settings",
            required=True,
            help="Settings snapshot JSON file (- for stdin)",
        )
        compute.add_argument(
            "--input",
            required=True,
            help="Calculation input JSON file (- for stdin)",
        )
        compute.add_argument(
            "--entry",
            action="store_true",
            help="Print a full history entry instead of the breakdown",
        )

        # settings-version command
        version = subparsers.add_parser(
            "settings-version",
            help="Print the deduction settings fingerprint",
        )
        version.add_argument(
            "--settings",
            required=True,
            help="Settings snapshot JSON file (- for stdin)",
        )

        # derive command
        derive = subparsers.add_parser(
            "derive",
            help="Derive the overtime split and night allocation from recorded shifts",
        )
        derive.add_argument(
            "--settings",
            required=True,
            help="Settings snapshot JSON file (- for stdin)",
        )
        derive.add_argument(
            "--date",
            type=parse_date,
            required=True,
            help="Work date (YYYY-MM-DD)",
        )
        derive.add_argument(
            "--database-url",
            default=None,
            help="Database URL (default: DATABASE_URL)",
        )

        # serve command
        serve = subparsers.add_parser(
            "serve",
            help="Run the HTTP API",
        )
        serve.add_argument("--host", default=None, help="Bind host (default: HOST)")
        serve.add_argument("--port", type=int, default=None, help="Bind port (default: PORT)")

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)
        configure_logging(parsed.log_level)

        if not parsed.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        handlers: dict[str, Callable[..., int]] = {
            "compute": self._cmd_compute,
            "settings-version": self._cmd_settings_version,
            "derive": self._cmd_derive,
            "serve": self._cmd_serve,
        }

        handler = handlers.get(parsed.command)
        if handler:
            return handler(parsed)

        print(f"Unknown command: {parsed.command}", file=sys.stderr)
        return 1

    def _cmd_compute(self, args: argparse.Namespace) -> int:
        """Compute a breakdown."""
        settings = AppSettings.from_dict(load_json(args.settings))
        raw_input = load_json(args.input)
        if not isinstance(raw_input, dict):
            print("Invalid input: expected a JSON object", file=sys.stderr)
            return 2
        try:
            calc_input = PayCalculationInput.from_dict(raw_input)
        except ValueError as exc:
            print(f"Invalid input: {exc}", file=sys.stderr)
            return 2

        calculator = PayCalculator()
        if args.entry:
            document = calculator.build_entry(calc_input, settings).to_dict()
        else:
            document = calculator.compute_pay(calc_input, settings).to_dict()
        print(json.dumps(document, indent=2))
        return 0

    def _cmd_settings_version(self, args: argparse.Namespace) -> int:
        """Print the settings fingerprint."""
        settings = AppSettings.from_dict(load_json(args.settings))
        print(PayCalculator.compute_settings_version(settings))
        return 0

    def _cmd_derive(self, args: argparse.Namespace) -> int:
        """Derive tracker hours from the shift database."""
        settings = AppSettings.from_dict(load_json(args.settings))
        result = asyncio.run(self._derive(args.date, settings, args.database_url))
        print(json.dumps(result, indent=2))
        return 0

    @staticmethod
    async def _derive(
        work_date: date, settings: AppSettings, database_url: str | None
    ) -> dict[str, Any]:
        from shiftpay_engine.database import create_session_factory, create_tables, get_engine
        from shiftpay_engine.services.shift_store import SqlShiftStore

        engine = get_engine(database_url)
        try:
            await create_tables(engine)
            store = SqlShiftStore(create_session_factory(engine))
            derivation = TrackerDerivationEngine(pending=store, history=store)
            result = await derivation.derive_all(work_date, settings)
        finally:
            await engine.dispose()
        return {
            "date": work_date.isoformat(),
            "totalMinutes": result.total_minutes,
            "split": result.split.to_dict(),
            "night": result.night.to_dict(),
        }

    def _cmd_serve(self, args: argparse.Namespace) -> int:
        """Run the API server."""
        import uvicorn

        settings = get_settings()
        host = args.host or settings.host
        port = args.port or settings.port
        logger.info("Serving shift pay API on %s:%d", host, port)
        uvicorn.run(
            "shiftpay_engine.api.app:app",
            host=host,
            port=port,
            reload=settings.debug,
        )
        return 0


def main() -> int:
    """CLI entry point."""
    cli = ShiftPayCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
