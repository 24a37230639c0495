import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from corpsim.components import pricing, statements, turn
from corpsim.rules.loader import RulesValidationError, load_rules
from corpsim.rules.models import EconomyRules

from .config import Settings, configure_logging, load_settings

logger = logging.getLogger("corpsim.cli")


class CliError(Exception):
    """Input problem reported to the user with exit status 1."""


# --- Helpers ---


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise CliError(f"File {path} not found.")
    try:
        return json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise CliError(f"File {path} is not valid JSON: {e}") from e


def _entries_from(data: Any, path: Path) -> list[Any]:
    # Either a bare list of entries or {"entries": [...]}
    if isinstance(data, dict):
        data = data.get("entries")
    if not isinstance(data, list):
        raise CliError(f"File {path} must hold a list of market entries.")
    return data


def _market_snapshot(rules: EconomyRules, entries: list[Any]) -> pricing.PriceSnapshot:
    result = pricing.run(
        pricing.BuildSnapshotInput(entries=entries, sector_unit_flows=rules.sectors),
        pricing.load_config_from_rules(rules),
    )
    for error in result.errors:
        logger.warning("Skipped while pricing: %s", error)
    if result.snapshot.unpriced:
        logger.warning("Unpriced items: %s", ", ".join(result.snapshot.unpriced))
    return result.snapshot


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, sort_keys=True))


# --- Handlers ---


def handle_statement(rules: EconomyRules, args: argparse.Namespace) -> int:
    path = Path(args.entries)
    entries = _entries_from(_read_json(path), path)

    if args.prices:
        tables = _read_json(Path(args.prices))
        if not isinstance(tables, dict):
            raise CliError(f"File {args.prices} must hold commodity_prices and product_prices.")
        commodity_prices = tables.get("commodity_prices") or {}
        product_prices = tables.get("product_prices") or {}
    else:
        snapshot = _market_snapshot(rules, entries)
        commodity_prices = snapshot.commodity_prices
        product_prices = snapshot.product_prices

    statement = statements.compute_financial_statements(
        entries,
        rules.sectors,
        commodity_prices,
        product_prices,
        rules.unit_economics,
        args.hours if args.hours is not None else rules.period.default_hours,
        {"ceo_salary": args.ceo_salary, "overhead": args.overhead},
        args.dividend_pct,
        policy=statements.load_policy_from_rules(rules),
    )
    for error in statement.errors:
        logger.warning("Statement error: %s", error)

    _print_json(statements.statement_to_dict(statement))
    return 0


def handle_prices(rules: EconomyRules, args: argparse.Namespace) -> int:
    path = Path(args.entries)
    snapshot = _market_snapshot(rules, _entries_from(_read_json(path), path))
    _print_json(pricing.snapshot_to_dict(snapshot))
    return 0


def handle_turn(rules: EconomyRules, settings: Settings, args: argparse.Namespace) -> int:
    path = Path(args.corporations)
    corporations = _read_json(path)
    if not isinstance(corporations, list):
        raise CliError(f"File {path} must hold a list of corporations.")

    market_entries = [
        entry
        for corp in corporations
        if isinstance(corp, dict)
        for entry in (corp.get("entries") or [])
    ]
    snapshot = _market_snapshot(rules, market_entries)

    batch = turn.run(
        turn.RunTurnInput(corporations=corporations, prices=snapshot, chain=rules),
        config=turn.load_config_from_rules(rules, settings.turn_workers),
        policy=statements.load_policy_from_rules(rules),
    )

    _print_json(
        {
            "total_processed": batch.total_processed,
            "succeeded": batch.succeeded,
            "failed": batch.failed,
            "engine_errors": batch.engine_errors,
            "results": [
                {
                    "corporation_id": r.corporation_id,
                    "status": r.status.value,
                    "capital_delta": r.capital_delta,
                    "dividend_per_share": r.dividend_per_share,
                    "error": r.error,
                }
                for r in batch.results
            ],
        }
    )
    return 1 if batch.failed else 0


def handle_check_rules(rules: EconomyRules, settings: Settings) -> int:
    print(
        f"Rules OK: {rules.project.slug} v{rules.project.rules_version} "
        f"({len(rules.sectors)} sectors, {len(rules.resources)} resources, "
        f"{len(rules.products)} products) from {settings.rules_path}"
    )
    return 0


# --- Entry Point ---


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Corporate simulation ledger CLI")
    parser.add_argument("--rules", help="Path to economy_rules.yaml (overrides CORPSIM_RULES_PATH)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # statement
    statement_parser = subparsers.add_parser("statement", help="Compute a financial statement")
    statement_parser.add_argument("entries", help="JSON file with market entries")
    statement_parser.add_argument("--hours", type=float, help="Period length in hours")
    statement_parser.add_argument(
        "--dividend-pct", type=float, default=0.0, help="Dividend payout percentage"
    )
    statement_parser.add_argument("--ceo-salary", type=float, default=0.0)
    statement_parser.add_argument("--overhead", type=float, default=0.0)
    statement_parser.add_argument(
        "--prices", help="JSON file with commodity_prices and product_prices"
    )

    # prices
    prices_parser = subparsers.add_parser("prices", help="Derive market prices from holdings")
    prices_parser.add_argument("entries", help="JSON file with every market entry")

    # turn
    turn_parser = subparsers.add_parser("turn", help="Settle one turn for all corporations")
    turn_parser.add_argument("corporations", help="JSON file with corporations")

    # check-rules
    subparsers.add_parser("check-rules", help="Validate the rules file")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings()
    except ValueError as e:
        print(f"CRITICAL: {e}", file=sys.stderr)
        return 1

    configure_logging(settings.log_level)
    if args.rules:
        settings = Settings(
            rules_path=Path(args.rules),
            log_level=settings.log_level,
            turn_workers=settings.turn_workers,
        )

    try:
        rules = load_rules(settings.rules_path)
    except RulesValidationError as e:
        for problem in e.problems:
            logger.error("Rules problem: %s", problem)
        return 1
    except (FileNotFoundError, ValueError) as e:
        logger.error("%s", e)
        return 1

    try:
        if args.command == "statement":
            return handle_statement(rules, args)
        if args.command == "prices":
            return handle_prices(rules, args)
        if args.command == "turn":
            return handle_turn(rules, settings, args)
        return handle_check_rules(rules, settings)
    except CliError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
