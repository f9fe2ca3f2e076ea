"""Command-line entry point for the fragments ledger.

Usage:
    fragments-ledger info [--config path.yaml]
    fragments-ledger simulate --rebase 110 --rebase 95 --claimant 0xabc... [--csv out.csv] [--json out.json]
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .config.loader import load_config
from .engine.errors import LedgerError
from .engine.ledger import ScaledLedger
from .reporting.export import export_simulation_csv, export_simulation_json
from .simulation.runner import RebaseSimulation
from .validation.sanity_checks import validate_ledger

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fragments-ledger",
        description="Rebasing token ledger with scaled-unit accounting",
    )
    parser.add_argument("--config", default=None, help="YAML config (defaults to $FRAGMENTS_CONFIG, then the bundled defaults.yaml)")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, ...)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("info", help="Print derived supply constants and sanity checks")

    sim = sub.add_parser("simulate", help="Replay a rebase schedule")
    sim.add_argument("--rebase", type=int, action="append", default=[],
                     help="Percentage multiplier (repeatable; 100 keeps supply)")
    sim.add_argument("--claimant", action="append", default=[],
                     help="Account claiming from the reserve before rebasing (repeatable)")
    sim.add_argument("--csv", default=None, help="Write per-step metrics to CSV")
    sim.add_argument("--json", default=None, help="Write the full result to JSON")
    return parser


def _cmd_info(config) -> int:
    ledger = ScaledLedger(config)
    is_valid, warnings = validate_ledger(ledger)
    info = {
        'name': ledger.name,
        'symbol': ledger.symbol,
        'decimals': ledger.decimals,
        'config_hash': config.compute_hash(),
        'total_supply': ledger.total_supply(),
        'max_supply': config.max_supply,
        'scaled_total_supply': ledger.scaled_total_supply(),
        'conversion_rate': ledger.conversion_rate(),
        'reserve': ledger.reserve,
        'claim_amount': config.claim_amount,
        'valid': is_valid,
        'warnings': [f"[{w.severity}] {w.category}: {w.message}" for w in warnings],
    }
    print(json.dumps(info, indent=2))
    return 0 if is_valid else 1


def _cmd_simulate(config, args) -> int:
    simulation = RebaseSimulation(config)
    try:
        result = simulation.run(schedule=args.rebase, claimants=args.claimant)
    except LedgerError as e:
        logger.error("Simulation aborted: %s", e)
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.csv:
        export_simulation_csv(result, args.csv)
    if args.json:
        export_simulation_json(result, args.json)
    print(json.dumps(result.final_metrics, indent=2))
    return 0 if not result.conservation_errors else 1


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    config = load_config(args.config)

    if args.command == "info":
        return _cmd_info(config)
    return _cmd_simulate(config, args)


if __name__ == "__main__":
    sys.exit(main())
