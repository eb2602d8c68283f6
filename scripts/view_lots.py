#!/usr/bin/env python3
"""
View the production stage board and lot snapshots from the database.

Usage:
    python3 scripts/view_lots.py
    python3 scripts/view_lots.py --lot "AJMZ 2"
    python3 scripts/view_lots.py --stage CUTTING --config my_config.yaml
"""

import argparse
import logging
import sys
from decimal import Decimal
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

W = 80


def _cts(value: Decimal) -> str:
    from lot_kernel.domain.values import quantize_weight

    return f"{quantize_weight(value):,.3f}"


def _pct(value: Decimal | None, not_available: str) -> str:
    from lot_kernel.domain.values import quantize_percent

    if value is None:
        return not_available
    return f"{quantize_percent(value)}%"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Show stage board and lot snapshots")
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--lot", help="Only lots whose code contains this text")
    parser.add_argument("--stage", help="Only lots currently at this stage")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.disable(logging.CRITICAL)

    from lot_config import get_active_config
    from lot_kernel.db.engine import create_tables, init_engine_from_url, session_scope
    from lot_kernel.selectors.production_selector import ProductionSelector

    config = get_active_config(args.config)
    production = config.production

    try:
        init_engine_from_url(config.database.url, echo=False)
        create_tables()
    except Exception as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1

    with session_scope() as session:
        selector = ProductionSelector(
            session,
            stages=production.stages,
            unknown_stage=production.unknown_stage,
            percent_tolerance=production.percent_tolerance,
        )
        board = selector.stage_board()
        snapshots = selector.lot_snapshots(search=args.lot, stage=args.stage)

    print("=" * W)
    print("  STAGE BOARD")
    print("=" * W)
    print(f"  {'Stage':<14} {'Lots':>6} {'Out (cts)':>16} {'In (cts)':>16}")
    print("  " + "-" * (W - 4))
    for summary in board:
        print(
            f"  {summary.stage:<14} {summary.count:>6} "
            f"{_cts(summary.total_out):>16} {_cts(summary.total_in):>16}"
        )

    print()
    print("=" * W)
    print(f"  LOTS ({len(snapshots)})")
    print("=" * W)
    for snapshot in snapshots:
        last_updated = (
            snapshot.last_updated.isoformat()
            if snapshot.last_updated is not None
            else production.not_available
        )
        print(f"  {snapshot.lot_code}  [{snapshot.current_stage}]  updated {last_updated}")
        print(
            f"      out {_cts(snapshot.total_out)}  in {_cts(snapshot.total_in)}  "
            f"rej {_cts(snapshot.total_reject)}  remaining {_cts(snapshot.remaining)}  "
            f"yield {_pct(snapshot.yield_percent, production.not_available)}"
        )

    return 0


if __name__ == "__main__":
    sys.exit(main())
