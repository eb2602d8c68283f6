"""
Lot state -- current stage and cumulative totals of a lot.

Responsibility:
    Replays a lot timeline to produce a ``LotSnapshot``: the stage the lot
    was last sent to, its summed weights, and the date it last came back.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  The snapshot is a
    projection over the memo log and is never persisted.

Invariants enforced:
    - Empty timeline: ``current_stage`` is the unknown-stage label, all
      totals zero, ``yield_percent`` and ``last_updated`` are ``None``.
    - ``current_stage`` is the ``to_stage`` of the LAST memo's parsed
      process, whether or not that memo is locked.
    - Totals are summed independently per memo, so
      ``remaining == total_out - total_in - total_reject`` holds for the
      sums as well.
    - Lot ``yield_percent`` is recomputed from the summed weights.

Failure modes:
    None.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Sequence

from lot_kernel.domain.dtos import MemoRecord
from lot_kernel.domain.memo_accounting import compute_memo_totals, compute_yield_percent
from lot_kernel.domain.stages import UNKNOWN_STAGE
from lot_kernel.domain.values import ZERO


@dataclass(frozen=True)
class LotTotals:
    total_out: Decimal
    total_in: Decimal
    total_reject: Decimal
    remaining: Decimal

    @property
    def yield_percent(self) -> Decimal | None:
        return compute_yield_percent(self.total_in, self.total_out)


@dataclass(frozen=True)
class LotSnapshot:
    """
    Derived state of one lot.

    Guarantees:
        - Recomputed from the memo log on every read.
        - ``last_updated is None`` means "not available"; renderers print
          ``NOT_AVAILABLE``.
    """

    lot_code: str
    current_stage: str
    total_out: Decimal
    total_in: Decimal
    total_reject: Decimal
    remaining: Decimal
    yield_percent: Decimal | None
    last_updated: date | None


def resolve_current_stage(
    timeline: Sequence[MemoRecord],
    unknown_stage: str = UNKNOWN_STAGE,
) -> str:
    if not timeline:
        return unknown_stage
    return timeline[-1].transition.to_stage


def fold_lot_totals(timeline: Sequence[MemoRecord]) -> LotTotals:
    total_out = ZERO
    total_in = ZERO
    total_reject = ZERO
    remaining = ZERO
    for memo in timeline:
        totals = compute_memo_totals(memo)
        total_out += totals.total_out
        total_in += totals.total_in
        total_reject += totals.total_reject
        remaining += totals.remaining
    return LotTotals(
        total_out=total_out,
        total_in=total_in,
        total_reject=total_reject,
        remaining=remaining,
    )


def resolve_last_updated(timeline: Sequence[MemoRecord]) -> date | None:
    """``date_in_header`` of the last memo, or ``None`` for an empty timeline."""
    if not timeline:
        return None
    return timeline[-1].date_in_header


def resolve_lot_snapshot(
    lot_code: str,
    timeline: Sequence[MemoRecord],
    unknown_stage: str = UNKNOWN_STAGE,
) -> LotSnapshot:
    """
    Resolve the snapshot of a lot from its ordered timeline.

    Args:
        lot_code: The lot's code.
        timeline: Output of ``build_lot_timeline`` for the same code.
        unknown_stage: Label used when the timeline is empty.

    Returns:
        The lot's ``LotSnapshot``.
    """
    totals = fold_lot_totals(timeline)
    return LotSnapshot(
        lot_code=lot_code,
        current_stage=resolve_current_stage(timeline, unknown_stage),
        total_out=totals.total_out,
        total_in=totals.total_in,
        total_reject=totals.total_reject,
        remaining=totals.remaining,
        yield_percent=totals.yield_percent,
        last_updated=resolve_last_updated(timeline),
    )
