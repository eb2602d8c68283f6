"""
Lot timeline -- the ordered memo history of one lot.

Responsibility:
    Selects the memos belonging to a lot and orders them chronologically by
    ``date_out_header``.  A timeline is the input of the lot state resolver.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Membership is exact, case-sensitive ``lot_code`` equality.
    - Order is ``date_out_header`` ascending; ties keep fetch order (stable).
    - Memos without a header date sort first.
    - Recomputed on every call.  No state is shared between calls.

Failure modes:
    None.  An unknown lot code yields an empty timeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Iterator, Sequence

from lot_kernel.domain.dtos import MemoRecord
from lot_kernel.domain.memo_accounting import MemoTotals, compute_memo_totals
from lot_kernel.domain.stages import StageTransition


@dataclass(frozen=True)
class TimelineEntry:
    """One memo of a lot timeline with its parsed transition and totals."""

    memo: MemoRecord
    transition: StageTransition
    totals: MemoTotals


def _timeline_sort_key(memo: MemoRecord) -> date:
    return memo.date_out_header or date.min


def build_lot_timeline(
    memos: Iterable[MemoRecord],
    lot_code: str,
) -> tuple[MemoRecord, ...]:
    """
    Build the chronological memo sequence of a lot.

    Args:
        memos: The memo snapshot, in fetch order.
        lot_code: Exact lot code to select.

    Returns:
        Matching memos sorted by ``date_out_header`` (stable).
    """
    members = [memo for memo in memos if memo.lot_code == lot_code]
    return tuple(sorted(members, key=_timeline_sort_key))


def list_lot_codes(memos: Iterable[MemoRecord]) -> tuple[str, ...]:
    """Distinct lot codes in first-seen order.  Memos without a lot are skipped."""
    seen: dict[str, None] = {}
    for memo in memos:
        if memo.lot_code is not None and memo.lot_code not in seen:
            seen[memo.lot_code] = None
    return tuple(seen)


def iter_timeline_entries(timeline: Sequence[MemoRecord]) -> Iterator[TimelineEntry]:
    for memo in timeline:
        yield TimelineEntry(
            memo=memo,
            transition=memo.transition,
            totals=compute_memo_totals(memo),
        )
