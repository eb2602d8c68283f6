"""
Memo accounting -- weight-conservation totals for a single memo.

Responsibility:
    Computes ``total_out``, ``total_in``, ``total_reject``, ``remaining``
    and ``yield_percent`` for one memo from its items, and flags items
    whose recorded ``percent`` disagrees with the recomputed yield.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Outbound weight prefers ``out_weight_2`` over ``out_weight_1``;
      inbound weight prefers ``in_weight_1`` over ``in_weight_2``.
    - A reading is recorded when it is not ``None`` and not zero.  Zero
      readings fall through to the next field, as historical records carry
      ``0`` in unused weighing columns.
    - ``remaining == total_out - total_in - total_reject`` exactly.  A
      negative remainder is returned as is: it signals a data-entry
      problem and is surfaced, never clamped.
    - ``yield_percent is None`` when nothing was sent out.  "No material
      moved" is not the same as "zero yield".

Failure modes:
    None.  A memo with no items yields zeroed totals.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from lot_kernel.domain.dtos import MemoItemRecord, MemoRecord
from lot_kernel.domain.values import HUNDRED, ZERO

DEFAULT_PERCENT_TOLERANCE = Decimal("0.1")


@dataclass(frozen=True)
class MemoTotals:
    """
    Weight totals for one memo (carats).

    Guarantees:
        - ``remaining == total_out - total_in - total_reject``.
        - ``yield_percent`` is ``None`` iff ``total_out <= 0``.
    """

    total_out: Decimal
    total_in: Decimal
    total_reject: Decimal
    remaining: Decimal
    yield_percent: Decimal | None

    @classmethod
    def zero(cls) -> MemoTotals:
        return cls(
            total_out=ZERO,
            total_in=ZERO,
            total_reject=ZERO,
            remaining=ZERO,
            yield_percent=None,
        )


@dataclass(frozen=True)
class PercentDivergence:
    """An item whose recorded percent differs from its computed yield."""

    memo_id: str
    item_no: int
    recorded_percent: Decimal
    computed_percent: Decimal

    @property
    def difference(self) -> Decimal:
        return self.recorded_percent - self.computed_percent


def select_reading(*readings: Decimal | None) -> Decimal | None:
    """Return the first recorded (non-None, non-zero) reading, in priority order."""
    for reading in readings:
        if reading is not None and reading != ZERO:
            return reading
    return None


def resolve_out_weight(item: MemoItemRecord) -> Decimal:
    """Dispatch weight of an item: second reading preferred."""
    reading = select_reading(item.out_weight_2, item.out_weight_1)
    return ZERO if reading is None else reading


def resolve_in_weight(item: MemoItemRecord) -> Decimal:
    """Return weight of an item: first reading preferred."""
    reading = select_reading(item.in_weight_1, item.in_weight_2)
    return ZERO if reading is None else reading


def resolve_reject_weight(item: MemoItemRecord) -> Decimal:
    return ZERO if item.rej_cts is None else item.rej_cts


def compute_yield_percent(total_in: Decimal, total_out: Decimal) -> Decimal | None:
    """``total_in / total_out * 100``, or ``None`` when nothing went out."""
    if total_out <= ZERO:
        return None
    return total_in / total_out * HUNDRED


def compute_item_totals(items: Iterable[MemoItemRecord]) -> MemoTotals:
    """Sum resolved weights over items and derive remaining and yield."""
    total_out = ZERO
    total_in = ZERO
    total_reject = ZERO
    for item in items:
        total_out += resolve_out_weight(item)
        total_in += resolve_in_weight(item)
        total_reject += resolve_reject_weight(item)

    return MemoTotals(
        total_out=total_out,
        total_in=total_in,
        total_reject=total_reject,
        remaining=total_out - total_in - total_reject,
        yield_percent=compute_yield_percent(total_in, total_out),
    )


def compute_memo_totals(memo: MemoRecord) -> MemoTotals:
    """
    Compute the weight totals of one memo.

    Args:
        memo: The memo, with its items.

    Returns:
        ``MemoTotals``; all zeros and ``yield_percent=None`` for a memo
        without items.
    """
    return compute_item_totals(memo.items)


def find_percent_divergences(
    memo: MemoRecord,
    tolerance: Decimal = DEFAULT_PERCENT_TOLERANCE,
) -> tuple[PercentDivergence, ...]:
    """
    Compare each item's recorded ``percent`` with its computed yield.

    Items with no recorded percent, or with no outbound weight (undefined
    yield), are skipped.  Neither value is discarded: both are returned so
    a reviewer can decide which one is right.

    Args:
        memo: The memo to inspect.
        tolerance: Allowed absolute difference in percentage points.

    Returns:
        One ``PercentDivergence`` per item outside the tolerance, in item
        order.
    """
    divergences: list[PercentDivergence] = []
    for item in memo.items:
        if item.percent is None:
            continue
        computed = compute_yield_percent(
            resolve_in_weight(item), resolve_out_weight(item)
        )
        if computed is None:
            continue
        if abs(item.percent - computed) > tolerance:
            divergences.append(
                PercentDivergence(
                    memo_id=memo.id,
                    item_no=item.item_no,
                    recorded_percent=item.percent,
                    computed_percent=computed,
                )
            )
    return tuple(divergences)
