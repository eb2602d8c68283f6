"""
Stage aggregator -- per-stage dashboard totals across lots.

Responsibility:
    Groups lot snapshots by current stage and reports, for each known
    production stage, how many lots sit there and their summed weights.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Every known stage appears, in vocabulary order, including stages with
      zero lots.
    - Lots whose current stage is not in the vocabulary (including the
      unknown-stage label) are excluded.  This is not an error.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Sequence

from lot_kernel.domain.lot_state import LotSnapshot
from lot_kernel.domain.stages import PRODUCTION_STAGES
from lot_kernel.domain.values import ZERO


@dataclass(frozen=True)
class StageSummary:
    stage: str
    count: int
    total_out: Decimal
    total_in: Decimal


def aggregate_stages(
    snapshots: Iterable[LotSnapshot],
    stages: Sequence[str] = PRODUCTION_STAGES,
) -> tuple[StageSummary, ...]:
    """
    Aggregate lot snapshots into one summary per known stage.

    Args:
        snapshots: Lot snapshots (any order).
        stages: Stage vocabulary, in display order.

    Returns:
        One ``StageSummary`` per entry of ``stages``.
    """
    counts = {stage: 0 for stage in stages}
    outs = {stage: ZERO for stage in stages}
    ins = {stage: ZERO for stage in stages}

    for snapshot in snapshots:
        stage = snapshot.current_stage
        if stage not in counts:
            continue
        counts[stage] += 1
        outs[stage] += snapshot.total_out
        ins[stage] += snapshot.total_in

    return tuple(
        StageSummary(
            stage=stage,
            count=counts[stage],
            total_out=outs[stage],
            total_in=ins[stage],
        )
        for stage in stages
    )
