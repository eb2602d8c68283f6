"""
Module: lot_kernel.selectors.production_selector
Responsibility: Read-side queries over the memo log: lot codes, lot
    timelines, lot snapshots, the per-stage board and per-memo totals.
Architecture position: Kernel > Selectors.  Fetches one memo snapshot from
    the MemoStore per call and hands it to the pure derivation functions in
    lot_kernel/domain/.

Invariants enforced:
    - There are NO stored stages or balances.  Every result is derived from
      the memo log at call time and never cached.
    - One snapshot per call, so all lots in a result are consistent with
      each other.

Failure modes:
    - MemoNotFoundError from memo_totals() for an unknown memo id.
    - StoreError from the store, unchanged.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from sqlalchemy.orm import Session

from lot_kernel.domain.dtos import MemoRecord
from lot_kernel.domain.lot_state import LotSnapshot, resolve_lot_snapshot
from lot_kernel.domain.lot_timeline import (
    TimelineEntry,
    build_lot_timeline,
    iter_timeline_entries,
    list_lot_codes,
)
from lot_kernel.domain.memo_accounting import (
    DEFAULT_PERCENT_TOLERANCE,
    MemoTotals,
    compute_memo_totals,
    find_percent_divergences,
)
from lot_kernel.domain.memo_store import MemoStore
from lot_kernel.domain.stage_aggregator import StageSummary, aggregate_stages
from lot_kernel.domain.stages import PRODUCTION_STAGES, UNKNOWN_STAGE
from lot_kernel.logging_config import get_logger
from lot_kernel.selectors.base import BaseSelector
from lot_kernel.services.memo_store import SqlMemoStore

logger = get_logger("selectors.production")


@dataclass(frozen=True)
class MemoSummary:
    memo: MemoRecord
    totals: MemoTotals


@dataclass(frozen=True)
class LotDetail:
    """Snapshot of one lot together with the timeline it was derived from."""

    snapshot: LotSnapshot
    timeline: tuple[TimelineEntry, ...]


class ProductionSelector(BaseSelector):
    """
    Derived production views.

    Contract:
        Read-only.  ``store`` defaults to a SqlMemoStore on the same
        session; any MemoStore works, which keeps derivation testable
        against fixtures.
    """

    def __init__(
        self,
        session: Session,
        store: MemoStore | None = None,
        *,
        stages: Sequence[str] = PRODUCTION_STAGES,
        unknown_stage: str = UNKNOWN_STAGE,
        percent_tolerance: Decimal = DEFAULT_PERCENT_TOLERANCE,
    ):
        super().__init__(session)
        self.store = store or SqlMemoStore(session)
        self.stages = tuple(stages)
        self.unknown_stage = unknown_stage
        self.percent_tolerance = percent_tolerance

    def _warn_divergences(self, memo: MemoRecord) -> None:
        for divergence in find_percent_divergences(memo, self.percent_tolerance):
            logger.warning(
                "recorded_percent_divergence",
                extra={
                    "memo_id": divergence.memo_id,
                    "item_no": divergence.item_no,
                    "recorded_percent": divergence.recorded_percent,
                    "computed_percent": divergence.computed_percent,
                },
            )

    def _snapshot(self, memos: Sequence[MemoRecord], lot_code: str) -> LotSnapshot:
        return resolve_lot_snapshot(
            lot_code,
            build_lot_timeline(memos, lot_code),
            self.unknown_stage,
        )

    def lot_codes(self) -> tuple[str, ...]:
        return list_lot_codes(self.store.list_memos())

    def lot_timeline(self, lot_code: str) -> tuple[TimelineEntry, ...]:
        timeline = build_lot_timeline(self.store.list_memos(), lot_code)
        for memo in timeline:
            self._warn_divergences(memo)
        return tuple(iter_timeline_entries(timeline))

    def lot_snapshot(self, lot_code: str) -> LotSnapshot:
        """Snapshot of one lot; an unknown code yields the empty snapshot."""
        return self._snapshot(self.store.list_memos(), lot_code)

    def lot_detail(self, lot_code: str) -> LotDetail:
        """Snapshot and timeline of one lot from the same memo snapshot."""
        timeline = build_lot_timeline(self.store.list_memos(), lot_code)
        for memo in timeline:
            self._warn_divergences(memo)
        return LotDetail(
            snapshot=resolve_lot_snapshot(lot_code, timeline, self.unknown_stage),
            timeline=tuple(iter_timeline_entries(timeline)),
        )

    def lot_snapshots(
        self,
        search: str | None = None,
        stage: str | None = None,
    ) -> tuple[LotSnapshot, ...]:
        """
        Snapshots of all lots, in first-seen order.

        Args:
            search: Case-insensitive substring filter on the lot code.
            stage: Exact filter on the resolved current stage.
        """
        memos = self.store.list_memos()
        needle = search.lower() if search else None
        snapshots = []
        for lot_code in list_lot_codes(memos):
            if needle is not None and needle not in lot_code.lower():
                continue
            snapshot = self._snapshot(memos, lot_code)
            if stage is not None and snapshot.current_stage != stage:
                continue
            snapshots.append(snapshot)
        return tuple(snapshots)

    def stage_board(self) -> tuple[StageSummary, ...]:
        """One summary per known stage, zero-lot stages included."""
        memos = self.store.list_memos()
        snapshots = [self._snapshot(memos, code) for code in list_lot_codes(memos)]
        return aggregate_stages(snapshots, self.stages)

    def memo_totals(self, memo_id: str) -> MemoTotals:
        memo = self.store.get_memo(memo_id)
        self._warn_divergences(memo)
        return compute_memo_totals(memo)

    def memo_summaries(self) -> tuple[MemoSummary, ...]:
        return tuple(
            MemoSummary(memo=memo, totals=compute_memo_totals(memo))
            for memo in self.store.list_memos()
        )
