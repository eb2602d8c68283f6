"""
Tests for ProductionSelector -- derived lot and stage views.

Invariants tested:
- Nothing is stored: closing or adding a memo changes the next read.
- lot_snapshots filters by case-insensitive code search and exact stage.
- Divergent recorded percents are logged, never substituted.
"""

from datetime import date
from decimal import Decimal

import pytest

from lot_kernel.domain.dtos import MemoDraft, MemoItemRecord, MemoRecord, MemoStatus
from lot_kernel.domain.stages import PRODUCTION_STAGES, UNKNOWN_STAGE
from lot_kernel.exceptions import MemoNotFoundError
from lot_kernel.selectors.production_selector import ProductionSelector
from lot_kernel.services.memo_service import MemoService


@pytest.fixture
def selector(session):
    return ProductionSelector(session)


class TestLotViews:
    def test_lot_codes(self, selector, seeded_memos):
        assert selector.lot_codes() == ("AJMZ 2", "AJMZ 3")

    def test_lot_snapshot(self, selector, seeded_memos):
        snapshot = selector.lot_snapshot("AJMZ 2")

        assert snapshot.current_stage == "CUTTING"
        assert snapshot.total_out == Decimal("100.5")
        assert snapshot.total_in == Decimal("94.6")
        assert snapshot.total_reject == Decimal("1.8")
        assert snapshot.last_updated == date(2024, 7, 12)

    def test_unknown_lot(self, selector, seeded_memos):
        snapshot = selector.lot_snapshot("NOPE")

        assert snapshot.current_stage == UNKNOWN_STAGE
        assert snapshot.last_updated is None

    def test_lot_timeline(self, selector, seeded_memos):
        timeline = selector.lot_timeline("AJMZ 2")

        assert [entry.transition.label for entry in timeline] == [
            "ROUGH TO PREFORM",
            "PREFORM TO CUTTING",
        ]
        assert timeline[1].memo.status is MemoStatus.OPEN

    def test_lot_detail(self, selector, seeded_memos):
        detail = selector.lot_detail("AJMZ 2")

        assert [entry.memo.memo_no for entry in detail.timeline] == ["R2235", "R2238"]
        assert detail.timeline[0].totals.remaining == Decimal("3.1")
        assert detail.snapshot.current_stage == "CUTTING"

    def test_search_is_case_insensitive_substring(self, selector, seeded_memos):
        assert [s.lot_code for s in selector.lot_snapshots(search="ajmz 3")] == ["AJMZ 3"]
        assert len(selector.lot_snapshots(search="ajmz")) == 2

    def test_stage_filter(self, selector, seeded_memos):
        snapshots = selector.lot_snapshots(stage="HEAT 2")

        assert [s.lot_code for s in snapshots] == ["AJMZ 3"]

    def test_new_memo_moves_the_lot(self, selector, session, clock, seeded_memos):
        MemoService(session, clock).create_memo(
            MemoDraft(
                process="CUTTING TO CALIBRATE",
                lot_code="AJMZ 2",
                date_out_header=date(2024, 7, 20),
                items=(
                    MemoItemRecord(
                        item_no=1,
                        out_weight_2=Decimal("46.5"),
                        in_weight_1=Decimal("45"),
                    ),
                ),
            )
        )

        snapshot = selector.lot_snapshot("AJMZ 2")

        assert snapshot.current_stage == "CALIBRATE"
        assert snapshot.last_updated is None


class TestStageBoard:
    def test_board(self, selector, seeded_memos):
        board = selector.stage_board()

        assert [summary.stage for summary in board] == list(PRODUCTION_STAGES)
        counts = {summary.stage: summary.count for summary in board}
        assert counts["CUTTING"] == 1
        assert counts["HEAT 2"] == 1
        assert sum(counts.values()) == 2

    def test_empty_database(self, selector):
        assert all(summary.count == 0 for summary in selector.stage_board())


class TestMemoViews:
    def test_memo_totals(self, selector, seeded_memos):
        totals = selector.memo_totals(seeded_memos["R2669"].id)

        assert totals.total_out == Decimal("61.8")
        assert totals.remaining == Decimal("1.6")

    def test_memo_totals_unknown(self, selector):
        with pytest.raises(MemoNotFoundError):
            selector.memo_totals("nope")

    def test_memo_summaries(self, selector, seeded_memos):
        summaries = selector.memo_summaries()

        assert [s.memo.memo_no for s in summaries] == ["R2235", "R2238", "R2669"]
        assert summaries[0].totals.total_in == Decimal("48.1")


class _FixtureStore:
    """Read-only MemoStore over in-memory records."""

    def __init__(self, memos):
        self._memos = tuple(memos)

    def list_memos(self):
        return self._memos

    def get_memo(self, memo_id):
        for memo in self._memos:
            if memo.id == memo_id:
                return memo
        raise MemoNotFoundError(memo_id)

    def get_memo_status(self, memo_id):
        return self.get_memo(memo_id).status

    def set_memo_status(self, memo_id, status, *, expected):
        return None

    def insert_memo(self, draft, memo_no):
        raise NotImplementedError

    def append_audit_entry(self, entity_type, entity_id, action, summary):
        return None


class TestWithFixtureStore:
    def test_derivation_runs_on_any_store(self, sample_memos):
        selector = ProductionSelector(None, store=_FixtureStore(sample_memos))

        assert selector.lot_snapshot("AJMZ 2").current_stage == "CUTTING"

    def test_divergent_percent_is_logged(self, captured_logs):
        memo = MemoRecord.from_mapping(
            {
                "id": "memo-d",
                "process": "ACID",
                "lot_code": "LOT-D",
                "status": MemoStatus.OPEN.value,
                "items": [{"out_weight_2": 50, "in_weight_1": 45, "percent": 95}],
            }
        )
        selector = ProductionSelector(None, store=_FixtureStore([memo]))

        totals = selector.memo_totals("memo-d")

        assert totals.yield_percent == Decimal("90")
        warnings = [
            r for r in captured_logs() if r["message"] == "recorded_percent_divergence"
        ]
        assert warnings[0]["memo_id"] == "memo-d"
        assert warnings[0]["recorded_percent"] == "95"
