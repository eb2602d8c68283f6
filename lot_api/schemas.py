"""Request and response schemas for the lot tracker API.

Invariants:
    - Weights travel as JSON numbers; inside the kernel they are Decimal.
    - Responses wrap their payload as ``{"data": ...}``; errors are
      ``{"error": message}`` (see error_handlers.py).
    - Response models are built from kernel DTOs, never from ORM rows.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Annotated, Generic, TypeVar

from pydantic import BaseModel, Field, PlainSerializer

from lot_kernel.domain.dtos import LedgerEntryRecord, MemoItemRecord, MemoRecord
from lot_kernel.domain.lot_state import LotSnapshot
from lot_kernel.domain.lot_timeline import TimelineEntry
from lot_kernel.domain.memo_accounting import MemoTotals
from lot_kernel.domain.stage_aggregator import StageSummary

# Decimal in, JSON number out
Weight = Annotated[
    Decimal,
    PlainSerializer(lambda value: float(value), return_type=float, when_used="json"),
]

T = TypeVar("T")


class DataEnvelope(BaseModel, Generic[T]):
    data: T


# --- Requests -----------------------------------------------------------------


class MemoItemIn(BaseModel):
    item_no: int | None = None
    out_weight_1: Decimal | None = None
    out_weight_2: Decimal | None = None
    in_weight_1: Decimal | None = None
    in_weight_2: Decimal | None = None
    out_pcs: int | None = None
    in_pcs: int | None = None
    rej_pcs: int | None = None
    rej_cts: Decimal | None = None
    wastage_in: Decimal | None = None
    percent: Decimal | None = None
    out_date: date | None = None
    in_date: date | None = None
    out_grade: str | None = None
    out_size: str | None = None
    in_grade: str | None = None
    in_size: str | None = None
    price: Decimal | None = None
    amount: Decimal | None = None
    remark_line: str | None = None

    def to_record(self, default_item_no: int) -> MemoItemRecord:
        values = self.model_dump()
        values["item_no"] = self.item_no or default_item_no
        return MemoItemRecord(**values)


class CreateMemoRequest(BaseModel):
    process: str = Field(min_length=1)
    lot_code: str = Field(min_length=1)
    memo_no: str | None = None
    description: str | None = None
    from_party: str | None = None
    to_party: str | None = None
    date_out_header: date | None = None
    date_in_header: date | None = None
    remark_header: str | None = None
    items: list[MemoItemIn] = Field(default_factory=list)


class CloseMemoRequest(BaseModel):
    # Optional so a missing id reaches the service and is reported as
    # "memo_id is required".
    memo_id: str | None = None


class CreateLedgerEntryRequest(BaseModel):
    entry_date: date | None = None
    party: str | None = None
    lot_code: str | None = None
    entry_type: str | None = None
    amount: Decimal | None = None


class PostLedgerEntryRequest(BaseModel):
    entry_id: str = Field(min_length=1)


class SellRequest(BaseModel):
    inventory_ids: list[str] = Field(default_factory=list)
    sell_id: str | None = None


# --- Responses ----------------------------------------------------------------


class MemoItemOut(BaseModel):
    item_no: int
    out_weight_1: Weight | None = None
    out_weight_2: Weight | None = None
    in_weight_1: Weight | None = None
    in_weight_2: Weight | None = None
    out_pcs: int | None = None
    in_pcs: int | None = None
    rej_pcs: int | None = None
    rej_cts: Weight | None = None
    wastage_in: Weight | None = None
    percent: Weight | None = None
    out_date: date | None = None
    in_date: date | None = None
    out_grade: str | None = None
    out_size: str | None = None
    in_grade: str | None = None
    in_size: str | None = None
    price: Weight | None = None
    amount: Weight | None = None
    remark_line: str | None = None

    @classmethod
    def from_record(cls, item: MemoItemRecord) -> MemoItemOut:
        return cls(**{name: getattr(item, name) for name in cls.model_fields})


class MemoTotalsOut(BaseModel):
    total_out: Weight
    total_in: Weight
    total_reject: Weight
    remaining: Weight
    yield_percent: Weight | None

    @classmethod
    def from_totals(cls, totals: MemoTotals) -> MemoTotalsOut:
        return cls(
            total_out=totals.total_out,
            total_in=totals.total_in,
            total_reject=totals.total_reject,
            remaining=totals.remaining,
            yield_percent=totals.yield_percent,
        )


class MemoOut(BaseModel):
    id: str
    memo_no: str
    process: str
    from_stage: str
    to_stage: str
    is_transition: bool
    lot_code: str | None
    status: str
    status_locked: bool
    description: str | None = None
    from_party: str | None = None
    to_party: str | None = None
    date_out_header: date | None = None
    date_in_header: date | None = None
    remark_header: str | None = None
    items: list[MemoItemOut] = Field(default_factory=list)
    totals: MemoTotalsOut | None = None

    @classmethod
    def from_record(cls, memo: MemoRecord, totals: MemoTotals | None = None) -> MemoOut:
        return cls(
            id=memo.id,
            memo_no=memo.memo_no,
            process=memo.process,
            from_stage=memo.transition.from_stage,
            to_stage=memo.transition.to_stage,
            is_transition=memo.transition.is_transition,
            lot_code=memo.lot_code,
            status=memo.status.value,
            status_locked=memo.status_locked,
            description=memo.description,
            from_party=memo.from_party,
            to_party=memo.to_party,
            date_out_header=memo.date_out_header,
            date_in_header=memo.date_in_header,
            remark_header=memo.remark_header,
            items=[MemoItemOut.from_record(item) for item in memo.items],
            totals=MemoTotalsOut.from_totals(totals) if totals is not None else None,
        )


class LotSnapshotOut(BaseModel):
    lot_code: str
    current_stage: str
    total_out: Weight
    total_in: Weight
    total_reject: Weight
    remaining: Weight
    yield_percent: Weight | None
    # ISO date, or the not-available marker
    last_updated: str

    @classmethod
    def from_snapshot(cls, snapshot: LotSnapshot, not_available: str) -> LotSnapshotOut:
        last_updated = (
            snapshot.last_updated.isoformat()
            if snapshot.last_updated is not None
            else not_available
        )
        return cls(
            lot_code=snapshot.lot_code,
            current_stage=snapshot.current_stage,
            total_out=snapshot.total_out,
            total_in=snapshot.total_in,
            total_reject=snapshot.total_reject,
            remaining=snapshot.remaining,
            yield_percent=snapshot.yield_percent,
            last_updated=last_updated,
        )


class TimelineEntryOut(BaseModel):
    memo_id: str
    memo_no: str
    process: str
    from_stage: str
    to_stage: str
    is_transition: bool
    status: str
    date_out_header: date | None
    date_in_header: date | None
    totals: MemoTotalsOut

    @classmethod
    def from_entry(cls, entry: TimelineEntry) -> TimelineEntryOut:
        return cls(
            memo_id=entry.memo.id,
            memo_no=entry.memo.memo_no,
            process=entry.memo.process,
            from_stage=entry.transition.from_stage,
            to_stage=entry.transition.to_stage,
            is_transition=entry.transition.is_transition,
            status=entry.memo.status.value,
            date_out_header=entry.memo.date_out_header,
            date_in_header=entry.memo.date_in_header,
            totals=MemoTotalsOut.from_totals(entry.totals),
        )


class LotDetailOut(BaseModel):
    snapshot: LotSnapshotOut
    timeline: list[TimelineEntryOut]


class StageSummaryOut(BaseModel):
    stage: str
    count: int
    total_out: Weight
    total_in: Weight

    @classmethod
    def from_summary(cls, summary: StageSummary) -> StageSummaryOut:
        return cls(
            stage=summary.stage,
            count=summary.count,
            total_out=summary.total_out,
            total_in=summary.total_in,
        )


class LedgerEntryOut(BaseModel):
    id: str
    entry_date: date | None
    party: str | None
    lot_code: str | None
    entry_type: str | None
    amount: Weight | None
    status: str

    @classmethod
    def from_record(cls, entry: LedgerEntryRecord) -> LedgerEntryOut:
        return cls(
            id=entry.id,
            entry_date=entry.entry_date,
            party=entry.party,
            lot_code=entry.lot_code,
            entry_type=entry.entry_type,
            amount=entry.amount,
            status=entry.status.value,
        )


class SellOut(BaseModel):
    sell_id: str
    inventory_ids: list[str]
    total_cts: Weight
