"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable records that cross the store boundary:
    ``MemoItemRecord`` and ``MemoRecord`` (what derivation reads),
    ``MemoDraft`` (what memo creation writes), and the status enums of the
    three transition-guarded record kinds (memos, ledger entries,
    inventory records).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    ``from_model()`` class methods are boundary converters invoked from
    selectors and stores, never from derivation logic.

Invariants enforced:
    - Derivation accepts/returns DTOs, never ORM entities.
    - The memo ``process`` label is parsed exactly once, here, into
      ``MemoRecord.transition``.
    - Weight readings are ``Decimal | None``; ``None`` means "not recorded".
    - ``MemoStatus`` is monotonic: OPEN -> LOCKED, LOCKED is terminal.

Failure modes:
    - ``from_mapping()`` never raises on malformed weights or dates; they
      become ``None``.  A mapping without an ``id`` raises ``KeyError``.

Data flow:
    Memo (ORM) / mapping -> MemoRecord -> MemoTotals / LotSnapshot
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping

from lot_kernel.domain.stages import StageTransition, parse_transition
from lot_kernel.domain.values import (
    parse_calendar_date,
    parse_count,
    parse_weight,
)

if TYPE_CHECKING:
    from lot_kernel.models.ledger_entry import LedgerEntry as LedgerEntryModel
    from lot_kernel.models.memo import Memo as MemoModel
    from lot_kernel.models.memo import MemoItem as MemoItemModel


class MemoStatus(str, Enum):
    """
    Lifecycle status of a memo.

    Contract:
        OPEN -> LOCKED is the only legal transition.  LOCKED is terminal.
    """

    OPEN = "OPEN"
    LOCKED = "LOCKED"

    @property
    def is_terminal(self) -> bool:
        return self is MemoStatus.LOCKED


class LedgerEntryStatus(str, Enum):
    """Cash ledger entry lifecycle: OPEN -> POSTED (terminal)."""

    OPEN = "OPEN"
    POSTED = "POSTED"


class InventoryStatus(str, Enum):
    """Inventory record lifecycle: AVAILABLE -> SOLD (terminal)."""

    AVAILABLE = "AVAILABLE"
    SOLD = "SOLD"


_ITEM_WEIGHT_FIELDS = (
    "out_weight_1",
    "out_weight_2",
    "in_weight_1",
    "in_weight_2",
    "rej_cts",
    "wastage_in",
    "percent",
    "price",
    "amount",
)
_ITEM_COUNT_FIELDS = ("out_pcs", "in_pcs", "rej_pcs")
_ITEM_TEXT_FIELDS = ("out_grade", "out_size", "in_grade", "in_size", "remark_line")


@dataclass(frozen=True)
class MemoItemRecord:
    """
    One weighed parcel within a memo.

    Contract:
        Carries the raw weight readings exactly as recorded.  Which reading
        is authoritative is decided by memo accounting, not here.

    Non-goals:
        - ``percent`` is informational; yield is always recomputed.
        - ``price`` and ``amount`` are carried, never computed.
    """

    item_no: int
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

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], default_item_no: int = 1) -> MemoItemRecord:
        """Build an item from a JSON/fixture-shaped mapping."""
        values: dict[str, Any] = {
            "item_no": parse_count(data.get("item_no")) or default_item_no,
            "out_date": parse_calendar_date(data.get("out_date")),
            "in_date": parse_calendar_date(data.get("in_date")),
        }
        for name in _ITEM_WEIGHT_FIELDS:
            values[name] = parse_weight(data.get(name))
        for name in _ITEM_COUNT_FIELDS:
            values[name] = parse_count(data.get(name))
        for name in _ITEM_TEXT_FIELDS:
            values[name] = data.get(name)
        return cls(**values)

    @classmethod
    def from_model(cls, model: MemoItemModel) -> MemoItemRecord:
        return cls(
            item_no=model.item_no,
            out_weight_1=model.out_weight_1,
            out_weight_2=model.out_weight_2,
            in_weight_1=model.in_weight_1,
            in_weight_2=model.in_weight_2,
            out_pcs=model.out_pcs,
            in_pcs=model.in_pcs,
            rej_pcs=model.rej_pcs,
            rej_cts=model.rej_cts,
            wastage_in=model.wastage_in,
            percent=model.percent,
            out_date=model.out_date,
            in_date=model.in_date,
            out_grade=model.out_grade,
            out_size=model.out_size,
            in_grade=model.in_grade,
            in_size=model.in_size,
            price=model.price,
            amount=model.amount,
            remark_line=model.remark_line,
        )


@dataclass(frozen=True)
class MemoRecord:
    """
    A memo as seen by derivation.

    Contract:
        Immutable snapshot of one memo with its items in item order and its
        process label already parsed into ``transition``.

    Guarantees:
        - ``transition == parse_transition(process)``.
        - ``items`` is a tuple (possibly empty for malformed records).
    """

    id: str
    memo_no: str
    process: str
    transition: StageTransition
    lot_code: str | None
    status: MemoStatus = MemoStatus.OPEN
    description: str | None = None
    from_party: str | None = None
    to_party: str | None = None
    date_out_header: date | None = None
    date_in_header: date | None = None
    remark_header: str | None = None
    items: tuple[MemoItemRecord, ...] = ()

    @property
    def status_locked(self) -> bool:
        return self.status is MemoStatus.LOCKED

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> MemoRecord:
        """
        Build a record from a JSON/fixture-shaped mapping.

        Accepts either ``status`` ("OPEN"/"LOCKED") or the boolean
        ``status_locked``.
        """
        process = data.get("process") or ""
        if "status" in data and data["status"] is not None:
            status = MemoStatus(str(data["status"]).upper())
        else:
            status = MemoStatus.LOCKED if data.get("status_locked") else MemoStatus.OPEN
        raw_items = data.get("items") or ()
        items = tuple(
            MemoItemRecord.from_mapping(item, default_item_no=index)
            for index, item in enumerate(raw_items, start=1)
        )
        return cls(
            id=str(data["id"]),
            memo_no=str(data.get("memo_no") or ""),
            process=process,
            transition=parse_transition(process),
            lot_code=data.get("lot_code"),
            status=status,
            description=data.get("description"),
            from_party=data.get("from_party"),
            to_party=data.get("to_party"),
            date_out_header=parse_calendar_date(data.get("date_out_header")),
            date_in_header=parse_calendar_date(data.get("date_in_header")),
            remark_header=data.get("remark_header"),
            items=items,
        )

    @classmethod
    def from_model(cls, model: MemoModel) -> MemoRecord:
        """Convert an ORM Memo (with loaded items) to a MemoRecord."""
        process = model.process or ""
        return cls(
            id=str(model.id),
            memo_no=model.memo_no,
            process=process,
            transition=parse_transition(process),
            lot_code=model.lot_code,
            status=MemoStatus(model.status),
            description=model.description,
            from_party=model.from_party,
            to_party=model.to_party,
            date_out_header=model.date_out_header,
            date_in_header=model.date_in_header,
            remark_header=model.remark_header,
            items=tuple(
                MemoItemRecord.from_model(item)
                for item in sorted(model.items, key=lambda i: i.item_no)
            ),
        )


@dataclass(frozen=True)
class MemoDraft:
    """
    Input for memo creation.

    Contract:
        All items are attached at creation time.  ``memo_no`` is optional;
        the memo service assigns one from the clock when absent.
    """

    process: str
    lot_code: str
    items: tuple[MemoItemRecord, ...]
    memo_no: str | None = None
    description: str | None = None
    from_party: str | None = None
    to_party: str | None = None
    date_out_header: date | None = None
    date_in_header: date | None = None
    remark_header: str | None = None


@dataclass(frozen=True)
class LedgerEntryDraft:
    """Input for cash ledger entry creation.  The amount is carried as given."""

    entry_date: date | None = None
    party: str | None = None
    lot_code: str | None = None
    entry_type: str | None = None
    amount: Decimal | None = None


@dataclass(frozen=True)
class LedgerEntryRecord:
    id: str
    entry_date: date | None
    party: str | None
    lot_code: str | None
    entry_type: str | None
    amount: Decimal | None
    status: LedgerEntryStatus

    @classmethod
    def from_model(cls, model: LedgerEntryModel) -> LedgerEntryRecord:
        return cls(
            id=model.id,
            entry_date=model.entry_date,
            party=model.party,
            lot_code=model.lot_code,
            entry_type=model.entry_type,
            amount=model.amount,
            status=LedgerEntryStatus(model.status),
        )
