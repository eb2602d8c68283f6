"""
Pure domain layer.

Data transfer objects and derivation logic with NO dependencies on the ORM,
the database, the clock or any I/O.  All domain objects are immutable and
every derivation is deterministic.
"""

from lot_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from lot_kernel.domain.dtos import (
    InventoryStatus,
    LedgerEntryDraft,
    LedgerEntryRecord,
    LedgerEntryStatus,
    MemoDraft,
    MemoItemRecord,
    MemoRecord,
    MemoStatus,
)
from lot_kernel.domain.lot_state import LotSnapshot, resolve_lot_snapshot
from lot_kernel.domain.lot_timeline import (
    TimelineEntry,
    build_lot_timeline,
    list_lot_codes,
)
from lot_kernel.domain.memo_accounting import (
    MemoTotals,
    PercentDivergence,
    compute_memo_totals,
    find_percent_divergences,
)
from lot_kernel.domain.memo_store import MemoStore
from lot_kernel.domain.stage_aggregator import StageSummary, aggregate_stages
from lot_kernel.domain.stages import (
    PRODUCTION_STAGES,
    UNKNOWN_STAGE,
    SingleStage,
    StageTransition,
    Transition,
    parse_transition,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "InventoryStatus",
    "LedgerEntryDraft",
    "LedgerEntryRecord",
    "LedgerEntryStatus",
    "MemoDraft",
    "MemoItemRecord",
    "MemoRecord",
    "MemoStatus",
    "LotSnapshot",
    "resolve_lot_snapshot",
    "TimelineEntry",
    "build_lot_timeline",
    "list_lot_codes",
    "MemoTotals",
    "PercentDivergence",
    "compute_memo_totals",
    "find_percent_divergences",
    "MemoStore",
    "StageSummary",
    "aggregate_stages",
    "PRODUCTION_STAGES",
    "UNKNOWN_STAGE",
    "SingleStage",
    "StageTransition",
    "Transition",
    "parse_transition",
]
