"""Services for the lot kernel (write side)."""

from lot_kernel.services.auditor_service import AuditorService, AuditTrace
from lot_kernel.services.ledger_service import LedgerService
from lot_kernel.services.memo_service import MemoService
from lot_kernel.services.memo_store import SqlMemoStore
from lot_kernel.services.sell_service import SellResult, SellService

__all__ = [
    "AuditTrace",
    "AuditorService",
    "LedgerService",
    "MemoService",
    "SellResult",
    "SellService",
    "SqlMemoStore",
]
