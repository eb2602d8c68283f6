"""ORM models for the lot kernel."""

from lot_kernel.models.audit_entry import AuditAction, AuditEntry
from lot_kernel.models.inventory_record import InventoryRecord
from lot_kernel.models.ledger_entry import LedgerEntry
from lot_kernel.models.memo import Memo, MemoItem

__all__ = [
    "AuditAction",
    "AuditEntry",
    "InventoryRecord",
    "LedgerEntry",
    "Memo",
    "MemoItem",
]
