"""
Module: lot_kernel.models.ledger_entry
Responsibility: ORM persistence for cash ledger entries.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - status is OPEN or POSTED; OPEN -> POSTED only, via the conditional
      UPDATE in services/status_transition.py.
    - amount is carried as entered, never computed.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from lot_kernel.db.base import TrackedBase


class LedgerEntry(TrackedBase):
    __tablename__ = "ledger_entries"

    __table_args__ = (
        Index("idx_ledger_lot_code", "lot_code"),
        Index("idx_ledger_status", "status"),
    )

    entry_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    party: Mapped[str | None] = mapped_column(String(200), nullable=True)

    lot_code: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Free text, e.g. "PAYMENT" or "RECEIPT"
    entry_type: Mapped[str | None] = mapped_column(String(50), nullable=True)

    amount: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)

    status: Mapped[str] = mapped_column(String(16), nullable=False, default="OPEN")

    def __repr__(self) -> str:
        return f"<LedgerEntry {self.entry_type} {self.amount} {self.status}>"
