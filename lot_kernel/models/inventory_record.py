"""
Module: lot_kernel.models.inventory_record
Responsibility: ORM persistence for finished-stock inventory records.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - status is AVAILABLE or SOLD; AVAILABLE -> SOLD only, in one
      conditional UPDATE covering every record of a sale.
    - sell_id is set in the same statement that marks the record SOLD.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from lot_kernel.db.base import TrackedBase


class InventoryRecord(TrackedBase):
    __tablename__ = "inventory_records"

    __table_args__ = (
        Index("idx_inventory_lot_code", "lot_code"),
        Index("idx_inventory_status", "status"),
        Index("idx_inventory_sell_id", "sell_id"),
    )

    lot_code: Mapped[str | None] = mapped_column(String(100), nullable=True)

    record_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    cts: Mapped[Decimal | None] = mapped_column(nullable=True)

    status: Mapped[str] = mapped_column(String(16), nullable=False, default="AVAILABLE")

    sell_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    def __repr__(self) -> str:
        return f"<InventoryRecord {self.lot_code} {self.cts} {self.status}>"
