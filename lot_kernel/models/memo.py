"""
Module: lot_kernel.models.memo
Responsibility: ORM persistence for memos (custody transfers between parties
    for a processing step) and their weighed items.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - status is OPEN or LOCKED; OPEN -> LOCKED only, via the conditional
      UPDATE in services/status_transition.py.
    - Locked memos and their items are immutable, and memos are never
      deleted (ORM listeners in db/immutability.py).
    - seq records insertion order, which is the tie-break for timeline
      ordering.

Failure modes:
    - ImmutabilityViolationError on ORM modification of a locked memo.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import BigInteger, Date, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lot_kernel.db.base import TrackedBase


class Memo(TrackedBase):
    """
    Memo header.

    Contract:
        Created OPEN with all of its items.  Closed (LOCKED) exactly once.
        No column stores a lot's stage or balance; those are derived from the
        ordered memos of the lot.
    """

    __tablename__ = "memos"

    __table_args__ = (
        Index("idx_memo_lot_code", "lot_code"),
        Index("idx_memo_status", "status"),
        Index("idx_memo_seq", "seq", unique=True),
    )

    seq: Mapped[int] = mapped_column(BigInteger, nullable=False)

    memo_no: Mapped[str] = mapped_column(String(64), nullable=False)

    # Free-text label, e.g. "ROUGH TO PREFORM" or "HEAT 2"
    process: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    lot_code: Mapped[str | None] = mapped_column(String(100), nullable=True)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    from_party: Mapped[str | None] = mapped_column(String(200), nullable=True)

    to_party: Mapped[str | None] = mapped_column(String(200), nullable=True)

    date_out_header: Mapped[date | None] = mapped_column(Date, nullable=True)

    date_in_header: Mapped[date | None] = mapped_column(Date, nullable=True)

    remark_header: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(String(16), nullable=False, default="OPEN")

    items: Mapped[list["MemoItem"]] = relationship(
        back_populates="memo",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="MemoItem.item_no",
    )

    def __repr__(self) -> str:
        return f"<Memo {self.memo_no} {self.process!r} lot={self.lot_code} {self.status}>"

    @property
    def status_locked(self) -> bool:
        return self.status == "LOCKED"


class MemoItem(TrackedBase):
    """One weighed parcel of a memo.  Weights are carats, Numeric(18, 3)."""

    __tablename__ = "memo_items"

    __table_args__ = (Index("idx_memo_item_memo", "memo_id"),)

    memo_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("memos.id"),
        nullable=False,
    )

    item_no: Mapped[int] = mapped_column(Integer, nullable=False)

    out_weight_1: Mapped[Decimal | None] = mapped_column(nullable=True)
    out_weight_2: Mapped[Decimal | None] = mapped_column(nullable=True)
    in_weight_1: Mapped[Decimal | None] = mapped_column(nullable=True)
    in_weight_2: Mapped[Decimal | None] = mapped_column(nullable=True)

    out_pcs: Mapped[int | None] = mapped_column(Integer, nullable=True)
    in_pcs: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rej_pcs: Mapped[int | None] = mapped_column(Integer, nullable=True)

    rej_cts: Mapped[Decimal | None] = mapped_column(nullable=True)
    wastage_in: Mapped[Decimal | None] = mapped_column(nullable=True)

    # Yield as recorded on paper; informational only
    percent: Mapped[Decimal | None] = mapped_column(nullable=True)

    out_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    in_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    out_grade: Mapped[str | None] = mapped_column(String(50), nullable=True)
    out_size: Mapped[str | None] = mapped_column(String(50), nullable=True)
    in_grade: Mapped[str | None] = mapped_column(String(50), nullable=True)
    in_size: Mapped[str | None] = mapped_column(String(50), nullable=True)

    price: Mapped[Decimal | None] = mapped_column(nullable=True)
    amount: Mapped[Decimal | None] = mapped_column(nullable=True)

    remark_line: Mapped[str | None] = mapped_column(Text, nullable=True)

    memo: Mapped["Memo"] = relationship(back_populates="items")

    def __repr__(self) -> str:
        return f"<MemoItem {self.item_no} of memo {self.memo_id}>"
