"""
Module: lot_kernel.models.audit_entry
Responsibility: ORM persistence for the append-only audit log.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Audit rows are append-only; no ORM UPDATE or DELETE
      (db/immutability.py).
    - seq is monotonically increasing, allocated by AuditorService as
      max(seq) + 1 inside the caller's transaction.

Audit relevance:
    Every successful state transition (memo create/lock, ledger create/post,
    sell) appends one AuditEntry in the same transaction as the change.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, BigInteger, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from lot_kernel.db.base import Base


class AuditAction(str, Enum):
    CREATE = "create"
    CLOSE = "close"
    POST = "post"


class AuditEntry(Base):
    """
    One audit log row.

    Guarantees:
        - seq is unique and increasing.
        - entity_id is a string; it is NULL only for entries that do not
          refer to a single record.
    """

    __tablename__ = "audit_log"

    __table_args__ = (
        Index("idx_audit_entity", "entity_type", "entity_id"),
        Index("idx_audit_seq", "seq", unique=True),
    )

    seq: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Table-style name of the audited record kind, e.g. "memos", "sell_records"
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)

    entity_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    action: Mapped[str] = mapped_column(String(20), nullable=False)

    summary: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    actor: Mapped[str | None] = mapped_column(String(100), nullable=True)

    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<AuditEntry #{self.seq} {self.action} on {self.entity_type}:{self.entity_id}>"
