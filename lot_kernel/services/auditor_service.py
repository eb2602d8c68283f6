"""
AuditorService -- append-only audit trail.

Responsibility:
    Appends one ``AuditEntry`` row for every successful state transition
    (memo create/lock, ledger entry create/post, sell) and returns the
    ordered trace of an entity for review.

Architecture position:
    Kernel > Services -- imperative shell, called by MemoService (through
    SqlMemoStore), LedgerService and SellService.

Invariants enforced:
    - Append-only: audit entries are never modified or deleted (ORM
      listeners on the AuditEntry model).
    - seq is allocated as max(seq) + 1 inside the caller's transaction; the
      unique index on seq turns a concurrent race into an IntegrityError
      that rolls back the whole transition.

Failure modes:
    - IntegrityError on a concurrent seq race.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from lot_kernel.domain.clock import Clock, SystemClock
from lot_kernel.logging_config import LogContext, get_logger
from lot_kernel.models.audit_entry import AuditAction, AuditEntry

logger = get_logger("services.auditor")


@dataclass(frozen=True)
class AuditTraceEntry:
    seq: int
    action: str
    occurred_at: datetime
    actor: str | None
    summary: dict[str, Any]


@dataclass(frozen=True)
class AuditTrace:
    """All audit entries of one entity, in seq order."""

    entity_type: str
    entity_id: str | None
    entries: tuple[AuditTraceEntry, ...]

    @property
    def is_empty(self) -> bool:
        return len(self.entries) == 0

    @property
    def first_action(self) -> str | None:
        return self.entries[0].action if self.entries else None

    @property
    def last_action(self) -> str | None:
        return self.entries[-1].action if self.entries else None


class AuditorService:
    """
    Service for appending and reading audit entries.

    Contract:
        ``record()`` flushes a new entry into the caller's transaction.

    Non-goals:
        - Does NOT call ``session.commit()``.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self._session = session
        self._clock = clock or SystemClock()

    def _next_seq(self) -> int:
        current = self._session.execute(select(func.max(AuditEntry.seq))).scalar()
        return (current or 0) + 1

    def record(
        self,
        entity_type: str,
        entity_id: str | None,
        action: AuditAction | str,
        summary: Mapping[str, Any] | None = None,
        actor: str | None = None,
    ) -> AuditEntry:
        """
        Append an audit entry.

        Args:
            entity_type: Table-style record kind, e.g. ``"memos"``.
            entity_id: Id of the record, or ``None``.
            action: ``create``, ``close`` or ``post``.
            summary: JSON-serialisable details.
            actor: Who performed the action.  Defaults to the ``actor`` bound
                in ``LogContext``.

        Returns:
            The flushed AuditEntry.
        """
        action_value = action.value if isinstance(action, AuditAction) else action
        if actor is None:
            actor = LogContext.get_all().get("actor")

        entry = AuditEntry(
            seq=self._next_seq(),
            entity_type=entity_type,
            entity_id=entity_id,
            action=action_value,
            summary=dict(summary or {}),
            actor=actor,
            occurred_at=self._clock.now(),
        )
        self._session.add(entry)
        self._session.flush()

        logger.info(
            "audit_entry_created",
            extra={
                "entity_type": entity_type,
                "entity_id": entity_id,
                "action": action_value,
                "seq": entry.seq,
            },
        )
        return entry

    def trace(self, entity_type: str, entity_id: str | None) -> AuditTrace:
        """Return the audit trace of one entity in seq order."""
        stmt = select(AuditEntry).where(AuditEntry.entity_type == entity_type)
        if entity_id is None:
            stmt = stmt.where(AuditEntry.entity_id.is_(None))
        else:
            stmt = stmt.where(AuditEntry.entity_id == entity_id)
        rows = self._session.execute(stmt.order_by(AuditEntry.seq)).scalars().all()

        return AuditTrace(
            entity_type=entity_type,
            entity_id=entity_id,
            entries=tuple(
                AuditTraceEntry(
                    seq=row.seq,
                    action=row.action,
                    occurred_at=row.occurred_at,
                    actor=row.actor,
                    summary=dict(row.summary or {}),
                )
                for row in rows
            ),
        )
