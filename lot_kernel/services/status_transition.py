"""
Status transitions -- compare-and-set on a status column.

Responsibility:
    Performs the one-way status transitions of the kernel (memo
    OPEN -> LOCKED, ledger entry OPEN -> POSTED, inventory record
    AVAILABLE -> SOLD) as a single conditional UPDATE:

        UPDATE <table> SET status = :target
        WHERE id IN (:ids) AND status = :expected

    and, when fewer rows match than requested, re-reads the rows to tell
    missing ids apart from ids already in another status.

Architecture position:
    Kernel > Services -- shared by SqlMemoStore, LedgerService and
    SellService.

Invariants enforced:
    - No read-then-write race: two concurrent transitions of the same row
      cannot both succeed, because only one UPDATE can match ``expected``.
    - The statement bypasses the ORM unit of work, so the immutability
      listeners do not see it; the WHERE clause is the guard.

Failure modes:
    - SQLAlchemyError from the driver propagates to the caller.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from lot_kernel.db.base import Base


@dataclass(frozen=True)
class UnmatchedIds:
    """Ids a conditional update did not touch, split by cause."""

    missing: tuple[str, ...]
    conflicting: tuple[str, ...]


def compare_and_set_status(
    session: Session,
    model: type[Base],
    ids: Iterable[str],
    *,
    expected: str,
    target: str,
    extra_values: Mapping[str, Any] | None = None,
) -> int:
    """
    Move every row in ``ids`` from ``expected`` to ``target`` in one statement.

    Args:
        session: Caller's session; the statement joins its transaction.
        model: ORM model with ``id`` and ``status`` columns.
        ids: Primary keys to transition.
        expected: Status the rows must currently have.
        target: New status.
        extra_values: Further columns set by the same statement.

    Returns:
        Number of rows updated.
    """
    id_list = list(ids)
    if not id_list:
        return 0
    values: dict[str, Any] = {"status": target}
    if extra_values:
        values.update(extra_values)
    stmt = (
        update(model)
        .where(model.id.in_(id_list), model.status == expected)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    result = session.execute(stmt)
    return result.rowcount


def classify_unmatched(
    session: Session,
    model: type[Base],
    ids: Iterable[str],
    *,
    expected: str,
) -> UnmatchedIds:
    """Split ids into missing rows and rows not in ``expected`` status."""
    id_list = list(ids)
    rows = session.execute(
        select(model.id, model.status).where(model.id.in_(id_list))
    ).all()
    statuses = {row.id: row.status for row in rows}
    missing = tuple(i for i in id_list if i not in statuses)
    conflicting = tuple(
        i for i in id_list if i in statuses and statuses[i] != expected
    )
    return UnmatchedIds(missing=missing, conflicting=conflicting)
