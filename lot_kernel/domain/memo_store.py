"""
MemoStore -- the data-access collaborator of the lot kernel.

Responsibility:
    Declares the operations the kernel needs from memo persistence.
    Derivation reads a snapshot through ``list_memos()``; the lock
    transition uses ``get_memo_status()`` and the compare-and-set
    ``set_memo_status()``.

Architecture position:
    Kernel > Domain -- protocol only.  The SQLAlchemy implementation is
    ``lot_kernel.services.memo_store.SqlMemoStore``.

Failure modes:
    - ``MemoNotFoundError`` for an unknown memo id.
    - ``StoreError`` for any underlying storage failure, message verbatim.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

from lot_kernel.domain.dtos import MemoDraft, MemoRecord, MemoStatus


@runtime_checkable
class MemoStore(Protocol):
    """Protocol for memo persistence."""

    def list_memos(self) -> tuple[MemoRecord, ...]:
        """All memos with their items, in fetch (insertion) order."""
        ...

    def get_memo(self, memo_id: str) -> MemoRecord:
        """
        Raises:
            MemoNotFoundError: When no memo has this id.
        """
        ...

    def get_memo_status(self, memo_id: str) -> MemoStatus:
        """
        Raises:
            MemoNotFoundError: When no memo has this id.
        """
        ...

    def set_memo_status(
        self,
        memo_id: str,
        status: MemoStatus,
        *,
        expected: MemoStatus,
    ) -> MemoRecord | None:
        """Conditionally move a memo from ``expected`` to ``status``.

        Returns the updated record, or ``None`` when no row was in the
        expected status (the caller decides between NotFound and Conflict).
        """
        ...

    def insert_memo(self, draft: MemoDraft, memo_no: str) -> MemoRecord:
        ...

    def append_audit_entry(
        self,
        entity_type: str,
        entity_id: str | None,
        action: str,
        summary: Mapping[str, Any],
    ) -> None:
        ...
