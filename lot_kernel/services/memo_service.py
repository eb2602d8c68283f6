"""
MemoService -- memo creation and the close (lock) transition.

Responsibility:
    Creates memos (OPEN, with all items) and closes them (OPEN -> LOCKED)
    with conflict detection.  Every successful write appends an audit entry
    in the same transaction.

Architecture position:
    Kernel > Services -- imperative shell.  Talks to persistence only
    through the ``MemoStore`` protocol; the default store is
    ``SqlMemoStore`` on the same session.

Invariants enforced:
    - LOCKED is terminal.  Closing a LOCKED memo never writes and always
      raises MemoAlreadyLockedError.
    - The write is a compare-and-set on the status column, so two
      concurrent closes cannot both succeed.
    - No retries.  Store failures surface unchanged.

Failure modes:
    - MemoValidationError: missing memo id, or a draft without items.
    - MemoNotFoundError: unknown memo id.
    - MemoAlreadyLockedError: memo already LOCKED.
    - StoreError: underlying storage failure, message verbatim.
"""

from sqlalchemy.orm import Session

from lot_kernel.domain.clock import Clock
from lot_kernel.domain.dtos import MemoDraft, MemoRecord, MemoStatus
from lot_kernel.domain.memo_store import MemoStore
from lot_kernel.exceptions import (
    MemoAlreadyLockedError,
    MemoNotFoundError,
    MemoValidationError,
)
from lot_kernel.logging_config import LogContext, get_logger
from lot_kernel.models.audit_entry import AuditAction
from lot_kernel.services.base import BaseService
from lot_kernel.services.memo_store import SqlMemoStore

logger = get_logger("services.memo")

MEMO_ENTITY = "memos"


class MemoService(BaseService):
    """
    Write service for memos.

    Contract:
        Flushes through the store; the caller commits.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        store: MemoStore | None = None,
    ):
        super().__init__(session, clock)
        self.store = store or SqlMemoStore(session, self.clock)

    def create_memo(self, draft: MemoDraft, actor: str | None = None) -> MemoRecord:
        """
        Create an OPEN memo with all of its items.

        Args:
            draft: Header fields and items.  ``memo_no`` defaults to
                ``MEMO-<epoch millis>`` from the injected clock.
            actor: Who created the memo, recorded in the audit entry.

        Returns:
            The stored MemoRecord.

        Raises:
            MemoValidationError: If the draft has no items.
        """
        if not draft.items:
            raise MemoValidationError("Memo must have at least one item")

        memo_no = draft.memo_no or f"MEMO-{self.clock.epoch_millis()}"

        with LogContext.bind(actor=actor, lot_code=draft.lot_code):
            record = self.store.insert_memo(draft, memo_no)
            self.store.append_audit_entry(
                MEMO_ENTITY,
                record.id,
                AuditAction.CREATE.value,
                {"memo_no": memo_no},
            )
            logger.info(
                "memo_created",
                extra={
                    "memo_id": record.id,
                    "memo_no": memo_no,
                    "memo_process": record.process,
                    "item_count": len(record.items),
                },
            )
        return record

    def close_memo(self, memo_id: str | None, actor: str | None = None) -> MemoRecord:
        """
        Close (lock) a memo: OPEN -> LOCKED.

        Postconditions:
            - The memo's status is LOCKED.
            - One ``close`` audit entry was appended.

        Args:
            memo_id: Id of the memo to close.
            actor: Who closed the memo.

        Returns:
            The updated MemoRecord.

        Raises:
            MemoValidationError: If ``memo_id`` is empty.
            MemoNotFoundError: If the memo does not exist.
            MemoAlreadyLockedError: If the memo is already LOCKED.
        """
        if not memo_id:
            raise MemoValidationError("memo_id is required")

        with LogContext.bind(actor=actor, memo_id=memo_id):
            status = self.store.get_memo_status(memo_id)
            if status.is_terminal:
                logger.warning("memo_already_locked", extra={"memo_id": memo_id})
                raise MemoAlreadyLockedError(memo_id)

            record = self.store.set_memo_status(
                memo_id, MemoStatus.LOCKED, expected=MemoStatus.OPEN
            )
            if record is None:
                # Another writer moved the memo between the read and the update.
                if self.store.get_memo_status(memo_id).is_terminal:
                    logger.warning(
                        "concurrent_memo_close_conflict",
                        extra={"memo_id": memo_id},
                    )
                    raise MemoAlreadyLockedError(memo_id)
                raise MemoNotFoundError(memo_id)

            self.store.append_audit_entry(
                MEMO_ENTITY,
                memo_id,
                AuditAction.CLOSE.value,
                {"memo_id": memo_id},
            )
            logger.info(
                "memo_locked",
                extra={"memo_id": memo_id, "memo_no": record.memo_no},
            )
        return record
