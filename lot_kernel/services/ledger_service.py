"""
LedgerService -- cash ledger entries and the post transition.

Responsibility:
    Creates cash ledger entries (OPEN) and posts them (OPEN -> POSTED)
    with the same compare-and-set discipline as the memo lock.

Architecture position:
    Kernel > Services -- imperative shell.

Invariants enforced:
    - POSTED is terminal.  Posting a POSTED entry raises
      EntryAlreadyPostedError and writes nothing.
    - Amounts are carried, never computed.

Failure modes:
    - LedgerEntryNotFoundError: unknown entry id.
    - EntryAlreadyPostedError: entry already POSTED.
    - StoreError: underlying storage failure, message verbatim.
"""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lot_kernel.domain.clock import Clock
from lot_kernel.domain.dtos import LedgerEntryDraft, LedgerEntryRecord, LedgerEntryStatus
from lot_kernel.exceptions import EntryAlreadyPostedError, LedgerEntryNotFoundError
from lot_kernel.logging_config import LogContext, get_logger
from lot_kernel.models.audit_entry import AuditAction
from lot_kernel.models.ledger_entry import LedgerEntry
from lot_kernel.services.auditor_service import AuditorService
from lot_kernel.services.base import BaseService
from lot_kernel.services.status_transition import (
    classify_unmatched,
    compare_and_set_status,
)

logger = get_logger("services.ledger")

LEDGER_ENTITY = "ledger_entries"


class LedgerService(BaseService):
    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session, clock)
        self._auditor = AuditorService(session, self.clock)

    def create_entry(
        self, draft: LedgerEntryDraft, actor: str | None = None
    ) -> LedgerEntryRecord:
        """Create an OPEN ledger entry and record a ``create`` audit entry."""
        entry = LedgerEntry(
            entry_date=draft.entry_date,
            party=draft.party,
            lot_code=draft.lot_code,
            entry_type=draft.entry_type,
            amount=draft.amount,
            status=LedgerEntryStatus.OPEN.value,
        )
        try:
            self.session.add(entry)
            self.session.flush()

            self._auditor.record(
                LEDGER_ENTITY,
                entry.id,
                AuditAction.CREATE,
                {"entry_type": draft.entry_type, "lot_code": draft.lot_code},
                actor=actor,
            )
        except SQLAlchemyError as exc:
            raise self._store_error("create_entry", exc) from exc
        logger.info(
            "ledger_entry_created",
            extra={"entry_id": entry.id, "entry_type": draft.entry_type},
        )
        return LedgerEntryRecord.from_model(entry)

    def post_entry(self, entry_id: str, actor: str | None = None) -> LedgerEntryRecord:
        """
        Post a ledger entry: OPEN -> POSTED.

        Raises:
            LedgerEntryNotFoundError: If the entry does not exist.
            EntryAlreadyPostedError: If the entry is already POSTED.
            StoreError: If the database rejects a statement.
        """
        with LogContext.bind(actor=actor):
            try:
                entry = self._post(entry_id, actor)
            except SQLAlchemyError as exc:
                raise self._store_error("post_entry", exc) from exc
            logger.info("ledger_entry_posted", extra={"entry_id": entry_id})
        return LedgerEntryRecord.from_model(entry)

    def _post(self, entry_id: str, actor: str | None) -> LedgerEntry:
        updated = compare_and_set_status(
            self.session,
            LedgerEntry,
            [entry_id],
            expected=LedgerEntryStatus.OPEN.value,
            target=LedgerEntryStatus.POSTED.value,
        )
        if updated == 0:
            unmatched = classify_unmatched(
                self.session,
                LedgerEntry,
                [entry_id],
                expected=LedgerEntryStatus.OPEN.value,
            )
            if unmatched.missing:
                raise LedgerEntryNotFoundError(entry_id)
            logger.warning("ledger_entry_already_posted", extra={"entry_id": entry_id})
            raise EntryAlreadyPostedError(entry_id)

        entry = self.session.get(LedgerEntry, entry_id, populate_existing=True)
        self._auditor.record(
            LEDGER_ENTITY,
            entry_id,
            AuditAction.POST,
            {"entry_type": entry.entry_type},
            actor=actor,
        )
        return entry
