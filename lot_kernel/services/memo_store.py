"""
SqlMemoStore -- SQLAlchemy implementation of the MemoStore protocol.

Responsibility:
    Reads memo snapshots as ``MemoRecord`` DTOs, inserts new memos with
    their items, performs the conditional memo status update, and appends
    audit entries through ``AuditorService``.

Architecture position:
    Kernel > Services -- the one place memo rows are converted to and from
    DTOs.  Works inside the caller's session; flushes, never commits.

Invariants enforced:
    - ``list_memos()`` returns memos in insertion order (``seq``) with items
      in ``item_no`` order.
    - ``set_memo_status()`` is a single compare-and-set statement.

Failure modes:
    - MemoNotFoundError for unknown ids.
    - StoreError wrapping any SQLAlchemyError; ``str(error)`` is the driver
      message unchanged.
"""

from typing import Any, Mapping

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lot_kernel.domain.clock import Clock
from lot_kernel.domain.dtos import MemoDraft, MemoRecord, MemoStatus
from lot_kernel.exceptions import MemoNotFoundError, StoreError
from lot_kernel.logging_config import get_logger
from lot_kernel.models.memo import Memo, MemoItem
from lot_kernel.services.auditor_service import AuditorService
from lot_kernel.services.status_transition import compare_and_set_status

logger = get_logger("services.memo_store")


class SqlMemoStore:
    """MemoStore backed by the ``memos``/``memo_items`` tables."""

    def __init__(self, session: Session, clock: Clock | None = None):
        self._session = session
        self._auditor = AuditorService(session, clock)

    def _store_error(self, operation: str, exc: SQLAlchemyError) -> StoreError:
        logger.error(
            "memo_store_failure",
            extra={"operation": operation},
            exc_info=exc,
        )
        return StoreError(str(exc), operation=operation)

    def list_memos(self) -> tuple[MemoRecord, ...]:
        try:
            memos = self._session.execute(
                select(Memo).order_by(Memo.seq)
            ).scalars().all()
        except SQLAlchemyError as exc:
            raise self._store_error("list_memos", exc) from exc
        return tuple(MemoRecord.from_model(memo) for memo in memos)

    def _load(self, memo_id: str, *, refresh: bool = False) -> Memo:
        try:
            memo = self._session.get(Memo, memo_id, populate_existing=refresh)
        except SQLAlchemyError as exc:
            raise self._store_error("get_memo", exc) from exc
        if memo is None:
            raise MemoNotFoundError(memo_id)
        return memo

    def get_memo(self, memo_id: str) -> MemoRecord:
        return MemoRecord.from_model(self._load(memo_id))

    def get_memo_status(self, memo_id: str) -> MemoStatus:
        try:
            status = self._session.execute(
                select(Memo.status).where(Memo.id == memo_id)
            ).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise self._store_error("get_memo_status", exc) from exc
        if status is None:
            raise MemoNotFoundError(memo_id)
        return MemoStatus(status)

    def set_memo_status(
        self,
        memo_id: str,
        status: MemoStatus,
        *,
        expected: MemoStatus,
    ) -> MemoRecord | None:
        try:
            updated = compare_and_set_status(
                self._session,
                Memo,
                [memo_id],
                expected=expected.value,
                target=status.value,
            )
        except SQLAlchemyError as exc:
            raise self._store_error("set_memo_status", exc) from exc
        if updated == 0:
            return None
        return MemoRecord.from_model(self._load(memo_id, refresh=True))

    def insert_memo(self, draft: MemoDraft, memo_no: str) -> MemoRecord:
        try:
            current = self._session.execute(select(func.max(Memo.seq))).scalar()
            memo = Memo(
                seq=(current or 0) + 1,
                memo_no=memo_no,
                process=draft.process,
                lot_code=draft.lot_code,
                description=draft.description,
                from_party=draft.from_party,
                to_party=draft.to_party,
                date_out_header=draft.date_out_header,
                date_in_header=draft.date_in_header,
                remark_header=draft.remark_header,
                status=MemoStatus.OPEN.value,
            )
            for item in draft.items:
                memo.items.append(
                    MemoItem(
                        item_no=item.item_no,
                        out_weight_1=item.out_weight_1,
                        out_weight_2=item.out_weight_2,
                        in_weight_1=item.in_weight_1,
                        in_weight_2=item.in_weight_2,
                        out_pcs=item.out_pcs,
                        in_pcs=item.in_pcs,
                        rej_pcs=item.rej_pcs,
                        rej_cts=item.rej_cts,
                        wastage_in=item.wastage_in,
                        percent=item.percent,
                        out_date=item.out_date,
                        in_date=item.in_date,
                        out_grade=item.out_grade,
                        out_size=item.out_size,
                        in_grade=item.in_grade,
                        in_size=item.in_size,
                        price=item.price,
                        amount=item.amount,
                        remark_line=item.remark_line,
                    )
                )
            self._session.add(memo)
            self._session.flush()
        except SQLAlchemyError as exc:
            raise self._store_error("insert_memo", exc) from exc
        return MemoRecord.from_model(memo)

    def append_audit_entry(
        self,
        entity_type: str,
        entity_id: str | None,
        action: str,
        summary: Mapping[str, Any],
    ) -> None:
        try:
            self._auditor.record(entity_type, entity_id, action, summary)
        except SQLAlchemyError as exc:
            raise self._store_error("append_audit_entry", exc) from exc
