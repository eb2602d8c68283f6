"""
SellService -- marks inventory records as sold.

Responsibility:
    Moves a set of inventory records AVAILABLE -> SOLD under one sell id,
    in a single conditional UPDATE, and records a ``create`` audit entry on
    ``sell_records``.

Architecture position:
    Kernel > Services -- imperative shell.

Invariants enforced:
    - All or nothing: if any requested record is missing or not AVAILABLE,
      the rows this sale already marked are released again before the
      error is raised, so nothing is left half sold.
    - No pricing.  Only carats are totalled.

Failure modes:
    - ValidationError: empty id list.
    - InventoryRecordNotFoundError: some ids do not resolve.
    - InventoryAlreadySoldError: some records are already SOLD.
    - StoreError: underlying storage failure, message verbatim.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lot_kernel.domain.clock import Clock
from lot_kernel.domain.dtos import InventoryStatus
from lot_kernel.domain.values import ZERO
from lot_kernel.exceptions import (
    InventoryAlreadySoldError,
    InventoryRecordNotFoundError,
    ValidationError,
)
from lot_kernel.logging_config import LogContext, get_logger
from lot_kernel.models.audit_entry import AuditAction
from lot_kernel.models.inventory_record import InventoryRecord
from lot_kernel.services.auditor_service import AuditorService
from lot_kernel.services.base import BaseService
from lot_kernel.services.status_transition import (
    classify_unmatched,
    compare_and_set_status,
)

logger = get_logger("services.sell")

SELL_ENTITY = "sell_records"


@dataclass(frozen=True)
class SellResult:
    sell_id: str
    inventory_ids: tuple[str, ...]
    total_cts: Decimal


class SellService(BaseService):
    """
    Write service for sales of finished stock.

    Contract:
        ``sell()`` is all or nothing; ``add_record()`` registers stock.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session, clock)
        self._auditor = AuditorService(session, self.clock)

    def add_record(
        self,
        lot_code: str | None,
        cts: Decimal | None,
        record_date: date | None = None,
    ) -> str:
        """Add an AVAILABLE inventory record and return its id."""
        record = InventoryRecord(
            lot_code=lot_code,
            cts=cts,
            record_date=record_date,
            status=InventoryStatus.AVAILABLE.value,
        )
        self.session.add(record)
        self.session.flush()
        return record.id

    def _release(self, ids: list[str], sell_id: str) -> None:
        """Undo the rows this sale marked SOLD before reporting a failure."""
        self.session.execute(
            update(InventoryRecord)
            .where(
                InventoryRecord.id.in_(ids),
                InventoryRecord.sell_id == sell_id,
                InventoryRecord.status == InventoryStatus.SOLD.value,
            )
            .values(status=InventoryStatus.AVAILABLE.value, sell_id=None)
            .execution_options(synchronize_session=False)
        )

    def sell(
        self,
        inventory_ids: Sequence[str],
        sell_id: str | None = None,
        actor: str | None = None,
    ) -> SellResult:
        """
        Sell inventory records: AVAILABLE -> SOLD, all in one statement.

        Args:
            inventory_ids: Records to sell.  Duplicates are ignored.
            sell_id: Sell document id; defaults to ``SELL-<epoch millis>``.
            actor: Who made the sale.

        Returns:
            SellResult with the sell id and the summed carats.

        Raises:
            ValidationError: If no ids were given.
            InventoryRecordNotFoundError: If any id does not resolve.
            InventoryAlreadySoldError: If any record is already SOLD.
            StoreError: If the database rejects a statement.
        """
        ids = list(dict.fromkeys(inventory_ids))
        if not ids:
            raise ValidationError("No inventory selected")

        sell_id = sell_id or f"SELL-{self.clock.epoch_millis()}"

        with LogContext.bind(actor=actor):
            try:
                total_cts = self._mark_sold(ids, sell_id, actor)
            except SQLAlchemyError as exc:
                raise self._store_error("sell", exc) from exc
            logger.info(
                "inventory_sold",
                extra={"sell_id": sell_id, "count": len(ids), "total_cts": total_cts},
            )
        return SellResult(sell_id=sell_id, inventory_ids=tuple(ids), total_cts=total_cts)

    def _mark_sold(self, ids: list[str], sell_id: str, actor: str | None) -> Decimal:
        updated = compare_and_set_status(
            self.session,
            InventoryRecord,
            ids,
            expected=InventoryStatus.AVAILABLE.value,
            target=InventoryStatus.SOLD.value,
            extra_values={"sell_id": sell_id},
        )
        if updated != len(ids):
            if updated:
                self._release(ids, sell_id)
            unmatched = classify_unmatched(
                self.session,
                InventoryRecord,
                ids,
                expected=InventoryStatus.AVAILABLE.value,
            )
            logger.warning(
                "sell_rejected",
                extra={
                    "sell_id": sell_id,
                    "missing": list(unmatched.missing),
                    "conflicting": list(unmatched.conflicting),
                },
            )
            if unmatched.missing:
                raise InventoryRecordNotFoundError(", ".join(unmatched.missing))
            raise InventoryAlreadySoldError(list(unmatched.conflicting))

        cts_values = self.session.execute(
            select(InventoryRecord.cts).where(InventoryRecord.id.in_(ids))
        ).scalars().all()
        total_cts = sum((cts for cts in cts_values if cts is not None), ZERO)

        self._auditor.record(
            SELL_ENTITY,
            sell_id,
            AuditAction.CREATE,
            {"inventory_ids": ids, "total_cts": str(total_cts)},
            actor=actor,
        )
        return total_cts
