"""Cash ledger routes -- create and post (OPEN -> POSTED)."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from lot_api.deps import get_clock, get_db, require_passcode
from lot_api.schemas import (
    CreateLedgerEntryRequest,
    DataEnvelope,
    LedgerEntryOut,
    PostLedgerEntryRequest,
)
from lot_kernel.domain.clock import Clock
from lot_kernel.domain.dtos import LedgerEntryDraft
from lot_kernel.services.ledger_service import LedgerService

router = APIRouter(tags=["ledger"], dependencies=[Depends(require_passcode)])


@router.post("/ledger/create", response_model=DataEnvelope[LedgerEntryOut])
def create_entry(
    body: CreateLedgerEntryRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    draft = LedgerEntryDraft(**body.model_dump())
    record = LedgerService(db, clock).create_entry(draft)
    return {"data": LedgerEntryOut.from_record(record)}


@router.post("/ledger/post", response_model=DataEnvelope[LedgerEntryOut])
def post_entry(
    body: PostLedgerEntryRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    record = LedgerService(db, clock).post_entry(body.entry_id)
    return {"data": LedgerEntryOut.from_record(record)}
