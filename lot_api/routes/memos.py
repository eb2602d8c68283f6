"""Memo routes -- create, close (lock) and list.

Invariants:
    - POST /memo/close answers 200 {"data": memo}, 409 when already locked,
      400 for a missing or unknown id, 401 for a bad passcode.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from lot_api.deps import get_clock, get_config, get_db, require_passcode
from lot_api.schemas import (
    CloseMemoRequest,
    CreateMemoRequest,
    DataEnvelope,
    MemoOut,
)
from lot_config import AppConfig
from lot_kernel.domain.clock import Clock
from lot_kernel.domain.dtos import MemoDraft
from lot_kernel.selectors.production_selector import ProductionSelector
from lot_kernel.services.memo_service import MemoService

router = APIRouter(tags=["memos"], dependencies=[Depends(require_passcode)])


@router.post("/memo/create", response_model=DataEnvelope[MemoOut])
def create_memo(
    body: CreateMemoRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    draft = MemoDraft(
        process=body.process,
        lot_code=body.lot_code,
        memo_no=body.memo_no,
        description=body.description,
        from_party=body.from_party,
        to_party=body.to_party,
        date_out_header=body.date_out_header,
        date_in_header=body.date_in_header,
        remark_header=body.remark_header,
        items=tuple(
            item.to_record(default_item_no=index)
            for index, item in enumerate(body.items, start=1)
        ),
    )
    record = MemoService(db, clock).create_memo(draft)
    return {"data": MemoOut.from_record(record)}


@router.post("/memo/close", response_model=DataEnvelope[MemoOut])
def close_memo(
    body: CloseMemoRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    record = MemoService(db, clock).close_memo(body.memo_id)
    return {"data": MemoOut.from_record(record)}


@router.get("/memos", response_model=DataEnvelope[list[MemoOut]])
def list_memos(
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_config),
):
    selector = ProductionSelector(
        db,
        stages=config.production.stages,
        unknown_stage=config.production.unknown_stage,
        percent_tolerance=config.production.percent_tolerance,
    )
    return {
        "data": [
            MemoOut.from_record(summary.memo, summary.totals)
            for summary in selector.memo_summaries()
        ]
    }
