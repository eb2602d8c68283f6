"""Sell route -- inventory records AVAILABLE -> SOLD under one sell id."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from lot_api.deps import get_clock, get_db, require_passcode
from lot_api.schemas import DataEnvelope, SellOut, SellRequest
from lot_kernel.domain.clock import Clock
from lot_kernel.services.sell_service import SellService

router = APIRouter(tags=["sell"], dependencies=[Depends(require_passcode)])


@router.post("/sell/create", response_model=DataEnvelope[SellOut])
def create_sell(
    body: SellRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    result = SellService(db, clock).sell(body.inventory_ids, sell_id=body.sell_id)
    return {
        "data": SellOut(
            sell_id=result.sell_id,
            inventory_ids=list(result.inventory_ids),
            total_cts=result.total_cts,
        )
    }
