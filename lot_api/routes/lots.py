"""Lot and production board routes.  Everything here is derived on read."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from lot_api.deps import get_config, get_db, require_passcode
from lot_api.schemas import (
    DataEnvelope,
    LotDetailOut,
    LotSnapshotOut,
    StageSummaryOut,
    TimelineEntryOut,
)
from lot_config import AppConfig
from lot_kernel.selectors.production_selector import ProductionSelector

router = APIRouter(tags=["lots"], dependencies=[Depends(require_passcode)])


def _selector(db: Session, config: AppConfig) -> ProductionSelector:
    return ProductionSelector(
        db,
        stages=config.production.stages,
        unknown_stage=config.production.unknown_stage,
        percent_tolerance=config.production.percent_tolerance,
    )


@router.get("/lots", response_model=DataEnvelope[list[LotSnapshotOut]])
def list_lots(
    search: str | None = None,
    stage: str | None = None,
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_config),
):
    snapshots = _selector(db, config).lot_snapshots(search=search, stage=stage)
    return {
        "data": [
            LotSnapshotOut.from_snapshot(snapshot, config.production.not_available)
            for snapshot in snapshots
        ]
    }


@router.get("/lots/{lot_code}", response_model=DataEnvelope[LotDetailOut])
def get_lot(
    lot_code: str,
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_config),
):
    detail = _selector(db, config).lot_detail(lot_code)
    return {
        "data": LotDetailOut(
            snapshot=LotSnapshotOut.from_snapshot(
                detail.snapshot, config.production.not_available
            ),
            timeline=[TimelineEntryOut.from_entry(entry) for entry in detail.timeline],
        )
    }


@router.get("/production/stages", response_model=DataEnvelope[list[StageSummaryOut]])
def stage_board(
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_config),
):
    return {
        "data": [
            StageSummaryOut.from_summary(summary)
            for summary in _selector(db, config).stage_board()
        ]
    }
