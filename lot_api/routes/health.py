"""Liveness probe.  Not guarded by the passcode."""

from fastapi import APIRouter, status

import lot_kernel

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_check():
    return {"status": "healthy", "version": lot_kernel.__version__}
