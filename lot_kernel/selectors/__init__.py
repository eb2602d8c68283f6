"""Selectors for the lot kernel (read side)."""

from lot_kernel.selectors.production_selector import (
    LotDetail,
    MemoSummary,
    ProductionSelector,
)

__all__ = [
    "LotDetail",
    "MemoSummary",
    "ProductionSelector",
]
