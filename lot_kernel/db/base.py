"""
Module: lot_kernel.db.base
Responsibility: Declarative base classes for all SQLAlchemy ORM models.  Provides
    the string UUID primary key convention, the type annotation map for
    consistent column types, and the TrackedBase mixin for row timestamps.
Architecture position: Kernel > DB.  This is the lowest-level import target
    within the kernel.  ALL model files import from here.  This module MUST NOT
    import from models/, services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - Primary keys are uuid4 strings (String(36)), so record ids cross the
      HTTP boundary unchanged.
    - Weight precision: type_annotation_map maps Python Decimal to
      Numeric(18, 3), i.e. carats to the milligram-carat.  NEVER use float
      for weights.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar
from uuid import uuid4

from sqlalchemy import Date, DateTime, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

WEIGHT_NUMERIC = Numeric(18, 3)


def new_id() -> str:
    return str(uuid4())


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - id is always a uuid4 string stored as String(36).
        - Decimal maps to Numeric(18, 3).
        - datetime maps to DateTime(timezone=True).
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: WEIGHT_NUMERIC,
        datetime: DateTime(timezone=True),
        date: Date(),
    }

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=new_id,
    )


class TrackedBase(Base):
    """
    Abstract base with row timestamps.

    Contract:
        ``created_at``/``updated_at`` are row metadata, not production data,
        so the immutability listeners ignore them.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
