"""
BaseService -- abstract base for all kernel write services.

Responsibility:
    Provides the common constructor and session-handling contract for
    every write service.  Concrete services receive a SQLAlchemy ``Session``
    and use ``session.flush()`` -- never ``session.commit()``.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.

Invariants enforced:
    - Transaction boundaries: services flush within the caller's
      transaction and never commit or roll back themselves.  The caller
      (``session_scope()``, the API session dependency, or a test) owns
      commit/rollback, so a status change and its audit entry land together.
    - Driver failures (SQLAlchemyError) reach callers as StoreError with
      the driver message unchanged.
"""

from abc import ABC

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lot_kernel.domain.clock import Clock, SystemClock
from lot_kernel.exceptions import StoreError
from lot_kernel.logging_config import get_logger

logger = get_logger("services")


class BaseService(ABC):
    """
    Abstract base class for kernel write services.

    Guarantees:
        - The service never calls ``session.commit()`` or
          ``session.rollback()``.

    Non-goals:
        - Read-only queries belong in ``lot_kernel/selectors/``.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self.session = session
        self.clock = clock or SystemClock()

    def _store_error(self, operation: str, exc: SQLAlchemyError) -> StoreError:
        """Log a driver failure and wrap it; the message is kept verbatim."""
        logger.error(
            "store_failure",
            extra={"service": type(self).__name__, "operation": operation},
            exc_info=exc,
        )
        return StoreError(str(exc), operation=operation)
