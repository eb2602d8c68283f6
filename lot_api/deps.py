"""Request dependencies: configuration, passcode guard, database session.

Invariants:
    - The passcode guard runs before the request body is looked at, so a
      bad passcode is always reported as 401.
    - No passcode configured means every guarded request is rejected.
    - One session per request; committed when the route returns, rolled
      back when it raises.  Services inside only flush.
"""

import hmac
from typing import Iterator

from fastapi import Request
from sqlalchemy.orm import Session

from lot_config import AppConfig
from lot_kernel.db.engine import get_session
from lot_kernel.domain.clock import Clock
from lot_kernel.exceptions import InvalidPasscodeError


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


def require_passcode(request: Request) -> None:
    """Reject the request unless the passcode header matches the configured one."""
    auth = request.app.state.config.auth
    supplied = request.headers.get(auth.passcode_header)
    if not auth.passcode or supplied is None:
        raise InvalidPasscodeError()
    if not hmac.compare_digest(supplied.encode(), auth.passcode.encode()):
        raise InvalidPasscodeError()


def get_db() -> Iterator[Session]:
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
