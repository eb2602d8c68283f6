"""Lot tracker API -- FastAPI application factory.

Invariants:
    - Routes registered explicitly (no auto-discovery).
    - Kernel errors map to {"error": message} responses in one place
      (error_handlers.py).
    - Engine and tables are initialised when the app is built, from the
      configuration returned by lot_config.get_active_config().
"""

from uuid import uuid4

from fastapi import FastAPI, Request

import lot_kernel
from lot_api.error_handlers import register_error_handlers
from lot_api.routes import health, ledger, lots, memos, sell
from lot_config import AppConfig, get_active_config
from lot_kernel.db.engine import create_tables, init_engine_from_url
from lot_kernel.domain.clock import Clock, SystemClock
from lot_kernel.logging_config import LogContext, configure_logging, get_logger

logger = get_logger("api.app")

REQUEST_ID_HEADER = "X-Request-ID"


def create_app(config: AppConfig | None = None, clock: Clock | None = None) -> FastAPI:
    """
    Build the API application.

    Args:
        config: Configuration; defaults to ``get_active_config()``.
        clock: Clock for document numbers and audit timestamps.

    Returns:
        Configured FastAPI app.
    """
    config = config or get_active_config()

    configure_logging(level=config.logging.level)
    init_engine_from_url(config.database.url, echo=config.database.echo)
    create_tables()

    app = FastAPI(title="Lot Tracker API", version=lot_kernel.__version__)
    app.state.config = config
    app.state.clock = clock or SystemClock()

    @app.middleware("http")
    async def bind_request_id(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        with LogContext.bind(request_id=request_id):
            response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    app.include_router(health.router)
    app.include_router(memos.router)
    app.include_router(lots.router)
    app.include_router(ledger.router)
    app.include_router(sell.router)

    register_error_handlers(app)

    logger.info(
        "api_started",
        extra={"config_checksum": config.checksum},
    )
    return app
