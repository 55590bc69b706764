from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy import text as sql_text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from portfolio.config import AppConfig, load_config
from portfolio.db.base import get_engine
from portfolio.db.schema import ensure_schema
from portfolio.http.problem import (
    handle_http_exception,
    handle_request_validation_error,
    handle_unexpected_error,
)
from portfolio.http.request_id import RequestIdMiddleware
from portfolio.logging_setup import configure_logging
from portfolio.middleware.cors import apply_cors
from portfolio.routes import api_router

logger = logging.getLogger(__name__)


def _health_check() -> Callable[[], dict]:
    def check() -> dict:
        try:
            with get_engine().connect() as conn:
                conn.execute(sql_text("SELECT 1")).fetchone()
            return {"status": "ok", "db": True}
        except SQLAlchemyError as e:
            logger.error("Health DB check failed", exc_info=True)
            return {"status": "degraded", "db": False, "reason": str(e)}

    return check


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    """Build the FastAPI application.

    - Loads configuration (unless one is injected) and configures logging.
    - Ensures the document table exists on the configured database.
    - Registers problem+json handlers, request-id and CORS middleware.
    - Mounts the API routers under ``/api`` and a ``/health`` probe.
    """
    configure_logging()
    cfg = config or load_config()

    engine = get_engine(cfg.database.dsn)
    ensure_schema(engine)

    app = FastAPI(title="Portfolio Content Service", version="1.0.0")
    app.state.config = cfg

    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    apply_cors(app, origins=cfg.cors.origins)
    app.add_middleware(RequestIdMiddleware)

    check = _health_check()

    @app.get("/health", tags=["Health"])
    def health() -> dict:
        return check()

    app.include_router(api_router, prefix="/api")
    logger.info("app_created routes=%s", len(app.routes))
    return app


__all__ = ["create_app"]
