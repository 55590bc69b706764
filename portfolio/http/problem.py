"""Problem+JSON utilities and global exception handlers.

Defines the RFC 7807 media type and handler callables that render every
error response as application/problem+json.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Dict

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


def _title_for(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Error"


def problem_body(status: int, detail: str = "", title: str | None = None, **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"title": title or _title_for(status), "status": int(status)}
    if detail:
        body["detail"] = detail
    body.update(extra)
    return body


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:  # noqa: D401
    status = int(getattr(exc, "status_code", 500) or 500)
    if isinstance(exc.detail, dict):
        detail = {"title": _title_for(status), "status": status, **exc.detail}
    else:
        detail = problem_body(status, str(exc.detail or ""))
    headers = {str(k): str(v) for k, v in (getattr(exc, "headers", None) or {}).items()}
    return JSONResponse(detail, status_code=status, media_type=PROBLEM_MEDIA_TYPE, headers=headers or None)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: D401
    problem = problem_body(
        422,
        "Request validation failed",
        title="Invalid Request",
        errors=[
            {"loc": list(err.get("loc", ())), "msg": str(err.get("msg", "")), "type": str(err.get("type", ""))}
            for err in exc.errors()
        ],
    )
    return JSONResponse(problem, status_code=422, media_type=PROBLEM_MEDIA_TYPE)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error path=%s", request.url.path, exc_info=exc)
    return JSONResponse(problem_body(500, title="Internal Server Error"), status_code=500, media_type=PROBLEM_MEDIA_TYPE)


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "problem_body",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_unexpected_error",
]
