"""Bearer-token guard for write and admin routes.

Status mapping:
- no ``Authorization: Bearer`` token -> 401 "Access token required"
- invalid or expired token -> 403 "Invalid or expired token"
- valid token without the admin role -> 403 "Admin access required"
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import Header, HTTPException, Request

from portfolio.logic.auth_tokens import ADMIN_ROLE, TokenError, verify_token

logger = logging.getLogger(__name__)


def _problem(status: int, title: str, detail: str) -> HTTPException:
    headers = {"WWW-Authenticate": "Bearer"} if status == 401 else None
    return HTTPException(
        status_code=status,
        detail={"title": title, "status": status, "detail": detail},
        headers=headers,
    )


def _bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_admin(request: Request, authorization: Optional[str] = Header(default=None)) -> Dict[str, Any]:
    """FastAPI dependency returning the verified token claims."""
    token = _bearer(authorization)
    if token is None:
        raise _problem(401, "Unauthorized", "Access token required")
    secret = request.app.state.config.auth.secret
    try:
        claims = verify_token(token, secret)
    except TokenError as e:
        logger.info("auth.rejected path=%s reason=%s", request.url.path, e)
        raise _problem(403, "Forbidden", "Invalid or expired token") from e
    if claims.get("role") != ADMIN_ROLE:
        raise _problem(403, "Forbidden", "Admin access required")
    return claims


__all__ = ["require_admin"]
