"""Authentication endpoints.

- POST /auth/login exchanges the configured admin credentials for a token
- GET /auth/verify echoes the claims of a valid token
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request

from portfolio.guards.auth import require_admin
from portfolio.logic.auth_tokens import ADMIN_ROLE, credentials_match, issue_token
from portfolio.models.collections import LoginRequest

router = APIRouter(prefix="/auth")
logger = logging.getLogger(__name__)


@router.post("/login", summary="Exchange admin credentials for a bearer token")
def login(body: LoginRequest, request: Request) -> Dict[str, Any]:
    auth_cfg = request.app.state.config.auth
    if not credentials_match(body.username, body.password, auth_cfg.admin_username, auth_cfg.admin_password):
        logger.info("auth.login.rejected username=%s", body.username)
        raise HTTPException(
            status_code=401,
            detail={"title": "Unauthorized", "status": 401, "detail": "Invalid credentials"},
        )
    token = issue_token(body.username, auth_cfg.secret, role=ADMIN_ROLE, ttl_seconds=auth_cfg.token_ttl_seconds)
    return {"token": token, "user": {"username": body.username, "role": ADMIN_ROLE}}


@router.get("/verify", summary="Validate a bearer token")
def verify(claims: dict = Depends(require_admin)) -> Dict[str, Any]:
    return {"valid": True, "user": {"username": claims.get("sub"), "role": claims.get("role")}}


__all__ = ["router"]
