"""Signed bearer tokens for the admin API.

Token shape: ``<base64url(claims json)>.<base64url(hmac-sha256)>`` where the
claims carry ``sub``, ``role`` and ``exp`` (epoch seconds). Verification is
constant-time on the signature and rejects expired tokens.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import time
from typing import Any, Callable, Dict

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


class TokenError(ValueError):
    """Raised for malformed, forged or expired tokens."""


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(text: str) -> bytes:
    padding = "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(text + padding)


def _sign(secret: str, body: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), body.encode("utf-8"), hashlib.sha256).digest()
    return _b64encode(digest)


def issue_token(
    subject: str,
    secret: str,
    *,
    role: str = ADMIN_ROLE,
    ttl_seconds: int = 7 * 24 * 3600,
    clock: Callable[[], float] = time.time,
) -> str:
    claims = {"sub": subject, "role": role, "exp": int(clock()) + int(ttl_seconds)}
    body = _b64encode(json.dumps(claims, sort_keys=True, separators=(",", ":")).encode("utf-8"))
    return f"{body}.{_sign(secret, body)}"


def verify_token(token: str, secret: str, *, clock: Callable[[], float] = time.time) -> Dict[str, Any]:
    """Return the claims of a valid token or raise :class:`TokenError`."""
    try:
        body, signature = token.split(".", 1)
    except ValueError as e:
        raise TokenError("malformed token") from e
    if not hmac.compare_digest(signature.encode("utf-8"), _sign(secret, body).encode("utf-8")):
        raise TokenError("bad signature")
    try:
        claims = json.loads(_b64decode(body))
    except (ValueError, UnicodeDecodeError) as e:
        raise TokenError("malformed claims") from e
    if not isinstance(claims, dict) or "sub" not in claims:
        raise TokenError("malformed claims")
    try:
        expires = int(claims.get("exp", 0))
    except (TypeError, ValueError) as e:
        raise TokenError("malformed claims") from e
    if expires <= int(clock()):
        logger.debug("token.expired sub=%s exp=%s", claims.get("sub"), expires)
        raise TokenError("token expired")
    return claims


def credentials_match(username: str, password: str, expected_username: str, expected_password: str) -> bool:
    user_ok = hmac.compare_digest(username.encode("utf-8"), expected_username.encode("utf-8"))
    pass_ok = hmac.compare_digest(password.encode("utf-8"), expected_password.encode("utf-8"))
    return user_ok and pass_ok


__all__ = [
    "ADMIN_ROLE",
    "TokenError",
    "issue_token",
    "verify_token",
    "credentials_match",
]
