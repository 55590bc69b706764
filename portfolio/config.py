"""Configuration utilities for the portfolio content service.

This module loads application configuration with the following rules:
- Primary source: `portfolio_config.json` at the project root.
- Overrides: environment variables, then optional text files under `config/`.
- Validation: Pydantic models enforce required fields and value constraints.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_PORTFOLIO_CONFIG = Path("portfolio_config.json")
DEFAULT_API_BASE_URL = "http://127.0.0.1:8000/api"
logger = logging.getLogger(__name__)


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


def normalize_api_base_url(url: str) -> str:
    """Return ``url`` without a trailing slash and ending in ``/api``."""
    trimmed = url.strip().rstrip("/")
    return trimmed if trimmed.endswith("/api") else f"{trimmed}/api"


class DatabaseConfig(BaseModel):
    dsn: str

    @field_validator("dsn")
    @classmethod
    def dsn_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("database.dsn must be a non-empty string")
        return v


class AuthConfig(BaseModel):
    secret: str
    admin_username: str
    admin_password: str
    token_ttl_seconds: int = Field(default=7 * 24 * 3600, gt=0)

    @field_validator("secret", "admin_username", "admin_password")
    @classmethod
    def must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("auth credentials must be non-empty strings")
        return v


class ApiConfig(BaseModel):
    base_url: str = DEFAULT_API_BASE_URL

    @field_validator("base_url")
    @classmethod
    def ensure_api_suffix(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("api.base_url must be an http(s) URL")
        return normalize_api_base_url(v)


class CacheConfig(BaseModel):
    ttl_seconds: float = Field(default=300.0, gt=0)


class CorsConfig(BaseModel):
    origins: List[str] = Field(default_factory=lambda: ["*"])


class AppConfig(BaseModel):
    database: DatabaseConfig
    auth: AuthConfig
    api: ApiConfig
    cache: CacheConfig
    cors: CorsConfig


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:  # pragma: no cover - defensive
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) portfolio_config.json at project root (primary base)
    4) Safe defaults for development
    """

    base = _read_json_file(ROOT_PORTFOLIO_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        return str(cur) if cur is not None else default

    # Database
    dsn = (
        _env("TEST_DATABASE_URL")
        or _env("DATABASE_URL")
        or _read_config_file("database.url")
        or _base("database.dsn")
        or "sqlite+pysqlite:///:memory:"
    )

    # Auth
    secret = _env("AUTH_SECRET") or _read_config_file("auth.secret") or _base("auth.secret", "dev-secret-change-me")
    admin_username = _env("ADMIN_USERNAME") or _read_config_file("auth.admin_username") or _base("auth.admin_username", "admin")
    admin_password = _env("ADMIN_PASSWORD") or _read_config_file("auth.admin_password") or _base("auth.admin_password", "admin")
    ttl_text = _env("AUTH_TOKEN_TTL_SECONDS") or _read_config_file("auth.token_ttl_seconds") or _base("auth.token_ttl_seconds", "604800")

    # API client / cache / CORS
    api_base_url = _env("PORTFOLIO_API_BASE_URL") or _read_config_file("api.base_url") or _base("api.base_url", DEFAULT_API_BASE_URL)
    cache_ttl_text = _env("CACHE_TTL_SECONDS") or _read_config_file("cache.ttl_seconds") or _base("cache.ttl_seconds", "300")
    origins_text = _env("CORS_ORIGINS") or _read_config_file("cors.origins") or _base("cors.origins", "*")

    try:
        cfg = AppConfig(
            database=DatabaseConfig(dsn=dsn),
            auth=AuthConfig(
                secret=str(secret),
                admin_username=str(admin_username),
                admin_password=str(admin_password),
                token_ttl_seconds=str(ttl_text).strip(),
            ),
            api=ApiConfig(base_url=str(api_base_url)),
            cache=CacheConfig(ttl_seconds=str(cache_ttl_text).strip()),
            cors=CorsConfig(origins=[o.strip() for o in str(origins_text).split(",") if o.strip()] or ["*"]),
        )
        return cfg
    except PydanticValidationError as e:
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "AuthConfig",
    "ApiConfig",
    "CacheConfig",
    "CorsConfig",
    "load_config",
    "normalize_api_base_url",
]
