"""FastAPI application package for the portfolio content service.

This package exposes a small FastAPI application factory serving the
order-carrying portfolio collections (timeline, tech skills, interests and
tech stack categories). It wires only cross-cutting middleware (request-id
and CORS) and mounts the API routers. Business logic lives in
`portfolio/logic/` and route handlers in `portfolio/routes/`.
"""

from __future__ import annotations

from portfolio.main import create_app

__all__ = ["create_app"]
