"""APIRouter registration for the portfolio content service."""

from __future__ import annotations

from fastapi import APIRouter

from portfolio.routes.auth import router as auth_router
from portfolio.routes.collections import public_router as public_collections_router
from portfolio.routes.collections import router as collections_router

api_router = APIRouter()
# Fixed-prefix routers first: the generic /{collection}/{item_id} routes would shadow them
api_router.include_router(auth_router, tags=["Auth"])
api_router.include_router(public_collections_router, tags=["Public"])
api_router.include_router(collections_router, tags=["Collections"])

__all__ = ["api_router"]
