"""Ordered collection endpoints.

Implements, for every collection in ``COLLECTION_MODELS``:
- GET /enhanced-dashboard/{collection} (public, sorted by order)
- GET /{collection}, GET /{collection}/{item_id} (admin)
- POST /{collection}, PUT /{collection}/{item_id}, DELETE /{collection}/{item_id} (admin)
- POST /{collection}/repair (admin) renumbers the stored collection to 1..N

The store keeps whatever ``order`` it is given; contiguity is maintained by
the reordering helpers driven by the admin flows or the repair endpoint.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Type

from fastapi import APIRouter, Body, Depends, HTTPException, Response
from pydantic import ValidationError

from portfolio.guards.auth import require_admin
from portfolio.logic import repository_items
from portfolio.logic.collection_store import RepositoryCollectionStore
from portfolio.logic.order_sequences import reorder_all_contiguously
from portfolio.models.collections import RESERVED_FIELDS, OrderedPayload, RepairResult, model_for

router = APIRouter()
public_router = APIRouter()
logger = logging.getLogger(__name__)


def _not_found(detail: str) -> HTTPException:
    return HTTPException(status_code=404, detail={"title": "Not Found", "status": 404, "detail": detail})


def resolve_collection(collection: str) -> str:
    if model_for(collection) is None:
        raise _not_found(f"unknown collection: {collection}")
    return collection


def _validated(model: Type[OrderedPayload], fields: Dict[str, Any]) -> Dict[str, Any]:
    clean = {k: v for k, v in fields.items() if k not in RESERVED_FIELDS}
    try:
        return model.model_validate(clean).model_dump()
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail={
                "title": "Invalid Request",
                "status": 422,
                "detail": "payload validation failed",
                "errors": [
                    {"loc": list(err.get("loc", ())), "msg": str(err.get("msg", ""))}
                    for err in e.errors()
                ],
            },
        ) from e


@public_router.get("/enhanced-dashboard/{collection}", summary="Public ordered listing")
def public_list(collection: str = Depends(resolve_collection)) -> List[Dict[str, Any]]:
    return repository_items.list_items(collection)


@router.get("/{collection}", summary="List a collection")
def list_collection(
    collection: str = Depends(resolve_collection),
    _claims: dict = Depends(require_admin),
) -> List[Dict[str, Any]]:
    return repository_items.list_items(collection)


@router.get("/{collection}/{item_id}", summary="Get one item")
def get_collection_item(
    item_id: str,
    collection: str = Depends(resolve_collection),
    _claims: dict = Depends(require_admin),
) -> Dict[str, Any]:
    doc = repository_items.get_item(collection, item_id)
    if doc is None:
        raise _not_found(f"{collection} item not found")
    return doc


@router.post("/{collection}", status_code=201, summary="Create an item at its requested order")
def create_collection_item(
    payload: Dict[str, Any] = Body(...),
    collection: str = Depends(resolve_collection),
    _claims: dict = Depends(require_admin),
) -> Dict[str, Any]:
    fields = _validated(model_for(collection), payload)  # type: ignore[arg-type]
    return repository_items.create_item(collection, fields)


@router.put("/{collection}/{item_id}", summary="Replace an item (full or partial)")
def replace_collection_item(
    item_id: str,
    payload: Dict[str, Any] = Body(...),
    collection: str = Depends(resolve_collection),
    _claims: dict = Depends(require_admin),
) -> Dict[str, Any]:
    existing = repository_items.get_item(collection, item_id)
    if existing is None:
        raise _not_found(f"{collection} item not found")
    fields = _validated(model_for(collection), {**existing, **payload})  # type: ignore[arg-type]
    stored = repository_items.replace_item(collection, item_id, fields)
    if stored is None:
        raise _not_found(f"{collection} item not found")
    return stored


@router.delete("/{collection}/{item_id}", status_code=204, summary="Delete an item")
def delete_collection_item(
    item_id: str,
    collection: str = Depends(resolve_collection),
    _claims: dict = Depends(require_admin),
) -> Response:
    if not repository_items.delete_item(collection, item_id):
        raise _not_found(f"{collection} item not found")
    return Response(status_code=204)


@router.post("/{collection}/repair", response_model=RepairResult, summary="Renumber a collection to 1..N")
def repair_collection(
    collection: str = Depends(resolve_collection),
    _claims: dict = Depends(require_admin),
) -> RepairResult:
    store = RepositoryCollectionStore()
    endpoint = f"/{collection}"
    items = store.fetch_all(endpoint)
    result = reorder_all_contiguously(items, store, endpoint, None)
    logger.info("collection.repair collection=%s applied=%s failed=%s", collection, len(result.applied), len(result.failed))
    return RepairResult(applied=result.applied, failed=result.failed, items=store.fetch_all(endpoint))


__all__ = ["router", "public_router", "resolve_collection"]
