"""Data item API router.

- POST   /api/data         - Create item (id generated when absent)
- GET    /api/data         - List all items
- GET    /api/data/{id}    - Get item
- PUT    /api/data/{id}    - Update name and description
- DELETE /api/data/{id}    - Delete item
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from k8sdemo.api.deps import get_data_service
from k8sdemo.api.errors import NotFoundError
from k8sdemo.core.model import DataItem, DataItemUpdate
from k8sdemo.services.data_service import DataService

router = APIRouter(prefix="/api/data", tags=["Data"])


@router.post("", status_code=201, response_model=DataItem)
async def create_item(
    item: DataItem,
    service: DataService = Depends(get_data_service),
) -> DataItem:
    """Create a new item and cache it."""
    return await service.create(item)


@router.get("", response_model=list[DataItem])
async def get_all_items(service: DataService = Depends(get_data_service)) -> list[DataItem]:
    """Get all items (read-through on the collection cache)."""
    return await service.get_all()


@router.get("/{item_id}", response_model=DataItem)
async def get_item(item_id: str, service: DataService = Depends(get_data_service)) -> DataItem:
    """Get one item (read-through on the item cache)."""
    item = await service.get(item_id)
    if item is None:
        raise NotFoundError("DataItem", item_id)
    return item


@router.put("/{item_id}", response_model=DataItem)
async def update_item(
    item_id: str,
    patch: DataItemUpdate,
    service: DataService = Depends(get_data_service),
) -> DataItem:
    """Update an existing item; 404 if it does not exist."""
    return await service.update(item_id, patch)


@router.delete("/{item_id}")
async def delete_item(
    item_id: str,
    service: DataService = Depends(get_data_service),
) -> JSONResponse:
    """Delete an item. Deleting a missing item is a 404 with success=false."""
    deleted = await service.delete(item_id)
    body: dict[str, Any] = {"success": deleted, "id": item_id}
    if deleted:
        body["message"] = "Item deleted successfully"
        return JSONResponse(status_code=200, content=body)
    body["message"] = "Item not found"
    body["error"] = f"DataItem not found: {item_id}"
    return JSONResponse(status_code=404, content=body)
