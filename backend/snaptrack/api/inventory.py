"""Inventory API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from snaptrack.api.deps import get_inventory_service
from snaptrack.models.grocery import GroceryItem, InventoryAddRequest, InventoryResponse
from snaptrack.services.inventory import InventoryService

router = APIRouter(prefix="/api/inventory", tags=["inventory"])


@router.get("", response_model=InventoryResponse)
async def list_inventory(
    limit: Optional[int] = Query(None, ge=1, le=500),
    inventory: InventoryService = Depends(get_inventory_service),
):
    """List inventory items in insertion order."""
    items = inventory.list_items(limit)
    return InventoryResponse(items=items, item_count=len(items))


@router.post("", response_model=GroceryItem)
async def add_inventory_item(
    body: InventoryAddRequest,
    inventory: InventoryService = Depends(get_inventory_service),
):
    """Add an item; an existing item with the same name gets its quantity bumped."""
    return inventory.add_item(GroceryItem(**body.model_dump()))


@router.get("/recent", response_model=InventoryResponse)
async def recent_scans(inventory: InventoryService = Depends(get_inventory_service)):
    """The last few items added, newest first."""
    items = list(inventory.recent_scans)
    return InventoryResponse(items=items, item_count=len(items))


@router.get("/{item_id}", response_model=GroceryItem)
async def get_inventory_item(
    item_id: str,
    inventory: InventoryService = Depends(get_inventory_service),
):
    item = inventory.get_item(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return item


@router.put("/{item_id}", response_model=GroceryItem)
async def update_inventory_item(
    item_id: str,
    body: GroceryItem,
    inventory: InventoryService = Depends(get_inventory_service),
):
    """Replace an item."""
    item = body.model_copy(update={"id": item_id})
    if not inventory.update_item(item):
        raise HTTPException(status_code=404, detail="Item not found")
    return item
