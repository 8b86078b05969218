"""Price comparison API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from snaptrack.api.deps import get_inventory_service, get_price_service
from snaptrack.config import get_settings
from snaptrack.models.prices import (
    CompareAllRequest,
    CompareAllResponse,
    PriceCompareResponse,
    PriceGroup,
    PriceParseRequest,
    PriceParseResponse,
    PriceSortRequest,
    SortOption,
)
from snaptrack.services.inventory import InventoryService
from snaptrack.services.prices import PriceService, sort_groups

router = APIRouter(prefix="/api/prices", tags=["prices"])


def _parse_response(groups: list[PriceGroup], sort: SortOption) -> PriceParseResponse:
    return PriceParseResponse(
        groups=groups,
        group_count=len(groups),
        record_count=sum(len(group.items) for group in groups),
        sort=sort,
    )


@router.post("/parse", response_model=PriceParseResponse)
async def parse_prices(
    body: PriceParseRequest,
    sort: SortOption = Query(SortOption.PRICE_ASCENDING, description="Sort order within each group"),
    price_service: PriceService = Depends(get_price_service),
):
    """
    Normalize free-text price data into price groups.

    Sections are split on "---". Every non-title line becomes a record,
    even when no price could be found (price_found=false), so it can be
    corrected by hand. Pass item_name to merge the result into the board.
    """
    groups = price_service.parse(body.text, sort=sort, item_name=body.item_name)
    return _parse_response(groups, sort)


@router.post("/sort", response_model=PriceParseResponse)
async def sort_prices(
    body: PriceSortRequest,
    sort: SortOption = Query(SortOption.PRICE_ASCENDING),
):
    """Re-sort previously parsed groups and recompute best-deal flags."""
    return _parse_response(sort_groups(body.groups, sort), sort)


@router.get("/compare", response_model=PriceCompareResponse)
async def compare_price(
    item: str = Query(..., min_length=1, description="Item name"),
    store: str = Query(..., min_length=1, description="Store name"),
    sort: SortOption = Query(SortOption.PRICE_ASCENDING),
    price_service: PriceService = Depends(get_price_service),
):
    """
    Compare an item's price at a store.

    Returns the headline store price plus every price the answer mentions,
    grouped and sorted.
    """
    if not price_service.is_enabled:
        raise HTTPException(status_code=503, detail="Price comparison is not configured")

    return await price_service.compare_item(item, store, sort)


@router.post("/compare-all", response_model=CompareAllResponse)
async def compare_all(
    body: CompareAllRequest,
    sort: SortOption = Query(SortOption.PRICE_ASCENDING),
    price_service: PriceService = Depends(get_price_service),
    inventory: InventoryService = Depends(get_inventory_service),
):
    """
    Compare the first N inventory items at one store.

    Requests run concurrently; failed items are listed under failures.
    """
    if not price_service.is_enabled:
        raise HTTPException(status_code=503, detail="Price comparison is not configured")

    return await price_service.compare_all(
        inventory.list_items(),
        store=body.store,
        sort=sort,
        limit=body.limit,
    )


@router.get("/board", response_model=PriceParseResponse)
async def get_board(
    sort: SortOption = Query(SortOption.PRICE_ASCENDING),
    price_service: PriceService = Depends(get_price_service),
):
    """All aggregated price groups, one per item."""
    return _parse_response(price_service.aggregator.groups(sort), sort)


@router.get("/board/{item_name}", response_model=PriceGroup)
async def get_board_item(
    item_name: str,
    sort: Optional[SortOption] = Query(None),
    price_service: PriceService = Depends(get_price_service),
):
    """Aggregated prices for one item."""
    group = price_service.aggregator.get(item_name)
    if group is None:
        raise HTTPException(status_code=404, detail="No prices recorded for this item")

    if sort is not None:
        return sort_groups([group], sort)[0]
    return group


@router.delete("/board")
async def clear_board(price_service: PriceService = Depends(get_price_service)):
    """Forget every aggregated price."""
    price_service.aggregator.clear()
    return {"cleared": True}


@router.get("/stores")
async def list_stores():
    """Stores offered for comparison."""
    return {"stores": get_settings().default_stores}
