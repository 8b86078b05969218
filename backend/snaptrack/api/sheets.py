"""Spreadsheet product database API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query

from snaptrack.api.deps import get_sheets_service
from snaptrack.models.sheets import (
    SheetComparisonResponse,
    SheetProduct,
    SheetProductsResponse,
)
from snaptrack.services.sheets import SheetsError, SheetsService

router = APIRouter(prefix="/api/sheets", tags=["sheets"])


def _require_enabled(sheets: SheetsService):
    if not sheets.is_enabled:
        raise HTTPException(status_code=503, detail="Product sheet is not configured")


@router.get("/products", response_model=SheetProductsResponse)
async def list_products(sheets: SheetsService = Depends(get_sheets_service)):
    """Every product row in the sheet."""
    _require_enabled(sheets)

    try:
        products = await sheets.fetch_products()
    except SheetsError as e:
        return SheetProductsResponse(success=False, error=str(e))

    return SheetProductsResponse(success=True, products=products, count=len(products))


@router.get("/stores")
async def list_stores(sheets: SheetsService = Depends(get_sheets_service)):
    """Unique store names, sorted."""
    _require_enabled(sheets)

    try:
        stores = await sheets.available_stores()
    except SheetsError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return {"stores": stores, "count": len(stores)}


@router.get("/compare", response_model=SheetComparisonResponse)
async def compare_across_stores(
    item: str = Query(..., min_length=1),
    sheets: SheetsService = Depends(get_sheets_service),
):
    """Compare one item across every store in the sheet."""
    _require_enabled(sheets)
    return await sheets.compare_item_across_stores(item)


@router.get("/lookup", response_model=SheetProduct)
async def lookup_product(
    store: str = Query(..., min_length=1),
    name: str | None = Query(None, min_length=1),
    barcode: str | None = Query(None, min_length=1),
    sheets: SheetsService = Depends(get_sheets_service),
):
    """Find a product at a store by name or barcode."""
    _require_enabled(sheets)

    if not name and not barcode:
        raise HTTPException(status_code=400, detail="Pass name or barcode")

    try:
        if barcode:
            product = await sheets.lookup_product_by_barcode(barcode, store)
        else:
            product = await sheets.lookup_product(name, store)
    except SheetsError as e:
        raise HTTPException(status_code=502, detail=str(e))

    if product is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return product


@router.get("/categories")
async def category_breakdown(sheets: SheetsService = Depends(get_sheets_service)):
    """Product count per category."""
    _require_enabled(sheets)

    try:
        breakdown = await sheets.category_breakdown()
    except SheetsError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return {"categories": breakdown, "total": sum(breakdown.values())}
