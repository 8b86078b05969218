"""Barcode lookup API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query

from snaptrack.api.deps import get_barcode_service
from snaptrack.models.barcode import BarcodeLookupResponse
from snaptrack.services.barcode import BarcodeService

router = APIRouter(prefix="/api/barcode", tags=["barcode"])


@router.get("/{barcode}", response_model=BarcodeLookupResponse)
async def lookup_barcode(
    barcode: str,
    add_to_inventory: bool = Query(True, description="Add the product to the inventory"),
    barcode_service: BarcodeService = Depends(get_barcode_service),
):
    """
    Look up a product by barcode.

    Returns the product name, category and typical price read from the
    lookup answer, plus the full answer text.
    """
    if not barcode_service.is_enabled:
        raise HTTPException(status_code=503, detail="Barcode lookup is not configured")

    result = await barcode_service.lookup(barcode, add_to_inventory=add_to_inventory)
    if not result.success and not result.barcode:
        raise HTTPException(status_code=400, detail=result.error)

    return result
