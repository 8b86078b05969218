"""Receipt scanning API endpoints."""

import base64
import binascii

from fastapi import APIRouter, Depends, HTTPException

from snaptrack.api.deps import get_receipt_service
from snaptrack.models.receipts import (
    ReceiptScanRequest,
    ReceiptScanResponse,
    ReceiptTextRequest,
)
from snaptrack.services.receipts import ReceiptService

router = APIRouter(prefix="/api/receipts", tags=["receipts"])


@router.post("/scan", response_model=ReceiptScanResponse)
async def scan_receipt(
    body: ReceiptScanRequest,
    receipt_service: ReceiptService = Depends(get_receipt_service),
):
    """
    Scan a receipt photo.

    Extracts grocery items and prices, adds them to the inventory and logs
    them to the receipt sheet when one is configured.
    """
    if not receipt_service.is_enabled:
        raise HTTPException(
            status_code=503,
            detail="Receipt scanning is not configured. Set OPENROUTER_API_KEY."
        )

    try:
        image_bytes = base64.b64decode(body.image_base64, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail="Invalid base64 image data")

    return await receipt_service.scan_receipt(
        image_bytes=image_bytes,
        mime_type=body.mime_type,
        store_name=body.store_name,
    )


@router.post("/parse", response_model=ReceiptScanResponse)
async def parse_receipt(
    body: ReceiptTextRequest,
    receipt_service: ReceiptService = Depends(get_receipt_service),
):
    """Import receipt data that was already extracted (JSON array or plain text)."""
    return await receipt_service.process_receipt_text(body.text, body.store_name)


@router.get("/status/enabled")
async def check_receipt_status(receipt_service: ReceiptService = Depends(get_receipt_service)):
    """Check if receipt scanning is enabled and configured."""
    return {
        "enabled": receipt_service.is_enabled,
        "message": "Receipt scanning is available" if receipt_service.is_enabled else "Receipt scanning is not configured",
    }
