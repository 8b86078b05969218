"""Barcode lookup models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from .grocery import GroceryItem


class BarcodeLookupResponse(BaseModel):
    """Response for barcode lookup endpoint."""

    success: bool
    barcode: str
    product: Optional[GroceryItem] = None
    details: Optional[str] = None  # Full answer from the lookup service
    added_to_inventory: bool = False
    error: Optional[str] = None
    lookup_time_ms: float = 0
