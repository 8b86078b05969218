"""Receipt scanning models."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from .grocery import GroceryItem


class ReceiptScanRequest(BaseModel):
    """Request to scan a receipt image."""

    image_base64: str
    mime_type: str = "image/jpeg"
    store_name: str = "Unknown Store"


class ReceiptTextRequest(BaseModel):
    """Receipt data that has already been extracted (JSON array or plain text)."""

    text: str
    store_name: str = "Unknown Store"


class ReceiptRow(BaseModel):
    """One row of the receipt sheet: item, price, date, email."""

    item: str
    price: Decimal
    date: str
    email: str

    def to_values(self) -> list[str]:
        return [self.item, f"{self.price:.2f}", self.date, self.email]


class ReceiptScanResponse(BaseModel):
    """Response after scanning or parsing a receipt."""

    success: bool
    receipt_title: Optional[str] = None  # "<store>, <date>"
    receipt_date: Optional[str] = None
    items: list[GroceryItem] = Field(default_factory=list)
    items_added: int = 0
    parsed_as: Optional[str] = None  # "json" or "text"
    sheet_synced: bool = False
    sheet_error: Optional[str] = None
    raw_response: Optional[str] = None
    error: Optional[str] = None
    processing_time_ms: float = 0
