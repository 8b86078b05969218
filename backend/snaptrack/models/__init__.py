"""Pydantic models for the snaptrack API."""

from .prices import (
    PriceRecord,
    PriceGroup,
    SortOption,
    Store,
    StorePrice,
)
from .grocery import (
    GroceryCategory,
    GroceryItem,
)
from .receipts import (
    ReceiptRow,
    ReceiptScanResponse,
)
from .barcode import BarcodeLookupResponse
from .sheets import SheetProduct

__all__ = [
    # Prices
    "PriceRecord",
    "PriceGroup",
    "SortOption",
    "Store",
    "StorePrice",
    # Inventory
    "GroceryCategory",
    "GroceryItem",
    # Receipts
    "ReceiptRow",
    "ReceiptScanResponse",
    # Barcode
    "BarcodeLookupResponse",
    # Sheets
    "SheetProduct",
]
