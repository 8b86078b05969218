"""Inventory Pydantic models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field


class GroceryCategory(str, Enum):
    """Categories offered to the client for organization."""

    PRODUCE = "Produce"
    DAIRY = "Dairy"
    MEAT = "Meat"
    BAKERY = "Bakery"
    PANTRY = "Pantry"
    FROZEN = "Frozen"
    BEVERAGES = "Beverages"
    HOUSEHOLD = "Household"
    OTHER = "Other"


class GroceryItem(BaseModel):
    """A single inventory item."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    category: str = GroceryCategory.OTHER.value
    price: Decimal = Decimal("0")
    quantity: float = 1.0

    barcode: Optional[str] = None
    date_added: datetime = Field(default_factory=datetime.utcnow)
    weblink: Optional[str] = None
    price_per_unit: Optional[str] = None  # e.g. "$0.125 per oz"
    date: Optional[str] = None  # Purchase date as printed, MM/DD/YYYY

    @property
    def price_formatted(self) -> str:
        return f"${self.price:.2f}"


class InventoryAddRequest(BaseModel):
    """Request to add an item by hand."""

    name: str = Field(..., min_length=1)
    category: str = GroceryCategory.OTHER.value
    price: Decimal = Field(default=Decimal("0"), ge=0)
    quantity: float = Field(default=1.0, gt=0)
    barcode: Optional[str] = None
    weblink: Optional[str] = None
    price_per_unit: Optional[str] = None


class InventoryResponse(BaseModel):
    """Inventory listing."""

    items: list[GroceryItem] = Field(default_factory=list)
    item_count: int = 0
    categories: list[str] = Field(default_factory=lambda: [c.value for c in GroceryCategory])
