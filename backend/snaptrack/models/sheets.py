"""Spreadsheet product database models."""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from .prices import PriceGroup


class SheetProduct(BaseModel):
    """One product row: store, item, category, brand, price, quantity, price per unit, link."""

    store: str
    item: str
    category: str = ""
    brand: str = ""
    price: str = ""
    quantity: str = ""
    price_per_unit: str = ""
    link: str = ""

    @property
    def numeric_price(self) -> Decimal:
        """Numeric value of the price cell ("$3.99" -> 3.99), 0 if unparsable."""
        match = re.search(r"\d+(?:\.\d+)?", self.price.replace(",", ""))
        return Decimal(match.group(0)) if match else Decimal("0")


class SheetProductsResponse(BaseModel):
    """Product listing from the sheet."""

    success: bool
    products: list[SheetProduct] = Field(default_factory=list)
    count: int = 0
    error: Optional[str] = None


class SheetComparisonResponse(BaseModel):
    """An item compared across every store in the sheet."""

    success: bool
    item: str
    store_info: dict[str, SheetProduct] = Field(default_factory=dict)
    group: Optional[PriceGroup] = None
    error: Optional[str] = None


class SheetWriteResponse(BaseModel):
    """Result of appending rows to a sheet."""

    success: bool
    rows_written: int = 0
    updated_range: Optional[str] = None
    error: Optional[str] = None
