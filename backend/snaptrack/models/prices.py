"""Price comparison models for free-text price data."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

UNKNOWN_STORE = "Unknown Store"
DEFAULT_SECTION_TITLE = "Pricing Information"


class Store(str, Enum):
    """Stores offered for price comparison."""

    TRADER_JOES = "Trader Joe's"
    ALDI = "Aldi"
    GIANT = "Giant"
    SAFEWAY = "Safeway"
    PUBLIX = "Publix"


class SortOption(str, Enum):
    """Sort criteria for the records of a price group."""

    PRICE_ASCENDING = "price_ascending"  # Price: Low to High
    PRICE_DESCENDING = "price_descending"  # Price: High to Low
    STORE_NAME = "store_name"
    BEST_VALUE = "best_value"  # Highest value score first


# =============================================================================
# Normalized Records
# =============================================================================


class PriceRecord(BaseModel):
    """One parsed observation of a product's price at one store."""

    store: str = UNKNOWN_STORE
    description: str = ""
    price: Decimal = Field(default=Decimal("0"), ge=0)  # 0 means "no price found" unless price_found
    unit: str = ""  # e.g. "lb", "16 oz"
    value_score: Decimal = Field(default=Decimal("0"), ge=0)
    is_best_deal: bool = False

    # Parse confidence
    store_found: bool = False
    price_found: bool = False
    raw_text: str = ""


class PriceGroup(BaseModel):
    """A titled collection of price records sharing one comparison context."""

    title: str = DEFAULT_SECTION_TITLE
    items: list[PriceRecord] = Field(default_factory=list)

    @property
    def best_deals(self) -> list[PriceRecord]:
        return [item for item in self.items if item.is_best_deal]


# =============================================================================
# Single-store comparison
# =============================================================================


class StorePrice(BaseModel):
    """Price at a specific store, extracted from a comparison answer."""

    store: str
    price: str  # As written, e.g. "$3.99"
    on_sale: bool = False
    unit_price: str = ""
    comparison: str = ""
    brand: str = ""
    full_details: str = ""

    @property
    def price_formatted(self) -> str:
        return self.price if self.price.startswith("$") else f"${self.price}"

    @property
    def numeric_price(self) -> Decimal:
        """Numeric value of the price string ("$3.99" -> 3.99), 0 if unparsable."""
        match = re.search(r"\d+(?:\.\d+)?", self.price.replace(",", ""))
        if not match:
            return Decimal("0")
        try:
            return Decimal(match.group(0))
        except InvalidOperation:
            return Decimal("0")


# =============================================================================
# Request / Response envelopes
# =============================================================================


class PriceParseRequest(BaseModel):
    """Raw text to normalize."""

    text: str
    item_name: Optional[str] = None  # Merge the result into the board under this name


class PriceParseResponse(BaseModel):
    """Normalized price groups."""

    groups: list[PriceGroup] = Field(default_factory=list)
    group_count: int = 0
    record_count: int = 0
    sort: SortOption = SortOption.PRICE_ASCENDING


class PriceSortRequest(BaseModel):
    """Groups to re-sort."""

    groups: list[PriceGroup] = Field(default_factory=list)


class PriceCompareResponse(BaseModel):
    """Result of a single item/store price comparison."""

    success: bool
    item: str
    store: str
    store_price: Optional[StorePrice] = None
    groups: list[PriceGroup] = Field(default_factory=list)
    raw_response: Optional[str] = None
    error: Optional[str] = None
    lookup_time_ms: float = 0


class ComparisonFailure(BaseModel):
    """An item whose comparison failed during a batch."""

    item: str
    error: str


class CompareAllRequest(BaseModel):
    """Request to compare the first N inventory items at one store."""

    store: str = Store.TRADER_JOES.value
    limit: Optional[int] = Field(default=None, ge=1, le=50)


class CompareAllResponse(BaseModel):
    """Joined result of a batch comparison."""

    store: str
    total_requested: int = 0
    succeeded: int = 0
    failed: int = 0
    results: list[PriceCompareResponse] = Field(default_factory=list)
    failures: list[ComparisonFailure] = Field(default_factory=list)
    lookup_time_ms: float = 0
