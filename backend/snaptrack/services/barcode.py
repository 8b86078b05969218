"""
Barcode lookup service.

The scanned code is sent to a search-capable chat model; its free-text
answer is read line by line for the product name, category and price.
"""

import logging
import re
import time
from decimal import Decimal
from typing import Optional

from snaptrack.config import Settings, get_settings
from snaptrack.models.barcode import BarcodeLookupResponse
from snaptrack.models.grocery import GroceryItem
from snaptrack.services.ai import ChatService
from snaptrack.services.inventory import InventoryService

logger = logging.getLogger(__name__)

NAME_LABEL = re.compile(r"^.*?name\s*:\s*", re.IGNORECASE)
CATEGORY_LABEL = re.compile(r"^.*?category\s*:\s*", re.IGNORECASE)
PRICE_LABEL = re.compile(r"^.*?(?:price|cost)[^:]*:\s*", re.IGNORECASE)
DECIMAL_PATTERN = re.compile(r"\d+\.\d+")


def _clean(line: str) -> str:
    """Drop markdown emphasis and list bullets."""
    return line.replace("*", "").strip().lstrip("-").strip()


def parse_barcode_response(text: str, barcode: str) -> GroceryItem:
    """
    Read name, category and price out of a barcode lookup answer.

    Defaults: "Unknown Product", "Other", price 0.
    """
    lines = text.splitlines()
    name = "Unknown Product"
    category = "Other"
    price = Decimal("0")

    if lines and lines[0].strip():
        name = _clean(lines[0]).lstrip("#").strip() or name

    for line in lines:
        lowered = line.lower()
        cleaned = _clean(line)

        if "name:" in lowered:
            value = NAME_LABEL.sub("", cleaned).strip()
            if value:
                name = value

        if "category:" in lowered:
            value = CATEGORY_LABEL.sub("", cleaned).strip()
            if value:
                category = value

        if PRICE_LABEL.match(cleaned):
            match = DECIMAL_PATTERN.search(PRICE_LABEL.sub("", cleaned, count=1))
            if match:
                price = Decimal(match.group(0))

    return GroceryItem(
        name=name,
        category=category,
        price=price,
        quantity=1.0,
        barcode=barcode,
    )


class BarcodeService:
    """Chat-backed barcode lookup."""

    def __init__(
        self,
        chat: ChatService,
        inventory: InventoryService,
        settings: Optional[Settings] = None,
    ):
        self.chat = chat
        self.inventory = inventory
        self.settings = settings or get_settings()

    @property
    def is_enabled(self) -> bool:
        return self.settings.feature_barcode_lookup and self.chat.is_enabled

    async def lookup(self, barcode: str, add_to_inventory: bool = True) -> BarcodeLookupResponse:
        """Look up a product by barcode and optionally add it to the inventory."""
        start_time = time.time()
        barcode = self._normalize_barcode(barcode)

        if not barcode:
            return BarcodeLookupResponse(success=False, barcode=barcode, error="Barcode has no digits")

        try:
            answer = await self.chat.lookup_barcode(barcode)
        except Exception as e:
            logger.error(f"Barcode API error for {barcode}: {e}")
            return BarcodeLookupResponse(
                success=False,
                barcode=barcode,
                error=str(e),
                lookup_time_ms=(time.time() - start_time) * 1000,
            )

        product = parse_barcode_response(answer, barcode)
        if add_to_inventory:
            product = self.inventory.add_item(product)

        return BarcodeLookupResponse(
            success=True,
            barcode=barcode,
            product=product,
            details=answer,
            added_to_inventory=add_to_inventory,
            lookup_time_ms=(time.time() - start_time) * 1000,
        )

    def _normalize_barcode(self, barcode: str) -> str:
        """Normalize barcode format."""
        # Remove any non-digit characters
        return "".join(c for c in barcode if c.isdigit())
