"""
Google Sheets product database and receipt log.

Product sheet columns (row 1 is a header):
    A store | B item | C category | D brand | E price | F quantity | G price per unit | H link

Receipt sheet columns:
    A item | B price | C date | D email

API: https://sheets.googleapis.com/v4/spreadsheets/{id}/values/{range}
"""

import logging
from collections import defaultdict
from typing import Optional

import httpx

from snaptrack.config import Settings, get_settings
from snaptrack.models.prices import PriceGroup, PriceRecord
from snaptrack.models.receipts import ReceiptRow
from snaptrack.models.sheets import (
    SheetComparisonResponse,
    SheetProduct,
    SheetWriteResponse,
)
from snaptrack.services.price_parser import compute_value_score, mark_best_deals

logger = logging.getLogger(__name__)

MIN_PRODUCT_COLUMNS = 7


class SheetsError(Exception):
    """Sheet request failed, returned no data, or could not be parsed."""


class SheetsService:
    """Read products from, and append receipt rows to, Google Sheets."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or get_settings()
        self.http = http or httpx.AsyncClient(timeout=self.settings.sheets_timeout_seconds)

    @property
    def is_enabled(self) -> bool:
        return self.settings.sheets_enabled

    @property
    def receipt_log_enabled(self) -> bool:
        return self.settings.receipt_sheet_enabled

    async def close(self):
        await self.http.aclose()

    # =========================================================================
    # Product sheet
    # =========================================================================

    async def fetch_products(self) -> list[SheetProduct]:
        """Fetch every usable product row."""
        if not self.is_enabled:
            raise SheetsError("Product sheet is not configured")

        url = (
            f"{self.settings.sheets_base_url}/{self.settings.product_sheet_id}"
            f"/values/{self.settings.product_sheet_range}"
        )

        try:
            response = await self.http.get(url, params={"key": self.settings.google_sheets_api_key})
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch product sheet: {e}")
            raise SheetsError(f"Network error: {e}") from e
        except ValueError as e:
            raise SheetsError("Invalid JSON from product sheet") from e

        values = data.get("values") if isinstance(data, dict) else None
        if not isinstance(values, list):
            raise SheetsError("Product sheet response has no values")

        products = [
            product
            for product in (self._row_to_product(row) for row in values[1:])
            if product is not None
        ]

        if not products:
            raise SheetsError("No product data found")

        logger.debug(f"Fetched {len(products)} products from sheet")
        return products

    def _row_to_product(self, row: list) -> Optional[SheetProduct]:
        """Map a row positionally; short rows and rows missing store/item are skipped."""
        if not isinstance(row, list) or len(row) < MIN_PRODUCT_COLUMNS:
            return None

        cells = [str(cell) if cell is not None else "" for cell in row]
        store, item = cells[0].strip(), cells[1].strip()
        if not store or not item:
            return None

        return SheetProduct(
            store=store,
            item=item,
            category=cells[2],
            brand=cells[3],
            price=cells[4],
            quantity=cells[5],
            price_per_unit=cells[6],
            link=cells[7] if len(cells) > 7 else "",
        )

    async def lookup_product(self, name: str, store: str) -> Optional[SheetProduct]:
        """First product at `store` whose item name contains `name` (case-insensitive)."""
        products = await self.fetch_products()
        name, store = name.lower(), store.lower()

        for product in products:
            if product.store.lower() == store and name in product.item.lower():
                return product
        return None

    async def lookup_product_by_barcode(self, barcode: str, store: str) -> Optional[SheetProduct]:
        """
        First product at `store` carrying the barcode in its item or brand.

        The sheet has no barcode column yet, so codes are matched as text.
        """
        products = await self.fetch_products()
        store = store.lower()

        for product in products:
            if product.store.lower() == store and (barcode in product.item or barcode in product.brand):
                return product
        return None

    async def available_stores(self) -> list[str]:
        products = await self.fetch_products()
        return sorted({product.store for product in products})

    async def category_breakdown(self) -> dict[str, int]:
        """Product count per category; blank categories count as "Unknown"."""
        products = await self.fetch_products()
        counts: dict[str, int] = defaultdict(int)
        for product in products:
            counts[product.category.strip() or "Unknown"] += 1
        return dict(counts)

    async def compare_item_across_stores(self, item: str) -> SheetComparisonResponse:
        """Compare one item across every store that lists it."""
        try:
            products = await self.fetch_products()
        except SheetsError as e:
            return SheetComparisonResponse(success=False, item=item, error=str(e))

        needle = item.lower()
        matching = [p for p in products if needle in p.item.lower()]
        if not matching:
            return SheetComparisonResponse(success=False, item=item, error="Item not found")

        # One product per store; later rows win
        store_info: dict[str, SheetProduct] = {}
        for product in matching:
            store_info[product.store] = product

        return SheetComparisonResponse(
            success=True,
            item=item,
            store_info=store_info,
            group=self._to_price_group(item, store_info.values()),
        )

    def _to_price_group(self, title: str, products) -> PriceGroup:
        records = []
        for product in products:
            price = product.numeric_price
            unit = product.quantity.strip()
            records.append(PriceRecord(
                store=product.store,
                description=" ".join(part for part in (product.brand, product.item) if part).strip(),
                price=price,
                unit=unit,
                value_score=compute_value_score(price, unit),
                store_found=True,
                price_found=bool(product.price.strip()) and any(c.isdigit() for c in product.price),
                raw_text=product.price,
            ))
        return PriceGroup(title=title, items=mark_best_deals(records))

    # =========================================================================
    # Receipt sheet
    # =========================================================================

    async def append_receipt_rows(self, rows: list[ReceiptRow]) -> SheetWriteResponse:
        """Append receipt rows; failures come back as success=False."""
        if not rows:
            return SheetWriteResponse(success=True, rows_written=0)

        if not self.receipt_log_enabled:
            return SheetWriteResponse(success=False, error="Receipt sheet is not configured")

        url = (
            f"{self.settings.sheets_base_url}/{self.settings.receipt_sheet_id}"
            f"/values/{self.settings.receipt_sheet_range}:append"
        )
        params = {
            "valueInputOption": "USER_ENTERED",
            "insertDataOption": "INSERT_ROWS",
            "key": self.settings.google_sheets_api_key,
        }
        body = {"values": [row.to_values() for row in rows]}

        logger.info(f"Writing {len(rows)} receipt row(s) to sheet")

        try:
            response = await self.http.post(url, params=params, json=body)
            data = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Error writing to Google Sheets: {e}")
            return SheetWriteResponse(success=False, error=f"Network error: {e}")
        except ValueError:
            logger.error("Error parsing Google Sheets response")
            return SheetWriteResponse(success=False, error="Invalid JSON from receipt sheet")

        if isinstance(data, dict) and "error" in data:
            error = data["error"]
            message = error.get("message", "Unknown error") if isinstance(error, dict) else str(error)
            logger.error(f"Google Sheets API error: {message}")
            return SheetWriteResponse(success=False, error=message)

        if response.status_code >= 400:
            return SheetWriteResponse(success=False, error=f"Sheet returned {response.status_code}")

        updates = data.get("updates", {}) if isinstance(data, dict) else {}
        return SheetWriteResponse(
            success=True,
            rows_written=updates.get("updatedRows", len(rows)),
            updated_range=updates.get("updatedRange"),
        )
