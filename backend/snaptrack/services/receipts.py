"""
Receipt scanning service.

A vision chat model reads the receipt photo and answers with a JSON array
of line items. Answers that are not valid JSON go through a plain-text
fallback that picks up "<name> $<price>" lines. Parsed items are added to
the inventory and logged to the receipt sheet.
"""

import json
import logging
import math
import re
import time
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from snaptrack.config import Settings, get_settings
from snaptrack.models.grocery import GroceryItem
from snaptrack.models.receipts import ReceiptRow, ReceiptScanResponse
from snaptrack.services.ai import ChatService
from snaptrack.services.inventory import InventoryService
from snaptrack.services.sheets import SheetsService

logger = logging.getLogger(__name__)

DATE_FORMAT = "%m/%d/%Y"
TEXT_PRICE_PATTERN = re.compile(r"\$(\d+\.\d+)")
MIN_TEXT_NAME_LENGTH = 3


@dataclass
class ParsedReceiptItems:
    """Items extracted from one receipt answer."""
    items: list[GroceryItem] = field(default_factory=list)
    receipt_date: str = ""
    parsed_as: str = "json"


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences that chat models wrap JSON in."""
    cleaned = text.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned.replace("```json", "", 1)
    return cleaned.replace("```", "").strip()


def _to_decimal(value: Any) -> Optional[Decimal]:
    """Number or numeric string -> Decimal; None for anything else, NaN and infinities included."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip().lstrip("$").replace(",", ""))
        except InvalidOperation:
            return None
    else:
        return None
    return amount if amount.is_finite() else None


def _to_quantity(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def parse_receipt_items(text: str, today: Optional[date] = None) -> ParsedReceiptItems:
    """
    Parse a receipt answer into grocery items.

    JSON arrays of {"name", "price", "quantity", "category", "date"} objects
    are read field by field with defaults; anything else is parsed as text.
    """
    today_str = (today or date.today()).strftime(DATE_FORMAT)
    cleaned = strip_code_fences(text)

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        logger.info("Receipt answer is not JSON, trying text processing")
        return _parse_text_items(text, today_str)

    if isinstance(data, dict) and isinstance(data.get("items"), list):
        data = data["items"]

    if not isinstance(data, list):
        logger.info("Receipt JSON is not a list of items, trying text processing")
        return _parse_text_items(text, today_str)

    entries = [entry for entry in data if isinstance(entry, dict)]

    receipt_date = today_str
    for entry in entries:
        entry_date = entry.get("date")
        if isinstance(entry_date, str) and entry_date.strip():
            receipt_date = entry_date.strip()
            break

    items = []
    for entry in entries:
        name = entry.get("name")
        if not isinstance(name, str) or not name.strip():
            logger.warning(f"Missing name in receipt item: {entry}")
            continue
        name = name.strip()

        price = _to_decimal(entry.get("price"))
        if price is None:
            logger.warning(f"Invalid price format for {name}")
            price = Decimal("0")

        quantity = _to_quantity(entry.get("quantity"))
        if quantity is None:
            logger.debug(f"Invalid quantity format for {name}, defaulting to 1")
            quantity = 1

        category = entry.get("category")
        if not isinstance(category, str) or not category.strip():
            category = "Other"

        price_per_unit = entry.get("price_per_unit")

        items.append(GroceryItem(
            name=name,
            category=category.strip(),
            price=price,
            quantity=float(quantity),
            price_per_unit=str(price_per_unit) if price_per_unit is not None else None,
            date=receipt_date,
        ))

    logger.info(f"Parsed {len(items)} receipt item(s) from JSON")
    return ParsedReceiptItems(items=items, receipt_date=receipt_date, parsed_as="json")


def _parse_text_items(text: str, today_str: str) -> ParsedReceiptItems:
    """Fallback: every "<name> $<d.dd>" line becomes an item."""
    items = []
    for line in text.splitlines():
        if not line.strip() or "$" not in line:
            continue

        match = TEXT_PRICE_PATTERN.search(line)
        if not match:
            continue

        name = line.split("$", 1)[0].strip().strip("-:").strip()
        if len(name) < MIN_TEXT_NAME_LENGTH:
            continue

        items.append(GroceryItem(
            name=name,
            category="Other",
            price=Decimal(match.group(1)),
            quantity=1.0,
            date=today_str,
        ))

    logger.info(f"Parsed {len(items)} receipt item(s) from text")
    return ParsedReceiptItems(items=items, receipt_date=today_str, parsed_as="text")


class ReceiptService:
    """Receipt photo -> inventory items -> receipt sheet."""

    def __init__(
        self,
        chat: ChatService,
        inventory: InventoryService,
        sheets: SheetsService,
        settings: Optional[Settings] = None,
    ):
        self.chat = chat
        self.inventory = inventory
        self.sheets = sheets
        self.settings = settings or get_settings()

    @property
    def is_enabled(self) -> bool:
        """Check if receipt scanning is available."""
        return self.settings.feature_receipt_ocr and self.chat.is_enabled

    async def scan_receipt(
        self,
        image_bytes: bytes,
        mime_type: str = "image/jpeg",
        store_name: str = "Unknown Store",
    ) -> ReceiptScanResponse:
        """Scan a receipt photo and import its items."""
        start_time = time.time()

        if not self.is_enabled:
            return ReceiptScanResponse(
                success=False,
                error="Receipt scanning is not configured. Set OPENROUTER_API_KEY.",
            )

        try:
            answer = await self.chat.scan_receipt(image_bytes, mime_type)
        except Exception as e:
            logger.error(f"Receipt scan failed: {e}")
            return ReceiptScanResponse(
                success=False,
                error=str(e),
                processing_time_ms=(time.time() - start_time) * 1000,
            )

        result = await self.process_receipt_text(answer, store_name)
        result.processing_time_ms = (time.time() - start_time) * 1000
        return result

    async def process_receipt_text(
        self,
        text: str,
        store_name: str = "Unknown Store",
    ) -> ReceiptScanResponse:
        """Import already-extracted receipt data (JSON array or plain text)."""
        start_time = time.time()
        parsed = parse_receipt_items(text)

        for item in parsed.items:
            self.inventory.add_item(item)

        rows = [
            ReceiptRow(
                item=item.name,
                price=item.price,
                date=parsed.receipt_date,
                email=self.settings.receipt_email,
            )
            for item in parsed.items
        ]

        sheet_synced = False
        sheet_error = None
        if rows:
            write = await self.sheets.append_receipt_rows(rows)
            sheet_synced = write.success
            sheet_error = write.error
            if not write.success:
                logger.warning(f"Failed to write receipt rows to sheet: {write.error}")

        return ReceiptScanResponse(
            success=True,
            receipt_title=f"{store_name}, {parsed.receipt_date}",
            receipt_date=parsed.receipt_date,
            items=parsed.items,
            items_added=len(parsed.items),
            parsed_as=parsed.parsed_as,
            sheet_synced=sheet_synced,
            sheet_error=sheet_error,
            raw_response=text,
            processing_time_ms=(time.time() - start_time) * 1000,
        )
