"""
In-memory grocery inventory.

Items live for the lifetime of the process; the client keeps its own copy.
"""

import logging
from typing import Optional

from snaptrack.models.grocery import GroceryItem

logger = logging.getLogger(__name__)

MAX_RECENT_SCANS = 5


class InventoryService:
    """Grocery inventory keyed by case-insensitive item name."""

    def __init__(self, items: Optional[list[GroceryItem]] = None):
        self.items: list[GroceryItem] = list(items or [])
        self.recent_scans: list[GroceryItem] = []

    def add_item(self, item: GroceryItem) -> GroceryItem:
        """
        Add an item, or bump the quantity of an existing one with the same name.

        Returns the stored item.
        """
        existing = self._find_by_name(item.name)
        if existing is not None:
            index, current = existing
            stored = current.model_copy(update={"quantity": current.quantity + item.quantity})
            self.items[index] = stored
            logger.debug(f"Merged {item.name} into inventory (qty {stored.quantity})")
        else:
            stored = item
            self.items.append(stored)
            logger.debug(f"Added {item.name} to inventory")

        self.recent_scans.insert(0, item)
        del self.recent_scans[MAX_RECENT_SCANS:]
        return stored

    def add_items(self, items: list[GroceryItem]) -> list[GroceryItem]:
        return [self.add_item(item) for item in items]

    def update_item(self, item: GroceryItem) -> bool:
        """Replace the item with the same id. Returns False if it isn't stored."""
        for index, current in enumerate(self.items):
            if current.id == item.id:
                self.items[index] = item
                return True
        return False

    def get_item(self, item_id: str) -> Optional[GroceryItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def list_items(self, limit: Optional[int] = None) -> list[GroceryItem]:
        items = list(self.items)
        return items[:limit] if limit is not None else items

    def _find_by_name(self, name: str) -> Optional[tuple[int, GroceryItem]]:
        lowered = name.lower()
        for index, item in enumerate(self.items):
            if item.name.lower() == lowered:
                return index, item
        return None

    def __len__(self) -> int:
        return len(self.items)
