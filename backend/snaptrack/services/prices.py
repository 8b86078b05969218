"""
Price comparison service.

Sorts and aggregates normalized price groups, extracts single-store prices
from comparison answers, and runs the batch "compare all" fan-out.
"""

import asyncio
import logging
import re
import time
from typing import Iterable, Optional

from snaptrack.config import Settings, get_settings
from snaptrack.models.grocery import GroceryItem
from snaptrack.models.prices import (
    CompareAllResponse,
    ComparisonFailure,
    PriceCompareResponse,
    PriceGroup,
    SortOption,
    StorePrice,
)
from snaptrack.services.ai import ChatService
from snaptrack.services.price_parser import (
    PriceDataParser,
    mark_best_deals,
    with_value_scores,
)

logger = logging.getLogger(__name__)

MAIN_PRICE_PATTERN = re.compile(r"\$\d+(\.\d{2})?")
UNIT_PRICE_PATTERN = re.compile(r"(\$\d+\.\d+)\s+per\s+([a-zA-Z0-9\s.]+)")
COMPARISON_PATTERN = re.compile(r"compared to\s+([^.]+)")
BRAND_PATTERN = re.compile(r"brand:\s+([^,.\n]+)", re.IGNORECASE)
SALE_KEYWORDS = ("sale", "discount", "special", "offer")


# =============================================================================
# Sorting
# =============================================================================


def sort_group(group: PriceGroup, option: SortOption = SortOption.PRICE_ASCENDING) -> PriceGroup:
    """
    Return a sorted copy of the group with best-deal flags recomputed.

    sorted() is stable, including with reverse=True, so records with equal
    keys keep their parsed order.
    """
    items = list(group.items)

    if option == SortOption.PRICE_ASCENDING:
        items = sorted(items, key=lambda item: item.price)
    elif option == SortOption.PRICE_DESCENDING:
        items = sorted(items, key=lambda item: item.price, reverse=True)
    elif option == SortOption.STORE_NAME:
        items = sorted(items, key=lambda item: item.store)
    elif option == SortOption.BEST_VALUE:
        items = sorted(items, key=lambda item: item.value_score, reverse=True)

    return PriceGroup(title=group.title, items=mark_best_deals(items))


def sort_groups(
    groups: Iterable[PriceGroup],
    option: SortOption = SortOption.PRICE_ASCENDING,
) -> list[PriceGroup]:
    return [sort_group(group, option) for group in groups]


# =============================================================================
# Aggregation
# =============================================================================


def item_key(name: str) -> str:
    """Identity key for an item name: case-folded, whitespace collapsed."""
    return " ".join(name.split()).casefold()


class PriceAggregator:
    """In-memory price board, one merged group per item identity."""

    def __init__(self):
        self._groups: dict[str, PriceGroup] = {}

    def merge(self, item_name: str, groups: Iterable[PriceGroup]) -> PriceGroup:
        """
        Fold the records of `groups` into the item's board entry.

        Value scores and best-deal flags are recomputed over the merged
        records.
        """
        key = item_key(item_name)
        existing = self._groups.get(key)

        records = list(existing.items) if existing else []
        for group in groups:
            records.extend(group.items)

        title = existing.title if existing else " ".join(item_name.split())
        merged = PriceGroup(
            title=title,
            items=mark_best_deals(with_value_scores(records)),
        )
        self._groups[key] = merged
        return merged

    def get(self, item_name: str) -> Optional[PriceGroup]:
        return self._groups.get(item_key(item_name))

    def groups(self, option: Optional[SortOption] = None) -> list[PriceGroup]:
        groups = list(self._groups.values())
        if option is not None:
            groups = sort_groups(groups, option)
        return groups

    def remove(self, item_name: str) -> bool:
        return self._groups.pop(item_key(item_name), None) is not None

    def clear(self):
        self._groups.clear()

    def __len__(self) -> int:
        return len(self._groups)

    def __contains__(self, item_name: str) -> bool:
        return item_key(item_name) in self._groups


# =============================================================================
# Single-store extraction
# =============================================================================


def extract_store_price(text: str, store: str) -> Optional[StorePrice]:
    """
    Pull the headline price for `store` out of a comparison answer.

    Returns None when the answer has no "$" amount at all.
    """
    price_match = MAIN_PRICE_PATTERN.search(text)
    if not price_match:
        return None

    lowered = text.lower()
    on_sale = any(keyword in lowered for keyword in SALE_KEYWORDS)

    unit_price = ""
    unit_match = UNIT_PRICE_PATTERN.search(text)
    if unit_match:
        unit_price = unit_match.group(0).strip()

    comparison = ""
    comparison_match = COMPARISON_PATTERN.search(text)
    if comparison_match:
        comparison = comparison_match.group(1).strip()

    brand = ""
    brand_match = BRAND_PATTERN.search(text)
    if brand_match:
        brand = brand_match.group(1).strip()

    return StorePrice(
        store=store,
        price=price_match.group(0),
        on_sale=on_sale,
        unit_price=unit_price,
        comparison=comparison,
        brand=brand,
        full_details=text.strip(),
    )


# =============================================================================
# Service
# =============================================================================


class PriceService:
    """Chat-backed price comparison feeding the aggregator."""

    def __init__(
        self,
        chat: ChatService,
        aggregator: Optional[PriceAggregator] = None,
        settings: Optional[Settings] = None,
    ):
        self.chat = chat
        self.aggregator = aggregator if aggregator is not None else PriceAggregator()
        self.settings = settings or get_settings()
        self.parser = PriceDataParser()

    @property
    def is_enabled(self) -> bool:
        return self.settings.feature_price_comparison and self.chat.is_enabled

    def parse(
        self,
        text: str,
        sort: SortOption = SortOption.PRICE_ASCENDING,
        item_name: Optional[str] = None,
    ) -> list[PriceGroup]:
        """Normalize raw text; optionally merge it into the board."""
        groups = sort_groups(self.parser.parse(text), sort)
        if item_name:
            self.aggregator.merge(item_name, groups)
        return groups

    async def compare_item(
        self,
        item: str,
        store: str,
        sort: SortOption = SortOption.PRICE_ASCENDING,
    ) -> PriceCompareResponse:
        """Ask the chat service about one item at one store."""
        start_time = time.time()

        try:
            response = await self.chat.compare_price(item, store)
        except Exception as e:
            logger.error(f"Price comparison failed for {item} at {store}: {e}")
            return PriceCompareResponse(
                success=False,
                item=item,
                store=store,
                error=str(e),
                lookup_time_ms=(time.time() - start_time) * 1000,
            )

        groups = self.parse(response, sort=sort, item_name=item)
        store_price = extract_store_price(response, store)
        if store_price is None:
            logger.warning(f"No price found in comparison answer for {item} at {store}")

        return PriceCompareResponse(
            success=True,
            item=item,
            store=store,
            store_price=store_price,
            groups=groups,
            raw_response=response,
            lookup_time_ms=(time.time() - start_time) * 1000,
        )

    async def compare_all(
        self,
        items: list[GroceryItem],
        store: str,
        sort: SortOption = SortOption.PRICE_ASCENDING,
        limit: Optional[int] = None,
    ) -> CompareAllResponse:
        """
        Compare the first `limit` items concurrently and join the results.

        Requests run under a semaphore of compare_all_concurrency; failed
        items are collected instead of aborting the batch.
        """
        start_time = time.time()
        batch = items[: limit or self.settings.compare_all_limit]
        semaphore = asyncio.Semaphore(max(1, self.settings.compare_all_concurrency))

        async def run(item: GroceryItem) -> PriceCompareResponse:
            async with semaphore:
                return await self.compare_item(item.name, store, sort)

        outcomes = await asyncio.gather(
            *(run(item) for item in batch),
            return_exceptions=True,
        )

        results = []
        failures = []
        for item, outcome in zip(batch, outcomes):
            if isinstance(outcome, Exception):
                logger.error(f"Batch price comparison failed for {item.name}: {outcome}")
                failures.append(ComparisonFailure(item=item.name, error=str(outcome)))
            elif not outcome.success:
                failures.append(ComparisonFailure(item=item.name, error=outcome.error or "unknown error"))
            else:
                results.append(outcome)

        logger.info(
            f"Compared {len(batch)} item(s) at {store}: "
            f"{len(results)} succeeded, {len(failures)} failed"
        )

        return CompareAllResponse(
            store=store,
            total_requested=len(batch),
            succeeded=len(results),
            failed=len(failures),
            results=results,
            failures=failures,
            lookup_time_ms=(time.time() - start_time) * 1000,
        )
