"""
Free-text price data normalizer.

Turns loosely structured price answers (chat completions, OCR transcripts)
into PriceGroup/PriceRecord values. Typical input:

    ### Whole Milk
    - at Trader Joe's: $3.99 per gallon
    - at Aldi: $2.89 per gallon
    ---
    **Eggs**
    - Walmart: $4.49 per 18 ct

Parsing is best-effort and first-match-wins: every non-blank line that is
not a section title becomes a record, even when nothing could be extracted
from it, so the client can show it for manual correction. Nothing in this
module raises on unexpected text.
"""

import logging
import re
from decimal import Decimal
from typing import Iterable

from snaptrack.models.prices import (
    DEFAULT_SECTION_TITLE,
    UNKNOWN_STORE,
    PriceGroup,
    PriceRecord,
)

logger = logging.getLogger(__name__)

SECTION_SEPARATOR = "---"
TITLE_MARKERS = ("**", "#", "Category:")
WEIGHT_TOKENS = ("oz", "pound", "lb")  # Case-sensitive substring match

PRICE_PATTERN = re.compile(r"\$(\d+\.?\d*)")
STORE_PATTERN = re.compile(r"\bat ([A-Za-z][A-Za-z\s&'’.\-]*):")
UNIT_PATTERN = re.compile(r"per ([a-zA-Z0-9\s.]+)")
AMOUNT_PATTERN = re.compile(r"(\d+\.?\d*)")

ZERO = Decimal("0")


# =============================================================================
# Value Score & Best Deal
# =============================================================================


def compute_value_score(price: Decimal, unit: str) -> Decimal:
    """
    Higher-is-better comparability score for one record.

    Weight/volume units with a leading amount ("16 oz") score amount / price,
    everything else scores 1 / price. A zero price scores 0.

    Note: the two branches are not on a common scale and "lb" vs "oz" are
    never cross-converted, so a group mixing both kinds of unit sorts by
    best value only approximately.
    """
    if price <= ZERO:
        return ZERO

    if any(token in unit for token in WEIGHT_TOKENS):
        match = AMOUNT_PATTERN.search(unit)
        if match:
            return Decimal(match.group(1)) / price

    return Decimal("1") / price


def mark_best_deals(items: Iterable[PriceRecord]) -> list[PriceRecord]:
    """
    Flag every record holding the group's minimum price.

    Records without a parsed price never take part, so an unparsed line
    (price 0) cannot win. This deliberately departs from a plain minimum
    over every record, where any price-0 line would take the flag.
    Ties are all flagged. Returns new records.
    """
    items = list(items)
    priced = [item.price for item in items if item.price_found]
    best_price = min(priced) if priced else None

    return [
        item.model_copy(
            update={"is_best_deal": best_price is not None and item.price_found and item.price == best_price}
        )
        for item in items
    ]


def with_value_scores(items: Iterable[PriceRecord]) -> list[PriceRecord]:
    """Recompute the value score of each record."""
    return [
        item.model_copy(update={"value_score": compute_value_score(item.price, item.unit)})
        for item in items
    ]


# =============================================================================
# Parser
# =============================================================================


def clean_title(line: str) -> str:
    """Strip markdown heading/emphasis markers and the "Category:" label."""
    return (
        line.replace("#", "")
        .replace("*", "")
        .replace("Category:", "")
        .strip()
    )


def parse_line(line: str) -> PriceRecord:
    """
    Parse one line into a PriceRecord.

    Store: "at <name>:" first, otherwise the text before the first colon.
    Price: the first "$<number>". Unit: the first "per <words>".
    Missing fields fall back to defaults and are reported through
    store_found / price_found.
    """
    store = UNKNOWN_STORE
    store_found = False

    store_match = STORE_PATTERN.search(line)
    if store_match:
        candidate = store_match.group(1).strip()
    elif ":" in line:
        candidate = line.split(":", 1)[0].strip().lstrip("-").strip()
    else:
        candidate = ""

    if candidate:
        store = candidate
        store_found = True

    price = ZERO
    price_text = ""
    price_match = PRICE_PATTERN.search(line)
    if price_match:
        price_text = price_match.group(1)
        price = Decimal(price_text)

    unit = ""
    unit_match = UNIT_PATTERN.search(line)
    if unit_match:
        unit = unit_match.group(1).strip()

    # Description is whatever is left; lossy by nature
    description = line.replace("- ", "").strip()
    description = STORE_PATTERN.sub("", description)
    if store_found:
        description = description.replace(store, "")
    description = description.replace(": ", "")
    if price_text:
        description = description.replace(f"${price_text}", "")
    description = description.strip()

    return PriceRecord(
        store=store,
        description=description,
        price=price,
        unit=unit,
        value_score=compute_value_score(price, unit),
        store_found=store_found,
        price_found=price_match is not None,
        raw_text=line.strip(),
    )


class PriceDataParser:
    """Splits free text into titled sections and parses each line."""

    def parse(self, data: str) -> list[PriceGroup]:
        """Parse a free-text blob into zero or more price groups."""
        sections = [
            section for section in data.split(SECTION_SEPARATOR)
            if section.strip()
        ]

        groups = [self.parse_section(section) for section in sections]
        logger.debug(
            f"Parsed {len(groups)} price group(s), "
            f"{sum(len(g.items) for g in groups)} record(s)"
        )
        return groups

    def parse_section(self, section_text: str) -> PriceGroup:
        """Parse one "---"-delimited section."""
        lines = [line for line in section_text.splitlines() if line.strip()]

        title_index = self._find_title_index(lines)
        if title_index is None:
            title = DEFAULT_SECTION_TITLE
        else:
            title = clean_title(lines[title_index]) or DEFAULT_SECTION_TITLE

        items = [
            parse_line(line)
            for index, line in enumerate(lines)
            if index != title_index
        ]

        unparsed = sum(1 for item in items if not item.price_found)
        if unparsed:
            logger.debug(f"Section '{title}': {unparsed} line(s) without a price")

        return PriceGroup(title=title, items=mark_best_deals(items))

    def _find_title_index(self, lines: list[str]) -> int | None:
        for index, line in enumerate(lines):
            if any(marker in line for marker in TITLE_MARKERS):
                return index
        return None


_parser = PriceDataParser()


def parse_price_data(data: str) -> list[PriceGroup]:
    """Module-level shortcut for PriceDataParser().parse()."""
    return _parser.parse(data)
