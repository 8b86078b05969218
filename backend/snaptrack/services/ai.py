"""Chat-completion service - OpenRouter (OpenAI wire format) for barcode, receipt and price queries."""

import base64
import io
import logging
from typing import Optional

from openai import AsyncOpenAI
from PIL import Image

from snaptrack.config import Settings, get_settings

logger = logging.getLogger(__name__)

RECEIPT_CATEGORIES = [
    "Baby Care", "Baked Goods", "Beans", "Beverages", "Bread", "Breakfast",
    "Canned Goods", "Cereal", "Dairy", "Dessert", "Fresh Fruit", "Fresh Vegetable",
    "Frozen Food", "Grains", "Household Items", "Meat", "Pantry", "Pasta",
    "Salad", "Seafood", "Snacks", "Sauce", "Chips", "Cheese", "Deli Meats",
    "Coffee", "Butter", "Cleaning products", "Soap", "Eggs", "Milk", "Oil",
    "Chicken", "Yogurt", "Unknown", "Other",
]


class ChatResponseError(Exception):
    """Chat completion came back without message content."""


def encode_image_jpeg(image_bytes: bytes, quality: int = 80) -> str:
    """Re-encode any supported image as base64 JPEG."""
    image = Image.open(io.BytesIO(image_bytes))

    # Convert to RGB if necessary (handles RGBA, grayscale, etc.)
    if image.mode != "RGB":
        image = image.convert("RGB")

    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=quality)
    return base64.b64encode(buffer.getvalue()).decode()


def extract_json_array(content: str) -> str:
    """Return the text between the first "[" and the last "]", or everything."""
    start = content.find("[")
    end = content.rfind("]")
    if start != -1 and end > start:
        return content[start:end + 1]
    logger.warning("Couldn't find a JSON array in the receipt response, returning full text")
    return content


class ChatService:
    """OpenRouter-backed chat completions for snaptrack."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.settings = settings or get_settings()
        self.client = client

        if self.client is None and self.settings.llm_enabled:
            self.client = AsyncOpenAI(
                api_key=self.settings.openrouter_api_key,
                base_url=self.settings.openrouter_base_url,
                timeout=self.settings.llm_timeout_seconds,
            )
        elif self.client is None:
            logger.warning("Chat service is disabled (OPENROUTER_API_KEY not set)")

    @property
    def is_enabled(self) -> bool:
        return self.client is not None

    async def close(self):
        if self.client is not None:
            await self.client.close()

    async def lookup_barcode(self, barcode: str) -> str:
        """Describe the product behind a scanned barcode."""
        prompt = f"""I have scanned a barcode: {barcode}. Please search for information about this product.
Return the product's:
- Name
- Category
- Normal price range
- Nutritional information (if available)
- Any other relevant details

Put each field on its own line as "Label: value" so a grocery app can read it."""

        content = await self._complete(
            model=self.settings.barcode_model,
            messages=[{"role": "user", "content": prompt}],
        )
        logger.info(f"Barcode lookup answered for {barcode} ({len(content)} chars)")
        return content

    async def scan_receipt(self, image_bytes: bytes, mime_type: str = "image/jpeg") -> str:
        """
        Extract grocery line items from a receipt photo.

        Returns the JSON array part of the answer when there is one,
        otherwise the raw answer for the text fallback parser.
        """
        encoded = encode_image_jpeg(image_bytes)
        if mime_type != "image/jpeg":
            logger.debug(f"Receipt image re-encoded from {mime_type} to image/jpeg")

        prompt = f"""You are an expert receipt scanner for a grocery tracking app.
Extract ALL grocery items with their prices from this receipt photo.

Return a JSON array in exactly this format:
[
  {{
    "name": "Item name",
    "price": price as number,
    "quantity": quantity as number,
    "category": "Best guess category",
    "price_per_unit": price_per_unit as number,
    "date": "purchase date as MM/DD/YYYY"
  }}
]

Categories should be one of: {", ".join(RECEIPT_CATEGORIES)}

Only include actual grocery items, not totals, taxes, or store information.
price_per_unit is price divided by quantity; assume quantity 1 when it is missing.
For items sold by weight, include the unit (lb, oz, g) in the price per unit.
Use the purchase date printed on the receipt; if there is none, use today's date."""

        content = await self._complete(
            model=self.settings.receipt_model,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {
                            "type": "image_url",
                            "image_url": {"url": f"data:image/jpeg;base64,{encoded}"},
                        },
                    ],
                }
            ],
        )
        return extract_json_array(content)

    async def compare_price(self, item: str, store: str) -> str:
        """Ask for current pricing of an item at a store."""
        prompt = f"""I want to compare the price of {item} at {store}.
Please provide:
1. Current price at {store}
2. Whether it's on sale or regular price
3. Unit price (per oz, lb, etc.) if available
4. Brand information
5. Comparison to prices at other major stores
6. Any special deals or promotions

Format each store on its own line as "- at STORE: $PRICE per UNIT".
Separate sections with a line containing only ---."""

        return await self._complete(
            model=self.settings.price_model,
            messages=[{"role": "user", "content": prompt}],
        )

    async def _complete(self, model: str, messages: list[dict], **kwargs) -> str:
        """Run one chat completion and return choices[0].message.content."""
        if self.client is None:
            raise ChatResponseError("Chat service is not configured")

        response = await self.client.chat.completions.create(
            model=model,
            messages=messages,
            **kwargs,
        )

        if not response.choices:
            raise ChatResponseError(f"No choices in response from {model}")

        content = response.choices[0].message.content
        if not content:
            raise ChatResponseError(f"Empty message content from {model}")

        return content
