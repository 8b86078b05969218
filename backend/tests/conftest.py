"""
Pytest configuration and shared fixtures.

Fixtures defined here are available to all tests.
"""

import os
import sys
import pytest
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, AsyncMock

# Add backend to path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Set test environment
os.environ["TESTING"] = "true"


# =============================================================================
# App Fixtures
# =============================================================================


@pytest.fixture
def app():
    """FastAPI test application."""
    from snaptrack.main import app
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """Sync test client for API tests; runs the lifespan so app.state is populated."""
    from fastapi.testclient import TestClient
    with TestClient(app) as client:
        yield client


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def test_settings():
    """Settings with every upstream configured and no .env file."""
    from snaptrack.config import Settings
    return Settings(
        _env_file=None,
        openrouter_api_key="test-openrouter-key",
        google_sheets_api_key="test-sheets-key",
        product_sheet_id="product-sheet",
        receipt_sheet_id="receipt-sheet",
        receipt_email="shopper@example.com",
    )


@pytest.fixture
def disabled_settings():
    """Settings with no upstream configured."""
    from snaptrack.config import Settings
    return Settings(_env_file=None)


# =============================================================================
# Mock Service Fixtures
# =============================================================================


@pytest.fixture
def mock_chat():
    """Mock chat service that is configured and answers nothing by default."""
    from snaptrack.services.ai import ChatService
    mock = MagicMock(spec=ChatService)
    mock.is_enabled = True
    mock.lookup_barcode = AsyncMock(return_value="")
    mock.scan_receipt = AsyncMock(return_value="[]")
    mock.compare_price = AsyncMock(return_value="")
    return mock


@pytest.fixture
def mock_sheets():
    """Mock sheets service whose receipt writes succeed."""
    from snaptrack.models.sheets import SheetWriteResponse
    from snaptrack.services.sheets import SheetsService
    mock = MagicMock(spec=SheetsService)
    mock.is_enabled = True
    mock.append_receipt_rows = AsyncMock(
        side_effect=lambda rows: SheetWriteResponse(success=True, rows_written=len(rows))
    )
    return mock


@pytest.fixture
def inventory():
    """Empty in-memory inventory."""
    from snaptrack.services.inventory import InventoryService
    return InventoryService()


def make_completion(content):
    """Build an object shaped like an openai chat completion."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )


@pytest.fixture
def completion():
    return make_completion


# =============================================================================
# Sample Data Fixtures
# =============================================================================


@pytest.fixture
def sample_price_text():
    """Two-section price comparison answer."""
    return """### Whole Milk (1 gallon)
- at Trader Joe's: $3.99 per gallon
- at Aldi: $2.89 per gallon
- at Safeway: $4.29 per gallon
---
**Ground Coffee**
- at Trader Joe's: $8.99 per 16 oz
- at Giant: $7.49 per 12 oz
- Publix: $9.99 per 16 oz
"""


@pytest.fixture
def sample_compare_answer():
    """Single-store comparison answer."""
    return """**Bananas at Trader Joe's**
- at Trader Joe's: $0.25 per banana
- at Aldi: $0.22 per banana
- at Safeway: $0.35 per banana
Currently on sale at Trader Joe's. Brand: Trader Joe's Organic, grown in Ecuador.
The unit price is $0.25 per banana, compared to Safeway at 35 cents.
"""


@pytest.fixture
def sample_receipt_json():
    """Receipt answer in the JSON array format."""
    return """```json
[
  {"name": "Greek Yogurt", "price": 3.69, "quantity": 2, "category": "Yogurt", "price_per_unit": 1.85, "date": "03/14/2025"},
  {"name": "Strawberries", "price": "5.69", "quantity": 1, "category": "Fresh Fruit"},
  {"name": "Raw Honey", "price": 6.79}
]
```"""


@pytest.fixture
def sample_barcode_answer():
    """Barcode lookup answer."""
    return """**Cheerios Original Cereal**
- **Name:** Cheerios Original
- **Category:** Breakfast Cereal
- **Normal price range:** $3.99 - $5.49
- **Nutritional information:** 140 calories per serving
"""


@pytest.fixture
def sample_sheet_values():
    """Sheets values API payload for the product sheet."""
    return {
        "range": "GrocerySKUs-Testing!A1:H6",
        "majorDimension": "ROWS",
        "values": [
            ["Store", "Item", "Category", "Brand", "Price", "Quantity", "Price per unit", "Link"],
            ["Aldi", "Whole Milk", "Dairy", "Friendly Farms", "$2.89", "1 gallon", "$2.89/gal", "https://aldi.us/milk"],
            ["Trader Joe's", "Whole Milk", "Dairy", "Trader Joe's", "$3.99", "1 gallon", "$3.99/gal"],
            ["Giant", "Ground Coffee", "", "Giant", "$7.49", "12 oz", "$0.62/oz"],
            ["Safeway", "Eggs"],
            ["", "Orphan Item", "Other", "", "$1.00", "1", "$1.00"],
        ],
    }


# =============================================================================
# Utility Fixtures
# =============================================================================


@pytest.fixture
def temp_image(tmp_path):
    """Create a temporary test image."""
    from PIL import Image

    img = Image.new('RGBA', (100, 100), color='white')
    img_path = tmp_path / "test_receipt.png"
    img.save(img_path)

    return img_path


@pytest.fixture
def image_bytes(temp_image):
    """Get image as bytes."""
    return temp_image.read_bytes()
