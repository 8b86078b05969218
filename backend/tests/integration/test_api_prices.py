"""
Integration tests for the prices, inventory and sheets APIs.
"""

import pytest
import httpx

from snaptrack.api.deps import get_inventory_service, get_price_service, get_sheets_service
from snaptrack.services.inventory import InventoryService
from snaptrack.services.prices import PriceAggregator, PriceService
from snaptrack.services.sheets import SheetsService


@pytest.fixture
def price_service(app, mock_chat, test_settings):
    service = PriceService(mock_chat, PriceAggregator(), test_settings)
    app.dependency_overrides[get_price_service] = lambda: service
    return service


class TestParseEndpoint:
    """Tests for POST /api/prices/parse"""

    @pytest.mark.integration
    def test_parse(self, client, sample_price_text):
        response = client.post("/api/prices/parse", json={"text": sample_price_text})

        assert response.status_code == 200
        data = response.json()
        assert data["group_count"] == 2
        assert data["record_count"] == 6
        assert data["sort"] == "price_ascending"

        milk = data["groups"][0]
        assert milk["title"] == "Whole Milk (1 gallon)"
        assert [r["store"] for r in milk["items"]] == ["Aldi", "Trader Joe's", "Safeway"]
        assert milk["items"][0]["is_best_deal"] is True

    @pytest.mark.integration
    def test_parse_sorted_by_store(self, client, sample_price_text):
        response = client.post("/api/prices/parse?sort=store_name", json={"text": sample_price_text})

        stores = [r["store"] for r in response.json()["groups"][1]["items"]]
        assert stores == sorted(stores)

    @pytest.mark.integration
    def test_parse_invalid_sort(self, client):
        response = client.post("/api/prices/parse?sort=cheapest", json={"text": "x"})
        assert response.status_code == 422

    @pytest.mark.integration
    def test_parse_into_board(self, client, sample_price_text):
        client.post("/api/prices/parse", json={"text": sample_price_text, "item_name": "Milk"})

        board = client.get("/api/prices/board").json()
        assert board["group_count"] == 1
        assert board["record_count"] == 6

        group = client.get("/api/prices/board/milk")
        assert group.status_code == 200
        assert group.json()["title"] == "Milk"

        assert client.get("/api/prices/board/eggs").status_code == 404

        client.delete("/api/prices/board")
        assert client.get("/api/prices/board").json()["group_count"] == 0


class TestSortEndpoint:
    """Tests for POST /api/prices/sort"""

    @pytest.mark.integration
    def test_sort_descending(self, client, sample_price_text):
        parsed = client.post("/api/prices/parse", json={"text": sample_price_text}).json()

        response = client.post(
            "/api/prices/sort?sort=price_descending",
            json={"groups": parsed["groups"]},
        )

        milk = response.json()["groups"][0]["items"]
        assert [r["store"] for r in milk] == ["Safeway", "Trader Joe's", "Aldi"]
        assert milk[2]["is_best_deal"] is True

    @pytest.mark.integration
    @pytest.mark.parametrize("record", [
        {"store": "Aldi", "price": "-1.00", "price_found": True},
        {"store": "Aldi", "price": "2.00", "value_score": "-5", "price_found": True},
    ])
    def test_sort_rejects_negative_values(self, client, record):
        response = client.post(
            "/api/prices/sort?sort=best_value",
            json={"groups": [{"title": "Milk", "items": [record]}]},
        )
        assert response.status_code == 422


class TestCompareEndpoints:
    """Tests for GET /api/prices/compare and POST /api/prices/compare-all"""

    @pytest.mark.integration
    def test_compare_disabled(self, client):
        response = client.get("/api/prices/compare", params={"item": "Milk", "store": "Aldi"})
        assert response.status_code == 503

    @pytest.mark.integration
    def test_compare(self, client, price_service, mock_chat, sample_compare_answer):
        mock_chat.compare_price.return_value = sample_compare_answer

        response = client.get("/api/prices/compare", params={"item": "Bananas", "store": "Trader Joe's"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["store_price"]["price"] == "$0.25"
        assert data["store_price"]["on_sale"] is True

    @pytest.mark.integration
    def test_compare_requires_item(self, client, price_service):
        response = client.get("/api/prices/compare", params={"store": "Aldi"})
        assert response.status_code == 422

    @pytest.mark.integration
    def test_compare_all(self, app, client, price_service, mock_chat):
        inventory = InventoryService()
        app.dependency_overrides[get_inventory_service] = lambda: inventory
        mock_chat.compare_price.return_value = "- at Aldi: $1.99"

        for name in ("Milk", "Eggs"):
            client.post("/api/inventory", json={"name": name})

        response = client.post("/api/prices/compare-all", json={"store": "Aldi"})

        assert response.status_code == 200
        data = response.json()
        assert data["total_requested"] == 2
        assert data["succeeded"] == 2
        assert data["failures"] == []

    @pytest.mark.integration
    def test_stores(self, client):
        response = client.get("/api/prices/stores")
        assert "Aldi" in response.json()["stores"]


class TestInventoryEndpoints:
    """Tests for /api/inventory"""

    @pytest.mark.integration
    def test_add_get_update(self, client):
        created = client.post("/api/inventory", json={"name": "Eggs", "price": "4.19"}).json()

        fetched = client.get(f"/api/inventory/{created['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["name"] == "Eggs"

        updated = client.put(
            f"/api/inventory/{created['id']}",
            json={**created, "quantity": 12},
        )
        assert updated.status_code == 200
        assert updated.json()["quantity"] == 12

        listing = client.get("/api/inventory").json()
        assert listing["item_count"] == 1

        recent = client.get("/api/inventory/recent").json()
        assert recent["items"][0]["name"] == "Eggs"

    @pytest.mark.integration
    def test_missing_item(self, client):
        assert client.get("/api/inventory/nope").status_code == 404
        assert client.put("/api/inventory/nope", json={"name": "Ghost"}).status_code == 404

    @pytest.mark.integration
    def test_add_requires_name(self, client):
        assert client.post("/api/inventory", json={"name": ""}).status_code == 422


class TestSheetsEndpoints:
    """Tests for /api/sheets"""

    @pytest.fixture
    def sheets(self, app, test_settings, sample_sheet_values):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=sample_sheet_values))
        service = SheetsService(test_settings, http=httpx.AsyncClient(transport=transport))
        app.dependency_overrides[get_sheets_service] = lambda: service
        return service

    @pytest.mark.integration
    def test_disabled(self, client):
        assert client.get("/api/sheets/products").status_code == 503

    @pytest.mark.integration
    def test_products(self, client, sheets):
        data = client.get("/api/sheets/products").json()
        assert data["success"] is True
        assert data["count"] == 3

    @pytest.mark.integration
    def test_compare(self, client, sheets):
        data = client.get("/api/sheets/compare", params={"item": "milk"}).json()
        assert data["success"] is True
        assert data["group"]["items"]

    @pytest.mark.integration
    def test_lookup(self, client, sheets):
        response = client.get("/api/sheets/lookup", params={"store": "Aldi", "name": "milk"})
        assert response.status_code == 200
        assert response.json()["brand"] == "Friendly Farms"

        assert client.get("/api/sheets/lookup", params={"store": "Aldi"}).status_code == 400
        assert client.get("/api/sheets/lookup", params={"store": "Aldi", "name": "tofu"}).status_code == 404

    @pytest.mark.integration
    def test_stores_and_categories(self, client, sheets):
        assert client.get("/api/sheets/stores").json()["stores"] == ["Aldi", "Giant", "Trader Joe's"]
        assert client.get("/api/sheets/categories").json()["total"] == 3
