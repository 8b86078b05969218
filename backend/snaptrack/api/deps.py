"""
Common dependencies for API endpoints.

Services are built once in the application lifespan and stored on
app.state; routes receive them through these dependencies.
"""

from fastapi import Request

from snaptrack.services.barcode import BarcodeService
from snaptrack.services.healthcheck import HealthChecker
from snaptrack.services.inventory import InventoryService
from snaptrack.services.prices import PriceService
from snaptrack.services.receipts import ReceiptService
from snaptrack.services.sheets import SheetsService


def get_price_service(request: Request) -> PriceService:
    return request.app.state.price_service


def get_inventory_service(request: Request) -> InventoryService:
    return request.app.state.inventory_service


def get_barcode_service(request: Request) -> BarcodeService:
    return request.app.state.barcode_service


def get_receipt_service(request: Request) -> ReceiptService:
    return request.app.state.receipt_service


def get_sheets_service(request: Request) -> SheetsService:
    return request.app.state.sheets_service


def get_health_checker(request: Request) -> HealthChecker:
    return request.app.state.health_checker
