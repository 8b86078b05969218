"""
snaptrack: FastAPI backend for grocery price tracking.

Run with: uvicorn snaptrack.main:app --reload

Architecture:
- Normalizes free-text price answers into sorted, scored price groups
- Keeps a best-deal board per item across comparisons
- Reads the product sheet and logs scanned receipts to the receipt sheet
- Barcode lookup and receipt scanning go through OpenRouter chat models
"""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from snaptrack.config import get_settings
from snaptrack.api import health
from snaptrack.api import barcode as barcode_api
from snaptrack.api import inventory as inventory_api
from snaptrack.api import prices as prices_api
from snaptrack.api import receipts as receipts_api
from snaptrack.api import sheets as sheets_api
from snaptrack.services.ai import ChatService
from snaptrack.services.barcode import BarcodeService
from snaptrack.services.healthcheck import HealthChecker
from snaptrack.services.inventory import InventoryService
from snaptrack.services.prices import PriceAggregator, PriceService
from snaptrack.services.receipts import ReceiptService
from snaptrack.services.sheets import SheetsService

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    logger.info("Starting snaptrack backend...")

    chat = ChatService(settings)
    sheets = SheetsService(settings)
    inventory = InventoryService()
    health_http = httpx.AsyncClient(timeout=10.0)

    app.state.chat_service = chat
    app.state.sheets_service = sheets
    app.state.inventory_service = inventory
    app.state.price_service = PriceService(chat, PriceAggregator(), settings)
    app.state.barcode_service = BarcodeService(chat, inventory, settings)
    app.state.receipt_service = ReceiptService(chat, inventory, sheets, settings)
    app.state.health_checker = HealthChecker(settings, health_http)

    if not chat.is_enabled:
        logger.warning("OPENROUTER_API_KEY not set - barcode, receipt and price lookups are disabled")
    if not sheets.is_enabled:
        logger.warning("Product sheet not configured - /api/sheets is disabled")
    logger.info("Services initialized")

    yield

    # Shutdown
    logger.info("Shutting down snaptrack backend...")
    await chat.close()
    await sheets.close()
    await health_http.aclose()


app = FastAPI(
    title="snaptrack",
    description="Grocery price comparison, barcode lookup and receipt scanning API",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS - allow frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(prices_api.router)  # /api/prices
app.include_router(barcode_api.router)  # /api/barcode
app.include_router(receipts_api.router)  # /api/receipts
app.include_router(inventory_api.router)  # /api/inventory
app.include_router(sheets_api.router)  # /api/sheets


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "snaptrack",
        "version": "0.1.0",
        "description": "Grocery price comparison API with barcode lookup and receipt scanning",
        "docs": "/docs",
        "endpoints": {
            "health": "/health",
            "prices": "/api/prices",
            "barcode": "/api/barcode",
            "receipts": "/api/receipts",
            "inventory": "/api/inventory",
            "sheets": "/api/sheets",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "snaptrack.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=not settings.is_production,
    )
