"""Configuration management for snaptrack."""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    environment: str = "development"
    log_level: str = "info"

    # OpenRouter (OpenAI-compatible chat completions)
    openrouter_api_key: str | None = None
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    barcode_model: str = "perplexity/r1-1776"
    receipt_model: str = "google/gemini-2.0-pro-exp-02-05:free"
    price_model: str = "perplexity/r1-1776"
    llm_timeout_seconds: float = 60.0

    # Google Sheets
    google_sheets_api_key: str | None = None
    sheets_base_url: str = "https://sheets.googleapis.com/v4/spreadsheets"
    product_sheet_id: str | None = None
    product_sheet_range: str = "GrocerySKUs-Testing!A:H"  # store..link
    receipt_sheet_id: str | None = None
    receipt_sheet_range: str = "ReceiptData!A:D"  # item, price, date, email
    receipt_email: str = "user@example.com"
    sheets_timeout_seconds: float = 15.0

    # Price comparison
    default_stores: list[str] = ["Trader Joe's", "Aldi", "Giant", "Safeway", "Publix"]
    compare_all_limit: int = 5
    compare_all_concurrency: int = 5

    # Feature Flags
    feature_barcode_lookup: bool = True
    feature_receipt_ocr: bool = True
    feature_price_comparison: bool = True

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def llm_enabled(self) -> bool:
        """Check if the chat-completion service is configured."""
        return bool(self.openrouter_api_key)

    @property
    def sheets_enabled(self) -> bool:
        """Check if the product sheet is configured."""
        return bool(self.google_sheets_api_key) and self.product_sheet_id is not None

    @property
    def receipt_sheet_enabled(self) -> bool:
        return bool(self.google_sheets_api_key) and self.receipt_sheet_id is not None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
