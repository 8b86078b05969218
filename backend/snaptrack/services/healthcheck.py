"""
Health check system.

Checks:
- API responsiveness
- Chat completions (OpenRouter)
- Product sheet (Google Sheets)
- In-memory inventory and price board
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

import httpx

from snaptrack.config import Settings, get_settings

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    """Health check status levels."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"
    UNKNOWN = "unknown"


@dataclass
class CheckResult:
    """Result of a single health check."""
    name: str
    status: HealthStatus
    message: str = ""
    latency_ms: float = 0
    details: dict = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.utcnow)


@dataclass
class HealthReport:
    """Complete health report for the system."""
    status: HealthStatus
    checks: list[CheckResult]
    timestamp: datetime = field(default_factory=datetime.utcnow)
    version: str = "0.1.0"

    @property
    def healthy_count(self) -> int:
        return sum(1 for c in self.checks if c.status == HealthStatus.HEALTHY)

    @property
    def total_count(self) -> int:
        return len(self.checks)

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "version": self.version,
            "timestamp": self.timestamp.isoformat(),
            "summary": f"{self.healthy_count}/{self.total_count} checks passing",
            "checks": [
                {
                    "name": c.name,
                    "status": c.status.value,
                    "message": c.message,
                    "latency_ms": round(c.latency_ms, 2),
                    "details": c.details,
                }
                for c in self.checks
            ]
        }


class HealthChecker:
    """Runs health checks against all system components."""

    def __init__(self, settings: Optional[Settings] = None, http: Optional[httpx.AsyncClient] = None):
        self.settings = settings or get_settings()
        self.http = http

    async def run_all_checks(self) -> HealthReport:
        """Run all health checks and return report."""
        checks = await asyncio.gather(
            self.check_api(),
            self.check_openrouter(),
            self.check_google_sheets(),
            return_exceptions=True,
        )

        # Convert exceptions to failed checks
        results = []
        for check in checks:
            if isinstance(check, Exception):
                results.append(CheckResult(
                    name="unknown",
                    status=HealthStatus.UNHEALTHY,
                    message=str(check),
                ))
            else:
                results.append(check)

        if all(c.status == HealthStatus.HEALTHY for c in results):
            overall = HealthStatus.HEALTHY
        else:
            overall = HealthStatus.DEGRADED

        return HealthReport(status=overall, checks=results)

    async def check_api(self) -> CheckResult:
        """Check API is responsive."""
        start = time.time()
        return CheckResult(
            name="api",
            status=HealthStatus.HEALTHY,
            message="API is responsive",
            latency_ms=(time.time() - start) * 1000,
        )

    async def check_openrouter(self) -> CheckResult:
        """Check the chat-completion endpoint is configured and reachable."""
        start = time.time()

        if not self.settings.llm_enabled:
            return CheckResult(
                name="openrouter",
                status=HealthStatus.DEGRADED,
                message="Not configured (OPENROUTER_API_KEY missing)",
                details={"enabled": False},
            )

        try:
            response = await self._get(f"{self.settings.openrouter_base_url}/models")
            latency = (time.time() - start) * 1000

            if response.status_code == 200:
                return CheckResult(
                    name="openrouter",
                    status=HealthStatus.HEALTHY,
                    message="API reachable",
                    latency_ms=latency,
                    details={"enabled": True},
                )
            return CheckResult(
                name="openrouter",
                status=HealthStatus.DEGRADED,
                message=f"API returned {response.status_code}",
                latency_ms=latency,
            )
        except httpx.HTTPError as e:
            return CheckResult(
                name="openrouter",
                status=HealthStatus.UNHEALTHY,
                message=f"API unreachable: {str(e)}",
                latency_ms=(time.time() - start) * 1000,
            )

    async def check_google_sheets(self) -> CheckResult:
        """Check the product sheet is configured and readable."""
        start = time.time()

        if not self.settings.sheets_enabled:
            return CheckResult(
                name="google_sheets",
                status=HealthStatus.DEGRADED,
                message="Not configured (sheet id or API key missing)",
                details={"enabled": False},
            )

        try:
            response = await self._get(
                f"{self.settings.sheets_base_url}/{self.settings.product_sheet_id}",
                params={"key": self.settings.google_sheets_api_key, "fields": "spreadsheetId"},
            )
            latency = (time.time() - start) * 1000

            if response.status_code == 200:
                return CheckResult(
                    name="google_sheets",
                    status=HealthStatus.HEALTHY,
                    message="Product sheet readable",
                    latency_ms=latency,
                    details={"enabled": True, "receipt_log": self.settings.receipt_sheet_enabled},
                )
            return CheckResult(
                name="google_sheets",
                status=HealthStatus.DEGRADED,
                message=f"Sheet returned {response.status_code}",
                latency_ms=latency,
            )
        except httpx.HTTPError as e:
            return CheckResult(
                name="google_sheets",
                status=HealthStatus.UNHEALTHY,
                message=f"Sheet unreachable: {str(e)}",
                latency_ms=(time.time() - start) * 1000,
            )

    async def _get(self, url: str, params: Optional[dict] = None) -> httpx.Response:
        if self.http is not None:
            return await self.http.get(url, params=params)
        async with httpx.AsyncClient(timeout=10.0) as client:
            return await client.get(url, params=params)
