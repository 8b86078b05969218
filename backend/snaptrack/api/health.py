"""Health check endpoints."""

import platform
from datetime import datetime

import psutil
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from snaptrack.api.deps import get_health_checker
from snaptrack.services.healthcheck import HealthChecker, HealthStatus

router = APIRouter()

# Checks that must pass before traffic is accepted
CRITICAL_CHECKS = ("api",)


@router.get("/health")
async def health_check():
    """Basic health check."""
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
    }


@router.get("/health/detailed")
async def detailed_health():
    """Detailed health check with system info."""
    memory = psutil.virtual_memory()
    disk = psutil.disk_usage("/")

    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "system": {
            "platform": platform.system(),
            "machine": platform.machine(),
            "python": platform.python_version(),
        },
        "cpu": {
            "percent": psutil.cpu_percent(interval=0.1),
            "cores": psutil.cpu_count(),
        },
        "memory": {
            "used_gb": round(memory.used / (1024**3), 2),
            "total_gb": round(memory.total / (1024**3), 2),
            "percent": memory.percent,
        },
        "disk": {
            "used_gb": round(disk.used / (1024**3), 2),
            "total_gb": round(disk.total / (1024**3), 2),
            "percent": disk.percent,
        },
    }


@router.get("/health/services")
async def services_health(checker: HealthChecker = Depends(get_health_checker)):
    """
    Health of every upstream service.

    Checks:
    - API responsiveness
    - Chat completions (OpenRouter)
    - Product sheet (Google Sheets)
    """
    report = await checker.run_all_checks()
    return report.to_dict()


@router.get("/health/ready")
async def readiness_check(checker: HealthChecker = Depends(get_health_checker)):
    """
    Readiness check.

    Returns 503 if a critical check fails. Unconfigured upstreams only
    degrade the report.
    """
    report = await checker.run_all_checks()

    critical_healthy = all(
        c.status == HealthStatus.HEALTHY
        for c in report.checks
        if c.name in CRITICAL_CHECKS
    )

    if critical_healthy:
        return {"ready": True, "status": report.status.value}
    return JSONResponse(status_code=503, content={"ready": False, "status": report.status.value})


@router.get("/health/live")
async def liveness_check():
    """Returns 200 while the process can respond."""
    return {"live": True, "timestamp": datetime.utcnow().isoformat()}
