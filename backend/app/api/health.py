from fastapi import APIRouter, Depends
from datetime import datetime, timezone

from tortoise import Tortoise

from app.sale.contract import SaleContract
from app.services.sale import get_sale_contract

router = APIRouter(tags=["health"])


@router.get("/health", summary="Health check")
async def health_check(contract: SaleContract = Depends(get_sale_contract)):
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "paused": contract.is_paused,
        "total_issued": contract.total_issued(),
    }


@router.get("/ready", summary="Readiness check")
async def readiness_check():
    """
    Readiness check - verifies all dependencies are available.

    Checks the audit database connection.
    """
    checks = {}

    try:
        connection = Tortoise.get_connection("default")
        await connection.execute_query("SELECT 1")
        checks["database"] = True
    except Exception:
        checks["database"] = False

    all_healthy = all(checks.values())

    return {
        "status": "ready" if all_healthy else "degraded",
        "checks": checks,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
