# nocturna/routes/health.py
"""
Liveness and readiness endpoints.
"""

import time

from fastapi import APIRouter

from nocturna.config import settings
from nocturna.db.pool import db_health_check

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "nocturna"}


@router.get("/readyz")
async def readyz():
    """
    Readiness check: database pool and required configuration.
    """
    checks = {}

    t0 = time.time()
    db_health = await db_health_check()
    is_healthy = db_health.get("healthy", False)
    checks["database"] = {
        "ok": is_healthy,
        "latency_ms": round((time.time() - t0) * 1000, 1),
    }
    if "pool_stats" in db_health:
        checks["database"].update(db_health["pool_stats"])
    if not is_healthy:
        checks["database"]["error"] = db_health.get("error", "Database unhealthy")

    config_issues = []
    if not settings.JWT_SECRET:
        config_issues.append("JWT_SECRET not set")
    checks["configuration"] = {
        "ok": not config_issues,
        "issues": config_issues or None,
        "environment": settings.environment,
    }

    overall_ok = all(check["ok"] for check in checks.values())
    return {"overall_ok": overall_ok, "checks": checks, "timestamp": time.time()}
