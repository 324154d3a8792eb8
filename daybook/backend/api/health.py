"""
Health Check Endpoints.

Provides liveness, readiness, and detailed health checks.

Endpoints:
- /health: Liveness check (process running)
- /health/ready: Readiness check (database reachable)
- /health/detailed: Component-by-component status (for debugging)
"""

import asyncio
from typing import Any

from fastapi import APIRouter, HTTPException
from sqlalchemy import text

from daybook.backend.core.logging import get_logger
from daybook.backend.core.utils import utc_now

router = APIRouter()
logger = get_logger(__name__)


async def check_database() -> dict[str, Any]:
    """
    Check database connectivity.

    Returns:
        Dict with status, latency, and optional error message
    """
    try:
        from daybook.backend.core.config import get_app_config
        from daybook.backend.core.database import get_session_factory

        db_config = get_app_config().database

        if not db_config.name:
            return {"status": "not_configured"}

        start = utc_now()
        async with get_session_factory()() as session:
            await session.execute(text("SELECT 1"))

        latency_ms = int((utc_now() - start).total_seconds() * 1000)

        return {
            "status": "healthy",
            "latency_ms": latency_ms,
        }

    except Exception as e:
        logger.warning("Database health check failed", extra={"error": str(e)})
        return {
            "status": "unhealthy",
            "error": str(e),
        }


@router.get("/health")
async def health_check() -> dict[str, str]:
    """
    Liveness check.

    Returns 200 if the process is running.
    No dependency checks - this endpoint should always respond quickly.
    """
    return {"status": "healthy"}


@router.get("/health/ready")
async def readiness_check() -> dict[str, Any]:
    """
    Readiness check.

    Returns 200 if ready to serve traffic, 503 if the database
    is unreachable or does not answer within the database timeout.
    """
    from daybook.backend.core.config import get_app_config
    timeout = get_app_config().application.timeouts.database

    try:
        async with asyncio.timeout(timeout):
            db_result = await check_database()
    except TimeoutError:
        db_result = {"status": "unhealthy", "error": f"timed out after {timeout}s"}

    checks = {"database": db_result}

    if db_result.get("status") == "unhealthy":
        logger.warning("Readiness check failed", extra={"checks": checks})
        raise HTTPException(
            status_code=503,
            detail={
                "status": "unhealthy",
                "checks": checks,
                "timestamp": utc_now().isoformat(),
            },
        )

    return {
        "status": "healthy",
        "checks": checks,
        "timestamp": utc_now().isoformat(),
    }


@router.get("/health/detailed")
async def detailed_health_check() -> dict[str, Any]:
    """
    Detailed health check.

    Returns application identity alongside dependency checks.
    Always 200; inspect ``status`` for the overall result.
    """
    checks = {"database": await check_database()}

    try:
        from daybook.backend.core.config import get_app_config
        app_settings = get_app_config().application

        app_info = {
            "name": app_settings.name,
            "env": app_settings.environment,
            "debug": app_settings.debug,
            "version": app_settings.version,
        }
    except Exception:
        app_info = {"status": "not_configured"}

    statuses = [check.get("status") for check in checks.values()]
    overall_status = "unhealthy" if "unhealthy" in statuses else "healthy"

    return {
        "status": overall_status,
        "application": app_info,
        "checks": checks,
        "timestamp": utc_now().isoformat(),
    }
