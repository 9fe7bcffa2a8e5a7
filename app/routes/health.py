"""
Health check endpoints.
Used for monitoring, deployment readiness checks, and basic connectivity tests.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from app.core.errors import StoreError
from app.core.settings import settings
from app.models.base import HealthResponse
from app.services.report_service import ReportService, get_report_service


router = APIRouter(prefix="/api/health", tags=["Health"])


@router.get("", response_model=HealthResponse)
async def health_check():
    """
    Basic health check endpoint.
    Returns 200 if service is running.
    """
    return HealthResponse(
        message=f"{settings.APP_NAME} is running",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=settings.APP_VERSION,
    )


@router.get("/db")
async def database_health(service: ReportService = Depends(get_report_service)):
    """
    Database connectivity check.
    Performs a one-document read against the report store.
    """
    try:
        details = await service.store.ping()
    except StoreError as e:
        raise HTTPException(
            status_code=503,
            detail=f"Database connection failed: {e.message}"
        )

    return {
        "success": True,
        "connected": True,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        **details,
    }
