"""
Analytics endpoints - aggregate counts for dashboards.
"""

from typing import Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from app.core.errors import StoreError
from app.models.report import AnalyticsResponse, AnalyticsSummary, WardListResponse
from app.services.report_service import ReportService, get_report_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Analytics"])


@router.get("/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    ward: Optional[str] = Query(None, description="Restrict to one ward"),
    service: ReportService = Depends(get_report_service)
):
    """Counts by status, type and ward plus boost totals."""
    try:
        analytics = await service.get_analytics(ward)
    except StoreError as e:
        logger.error(f"Error getting analytics: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error retrieving analytics")

    return AnalyticsResponse(analytics=AnalyticsSummary(**analytics))


@router.get("/wards", response_model=WardListResponse)
async def get_wards(service: ReportService = Depends(get_report_service)):
    """All distinct department names, sorted."""
    return WardListResponse(wards=service.list_wards())
