"""
Report endpoints - citizen report submission, listing, boosting and
status management.
"""

from typing import Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.core.errors import StoreError
from app.models.base import BaseResponse
from app.models.report import (
    BoostRequest,
    ReportCreate,
    ReportCreatedResponse,
    ReportDetailResponse,
    ReportListResponse,
    StatusUpdateRequest,
    WardReportsResponse,
)
from app.services.report_service import ReportService, get_report_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reports", tags=["Reports"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ReportCreatedResponse)
async def submit_report(report: ReportCreate, service: ReportService = Depends(get_report_service)):
    """
    Submit a new civic issue report.
    
    This endpoint:
    1. Validates required fields, issue type and coordinates
    2. Resolves the responsible ward from the coordinates
    3. Stores the report with status "Open"
    """
    try:
        result = await service.create_report(report)
    except StoreError as e:
        logger.error(f"Error creating report: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    return ReportCreatedResponse(
        message="Report submitted successfully!",
        report_id=result["report_id"],
        assigned_ward=result["assigned_ward"],
    )


@router.get("", response_model=ReportListResponse)
async def get_reports(
    status: Optional[str] = Query(None, description="Filter by status (highest precedence)"),
    ward: Optional[str] = Query(None, description="Filter by ward, ignored when status is set"),
    issue_type: Optional[str] = Query(None, description="Filter by type, ignored when status or ward is set"),
    limit: Optional[str] = Query(None, description="Maximum number of reports (default 50)"),
    service: ReportService = Depends(get_report_service)
):
    """
    List reports. Only ONE filter is applied: status > ward > issue_type.
    Without filters, reports are returned newest first.
    """
    try:
        reports = await service.list_reports(status=status, ward=ward, issue_type=issue_type, limit=limit)
    except StoreError as e:
        logger.error(f"Error getting reports: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error retrieving reports")

    return ReportListResponse(reports=reports, count=len(reports))


@router.get("/ward/{ward_name}", response_model=WardReportsResponse)
async def get_ward_reports(
    ward_name: str,
    status: Optional[str] = Query(None, description="Optional status filter"),
    limit: Optional[str] = Query(None, description="Maximum number of reports (default 100)"),
    service: ReportService = Depends(get_report_service)
):
    """
    Reports for a ward dashboard, most boosted first then newest.
    """
    try:
        reports = await service.list_ward_reports(ward_name, status=status, limit=limit)
    except StoreError as e:
        logger.error(f"Error getting ward reports: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error retrieving ward reports")

    return WardReportsResponse(ward=ward_name, reports=reports, count=len(reports))


@router.get("/{report_id}", response_model=ReportDetailResponse)
async def get_report(report_id: str, service: ReportService = Depends(get_report_service)):
    """Fetch one report including its full update log."""
    try:
        report = await service.get_report(report_id)
    except StoreError as e:
        logger.error(f"Error getting report {report_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error retrieving report")

    return ReportDetailResponse(report=report)


@router.post("/{report_id}/boost", response_model=BaseResponse)
async def boost_report(
    report_id: str,
    body: Optional[BoostRequest] = None,
    service: ReportService = Depends(get_report_service)
):
    """Boost (vote for) an issue. Repeat votes are not deduplicated."""
    user_id = str(body.user_id) if body and body.user_id is not None else None
    try:
        await service.boost_report(report_id, user_id)
    except StoreError as e:
        logger.error(f"Error boosting report {report_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error boosting report")

    return BaseResponse(message="Issue boosted successfully")


@router.put("/{report_id}/status", response_model=BaseResponse)
async def update_report_status(
    report_id: str,
    request: StatusUpdateRequest,
    service: ReportService = Depends(get_report_service)
):
    """
    Update report status (for government officials).
    Appends one entry to the report's update log.
    """
    try:
        new_status = await service.update_status(report_id, request)
    except StoreError as e:
        logger.error(f"Error updating report status {report_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error updating report status")

    return BaseResponse(message=f"Report status updated to: {new_status}")


@router.delete("/{report_id}", response_model=BaseResponse)
async def delete_report(report_id: str, service: ReportService = Depends(get_report_service)):
    """Permanently delete a report."""
    try:
        await service.delete_report(report_id)
    except StoreError as e:
        logger.error(f"Error deleting report {report_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error deleting report")

    return BaseResponse(message="Report deleted successfully")
