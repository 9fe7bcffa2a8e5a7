"""
Pydantic models for citizen reports.
These models handle request parsing and response shapes.

Request fields are deliberately permissive (mostly optional): the report
service owns required-field and enum validation so that every violation
produces the same 400 envelope with a descriptive message.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, List, Optional, Union
from enum import Enum

from app.models.base import BaseResponse


class IssueType(str, Enum):
    ROADS = "roads"
    INFRASTRUCTURE = "infrastructure"
    UTILITIES = "utilities"
    WASTE = "waste"
    WATER = "water"
    OTHER = "other"


ALLOWED_ISSUE_TYPES: List[str] = [t.value for t in IssueType]


class ReportCreate(BaseModel):
    """
    Model for creating a new report (incoming POST request).
    These are the fields citizens provide when submitting a report.
    """
    title: Optional[Any] = Field(None, description="Short title (required, truncated to 500 chars)")
    issue_type: Optional[str] = Field(None, description="One of: " + ", ".join(ALLOWED_ISSUE_TYPES))
    description: Optional[Any] = Field(None, description="Free text (truncated to 500 chars)")
    latitude: Optional[float] = Field(None, description="Latitude, must be inside the service area")
    longitude: Optional[float] = Field(None, description="Longitude, must be inside the service area")
    image_url: Optional[str] = Field(None, description="Optional photo URL")
    user_id: Optional[Union[str, int]] = Field(None, description="Reporter identifier, defaults to 'anonymous'")

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Pothole near bus stop",
                "issue_type": "roads",
                "description": "Deep pothole on the left lane, dangerous for two-wheelers.",
                "latitude": 13.0827,
                "longitude": 80.2707,
                "image_url": "https://example.com/pothole.jpg",
                "user_id": "citizen-42",
            }
        }
        extra = "ignore"


class StatusUpdateRequest(BaseModel):
    """Status transition requested by a government official."""
    status: Optional[str] = Field(None, description="New status")
    officer_name: Optional[str] = Field(None, description="Officer to assign")
    eta: Optional[str] = Field(None, description="Expected resolution time")
    update_message: Optional[str] = Field(None, description="Message for the update log")
    updated_by: Optional[str] = Field(None, description="Who made the change (default: system)")

    class Config:
        json_schema_extra = {
            "example": {
                "status": "In Progress",
                "officer_name": "R. Kumar",
                "eta": "2024-07-01",
                "update_message": "Repair crew dispatched",
                "updated_by": "zone-9-office",
            }
        }
        extra = "ignore"


class BoostRequest(BaseModel):
    # Accepted but not used for deduplication
    user_id: Optional[Union[str, int]] = None

    class Config:
        extra = "ignore"


class UpdateEntry(BaseModel):
    """One entry of a report's append-only update log."""
    timestamp: Optional[datetime] = None
    message: str = ""
    type: str = ""
    updated_by: str = "system"


class ReportSummary(BaseModel):
    """Report as returned by list endpoints."""
    id: str = Field(..., description="Document ID")
    title: str = ""
    issue_type: Optional[str] = None
    status: Optional[str] = None
    description: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    timestamp: Optional[datetime] = None
    image_url: Optional[str] = ""
    boosts: int = 0
    assigned_to: Optional[str] = None
    assigned_officer: Optional[str] = None
    eta: Optional[str] = None

    class Config:
        extra = "ignore"


class ReportDetail(ReportSummary):
    """Single report including its full update log."""
    updates: List[UpdateEntry] = Field(default_factory=list)


class ReportCreatedResponse(BaseResponse):
    report_id: str
    assigned_ward: str


class ReportListResponse(BaseResponse):
    reports: List[ReportSummary]
    count: int


class WardReportsResponse(ReportListResponse):
    ward: str


class ReportDetailResponse(BaseResponse):
    report: ReportDetail


class AnalyticsSummary(BaseModel):
    total_reports: int = 0
    by_status: Dict[str, int] = Field(default_factory=dict)
    by_type: Dict[str, int] = Field(default_factory=dict)
    by_ward: Dict[str, int] = Field(default_factory=dict)
    total_boosts: int = 0
    avg_boosts: float = 0


class AnalyticsResponse(BaseResponse):
    analytics: AnalyticsSummary


class WardListResponse(BaseResponse):
    wards: List[str]
