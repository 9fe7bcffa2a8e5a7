"""
Report service - business logic for citizen report handling.

DESIGN NOTE:
- Ward assignment happens exactly once, at creation
- Coordinates are validated at creation only, never on update
- Every status change goes through StatusWorkflowEngine
- Boosts and update-log appends rely on atomic store operations
"""

from typing import Any, Dict, List, Optional
import logging

from fastapi import Request

from app.core.errors import NotFoundError, StoreError, ValidationError
from app.models.report import (
    ALLOWED_ISSUE_TYPES,
    ReportCreate,
    ReportDetail,
    ReportSummary,
    StatusUpdateRequest,
)
from app.services.analytics_service import AnalyticsAggregator
from app.services.coordinate_validator import CoordinateValidator
from app.services.query_planner import QueryPlanner
from app.services.report_store import ReportStore
from app.services.status_workflow import StatusWorkflowEngine
from app.services.vote_service import BoostCounter
from app.services.ward_resolver import WardResolver

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Missing required fields: issue_type, title, latitude, longitude"


def sanitize_input(value: Any, max_length: int = 500) -> str:
    """Trim and truncate free text; anything that isn't a string becomes ""."""
    if not isinstance(value, str):
        return ""
    return value.strip()[:max_length]


class ReportService:
    """
    Service for creating, listing and mutating reports.
    """

    def __init__(
        self,
        store: ReportStore,
        ward_resolver: WardResolver,
        coordinate_validator: CoordinateValidator,
        query_planner: Optional[QueryPlanner] = None,
        max_text_length: int = 500
    ):
        self.store = store
        self.ward_resolver = ward_resolver
        self.coordinate_validator = coordinate_validator
        self.query_planner = query_planner or QueryPlanner()
        self.boost_counter = BoostCounter(store)
        self.max_text_length = max_text_length

    async def create_report(self, report_data: ReportCreate) -> Dict:
        """
        Validate a submission, resolve its ward and store it.

        Returns:
            Dict with "report_id" and "assigned_ward"

        Raises:
            ValidationError: Missing fields, unknown issue type or
                coordinates outside the service area
        """
        if (
            not report_data.issue_type
            or not report_data.title
            or report_data.latitude is None
            or report_data.longitude is None
        ):
            raise ValidationError(REQUIRED_FIELDS_MESSAGE)

        if report_data.issue_type not in ALLOWED_ISSUE_TYPES:
            raise ValidationError("Invalid issue type")

        latitude, longitude = report_data.latitude, report_data.longitude
        if not self.coordinate_validator.validate(latitude, longitude):
            raise ValidationError("Coordinates must be within Chennai city limits")

        assigned_to = self.ward_resolver.resolve(latitude, longitude)

        # Identifiers are opaque; numeric ids from clients are stored as text
        reported_by = "anonymous"
        if report_data.user_id is not None and str(report_data.user_id).strip():
            reported_by = str(report_data.user_id)

        report_dict = {
            "title": sanitize_input(report_data.title, self.max_text_length),
            "issue_type": report_data.issue_type,
            "description": sanitize_input(report_data.description, self.max_text_length),
            "boosts": 0,
            "latitude": latitude,
            "longitude": longitude,
            "image_url": report_data.image_url or "",
            "assigned_to": assigned_to,
            "reported_by": reported_by,
        }
        report_dict.update(StatusWorkflowEngine.initial_state())

        report_id = await self.store.create(report_dict)
        logger.info(f"Report {report_id} created ({report_data.issue_type}) and assigned to '{assigned_to}'")

        return {"report_id": report_id, "assigned_ward": assigned_to}

    async def list_reports(
        self,
        status: Optional[str] = None,
        ward: Optional[str] = None,
        issue_type: Optional[str] = None,
        limit: Any = None
    ) -> List[ReportSummary]:
        """List reports filtered by at most one of status, ward, issue_type."""
        plan = self.query_planner.plan_listing(status=status, ward=ward, issue_type=issue_type, limit=limit)
        documents = await self.store.query(plan)
        return [ReportSummary(**doc) for doc in documents]

    async def get_report(self, report_id: str) -> ReportDetail:
        document = await self.store.get(report_id)
        if document is None:
            raise NotFoundError()
        return ReportDetail(**document)

    async def boost_report(self, report_id: str, user_id: Optional[str] = None) -> None:
        await self.boost_counter.boost(report_id, user_id)

    async def update_status(self, report_id: str, request: StatusUpdateRequest) -> str:
        """
        Apply a status transition.

        The status, officer, ETA and the new update-log entry are written in
        one atomic document update. Validation happens before any write.

        Returns:
            The new status
        """
        transition = StatusWorkflowEngine.validate_and_transition(
            new_status=request.status,
            officer_name=request.officer_name,
            eta=request.eta,
            message=request.update_message,
            updated_by=request.updated_by,
        )

        await self.store.atomic_append(
            report_id,
            "updates",
            transition["update_entry"],
            fields=transition["fields"],
        )
        logger.info(
            f"Report {report_id} status -> {request.status} "
            f"by {transition['update_entry']['updated_by']}"
        )
        return request.status

    async def list_ward_reports(
        self,
        ward_name: str,
        status: Optional[str] = None,
        limit: Any = None
    ) -> List[ReportSummary]:
        """Reports for one ward, most boosted first then newest."""
        plan = self.query_planner.plan_ward_listing(ward_name, status=status, limit=limit)
        documents = await self.store.query(plan)
        return [ReportSummary(**doc) for doc in documents]

    async def get_analytics(self, ward: Optional[str] = None) -> Dict:
        plan = self.query_planner.plan_analytics(ward)
        return await AnalyticsAggregator.aggregate(self.store.stream(plan.filters))

    async def delete_report(self, report_id: str) -> None:
        await self.store.delete(report_id)
        logger.info(f"Report {report_id} deleted")

    def list_wards(self) -> List[str]:
        return self.ward_resolver.ward_map.departments()


def get_report_service(request: Request) -> ReportService:
    """FastAPI dependency: the ReportService built at startup."""
    service = getattr(request.app.state, "report_service", None)
    if service is None:
        raise StoreError("Report service not initialized")
    return service
