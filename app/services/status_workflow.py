"""
Status Workflow Engine - report status lifecycle and update log entries.

DESIGN PRINCIPLES:
- Flat status set, any status may follow any other (Closed -> Open included)
- Every transition appends exactly one entry to the report's update log
- The log is append-only: entries are never reordered or removed
- Invalid statuses are rejected before anything is written
"""

from enum import Enum
from datetime import datetime, timezone
from typing import Dict, List, Optional
import logging

from app.core.errors import ValidationError

logger = logging.getLogger(__name__)


class ReportStatus(str, Enum):
    """Report lifecycle states. No ordering is enforced between them."""
    OPEN = "Open"
    ACKNOWLEDGED = "Acknowledged"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"
    CLOSED = "Closed"


ALLOWED_STATUSES: List[str] = [s.value for s in ReportStatus]

SYSTEM_ACTOR = "system"


class StatusWorkflowEngine:
    """
    Permissive state machine for report status transitions.

    Rules:
    - Target status must be one of ALLOWED_STATUSES
    - No adjacency matrix: any allowed status can be requested at any time
    - Officer and ETA change only through a transition
    """

    @classmethod
    def is_valid_status(cls, status: Optional[str]) -> bool:
        return status in ALLOWED_STATUSES

    @staticmethod
    def update_type(status: str) -> str:
        """'In Progress' -> 'in_progress'"""
        return status.lower().replace(" ", "_")

    @classmethod
    def create_update_entry(
        cls,
        message: str,
        update_type: str,
        updated_by: Optional[str] = None
    ) -> Dict:
        """
        Create a single update log entry.

        The timestamp is taken client-side: server timestamps cannot be
        stored inside array elements.
        """
        return {
            "timestamp": datetime.now(timezone.utc),
            "message": message,
            "type": update_type,
            "updated_by": updated_by or SYSTEM_ACTOR,
        }

    @classmethod
    def initial_state(cls) -> Dict:
        """Fields every new report starts with, including the 'reported' entry."""
        return {
            "status": ReportStatus.OPEN.value,
            "assigned_officer": None,
            "eta": None,
            "updates": [
                cls.create_update_entry(
                    message="Issue reported by citizen",
                    update_type="reported",
                    updated_by=SYSTEM_ACTOR,
                )
            ],
        }

    @classmethod
    def validate_and_transition(
        cls,
        new_status: Optional[str],
        officer_name: Optional[str] = None,
        eta: Optional[str] = None,
        message: Optional[str] = None,
        updated_by: Optional[str] = None
    ) -> Dict:
        """
        Validate the requested status and build the change set.

        Args:
            new_status: Requested status
            officer_name: Officer to assign (only set when non-empty)
            eta: Expected resolution time (only set when non-empty)
            message: Update message, defaults to "Status changed to <status>"
            updated_by: Actor, defaults to "system"

        Returns:
            Dict with "fields" (document fields to set) and "update_entry"
            (the log entry to append). Both must be written in one update.

        Raises:
            ValidationError: If the status is missing or not allowed
        """
        if not new_status or not cls.is_valid_status(new_status):
            raise ValidationError("Invalid or missing status")

        fields = {"status": new_status}
        if officer_name:
            fields["assigned_officer"] = officer_name
        if eta:
            fields["eta"] = eta

        update_entry = cls.create_update_entry(
            message=message or f"Status changed to {new_status}",
            update_type=cls.update_type(new_status),
            updated_by=updated_by,
        )

        return {
            "fields": fields,
            "update_entry": update_entry,
        }
