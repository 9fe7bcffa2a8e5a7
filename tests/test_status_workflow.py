"""
Tests for the report status lifecycle.
"""

from datetime import datetime

import pytest

from app.core.errors import ValidationError
from app.services.status_workflow import ALLOWED_STATUSES, ReportStatus, StatusWorkflowEngine


def test_allowed_statuses():
    assert ALLOWED_STATUSES == ["Open", "Acknowledged", "In Progress", "Resolved", "Closed"]


def test_initial_state_records_creation():
    state = StatusWorkflowEngine.initial_state()

    assert state["status"] == "Open"
    assert state["assigned_officer"] is None
    assert state["eta"] is None
    assert len(state["updates"]) == 1
    entry = state["updates"][0]
    assert entry["type"] == "reported"
    assert entry["message"] == "Issue reported by citizen"
    assert entry["updated_by"] == "system"
    assert isinstance(entry["timestamp"], datetime)


@pytest.mark.parametrize("status,expected_type", [
    ("Open", "open"),
    ("Acknowledged", "acknowledged"),
    ("In Progress", "in_progress"),
    ("Resolved", "resolved"),
    ("Closed", "closed"),
])
def test_transition_entry_type_and_default_message(status, expected_type):
    result = StatusWorkflowEngine.validate_and_transition(status)

    assert result["fields"] == {"status": status}
    assert result["update_entry"]["type"] == expected_type
    assert result["update_entry"]["message"] == f"Status changed to {status}"
    assert result["update_entry"]["updated_by"] == "system"


def test_transition_with_officer_eta_and_message():
    result = StatusWorkflowEngine.validate_and_transition(
        "In Progress",
        officer_name="R. Kumar",
        eta="2024-07-01",
        message="Crew dispatched",
        updated_by="zone-9",
    )

    assert result["fields"] == {
        "status": "In Progress",
        "assigned_officer": "R. Kumar",
        "eta": "2024-07-01",
    }
    assert result["update_entry"]["message"] == "Crew dispatched"
    assert result["update_entry"]["updated_by"] == "zone-9"


@pytest.mark.parametrize("status", [None, "", "open", "Done", "IN_PROGRESS"])
def test_invalid_status_rejected(status):
    with pytest.raises(ValidationError) as exc_info:
        StatusWorkflowEngine.validate_and_transition(status)
    assert exc_info.value.message == "Invalid or missing status"


def test_no_adjacency_enforced():
    # Closed -> Open is allowed; there is no "current status" input at all
    for status in ReportStatus:
        assert StatusWorkflowEngine.is_valid_status(status.value)
    assert StatusWorkflowEngine.validate_and_transition("Open")["fields"]["status"] == "Open"
