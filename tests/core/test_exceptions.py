"""Tests for domain exceptions."""

import uuid

from src.core.exceptions import (
    AutoAssignError,
    ClientError,
    ClientErrorCode,
    ClientNotFoundError,
    DuplicateIconNameError,
    IconAssignmentError,
    IconValidationError,
)


def test_context_stores_ids_as_strings() -> None:
    """UUIDs in the context are stringified for logs."""
    client_id = uuid.uuid4()
    error = ClientNotFoundError(client_id, None)

    assert isinstance(error, ClientError)
    assert error.error_code is ClientErrorCode.CLIENT_NOT_FOUND
    assert error.context == {"client_id": str(client_id), "company_id": None}
    assert str(client_id) in str(error)


def test_auto_assign_error_carries_stage() -> None:
    """Auto-assign failures identify client, tenant and stage."""
    client_id, company_id = uuid.uuid4(), uuid.uuid4()
    error = AutoAssignError(client_id, company_id, "add_assignments", "unique violation")

    assert error.error_code is ClientErrorCode.AUTO_ASSIGN_EVALUATION_FAILED
    assert error.client_id == client_id
    assert error.company_id == company_id
    assert error.operation_stage == "add_assignments"
    assert "add_assignments" in error.message
    assert "unique violation" in error.message
    assert error.context["operation_stage"] == "add_assignments"


def test_icon_errors() -> None:
    """Icon errors use their own codes."""
    company_id = uuid.uuid4()

    duplicate = DuplicateIconNameError("Star", company_id)
    assert duplicate.error_code is ClientErrorCode.ICON_NAME_TAKEN
    assert duplicate.context["name"] == "Star"

    invalid = IconValidationError("iconValue is required", icon_type="emoji")
    assert invalid.error_code is ClientErrorCode.ICON_VALIDATION_FAILED
    assert invalid.context == {"icon_type": "emoji"}

    assignment = IconAssignmentError(
        uuid.uuid4(), 3, "deadlock", company_id=company_id, operation_stage="set_client_icons"
    )
    assert assignment.error_code is ClientErrorCode.ICON_ASSIGNMENT_FAILED
    assert assignment.context["icon_count"] == 3
    assert assignment.context["company_id"] == str(company_id)
