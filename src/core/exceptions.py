"""Domain exceptions for the clients and icons modules.

Every error carries a machine-readable ``error_code`` and a ``context`` dict
with the identifiers needed to diagnose it from logs (client, tenant, icon,
operation stage).
"""

from enum import Enum
from typing import Any
from uuid import UUID


class ClientErrorCode(str, Enum):
    """Error codes raised by the clients and icons modules."""

    CLIENT_NOT_FOUND = "CLIENT_NOT_FOUND"
    ICON_NOT_FOUND = "ICON_NOT_FOUND"
    ICON_NAME_TAKEN = "ICON_NAME_TAKEN"
    ICON_VALIDATION_FAILED = "ICON_VALIDATION_FAILED"
    ICON_ASSIGNMENT_FAILED = "ICON_ASSIGNMENT_FAILED"
    AUTO_ASSIGN_EVALUATION_FAILED = "AUTO_ASSIGN_EVALUATION_FAILED"


class ClientError(Exception):
    """Base class for clients/icons domain errors."""

    def __init__(
        self,
        message: str,
        error_code: ClientErrorCode,
        context: dict[str, Any] | None = None,
    ):
        """Initialize ClientError.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error classification
            context: Identifiers for diagnostics (ids are stored as strings)
        """
        self.message = message
        self.error_code = error_code
        self.context = {
            key: str(value) if isinstance(value, UUID) else value
            for key, value in (context or {}).items()
        }
        super().__init__(message)


class ClientNotFoundError(ClientError):
    """Raised when a client does not exist in the caller's tenant."""

    def __init__(self, client_id: UUID, company_id: UUID | None):
        super().__init__(
            f"Client {client_id} not found",
            ClientErrorCode.CLIENT_NOT_FOUND,
            {"client_id": client_id, "company_id": company_id},
        )


class IconNotFoundError(ClientError):
    """Raised when an icon does not exist (or is inactive) in the tenant."""

    def __init__(self, icon_id: UUID, company_id: UUID | None):
        super().__init__(
            f"Icon {icon_id} not found",
            ClientErrorCode.ICON_NOT_FOUND,
            {"icon_id": icon_id, "company_id": company_id},
        )


class DuplicateIconNameError(ClientError):
    """Raised when an active icon with the same name exists in the tenant."""

    def __init__(self, name: str, company_id: UUID):
        super().__init__(
            f'Icon with name "{name}" already exists',
            ClientErrorCode.ICON_NAME_TAKEN,
            {"name": name, "company_id": company_id},
        )


class IconValidationError(ClientError):
    """Raised when icon data is inconsistent (type/value/condition)."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message, ClientErrorCode.ICON_VALIDATION_FAILED, context)


class IconAssignmentError(ClientError):
    """Raised when a manual icon assignment transaction fails."""

    def __init__(
        self,
        client_id: UUID,
        icon_count: int,
        reason: str,
        *,
        company_id: UUID | None = None,
        user_id: UUID | None = None,
        operation_stage: str | None = None,
    ):
        super().__init__(
            f"Failed to assign {icon_count} icon(s) to client {client_id}: {reason}",
            ClientErrorCode.ICON_ASSIGNMENT_FAILED,
            {
                "client_id": client_id,
                "icon_count": icon_count,
                "company_id": company_id,
                "user_id": user_id,
                "operation_stage": operation_stage,
            },
        )


class AutoAssignError(ClientError):
    """Raised when auto-assign evaluation for a client fails and is rolled back.

    Callers that mutate clients must treat this as non-fatal: log it and
    keep the client change.
    """

    def __init__(
        self,
        client_id: UUID,
        company_id: UUID,
        operation_stage: str,
        reason: str,
    ):
        self.client_id = client_id
        self.company_id = company_id
        self.operation_stage = operation_stage
        super().__init__(
            f"Auto-assign evaluation failed for client {client_id} "
            f"at stage '{operation_stage}': {reason}",
            ClientErrorCode.AUTO_ASSIGN_EVALUATION_FAILED,
            {
                "client_id": client_id,
                "company_id": company_id,
                "operation_stage": operation_stage,
            },
        )


__all__ = [
    "AutoAssignError",
    "ClientError",
    "ClientErrorCode",
    "ClientNotFoundError",
    "DuplicateIconNameError",
    "IconAssignmentError",
    "IconNotFoundError",
    "IconValidationError",
]
