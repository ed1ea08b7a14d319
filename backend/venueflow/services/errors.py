"""Workflow error taxonomy.

Every error is an ``HTTPException`` so routers can let it propagate; the
``message`` attribute is the plain-text reason for non-HTTP callers.
"""
from typing import Any, Optional

from fastapi import HTTPException, status


class WorkflowError(HTTPException):
    default_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, *, status_code: Optional[int] = None, extra: Optional[dict[str, Any]] = None):
        self.message = message
        detail: Any = {"message": message, **extra} if extra else message
        super().__init__(status_code=status_code or self.default_status, detail=detail)

    def __str__(self) -> str:
        return self.message


class ValidationFailed(WorkflowError):
    """Field-level validation error; raised before any write."""

    default_status = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, message: str, field_errors: dict[str, str]):
        self.field_errors = field_errors
        super().__init__(message, extra={"field_errors": field_errors})


class NotAuthenticated(WorkflowError):
    default_status = status.HTTP_401_UNAUTHORIZED


class PermissionDenied(WorkflowError):
    default_status = status.HTTP_403_FORBIDDEN


class NotFound(WorkflowError):
    default_status = status.HTTP_404_NOT_FOUND


class ReferentialError(WorkflowError):
    """Referenced area, venue or reviewer is missing or mismatched."""


class InvalidTransition(WorkflowError):
    default_status = status.HTTP_409_CONFLICT


class StoreError(WorkflowError):
    """The store failed before anything was committed."""

    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR


class PartialFailure(WorkflowError):
    """Some steps committed before a later one failed.

    ``rolled_back`` tells operators whether compensation already undid the
    committed steps or whether the record needs manual reconciliation.
    """

    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, event_id: Optional[str], rolled_back: bool, status_code: Optional[int] = None):
        self.event_id = event_id
        self.rolled_back = rolled_back
        super().__init__(
            message,
            status_code=status_code,
            extra={"event_id": event_id, "rolled_back": rolled_back},
        )
