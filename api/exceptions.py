"""
API Exceptions - Custom Exception Classes for VolunteerMatch API

This module provides custom exception classes for standardized error handling:
- Resource exceptions (not found, duplicates, invalid state)
- Permission and role exceptions
- Input and storage exceptions

All exceptions follow a consistent format:
{
    "success": false,
    "data": null,
    "message": "Human-readable message",
    "error_code": "MACHINE_READABLE_CODE",
    "errors": [...],
    "meta": {...}
}
"""

import logging
from typing import Any, Dict, List

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.views import exception_handler

from .base import APIResponse

logger = logging.getLogger(__name__)


# =============================================================================
# BASE EXCEPTIONS
# =============================================================================

class VolunteerMatchAPIException(APIException):
    """
    Base exception for all VolunteerMatch API errors.

    Attributes:
        status_code: HTTP status code
        default_detail: Default error message
        default_code: Machine-readable error code
        error_code: Specific error code for this instance
        extra_data: Additional data to include in response meta
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = _("An unexpected error occurred.")
    default_code = "ERROR"

    def __init__(
        self,
        detail: str = None,
        code: str = None,
        extra_data: Dict = None,
        **kwargs
    ):
        self.error_code = code or self.default_code
        self.extra_data = extra_data or {}

        if detail is None:
            detail = str(self.default_detail)

        super().__init__(detail=detail, code=code)


# =============================================================================
# RESOURCE EXCEPTIONS
# =============================================================================

class ResourceNotFoundError(VolunteerMatchAPIException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = _("The requested resource was not found.")
    default_code = "NOT_FOUND"

    def __init__(self, detail: str = None, resource_type: str = None, resource_id: Any = None, **kwargs):
        extra_data = kwargs.pop('extra_data', {})

        if resource_type:
            extra_data['resource_type'] = resource_type
            detail = detail or f"{resource_type} not found"

        if resource_id:
            extra_data['resource_id'] = str(resource_id)

        super().__init__(detail=detail, extra_data=extra_data, **kwargs)


class ResourceAlreadyExistsError(VolunteerMatchAPIException):
    """Raised when trying to create a duplicate resource."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = _("A resource with these details already exists.")
    default_code = "ALREADY_EXISTS"

    def __init__(
        self,
        detail: str = None,
        resource_type: str = None,
        conflicting_fields: List[str] = None,
        **kwargs
    ):
        extra_data = kwargs.pop('extra_data', {})

        if resource_type:
            extra_data['resource_type'] = resource_type
            detail = detail or f"A {resource_type} with these details already exists."

        if conflicting_fields:
            extra_data['conflicting_fields'] = conflicting_fields

        super().__init__(detail=detail, extra_data=extra_data, **kwargs)


class ResourceStateError(VolunteerMatchAPIException):
    """Raised when a resource is in an invalid state for the operation."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = _("This operation cannot be performed on the resource in its current state.")
    default_code = "INVALID_STATE"

    def __init__(
        self,
        detail: str = None,
        current_state: str = None,
        allowed_states: List[str] = None,
        **kwargs
    ):
        extra_data = kwargs.pop('extra_data', {})

        if current_state:
            extra_data['current_state'] = current_state
            detail = detail or f"Resource is in '{current_state}' state."

        if allowed_states:
            extra_data['allowed_states'] = allowed_states

        super().__init__(detail=detail, extra_data=extra_data, **kwargs)


# =============================================================================
# PERMISSION EXCEPTIONS
# =============================================================================

class PermissionDeniedError(VolunteerMatchAPIException):
    """Raised when user doesn't have permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = _("You do not have permission to perform this action.")
    default_code = "PERMISSION_DENIED"


class InsufficientRoleError(VolunteerMatchAPIException):
    """Raised when the user's role cannot perform an action."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = _("Your role does not have permission for this action.")
    default_code = "INSUFFICIENT_ROLE"

    def __init__(self, required_role: str = None, current_role: str = None, **kwargs):
        detail = kwargs.pop('detail', None)
        extra_data = kwargs.pop('extra_data', {})

        if current_role:
            extra_data['current_role'] = current_role

        if required_role:
            extra_data['required_role'] = required_role
            detail = detail or f"This action requires the '{required_role}' role."

        super().__init__(detail=detail, extra_data=extra_data, **kwargs)


class OwnershipRequiredError(VolunteerMatchAPIException):
    """Raised when only the owner can perform an action."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = _("Only the owner can perform this action.")
    default_code = "OWNERSHIP_REQUIRED"


# =============================================================================
# INPUT / EXTERNAL EXCEPTIONS
# =============================================================================

class InvalidInputError(VolunteerMatchAPIException):
    """Raised when request input fails a business rule."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = _("Invalid input.")
    default_code = "INVALID_INPUT"


class StorageError(VolunteerMatchAPIException):
    """Raised when the file storage backend fails."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = _("File storage is temporarily unavailable.")
    default_code = "STORAGE_ERROR"


# =============================================================================
# EXCEPTION HANDLER
# =============================================================================

def _django_validation_messages(exc: DjangoValidationError) -> List[str]:
    return [str(m) for m in exc.messages]


def volunteermatch_exception_handler(exc, context):
    """
    Custom exception handler for standardized error responses.

    Django's own ValidationError and PermissionDenied (raised from model
    methods) are converted to their DRF equivalents first.
    """
    if isinstance(exc, DjangoValidationError):
        if hasattr(exc, 'message_dict'):
            exc = ValidationError(detail=exc.message_dict)
        else:
            exc = ValidationError(detail=_django_validation_messages(exc))
    elif isinstance(exc, DjangoPermissionDenied):
        exc = PermissionDeniedError(detail=str(exc) or None)

    response = exception_handler(exc, context)

    # Handle unhandled exceptions
    if response is None:
        logger.exception(f"Unhandled exception: {exc}")
        return APIResponse.error(
            message="An unexpected error occurred.",
            error_code="INTERNAL_ERROR",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    error_data = {
        "success": False,
        "data": None,
        "message": "",
        "error_code": "ERROR",
        "errors": [],
        "meta": {
            "timestamp": timezone.now().isoformat(),
        }
    }

    if isinstance(exc, VolunteerMatchAPIException):
        error_data["message"] = str(exc.detail)
        error_data["error_code"] = exc.error_code
        if exc.extra_data:
            error_data["meta"].update(exc.extra_data)

    elif isinstance(exc, ValidationError):
        error_data["error_code"] = "VALIDATION_ERROR"
        if isinstance(exc.detail, dict):
            error_data["errors"] = [
                {"field": field, "messages": msgs if isinstance(msgs, list) else [str(msgs)]}
                for field, msgs in exc.detail.items()
            ]
            error_data["message"] = "Validation failed."
        elif isinstance(exc.detail, list):
            error_data["errors"] = [{"field": "non_field_errors", "messages": [str(e) for e in exc.detail]}]
            error_data["message"] = str(exc.detail[0]) if exc.detail else "Validation failed."
        else:
            error_data["message"] = str(exc.detail)

    else:
        error_data["message"] = str(exc.detail) if hasattr(exc, 'detail') else str(exc)
        error_data["error_code"] = getattr(exc, 'default_code', 'ERROR')

    response.data = error_data
    return response
