"""
API Base Classes - Shared Foundation for the VolunteerMatch API

This module provides:
- Standard response format helpers
- Pagination classes using the same envelope

All API views return the envelope below so clients can handle success and
failure uniformly:
{
    "success": bool,
    "data": {...} | [...],
    "message": str | null,
    "errors": [...] | null,
    "meta": {"timestamp": "ISO8601", "pagination": {...} | null}
}
"""

import logging
from typing import Any, Dict, List

from django.utils import timezone
from rest_framework import status
from rest_framework.pagination import PageNumberPagination
from rest_framework.request import Request
from rest_framework.response import Response

logger = logging.getLogger(__name__)


# =============================================================================
# STANDARD RESPONSE HELPERS
# =============================================================================

class APIResponse:
    """Standardized API response format for consistent client handling."""

    @staticmethod
    def success(
        data: Any = None,
        message: str = None,
        status_code: int = status.HTTP_200_OK,
        meta: Dict = None,
        headers: Dict = None,
        request: Request = None
    ) -> Response:
        """Create a successful response."""
        response_meta = {
            "timestamp": timezone.now().isoformat(),
            **(meta or {})
        }

        if request and hasattr(request, 'request_id'):
            response_meta["request_id"] = request.request_id

        response_data = {
            "success": True,
            "data": data,
            "message": message,
            "errors": None,
            "meta": response_meta
        }
        return Response(response_data, status=status_code, headers=headers)

    @staticmethod
    def created(
        data: Any = None,
        message: str = "Resource created successfully",
        meta: Dict = None
    ) -> Response:
        """Create a 201 Created response."""
        return APIResponse.success(
            data=data,
            message=message,
            status_code=status.HTTP_201_CREATED,
            meta=meta
        )

    @staticmethod
    def updated(
        data: Any = None,
        message: str = "Resource updated successfully",
        meta: Dict = None
    ) -> Response:
        """Create a successful update response."""
        return APIResponse.success(data=data, message=message, meta=meta)

    @staticmethod
    def deleted() -> Response:
        """Create a 204 No Content response for deletions."""
        return Response(status=status.HTTP_204_NO_CONTENT)

    @staticmethod
    def error(
        message: str = "An error occurred",
        errors: List[Dict] = None,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        error_code: str = None,
        meta: Dict = None
    ) -> Response:
        """Create an error response."""
        response_data = {
            "success": False,
            "data": None,
            "message": message,
            "errors": errors or [],
            "error_code": error_code,
            "meta": {
                "timestamp": timezone.now().isoformat(),
                **(meta or {})
            }
        }
        return Response(response_data, status=status_code)


# =============================================================================
# PAGINATION CLASSES
# =============================================================================

class StandardPagination(PageNumberPagination):
    """
    Standard page-number based pagination with configurable page size.

    Query params:
    - page: Page number (1-indexed)
    - page_size: Items per page (default: 20, max: 100)
    """
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100

    def get_paginated_response(self, data):
        return Response({
            "success": True,
            "data": data,
            "message": None,
            "errors": None,
            "meta": {
                "timestamp": timezone.now().isoformat(),
                "pagination": {
                    "count": self.page.paginator.count,
                    "page": self.page.number,
                    "page_size": self.get_page_size(self.request),
                    "total_pages": self.page.paginator.num_pages,
                    "next": self.get_next_link(),
                    "previous": self.get_previous_link(),
                }
            }
        })

    def get_paginated_response_schema(self, schema):
        return {
            'type': 'object',
            'properties': {
                'success': {'type': 'boolean'},
                'data': schema,
                'message': {'type': 'string', 'nullable': True},
                'errors': {'type': 'array', 'nullable': True, 'items': {}},
                'meta': {'type': 'object'},
            },
        }
