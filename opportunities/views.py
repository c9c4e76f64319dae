"""
Opportunities Views - REST API endpoints for opportunities.

This module provides:
- Opportunity CRUD with search and cause filters
- Image upload/removal
- Applying, and accepting/rejecting applications
- Accepted volunteer lists
- Platform admin review
- Volunteer and organization dashboards
"""

import logging

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import permissions, views, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser

from api.base import APIResponse
from api.exceptions import OwnershipRequiredError
from core.permissions import IsOrganization, IsPlatformAdmin, IsVolunteer
from core.throttles import ApplicationSubmissionThrottle

from . import services
from .constants import CAUSE_TYPES, CAUSES, COMMON_SKILLS
from .filters import ApplicationFilter, OpportunityFilter
from .serializers import (
    AcceptedVolunteerSerializer,
    AdminApprovalRowSerializer,
    AdminApprovalSerializer,
    ApplicationCreateSerializer,
    ApplicationSerializer,
    OpportunityImageSerializer,
    OpportunityReviewSerializer,
    OpportunitySerializer,
    OrganizationDashboardSerializer,
    VolunteerDashboardSerializer,
)

logger = logging.getLogger(__name__)

UUID_REGEX = r'[0-9a-fA-F-]{36}'


# ==================== OPPORTUNITIES ====================

class OpportunityViewSet(viewsets.ModelViewSet):
    """
    ViewSet for volunteer opportunities.

    Anyone may browse active opportunities. Organizations post and manage
    their own; volunteers apply.

    Filters: search, causes (comma-separated), location, cause_type,
    status, mine.
    """
    serializer_class = OpportunitySerializer
    filterset_class = OpportunityFilter
    ordering_fields = ['created_at', 'title']
    ordering = ['-created_at']
    lookup_value_regex = UUID_REGEX
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get_permissions(self):
        if self.action in ('list', 'retrieve', 'vocabulary'):
            return [permissions.AllowAny()]
        if self.action in ('create', 'accepted_volunteers'):
            return [permissions.IsAuthenticated(), IsOrganization()]
        if self.action == 'apply':
            return [permissions.IsAuthenticated(), IsVolunteer()]
        return [permissions.IsAuthenticated()]

    def get_queryset(self):
        return services.visible_opportunities(self.request.user)

    def perform_create(self, serializer):
        serializer.instance = services.create_opportunity(
            self.request.user, serializer.validated_data
        )

    def perform_update(self, serializer):
        services.update_opportunity(
            serializer.instance, self.request.user, serializer.validated_data
        )

    def perform_destroy(self, instance):
        services.delete_opportunity(instance, self.request.user)

    @extend_schema(request=OpportunityImageSerializer)
    @action(detail=True, methods=['post', 'delete'], url_path='image',
            parser_classes=[MultiPartParser, FormParser])
    def image(self, request, pk=None):
        """Upload (POST, multipart ``image``) or remove (DELETE) the image."""
        opportunity = self.get_object()
        if request.method == 'DELETE':
            services.remove_opportunity_image(opportunity, request.user)
            return APIResponse.deleted()

        serializer = OpportunityImageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        url = services.replace_opportunity_image(
            opportunity, request.user, serializer.validated_data['image']
        )
        return APIResponse.success(data={'image_url': url}, message="Image uploaded")

    @extend_schema(request=ApplicationCreateSerializer, responses=ApplicationSerializer)
    @action(detail=True, methods=['post'], throttle_classes=[ApplicationSubmissionThrottle])
    def apply(self, request, pk=None):
        """Apply to this opportunity."""
        serializer = ApplicationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        application = services.apply_to_opportunity(
            request.user, pk, serializer.validated_data['message']
        )
        return APIResponse.created(
            data=ApplicationSerializer(application).data,
            message="Application submitted successfully"
        )

    @action(detail=True, methods=['get'])
    def applications(self, request, pk=None):
        """Applications received for an opportunity (owner only)."""
        opportunity = self.get_object()
        if not opportunity.is_owned_by(request.user):
            raise OwnershipRequiredError("Only the owner can view applications for this opportunity")
        queryset = services.applications_for(request.user).filter(opportunity=opportunity)
        return APIResponse.success(data=ApplicationSerializer(queryset, many=True).data)

    @action(detail=False, methods=['get'], url_path='options')
    def vocabulary(self, request):
        """Causes, cause types and common skills offered by the forms."""
        return APIResponse.success(data={
            'causes': CAUSES,
            'cause_types': CAUSE_TYPES,
            'skills': COMMON_SKILLS,
        })

    @extend_schema(parameters=[OpenApiParameter('opportunity', str, description='Limit to one opportunity')])
    @action(detail=False, methods=['get'], url_path='accepted-volunteers')
    def accepted_volunteers(self, request):
        """Volunteers accepted on this organization's opportunities."""
        queryset = services.accepted_volunteers_for(request.user)
        opportunity_id = request.query_params.get('opportunity')
        if opportunity_id:
            queryset = queryset.filter(opportunity_id=opportunity_id)
        return APIResponse.success(data=AcceptedVolunteerSerializer(queryset, many=True).data)


# ==================== APPLICATIONS ====================

class ApplicationViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Applications visible to the current user.

    Volunteers see their own, organizations see those on their
    opportunities and admins see all.
    """
    serializer_class = ApplicationSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_class = ApplicationFilter
    ordering = ['-created_at']
    lookup_value_regex = UUID_REGEX

    def get_queryset(self):
        return services.applications_for(self.request.user)

    @action(detail=True, methods=['post'])
    def accept(self, request, pk=None):
        application = services.accept_application(self.get_object(), request.user)
        return APIResponse.success(
            data=self.get_serializer(application).data,
            message="Application accepted"
        )

    @action(detail=True, methods=['post'])
    def reject(self, request, pk=None):
        application = services.reject_application(self.get_object(), request.user)
        return APIResponse.success(
            data=self.get_serializer(application).data,
            message="Application rejected"
        )


# ==================== ADMIN REVIEW ====================

class AdminApprovalViewSet(viewsets.ViewSet):
    """
    Platform admin review of posted opportunities.

    GET  /admin-approvals/?status=pending
    POST /admin-approvals/{opportunity_id}/review/
    """
    permission_classes = [permissions.IsAuthenticated, IsPlatformAdmin]
    lookup_value_regex = UUID_REGEX

    @extend_schema(
        parameters=[OpenApiParameter('status', str, enum=['pending', 'approved', 'rejected'])],
        responses=AdminApprovalRowSerializer(many=True),
    )
    def list(self, request):
        rows = services.approval_overview(request.user, request.query_params.get('status'))
        return APIResponse.success(
            data=AdminApprovalRowSerializer(rows, many=True, context={'request': request}).data
        )

    @extend_schema(request=OpportunityReviewSerializer, responses=AdminApprovalSerializer)
    @action(detail=True, methods=['post'])
    def review(self, request, pk=None):
        serializer = OpportunityReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        opportunity = services.get_opportunity(pk)
        approval = services.review_opportunity(
            request.user,
            opportunity,
            serializer.validated_data['status'],
            serializer.validated_data['notes'],
        )
        return APIResponse.updated(
            data=AdminApprovalSerializer(approval).data,
            message=f"Opportunity {approval.status}"
        )


# ==================== DASHBOARDS ====================

class VolunteerDashboardView(views.APIView):
    """GET: Recommended opportunities, application counts and unread messages."""
    permission_classes = [permissions.IsAuthenticated, IsVolunteer]

    @extend_schema(responses=VolunteerDashboardSerializer)
    def get(self, request):
        data = services.volunteer_dashboard(request.user)
        return APIResponse.success(
            data=VolunteerDashboardSerializer(data, context={'request': request}).data
        )


class OrganizationDashboardView(views.APIView):
    """GET: Opportunity and application counts and unread messages."""
    permission_classes = [permissions.IsAuthenticated, IsOrganization]

    @extend_schema(responses=OrganizationDashboardSerializer)
    def get(self, request):
        data = services.organization_dashboard(request.user)
        return APIResponse.success(data=OrganizationDashboardSerializer(data).data)
