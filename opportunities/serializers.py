"""
Opportunities Serializers - REST API serializers for opportunities.

This module provides serializers for:
- Opportunities (list/detail/create/update and image upload)
- Applications and accepted volunteers
- Admin review rows
- Volunteer and organization dashboards
"""

from rest_framework import serializers

from accounts.serializers import UserSummarySerializer, VolunteerProfileSerializer
from core.validators import validate_image_upload

from .models import AdminApproval, Application, Opportunity


def _validate_image(value):
    if value:
        is_valid, error = validate_image_upload(value)
        if not is_valid:
            raise serializers.ValidationError(error)
    return value


# ==================== OPPORTUNITY SERIALIZERS ====================

class OpportunitySerializer(serializers.ModelSerializer):
    """
    Opportunity read/write serializer.

    Blank-field checks and trimming happen in the service layer so the
    client gets one consistent message for missing fields.
    """
    title = serializers.CharField(max_length=255, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    location = serializers.CharField(max_length=255, required=False, allow_blank=True)
    causes = serializers.ListField(
        child=serializers.CharField(allow_blank=True),
        required=False
    )
    image = serializers.ImageField(write_only=True, required=False, allow_null=True)
    image_url = serializers.SerializerMethodField()
    organization = UserSummarySerializer(source='created_by', read_only=True)
    has_applied = serializers.SerializerMethodField()

    class Meta:
        model = Opportunity
        fields = [
            'id', 'title', 'description', 'location', 'cause_type', 'causes',
            'image', 'image_url', 'status', 'organization', 'has_applied',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'image_url', 'organization', 'has_applied', 'created_at', 'updated_at']

    def get_image_url(self, obj):
        return obj.image_url

    def get_has_applied(self, obj):
        request = self.context.get('request')
        user = getattr(request, 'user', None)
        if not user or not user.is_authenticated or getattr(user, 'role', None) != 'volunteer':
            return False
        return obj.applications.filter(volunteer=user).exists()

    def validate_image(self, value):
        return _validate_image(value)


class OpportunityImageSerializer(serializers.Serializer):
    image = serializers.ImageField(required=True)

    def validate_image(self, value):
        return _validate_image(value)


# ==================== APPLICATION SERIALIZERS ====================

class ApplicationSerializer(serializers.ModelSerializer):
    """Application with volunteer and opportunity summaries."""
    opportunity_title = serializers.CharField(source='opportunity.title', read_only=True)
    volunteer = UserSummarySerializer(read_only=True)
    volunteer_profile = serializers.SerializerMethodField()

    class Meta:
        model = Application
        fields = [
            'id', 'opportunity', 'opportunity_title', 'volunteer',
            'volunteer_profile', 'status', 'message', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_volunteer_profile(self, obj):
        profile = getattr(obj.volunteer, 'volunteer_profile', None)
        return VolunteerProfileSerializer(profile).data if profile else None


class ApplicationCreateSerializer(serializers.Serializer):
    message = serializers.CharField(required=False, allow_blank=True, default='')


class AcceptedVolunteerSerializer(serializers.ModelSerializer):
    """An accepted volunteer and the opportunity they were accepted for."""
    application_id = serializers.UUIDField(source='id', read_only=True)
    opportunity_id = serializers.UUIDField(read_only=True)
    opportunity_title = serializers.CharField(source='opportunity.title', read_only=True)
    user = UserSummarySerializer(source='volunteer', read_only=True)
    email = serializers.EmailField(source='volunteer.email', read_only=True)
    volunteer_profile = serializers.SerializerMethodField()

    class Meta:
        model = Application
        fields = [
            'application_id', 'opportunity_id', 'opportunity_title', 'user',
            'email', 'volunteer_profile', 'updated_at',
        ]
        read_only_fields = fields

    def get_volunteer_profile(self, obj):
        profile = getattr(obj.volunteer, 'volunteer_profile', None)
        return VolunteerProfileSerializer(profile).data if profile else None


# ==================== ADMIN REVIEW ====================

class AdminApprovalRowSerializer(serializers.Serializer):
    """An opportunity with the reviewing admin's status."""
    opportunity = OpportunitySerializer(read_only=True)
    status = serializers.CharField(read_only=True)
    notes = serializers.CharField(read_only=True)
    reviewed_at = serializers.DateTimeField(read_only=True, allow_null=True)


class AdminApprovalSerializer(serializers.ModelSerializer):
    class Meta:
        model = AdminApproval
        fields = ['id', 'opportunity', 'admin', 'status', 'notes', 'created_at', 'updated_at']
        read_only_fields = fields


class OpportunityReviewSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[
        AdminApproval.ApprovalStatus.APPROVED,
        AdminApproval.ApprovalStatus.REJECTED,
    ])
    notes = serializers.CharField(required=False, allow_blank=True, default='')


# ==================== DASHBOARDS ====================

class VolunteerDashboardSerializer(serializers.Serializer):
    recommended_opportunities = OpportunitySerializer(many=True, read_only=True)
    applied_count = serializers.IntegerField(read_only=True)
    accepted_count = serializers.IntegerField(read_only=True)
    unread_messages = serializers.IntegerField(read_only=True)


class OrganizationDashboardSerializer(serializers.Serializer):
    opportunity_count = serializers.IntegerField(read_only=True)
    pending_applications = serializers.IntegerField(read_only=True)
    accepted_applications = serializers.IntegerField(read_only=True)
    rejected_applications = serializers.IntegerField(read_only=True)
    unread_messages = serializers.IntegerField(read_only=True)
