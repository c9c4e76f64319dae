"""
Accounts Views - Authentication and account management endpoints.

This module provides REST API endpoints for:
- Authentication (register, login, logout)
- The current user and role-specific profiles
- Email, password and account deletion (password-verified)
- Password reset via emailed link
- Profile pictures and public profiles
"""

import logging

from django.contrib.auth import get_user_model
from drf_spectacular.utils import extend_schema
from rest_framework import permissions, status, views, viewsets
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from api.base import APIResponse
from api.exceptions import ResourceNotFoundError
from core.permissions import IsOrganization, IsVolunteer
from core.throttles import PasswordResetThrottle

from . import services
from .serializers import (
    AccountDeleteSerializer,
    CurrentUserSerializer,
    EmailUpdateSerializer,
    OrganizationProfileSerializer,
    PasswordChangeSerializer,
    PasswordResetConfirmSerializer,
    PasswordResetRequestSerializer,
    ProfilePictureSerializer,
    PublicProfileSerializer,
    UserLoginSerializer,
    UserRegistrationSerializer,
    VolunteerProfileSerializer,
)

logger = logging.getLogger(__name__)
User = get_user_model()


def _token_pair(user):
    refresh = RefreshToken.for_user(user)
    return {
        'refresh': str(refresh),
        'access': str(refresh.access_token),
    }


# ==================== AUTHENTICATION ====================

class RegisterView(views.APIView):
    """
    User registration endpoint.

    POST: Create a volunteer or organization account and return tokens.
    """
    permission_classes = [permissions.AllowAny]

    @extend_schema(request=UserRegistrationSerializer)
    def post(self, request):
        serializer = UserRegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        logger.info(f"Registered {user.role} account {user.pk}")

        return APIResponse.created(
            data={
                'user': CurrentUserSerializer(user, context={'request': request}).data,
                'tokens': _token_pair(user),
            },
            message=f"Welcome, {user.name}! Please complete your profile."
        )


class LoginView(views.APIView):
    """
    User login endpoint.

    POST: Authenticate user and return tokens.
    """
    permission_classes = [permissions.AllowAny]

    @extend_schema(request=UserLoginSerializer)
    def post(self, request):
        serializer = UserLoginSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)

        user = serializer.validated_data['user']

        return APIResponse.success(
            data={
                'user': CurrentUserSerializer(user, context={'request': request}).data,
                'tokens': _token_pair(user),
            },
            message="Logged in successfully"
        )


class LogoutView(views.APIView):
    """
    User logout endpoint.

    POST: Blacklist refresh token.
    """
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        refresh_token = request.data.get('refresh')
        if refresh_token:
            try:
                RefreshToken(refresh_token).blacklist()
            except TokenError as e:
                # Already blacklisted or expired
                logger.info(f"Logout with unusable refresh token for user {request.user.pk}: {e}")

        return APIResponse.success(message="Logged out")


# ==================== CURRENT USER ====================

class CurrentUserView(views.APIView):
    """
    Current authenticated user endpoint.

    GET: Current user with role profile (once complete).
    PATCH: Update the display name.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        serializer = CurrentUserSerializer(request.user, context={'request': request})
        return APIResponse.success(data=serializer.data)

    @extend_schema(request=CurrentUserSerializer)
    def patch(self, request):
        serializer = CurrentUserSerializer(
            request.user,
            data=request.data,
            partial=True,
            context={'request': request}
        )
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return APIResponse.updated(data=serializer.data)


class _RoleProfileView(views.APIView):
    serializer_class = None
    upsert = None
    related_name = None

    def get(self, request):
        profile = getattr(request.user, self.related_name, None)
        if profile is None:
            raise ResourceNotFoundError(resource_type='Profile')
        return APIResponse.success(data=self.serializer_class(profile).data)

    def put(self, request):
        return self._save(request, partial=False)

    def patch(self, request):
        return self._save(request, partial=True)

    def _save(self, request, partial):
        instance = getattr(request.user, self.related_name, None)
        serializer = self.serializer_class(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        profile = type(self).upsert(request.user, serializer.validated_data)
        request.user.refresh_from_db()

        return APIResponse.updated(
            data={
                'profile': self.serializer_class(profile).data,
                'user': CurrentUserSerializer(request.user, context={'request': request}).data,
            },
            message="Profile saved"
        )


class VolunteerProfileView(_RoleProfileView):
    """
    Volunteer profile upsert.

    GET/PUT/PATCH: Read or save skills, interests, bio, location and availability.
    """
    permission_classes = [permissions.IsAuthenticated, IsVolunteer]
    serializer_class = VolunteerProfileSerializer
    upsert = staticmethod(services.upsert_volunteer_profile)
    related_name = 'volunteer_profile'


class OrganizationProfileView(_RoleProfileView):
    """
    Organization profile upsert.

    GET/PUT/PATCH: Read or save description, location, website, causes and logo.
    """
    permission_classes = [permissions.IsAuthenticated, IsOrganization]
    parser_classes = [JSONParser, MultiPartParser, FormParser]
    serializer_class = OrganizationProfileSerializer
    upsert = staticmethod(services.upsert_organization_profile)
    related_name = 'organization_profile'


# ==================== ACCOUNT MANAGEMENT ====================

class EmailUpdateView(views.APIView):
    """POST: Change login email (password required)."""
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(request=EmailUpdateSerializer)
    def post(self, request):
        serializer = EmailUpdateSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)
        user = services.update_email(request.user, serializer.validated_data['new_email'])
        return APIResponse.updated(
            data=CurrentUserSerializer(user, context={'request': request}).data,
            message="Email updated"
        )


class PasswordChangeView(views.APIView):
    """
    Password change endpoint.

    POST: Change password for authenticated user.
    """
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(request=PasswordChangeSerializer)
    def post(self, request):
        serializer = PasswordChangeSerializer(
            data=request.data,
            context={'request': request}
        )
        serializer.is_valid(raise_exception=True)

        user = request.user
        user.set_password(serializer.validated_data['new_password'])
        user.save()

        return APIResponse.success(message="Password changed")


class AccountDeleteView(views.APIView):
    """POST: Permanently delete the account (password required)."""
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(request=AccountDeleteSerializer)
    def post(self, request):
        serializer = AccountDeleteSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)
        services.delete_account(request.user)
        return APIResponse.deleted()


class PasswordResetRequestView(views.APIView):
    """
    POST: Email a password reset link.

    Always answers 200 so account existence is not disclosed.
    """
    permission_classes = [permissions.AllowAny]
    throttle_classes = [PasswordResetThrottle]

    @extend_schema(request=PasswordResetRequestSerializer)
    def post(self, request):
        serializer = PasswordResetRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.request_password_reset(serializer.validated_data['email'])
        return APIResponse.success(
            message="If an account exists for this email, a reset link has been sent."
        )


class PasswordResetConfirmView(views.APIView):
    """POST: Set a new password from a reset link."""
    permission_classes = [permissions.AllowAny]

    @extend_schema(request=PasswordResetConfirmSerializer)
    def post(self, request):
        serializer = PasswordResetConfirmSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = serializer.validated_data['user']
        user.set_password(serializer.validated_data['new_password'])
        user.save()
        logger.info(f"Password reset completed for user {user.pk}")

        return APIResponse.success(message="Password has been reset")


class ProfilePictureView(views.APIView):
    """
    POST: Upload a profile picture (multipart ``image``).
    DELETE: Remove the current picture.
    """
    permission_classes = [permissions.IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    @extend_schema(request=ProfilePictureSerializer)
    def post(self, request):
        serializer = ProfilePictureSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        url = services.replace_profile_picture(request.user, serializer.validated_data['image'])
        return APIResponse.success(
            data={'profile_picture_url': url},
            message="Profile picture updated",
            status_code=status.HTTP_200_OK
        )

    def delete(self, request):
        services.remove_profile_picture(request.user)
        return APIResponse.deleted()


class PublicProfileViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Read-only public profiles.

    Used to show message participants and accepted volunteers.
    """
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = PublicProfileSerializer
    queryset = User.objects.filter(is_active=True).select_related(
        'volunteer_profile', 'organization_profile'
    ).order_by('name')
    filterset_fields = ['role']
