"""
Accounts Serializers - Registration, authentication and profile management.

This module provides serializers for:
- Registration and login
- The current user with the role-specific profile
- Volunteer and organization profile upserts
- Email, password and account deletion (password-verified)
- Password reset request/confirm
- Public user summaries for other apps
"""

from django.contrib.auth import authenticate, get_user_model
from django.contrib.auth import password_validation
from django.contrib.auth.tokens import default_token_generator
from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils.encoding import force_str
from django.utils.http import urlsafe_base64_decode
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from core.validators import validate_image_upload

from .models import OrganizationProfile, VolunteerProfile

User = get_user_model()


def _clean_string_list(values):
    """Trim entries and drop blanks, keeping order."""
    return [str(v).strip() for v in values or [] if str(v).strip()]


# ==================== USER SUMMARIES ====================

class UserSummarySerializer(serializers.ModelSerializer):
    """Minimal user info shown next to messages, applications, etc."""

    name = serializers.CharField(source='display_name', read_only=True)
    profile_picture_url = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'name', 'role', 'profile_picture_url']
        read_only_fields = fields

    def get_profile_picture_url(self, obj):
        return obj.profile_picture_url


# ==================== PROFILE SERIALIZERS ====================

class VolunteerProfileSerializer(serializers.ModelSerializer):
    """Volunteer profile upsert/read."""

    skills = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False)
    interests = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False)
    availability = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False)

    class Meta:
        model = VolunteerProfile
        fields = [
            'skills', 'interests', 'bio', 'location', 'availability',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_skills(self, value):
        return _clean_string_list(value)

    def validate_interests(self, value):
        return _clean_string_list(value)

    def validate_availability(self, value):
        return _clean_string_list(value)


class OrganizationProfileSerializer(serializers.ModelSerializer):
    """Organization profile upsert/read."""

    causes = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False)
    logo_url = serializers.SerializerMethodField()

    class Meta:
        model = OrganizationProfile
        fields = [
            'description', 'location', 'website', 'causes', 'logo', 'logo_url',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['logo_url', 'created_at', 'updated_at']
        extra_kwargs = {'logo': {'write_only': True, 'required': False}}

    def get_logo_url(self, obj):
        return obj.logo.url if obj.logo else None

    def validate_causes(self, value):
        return _clean_string_list(value)

    def validate_logo(self, value):
        if value:
            is_valid, error = validate_image_upload(value)
            if not is_valid:
                raise serializers.ValidationError(error)
        return value


class PublicProfileSerializer(UserSummarySerializer):
    """Read-only public view of a user and their role profile."""

    volunteer_profile = serializers.SerializerMethodField()
    organization_profile = serializers.SerializerMethodField()

    class Meta(UserSummarySerializer.Meta):
        fields = UserSummarySerializer.Meta.fields + [
            'volunteer_profile', 'organization_profile',
        ]
        read_only_fields = fields

    def get_volunteer_profile(self, obj):
        if obj.is_volunteer and obj.profile_complete:
            profile = obj.get_role_profile()
            if profile:
                return VolunteerProfileSerializer(profile).data
        return None

    def get_organization_profile(self, obj):
        if obj.is_organization and obj.profile_complete:
            profile = obj.get_role_profile()
            if profile:
                return OrganizationProfileSerializer(profile).data
        return None


class CurrentUserSerializer(PublicProfileSerializer):
    """
    Serializer for the current authenticated user.

    The role profile is only included once ``profile_complete`` is set.
    """

    name = serializers.CharField(max_length=255, required=False, allow_blank=True)

    class Meta(PublicProfileSerializer.Meta):
        fields = [
            'id', 'email', 'name', 'role', 'profile_complete',
            'profile_picture_url', 'volunteer_profile', 'organization_profile',
            'created_at', 'updated_at',
        ]
        read_only_fields = [
            'id', 'email', 'role', 'profile_complete', 'profile_picture_url',
            'volunteer_profile', 'organization_profile', 'created_at', 'updated_at',
        ]

    def validate_name(self, value):
        return value.strip()


# ==================== AUTHENTICATION SERIALIZERS ====================

class UserRegistrationSerializer(serializers.ModelSerializer):
    """
    User registration serializer with password validation.

    Only volunteer and organization accounts can self-register.
    """
    password = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'}
    )
    password_confirm = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'}
    )
    role = serializers.ChoiceField(
        choices=[
            (User.Role.VOLUNTEER, User.Role.VOLUNTEER.label),
            (User.Role.ORGANIZATION, User.Role.ORGANIZATION.label),
        ]
    )

    class Meta:
        model = User
        fields = ['email', 'name', 'password', 'password_confirm', 'role']
        extra_kwargs = {
            'email': {'required': True},
            'name': {'required': True, 'allow_blank': False},
        }

    def validate_email(self, value):
        """Ensure email is unique."""
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError(
                _("A user with this email already exists.")
            )
        return value.lower()

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError(_("Name is required."))
        return value

    def validate(self, attrs):
        """Validate passwords match and pass the configured validators."""
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({
                'password_confirm': _("Passwords do not match.")
            })
        candidate = User(email=attrs.get('email'), name=attrs.get('name', ''))
        try:
            password_validation.validate_password(attrs['password'], user=candidate)
        except DjangoValidationError as e:
            raise serializers.ValidationError({'password': list(e.messages)})
        return attrs

    def create(self, validated_data):
        validated_data.pop('password_confirm')
        password = validated_data.pop('password')
        return User.objects.create_user(
            password=password,
            profile_complete=False,
            **validated_data
        )


class UserLoginSerializer(serializers.Serializer):
    """User login serializer with authentication."""
    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )

    def validate(self, attrs):
        user = authenticate(
            request=self.context.get('request'),
            username=attrs['email'].lower(),
            password=attrs['password']
        )

        if not user:
            inactive = User.objects.filter(email__iexact=attrs['email'], is_active=False).first()
            if inactive and inactive.check_password(attrs['password']):
                raise serializers.ValidationError(
                    _("User account is disabled."),
                    code='authorization'
                )
            raise serializers.ValidationError(
                _("Invalid email or password."),
                code='authorization'
            )

        attrs['user'] = user
        return attrs


class PasswordVerificationMixin:
    """Verify ``password`` against the requesting user."""

    def validate_password(self, value):
        user = self.context['request'].user
        if not user.check_password(value):
            raise serializers.ValidationError(_("Incorrect password"))
        return value


class EmailUpdateSerializer(PasswordVerificationMixin, serializers.Serializer):
    """Change the login email after re-entering the password."""
    new_email = serializers.EmailField(required=True)
    password = serializers.CharField(required=True, write_only=True, style={'input_type': 'password'})

    def validate_new_email(self, value):
        user = self.context['request'].user
        value = value.lower()
        if User.objects.filter(email__iexact=value).exclude(pk=user.pk).exists():
            raise serializers.ValidationError(
                _("A user with this email already exists.")
            )
        return value


class PasswordChangeSerializer(serializers.Serializer):
    """Serializer for password change."""
    current_password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )
    new_password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )
    new_password_confirm = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )

    def validate_current_password(self, value):
        user = self.context['request'].user
        if not user.check_password(value):
            raise serializers.ValidationError(_("Incorrect password"))
        return value

    def validate(self, attrs):
        if attrs['new_password'] != attrs['new_password_confirm']:
            raise serializers.ValidationError({
                'new_password_confirm': _("New passwords do not match.")
            })
        try:
            password_validation.validate_password(attrs['new_password'], user=self.context['request'].user)
        except DjangoValidationError as e:
            raise serializers.ValidationError({'new_password': list(e.messages)})
        return attrs


class AccountDeleteSerializer(PasswordVerificationMixin, serializers.Serializer):
    """Confirm account deletion with the current password."""
    password = serializers.CharField(required=True, write_only=True, style={'input_type': 'password'})


class PasswordResetRequestSerializer(serializers.Serializer):
    email = serializers.EmailField(required=True)

    def validate_email(self, value):
        return value.lower()


class PasswordResetConfirmSerializer(serializers.Serializer):
    """Validate a uid/token pair from the reset email and the new password."""
    uid = serializers.CharField(required=True)
    token = serializers.CharField(required=True)
    new_password = serializers.CharField(required=True, write_only=True, style={'input_type': 'password'})
    new_password_confirm = serializers.CharField(required=True, write_only=True, style={'input_type': 'password'})

    def validate(self, attrs):
        try:
            user_id = force_str(urlsafe_base64_decode(attrs['uid']))
            user = User.objects.get(pk=user_id)
        except (TypeError, ValueError, OverflowError, User.DoesNotExist):
            user = None

        if user is None or not default_token_generator.check_token(user, attrs['token']):
            raise serializers.ValidationError({
                'token': _("This password reset link is invalid or has expired.")
            })

        if attrs['new_password'] != attrs['new_password_confirm']:
            raise serializers.ValidationError({
                'new_password_confirm': _("New passwords do not match.")
            })
        try:
            password_validation.validate_password(attrs['new_password'], user=user)
        except DjangoValidationError as e:
            raise serializers.ValidationError({'new_password': list(e.messages)})

        attrs['user'] = user
        return attrs


class ProfilePictureSerializer(serializers.Serializer):
    image = serializers.ImageField(required=True)

    def validate_image(self, value):
        is_valid, error = validate_image_upload(value)
        if not is_valid:
            raise serializers.ValidationError(error)
        return value
