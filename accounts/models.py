"""
Accounts Models - Users and role-specific profiles.

Every account is either a volunteer or an organization (plus platform
admins). A freshly registered user has ``profile_complete=False`` until the
matching role profile has been saved.
"""

import uuid

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.utils.translation import gettext_lazy as _

from core.storage import build_profile_picture_path


def profile_picture_upload_to(instance, filename):
    return build_profile_picture_path(instance.pk, filename)


def organization_logo_upload_to(instance, filename):
    return build_profile_picture_path(f"org-{instance.user_id}", filename)


class UserManager(BaseUserManager):
    """Manager for email-login users."""

    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError(_('The email address must be set'))
        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', User.Role.ADMIN)
        extra_fields.setdefault('profile_complete', True)

        if extra_fields.get('is_staff') is not True:
            raise ValueError(_('Superuser must have is_staff=True.'))
        if extra_fields.get('is_superuser') is not True:
            raise ValueError(_('Superuser must have is_superuser=True.'))

        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    """
    Platform account. Email is the login identifier.
    """

    class Role(models.TextChoices):
        VOLUNTEER = 'volunteer', _('Volunteer')
        ORGANIZATION = 'organization', _('Organization')
        ADMIN = 'admin', _('Admin')

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    username = None
    first_name = None
    last_name = None

    email = models.EmailField(
        _('email address'),
        unique=True,
        help_text=_('Email address (used for login)')
    )
    name = models.CharField(_('name'), max_length=255, blank=True)
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.VOLUNTEER,
        db_index=True
    )
    profile_complete = models.BooleanField(
        default=False,
        help_text=_('Set once the role-specific profile has been saved')
    )
    profile_picture = models.ImageField(
        upload_to=profile_picture_upload_to,
        max_length=255,
        blank=True,
        null=True
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = _('User')
        verbose_name_plural = _('Users')
        ordering = ['-created_at']

    def __str__(self):
        return self.email

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.lower()
        super().save(*args, **kwargs)

    def get_full_name(self):
        return self.name

    def get_short_name(self):
        return self.name

    @property
    def is_volunteer(self) -> bool:
        return self.role == self.Role.VOLUNTEER

    @property
    def is_organization(self) -> bool:
        return self.role == self.Role.ORGANIZATION

    @property
    def is_platform_admin(self) -> bool:
        return self.is_superuser or self.role == self.Role.ADMIN

    @property
    def display_name(self) -> str:
        """Name shown to other users, falling back to the role label."""
        if self.name:
            return self.name
        return 'Volunteer' if self.is_volunteer else 'Organization'

    @property
    def profile_picture_url(self):
        if self.profile_picture:
            return self.profile_picture.url
        return None

    def get_role_profile(self):
        """Return the VolunteerProfile or OrganizationProfile, if any."""
        attr = {
            self.Role.VOLUNTEER: 'volunteer_profile',
            self.Role.ORGANIZATION: 'organization_profile',
        }.get(self.role)
        if not attr:
            return None
        try:
            return getattr(self, attr)
        except (VolunteerProfile.DoesNotExist, OrganizationProfile.DoesNotExist):
            return None


class VolunteerProfile(models.Model):
    """Skills, interests and availability of a volunteer."""

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name='volunteer_profile'
    )
    skills = models.JSONField(default=list, blank=True)
    interests = models.JSONField(
        default=list,
        blank=True,
        help_text=_('Causes the volunteer cares about; drives recommendations')
    )
    bio = models.TextField(blank=True)
    location = models.CharField(max_length=255, blank=True)
    availability = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Volunteer Profile')
        verbose_name_plural = _('Volunteer Profiles')

    def __str__(self):
        return f"Volunteer profile of {self.user}"


class OrganizationProfile(models.Model):
    """Public description of an organization."""

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name='organization_profile'
    )
    description = models.TextField(blank=True)
    location = models.CharField(max_length=255, blank=True)
    website = models.URLField(blank=True)
    causes = models.JSONField(default=list, blank=True)
    logo = models.ImageField(
        upload_to=organization_logo_upload_to,
        max_length=255,
        blank=True,
        null=True
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Organization Profile')
        verbose_name_plural = _('Organization Profiles')

    def __str__(self):
        return f"Organization profile of {self.user}"
