"""
Account services: profile upserts, email/picture changes and deletion.

Views stay thin; anything that touches more than one model lives here.
"""

import logging

from django.conf import settings
from django.contrib.auth.tokens import default_token_generator
from django.db import transaction
from django.utils.encoding import force_bytes
from django.utils.http import urlsafe_base64_encode

from api.exceptions import InsufficientRoleError, StorageError
from core.storage import delete_stored_file

from .models import OrganizationProfile, User, VolunteerProfile

logger = logging.getLogger(__name__)


def _require_role(user, role):
    if user.role != role:
        raise InsufficientRoleError(required_role=role, current_role=user.role)


@transaction.atomic
def upsert_volunteer_profile(user: User, data: dict) -> VolunteerProfile:
    """Create or update the volunteer profile and mark the account complete."""
    _require_role(user, User.Role.VOLUNTEER)
    profile, created = VolunteerProfile.objects.update_or_create(user=user, defaults=data)
    if not user.profile_complete:
        user.profile_complete = True
        user.save(update_fields=['profile_complete', 'updated_at'])
    logger.info(f"Volunteer profile {'created' if created else 'updated'} for user {user.pk}")
    return profile


@transaction.atomic
def upsert_organization_profile(user: User, data: dict) -> OrganizationProfile:
    """Create or update the organization profile and mark the account complete."""
    _require_role(user, User.Role.ORGANIZATION)
    profile, created = OrganizationProfile.objects.update_or_create(user=user, defaults=data)
    if not user.profile_complete:
        user.profile_complete = True
        user.save(update_fields=['profile_complete', 'updated_at'])
    logger.info(f"Organization profile {'created' if created else 'updated'} for user {user.pk}")
    return profile


def update_email(user: User, new_email: str) -> User:
    old_email = user.email
    user.email = new_email
    user.save(update_fields=['email', 'updated_at'])
    logger.info(f"User {user.pk} changed email from {old_email} to {new_email}")
    return user


def replace_profile_picture(user: User, image) -> str:
    """Store a new profile picture, removing the previous one."""
    previous = user.profile_picture.name if user.profile_picture else None
    try:
        user.profile_picture.save(image.name, image, save=False)
    except OSError as e:
        logger.error(f"Failed to store profile picture for user {user.pk}: {e}")
        raise StorageError()
    user.save(update_fields=['profile_picture', 'updated_at'])

    if previous and previous != user.profile_picture.name:
        delete_stored_file(previous)
    return user.profile_picture.url


def remove_profile_picture(user: User) -> None:
    if user.profile_picture:
        delete_stored_file(user.profile_picture.name)
        user.profile_picture = None
        user.save(update_fields=['profile_picture', 'updated_at'])


@transaction.atomic
def delete_account(user: User) -> None:
    """
    Delete the role profile, then the user.

    Opportunities, applications, messages and notifications cascade.
    Stored images are removed after the rows are gone.
    """
    user_id = user.pk
    files = []
    if user.profile_picture:
        files.append(user.profile_picture.name)

    profile = user.get_role_profile()
    if profile is not None:
        if isinstance(profile, OrganizationProfile) and profile.logo:
            files.append(profile.logo.name)
        profile.delete()

    if user.is_organization:
        files.extend(
            name for name in user.opportunities.exclude(image='').exclude(image__isnull=True)
            .values_list('image', flat=True)
        )

    user.delete()

    def _remove_files():
        for name in files:
            delete_stored_file(name)

    transaction.on_commit(_remove_files)
    logger.info(f"Deleted account {user_id}")


def build_password_reset_link(user: User) -> str:
    uid = urlsafe_base64_encode(force_bytes(user.pk))
    token = default_token_generator.make_token(user)
    return f"{settings.FRONTEND_URL.rstrip('/')}/reset-password?uid={uid}&token={token}"


def request_password_reset(email: str) -> None:
    """Queue a reset email when the account exists; silent otherwise."""
    from .tasks import send_password_reset_email

    user = User.objects.filter(email__iexact=email, is_active=True).first()
    if user is None:
        logger.info("Password reset requested for unknown email")
        return
    send_password_reset_email.delay(str(user.pk), build_password_reset_link(user))
