"""
Opportunity services: posting, applications, admin review and dashboards.

Views stay thin; the rules about who may do what, and the notifications
that follow, live here.
"""

import logging
from typing import Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Count, Q

from api.exceptions import (
    InsufficientRoleError,
    InvalidInputError,
    OwnershipRequiredError,
    ResourceAlreadyExistsError,
    ResourceNotFoundError,
    ResourceStateError,
    StorageError,
)
from core.storage import delete_stored_file
from messaging.models import Message
from notifications.models import Notification
from notifications.services import notification_service

from .models import AdminApproval, Application, Opportunity

logger = logging.getLogger(__name__)
User = get_user_model()

REQUIRED_FIELDS = ('title', 'description', 'location')
MISSING_FIELDS_MESSAGE = "Please fill in all required fields"


def _clean_causes(causes):
    return [str(c).strip() for c in causes or [] if str(c).strip()]


def _clean_opportunity_data(data: dict, partial: bool = False) -> dict:
    """Trim text fields and causes; blank required fields are rejected."""
    cleaned = dict(data)
    for field in REQUIRED_FIELDS:
        if field not in cleaned and partial:
            continue
        value = (cleaned.get(field) or '').strip()
        if not value:
            raise InvalidInputError(MISSING_FIELDS_MESSAGE)
        cleaned[field] = value

    if 'cause_type' in cleaned:
        cleaned['cause_type'] = (cleaned['cause_type'] or '').strip()
    if 'causes' in cleaned:
        cleaned['causes'] = _clean_causes(cleaned['causes'])
    return cleaned


def _require_role(user, role):
    if user.role != role:
        raise InsufficientRoleError(required_role=role, current_role=user.role)


def _require_owner(opportunity: Opportunity, user, detail: str = None):
    if not opportunity.is_owned_by(user):
        raise OwnershipRequiredError(detail=detail)


def visible_opportunities(user):
    """
    Opportunities a user may browse.

    Everyone sees active posts; organizations also see their own inactive
    ones; platform admins see everything.
    """
    queryset = Opportunity.objects.select_related('created_by', 'created_by__organization_profile')
    if user is not None and user.is_authenticated:
        if user.is_platform_admin:
            return queryset
        if user.is_organization:
            return queryset.filter(Q(status=Opportunity.Status.ACTIVE) | Q(created_by=user))
    return queryset.active()


def get_opportunity(opportunity_id) -> Opportunity:
    try:
        return Opportunity.objects.select_related('created_by').get(pk=opportunity_id)
    except (Opportunity.DoesNotExist, ValidationError, ValueError):
        raise ResourceNotFoundError("Opportunity not found", resource_type='Opportunity',
                                    resource_id=opportunity_id)


def first_platform_admin() -> Optional[User]:
    return (
        User.objects.filter(Q(role=User.Role.ADMIN) | Q(is_superuser=True), is_active=True)
        .order_by('created_at')
        .first()
    )


def _queue_admin_review(opportunity: Opportunity) -> Optional[AdminApproval]:
    """Create a pending review for the first admin; failures are only logged."""
    try:
        admin = first_platform_admin()
        if admin is None:
            return None
        with transaction.atomic():
            return AdminApproval.objects.create(
                opportunity=opportunity,
                admin=admin,
                status=AdminApproval.ApprovalStatus.PENDING,
            )
    except DatabaseError as e:
        logger.error(f"Could not queue admin review for opportunity {opportunity.pk}: {e}")
        return None


# ==================== OPPORTUNITY CRUD ====================

def create_opportunity(user, data: dict) -> Opportunity:
    """Post a new active opportunity for an organization."""
    _require_role(user, User.Role.ORGANIZATION)
    cleaned = _clean_opportunity_data(data)
    image = cleaned.pop('image', None)
    cleaned.pop('status', None)

    opportunity = Opportunity(created_by=user, status=Opportunity.Status.ACTIVE, **cleaned)
    if image:
        try:
            opportunity.image.save(image.name, image, save=False)
        except OSError as e:
            logger.error(f"Failed to store image for new opportunity by {user.pk}: {e}")
            raise StorageError()
    opportunity.save()
    logger.info(f"Opportunity {opportunity.pk} created by organization {user.pk}")

    _queue_admin_review(opportunity)
    return opportunity


def update_opportunity(opportunity: Opportunity, user, data: dict) -> Opportunity:
    _require_owner(opportunity, user, "You do not have permission to edit this opportunity")
    cleaned = _clean_opportunity_data(data, partial=True)
    image = cleaned.pop('image', None)

    for field, value in cleaned.items():
        setattr(opportunity, field, value)
    opportunity.save()

    if image:
        replace_opportunity_image(opportunity, user, image)
    return opportunity


def delete_opportunity(opportunity: Opportunity, user) -> None:
    """
    Delete an opportunity with its admin reviews and stored image.

    Review and image cleanup failures are logged and do not block the delete.
    """
    if not user.is_organization or not opportunity.is_owned_by(user):
        raise OwnershipRequiredError("You do not have permission to delete this opportunity")

    opportunity_id = opportunity.pk
    try:
        with transaction.atomic():
            opportunity.admin_approvals.all().delete()
    except DatabaseError as e:
        logger.warning(f"Could not delete admin approvals for opportunity {opportunity_id}: {e}")

    if opportunity.image_path:
        delete_stored_file(opportunity.image_path)

    opportunity.delete()
    logger.info(f"Opportunity {opportunity_id} deleted by {user.pk}")


def replace_opportunity_image(opportunity: Opportunity, user, image) -> str:
    """Store a new image for the opportunity and return its public URL."""
    _require_owner(opportunity, user)
    previous = opportunity.image_path
    try:
        opportunity.image.save(image.name, image, save=False)
    except OSError as e:
        logger.error(f"Failed to store image for opportunity {opportunity.pk}: {e}")
        raise StorageError()
    opportunity.save(update_fields=['image', 'updated_at'])

    if previous and previous != opportunity.image_path:
        delete_stored_file(previous)
    return opportunity.image_url


def remove_opportunity_image(opportunity: Opportunity, user) -> None:
    _require_owner(opportunity, user)
    if opportunity.image_path:
        delete_stored_file(opportunity.image_path)
        opportunity.image = None
        opportunity.save(update_fields=['image', 'updated_at'])


# ==================== APPLICATIONS ====================

def apply_to_opportunity(user, opportunity_id, message: str = '') -> Application:
    """Submit a volunteer application and notify the organization."""
    _require_role(user, User.Role.VOLUNTEER)
    opportunity = get_opportunity(opportunity_id)

    if not opportunity.is_active:
        raise ResourceStateError(
            "This opportunity is not accepting applications",
            current_state=opportunity.status,
            allowed_states=[Opportunity.Status.ACTIVE],
        )

    duplicate = ResourceAlreadyExistsError(
        "You have already applied to this opportunity",
        resource_type='Application',
        conflicting_fields=['opportunity', 'volunteer'],
    )
    if Application.objects.filter(opportunity=opportunity, volunteer=user).exists():
        raise duplicate
    try:
        with transaction.atomic():
            application = Application.objects.create(
                opportunity=opportunity,
                volunteer=user,
                message=(message or '').strip(),
            )
    except IntegrityError:
        raise duplicate

    logger.info(f"Volunteer {user.pk} applied to opportunity {opportunity.pk}")
    notification_service.notify(
        user=opportunity.created_by,
        notification_type=Notification.NotificationType.APPLICATION,
        message=f'{user.name or "A volunteer"} has applied to your opportunity "{opportunity.title}"',
        opportunity=opportunity,
    )
    return application


def _decide(application: Application, user, accept: bool) -> Application:
    if not user.is_organization or not application.opportunity.is_owned_by(user):
        raise OwnershipRequiredError("Only the organization that posted this opportunity can review applications")

    try:
        if accept:
            application.accept()
        else:
            application.reject()
    except ValidationError:
        raise ResourceStateError(
            "This application has already been reviewed",
            current_state=application.status,
            allowed_states=[Application.ApplicationStatus.PENDING],
        )

    title = application.opportunity.title
    if accept:
        notification_type = Notification.NotificationType.APPLICATION_ACCEPTED
        message = (
            f'Your application for "{title}" has been accepted! '
            f'The organization will contact you with next steps.'
        )
    else:
        notification_type = Notification.NotificationType.APPLICATION_REJECTED
        message = (
            f'Your application for "{title}" has been reviewed. Unfortunately, the '
            f'organization has decided not to proceed with your application at this time.'
        )

    logger.info(f"Application {application.pk} {application.status} by organization {user.pk}")
    notification_service.notify(
        user=application.volunteer,
        notification_type=notification_type,
        message=message,
        opportunity=application.opportunity,
    )
    return application


def accept_application(application: Application, user) -> Application:
    return _decide(application, user, accept=True)


def reject_application(application: Application, user) -> Application:
    return _decide(application, user, accept=False)


def applications_for(user):
    """Applications a user may see, by role."""
    queryset = Application.objects.select_related(
        'opportunity', 'opportunity__created_by', 'volunteer', 'volunteer__volunteer_profile'
    )
    if user.is_platform_admin:
        return queryset
    if user.is_organization:
        return queryset.filter(opportunity__created_by=user)
    return queryset.filter(volunteer=user)


def accepted_volunteers_for(user, opportunity: Opportunity = None):
    """Accepted applications on an organization's opportunities."""
    queryset = applications_for(user).filter(status=Application.ApplicationStatus.ACCEPTED)
    if opportunity is not None:
        queryset = queryset.filter(opportunity=opportunity)
    return queryset.order_by('-updated_at')


# ==================== ADMIN REVIEW ====================

def approval_overview(admin, status: str = None) -> list:
    """
    Every opportunity with this admin's review status and notes.

    Opportunities the admin has not reviewed report ``pending``.
    """
    approvals = {
        a.opportunity_id: a
        for a in AdminApproval.objects.filter(admin=admin)
    }
    rows = []
    for opportunity in Opportunity.objects.select_related('created_by').order_by('-created_at'):
        approval = approvals.get(opportunity.pk)
        row = {
            'opportunity': opportunity,
            'status': approval.status if approval else AdminApproval.ApprovalStatus.PENDING,
            'notes': approval.notes if approval else '',
            'reviewed_at': approval.updated_at if approval and approval.status != AdminApproval.ApprovalStatus.PENDING else None,
        }
        if status and row['status'] != status:
            continue
        rows.append(row)
    return rows


def review_opportunity(admin, opportunity: Opportunity, status: str, notes: str = '') -> AdminApproval:
    """Approve or reject an opportunity, upserting the admin's record."""
    if status not in (AdminApproval.ApprovalStatus.APPROVED, AdminApproval.ApprovalStatus.REJECTED):
        raise InvalidInputError("Status must be approved or rejected")

    approval, _ = AdminApproval.objects.update_or_create(
        opportunity=opportunity,
        admin=admin,
        defaults={'status': status, 'notes': (notes or '').strip()},
    )
    logger.info(f"Admin {admin.pk} marked opportunity {opportunity.pk} {status}")
    return approval


# ==================== DASHBOARDS ====================

def unread_message_count(user) -> int:
    return Message.objects.filter(receiver=user, read=False).count()


def recommended_opportunities(user, limit: int = None):
    limit = limit or settings.RECOMMENDED_OPPORTUNITY_LIMIT
    profile = getattr(user, 'volunteer_profile', None)
    interests = profile.interests if profile else []
    return (
        Opportunity.objects.active()
        .matching_causes(interests)
        .select_related('created_by')
        .order_by('-created_at')[:limit]
    )


def volunteer_dashboard(user) -> dict:
    _require_role(user, User.Role.VOLUNTEER)
    counts = Application.objects.filter(volunteer=user).aggregate(
        applied=Count('id'),
        accepted=Count('id', filter=Q(status=Application.ApplicationStatus.ACCEPTED)),
    )
    return {
        'recommended_opportunities': list(recommended_opportunities(user)),
        'applied_count': counts['applied'],
        'accepted_count': counts['accepted'],
        'unread_messages': unread_message_count(user),
    }


def organization_dashboard(user) -> dict:
    _require_role(user, User.Role.ORGANIZATION)
    counts = Application.objects.filter(opportunity__created_by=user).aggregate(
        pending=Count('id', filter=Q(status=Application.ApplicationStatus.PENDING)),
        accepted=Count('id', filter=Q(status=Application.ApplicationStatus.ACCEPTED)),
        rejected=Count('id', filter=Q(status=Application.ApplicationStatus.REJECTED)),
    )
    return {
        'opportunity_count': Opportunity.objects.owned_by(user).count(),
        'pending_applications': counts['pending'],
        'accepted_applications': counts['accepted'],
        'rejected_applications': counts['rejected'],
        'unread_messages': unread_message_count(user),
    }
