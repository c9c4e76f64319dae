"""
Opportunities Models - Volunteer opportunities, applications and admin review.

An organization posts an Opportunity; volunteers submit one Application each;
the organization accepts or rejects it. Platform admins record an
AdminApproval per opportunity with review notes.
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _

from core.storage import build_opportunity_image_path


def opportunity_image_upload_to(instance, filename):
    return build_opportunity_image_path(instance.created_by_id, instance.pk, filename)


class OpportunityQuerySet(models.QuerySet):

    def active(self):
        return self.filter(status=Opportunity.Status.ACTIVE)

    def owned_by(self, user):
        return self.filter(created_by=user)

    def matching_causes(self, causes):
        """
        Opportunities sharing at least one cause with ``causes``.

        Causes are stored as JSON lists, so the intersection is computed in
        Python to stay portable across database backends.
        """
        wanted = {c for c in causes or [] if c}
        if not wanted:
            return self.none()
        ids = [
            pk for pk, opp_causes in self.values_list('pk', 'causes')
            if wanted.intersection(opp_causes or [])
        ]
        return self.filter(pk__in=ids)


class Opportunity(models.Model):
    """A volunteering opportunity posted by an organization."""

    class Status(models.TextChoices):
        ACTIVE = 'active', _('Active')
        INACTIVE = 'inactive', _('Inactive')

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    description = models.TextField()
    location = models.CharField(max_length=255)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='opportunities'
    )
    cause_type = models.CharField(max_length=100, blank=True)
    causes = models.JSONField(default=list, blank=True)
    image = models.ImageField(
        upload_to=opportunity_image_upload_to,
        max_length=255,
        blank=True,
        null=True
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
        db_index=True
    )

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OpportunityQuerySet.as_manager()

    class Meta:
        verbose_name = _('Opportunity')
        verbose_name_plural = _('Opportunities')
        ordering = ['-created_at']

    def __str__(self):
        return self.title

    @property
    def is_active(self) -> bool:
        return self.status == self.Status.ACTIVE

    @property
    def image_url(self):
        return self.image.url if self.image else None

    @property
    def image_path(self):
        return self.image.name if self.image else None

    def is_owned_by(self, user) -> bool:
        return user is not None and self.created_by_id == getattr(user, 'pk', None)


class Application(models.Model):
    """A volunteer's application to an opportunity."""

    class ApplicationStatus(models.TextChoices):
        PENDING = 'pending', _('Pending')
        ACCEPTED = 'accepted', _('Accepted')
        REJECTED = 'rejected', _('Rejected')

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    opportunity = models.ForeignKey(
        Opportunity,
        on_delete=models.CASCADE,
        related_name='applications'
    )
    volunteer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='applications'
    )
    status = models.CharField(
        max_length=20,
        choices=ApplicationStatus.choices,
        default=ApplicationStatus.PENDING,
        db_index=True
    )
    message = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Application')
        verbose_name_plural = _('Applications')
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['opportunity', 'volunteer'],
                name='unique_application_per_volunteer'
            ),
        ]

    def __str__(self):
        return f"{self.volunteer} -> {self.opportunity} ({self.status})"

    @property
    def is_pending(self) -> bool:
        return self.status == self.ApplicationStatus.PENDING

    def accept(self):
        """Accept a pending application."""
        if not self.is_pending:
            raise ValidationError(_('Only pending applications can be accepted.'))
        self.status = self.ApplicationStatus.ACCEPTED
        self.save(update_fields=['status', 'updated_at'])

    def reject(self):
        """Reject a pending application."""
        if not self.is_pending:
            raise ValidationError(_('Only pending applications can be rejected.'))
        self.status = self.ApplicationStatus.REJECTED
        self.save(update_fields=['status', 'updated_at'])


class AdminApproval(models.Model):
    """A platform admin's review of an opportunity."""

    class ApprovalStatus(models.TextChoices):
        PENDING = 'pending', _('Pending')
        APPROVED = 'approved', _('Approved')
        REJECTED = 'rejected', _('Rejected')

    opportunity = models.ForeignKey(
        Opportunity,
        on_delete=models.CASCADE,
        related_name='admin_approvals'
    )
    admin = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='admin_approvals'
    )
    status = models.CharField(
        max_length=20,
        choices=ApprovalStatus.choices,
        default=ApprovalStatus.PENDING,
        db_index=True
    )
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Admin Approval')
        verbose_name_plural = _('Admin Approvals')
        ordering = ['-updated_at']
        constraints = [
            models.UniqueConstraint(
                fields=['opportunity', 'admin'],
                name='unique_approval_per_admin'
            ),
        ]

    def __str__(self):
        return f"{self.opportunity} - {self.status}"
