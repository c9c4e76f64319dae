"""
Notification Models.

In-app notifications tied to a user and, optionally, the opportunity that
triggered them.
"""

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class NotificationQuerySet(models.QuerySet):

    def for_user(self, user):
        return self.filter(user=user)

    def unread(self):
        return self.filter(is_read=False)


class Notification(models.Model):
    """
    A single in-app notification.
    """

    class NotificationType(models.TextChoices):
        MESSAGE = 'message', _('New Message')
        APPLICATION = 'application', _('New Application')
        APPLICATION_ACCEPTED = 'application_accepted', _('Application Accepted')
        APPLICATION_REJECTED = 'application_rejected', _('Application Rejected')
        SYSTEM = 'system', _('System')

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    opportunity = models.ForeignKey(
        'opportunities.Opportunity',
        on_delete=models.CASCADE,
        related_name='notifications',
        null=True,
        blank=True
    )
    notification_type = models.CharField(
        max_length=30,
        choices=NotificationType.choices,
        default=NotificationType.SYSTEM,
        db_index=True
    )
    message = models.TextField()
    is_read = models.BooleanField(default=False, db_index=True)
    read_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = NotificationQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at']
        verbose_name = _('Notification')
        verbose_name_plural = _('Notifications')
        indexes = [
            models.Index(fields=['user', 'is_read'], name='notificatio_user_id_8a7c6b_idx'),
            models.Index(fields=['user', '-created_at'], name='notificatio_user_id_3f1e2d_idx'),
        ]

    def __str__(self):
        return f"{self.get_notification_type_display()} for {self.user}"

    def mark_as_read(self):
        """Mark notification as read."""
        from django.utils import timezone

        if not self.is_read:
            self.is_read = True
            self.read_at = timezone.now()
            self.save(update_fields=['is_read', 'read_at'])
