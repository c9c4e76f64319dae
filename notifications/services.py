"""
Notification Services.

NotificationService persists a notification and pushes it to the user's
WebSocket group through InAppNotificationService. A failed insert or push
is logged and never fails the caller, whose own write has already
happened; a missed push is picked up on the client's next fetch.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import DatabaseError, transaction
from django.utils import timezone

from .models import Notification

logger = logging.getLogger(__name__)
User = get_user_model()


def user_group_name(user_id) -> str:
    """Channel layer group for a user's notification sockets."""
    return f"notifications_{user_id}"


def get_notification_link(notification: Notification, viewer=None) -> Optional[str]:
    """
    Client route a notification should open.

    Application notifications send organizations to their dashboard and
    volunteers to the opportunity.
    """
    opportunity_id = notification.opportunity_id
    ntype = notification.notification_type

    if ntype == Notification.NotificationType.MESSAGE:
        return '/messages'

    if ntype == Notification.NotificationType.APPLICATION:
        if viewer is not None and getattr(viewer, 'role', None) == 'organization':
            return '/dashboard/organization'
        return f'/opportunities/{opportunity_id}' if opportunity_id else None

    if ntype in (
        Notification.NotificationType.APPLICATION_ACCEPTED,
        Notification.NotificationType.APPLICATION_REJECTED,
    ):
        return f'/opportunities/{opportunity_id}' if opportunity_id else None

    if opportunity_id:
        return f'/opportunities/{opportunity_id}'
    return None


def serialize_notification(notification: Notification) -> dict:
    """Plain-dict form pushed over WebSocket."""
    return {
        'id': notification.id,
        'user_id': str(notification.user_id),
        'opportunity_id': str(notification.opportunity_id) if notification.opportunity_id else None,
        'type': notification.notification_type,
        'message': notification.message,
        'is_read': notification.is_read,
        'link': get_notification_link(notification, notification.user),
        'created_at': notification.created_at.isoformat() if notification.created_at else None,
    }


def unread_count_for(user_id) -> int:
    return Notification.objects.filter(user_id=user_id, is_read=False).count()


@dataclass
class NotificationResult:
    """Result of a notification send operation."""
    success: bool
    notification_id: Optional[int] = None
    error_message: Optional[str] = None
    channel_type: Optional[str] = None


class InAppNotificationService:
    """Service for sending real-time in-app events via WebSocket."""

    channel_type = 'in_app'

    def push(self, user_id, event: dict) -> bool:
        """
        Send a channel-layer event to the user's group.

        Returns False (after logging) when the layer is unavailable.
        """
        try:
            channel_layer = get_channel_layer()
            if not channel_layer:
                raise ValueError("Channel layer is not configured")

            async_to_sync(channel_layer.group_send)(user_group_name(user_id), event)
            return True
        except Exception as e:
            logger.warning(f"In-app push to user {user_id} failed: {e}")
            return False

    def send(self, notification: Notification) -> NotificationResult:
        """Send a newly created notification."""
        delivered = self.push(notification.user_id, {
            'type': 'send_notification',
            'notification': serialize_notification(notification),
            'unread_count': unread_count_for(notification.user_id),
        })
        return NotificationResult(
            success=delivered,
            notification_id=notification.id,
            error_message=None if delivered else 'push failed',
            channel_type=self.channel_type,
        )

    def send_event(self, user_id, event_type: str, **payload) -> bool:
        """Send an arbitrary typed event (updates, deletes, message changes)."""
        return self.push(user_id, {'type': event_type, **payload})


class NotificationService:
    """
    Main notification dispatcher service.
    """

    def __init__(self):
        self.in_app = InAppNotificationService()

    def notify(
        self,
        user,
        notification_type: str,
        message: str,
        opportunity=None,
    ) -> NotificationResult:
        """
        Create a notification for ``user`` and push it in-app.

        Args:
            user: Recipient
            notification_type: One of Notification.NotificationType
            message: Text shown to the user
            opportunity: Related opportunity (optional)

        Returns:
            NotificationResult. A failed insert is logged and reported
            with ``success=False``; otherwise ``success`` reflects the
            realtime push.
        """
        try:
            with transaction.atomic():
                notification = Notification.objects.create(
                    user=user,
                    opportunity=opportunity,
                    notification_type=notification_type,
                    message=message,
                )
        except DatabaseError as e:
            logger.warning(
                f"Could not store {notification_type} notification for user {user.pk}: {e}"
            )
            return NotificationResult(
                success=False,
                error_message=str(e),
                channel_type=self.in_app.channel_type,
            )

        logger.info(
            f"Notification {notification.id} ({notification_type}) created for user {user.pk}"
        )
        return self.in_app.send(notification)

    def latest_for(self, user, limit: int = None):
        limit = limit or settings.NOTIFICATION_FETCH_LIMIT
        return (
            Notification.objects.for_user(user)
            .select_related('opportunity')
            .order_by('-created_at')[:limit]
        )

    def unread_count(self, user) -> int:
        return unread_count_for(user.pk)

    def mark_as_read(self, user, notification_id) -> bool:
        try:
            notification = Notification.objects.get(id=notification_id, user=user)
        except Notification.DoesNotExist:
            return False
        notification.mark_as_read()
        return True

    def mark_all_as_read(self, user) -> int:
        """Mark every unread notification read; pushes the new count."""
        updated = Notification.objects.for_user(user).unread().update(
            is_read=True,
            read_at=timezone.now(),
        )
        if updated:
            self.in_app.send_event(user.pk, 'unread_count_update', count=0)
        return updated


# Singleton instance
notification_service = NotificationService()


def send_notification(
    user,
    notification_type: str,
    message: str,
    **kwargs
) -> NotificationResult:
    """Convenience function for sending notifications."""
    return notification_service.notify(
        user=user,
        notification_type=notification_type,
        message=message,
        **kwargs
    )
