"""
Django signals to push notification changes to connected clients.

New notifications are pushed by NotificationService itself; these receivers
cover updates (read state) and deletions so every open client keeps its
unread count in sync.
"""

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .models import Notification
from .services import notification_service, serialize_notification, unread_count_for


@receiver(post_save, sender=Notification)
def notification_saved(sender, instance, created, **kwargs):
    """Broadcast notification updates via WebSocket."""
    if created:
        return

    notification_service.in_app.send_event(
        instance.user_id,
        'notification_updated',
        notification=serialize_notification(instance),
        unread_count=unread_count_for(instance.user_id),
    )


@receiver(post_delete, sender=Notification)
def notification_deleted(sender, instance, **kwargs):
    """Broadcast notification deletion via WebSocket."""
    notification_service.in_app.send_event(
        instance.user_id,
        'notification_deleted',
        notification_id=instance.id,
        unread_count=unread_count_for(instance.user_id),
    )
