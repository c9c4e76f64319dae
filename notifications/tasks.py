"""
Celery tasks for notifications.

Periodic cleanup keeps the notifications table bounded.
"""

import logging
from datetime import timedelta

from celery import shared_task
from django.conf import settings
from django.utils import timezone

logger = logging.getLogger(__name__)


@shared_task(queue='notifications')
def cleanup_old_notifications(days: int = None, batch_size: int = 1000):
    """
    Delete read notifications older than ``days``.

    Args:
        days: Retention window (defaults to NOTIFICATION_RETENTION_DAYS)
        batch_size: Number of records to delete per batch

    Returns:
        dict: Number of notifications deleted.
    """
    from .models import Notification

    days = days if days is not None else settings.NOTIFICATION_RETENTION_DAYS
    cutoff = timezone.now() - timedelta(days=days)

    deleted = 0
    while True:
        ids = list(
            Notification.objects.filter(
                is_read=True,
                created_at__lt=cutoff,
            ).values_list('id', flat=True)[:batch_size]
        )
        if not ids:
            break
        count, _ = Notification.objects.filter(id__in=ids).delete()
        deleted += count

    logger.info(f"Cleaned up {deleted} notifications older than {days} days")
    return {'deleted': deleted}
