"""
Push message changes to both participants' notification sockets.
"""

from django.db.models.signals import post_save
from django.dispatch import receiver

from notifications.services import notification_service

from .models import Message
from .services import serialize_message


@receiver(post_save, sender=Message)
def message_saved(sender, instance, created, **kwargs):
    payload = serialize_message(instance)
    action = 'created' if created else 'updated'
    for user_id in {instance.sender_id, instance.receiver_id}:
        notification_service.in_app.send_event(
            user_id,
            'message_changed',
            action=action,
            message=payload,
        )
