"""
Messaging services: sending, read state and conversation views.

Conversations are derived from messages, grouped by the other participant.
"""

import logging
from typing import List, Tuple

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError

from api.exceptions import InvalidInputError, PermissionDeniedError, ResourceNotFoundError
from notifications.models import Notification
from notifications.services import notification_service

from .models import Message

logger = logging.getLogger(__name__)
User = get_user_model()


def _preview(content: str) -> str:
    limit = settings.MESSAGE_PREVIEW_LENGTH
    if len(content) > limit:
        return f"{content[:limit]}..."
    return content


def serialize_message(message: Message) -> dict:
    """Plain-dict form pushed over WebSocket."""
    return {
        'id': str(message.id),
        'sender_id': str(message.sender_id),
        'receiver_id': str(message.receiver_id),
        'content': message.content,
        'read': message.read,
        'created_at': message.created_at.isoformat() if message.created_at else None,
    }


def get_recipient(receiver_id) -> User:
    try:
        return User.objects.get(pk=receiver_id, is_active=True)
    except (User.DoesNotExist, ValidationError, ValueError):
        raise ResourceNotFoundError("Recipient not found", resource_type='User', resource_id=receiver_id)


def send_message(sender, receiver_id, content: str) -> Message:
    """Create a message and notify the receiver."""
    receiver = get_recipient(receiver_id)
    if receiver.pk == sender.pk:
        raise InvalidInputError("You cannot send a message to yourself")

    content = (content or '').strip()
    if not content:
        raise InvalidInputError("Message cannot be empty")

    message = Message.objects.create(sender=sender, receiver=receiver, content=content)
    logger.info(f"Message {message.pk} sent from {sender.pk} to {receiver.pk}")

    notification_service.notify(
        user=receiver,
        notification_type=Notification.NotificationType.MESSAGE,
        message=f"New message from {sender.display_name}: {_preview(content)}",
    )
    return message


def mark_message_read(message: Message, user) -> Message:
    """Mark a received message read. Repeating it is a no-op."""
    if message.receiver_id != user.pk:
        raise PermissionDeniedError("Only the recipient can mark this message as read")
    message.mark_as_read()
    return message


def conversations_for(user) -> List[dict]:
    """
    The user's conversations, most recent first.

    Each entry has the other ``participant``, the ``last_message`` and the
    number of messages from them the user has not read.
    """
    conversations = {}
    messages = (
        Message.objects.involving(user)
        .select_related('sender', 'receiver')
        .order_by('-created_at')
    )
    for message in messages:
        other = message.other_participant(user)
        entry = conversations.get(other.pk)
        if entry is None:
            entry = conversations[other.pk] = {
                'participant': other,
                'last_message': message,
                'unread_count': 0,
            }
        if message.receiver_id == user.pk and not message.read:
            entry['unread_count'] += 1
    return list(conversations.values())


def conversation_with(user, other_id) -> Tuple[User, list]:
    """Messages with another user, oldest first; received ones are marked read."""
    try:
        other = User.objects.get(pk=other_id)
    except (User.DoesNotExist, ValidationError, ValueError):
        raise ResourceNotFoundError(resource_type='User', resource_id=other_id)

    messages = list(
        Message.objects.between(user, other)
        .select_related('sender', 'receiver')
        .order_by('created_at')
    )
    for message in messages:
        if message.receiver_id == user.pk:
            message.mark_as_read()
    return other, messages


def unread_count(user) -> int:
    return Message.objects.unread_for(user).count()
