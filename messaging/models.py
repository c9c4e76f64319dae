"""
Messaging Models - One-to-one direct messages between users.

There is no separate conversation table: a conversation is the set of
messages exchanged between two users.
"""

import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _


class MessageQuerySet(models.QuerySet):

    def involving(self, user):
        """Messages the user sent or received."""
        return self.filter(Q(sender=user) | Q(receiver=user))

    def between(self, user, other):
        return self.filter(
            Q(sender=user, receiver=other) | Q(sender=other, receiver=user)
        )

    def unread_for(self, user):
        return self.filter(receiver=user, read=False)


class Message(models.Model):
    """A direct message from one user to another."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='sent_messages'
    )
    receiver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='received_messages'
    )
    content = models.TextField()
    read = models.BooleanField(default=False, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = MessageQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at']
        verbose_name = _('Message')
        verbose_name_plural = _('Messages')
        indexes = [
            models.Index(fields=['receiver', 'read'], name='messaging_m_receive_5c1d0e_idx'),
            models.Index(fields=['sender', 'receiver', 'created_at'], name='messaging_m_sender__9b2f47_idx'),
        ]

    def __str__(self):
        return f"{self.sender} -> {self.receiver}: {self.content[:30]}"

    def mark_as_read(self) -> bool:
        """Mark read; returns False when it already was."""
        if self.read:
            return False
        self.read = True
        self.save(update_fields=['read'])
        return True

    def other_participant(self, user):
        return self.receiver if self.sender_id == user.pk else self.sender
