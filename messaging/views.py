"""
Messaging API Views - Direct messages and conversations.

GET  /messages/                     messages sent or received (?with_user=)
POST /messages/                     send a message
POST /messages/{id}/mark-read/      mark a received message read
GET  /messages/unread-count/        unread received messages
GET  /conversations/                conversations, most recent first
GET  /conversations/{user_id}/      messages with one user; marks them read
"""

import logging

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, permissions, viewsets
from rest_framework.decorators import action

from api.base import APIResponse
from core.throttles import MessageSendThrottle

from . import services
from .filters import MessageFilter
from .models import Message
from .serializers import (
    ConversationDetailSerializer,
    ConversationSerializer,
    MessageCreateSerializer,
    MessageSerializer,
)

logger = logging.getLogger(__name__)

UUID_REGEX = r'[0-9a-fA-F-]{36}'


class MessageViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet
):
    """
    ViewSet for direct messages.

    Lists messages where the user is sender or receiver, newest first.
    """
    serializer_class = MessageSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_class = MessageFilter
    ordering = ['-created_at']
    lookup_value_regex = UUID_REGEX

    def get_queryset(self):
        return Message.objects.involving(self.request.user).select_related('sender', 'receiver')

    def get_throttles(self):
        if self.action == 'create':
            return [MessageSendThrottle()]
        return super().get_throttles()

    @extend_schema(request=MessageCreateSerializer, responses=MessageSerializer)
    def create(self, request, *args, **kwargs):
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        message = services.send_message(
            request.user,
            serializer.validated_data['receiver_id'],
            serializer.validated_data['content'],
        )
        return APIResponse.created(data=MessageSerializer(message).data, message="Message sent")

    @action(detail=True, methods=['post'], url_path='mark-read')
    def mark_read(self, request, pk=None):
        message = services.mark_message_read(self.get_object(), request.user)
        return APIResponse.success(data=self.get_serializer(message).data)

    @action(detail=False, methods=['get'], url_path='unread-count')
    def unread_count(self, request):
        return APIResponse.success(data={'unread_count': services.unread_count(request.user)})


class ConversationViewSet(viewsets.ViewSet):
    """Conversations grouped by the other participant."""
    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = UUID_REGEX

    @extend_schema(responses=ConversationSerializer(many=True))
    def list(self, request):
        conversations = services.conversations_for(request.user)
        return APIResponse.success(data=ConversationSerializer(conversations, many=True).data)

    @extend_schema(responses=ConversationDetailSerializer)
    def retrieve(self, request, pk=None):
        other, messages = services.conversation_with(request.user, pk)
        return APIResponse.success(
            data=ConversationDetailSerializer({'participant': other, 'messages': messages}).data,
            meta={'unread_count': services.unread_count(request.user)}
        )
