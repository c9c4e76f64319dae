"""
Messaging Serializers.
"""

from rest_framework import serializers

from accounts.serializers import UserSummarySerializer

from .models import Message


class MessageParticipantSerializer(serializers.Serializer):
    """Sender/receiver summary shown on each message."""
    id = serializers.UUIDField(read_only=True)
    name = serializers.SerializerMethodField()
    role = serializers.SerializerMethodField()

    def get_name(self, obj):
        return obj.name or 'Unknown User'

    def get_role(self, obj):
        return obj.role or 'unknown'


class MessageSerializer(serializers.ModelSerializer):
    sender = MessageParticipantSerializer(read_only=True)
    receiver = MessageParticipantSerializer(read_only=True)

    class Meta:
        model = Message
        fields = ['id', 'sender', 'receiver', 'content', 'read', 'created_at']
        read_only_fields = fields


class MessageCreateSerializer(serializers.Serializer):
    receiver_id = serializers.CharField(required=True)
    content = serializers.CharField(required=True, allow_blank=True)


class ConversationSerializer(serializers.Serializer):
    """A conversation summary, keyed by the other participant."""
    participant = UserSummarySerializer(read_only=True)
    last_message = MessageSerializer(read_only=True)
    unread_count = serializers.IntegerField(read_only=True)


class ConversationDetailSerializer(serializers.Serializer):
    participant = UserSummarySerializer(read_only=True)
    messages = MessageSerializer(many=True, read_only=True)
