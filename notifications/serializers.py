"""
Notification serializers.
"""

from rest_framework import serializers

from .models import Notification
from .services import get_notification_link


class NotificationSerializer(serializers.ModelSerializer):
    """Notification with the client route it should open."""

    type = serializers.CharField(source='notification_type', read_only=True)
    opportunity_id = serializers.UUIDField(read_only=True, allow_null=True)
    opportunity_title = serializers.SerializerMethodField()
    link = serializers.SerializerMethodField()

    class Meta:
        model = Notification
        fields = [
            'id', 'type', 'message', 'is_read', 'read_at',
            'opportunity_id', 'opportunity_title', 'link', 'created_at',
        ]
        read_only_fields = fields

    def get_opportunity_title(self, obj):
        return obj.opportunity.title if obj.opportunity_id and obj.opportunity else None

    def get_link(self, obj):
        request = self.context.get('request')
        viewer = request.user if request else obj.user
        return get_notification_link(obj, viewer)
