"""
WebSocket Consumers for Real-Time Notifications.

Each user joins ``notifications_{user_id}``. Besides notifications, the same
group carries ``message_changed`` events so the inbox can refresh without a
second socket.
"""

import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.utils import timezone

from .services import user_group_name

logger = logging.getLogger(__name__)


class NotificationConsumer(AsyncWebsocketConsumer):
    """
    WebSocket consumer for real-time notifications.

    Each user connects to their own notification channel group.
    """

    async def connect(self):
        """Handle WebSocket connection."""
        self.user = self.scope.get('user')

        if not self.user or not self.user.is_authenticated:
            await self.close(code=4001)
            return

        self.user_group = user_group_name(self.user.pk)

        await self.channel_layer.group_add(
            self.user_group,
            self.channel_name
        )

        await self.accept()

        # Send initial connection confirmation with unread count
        unread_count = await self.get_unread_count()
        await self.send_json({
            'type': 'connection_established',
            'user_id': str(self.user.pk),
            'unread_count': unread_count,
            'timestamp': timezone.now().isoformat(),
        })

        logger.info(f"User {self.user.pk} connected to notifications")

    async def disconnect(self, close_code):
        """Handle WebSocket disconnection."""
        if hasattr(self, 'user_group'):
            await self.channel_layer.group_discard(
                self.user_group,
                self.channel_name
            )
            logger.info(f"User {self.user.pk} disconnected from notifications")

    async def receive(self, text_data=None, bytes_data=None):
        """Handle incoming WebSocket messages."""
        if not text_data:
            return

        try:
            data = json.loads(text_data)
        except json.JSONDecodeError:
            await self.send_json({
                'type': 'error',
                'message': 'Invalid JSON'
            })
            return

        message_type = data.get('type')

        if message_type == 'mark_read':
            await self.handle_mark_read(data)
        elif message_type == 'mark_all_read':
            await self.handle_mark_all_read()
        elif message_type == 'get_unread_count':
            await self.handle_get_unread_count()
        elif message_type == 'ping':
            await self.send_json({'type': 'pong'})
        else:
            await self.send_json({
                'type': 'error',
                'message': f'Unknown message type: {message_type}'
            })

    async def handle_mark_read(self, data):
        """Mark a notification as read."""
        notification_id = data.get('notification_id')
        if not notification_id:
            await self.send_json({'type': 'error', 'message': 'notification_id is required'})
            return

        success = await self.mark_notification_read(notification_id)
        unread_count = await self.get_unread_count()
        await self.send_json({
            'type': 'mark_read_response',
            'notification_id': notification_id,
            'success': success,
            'unread_count': unread_count,
        })

    async def handle_mark_all_read(self):
        """Mark all notifications as read."""
        count = await self.mark_all_read()
        await self.send_json({
            'type': 'mark_all_read_response',
            'success': True,
            'count': count,
            'unread_count': 0,
        })

    async def handle_get_unread_count(self):
        """Get current unread count."""
        count = await self.get_unread_count()
        await self.send_json({
            'type': 'unread_count',
            'count': count,
        })

    # ===== Channel layer handlers =====

    async def send_notification(self, event):
        """New notification created by NotificationService."""
        await self.send_json({
            'type': 'notification_created',
            'notification': event['notification'],
            'unread_count': event.get('unread_count'),
        })

    async def notification_updated(self, event):
        """Notification changed (usually read state)."""
        await self.send_json({
            'type': 'notification_updated',
            'notification': event['notification'],
            'unread_count': event.get('unread_count'),
        })

    async def notification_deleted(self, event):
        """Notification removed."""
        await self.send_json({
            'type': 'notification_deleted',
            'notification_id': event['notification_id'],
            'unread_count': event.get('unread_count'),
        })

    async def unread_count_update(self, event):
        """Handle unread count update event."""
        await self.send_json({
            'type': 'unread_count_update',
            'count': event.get('count', 0),
        })

    async def message_changed(self, event):
        """A direct message involving this user was created or updated."""
        await self.send_json({
            'type': 'message_changed',
            'action': event.get('action'),
            'message': event['message'],
        })

    # ===== Database operations =====

    @database_sync_to_async
    def get_unread_count(self) -> int:
        """Get count of unread notifications."""
        from .services import notification_service
        return notification_service.unread_count(self.user)

    @database_sync_to_async
    def mark_notification_read(self, notification_id) -> bool:
        """Mark a specific notification as read."""
        from .services import notification_service
        return notification_service.mark_as_read(self.user, notification_id)

    @database_sync_to_async
    def mark_all_read(self) -> int:
        """Mark all notifications as read."""
        from .services import notification_service
        return notification_service.mark_all_as_read(self.user)

    # ===== Utility methods =====

    async def send_json(self, content: dict):
        """Send JSON data to the WebSocket client."""
        await self.send(text_data=json.dumps(content))
