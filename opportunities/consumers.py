"""
WebSocket consumer for the live opportunity feed.

Every connected client joins one broadcast group. Saves and deletes of
opportunities are pushed from signals through the ``broadcast_*`` helpers.
Only active opportunities are published in full; the rest go out as
``opportunity_deleted``.
"""

import json
import logging

from asgiref.sync import async_to_sync
from channels.generic.websocket import AsyncWebsocketConsumer
from channels.layers import get_channel_layer
from django.utils import timezone
from rest_framework.utils.encoders import JSONEncoder

logger = logging.getLogger(__name__)

FEED_GROUP = 'opportunities_live'


class OpportunityFeedConsumer(AsyncWebsocketConsumer):
    """Relays opportunity created/updated/deleted events to the client."""

    async def connect(self):
        await self.channel_layer.group_add(FEED_GROUP, self.channel_name)
        await self.accept()
        await self.send_json({
            'type': 'connection_established',
            'timestamp': timezone.now().isoformat(),
        })

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(FEED_GROUP, self.channel_name)

    async def receive(self, text_data=None, bytes_data=None):
        if not text_data:
            return

        try:
            data = json.loads(text_data)
        except json.JSONDecodeError:
            await self.send_json({'type': 'error', 'message': 'Invalid JSON'})
            return

        if data.get('type') == 'ping':
            await self.send_json({'type': 'pong'})
        else:
            await self.send_json({
                'type': 'error',
                'message': f"Unknown message type: {data.get('type')}"
            })

    # ===== Channel layer handlers =====

    async def opportunity_created(self, event):
        await self.send_json({'type': 'opportunity_created', 'opportunity': event['opportunity']})

    async def opportunity_updated(self, event):
        await self.send_json({'type': 'opportunity_updated', 'opportunity': event['opportunity']})

    async def opportunity_deleted(self, event):
        await self.send_json({'type': 'opportunity_deleted', 'opportunity_id': event['opportunity_id']})

    async def send_json(self, content: dict):
        await self.send(text_data=json.dumps(content))


def _plain(data) -> dict:
    """Serializer output reduced to JSON types for the channel layer."""
    return json.loads(json.dumps(data, cls=JSONEncoder))


def _broadcast(event: dict) -> bool:
    try:
        channel_layer = get_channel_layer()
        if not channel_layer:
            raise ValueError("Channel layer is not configured")
        async_to_sync(channel_layer.group_send)(FEED_GROUP, event)
        return True
    except Exception as e:
        logger.warning(f"Opportunity feed broadcast failed: {e}")
        return False


def broadcast_opportunity_saved(opportunity, created: bool) -> bool:
    """
    Publish a saved opportunity to the feed.

    The feed is public, so an opportunity that is not active is announced
    as removed, by id only.
    """
    from .serializers import OpportunitySerializer

    if not opportunity.is_active:
        return broadcast_opportunity_deleted(opportunity.pk)

    return _broadcast({
        'type': 'opportunity_created' if created else 'opportunity_updated',
        'opportunity': _plain(OpportunitySerializer(opportunity).data),
    })


def broadcast_opportunity_deleted(opportunity_id) -> bool:
    return _broadcast({
        'type': 'opportunity_deleted',
        'opportunity_id': str(opportunity_id),
    })
