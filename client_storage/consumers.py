"""
WebSocket consumer for the client key-value store.

Client messages:
    {"type": "get", "key": "...", "request_id": "..."}
    {"type": "set", "key": "...", "value": <json>, "request_id": "..."}
    {"type": "remove", "key": "...", "request_id": "..."}
    {"type": "ping"}

Changes made by any of the user's clients arrive as
``{"type": "storage_sync", "key": ..., "value": ...}``; the socket that made
the change does not receive its own sync.
"""

import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer

from .services import client_store, is_valid_key, storage_group_name

logger = logging.getLogger(__name__)


class StorageConsumer(AsyncWebsocketConsumer):

    async def connect(self):
        self.user = self.scope.get('user')

        if not self.user or not self.user.is_authenticated:
            await self.close(code=4001)
            return

        self.storage_group = storage_group_name(self.user.pk)
        await self.channel_layer.group_add(self.storage_group, self.channel_name)
        await self.accept()
        logger.info(f"User {self.user.pk} connected to client storage")

    async def disconnect(self, close_code):
        if hasattr(self, 'storage_group'):
            await self.channel_layer.group_discard(self.storage_group, self.channel_name)

    async def receive(self, text_data=None, bytes_data=None):
        if not text_data:
            return

        try:
            data = json.loads(text_data)
        except json.JSONDecodeError:
            await self.send_json({'type': 'error', 'message': 'Invalid JSON'})
            return

        message_type = data.get('type')
        if message_type == 'ping':
            await self.send_json({'type': 'pong'})
            return
        if message_type not in ('get', 'set', 'remove'):
            await self.send_json({
                'type': 'error',
                'message': f'Unknown message type: {message_type}'
            })
            return

        key = data.get('key')
        request_id = data.get('request_id')
        if not is_valid_key(key):
            await self.send_json({
                'type': 'error',
                'message': 'Invalid key',
                'request_id': request_id,
            })
            return

        if message_type == 'get':
            value = await self.read(key)
            await self.send_json({
                'type': 'get_response', 'key': key, 'value': value, 'request_id': request_id,
            })
        elif message_type == 'set':
            await self.write(key, data.get('value'))
            await self.send_json({'type': 'set_response', 'key': key, 'request_id': request_id})
        else:
            await self.delete(key)
            await self.send_json({'type': 'remove_response', 'key': key, 'request_id': request_id})

    # ===== Channel layer handlers =====

    async def storage_sync(self, event):
        if event.get('origin') == self.channel_name:
            return
        await self.send_json({
            'type': 'storage_sync',
            'key': event['key'],
            'value': event.get('value'),
        })

    # ===== Store operations =====

    @database_sync_to_async
    def read(self, key):
        return client_store.get(self.user.pk, key)

    @database_sync_to_async
    def write(self, key, value):
        client_store.set(self.user.pk, key, value, origin=self.channel_name)

    @database_sync_to_async
    def delete(self, key):
        client_store.remove(self.user.pk, key, origin=self.channel_name)

    async def send_json(self, content: dict):
        await self.send(text_data=json.dumps(content))
