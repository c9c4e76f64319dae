"""
Cache-backed per-user key-value store.

Values live in the default Django cache under
``client_storage:{user_id}:{key}`` and may be any JSON value.
"""

import logging
import re
from typing import Any, Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.core.cache import cache

from api.exceptions import InvalidInputError

logger = logging.getLogger(__name__)

KEY_PATTERN = re.compile(r'^[A-Za-z0-9_.:-]{1,200}$')


def storage_group_name(user_id) -> str:
    """Channel layer group for a user's storage sockets."""
    return f"client_storage_{user_id}"


def is_valid_key(key) -> bool:
    return isinstance(key, str) and bool(KEY_PATTERN.match(key))


def validate_key(key) -> str:
    if not is_valid_key(key):
        raise InvalidInputError(
            "Keys must be 1-200 characters of letters, digits, '_', '.', ':' or '-'"
        )
    return key


def cache_key(user_id, key: str) -> str:
    return f"client_storage:{user_id}:{key}"


def sync_event(key: str, value: Any, origin: Optional[str] = None) -> dict:
    """Channel layer event announcing a changed key."""
    return {
        'type': 'storage_sync',
        'key': key,
        'value': value,
        'origin': origin,
    }


class ClientStore:
    """
    Per-user store with change broadcasting.

    ``origin`` is the channel name of the socket that made the change, so
    that socket is not echoed its own write.
    """

    def get(self, user_id, key: str) -> Any:
        return cache.get(cache_key(user_id, validate_key(key)))

    def set(self, user_id, key: str, value: Any, origin: Optional[str] = None) -> Any:
        cache.set(
            cache_key(user_id, validate_key(key)),
            value,
            timeout=settings.CLIENT_STORAGE_TIMEOUT,
        )
        logger.debug(f"Stored key {key} for user {user_id}")
        self.broadcast(user_id, key, value, origin)
        return value

    def remove(self, user_id, key: str, origin: Optional[str] = None) -> None:
        cache.delete(cache_key(user_id, validate_key(key)))
        logger.debug(f"Removed key {key} for user {user_id}")
        self.broadcast(user_id, key, None, origin)

    def broadcast(self, user_id, key: str, value: Any, origin: Optional[str] = None) -> bool:
        try:
            channel_layer = get_channel_layer()
            if not channel_layer:
                raise ValueError("Channel layer is not configured")
            async_to_sync(channel_layer.group_send)(
                storage_group_name(user_id),
                sync_event(key, value, origin),
            )
            return True
        except Exception as e:
            logger.warning(f"Storage sync for user {user_id} failed: {e}")
            return False


# Singleton instance
client_store = ClientStore()
