"""
JWT authentication for WebSocket connections.

Browsers cannot set an Authorization header on a WebSocket handshake, so the
access token travels in the query string:

    ws://host/ws/notifications/?token=<access>

Consumers then read ``scope['user']`` exactly as they would behind
AuthMiddlewareStack.
"""

import logging
from urllib.parse import parse_qs

from channels.auth import AuthMiddlewareStack
from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

logger = logging.getLogger(__name__)


@database_sync_to_async
def get_user_for_token(raw_token: str):
    """Resolve an access token to an active user, or AnonymousUser."""
    try:
        token = AccessToken(raw_token)
    except (InvalidToken, TokenError) as e:
        logger.info(f"Rejected WebSocket token: {e}")
        return AnonymousUser()

    User = get_user_model()
    user_id = token.get(api_settings.USER_ID_CLAIM)
    try:
        user = User.objects.get(**{api_settings.USER_ID_FIELD: user_id})
    except User.DoesNotExist:
        return AnonymousUser()

    if not user.is_active:
        return AnonymousUser()
    return user


class JWTAuthMiddleware(BaseMiddleware):
    """
    Populate scope['user'] from a ``token`` query parameter.

    Leaves an already-authenticated scope user (from the session) untouched.
    """

    async def __call__(self, scope, receive, send):
        query_string = scope.get('query_string', b'').decode()
        token = parse_qs(query_string).get('token', [None])[0]

        current = scope.get('user')
        if token and not (current and current.is_authenticated):
            scope['user'] = await get_user_for_token(token)
        elif current is None:
            scope['user'] = AnonymousUser()

        return await super().__call__(scope, receive, send)


def JWTAuthMiddlewareStack(inner):
    """Session auth first, then JWT from the query string."""
    return AuthMiddlewareStack(JWTAuthMiddleware(inner))
