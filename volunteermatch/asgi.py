"""
ASGI config for VolunteerMatch project.

HTTP requests go to Django; WebSocket connections are authenticated with a
JWT access token and routed to the app consumers.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'volunteermatch.settings')

# Initialize Django before importing consumers that touch models.
django_asgi_app = get_asgi_application()

from channels.routing import ProtocolTypeRouter, URLRouter  # noqa: E402
from channels.security.websocket import AllowedHostsOriginValidator  # noqa: E402

from core.websocket_auth import JWTAuthMiddlewareStack  # noqa: E402
from client_storage.routing import websocket_urlpatterns as storage_ws  # noqa: E402
from notifications.routing import websocket_urlpatterns as notifications_ws  # noqa: E402
from opportunities.routing import websocket_urlpatterns as opportunities_ws  # noqa: E402

websocket_urlpatterns = notifications_ws + opportunities_ws + storage_ws

application = ProtocolTypeRouter({
    'http': django_asgi_app,
    'websocket': AllowedHostsOriginValidator(
        JWTAuthMiddlewareStack(
            URLRouter(websocket_urlpatterns)
        )
    ),
})
