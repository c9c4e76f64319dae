"""
WebSocket URL routing for client storage.
"""

from django.urls import re_path

from . import consumers

websocket_urlpatterns = [
    re_path(r'ws/storage/$', consumers.StorageConsumer.as_asgi()),
]
