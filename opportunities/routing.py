"""
WebSocket URL routing for opportunities app.
"""

from django.urls import re_path

from . import consumers

websocket_urlpatterns = [
    # Public feed of opportunity changes
    re_path(r'ws/opportunities/$', consumers.OpportunityFeedConsumer.as_asgi()),
]
