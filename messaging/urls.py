"""
URL configuration for messaging app.
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from . import views

app_name = 'messaging'

router = SimpleRouter()
router.register(r'messages', views.MessageViewSet, basename='message')
router.register(r'conversations', views.ConversationViewSet, basename='conversation')

urlpatterns = [
    path('', include(router.urls)),
]
