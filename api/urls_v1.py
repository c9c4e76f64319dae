"""
API v1 URL Configuration for VolunteerMatch

This module consolidates all API v1 endpoints with proper namespacing:
- /api/v1/auth/token/ - JWT refresh and verification
- /api/v1/accounts/ - Registration, login, profiles, account management
- /api/v1/opportunities/ - Opportunities, applications, admin approvals, dashboards
- /api/v1/messaging/ - Direct messages and conversations
- /api/v1/notifications/ - Notification inbox
- /api/v1/storage/ - Per-user client key-value store
"""

from django.urls import include, path
from rest_framework_simplejwt.views import TokenRefreshView, TokenVerifyView

app_name = 'api_v1'

urlpatterns = [
    # ==================== Authentication ====================
    path('auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('auth/token/verify/', TokenVerifyView.as_view(), name='token_verify'),

    # ==================== Accounts ====================
    path('accounts/', include('accounts.urls')),

    # ==================== Opportunities ====================
    path('opportunities/', include('opportunities.urls')),

    # ==================== Messaging ====================
    path('messaging/', include('messaging.urls')),

    # ==================== Notifications ====================
    path('notifications/', include('notifications.urls')),

    # ==================== Client Storage ====================
    path('storage/', include('client_storage.urls')),
]
