"""
Client Storage App Configuration.
"""

from django.apps import AppConfig


class ClientStorageConfig(AppConfig):
    """Configuration for the per-user client key-value store."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'client_storage'
    verbose_name = 'Client Storage'
