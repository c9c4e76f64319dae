"""
Messaging App Configuration.
"""

from django.apps import AppConfig


class MessagingConfig(AppConfig):
    """Configuration for the direct messaging app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'messaging'
    verbose_name = 'Messaging'

    def ready(self):
        """Register signals when app is ready."""
        import messaging.signals  # noqa: F401
