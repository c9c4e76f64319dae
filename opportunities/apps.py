"""
Opportunities App Configuration.
"""

from django.apps import AppConfig


class OpportunitiesConfig(AppConfig):
    """Configuration for the opportunities app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'opportunities'
    verbose_name = 'Opportunities'

    def ready(self):
        """Register signals when app is ready."""
        import opportunities.signals  # noqa: F401
