"""
Django Preorder app configuration.
"""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class PreorderConfig(AppConfig):
    """Preorder application configuration."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "preorder"
    verbose_name = _("Pre-orders")

    def ready(self):
        """Import signal handlers when app is ready."""
        # Import handlers to register them
        from preorder.signals import handlers  # noqa: F401
