"""
GATE Access Store - App Configuration
=====================================
Relational storage for guest credentials and deliveries.
"""

from django.apps import AppConfig


class AccessStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.access_store"
    label = "access_store"
    verbose_name = "GATE Access Store"
