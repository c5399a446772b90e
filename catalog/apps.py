from importlib import import_module

from django.apps import AppConfig


class CatalogConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "catalog"
    verbose_name = "Package catalog"

    def ready(self) -> None:
        # Register model signal handlers for SEO page cache invalidation.
        import_module("catalog.signals")
