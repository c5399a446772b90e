from __future__ import annotations

from typing import Any

from django.db.models.signals import post_delete, post_save, pre_save
from django.dispatch import receiver

from collections_app.aggregation import normalize_slug
from collections_app.registry import iter_collection_configs
from flightsandpackages.page_cache import (
    collection_page_cache_key,
    collections_index_cache_key,
    destination_page_cache_key,
    destinations_index_cache_key,
    invalidate_cached_pages,
)

from .models import FlightPackage


def _affected_page_cache_keys(*categories: object) -> list[str]:
    # Any package edit can move it in or out of any collection.
    keys = [collection_page_cache_key(config.slug) for config in iter_collection_configs()]
    keys.append(collections_index_cache_key())
    keys.append(destinations_index_cache_key())
    for category in categories:
        destination_slug = normalize_slug(category)
        if destination_slug:
            keys.append(destination_page_cache_key(destination_slug))
    return keys


@receiver(pre_save, sender=FlightPackage)
def track_previous_package_category(sender: type[FlightPackage], instance: FlightPackage, **kwargs: Any) -> None:
    if not instance.pk:
        return

    old_row = FlightPackage.objects.only("id", "category").filter(pk=instance.pk).first()
    if old_row is None:
        return
    setattr(instance, "_previous_category_for_cache", old_row.category)


@receiver(post_save, sender=FlightPackage)
def invalidate_pages_after_package_save(sender: type[FlightPackage], instance: FlightPackage, **kwargs: Any) -> None:
    previous_category = getattr(instance, "_previous_category_for_cache", "")
    invalidate_cached_pages(_affected_page_cache_keys(instance.category, previous_category))


@receiver(post_delete, sender=FlightPackage)
def invalidate_pages_after_package_delete(sender: type[FlightPackage], instance: FlightPackage, **kwargs: Any) -> None:
    invalidate_cached_pages(_affected_page_cache_keys(instance.category))
