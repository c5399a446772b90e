from __future__ import annotations

from typing import cast

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F

from .records import AccommodationData, PackageData


def _string_list(value: object) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item) for item in cast(list[object], value) if item is not None]


def _accommodation_list(value: object) -> list[AccommodationData]:
    if not isinstance(value, (list, tuple)):
        return []
    accommodations: list[AccommodationData] = []
    for raw_item in cast(list[object], value):
        if not isinstance(raw_item, dict):
            continue
        item = cast(dict[str, object], raw_item)
        accommodations.append(
            {
                "name": str(item.get("name", "") or ""),
                "description": str(item.get("description", "") or ""),
                "images": _string_list(item.get("images")),
            }
        )
    return accommodations


class FlightPackage(models.Model):
    """
    Flight-inclusive holiday package maintained from the admin back-office.

    Collection and destination landing pages are derived from these rows on
    every request, so nothing here stores aggregate state.
    """

    title = models.CharField(max_length=240)
    slug = models.SlugField(max_length=240, unique=True)
    category = models.CharField(max_length=120, blank=True, help_text="Primary destination, e.g. India.")
    tags = models.JSONField(default=list, blank=True)
    price = models.FloatField(blank=True, null=True, help_text="Per-person twin-share price; empty means on request.")
    currency = models.CharField(max_length=3, default="GBP")
    description = models.TextField(blank=True)
    excerpt = models.CharField(max_length=500, blank=True)
    whats_included = models.JSONField(default=list, blank=True)
    highlights = models.JSONField(default=list, blank=True)
    accommodations = models.JSONField(default=list, blank=True)
    duration = models.CharField(max_length=80, blank=True, help_text='Free text such as "10 Nights / 11 Days".')
    featured_image = models.CharField(max_length=500, blank=True)
    display_order = models.IntegerField(blank=True, null=True, db_index=True)
    is_published = models.BooleanField(default=False, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("display_order", "id")
        indexes = [
            models.Index(fields=("is_published", "category"), name="package_pub_category_idx"),
        ]

    def __str__(self) -> str:
        return f"Package #{self.pk or 'new'}: {self.title}"

    def clean(self) -> None:
        super().clean()
        if self.price is not None and self.price < 0:
            raise ValidationError({"price": "Price cannot be negative."})
        for field_name in ("tags", "whats_included", "highlights", "accommodations"):
            if not isinstance(getattr(self, field_name), list):
                raise ValidationError({field_name: "Must be a JSON list."})

    def get_absolute_url(self) -> str:
        return f"/packages/{self.slug}/"

    def to_package_data(self) -> PackageData:
        return {
            "id": int(self.pk or 0),
            "slug": self.slug,
            "title": self.title,
            "description": self.description,
            "excerpt": self.excerpt,
            "category": self.category,
            "tags": _string_list(self.tags),
            "whats_included": _string_list(self.whats_included),
            "highlights": _string_list(self.highlights),
            "accommodations": _accommodation_list(self.accommodations),
            "price": float(self.price) if self.price is not None else None,
            "currency": self.currency,
            "duration": self.duration,
            "display_order": self.display_order,
            "updated_at": self.updated_at,
            "is_published": bool(self.is_published),
            "featured_image": self.featured_image,
            "url": self.get_absolute_url(),
        }


def published_package_records() -> list[PackageData]:
    rows = FlightPackage.objects.filter(is_published=True).order_by(F("display_order").asc(nulls_last=True), "pk")
    return [row.to_package_data() for row in rows]
