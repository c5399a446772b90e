from __future__ import annotations

from datetime import datetime
from typing import TypedDict


class AccommodationData(TypedDict, total=False):
    name: str
    description: str
    images: list[str]


class PackageData(TypedDict, total=False):
    """
    Plain read-only package record consumed by the SEO aggregation code.

    Every key is optional: aggregation reads with ``.get()`` and degrades per
    field, so records coming from partial fixtures or older rows are safe.
    """

    id: int
    slug: str
    title: str
    description: str
    excerpt: str
    category: str
    tags: list[str]
    whats_included: list[str]
    highlights: list[str]
    accommodations: list[AccommodationData]
    price: float | None
    currency: str
    duration: str
    display_order: int | None
    updated_at: datetime | None
    is_published: bool
    featured_image: str
    url: str
