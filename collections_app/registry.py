from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Final


class UnknownCollectionError(KeyError):
    """Raised when a collection slug is not present in the registry."""


@dataclass(frozen=True)
class CollectionConfig:
    slug: str
    name: str
    h1: str
    meta_title_suffix: str
    keywords: tuple[str, ...]
    tag_matches: tuple[str, ...]
    title_matches: tuple[str, ...]
    featured_limit: int = 12

    @property
    def primary_keyword(self) -> str:
        if self.keywords:
            return self.keywords[0]
        return self.name.lower()


def build_collection_registry(*configs: CollectionConfig) -> Mapping[str, CollectionConfig]:
    registry: dict[str, CollectionConfig] = {}
    for config in configs:
        if config.slug in registry:
            raise ValueError(f"Duplicate collection slug: {config.slug!r}")
        registry[config.slug] = config
    return MappingProxyType(registry)


COLLECTION_CONFIGS: Final[Mapping[str, CollectionConfig]] = build_collection_registry(
    CollectionConfig(
        slug="river-cruises",
        name="River Cruises",
        h1="River Cruises",
        meta_title_suffix="River Cruise Packages from the UK",
        keywords=("river cruise", "river cruises", "river cruise packages"),
        tag_matches=("river cruise", "river-cruise", "river cruises"),
        title_matches=("river cruise",),
    ),
    CollectionConfig(
        slug="twin-centre",
        name="Twin-Centre Holidays",
        h1="Twin-Centre Holidays",
        meta_title_suffix="Twin-Centre Holiday Packages from the UK",
        keywords=("twin-centre", "twin centre", "twin-centre holidays", "two-centre"),
        tag_matches=("twin-centre", "twin centre", "two-centre", "two centre", "twin city"),
        title_matches=("twin-centre", "twin centre", "two-centre", "two centre"),
    ),
    CollectionConfig(
        slug="golden-triangle",
        name="Golden Triangle Tours",
        h1="Golden Triangle Tours",
        meta_title_suffix="Golden Triangle Tour Packages from the UK",
        keywords=("golden triangle", "golden triangle tours", "golden triangle india"),
        tag_matches=("golden triangle",),
        title_matches=("golden triangle",),
    ),
    CollectionConfig(
        slug="multi-centre",
        name="Multi-Centre Holidays",
        h1="Multi-Centre Holidays",
        meta_title_suffix="Multi-Centre Holiday Packages from the UK",
        keywords=("multi-centre", "multi centre", "multi-centre holidays", "multi-destination"),
        tag_matches=("multi-centre", "multi centre", "multi-destination", "multi destination"),
        title_matches=("multi-centre", "multi centre", "multi-destination"),
    ),
    CollectionConfig(
        slug="solo-travel",
        name="Solo Travel",
        h1="Solo Travel Holidays",
        meta_title_suffix="Solo Travel Packages from the UK",
        keywords=("solo travel", "solo traveller", "solo holidays", "travelling alone"),
        tag_matches=("solo", "solo travel", "solo traveller", "solo travellers", "singles"),
        title_matches=("solo",),
    ),
)


def is_configured_collection(slug: str, registry: Mapping[str, CollectionConfig] = COLLECTION_CONFIGS) -> bool:
    return slug in registry


def get_collection_config(slug: str, registry: Mapping[str, CollectionConfig] = COLLECTION_CONFIGS) -> CollectionConfig:
    try:
        return registry[slug]
    except KeyError:
        raise UnknownCollectionError(slug) from None


def iter_collection_configs(registry: Mapping[str, CollectionConfig] = COLLECTION_CONFIGS) -> Iterator[CollectionConfig]:
    yield from registry.values()
