from __future__ import annotations

from typing import TypedDict, cast

from catalog.models import published_package_records
from catalog.records import PackageData
from flightsandpackages.page_cache import (
    collection_page_cache_key,
    collections_index_cache_key,
    get_cached_page,
    set_cached_page,
)

from .aggregation import build_collection_aggregate, format_price
from .faqs import generate_collection_faqs
from .registry import CollectionConfig, get_collection_config, iter_collection_configs
from .rendering import (
    build_collection_guide_html,
    build_collection_noscript_html,
    build_collection_overview,
    collection_path,
    generate_collection_json_ld,
    generate_collection_meta_description,
    generate_collection_meta_title,
)
from .site import RenderConfig, render_config_from_settings


class CollectionPagePayload(TypedDict):
    slug: str
    name: str
    h1: str
    meta_title: str
    meta_description: str
    overview: str
    guide_html: str
    noscript_html: str
    json_ld_html: str
    package_count: int
    faq_count: int
    source: str


class CollectionIndexEntry(TypedDict):
    slug: str
    name: str
    url: str
    package_count: int
    price_from: str


class CollectionIndexPayload(TypedDict):
    collections: list[CollectionIndexEntry]
    source: str


def render_collection_page(
    packages: list[PackageData],
    config: CollectionConfig,
    render_config: RenderConfig,
) -> CollectionPagePayload:
    aggregate = build_collection_aggregate(packages, config)
    faqs = generate_collection_faqs(aggregate, render_config)
    return {
        "slug": config.slug,
        "name": config.name,
        "h1": config.h1,
        "meta_title": generate_collection_meta_title(config),
        "meta_description": generate_collection_meta_description(aggregate, render_config),
        "overview": build_collection_overview(aggregate, render_config),
        "guide_html": build_collection_guide_html(aggregate, faqs, render_config),
        "noscript_html": build_collection_noscript_html(aggregate, render_config),
        "json_ld_html": generate_collection_json_ld(aggregate, faqs, render_config),
        "package_count": aggregate["package_count"],
        "faq_count": len(faqs),
        "source": "live-db",
    }


def build_collection_page_payload(slug: str, *, use_cache: bool = True) -> CollectionPagePayload:
    config = get_collection_config(slug)
    cache_key = collection_page_cache_key(config.slug)

    if use_cache:
        cached = get_cached_page(cache_key)
        if cached is not None:
            payload = cast(CollectionPagePayload, dict(cached))
            payload["source"] = "cache"
            return payload

    payload = render_collection_page(published_package_records(), config, render_config_from_settings())
    if use_cache:
        set_cached_page(cache_key, cast(dict[str, object], payload))
    return payload


def build_collections_index_payload(*, use_cache: bool = True) -> CollectionIndexPayload:
    cache_key = collections_index_cache_key()
    if use_cache:
        cached = get_cached_page(cache_key)
        if cached is not None:
            return {
                "collections": cast(list[CollectionIndexEntry], cached.get("collections", [])),
                "source": "cache",
            }

    packages = published_package_records()
    entries: list[CollectionIndexEntry] = []
    for config in iter_collection_configs():
        aggregate = build_collection_aggregate(packages, config)
        price_min = aggregate["price_min"]
        entries.append(
            {
                "slug": config.slug,
                "name": config.name,
                "url": collection_path(config),
                "package_count": aggregate["package_count"],
                "price_from": format_price(price_min) if price_min is not None else "",
            }
        )

    payload: CollectionIndexPayload = {"collections": entries, "source": "live-db"}
    if use_cache:
        set_cached_page(cache_key, {"collections": entries})
    return payload
