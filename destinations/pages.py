from __future__ import annotations

from typing import TypedDict, cast

from catalog.models import published_package_records
from catalog.records import PackageData
from collections_app.aggregation import format_price
from collections_app.rendering import destination_path
from collections_app.site import RenderConfig, render_config_from_settings
from flightsandpackages.page_cache import (
    destination_page_cache_key,
    destinations_index_cache_key,
    get_cached_page,
    set_cached_page,
)
from flightsandpackages.seo import json_ld_script_tag

from .aggregation import build_destination_aggregate, destination_slugs, generate_destination_faqs
from .rendering import (
    build_destination_breadcrumb_html,
    build_destination_guide_html,
    build_destination_noscript_html,
    build_destination_package_list_html,
    generate_destination_item_list_json_ld,
    generate_destination_json_ld,
    generate_destination_meta,
)


class DestinationPagePayload(TypedDict):
    slug: str
    name: str
    meta_title: str
    meta_description: str
    guide_html: str
    package_list_html: str
    breadcrumb_html: str
    noscript_html: str
    json_ld_html: str
    package_count: int
    faq_count: int
    source: str


class DestinationIndexEntry(TypedDict):
    slug: str
    name: str
    url: str
    package_count: int
    price_from: str


class DestinationIndexPayload(TypedDict):
    destinations: list[DestinationIndexEntry]
    source: str


def render_destination_page(
    packages: list[PackageData],
    destination_slug: str,
    render_config: RenderConfig,
) -> DestinationPagePayload:
    aggregate = build_destination_aggregate(packages, destination_slug)
    faqs = generate_destination_faqs(aggregate, render_config)
    meta = generate_destination_meta(aggregate, render_config)
    faq_page: dict[str, object] = {
        "@context": "https://schema.org",
        "@type": "FAQPage",
        "mainEntity": [
            {
                "@type": "Question",
                "name": faq["question"],
                "acceptedAnswer": {"@type": "Answer", "text": faq["answer"]},
            }
            for faq in faqs
        ],
    }
    json_ld_blocks = [
        generate_destination_json_ld(aggregate, render_config),
        generate_destination_item_list_json_ld(aggregate, render_config),
        faq_page,
    ]
    return {
        "slug": destination_slug,
        "name": aggregate["destination_name"],
        "meta_title": meta["title"],
        "meta_description": meta["description"],
        "guide_html": build_destination_guide_html(aggregate, faqs, render_config),
        "package_list_html": build_destination_package_list_html(aggregate, render_config),
        "breadcrumb_html": build_destination_breadcrumb_html(aggregate, render_config),
        "noscript_html": build_destination_noscript_html(aggregate, render_config),
        "json_ld_html": "\n".join(json_ld_script_tag(block) for block in json_ld_blocks),
        "package_count": aggregate["package_count"],
        "faq_count": len(faqs),
        "source": "live-db",
    }


def build_destination_page_payload(destination_slug: str, *, use_cache: bool = True) -> DestinationPagePayload:
    slug = destination_slug.strip().lower()
    cache_key = destination_page_cache_key(slug)

    if use_cache:
        cached = get_cached_page(cache_key)
        if cached is not None:
            payload = cast(DestinationPagePayload, dict(cached))
            payload["source"] = "cache"
            return payload

    payload = render_destination_page(published_package_records(), slug, render_config_from_settings())
    # Empty destinations are not cached so a newly published package shows up at once.
    if use_cache and payload["package_count"] > 0:
        set_cached_page(cache_key, cast(dict[str, object], payload))
    return payload


def build_destinations_index_payload(*, use_cache: bool = True) -> DestinationIndexPayload:
    cache_key = destinations_index_cache_key()
    if use_cache:
        cached = get_cached_page(cache_key)
        if cached is not None:
            return {
                "destinations": cast(list[DestinationIndexEntry], cached.get("destinations", [])),
                "source": "cache",
            }

    packages = published_package_records()
    entries: list[DestinationIndexEntry] = []
    for slug in destination_slugs(packages):
        aggregate = build_destination_aggregate(packages, slug)
        price_min = aggregate["price_min"]
        entries.append(
            {
                "slug": slug,
                "name": aggregate["destination_name"],
                "url": destination_path(slug),
                "package_count": aggregate["package_count"],
                "price_from": format_price(price_min) if price_min is not None else "",
            }
        )
    entries.sort(key=lambda entry: entry["name"].lower())

    payload: DestinationIndexPayload = {"destinations": entries, "source": "live-db"}
    if use_cache and entries:
        set_cached_page(cache_key, {"destinations": entries})
    return payload
