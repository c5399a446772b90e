from __future__ import annotations

from typing import Final

from django.http import Http404, HttpRequest, HttpResponse
from django.shortcuts import render
from django.utils.safestring import mark_safe
from django.views.decorators.http import require_http_methods

from flightsandpackages.seo import (
    BreadcrumbItem,
    build_absolute_url,
    build_breadcrumb_json_ld,
    build_seo_meta_context,
    combine_json_ld_payloads,
)

from .pages import build_collection_page_payload, build_collections_index_payload
from .registry import is_configured_collection

VERBOSE_FLAGS: Final[set[str]] = {"1", "true", "yes", "on"}
COLLECTIONS_INDEX_TITLE: Final[str] = "Holiday Collections | Flights and Packages"
COLLECTIONS_INDEX_DESCRIPTION: Final[str] = (
    "Browse curated holiday collections from the UK: river cruises, twin-centre and multi-centre holidays, "
    "Golden Triangle tours and solo travel."
)


def _is_verbose_request(request: HttpRequest) -> bool:
    candidate = request.GET.get("verbose") or request.headers.get("X-FNP-Verbose") or ""
    return candidate.strip().lower() in VERBOSE_FLAGS


def _vprint(request: HttpRequest, message: str) -> None:
    if _is_verbose_request(request):
        print(f"[collections][verbose] {message}", flush=True)


@require_http_methods(["GET"])
def collection_index_view(request: HttpRequest) -> HttpResponse:
    payload = build_collections_index_payload()
    _vprint(
        request,
        "Collections index source={source}; count={count}".format(
            source=payload["source"],
            count=len(payload["collections"]),
        ),
    )

    breadcrumbs: list[BreadcrumbItem] = [{"label": "Home", "url": "/"}, {"label": "Collections"}]
    list_json_ld: dict[str, object] = {
        "@context": "https://schema.org",
        "@type": "ItemList",
        "name": "Holiday Collections",
        "numberOfItems": len(payload["collections"]),
        "itemListElement": [
            {
                "@type": "ListItem",
                "position": index + 1,
                "name": entry["name"],
                "url": build_absolute_url(request, entry["url"]),
            }
            for index, entry in enumerate(payload["collections"])
        ],
    }

    context: dict[str, object] = {
        "collections": payload["collections"],
        "collections_source": payload["source"],
        "breadcrumbs": breadcrumbs,
    }
    context.update(
        build_seo_meta_context(
            request,
            title=COLLECTIONS_INDEX_TITLE,
            description=COLLECTIONS_INDEX_DESCRIPTION,
            json_ld_payload=combine_json_ld_payloads(list_json_ld, build_breadcrumb_json_ld(request, breadcrumbs)),
        )
    )
    return render(request, "pages/collections/index.html", context)


@require_http_methods(["GET"])
def collection_detail_view(request: HttpRequest, slug: str) -> HttpResponse:
    if not is_configured_collection(slug):
        raise Http404("Collection not found.")

    payload = build_collection_page_payload(slug)
    _vprint(
        request,
        "Collection slug={slug}; source={source}; packages={count}; faqs={faqs}".format(
            slug=payload["slug"],
            source=payload["source"],
            count=payload["package_count"],
            faqs=payload["faq_count"],
        ),
    )

    breadcrumbs: list[BreadcrumbItem] = [
        {"label": "Home", "url": "/"},
        {"label": "Collections", "url": "/collections/"},
        {"label": payload["name"]},
    ]
    # Rendered fragments escape all package-derived text themselves.
    context: dict[str, object] = {
        "collection_slug": payload["slug"],
        "collection_h1": payload["h1"],
        "collection_package_count": payload["package_count"],
        "collection_source": payload["source"],
        "collection_guide_html": mark_safe(payload["guide_html"]),
        "collection_noscript_html": mark_safe(payload["noscript_html"]),
        "collection_json_ld_html": mark_safe(payload["json_ld_html"]),
        "breadcrumbs": breadcrumbs,
    }
    context.update(
        build_seo_meta_context(
            request,
            title=payload["meta_title"],
            description=payload["meta_description"],
        )
    )
    return render(request, "pages/collections/detail.html", context)
