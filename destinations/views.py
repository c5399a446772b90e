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

from .pages import build_destination_page_payload, build_destinations_index_payload

VERBOSE_FLAGS: Final[set[str]] = {"1", "true", "yes", "on"}
DESTINATIONS_INDEX_TITLE: Final[str] = "Holiday Destinations | Flights and Packages"
DESTINATIONS_INDEX_DESCRIPTION: Final[str] = (
    "Browse holiday destinations from the UK with flight-inclusive packages, tours and river cruises."
)


def _is_verbose_request(request: HttpRequest) -> bool:
    candidate = request.GET.get("verbose") or request.headers.get("X-FNP-Verbose") or ""
    return candidate.strip().lower() in VERBOSE_FLAGS


def _vprint(request: HttpRequest, message: str) -> None:
    if _is_verbose_request(request):
        print(f"[destinations][verbose] {message}", flush=True)


@require_http_methods(["GET"])
def destination_index_view(request: HttpRequest) -> HttpResponse:
    payload = build_destinations_index_payload()
    _vprint(
        request,
        "Destinations index source={source}; count={count}".format(
            source=payload["source"],
            count=len(payload["destinations"]),
        ),
    )

    breadcrumbs: list[BreadcrumbItem] = [{"label": "Home", "url": "/"}, {"label": "Destinations"}]
    list_json_ld: dict[str, object] = {
        "@context": "https://schema.org",
        "@type": "ItemList",
        "name": "Holiday Destinations",
        "numberOfItems": len(payload["destinations"]),
        "itemListElement": [
            {
                "@type": "ListItem",
                "position": index + 1,
                "name": entry["name"],
                "url": build_absolute_url(request, entry["url"]),
            }
            for index, entry in enumerate(payload["destinations"])
        ],
    }

    context: dict[str, object] = {
        "destinations": payload["destinations"],
        "destinations_source": payload["source"],
        "breadcrumbs": breadcrumbs,
    }
    context.update(
        build_seo_meta_context(
            request,
            title=DESTINATIONS_INDEX_TITLE,
            description=DESTINATIONS_INDEX_DESCRIPTION,
            json_ld_payload=combine_json_ld_payloads(list_json_ld, build_breadcrumb_json_ld(request, breadcrumbs)),
        )
    )
    return render(request, "pages/destinations/index.html", context)


@require_http_methods(["GET"])
def destination_detail_view(request: HttpRequest, slug: str) -> HttpResponse:
    payload = build_destination_page_payload(slug)
    _vprint(
        request,
        "Destination slug={slug}; source={source}; packages={count}; faqs={faqs}".format(
            slug=payload["slug"],
            source=payload["source"],
            count=payload["package_count"],
            faqs=payload["faq_count"],
        ),
    )
    if payload["package_count"] == 0:
        raise Http404("Destination not found.")

    # Breadcrumbs render from the prebuilt fragment instead of base.html's list.
    context: dict[str, object] = {
        "destination_slug": payload["slug"],
        "destination_name": payload["name"],
        "destination_package_count": payload["package_count"],
        "destination_source": payload["source"],
        "destination_breadcrumb_html": mark_safe(payload["breadcrumb_html"]),
        "destination_guide_html": mark_safe(payload["guide_html"]),
        "destination_package_list_html": mark_safe(payload["package_list_html"]),
        "destination_noscript_html": mark_safe(payload["noscript_html"]),
        "destination_json_ld_html": mark_safe(payload["json_ld_html"]),
    }
    context.update(
        build_seo_meta_context(
            request,
            title=payload["meta_title"],
            description=payload["meta_description"],
        )
    )
    return render(request, "pages/destinations/detail.html", context)
