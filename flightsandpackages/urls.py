from __future__ import annotations

from django.contrib import admin
from django.http import HttpRequest, JsonResponse
from django.urls import URLPattern, URLResolver, include, path
from django.views.generic import RedirectView

from .seo import robots_txt_view, sitemap_xml_view


def health(_request: HttpRequest) -> JsonResponse:
    return JsonResponse({"status": "ok", "service": "flightsandpackages"})


urlpatterns: list[URLPattern | URLResolver] = [
    path("", RedirectView.as_view(pattern_name="collections:index", permanent=False), name="home"),
    path("health/", health, name="health"),
    path("robots.txt", robots_txt_view, name="robots-txt"),
    path("sitemap.xml", sitemap_xml_view, name="sitemap-xml"),
    path("collections/", include("collections_app.urls")),
    path("destinations/", include("destinations.urls")),
    path("admin/", admin.site.urls),
]
