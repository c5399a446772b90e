from __future__ import annotations

from collections.abc import Callable

from django.conf import settings
from django.core.exceptions import DisallowedHost
from django.http import HttpRequest, HttpResponse, HttpResponsePermanentRedirect

from .seo import get_canonical_scheme, normalize_host

# Probes hit the service by internal hostname and must never be redirected.
REDIRECT_EXEMPT_PATHS: tuple[str, ...] = ("/health/",)


class CanonicalHostRedirectMiddleware:
    """Permanently redirect storefront requests that arrive on a non-canonical host."""

    get_response: Callable[[HttpRequest], HttpResponse]

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        redirect_url = self._build_redirect_url(request)
        if redirect_url:
            return HttpResponsePermanentRedirect(redirect_url)
        return self.get_response(request)

    def _build_redirect_url(self, request: HttpRequest) -> str:
        if not bool(getattr(settings, "CANONICAL_HOST_REDIRECT_ENABLED", False)):
            return ""
        if request.path in REDIRECT_EXEMPT_PATHS:
            return ""

        canonical_host_raw = str(getattr(settings, "CANONICAL_HOST", "") or "").strip()
        if not canonical_host_raw:
            return ""
        canonical_host = normalize_host(canonical_host_raw)

        try:
            request_host = normalize_host(request.get_host())
        except DisallowedHost:
            return ""

        if not request_host or request_host == canonical_host:
            return ""

        return f"{get_canonical_scheme(request)}://{canonical_host}{request.get_full_path()}"
