from __future__ import annotations

from dataclasses import dataclass
from typing import TypedDict

from django.conf import settings
from django.utils.html import escape

from flightsandpackages.seo import SITE_NAME, get_canonical_origin

DEFAULT_CONTACT_EMAIL = "holidayenq@flightsandpackages.com"


class FaqItem(TypedDict):
    question: str
    answer: str


@dataclass(frozen=True)
class RenderConfig:
    """Site constants interpolated into rendered SEO output."""

    canonical_host: str
    contact_email: str = DEFAULT_CONTACT_EMAIL
    currency_code: str = "GBP"
    currency_symbol: str = "£"
    site_name: str = SITE_NAME

    def url(self, path: str = "") -> str:
        if not path:
            return self.canonical_host
        normalized_path = path if path.startswith("/") else f"/{path}"
        return f"{self.canonical_host}{normalized_path}"


def render_config_from_settings() -> RenderConfig:
    contact_email = str(getattr(settings, "CONTACT_EMAIL", "") or "").strip() or DEFAULT_CONTACT_EMAIL
    return RenderConfig(canonical_host=get_canonical_origin().rstrip("/"), contact_email=contact_email)


def escape_text(value: object) -> str:
    if value is None:
        return ""
    return str(escape(str(value)))


def pluralize_packages(count: int) -> str:
    return f"{count} package{'s' if count != 1 else ''}"
