from __future__ import annotations

import hashlib
import os
from collections.abc import Iterable
from typing import Final, cast

from django.conf import settings
from django.core.cache import cache

DEFAULT_SEO_CACHE_TTL_SECONDS: Final[int] = 300
MAX_CACHE_KEY_LENGTH: Final[int] = 230
COLLECTIONS_INDEX_CACHE_PART: Final[str] = "collections-index"
DESTINATIONS_INDEX_CACHE_PART: Final[str] = "destinations-index"


def _clean_key_part(value: object, *, fallback: str = "na") -> str:
    text = str(value or "").strip().lower()
    if not text:
        return fallback

    cleaned = "".join(ch if ch.isalnum() or ch in {"-", "_", "."} else "-" for ch in text)
    normalized = cleaned.strip("-_.")
    return normalized or fallback


def _safe_positive_int(value: object, *, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        parsed = int(cast(int | str | float, value))
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def build_seo_cache_key(*parts: object) -> str:
    normalized_parts = [_clean_key_part(part) for part in parts if str(part or "").strip()]
    key = f"fnp:seo:{':'.join(normalized_parts or ['default'])}"
    if len(key) <= MAX_CACHE_KEY_LENGTH:
        return key

    digest = hashlib.sha1(key.encode("utf-8")).hexdigest()[:20]
    head = key[: MAX_CACHE_KEY_LENGTH - 21].rstrip(":")
    return f"{head}:{digest}"


def collection_page_cache_key(slug: object) -> str:
    return build_seo_cache_key("collection", slug)


def destination_page_cache_key(slug: object) -> str:
    return build_seo_cache_key("destination", slug)


def collections_index_cache_key() -> str:
    return build_seo_cache_key(COLLECTIONS_INDEX_CACHE_PART)


def destinations_index_cache_key() -> str:
    return build_seo_cache_key(DESTINATIONS_INDEX_CACHE_PART)


def seo_cache_ttl_seconds() -> int:
    configured = getattr(settings, "FNP_SEO_CACHE_TTL_SECONDS", None)
    if configured is None:
        configured = os.getenv("FNP_SEO_CACHE_TTL_SECONDS")
    return _safe_positive_int(configured, default=DEFAULT_SEO_CACHE_TTL_SECONDS)


def get_cached_page(cache_key: object) -> dict[str, object] | None:
    key = str(cache_key or "").strip()
    if not key:
        return None

    try:
        payload = cache.get(key)
    except Exception:
        return None

    if isinstance(payload, dict):
        return cast(dict[str, object], payload)
    return None


def set_cached_page(cache_key: object, payload: dict[str, object], *, ttl_seconds: int | None = None) -> bool:
    key = str(cache_key or "").strip()
    if not key or not payload:
        return False

    effective_ttl = ttl_seconds if ttl_seconds is not None else seo_cache_ttl_seconds()
    try:
        cache.set(key, dict(payload), timeout=max(1, int(effective_ttl)))
        return True
    except Exception:
        return False


def invalidate_cached_pages(cache_keys: Iterable[object]) -> int:
    keys = sorted({str(key or "").strip() for key in cache_keys if str(key or "").strip()})
    if not keys:
        return 0

    try:
        cache.delete_many(keys)
    except Exception:
        return 0
    return len(keys)
