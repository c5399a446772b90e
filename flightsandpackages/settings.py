# pyright: reportMissingImports=false, reportMissingModuleSource=false, reportUnknownMemberType=false
"""
Settings for the Flights and Packages storefront SEO service.

Env-driven configuration:
- database via DATABASE_URL (SQLite file when unset)
- Redis cache support for rendered SEO pages
- WhiteNoise static serving
- canonical host and contact details interpolated into SEO output
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, cast

import dj_database_url


def env_bool(key: str, default: bool = False) -> bool:
    value = os.getenv(key, str(default))
    return value.strip().lower() in {"1", "true", "yes", "on"}


def env_int(key: str, default: int) -> int:
    raw_value = os.getenv(key, str(default))
    try:
        parsed = int(raw_value)
    except (TypeError, ValueError):
        parsed = int(default)
    return parsed


BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv("SECRET_KEY", "dev-placeholder-secret")
DEBUG = env_bool("DEBUG", True)
ALLOWED_HOSTS = [
    host.strip()
    for host in os.getenv("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")
    if host.strip()
]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "catalog",
    "collections_app",
    "destinations",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",
    "flightsandpackages.middleware.CanonicalHostRedirectMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "flightsandpackages.urls"
WSGI_APPLICATION = "flightsandpackages.wsgi.application"
ASGI_APPLICATION = "flightsandpackages.asgi.application"

TEMPLATES: list[dict[str, Any]] = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
                "flightsandpackages.context_processors.canonical_meta",
            ],
        }
    }
]

default_database_url: str = os.getenv("DATABASE_URL") or f"sqlite:///{BASE_DIR / 'db.sqlite3'}"

DATABASES: dict[str, dict[str, Any]] = {
    "default": cast(
        dict[str, Any],
        dj_database_url.parse(default_database_url, conn_max_age=600, ssl_require=False),
    )
}

LANGUAGE_CODE = "en-gb"
TIME_ZONE = os.getenv("TIME_ZONE", "Europe/London")
USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
STATICFILES_DIRS = [BASE_DIR / "static"]

STORAGES: dict[str, dict[str, Any]] = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    # Manifest storage requires collectstatic output, so DEBUG/test runs use plain storage.
    "staticfiles": {
        "BACKEND": (
            "django.contrib.staticfiles.storage.StaticFilesStorage"
            if DEBUG
            else "whitenoise.storage.CompressedManifestStaticFilesStorage"
        )
    },
}

redis_url = os.getenv("REDIS_URL", "").strip()
cache_backend: dict[str, Any]
if redis_url:
    cache_backend = {
        "BACKEND": "django_redis.cache.RedisCache",
        "LOCATION": redis_url,
        "OPTIONS": {"CLIENT_CLASS": "django_redis.client.DefaultClient"},
    }
else:
    cache_backend = {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"}

CACHES: dict[str, dict[str, Any]] = {"default": cache_backend}

csrf_trusted_origins = os.getenv("CSRF_TRUSTED_ORIGINS", "")
CSRF_TRUSTED_ORIGINS: list[str] = [item.strip() for item in csrf_trusted_origins.split(",") if item.strip()]

if env_bool("USE_X_FORWARDED_PROTO", False):
    SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")

SECURE_SSL_REDIRECT = env_bool("SECURE_SSL_REDIRECT", False)
SESSION_COOKIE_SECURE = env_bool("SESSION_COOKIE_SECURE", False)
CSRF_COOKIE_SECURE = env_bool("CSRF_COOKIE_SECURE", False)

# SEO output configuration. CANONICAL_HOST may carry a scheme; it is normalized by flightsandpackages.seo.
CANONICAL_HOST = os.getenv("CANONICAL_HOST", "holidays.flightsandpackages.com")
CANONICAL_SCHEME = os.getenv("CANONICAL_SCHEME", "https")
CANONICAL_HOST_REDIRECT_ENABLED = env_bool("CANONICAL_HOST_REDIRECT_ENABLED", False)
CONTACT_EMAIL = os.getenv("CONTACT_EMAIL", "holidayenq@flightsandpackages.com")
FNP_SEO_CACHE_TTL_SECONDS = max(1, env_int("FNP_SEO_CACHE_TTL_SECONDS", 300))
# Storefront routes (home, package and editorial pages) are served by a separate frontend.
FNP_SITEMAP_STOREFRONT_ROUTES = env_bool("FNP_SITEMAP_STOREFRONT_ROUTES", False)

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
