from __future__ import annotations

import re
from urllib.parse import urlsplit
from xml.sax.saxutils import unescape

from django.core.cache import cache
from django.test import SimpleTestCase, TestCase, override_settings

from catalog.models import FlightPackage
from flightsandpackages.page_cache import (
    build_seo_cache_key,
    collection_page_cache_key,
    destination_page_cache_key,
    get_cached_page,
    invalidate_cached_pages,
    set_cached_page,
)
from flightsandpackages.seo import get_canonical_origin, normalize_host, serialize_json_ld

SEO_ALLOWED_HOSTS = ["testserver", "holidays.flightsandpackages.com", "www.flightsandpackages.com"]


@override_settings(
    ALLOWED_HOSTS=SEO_ALLOWED_HOSTS,
    CANONICAL_HOST="holidays.flightsandpackages.com",
    CANONICAL_SCHEME="https",
    CANONICAL_HOST_REDIRECT_ENABLED=False,
)
class SeoMetadataTests(TestCase):
    def setUp(self) -> None:
        cache.clear()
        self.package = FlightPackage.objects.create(
            title="Danube River Cruise",
            slug="danube-river-cruise",
            category="Hungary",
            tags=["River Cruise"],
            price=1899,
            duration="7 Nights",
            is_published=True,
        )
        FlightPackage.objects.create(
            title="Draft Nile Cruise",
            slug="draft-nile-cruise",
            category="Egypt",
            tags=["River Cruise"],
            is_published=False,
        )

    def test_health_endpoint_reports_ok(self) -> None:
        response = self.client.get("/health/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok", "service": "flightsandpackages"})

    def test_robots_txt_includes_sitemap_on_canonical_host(self) -> None:
        response = self.client.get("/robots.txt", HTTP_HOST="www.flightsandpackages.com")

        self.assertEqual(response.status_code, 200)
        self.assertIn("text/plain", response["Content-Type"])
        self.assertContains(response, "User-agent: *")
        self.assertContains(response, "Disallow: /admin/")
        self.assertContains(response, "Sitemap: https://holidays.flightsandpackages.com/sitemap.xml")

    def test_sitemap_xml_lists_collection_and_destination_routes(self) -> None:
        response = self.client.get("/sitemap.xml", HTTP_HOST="www.flightsandpackages.com")

        self.assertEqual(response.status_code, 200)
        self.assertIn("application/xml", response["Content-Type"])
        self.assertContains(response, "<urlset")
        self.assertContains(response, "<loc>https://holidays.flightsandpackages.com/collections/</loc>")
        self.assertContains(response, "<loc>https://holidays.flightsandpackages.com/destinations/</loc>")
        self.assertContains(
            response,
            "<loc>https://holidays.flightsandpackages.com/collections/river-cruises/</loc>",
        )
        self.assertContains(response, "<loc>https://holidays.flightsandpackages.com/destinations/hungary/</loc>")
        self.assertNotContains(response, "/packages/")
        self.assertNotContains(response, "<loc>https://holidays.flightsandpackages.com/</loc>")
        self.assertContains(response, "<lastmod>")

    @override_settings(FNP_SITEMAP_STOREFRONT_ROUTES=True)
    def test_sitemap_xml_adds_storefront_routes_when_enabled(self) -> None:
        response = self.client.get("/sitemap.xml")

        self.assertContains(response, "<loc>https://holidays.flightsandpackages.com/</loc>")
        self.assertContains(response, "<loc>https://holidays.flightsandpackages.com/special-offers/</loc>")
        self.assertContains(
            response,
            "<loc>https://holidays.flightsandpackages.com/packages/danube-river-cruise/</loc>",
        )
        self.assertNotContains(response, "draft-nile-cruise")

    def test_every_sitemap_location_is_served(self) -> None:
        FlightPackage.objects.create(
            title="Caribbean River Escape",
            slug="caribbean-river-escape",
            category="St. Lucia",
            tags=["River Cruise"],
            is_published=True,
        )
        FlightPackage.objects.create(
            title="Balkan Twin Centre",
            slug="balkan-twin-centre",
            category="Bosnia & Herzegovina",
            tags=["Twin Centre"],
            is_published=True,
        )
        sitemap = self.client.get("/sitemap.xml").content.decode("utf-8")
        locations = [unescape(match) for match in re.findall(r"<loc>(.*?)</loc>", sitemap)]

        self.assertIn("https://holidays.flightsandpackages.com/destinations/st.-lucia/", locations)
        self.assertIn("https://holidays.flightsandpackages.com/destinations/bosnia-&-herzegovina/", locations)
        broken: list[tuple[str, int]] = []
        for location in locations:
            path = urlsplit(location).path
            status_code = self.client.get(path, HTTP_HOST="holidays.flightsandpackages.com").status_code
            if status_code != 200:
                broken.append((path, status_code))
        self.assertEqual(broken, [])

    def test_home_redirects_to_collections_index(self) -> None:
        response = self.client.get("/")

        self.assertEqual(response.status_code, 302)
        self.assertEqual(response["Location"], "/collections/")

    def test_sitemap_xml_skips_unpublished_packages(self) -> None:
        response = self.client.get("/sitemap.xml")

        self.assertNotContains(response, "draft-nile-cruise")
        self.assertNotContains(response, "/destinations/egypt/")

    def test_collection_page_emits_canonical_link_and_social_tags(self) -> None:
        response = self.client.get("/collections/river-cruises/", HTTP_HOST="www.flightsandpackages.com")

        self.assertEqual(response.status_code, 200)
        self.assertContains(
            response,
            '<link rel="canonical" href="https://holidays.flightsandpackages.com/collections/river-cruises/">',
        )
        self.assertContains(response, '<meta property="og:site_name" content="Flights and Packages">')
        self.assertContains(response, '<meta property="og:type" content="website">')
        self.assertContains(response, '<meta name="twitter:card" content="summary">')

    def test_collections_index_emits_item_list_and_breadcrumb_json_ld(self) -> None:
        response = self.client.get("/collections/", HTTP_HOST="www.flightsandpackages.com")

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "<title>Holiday Collections | Flights and Packages</title>", html=True)
        self.assertContains(response, '<nav class="breadcrumbs" aria-label="Breadcrumb">')
        self.assertContains(response, '"@type":"ItemList"')
        self.assertContains(response, '"@type":"BreadcrumbList"')

    def test_footer_shows_configured_contact_email(self) -> None:
        response = self.client.get("/collections/")

        self.assertContains(response, "mailto:holidayenq@flightsandpackages.com")


@override_settings(
    ALLOWED_HOSTS=SEO_ALLOWED_HOSTS,
    CANONICAL_HOST="holidays.flightsandpackages.com",
    CANONICAL_SCHEME="https",
    CANONICAL_HOST_REDIRECT_ENABLED=True,
)
class CanonicalHostRedirectMiddlewareTests(TestCase):
    def setUp(self) -> None:
        cache.clear()

    def test_redirects_www_host_to_canonical_host(self) -> None:
        response = self.client.get("/collections/?verbose=0", HTTP_HOST="www.flightsandpackages.com", secure=True)

        self.assertEqual(response.status_code, 301)
        self.assertEqual(response["Location"], "https://holidays.flightsandpackages.com/collections/?verbose=0")

    def test_does_not_redirect_when_request_already_uses_canonical_host(self) -> None:
        response = self.client.get("/collections/", HTTP_HOST="holidays.flightsandpackages.com", secure=True)

        self.assertEqual(response.status_code, 200)

    def test_health_probe_is_never_redirected(self) -> None:
        response = self.client.get("/health/", HTTP_HOST="testserver")

        self.assertEqual(response.status_code, 200)


class JsonLdSerializationTests(SimpleTestCase):
    def test_closing_script_sequence_is_escaped(self) -> None:
        serialized = serialize_json_ld({"name": "</script><script>alert(1)</script>"})

        self.assertNotIn("</script>", serialized)
        self.assertIn("<\\/script>", serialized)

    @override_settings(CANONICAL_HOST="https://staging.example.com", CANONICAL_SCHEME="")
    def test_canonical_origin_keeps_scheme_from_host_setting(self) -> None:
        self.assertEqual(get_canonical_origin(), "https://staging.example.com")

    @override_settings(CANONICAL_HOST="", CANONICAL_SCHEME="")
    def test_canonical_origin_falls_back_to_production_host(self) -> None:
        self.assertEqual(get_canonical_origin(), "https://holidays.flightsandpackages.com")

    def test_normalize_host_drops_scheme_port_and_case(self) -> None:
        self.assertEqual(normalize_host("https://Holidays.FlightsAndPackages.com:8443/"), "holidays.flightsandpackages.com")
        self.assertEqual(normalize_host(" www.flightsandpackages.com:8000 "), "www.flightsandpackages.com")


@override_settings(
    CACHES={"default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache", "LOCATION": "fnp-tests"}},
    FNP_SEO_CACHE_TTL_SECONDS=60,
)
class PageCacheTests(SimpleTestCase):
    def setUp(self) -> None:
        cache.clear()

    def test_cache_keys_are_namespaced_and_normalized(self) -> None:
        self.assertEqual(collection_page_cache_key("River-Cruises"), "fnp:seo:collection:river-cruises")
        self.assertEqual(destination_page_cache_key("sri lanka"), "fnp:seo:destination:sri-lanka")

    def test_long_cache_keys_are_hashed_within_limit(self) -> None:
        key = build_seo_cache_key("destination", "x" * 400)

        self.assertLessEqual(len(key), 230)
        self.assertTrue(key.startswith("fnp:seo:destination:"))

    def test_set_get_and_invalidate_round_trip(self) -> None:
        key = collection_page_cache_key("river-cruises")

        self.assertTrue(set_cached_page(key, {"slug": "river-cruises"}))
        self.assertEqual(get_cached_page(key), {"slug": "river-cruises"})
        self.assertEqual(invalidate_cached_pages([key, key, ""]), 1)
        self.assertIsNone(get_cached_page(key))

    def test_empty_payloads_are_not_cached(self) -> None:
        self.assertFalse(set_cached_page(collection_page_cache_key("solo-travel"), {}))
