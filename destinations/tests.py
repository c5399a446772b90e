from __future__ import annotations

from unittest.mock import patch

from django.core.cache import cache
from django.test import SimpleTestCase, TestCase
from django.urls import reverse

from catalog.models import FlightPackage
from catalog.records import PackageData
from collections_app.site import RenderConfig

from .aggregation import (
    MAX_DESTINATION_FAQS,
    build_destination_aggregate,
    destination_slugs,
    generate_destination_faqs,
)
from .rendering import (
    build_destination_breadcrumb_html,
    build_destination_guide_html,
    build_destination_noscript_html,
    build_destination_package_list_html,
    generate_destination_item_list_json_ld,
    generate_destination_json_ld,
    generate_destination_meta,
)

RENDER_CONFIG = RenderConfig(canonical_host="https://holidays.example.com")


def _package(**overrides: object) -> PackageData:
    package: dict[str, object] = {
        "slug": "india-tour",
        "title": "India Tour",
        "category": "India",
        "tags": ["Culture"],
        "whats_included": ["Return flights", "Airport transfers"],
        "accommodations": [{"name": "The Oberoi New Delhi", "description": "", "images": []}],
        "price": 1299,
        "duration": "8 Nights",
        "display_order": None,
        "updated_at": None,
        "is_published": True,
    }
    package.update(overrides)
    return package  # type: ignore[return-value]


def _catalogue() -> list[PackageData]:
    return [
        _package(slug="golden-triangle", title="Golden Triangle", tags=["Culture", "Heritage"]),
        _package(slug="kerala-backwaters", title="Kerala Backwaters", price=1599, tags=["Culture", "Beach"]),
        _package(slug="sri-lanka-explorer", title="Sri Lanka Explorer", category="Sri Lanka"),
        _package(slug="draft-goa", title="Goa Draft", is_published=False),
    ]


class DestinationAggregateTests(SimpleTestCase):
    def test_matches_category_case_insensitively(self) -> None:
        aggregate = build_destination_aggregate(_catalogue(), "india")

        self.assertEqual(aggregate["destination_name"], "India")
        self.assertEqual(aggregate["package_count"], 2)
        self.assertEqual(aggregate["price_min"], 1299)
        self.assertEqual(aggregate["price_median"], 1449)
        self.assertEqual(aggregate["price_max"], 1599)

    def test_matches_slugified_multi_word_category(self) -> None:
        aggregate = build_destination_aggregate(_catalogue(), "sri-lanka")

        self.assertEqual(aggregate["destination_name"], "Sri Lanka")
        self.assertEqual(aggregate["package_count"], 1)

    def test_unknown_destination_uses_slug_for_name(self) -> None:
        aggregate = build_destination_aggregate(_catalogue(), "peru")

        self.assertEqual(aggregate["destination_name"], "Peru")
        self.assertEqual(aggregate["package_count"], 0)
        self.assertIsNone(aggregate["price_min"])
        self.assertEqual(aggregate["top_hotels"], [])

    def test_tags_are_counted_without_exclusion(self) -> None:
        aggregate = build_destination_aggregate(_catalogue(), "india")

        self.assertEqual(aggregate["top_tags"][0], "Culture")
        self.assertEqual(set(aggregate["top_tags"]), {"Culture", "Heritage", "Beach"})

    def test_inclusion_threshold_is_twenty_percent(self) -> None:
        at_threshold = [_package(slug=f"p{index}", whats_included=["Camel safari"] if index == 0 else []) for index in range(5)]
        below_threshold = [
            _package(slug=f"q{index}", whats_included=["Camel safari"] if index == 0 else []) for index in range(6)
        ]

        self.assertEqual(
            [item["name"] for item in build_destination_aggregate(at_threshold, "india")["top_inclusions"]],
            ["Camel safari"],
        )
        self.assertEqual(build_destination_aggregate(below_threshold, "india")["top_inclusions"], [])

    def test_top_hotels_use_first_accommodation(self) -> None:
        packages = [
            _package(slug="a", accommodations=[{"name": "Taj Palace"}, {"name": "Ignored Lodge"}]),
            _package(slug="b", accommodations=[{"name": "Taj Palace"}]),
            _package(slug="c", accommodations=[]),
        ]

        self.assertEqual(build_destination_aggregate(packages, "india")["top_hotels"], ["Taj Palace"])

    def test_featured_limit_defaults_to_ten(self) -> None:
        packages = [_package(slug=f"tour-{index}") for index in range(15)]

        self.assertEqual(len(build_destination_aggregate(packages, "india")["featured_packages"]), 10)
        self.assertEqual(
            len(build_destination_aggregate(packages, "india", featured_limit=3)["featured_packages"]),
            3,
        )

    def test_non_list_packages_raise_type_error(self) -> None:
        with self.assertRaises(TypeError):
            build_destination_aggregate({"india": []}, "india")  # type: ignore[arg-type]

    def test_destination_slugs_skip_drafts_and_duplicates(self) -> None:
        self.assertEqual(destination_slugs(_catalogue()), ["india", "sri-lanka"])


class DestinationFaqTests(SimpleTestCase):
    def test_full_aggregate_is_capped(self) -> None:
        faqs = generate_destination_faqs(build_destination_aggregate(_catalogue(), "india"), RENDER_CONFIG)

        self.assertEqual(len(faqs), MAX_DESTINATION_FAQS)
        self.assertEqual(faqs[0]["question"], "How many holiday packages are available to India?")

    def test_flights_answer_depends_on_flight_inclusion_share(self) -> None:
        with_flights = generate_destination_faqs(build_destination_aggregate(_catalogue(), "india"), RENDER_CONFIG)
        land_only = generate_destination_faqs(
            build_destination_aggregate([_package(whats_included=[])], "india"),
            RENDER_CONFIG,
        )

        flights_question = "Are flights included in India holiday packages?"
        self.assertIn("return flights from the UK", next(f["answer"] for f in with_flights if f["question"] == flights_question))
        self.assertIn("land-only", next(f["answer"] for f in land_only if f["question"] == flights_question))

    def test_transfers_faq_requires_forty_percent(self) -> None:
        packages = [_package(slug=f"p{index}", whats_included=["Airport transfers"] if index < 1 else []) for index in range(4)]
        faqs = generate_destination_faqs(build_destination_aggregate(packages, "india"), RENDER_CONFIG)

        self.assertNotIn("Are airport transfers included?", [faq["question"] for faq in faqs])

    def test_empty_aggregate_omits_data_backed_questions(self) -> None:
        faqs = generate_destination_faqs(build_destination_aggregate([], "peru"), RENDER_CONFIG)
        questions = [faq["question"] for faq in faqs]

        self.assertNotIn("What is the starting price for Peru holidays?", questions)
        self.assertNotIn("Which hotels are featured in Peru packages?", questions)
        self.assertIn("Is travel insurance included in Peru holidays?", questions)


class DestinationRenderingTests(SimpleTestCase):
    def setUp(self) -> None:
        self.aggregate = build_destination_aggregate(_catalogue(), "india")
        self.faqs = generate_destination_faqs(self.aggregate, RENDER_CONFIG)

    def test_guide_sections_and_faq_count(self) -> None:
        html = build_destination_guide_html(self.aggregate, self.faqs, RENDER_CONFIG)

        self.assertIn('aria-label="Destination Overview"', html)
        self.assertIn('aria-label="Featured Accommodations"', html)
        self.assertIn("<li>The Oberoi New Delhi</li>", html)
        self.assertEqual(html.count("<details>"), len(self.faqs))
        self.assertIn("Prices start from £1,299 (GBP).", html)

    def test_package_list_shows_price_on_request(self) -> None:
        aggregate = build_destination_aggregate([_package(price=None, title="Rajasthan <Palaces>")], "india")

        html = build_destination_package_list_html(aggregate, RENDER_CONFIG)

        self.assertIn("Price on request", html)
        self.assertIn("Rajasthan &lt;Palaces&gt;", html)
        self.assertIn('href="https://holidays.example.com/packages/india-tour/"', html)

    def test_package_list_is_empty_without_packages(self) -> None:
        self.assertEqual(build_destination_package_list_html(build_destination_aggregate([], "peru"), RENDER_CONFIG), "")

    def test_breadcrumb_and_noscript(self) -> None:
        breadcrumb = build_destination_breadcrumb_html(self.aggregate, RENDER_CONFIG)
        noscript = build_destination_noscript_html(self.aggregate, RENDER_CONFIG)

        self.assertIn('<a href="https://holidays.example.com/destinations/">Destinations</a>', breadcrumb)
        self.assertIn("<li>India</li>", breadcrumb)
        self.assertIn('<h1 itemprop="name">India Holidays</h1>', noscript)
        self.assertIn("Prices start from £1,299.", noscript)

    def test_meta_title_and_description(self) -> None:
        meta = generate_destination_meta(self.aggregate, RENDER_CONFIG)

        self.assertEqual(meta["title"], "India Holidays & Packages | Flights and Packages")
        self.assertTrue(meta["description"].startswith("Explore 2 India holiday packages including Culture"))
        self.assertTrue(meta["description"].endswith("Book with Flights and Packages."))

    def test_json_ld_payloads(self) -> None:
        item_list = generate_destination_item_list_json_ld(self.aggregate, RENDER_CONFIG)
        destination = generate_destination_json_ld(self.aggregate, RENDER_CONFIG)

        self.assertEqual(item_list["numberOfItems"], 2)
        first = item_list["itemListElement"][0]  # type: ignore[index]
        self.assertEqual(first["item"]["@type"], "TouristTrip")
        self.assertEqual(first["item"]["offers"]["price"], 1299)
        self.assertEqual(destination["@type"], "TouristDestination")
        self.assertEqual(destination["url"], "https://holidays.example.com/destinations/india/")


class DestinationViewsTests(TestCase):
    def setUp(self) -> None:
        cache.clear()
        FlightPackage.objects.create(
            title="Golden Triangle Classic",
            slug="golden-triangle-classic",
            category="India",
            tags=["Culture"],
            whats_included=["Return flights"],
            accommodations=[{"name": "The Oberoi New Delhi"}],
            price=1299,
            duration="8 Days",
            is_published=True,
        )

    def test_destination_page_renders_then_serves_cache(self) -> None:
        url = reverse("destinations:detail", kwargs={"slug": "india"})

        first = self.client.get(url)
        second = self.client.get(url)

        self.assertEqual(first.status_code, 200)
        self.assertEqual(first.context["destination_source"], "live-db")
        self.assertEqual(second.context["destination_source"], "cache")
        self.assertContains(first, '"@type":"TouristDestination"')
        self.assertContains(first, "Golden Triangle Classic")
        self.assertContains(first, '<link rel="canonical" href="https://holidays.flightsandpackages.com/destinations/india/">')

    def test_destination_without_packages_returns_404(self) -> None:
        response = self.client.get(reverse("destinations:detail", kwargs={"slug": "peru"}))

        self.assertEqual(response.status_code, 404)

    def test_category_change_invalidates_old_destination(self) -> None:
        url = reverse("destinations:detail", kwargs={"slug": "india"})
        self.client.get(url)

        package =FlightPackage.objects.get(slug="golden-triangle-classic")
        package.category = "Nepal"
        package.save()

        self.assertEqual(self.client.get(url).status_code, 404)
        self.assertEqual(self.client.get(reverse("destinations:detail", kwargs={"slug": "nepal"})).status_code, 200)

    def test_destination_verbose_header_prints_debug_lines(self) -> None:
        with patch("builtins.print") as mock_print:
            response = self.client.get(
                reverse("destinations:detail", kwargs={"slug": "india"}),
                HTTP_X_FNP_VERBOSE="1",
            )

        self.assertEqual(response.status_code, 200)
        printed_lines = "\n".join(str(args[0]) for args, _kwargs in mock_print.call_args_list)
        self.assertIn("[destinations][verbose]", printed_lines)

    def test_category_with_punctuation_is_reachable_from_collection_guide(self) -> None:
        FlightPackage.objects.create(
            title="Caribbean River Escape",
            slug="caribbean-river-escape",
            category="St. Lucia",
            tags=["River Cruise"],
            price=2499,
            is_published=True,
        )

        guide = self.client.get(reverse("collections:detail", kwargs={"slug": "river-cruises"}))
        response = self.client.get("/destinations/st.-lucia/")

        self.assertContains(guide, "/destinations/st.-lucia/")
        self.assertEqual(reverse("destinations:detail", kwargs={"slug": "st.-lucia"}), "/destinations/st.-lucia/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["destination_name"], "St. Lucia")

    def test_destination_page_renders_its_breadcrumb_trail(self) -> None:
        response = self.client.get(reverse("destinations:detail", kwargs={"slug": "india"}))

        self.assertContains(
            response,
            '<a href="https://holidays.flightsandpackages.com/destinations/">Destinations</a>',
        )
        self.assertNotContains(response, '<nav class="breadcrumbs"')
        html = response.content.decode("utf-8")
        self.assertLess(html.index('<nav aria-label="Breadcrumb">'), html.index('<main id="root">'))

    def test_destination_index_lists_destinations_with_packages(self) -> None:
        FlightPackage.objects.create(title="Draft Peru", slug="draft-peru", category="Peru", is_published=False)

        response = self.client.get(reverse("destinations:index"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["destinations_source"], "live-db")
        self.assertEqual([entry["slug"] for entry in response.context["destinations"]], ["india"])
        self.assertContains(response, '<a href="/destinations/india/">India</a>')
        self.assertContains(response, "from &pound;1,299")
        self.assertContains(response, '"@type":"ItemList"')
        self.assertContains(response, '"@type":"BreadcrumbList"')
        self.assertNotContains(response, "Peru")

    def test_destination_index_is_served_from_cache_until_packages_change(self) -> None:
        url = reverse("destinations:index")
        self.client.get(url)

        self.assertEqual(self.client.get(url).context["destinations_source"], "cache")

        FlightPackage.objects.create(title="Nepal Trek", slug="nepal-trek", category="Nepal", is_published=True)
        refreshed = self.client.get(url)

        self.assertEqual(refreshed.context["destinations_source"], "live-db")
        self.assertEqual([entry["slug"] for entry in refreshed.context["destinations"]], ["india", "nepal"])
