from __future__ import annotations

import json
import re
from datetime import datetime, timedelta, timezone as datetime_timezone
from unittest.mock import patch

from django.core.cache import cache
from django.test import SimpleTestCase, TestCase
from django.urls import reverse

from catalog.models import FlightPackage
from catalog.records import PackageData

from .aggregation import (
    build_collection_aggregate,
    coerce_price,
    format_price,
    median,
    normalize_slug,
    parse_nights,
)
from .faqs import MAX_COLLECTION_FAQS, generate_collection_faqs
from .pages import render_collection_page
from .registry import (
    COLLECTION_CONFIGS,
    CollectionConfig,
    UnknownCollectionError,
    build_collection_registry,
    get_collection_config,
    is_configured_collection,
)
from .rendering import (
    build_collection_guide_html,
    build_collection_json_ld_payloads,
    build_collection_noscript_html,
    generate_collection_json_ld,
    generate_collection_meta_description,
    generate_collection_meta_title,
)
from .site import RenderConfig

RIVER_CRUISES = COLLECTION_CONFIGS["river-cruises"]
RENDER_CONFIG = RenderConfig(canonical_host="https://holidays.example.com")
JSON_LD_PATTERN = re.compile(r'<script type="application/ld\+json">(.*?)</script>', re.DOTALL)


def _package(**overrides: object) -> PackageData:
    package: dict[str, object] = {
        "slug": "river-cruise",
        "title": "River Cruise",
        "description": "",
        "category": "Germany",
        "tags": ["river cruise"],
        "whats_included": [],
        "price": 1000,
        "duration": "7 Nights",
        "display_order": None,
        "updated_at": None,
        "is_published": True,
    }
    package.update(overrides)
    return package  # type: ignore[return-value]


def _scenario_packages() -> list[PackageData]:
    return [
        _package(
            slug="danube-river-cruise",
            title="Danube River Cruise",
            tags=["river cruise", "luxury"],
            price=1200,
            duration="7 Nights / 8 Days",
            whats_included=["Flights", "Full board"],
        ),
        _package(
            slug="rhine-river-cruise",
            title="Rhine River Cruise",
            tags=["river cruise"],
            price=1400,
            duration="7 Nights",
            whats_included=["Flights"],
        ),
    ]


class RegistryTests(SimpleTestCase):
    def test_registry_holds_five_collections_in_registration_order(self) -> None:
        self.assertEqual(
            list(COLLECTION_CONFIGS),
            ["river-cruises", "twin-centre", "golden-triangle", "multi-centre", "solo-travel"],
        )

    def test_unknown_slug_raises_unknown_collection_error(self) -> None:
        with self.assertRaises(UnknownCollectionError):
            get_collection_config("ski-holidays")
        self.assertFalse(is_configured_collection("ski-holidays"))

    def test_unknown_collection_error_is_a_key_error(self) -> None:
        with self.assertRaises(KeyError):
            get_collection_config("")

    def test_registry_is_read_only(self) -> None:
        with self.assertRaises(TypeError):
            COLLECTION_CONFIGS["new"] = RIVER_CRUISES  # type: ignore[index]

    def test_duplicate_slugs_are_rejected(self) -> None:
        with self.assertRaises(ValueError):
            build_collection_registry(RIVER_CRUISES, RIVER_CRUISES)

    def test_custom_registry_lookup(self) -> None:
        ski = CollectionConfig(
            slug="ski",
            name="Ski Holidays",
            h1="Ski Holidays",
            meta_title_suffix="Ski Packages from the UK",
            keywords=("ski holidays",),
            tag_matches=("ski",),
            title_matches=("ski",),
        )
        registry = build_collection_registry(ski)

        self.assertIs(get_collection_config("ski", registry=registry), ski)
        self.assertEqual(ski.primary_keyword, "ski holidays")


class ParsingHelpersTests(SimpleTestCase):
    def test_parse_nights_reads_first_count(self) -> None:
        self.assertEqual(parse_nights("10 Nights / 11 Days"), 10)
        self.assertEqual(parse_nights("1 night"), 1)

    def test_parse_nights_from_days_only_counts_one_night_fewer(self) -> None:
        self.assertEqual(parse_nights("8 Days"), 7)

    def test_parse_nights_returns_none_for_unparseable_text(self) -> None:
        self.assertIsNone(parse_nights("Two weeks"))
        self.assertIsNone(parse_nights(""))
        self.assertIsNone(parse_nights(None))

    def test_median(self) -> None:
        self.assertEqual(median([100]), 100)
        self.assertEqual(median([100, 200]), 150)
        self.assertEqual(median([300, 100, 200]), 200)
        self.assertIsNone(median([]))

    def test_normalize_slug(self) -> None:
        self.assertEqual(normalize_slug("  Sri   Lanka "), "sri-lanka")
        self.assertEqual(normalize_slug(None), "")

    def test_format_price_groups_thousands_and_keeps_up_to_three_decimals(self) -> None:
        self.assertEqual(format_price(1299), "1,299")
        self.assertEqual(format_price(1299.5), "1,299.5")
        self.assertEqual(format_price(1234.567), "1,234.567")
        self.assertEqual(format_price(1234.5678), "1,234.568")

    def test_coerce_price_rejects_non_positive_and_non_numeric_values(self) -> None:
        self.assertEqual(coerce_price(1299), 1299)
        self.assertIsNone(coerce_price(0))
        self.assertIsNone(coerce_price(-5))
        self.assertIsNone(coerce_price("1299"))
        self.assertIsNone(coerce_price(True))
        self.assertIsNone(coerce_price(float("nan")))


class ClassifierTests(SimpleTestCase):
    def test_matches_tag_substring(self) -> None:
        aggregate = build_collection_aggregate([_package(tags=["Luxury River Cruises"])], RIVER_CRUISES)

        self.assertEqual(aggregate["package_count"], 1)

    def test_matches_title_then_description(self) -> None:
        by_title = _package(tags=[], title="Nile River Cruise")
        by_description = _package(tags=[], title="Egypt Explorer", description="Includes a river cruise to Luxor.")
        unrelated = _package(tags=["beach"], title="Maldives Escape", description="Overwater villa.")

        aggregate = build_collection_aggregate([by_title, by_description, unrelated], RIVER_CRUISES)

        self.assertEqual(aggregate["package_count"], 2)

    def test_missing_fields_do_not_raise(self) -> None:
        package: PackageData = {"is_published": True}

        aggregate = build_collection_aggregate([package], RIVER_CRUISES)

        self.assertEqual(aggregate["package_count"], 0)

    def test_unpublished_packages_are_excluded(self) -> None:
        aggregate = build_collection_aggregate([_package(is_published=False)], RIVER_CRUISES)

        self.assertEqual(aggregate["package_count"], 0)


class AggregatorTests(SimpleTestCase):
    def test_end_to_end_river_cruise_scenario(self) -> None:
        aggregate = build_collection_aggregate(_scenario_packages(), RIVER_CRUISES)

        self.assertEqual(aggregate["package_count"], 2)
        self.assertEqual(aggregate["price_min"], 1200)
        self.assertEqual(aggregate["price_median"], 1300)
        self.assertEqual(aggregate["price_max"], 1400)
        self.assertEqual(aggregate["top_tags"], ["luxury"])
        buckets = {bucket["label"]: bucket["count"] for bucket in aggregate["duration_buckets"]}
        self.assertEqual(buckets["5–7 nights"], 2)
        self.assertEqual(aggregate["top_duration_buckets"], ["5–7 nights"])
        inclusions = {item["name"]: item["percentage"] for item in aggregate["top_inclusions"]}
        self.assertEqual(inclusions, {"Flights": 100, "Full board": 50})
        self.assertEqual(aggregate["top_destinations"], [{"name": "Germany", "slug": "germany", "count": 2}])

    def test_empty_input_degrades_to_empty_aggregate(self) -> None:
        aggregate = build_collection_aggregate([], RIVER_CRUISES)

        self.assertEqual(aggregate["package_count"], 0)
        self.assertIsNone(aggregate["price_min"])
        self.assertIsNone(aggregate["price_median"])
        self.assertIsNone(aggregate["price_max"])
        self.assertEqual(aggregate["top_tags"], [])
        self.assertEqual(aggregate["top_duration_buckets"], [])
        self.assertEqual(aggregate["top_inclusions"], [])
        self.assertEqual(aggregate["top_destinations"], [])
        self.assertEqual(aggregate["featured_packages"], [])
        self.assertTrue(all(bucket["count"] == 0 for bucket in aggregate["duration_buckets"]))

    def test_non_list_packages_raise_type_error(self) -> None:
        with self.assertRaises(TypeError):
            build_collection_aggregate("not-a-list", RIVER_CRUISES)  # type: ignore[arg-type]
        with self.assertRaises(TypeError):
            build_collection_aggregate(None, RIVER_CRUISES)  # type: ignore[arg-type]

    def test_collection_tags_are_excluded_from_top_tags(self) -> None:
        packages = [_package(tags=["River Cruise", "Culture"]), _package(tags=["River Cruises", "Culture"])]

        aggregate = build_collection_aggregate(packages, RIVER_CRUISES)

        self.assertEqual(aggregate["top_tags"], ["Culture"])

    def test_inclusion_threshold_boundary_is_inclusive(self) -> None:
        packages = []
        for index in range(100):
            included = []
            if index < 14:
                included.append("Cabin upgrade")
            if index < 15:
                included.append("Shore excursions")
            packages.append(_package(slug=f"cruise-{index}", whats_included=included))

        aggregate = build_collection_aggregate(packages, RIVER_CRUISES)
        names = [item["name"] for item in aggregate["top_inclusions"]]

        self.assertIn("Shore excursions", names)
        self.assertNotIn("Cabin upgrade", names)

    def test_short_inclusions_are_dropped_and_variants_merged(self) -> None:
        packages = [
            _package(whats_included=["  Airport   Transfers ", "Tea"]),
            _package(whats_included=["airport transfers"]),
        ]

        aggregate = build_collection_aggregate(packages, RIVER_CRUISES)

        self.assertEqual(
            aggregate["top_inclusions"],
            [{"name": "Airport transfers", "frequency": 2, "percentage": 100}],
        )

    def test_seven_nights_falls_in_one_bucket_only(self) -> None:
        aggregate = build_collection_aggregate([_package(duration="7 Nights")], RIVER_CRUISES)
        buckets = {bucket["label"]: bucket["count"] for bucket in aggregate["duration_buckets"]}

        self.assertEqual(buckets["5–7 nights"], 1)
        self.assertEqual(buckets["8–10 nights"], 0)
        self.assertEqual(sum(buckets.values()), 1)

    def test_unparseable_duration_only_leaves_the_histogram(self) -> None:
        aggregate = build_collection_aggregate([_package(duration="Flexible", price=999)], RIVER_CRUISES)

        self.assertEqual(aggregate["package_count"], 1)
        self.assertEqual(aggregate["price_min"], 999)
        self.assertEqual(aggregate["top_duration_buckets"], [])

    def test_invalid_prices_are_excluded_from_price_stats(self) -> None:
        packages = [_package(price=None), _package(price=0), _package(price="call us"), _package(price=850)]

        aggregate = build_collection_aggregate(packages, RIVER_CRUISES)

        self.assertEqual(aggregate["package_count"], 4)
        self.assertEqual((aggregate["price_min"], aggregate["price_max"]), (850, 850))

    def test_featured_packages_are_capped(self) -> None:
        packages = [_package(slug=f"cruise-{index}") for index in range(20)]

        aggregate = build_collection_aggregate(packages, RIVER_CRUISES)

        self.assertEqual(len(aggregate["featured_packages"]), RIVER_CRUISES.featured_limit)
        self.assertEqual(aggregate["package_count"], 20)

    def test_featured_order_uses_display_order_then_recency(self) -> None:
        now = datetime(2026, 1, 1, tzinfo=datetime_timezone.utc)
        packages = [
            _package(slug="second", display_order=2),
            _package(slug="first", display_order=1),
        ]
        aggregate = build_collection_aggregate(packages, RIVER_CRUISES)
        self.assertEqual([item["slug"] for item in aggregate["featured_packages"]], ["first", "second"])

        mixed = [
            _package(slug="older", display_order=1, updated_at=now - timedelta(days=2)),
            _package(slug="newer", updated_at=now),
        ]
        aggregate = build_collection_aggregate(mixed, RIVER_CRUISES)
        self.assertEqual([item["slug"] for item in aggregate["featured_packages"]], ["newer", "older"])

    def test_aggregation_is_deterministic(self) -> None:
        first = build_collection_aggregate(_scenario_packages(), RIVER_CRUISES)
        second = build_collection_aggregate(_scenario_packages(), RIVER_CRUISES)

        self.assertEqual(first, second)


class FaqGeneratorTests(SimpleTestCase):
    def test_empty_aggregate_keeps_unconditional_questions_only(self) -> None:
        faqs = generate_collection_faqs(build_collection_aggregate([], RIVER_CRUISES), RENDER_CONFIG)
        questions = [faq["question"] for faq in faqs]

        self.assertEqual(questions[0], "What's included in your river cruises packages from the UK?")
        self.assertFalse(any(question.startswith("What is the starting price") for question in questions))
        self.assertFalse(any(question.startswith("Which destinations") for question in questions))
        self.assertFalse(any(question.startswith("How long") for question in questions))
        self.assertEqual(len(faqs), 9)

    def test_full_aggregate_emits_conditional_questions_in_fixed_order(self) -> None:
        faqs = generate_collection_faqs(build_collection_aggregate(_scenario_packages(), RIVER_CRUISES), RENDER_CONFIG)
        questions = [faq["question"] for faq in faqs]

        self.assertLessEqual(len(faqs), MAX_COLLECTION_FAQS)
        self.assertEqual(questions[2], "How long are your river cruises typically?")
        self.assertEqual(questions[3], "What is the starting price for river cruises?")
        self.assertEqual(questions[4], "Which destinations do your river cruises cover?")
        self.assertIn("£1,200", faqs[3]["answer"])

    def test_faqs_use_injected_contact_email(self) -> None:
        render_config = RenderConfig(canonical_host="https://holidays.example.com", contact_email="sales@example.com")
        faqs = generate_collection_faqs(build_collection_aggregate([], RIVER_CRUISES), render_config)

        self.assertTrue(any("sales@example.com" in faq["answer"] for faq in faqs))

    def test_faqs_are_deterministic(self) -> None:
        aggregate = build_collection_aggregate(_scenario_packages(), RIVER_CRUISES)

        self.assertEqual(
            generate_collection_faqs(aggregate, RENDER_CONFIG),
            generate_collection_faqs(aggregate, RENDER_CONFIG),
        )


class RendererTests(SimpleTestCase):
    def test_meta_title_template(self) -> None:
        self.assertEqual(
            generate_collection_meta_title(RIVER_CRUISES),
            "River Cruises | River Cruise Packages from the UK | Flights and Packages",
        )

    def test_meta_description_never_exceeds_160_characters(self) -> None:
        render_config = RenderConfig(
            canonical_host="https://holidays.example.com",
            contact_email="a-very-long-mailbox-name-for-enquiries@flightsandpackages.example.com",
        )
        for packages in ([], _scenario_packages(), [_package(slug=f"cruise-{index}") for index in range(1500)]):
            aggregate = build_collection_aggregate(packages, RIVER_CRUISES)
            self.assertLessEqual(len(generate_collection_meta_description(aggregate, render_config)), 160)

    def test_guide_sections_follow_fixed_order(self) -> None:
        aggregate = build_collection_aggregate(_scenario_packages(), RIVER_CRUISES)
        html = build_collection_guide_html(aggregate, generate_collection_faqs(aggregate, RENDER_CONFIG), RENDER_CONFIG)
        labels = [
            'aria-label="River Cruises Overview"',
            'aria-label="Popular River Cruises Styles"',
            'aria-label="River Cruises Trip Lengths"',
            "aria-label=\"What's Included\"",
            'aria-label="Top Destinations"',
            'aria-label="Featured River Cruises"',
            'aria-label="River Cruises FAQs"',
        ]
        positions = [html.index(label) for label in labels]

        self.assertEqual(positions, sorted(positions))
        self.assertIn('<a href="https://holidays.example.com/destinations/germany/">Germany</a>', html)
        self.assertIn("Most packages include flights", html)
        self.assertIn("<details>", html)

    def test_empty_aggregate_guide_has_overview_only(self) -> None:
        aggregate = build_collection_aggregate([], RIVER_CRUISES)
        html = build_collection_guide_html(aggregate, [], RENDER_CONFIG)

        self.assertEqual(html.count("<section"), 1)
        self.assertIn('aria-label="River Cruises Overview"', html)

    def test_script_in_title_is_escaped(self) -> None:
        packages = [_package(title="<script>alert(1)</script> River Cruise", slug="bad")]
        aggregate = build_collection_aggregate(packages, RIVER_CRUISES)
        faqs = generate_collection_faqs(aggregate, RENDER_CONFIG)

        for html in (
            build_collection_guide_html(aggregate, faqs, RENDER_CONFIG),
            build_collection_noscript_html(aggregate, RENDER_CONFIG),
        ):
            self.assertIn("&lt;script&gt;", html)
            self.assertNotIn("<script>", html)

    def test_json_ld_cannot_be_broken_out_of(self) -> None:
        packages = [_package(title="</script><script>alert(1)</script> River Cruise", slug="bad")]
        aggregate = build_collection_aggregate(packages, RIVER_CRUISES)

        html = generate_collection_json_ld(aggregate, generate_collection_faqs(aggregate, RENDER_CONFIG), RENDER_CONFIG)

        self.assertEqual(html.count("</script>"), 4)

    def test_json_ld_blocks_match_faqs_and_featured_packages(self) -> None:
        aggregate = build_collection_aggregate(_scenario_packages(), RIVER_CRUISES)
        faqs = generate_collection_faqs(aggregate, RENDER_CONFIG)

        blocks = [json.loads(block) for block in JSON_LD_PATTERN.findall(generate_collection_json_ld(aggregate, faqs, RENDER_CONFIG))]

        self.assertEqual([block["@type"] for block in blocks], ["BreadcrumbList", "CollectionPage", "ItemList", "FAQPage"])
        self.assertEqual(
            [item["item"] for item in blocks[0]["itemListElement"]],
            [
                "https://holidays.example.com/",
                "https://holidays.example.com/collections/",
                "https://holidays.example.com/collections/river-cruises/",
            ],
        )
        self.assertEqual(len(blocks[3]["mainEntity"]), len(faqs))
        self.assertEqual(blocks[3]["mainEntity"][0]["name"], faqs[0]["question"])
        first_item = blocks[2]["itemListElement"][0]
        self.assertEqual(first_item["item"]["@type"], "Product")
        self.assertEqual(first_item["item"]["offers"]["priceCurrency"], "GBP")

    def test_item_list_omits_product_when_price_missing(self) -> None:
        aggregate = build_collection_aggregate([_package(price=None)], RIVER_CRUISES)

        payloads = build_collection_json_ld_payloads(aggregate, [], RENDER_CONFIG)
        element = payloads[2]["itemListElement"][0]  # type: ignore[index]

        self.assertNotIn("item", element)

    def test_noscript_caps_package_links(self) -> None:
        packages = [_package(slug=f"cruise-{index}", title=f"Cruise {index} river cruise") for index in range(10)]
        html = build_collection_noscript_html(build_collection_aggregate(packages, RIVER_CRUISES), RENDER_CONFIG)

        self.assertEqual(html.count("<li>"), 6)
        self.assertTrue(html.startswith("<h1>River Cruises</h1>"))

    def test_rendered_page_is_deterministic(self) -> None:
        first = render_collection_page(_scenario_packages(), RIVER_CRUISES, RENDER_CONFIG)
        second = render_collection_page(_scenario_packages(), RIVER_CRUISES, RENDER_CONFIG)

        self.assertEqual(first, second)


class CollectionViewsTests(TestCase):
    def setUp(self) -> None:
        cache.clear()
        FlightPackage.objects.create(
            title="Danube River Cruise",
            slug="danube-river-cruise",
            category="Hungary",
            tags=["River Cruise", "Luxury"],
            whats_included=["Return flights", "Full board"],
            price=1899,
            duration="7 Nights",
            is_published=True,
        )

    def test_collection_detail_renders_live_page_then_serves_cache(self) -> None:
        url = reverse("collections:detail", kwargs={"slug": "river-cruises"})

        first = self.client.get(url)
        second = self.client.get(url)

        self.assertEqual(first.status_code, 200)
        self.assertEqual(first.context["collection_source"], "live-db")
        self.assertEqual(second.context["collection_source"], "cache")
        self.assertContains(first, "<h1 itemprop=\"name\">River Cruises</h1>", html=True)
        self.assertContains(first, "Danube River Cruise")
        self.assertContains(first, '"@type":"FAQPage"')
        self.assertContains(first, '<div id="noscript-content">')
        self.assertContains(
            first,
            "<title>River Cruises | River Cruise Packages from the UK | Flights and Packages</title>",
            html=True,
        )

    def test_unknown_collection_returns_404(self) -> None:
        response = self.client.get(reverse("collections:detail", kwargs={"slug": "ski-holidays"}))

        self.assertEqual(response.status_code, 404)

    def test_empty_collection_still_renders(self) -> None:
        response = self.client.get(reverse("collections:detail", kwargs={"slug": "solo-travel"}))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["collection_package_count"], 0)

    def test_package_save_invalidates_cached_collection_page(self) -> None:
        url = reverse("collections:detail", kwargs={"slug": "river-cruises"})
        self.client.get(url)

        FlightPackage.objects.create(
            title="Rhine River Cruise",
            slug="rhine-river-cruise",
            category="Germany",
            tags=["River Cruise"],
            is_published=True,
        )
        response = self.client.get(url)

        self.assertEqual(response.context["collection_source"], "live-db")
        self.assertEqual(response.context["collection_package_count"], 2)

    def test_collections_index_lists_counts(self) -> None:
        response = self.client.get(reverse("collections:index"))

        self.assertEqual(response.status_code, 200)
        counts = {entry["slug"]: entry["package_count"] for entry in response.context["collections"]}
        self.assertEqual(counts["river-cruises"], 1)
        self.assertEqual(counts["golden-triangle"], 0)
        self.assertContains(response, 'href="/collections/river-cruises/"')

    def test_collection_detail_verbose_query_prints_debug_lines(self) -> None:
        with patch("builtins.print") as mock_print:
            response = self.client.get(f"{reverse('collections:detail', kwargs={'slug': 'river-cruises'})}?verbose=1")

        self.assertEqual(response.status_code, 200)
        printed_lines = "\n".join(str(args[0]) for args, _kwargs in mock_print.call_args_list)
        self.assertIn("[collections][verbose]", printed_lines)

    def test_collection_detail_without_verbose_query_does_not_print_debug_lines(self) -> None:
        with patch("builtins.print") as mock_print:
            response = self.client.get(reverse("collections:detail", kwargs={"slug": "river-cruises"}))

        self.assertEqual(response.status_code, 200)
        mock_print.assert_not_called()
