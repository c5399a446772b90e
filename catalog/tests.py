from __future__ import annotations

import tempfile
from io import StringIO
from pathlib import Path

from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.test import TestCase

from .models import FlightPackage, published_package_records


class FlightPackageModelTests(TestCase):
    def test_to_package_data_exposes_plain_record(self) -> None:
        package = FlightPackage.objects.create(
            title="Danube River Cruise",
            slug="danube-river-cruise",
            category="Hungary",
            tags=["River Cruise", None],
            accommodations=[{"name": "MS Danube Jewel"}, "not-a-dict"],
            price=1899,
            is_published=True,
        )

        record = package.to_package_data()

        self.assertEqual(record["slug"], "danube-river-cruise")
        self.assertEqual(record["tags"], ["River Cruise"])
        self.assertEqual(record["accommodations"], [{"name": "MS Danube Jewel", "description": "", "images": []}])
        self.assertEqual(record["price"], 1899.0)
        self.assertEqual(record["url"], "/packages/danube-river-cruise/")
        self.assertTrue(record["is_published"])

    def test_published_records_order_by_display_order_with_nulls_last(self) -> None:
        FlightPackage.objects.create(title="Unordered", slug="unordered", is_published=True)
        FlightPackage.objects.create(title="Second", slug="second", display_order=2, is_published=True)
        FlightPackage.objects.create(title="First", slug="first", display_order=1, is_published=True)
        FlightPackage.objects.create(title="Draft", slug="draft", display_order=0, is_published=False)

        self.assertEqual([record["slug"] for record in published_package_records()], ["first", "second", "unordered"])

    def test_clean_rejects_negative_price_and_non_list_json(self) -> None:
        with self.assertRaises(ValidationError):
            FlightPackage(title="Bad", slug="bad", price=-1).clean()
        with self.assertRaises(ValidationError):
            FlightPackage(title="Bad", slug="bad", tags="river cruise").clean()


class CatalogCommandTests(TestCase):
    def test_bootstrap_packages_seeds_rows_with_verbose_output(self) -> None:
        stdout = StringIO()
        call_command("bootstrap_packages", "--verbose", stdout=stdout)
        output = stdout.getvalue()

        self.assertEqual(FlightPackage.objects.filter(is_published=True).count(), 7)
        self.assertIn("[catalog][verbose]", output)
        self.assertIn("Packages bootstrap complete. created=7, updated=0", output)

    def test_bootstrap_packages_is_idempotent(self) -> None:
        call_command("bootstrap_packages", stdout=StringIO())
        stdout = StringIO()
        call_command("bootstrap_packages", "--unpublished", stdout=stdout)

        self.assertEqual(FlightPackage.objects.count(), 7)
        self.assertEqual(FlightPackage.objects.filter(is_published=True).count(), 0)
        self.assertIn("updated=7", stdout.getvalue())

    def test_prerender_writes_collection_and_destination_documents(self) -> None:
        call_command("bootstrap_packages", stdout=StringIO())
        stdout = StringIO()

        with tempfile.TemporaryDirectory() as output_dir:
            call_command("prerender_seo", "--output-dir", output_dir, "--verbose", stdout=stdout)
            root = Path(output_dir)

            collection_html = (root / "collections" / "river-cruises.html").read_text(encoding="utf-8")
            destination_html = (root / "destinations" / "sri-lanka.html").read_text(encoding="utf-8")
            collection_files = sorted(path.name for path in (root / "collections").iterdir())

        self.assertEqual(len(collection_files), 5)
        self.assertIn("Danube River Cruise", collection_html)
        self.assertIn(
            '<link rel="canonical" href="https://holidays.flightsandpackages.com/collections/river-cruises/">',
            collection_html,
        )
        self.assertIn('"@type":"FAQPage"', collection_html)
        self.assertIn("Sri Lanka Holidays", destination_html)
        self.assertIn(
            '<a href="https://holidays.flightsandpackages.com/destinations/">Destinations</a>',
            destination_html,
        )
        self.assertLess(destination_html.index('<nav aria-label="Breadcrumb">'), destination_html.index('<main id="root">'))
        self.assertIn("Price on request", destination_html)
        self.assertIn("[prerender][verbose]", stdout.getvalue())
        self.assertIn("collections=5, destinations=6", stdout.getvalue())
