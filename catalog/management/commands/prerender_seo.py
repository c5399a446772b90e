from __future__ import annotations

from pathlib import Path

from django.core.management.base import BaseCommand, CommandError, CommandParser
from django.template.loader import render_to_string
from django.utils.safestring import mark_safe

from catalog.models import published_package_records
from collections_app.pages import render_collection_page
from collections_app.registry import iter_collection_configs
from collections_app.rendering import collection_path, destination_path
from collections_app.site import RenderConfig, render_config_from_settings
from destinations.aggregation import destination_slugs
from destinations.pages import render_destination_page
from flightsandpackages.seo import BreadcrumbItem, normalize_meta_description, normalize_seo_title

DEFAULT_OUTPUT_DIR = "prerendered"


def _document_context(
    render_config: RenderConfig,
    *,
    path: str,
    title: str,
    description: str,
    breadcrumbs: list[BreadcrumbItem],
) -> dict[str, object]:
    normalized_title = normalize_seo_title(title)
    normalized_description = normalize_meta_description(description)
    return {
        "seo_title": normalized_title,
        "seo_description": normalized_description,
        "seo_og_title": normalized_title,
        "seo_og_description": normalized_description,
        "seo_og_type": "website",
        "seo_url": render_config.url(path),
        "seo_site_name": render_config.site_name,
        "seo_twitter_title": normalized_title,
        "seo_twitter_description": normalized_description,
        "seo_twitter_card": "summary",
        "contact_email": render_config.contact_email,
        "breadcrumbs": breadcrumbs,
    }


class Command(BaseCommand):
    help = "Write static HTML documents for every collection page and every destination with packages."

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "--output-dir",
            default=DEFAULT_OUTPUT_DIR,
            help="Directory receiving collections/<slug>.html and destinations/<slug>.html.",
        )
        parser.add_argument(
            "--verbose",
            action="store_true",
            help="Print one line per written document.",
        )

    def _vprint(self, verbose_enabled: bool, message: str) -> None:
        if verbose_enabled:
            self.stdout.write(f"[prerender][verbose] {message}")

    def _write_document(self, output_path: Path, html: str) -> None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(html, encoding="utf-8")

    def handle(self, *args, **options):  # type: ignore[no-untyped-def]
        verbose_enabled = bool(options.get("verbose"))
        output_dir = Path(str(options.get("output_dir") or DEFAULT_OUTPUT_DIR))
        if output_dir.exists() and not output_dir.is_dir():
            raise CommandError(f"Output path is not a directory: {output_dir}")

        render_config = render_config_from_settings()
        packages = published_package_records()
        self.stdout.write(f"Prerendering SEO pages from {len(packages)} published packages...")

        collection_count = 0
        for config in iter_collection_configs():
            payload = render_collection_page(packages, config, render_config)
            context = _document_context(
                render_config,
                path=collection_path(config),
                title=payload["meta_title"],
                description=payload["meta_description"],
                breadcrumbs=[
                    {"label": "Home", "url": "/"},
                    {"label": "Collections", "url": "/collections/"},
                    {"label": payload["name"]},
                ],
            )
            context.update(
                {
                    "collection_h1": payload["h1"],
                    "collection_guide_html": mark_safe(payload["guide_html"]),
                    "collection_noscript_html": mark_safe(payload["noscript_html"]),
                    "collection_json_ld_html": mark_safe(payload["json_ld_html"]),
                }
            )
            output_path = output_dir / "collections" / f"{config.slug}.html"
            self._write_document(output_path, render_to_string("pages/collections/detail.html", context))
            collection_count += 1
            self._vprint(verbose_enabled, f"Wrote {output_path} packages={payload['package_count']}")

        destination_count = 0
        for slug in destination_slugs(packages):
            payload = render_destination_page(packages, slug, render_config)
            if payload["package_count"] == 0:
                continue
            context = _document_context(
                render_config,
                path=destination_path(slug),
                title=payload["meta_title"],
                description=payload["meta_description"],
                breadcrumbs=[],
            )
            context.update(
                {
                    "destination_name": payload["name"],
                    "destination_breadcrumb_html": mark_safe(payload["breadcrumb_html"]),
                    "destination_guide_html": mark_safe(payload["guide_html"]),
                    "destination_package_list_html": mark_safe(payload["package_list_html"]),
                    "destination_noscript_html": mark_safe(payload["noscript_html"]),
                    "destination_json_ld_html": mark_safe(payload["json_ld_html"]),
                }
            )
            output_path = output_dir / "destinations" / f"{slug}.html"
            self._write_document(output_path, render_to_string("pages/destinations/detail.html", context))
            destination_count += 1
            self._vprint(verbose_enabled, f"Wrote {output_path} packages={payload['package_count']}")

        self.stdout.write(
            self.style.SUCCESS(
                "Prerender complete. "
                f"collections={collection_count}, "
                f"destinations={destination_count}, "
                f"output_dir={output_dir}"
            )
        )
