from __future__ import annotations

from typing import Final

from flightsandpackages.seo import json_ld_script_tag

from .aggregation import CollectionAggregate, coerce_price, format_price
from .registry import CollectionConfig
from .site import FaqItem, RenderConfig, escape_text, pluralize_packages

META_DESCRIPTION_MAX_LENGTH: Final[int] = 160
NOSCRIPT_PACKAGE_LIMIT: Final[int] = 6
NOSCRIPT_DESTINATION_LIMIT: Final[int] = 5


def collection_path(config: CollectionConfig) -> str:
    return f"/collections/{config.slug}/"


def package_path(slug: object) -> str:
    return f"/packages/{slug or ''}/"


def destination_path(slug: object) -> str:
    return f"/destinations/{slug or ''}/"


def _duration_text(aggregate: CollectionAggregate) -> str:
    if aggregate["top_duration_buckets"]:
        return " or ".join(aggregate["top_duration_buckets"])
    return "various durations"


def _inclusion_prefix(percentage: float) -> str:
    if percentage >= 70:
        return "Most packages include"
    if percentage >= 40:
        return "Many packages include"
    return "Some packages include"


def build_collection_overview(aggregate: CollectionAggregate, render_config: RenderConfig) -> str:
    config = aggregate["config"]
    keyword = config.primary_keyword
    symbol = render_config.currency_symbol
    price_min = aggregate["price_min"]
    price_median = aggregate["price_median"]

    styles_text = ", ".join(aggregate["top_tags"][:3]) or "diverse experiences"
    destinations_text = (
        ", ".join(item["name"] for item in aggregate["top_destinations"][:3]) or "worldwide destinations"
    )

    parts = [
        f"Explore {aggregate['package_count']} {keyword} packages from the UK, ",
        f"offering unforgettable {config.name.lower()} to {destinations_text} and beyond. ",
        f"Typical trip lengths include {_duration_text(aggregate)}, ",
        f"with popular themes featuring {styles_text}. ",
    ]
    if price_min is not None:
        price_text = f"Prices start from {symbol}{format_price(price_min)}"
        if price_median is not None and price_median != price_min:
            price_text += f" with a median price of {symbol}{format_price(price_median)}"
        parts.append(f"{price_text}. ")
    parts.append(f"For bespoke {keyword} packages from the UK, contact {render_config.contact_email}.")
    return "".join(parts)


def _list_items(lines: list[str]) -> str:
    return "\n".join(f"    <li>{line}</li>" for line in lines)


def build_collection_guide_html(
    aggregate: CollectionAggregate,
    faqs: list[FaqItem],
    render_config: RenderConfig,
) -> str:
    """
    Crawler-facing guide: overview, styles, trip lengths, inclusions,
    destinations, featured packages, FAQs. Empty sections are left out,
    the overview is always present.
    """

    config = aggregate["config"]
    name = escape_text(config.name)
    symbol = render_config.currency_symbol
    sections: list[str] = [
        f'<section aria-label="{name} Overview">\n'
        f"  <p>{escape_text(build_collection_overview(aggregate, render_config))}</p>\n"
        "</section>\n"
    ]

    if aggregate["top_tags"]:
        sections.append(
            f'<section aria-label="Popular {name} Styles">\n'
            f"  <h2>Popular {name} Styles</h2>\n"
            "  <ul>\n"
            f"{_list_items([escape_text(tag) for tag in aggregate['top_tags']])}\n"
            "  </ul>\n"
            "</section>\n"
        )

    active_buckets = [bucket for bucket in aggregate["duration_buckets"] if bucket["count"] > 0]
    if active_buckets:
        bucket_lines = [
            f"{escape_text(bucket['label'])}: {pluralize_packages(bucket['count'])}" for bucket in active_buckets
        ]
        sections.append(
            f'<section aria-label="{name} Trip Lengths">\n'
            "  <h2>Typical Trip Lengths</h2>\n"
            "  <ul>\n"
            f"{_list_items(bucket_lines)}\n"
            "  </ul>\n"
            "</section>\n"
        )

    if aggregate["top_inclusions"]:
        inclusion_lines = [
            f"{_inclusion_prefix(item['percentage'])} {escape_text(item['name'].lower())}"
            for item in aggregate["top_inclusions"]
        ]
        sections.append(
            "<section aria-label=\"What's Included\">\n"
            "  <h2>What's Commonly Included</h2>\n"
            "  <ul>\n"
            f"{_list_items(inclusion_lines)}\n"
            "  </ul>\n"
            "</section>\n"
        )

    if aggregate["top_destinations"]:
        destination_lines: list[str] = []
        for item in aggregate["top_destinations"]:
            destination_url = escape_text(render_config.url(destination_path(item["slug"])))
            destination_lines.append(
                f'<a href="{destination_url}">{escape_text(item["name"])}</a> ({pluralize_packages(item["count"])})'
            )
        sections.append(
            '<section aria-label="Top Destinations">\n'
            "  <h2>Top Destinations</h2>\n"
            "  <ul>\n"
            f"{_list_items(destination_lines)}\n"
            "  </ul>\n"
            "</section>\n"
        )

    if aggregate["featured_packages"]:
        featured_lines: list[str] = []
        for package in aggregate["featured_packages"]:
            price = coerce_price(package.get("price"))
            price_text = f" - From {symbol}{format_price(price)}" if price else ""
            featured_lines.append(
                f'<a href="{escape_text(render_config.url(package_path(package.get("slug"))))}">'
                f"{escape_text(package.get('title'))}</a>{price_text}"
            )
        sections.append(
            f'<section aria-label="Featured {name}">\n'
            f"  <h2>Featured {name}</h2>\n"
            "  <ul>\n"
            f"{_list_items(featured_lines)}\n"
            "  </ul>\n"
            "</section>\n"
        )

    if faqs:
        faq_blocks = "\n".join(
            "  <details>\n"
            f"    <summary>{escape_text(faq['question'])}</summary>\n"
            f"    <p>{escape_text(faq['answer'])}</p>\n"
            "  </details>"
            for faq in faqs
        )
        sections.append(
            f'<section aria-label="{name} FAQs">\n'
            "  <h2>Frequently Asked Questions</h2>\n"
            f"{faq_blocks}\n"
            "</section>\n"
        )

    return "".join(sections)


def generate_collection_meta_title(config: CollectionConfig) -> str:
    return f"{config.name} | {config.meta_title_suffix} | Flights and Packages"


def generate_collection_meta_description(aggregate: CollectionAggregate, render_config: RenderConfig) -> str:
    config = aggregate["config"]
    description = f"Browse {aggregate['package_count']} {config.primary_keyword} packages from the UK. "
    if aggregate["price_min"] is not None:
        description += f"From {render_config.currency_symbol}{format_price(aggregate['price_min'])}. "
    description += f"Typical trips: {_duration_text(aggregate)}. Enquire at {render_config.contact_email}"
    # Plain character cut after interpolation; callers escape when embedding.
    return description[:META_DESCRIPTION_MAX_LENGTH]


def build_collection_json_ld_payloads(
    aggregate: CollectionAggregate,
    faqs: list[FaqItem],
    render_config: RenderConfig,
) -> list[dict[str, object]]:
    config = aggregate["config"]
    collection_url = render_config.url(collection_path(config))

    breadcrumb_list: dict[str, object] = {
        "@context": "https://schema.org",
        "@type": "BreadcrumbList",
        "itemListElement": [
            {"@type": "ListItem", "position": 1, "name": "Home", "item": render_config.url("/")},
            {"@type": "ListItem", "position": 2, "name": "Collections", "item": render_config.url("/collections/")},
            {"@type": "ListItem", "position": 3, "name": config.name, "item": collection_url},
        ],
    }

    collection_page: dict[str, object] = {
        "@context": "https://schema.org",
        "@type": "CollectionPage",
        "name": config.name,
        "url": collection_url,
        "description": generate_collection_meta_description(aggregate, render_config),
        "numberOfItems": aggregate["package_count"],
    }

    item_list_elements: list[dict[str, object]] = []
    for index, package in enumerate(aggregate["featured_packages"]):
        package_url = render_config.url(package_path(package.get("slug")))
        element: dict[str, object] = {
            "@type": "ListItem",
            "position": index + 1,
            "name": package.get("title") or "",
            "url": package_url,
        }
        price = coerce_price(package.get("price"))
        if price:
            element["item"] = {
                "@type": "Product",
                "name": package.get("title") or "",
                "url": package_url,
                "offers": {
                    "@type": "Offer",
                    "priceCurrency": render_config.currency_code,
                    "price": price,
                    "availability": "https://schema.org/InStock",
                },
            }
        item_list_elements.append(element)

    item_list: dict[str, object] = {
        "@context": "https://schema.org",
        "@type": "ItemList",
        "name": f"Featured {config.name}",
        "numberOfItems": len(aggregate["featured_packages"]),
        "itemListElement": item_list_elements,
    }

    faq_page: dict[str, object] = {
        "@context": "https://schema.org",
        "@type": "FAQPage",
        "mainEntity": [
            {
                "@type": "Question",
                "name": faq["question"],
                "acceptedAnswer": {"@type": "Answer", "text": faq["answer"]},
            }
            for faq in faqs
        ],
    }

    return [breadcrumb_list, collection_page, item_list, faq_page]


def generate_collection_json_ld(
    aggregate: CollectionAggregate,
    faqs: list[FaqItem],
    render_config: RenderConfig,
) -> str:
    payloads = build_collection_json_ld_payloads(aggregate, faqs, render_config)
    return "\n".join(json_ld_script_tag(payload) for payload in payloads)


def build_collection_noscript_html(aggregate: CollectionAggregate, render_config: RenderConfig) -> str:
    config = aggregate["config"]
    summary = f"Browse {aggregate['package_count']} {escape_text(config.primary_keyword)} packages from the UK"
    if aggregate["price_min"]:
        summary += f", from {render_config.currency_symbol}{format_price(aggregate['price_min'])}"

    lines = [f"<h1>{escape_text(config.h1)}</h1>", f"<p>{summary}.</p>"]

    if aggregate["top_destinations"]:
        destinations_text = ", ".join(
            escape_text(item["name"]) for item in aggregate["top_destinations"][:NOSCRIPT_DESTINATION_LIMIT]
        )
        lines.append(f"<p>Destinations: {destinations_text}</p>")

    if aggregate["featured_packages"]:
        lines.append("<ul>")
        for package in aggregate["featured_packages"][:NOSCRIPT_PACKAGE_LIMIT]:
            package_url = escape_text(render_config.url(package_path(package.get("slug"))))
            lines.append(f'  <li><a href="{package_url}">{escape_text(package.get("title"))}</a></li>')
        lines.append("</ul>")

    return "\n".join(lines) + "\n"
