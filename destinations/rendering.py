from __future__ import annotations

from typing import Final, TypedDict

from collections_app.aggregation import coerce_price, format_price
from collections_app.rendering import destination_path, package_path
from collections_app.site import FaqItem, RenderConfig, escape_text, pluralize_packages

from .aggregation import DestinationAggregate

NOSCRIPT_PACKAGE_LIMIT: Final[int] = 5


class DestinationMeta(TypedDict):
    title: str
    description: str


def _duration_text(aggregate: DestinationAggregate) -> str:
    if aggregate["top_duration_buckets"]:
        return " or ".join(aggregate["top_duration_buckets"])
    return "various durations"


def _list_items(lines: list[str]) -> str:
    return "\n".join(f"    <li>{line}</li>" for line in lines)


def _breadcrumb_items(aggregate: DestinationAggregate, render_config: RenderConfig) -> list[str]:
    return [
        f'<li><a href="{escape_text(render_config.url("/"))}">Home</a></li>',
        f'<li><a href="{escape_text(render_config.url("/destinations/"))}">Destinations</a></li>',
        f"<li>{escape_text(aggregate['destination_name'])}</li>",
    ]


def build_destination_guide_html(
    aggregate: DestinationAggregate,
    faqs: list[FaqItem],
    render_config: RenderConfig,
) -> str:
    name = escape_text(aggregate["destination_name"])
    symbol = render_config.currency_symbol
    styles_text = ", ".join(aggregate["top_tags"][:4]) or "diverse travel experiences"
    overview = (
        f"Explore {aggregate['package_count']} {aggregate['destination_name']} holiday packages, "
        f"with trips commonly lasting {_duration_text(aggregate)}. Popular styles in our "
        f"{aggregate['destination_name']} collection include {styles_text}."
    )
    if aggregate["price_min"] is not None:
        overview += f" Prices start from {symbol}{format_price(aggregate['price_min'])} ({render_config.currency_code})."

    sections: list[str] = [
        '<section aria-label="Destination Overview">\n'
        f"  <p>{escape_text(overview)}</p>\n"
        "</section>\n"
    ]

    if aggregate["top_tags"]:
        sections.append(
            '<section aria-label="Popular Styles">\n'
            "  <h2>Popular Holiday Styles</h2>\n"
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
            '<section aria-label="Trip Lengths">\n'
            "  <h2>Typical Trip Lengths</h2>\n"
            "  <ul>\n"
            f"{_list_items(bucket_lines)}\n"
            "  </ul>\n"
            "</section>\n"
        )

    if aggregate["top_inclusions"]:
        inclusion_lines = [
            ("Many packages include" if item["percentage"] >= 60 else "Some packages include")
            + f" {escape_text(item['name'].lower())}"
            for item in aggregate["top_inclusions"]
        ]
        sections.append(
            '<section aria-label="Common Inclusions">\n'
            "  <h2>What's Commonly Included</h2>\n"
            "  <ul>\n"
            f"{_list_items(inclusion_lines)}\n"
            "  </ul>\n"
            "</section>\n"
        )

    if aggregate["top_hotels"]:
        sections.append(
            '<section aria-label="Featured Accommodations">\n'
            "  <h2>Where You'll Stay</h2>\n"
            "  <ul>\n"
            f"{_list_items([escape_text(hotel) for hotel in aggregate['top_hotels']])}\n"
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
            '<section aria-label="Frequently Asked Questions">\n'
            f"  <h2>Frequently Asked Questions About {name} Holidays</h2>\n"
            f"{faq_blocks}\n"
            "</section>\n"
        )

    return "".join(sections)


def build_destination_package_list_html(aggregate: DestinationAggregate, render_config: RenderConfig) -> str:
    if not aggregate["featured_packages"]:
        return ""

    package_lines: list[str] = []
    for package in aggregate["featured_packages"]:
        price = coerce_price(package.get("price"))
        price_text = f"From {render_config.currency_symbol}{format_price(price)}" if price else "Price on request"
        package_url = escape_text(render_config.url(package_path(package.get("slug"))))
        package_lines.append(f'<a href="{package_url}">{escape_text(package.get("title"))}</a> - {price_text}')

    return (
        '<section aria-label="Available Packages">\n'
        f"  <h2>Holiday Packages to {escape_text(aggregate['destination_name'])}</h2>\n"
        "  <ul>\n"
        f"{_list_items(package_lines)}\n"
        "  </ul>\n"
        "</section>\n"
    )


def build_destination_breadcrumb_html(aggregate: DestinationAggregate, render_config: RenderConfig) -> str:
    items = "\n".join(f"    {item}" for item in _breadcrumb_items(aggregate, render_config))
    return f'<nav aria-label="Breadcrumb">\n  <ol>\n{items}\n  </ol>\n</nav>\n'


def build_destination_noscript_html(aggregate: DestinationAggregate, render_config: RenderConfig) -> str:
    name = escape_text(aggregate["destination_name"])
    styles_text = ", ".join(escape_text(tag) for tag in aggregate["top_tags"][:3])
    description = f"Explore {aggregate['package_count']} {name} packages"
    if styles_text:
        description += f" including {styles_text}"
    description += f", with trips lasting {escape_text(_duration_text(aggregate))}."
    if aggregate["price_min"] is not None:
        description += f" Prices start from {render_config.currency_symbol}{format_price(aggregate['price_min'])}."

    lines = [
        '<article itemscope itemtype="https://schema.org/TouristDestination">',
        f'  <h1 itemprop="name">{name} Holidays</h1>',
        f'  <p itemprop="description">{description}</p>',
    ]
    if aggregate["featured_packages"]:
        lines.extend(["  <h2>Featured Packages</h2>", "  <ul>"])
        for package in aggregate["featured_packages"][:NOSCRIPT_PACKAGE_LIMIT]:
            package_url = escape_text(render_config.url(package_path(package.get("slug"))))
            lines.append(f'    <li><a href="{package_url}">{escape_text(package.get("title"))}</a></li>')
        lines.append("  </ul>")

    lines.extend(['  <nav aria-label="Breadcrumb">', "    <ol>"])
    lines.extend(f"      {item}" for item in _breadcrumb_items(aggregate, render_config))
    lines.extend(["    </ol>", "  </nav>", "</article>"])
    return "\n".join(lines) + "\n"


def generate_destination_meta(aggregate: DestinationAggregate, render_config: RenderConfig) -> DestinationMeta:
    name = aggregate["destination_name"]
    tag_text = f" including {' and '.join(aggregate['top_tags'][:2])}" if aggregate["top_tags"] else ""
    duration_text = f" Trips last {aggregate['top_duration_buckets'][0]}." if aggregate["top_duration_buckets"] else ""
    price_text = (
        f" From {render_config.currency_symbol}{format_price(aggregate['price_min'])}."
        if aggregate["price_min"] is not None
        else ""
    )
    return {
        "title": f"{name} Holidays & Packages | {render_config.site_name}",
        "description": (
            f"Explore {aggregate['package_count']} {name} holiday packages{tag_text}.{duration_text}{price_text} "
            f"Book with {render_config.site_name}."
        ),
    }


def generate_destination_item_list_json_ld(
    aggregate: DestinationAggregate,
    render_config: RenderConfig,
) -> dict[str, object]:
    elements: list[dict[str, object]] = []
    for index, package in enumerate(aggregate["featured_packages"]):
        trip: dict[str, object] = {
            "@type": "TouristTrip",
            "name": package.get("title") or "",
            "url": render_config.url(package_path(package.get("slug"))),
            "touristType": "Leisure",
        }
        price = coerce_price(package.get("price"))
        if price:
            trip["offers"] = {
                "@type": "Offer",
                "price": price,
                "priceCurrency": render_config.currency_code,
                "availability": "https://schema.org/InStock",
            }
        elements.append({"@type": "ListItem", "position": index + 1, "item": trip})

    return {
        "@context": "https://schema.org",
        "@type": "ItemList",
        "name": f"{aggregate['destination_name']} Holiday Packages",
        "numberOfItems": len(aggregate["featured_packages"]),
        "itemListElement": elements,
    }


def generate_destination_json_ld(aggregate: DestinationAggregate, render_config: RenderConfig) -> dict[str, object]:
    name = aggregate["destination_name"]
    tag_text = f" including {', '.join(aggregate['top_tags'][:3])}" if aggregate["top_tags"] else ""
    duration_text = (
        f" Trips commonly last {' or '.join(aggregate['top_duration_buckets'])}."
        if aggregate["top_duration_buckets"]
        else ""
    )
    price_text = (
        f" Prices start from {render_config.currency_symbol}{format_price(aggregate['price_min'])} per person."
        if aggregate["price_min"] is not None
        else ""
    )
    return {
        "@context": "https://schema.org",
        "@type": "TouristDestination",
        "name": name,
        "description": f"Explore {aggregate['package_count']} {name} holiday packages{tag_text}.{duration_text}{price_text}",
        "url": render_config.url(destination_path(aggregate["destination_slug"])),
        "containedInPlace": {"@type": "Country", "name": name},
    }
