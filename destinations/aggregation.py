from __future__ import annotations

from collections.abc import Sequence
from typing import Final, TypedDict

from catalog.records import PackageData
from collections_app.aggregation import (
    TOP_TAG_LIMIT,
    DurationBucketStat,
    InclusionStat,
    count_duration_buckets,
    format_price,
    median,
    mine_inclusions,
    normalize_slug,
    positive_prices,
    rank_featured,
    tag_frequencies,
    top_duration_bucket_labels,
    top_keys_by_count,
)
from collections_app.site import FaqItem, RenderConfig

DESTINATION_INCLUSION_THRESHOLD_PERCENT: Final[int] = 20
DEFAULT_DESTINATION_FEATURED_LIMIT: Final[int] = 10
TOP_HOTEL_LIMIT: Final[int] = 5
MAX_DESTINATION_FAQS: Final[int] = 12


class DestinationAggregate(TypedDict):
    destination_name: str
    destination_slug: str
    package_count: int
    price_min: float | None
    price_median: float | None
    price_max: float | None
    top_tags: list[str]
    duration_buckets: list[DurationBucketStat]
    top_duration_buckets: list[str]
    top_inclusions: list[InclusionStat]
    top_hotels: list[str]
    featured_packages: list[PackageData]
    all_packages: list[PackageData]


def is_package_in_destination(package: PackageData, destination_slug: str) -> bool:
    category = str(package.get("category") or "")
    wanted = destination_slug.lower()
    return category.lower() == wanted or normalize_slug(category) == wanted


def _fallback_destination_name(destination_slug: str) -> str:
    return destination_slug[:1].upper() + destination_slug[1:].replace("-", " ")


def _top_hotels(packages: Sequence[PackageData]) -> list[str]:
    counts: dict[str, int] = {}
    for package in packages:
        accommodations = package.get("accommodations") or []
        if not accommodations:
            continue
        first = accommodations[0]
        hotel_name = str(first.get("name") or "") if isinstance(first, dict) else ""
        if hotel_name:
            counts[hotel_name] = counts.get(hotel_name, 0) + 1
    return top_keys_by_count(counts, limit=TOP_HOTEL_LIMIT)


def build_destination_aggregate(
    packages: Sequence[PackageData],
    destination_slug: str,
    *,
    featured_limit: int = DEFAULT_DESTINATION_FEATURED_LIMIT,
) -> DestinationAggregate:
    if not isinstance(packages, (list, tuple)):
        raise TypeError(f"packages must be a list of package records, got {type(packages).__name__}")

    destination_packages = [
        package
        for package in packages
        if package.get("is_published") and is_package_in_destination(package, destination_slug)
    ]
    destination_name = (
        str(destination_packages[0].get("category") or "")
        if destination_packages
        else _fallback_destination_name(destination_slug)
    )

    prices = positive_prices(destination_packages)
    duration_buckets = count_duration_buckets(destination_packages)

    return {
        "destination_name": destination_name,
        "destination_slug": destination_slug,
        "package_count": len(destination_packages),
        "price_min": min(prices) if prices else None,
        "price_median": median(prices),
        "price_max": max(prices) if prices else None,
        "top_tags": top_keys_by_count(tag_frequencies(destination_packages), limit=TOP_TAG_LIMIT),
        "duration_buckets": duration_buckets,
        "top_duration_buckets": top_duration_bucket_labels(duration_buckets),
        "top_inclusions": mine_inclusions(
            destination_packages,
            threshold_percent=DESTINATION_INCLUSION_THRESHOLD_PERCENT,
        ),
        "top_hotels": _top_hotels(destination_packages),
        "featured_packages": rank_featured(destination_packages, limit=featured_limit),
        "all_packages": destination_packages,
    }


def _find_inclusion(aggregate: DestinationAggregate, *needles: str) -> InclusionStat | None:
    for item in aggregate["top_inclusions"]:
        lowered = item["name"].lower()
        if any(needle in lowered for needle in needles):
            return item
    return None


def generate_destination_faqs(aggregate: DestinationAggregate, render_config: RenderConfig) -> list[FaqItem]:
    name = aggregate["destination_name"]
    contact_email = render_config.contact_email
    faqs: list[FaqItem] = [
        {
            "question": f"How many holiday packages are available to {name}?",
            "answer": (
                f"We currently have {aggregate['package_count']} holiday packages to {name} in our collection, "
                "with options for different travel styles and budgets."
            ),
        }
    ]

    if aggregate["top_duration_buckets"]:
        faqs.append(
            {
                "question": f"How long are typical holidays to {name}?",
                "answer": (
                    f"Most of our {name} holidays last {' or '.join(aggregate['top_duration_buckets'])}. We offer "
                    "trips ranging from short breaks to extended tours to suit your schedule."
                ),
            }
        )

    if aggregate["price_min"] is not None:
        faqs.append(
            {
                "question": f"What is the starting price for {name} holidays?",
                "answer": (
                    f"{name} holiday packages start from {render_config.currency_symbol}"
                    f"{format_price(aggregate['price_min'])} per person. Prices vary based on departure dates, "
                    "accommodation, and inclusions."
                ),
            }
        )

    if aggregate["top_tags"]:
        faqs.append(
            {
                "question": f"What types of holidays to {name} do you offer?",
                "answer": (
                    f"Our {name} collection includes {', '.join(aggregate['top_tags'][:4])} holidays. Browse our "
                    "packages to find your ideal trip."
                ),
            }
        )

    flights = _find_inclusion(aggregate, "flight")
    if flights is not None and flights["percentage"] >= 50:
        flights_answer = (
            f"Many of our {name} packages include return flights from the UK. Check individual package details "
            "for specific inclusions."
        )
    else:
        flights_answer = (
            "Some packages include flights while others are land-only arrangements. Each package clearly states "
            "what's included."
        )
    faqs.append({"question": f"Are flights included in {name} holiday packages?", "answer": flights_answer})

    transfers = _find_inclusion(aggregate, "transfer", "airport")
    if transfers is not None and transfers["percentage"] >= 40:
        faqs.append(
            {
                "question": "Are airport transfers included?",
                "answer": (
                    f"Many of our {name} packages include airport transfers. This is noted in the "
                    "\"What's Included\" section of each package."
                ),
            }
        )

    faqs.extend(
        [
            {
                "question": f"Is travel insurance included in {name} holidays?",
                "answer": (
                    "Travel insurance is not included in our packages. We strongly recommend arranging comprehensive "
                    "travel insurance before departure to cover cancellations, medical emergencies, and baggage."
                ),
            },
            {
                "question": f"Are there any local taxes to pay in {name}?",
                "answer": (
                    "Local city or tourist taxes may apply and are usually payable directly to your hotel upon "
                    "check-in or check-out. These are not included in our package prices."
                ),
            },
            {
                "question": "How do I receive my booking confirmation?",
                "answer": (
                    "Once your booking is processed and payment confirmed, you will receive a confirmation email "
                    f"with all your travel documents and vouchers. Questions can be sent to {contact_email}."
                ),
            },
            {
                "question": f"Can I customise my {name} holiday package?",
                "answer": (
                    f"Yes! Contact us at {contact_email} to tailor your holiday. We can adjust dates, upgrade "
                    "accommodation, add excursions, or combine destinations."
                ),
            },
        ]
    )

    if aggregate["top_hotels"]:
        faqs.append(
            {
                "question": f"Which hotels are featured in {name} packages?",
                "answer": (
                    f"Popular accommodations in our {name} collection include {', '.join(aggregate['top_hotels'][:3])}. "
                    "Browse packages for full hotel details and options."
                ),
            }
        )

    faqs.append(
        {
            "question": f"What is the best time to visit {name}?",
            "answer": (
                f"Our {name} packages are available throughout the year with departures to suit different seasons. "
                "Check individual package availability for specific dates."
            ),
        }
    )

    return faqs[:MAX_DESTINATION_FAQS]


def destination_slugs(packages: Sequence[PackageData]) -> list[str]:
    """Distinct slugified categories of published packages, in first-seen order."""

    slugs: list[str] = []
    for package in packages:
        if not package.get("is_published"):
            continue
        slug = normalize_slug(package.get("category"))
        if slug and slug not in slugs:
            slugs.append(slug)
    return slugs
