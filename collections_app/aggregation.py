"""
Collection classification and aggregation over plain package records.

Everything here is a pure function of its arguments: no database access,
no cache, no clock. The statistics helpers are shared with the
destinations app, which aggregates by package category instead of by
keyword rules.
"""
from __future__ import annotations

import math
import re
from collections.abc import Iterable, Sequence
from datetime import datetime
from decimal import Decimal
from functools import cmp_to_key
from typing import Final, TypedDict

from catalog.records import PackageData

from .registry import CollectionConfig

TOP_TAG_LIMIT: Final[int] = 8
TOP_DURATION_BUCKET_LIMIT: Final[int] = 2
TOP_INCLUSION_LIMIT: Final[int] = 10
TOP_DESTINATION_LIMIT: Final[int] = 8
COLLECTION_INCLUSION_THRESHOLD_PERCENT: Final[int] = 15
MIN_INCLUSION_LENGTH: Final[int] = 4

NIGHTS_PATTERN: Final[re.Pattern[str]] = re.compile(r"(\d+)\s*(?:nights?|days?)", re.IGNORECASE)
WHITESPACE_PATTERN: Final[re.Pattern[str]] = re.compile(r"\s+")

# (label, min nights, max nights); the last bucket is open-ended.
DURATION_BUCKETS: Final[tuple[tuple[str, int, int], ...]] = (
    ("1–4 nights", 1, 4),
    ("5–7 nights", 5, 7),
    ("8–10 nights", 8, 10),
    ("11–14 nights", 11, 14),
    ("15+ nights", 15, 999),
)


class DurationBucketStat(TypedDict):
    label: str
    min: int
    max: int
    count: int


class InclusionStat(TypedDict):
    name: str
    frequency: int
    percentage: float


class DestinationStat(TypedDict):
    name: str
    slug: str
    count: int


class CollectionAggregate(TypedDict):
    config: CollectionConfig
    package_count: int
    price_min: float | None
    price_median: float | None
    price_max: float | None
    top_tags: list[str]
    duration_buckets: list[DurationBucketStat]
    top_duration_buckets: list[str]
    top_inclusions: list[InclusionStat]
    top_destinations: list[DestinationStat]
    featured_packages: list[PackageData]
    all_packages: list[PackageData]


def parse_nights(value: object) -> int | None:
    """
    Extract a night count from free-text durations.

    "10 Nights / 11 Days" -> 10. A text that only mentions days counts one
    night fewer than days ("8 Days" -> 7). Anything else -> None.
    """

    text = str(value or "")
    if not text:
        return None

    match = NIGHTS_PATTERN.search(text)
    if match is None:
        return None

    number = int(match.group(1))
    lowered = text.lower()
    if "day" in lowered and "night" not in lowered:
        return number - 1
    return number


def median(values: Sequence[float]) -> float | None:
    if not values:
        return None

    ordered = sorted(values)
    middle = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[middle]
    # Even counts average the middle pair, rounded half-up to a whole amount.
    return math.floor((ordered[middle - 1] + ordered[middle]) / 2 + 0.5)


def normalize_slug(value: object) -> str:
    return WHITESPACE_PATTERN.sub("-", str(value or "").strip().lower())


def normalize_inclusion(value: object) -> str:
    return WHITESPACE_PATTERN.sub(" ", str(value or "").strip().lower())


def format_price(value: float) -> str:
    text = f"{value:,.3f}"
    return text.rstrip("0").rstrip(".")


def _capitalize_first(value: str) -> str:
    return value[:1].upper() + value[1:]


def coerce_price(value: object) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, Decimal):
        value = float(value)
    if not isinstance(value, (int, float)):
        return None
    if math.isnan(value) or value <= 0:
        return None
    return value


def _string_values(value: object) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item) for item in value if item is not None]


def _require_package_list(packages: object) -> Sequence[PackageData]:
    if not isinstance(packages, (list, tuple)):
        raise TypeError(f"packages must be a list of package records, got {type(packages).__name__}")
    return packages


def positive_prices(packages: Iterable[PackageData]) -> list[float]:
    prices: list[float] = []
    for package in packages:
        price = coerce_price(package.get("price"))
        if price is not None:
            prices.append(price)
    return prices


def tag_frequencies(packages: Iterable[PackageData], *, exclude_matches: Sequence[str] = ()) -> dict[str, int]:
    lowered_excludes = [match.lower() for match in exclude_matches]
    counts: dict[str, int] = {}
    for package in packages:
        for tag in _string_values(package.get("tags")):
            tag_lower = tag.lower()
            if any(match in tag_lower for match in lowered_excludes):
                continue
            counts[tag] = counts.get(tag, 0) + 1
    return counts


def top_keys_by_count(counts: dict[str, int], *, limit: int) -> list[str]:
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [key for key, _count in ranked[:limit]]


def duration_bucket_label(nights: int) -> str:
    for label, _minimum, maximum in DURATION_BUCKETS[:-1]:
        if nights <= maximum:
            return label
    return DURATION_BUCKETS[-1][0]


def count_duration_buckets(packages: Iterable[PackageData]) -> list[DurationBucketStat]:
    buckets: list[DurationBucketStat] = [
        {"label": label, "min": minimum, "max": maximum, "count": 0}
        for label, minimum, maximum in DURATION_BUCKETS
    ]
    index_by_label = {bucket["label"]: index for index, bucket in enumerate(buckets)}
    for package in packages:
        nights = parse_nights(package.get("duration"))
        if nights is None:
            continue
        buckets[index_by_label[duration_bucket_label(nights)]]["count"] += 1
    return buckets


def top_duration_bucket_labels(
    buckets: Sequence[DurationBucketStat],
    *,
    limit: int = TOP_DURATION_BUCKET_LIMIT,
) -> list[str]:
    active = [bucket for bucket in buckets if bucket["count"] > 0]
    active.sort(key=lambda bucket: bucket["count"], reverse=True)
    return [bucket["label"] for bucket in active[:limit]]


def mine_inclusions(
    packages: Sequence[PackageData],
    *,
    threshold_percent: int,
    limit: int = TOP_INCLUSION_LIMIT,
) -> list[InclusionStat]:
    counts: dict[str, int] = {}
    for package in packages:
        for item in _string_values(package.get("whats_included")):
            normalized = normalize_inclusion(item)
            if len(normalized) < MIN_INCLUSION_LENGTH:
                continue
            counts[normalized] = counts.get(normalized, 0) + 1

    total = len(packages)
    if total == 0:
        return []

    # Integer comparison keeps the threshold boundary exact.
    stats: list[InclusionStat] = [
        {
            "name": _capitalize_first(name),
            "frequency": count,
            "percentage": count * 100 / total,
        }
        for name, count in counts.items()
        if count * 100 >= threshold_percent * total
    ]
    stats.sort(key=lambda stat: stat["frequency"], reverse=True)
    return stats[:limit]


def count_destinations(packages: Iterable[PackageData], *, limit: int = TOP_DESTINATION_LIMIT) -> list[DestinationStat]:
    counts: dict[str, int] = {}
    for package in packages:
        category = str(package.get("category") or "")
        if category:
            counts[category] = counts.get(category, 0) + 1

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [{"name": name, "slug": normalize_slug(name), "count": count} for name, count in ranked[:limit]]


def _updated_at_timestamp(package: PackageData) -> float:
    value: object = package.get("updated_at")
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return 0.0
    if isinstance(value, datetime):
        return value.timestamp()
    return 0.0


def _compare_featured(left: PackageData, right: PackageData) -> int:
    left_order = left.get("display_order")
    right_order = right.get("display_order")
    if left_order is not None and right_order is not None:
        return (left_order > right_order) - (left_order < right_order)

    left_time = _updated_at_timestamp(left)
    right_time = _updated_at_timestamp(right)
    return (right_time > left_time) - (right_time < left_time)


def rank_featured(packages: Iterable[PackageData], *, limit: int) -> list[PackageData]:
    ranked = sorted(packages, key=cmp_to_key(_compare_featured))
    return ranked[: max(0, int(limit))]


def is_package_in_collection(package: PackageData, config: CollectionConfig) -> bool:
    tags = [tag.lower() for tag in _string_values(package.get("tags"))]
    title = str(package.get("title") or "").lower()
    description = str(package.get("description") or "").lower()

    tag_matches = [match.lower() for match in config.tag_matches]
    if any(match in tag for match in tag_matches for tag in tags):
        return True

    title_matches = [match.lower() for match in config.title_matches]
    if any(match in title for match in title_matches):
        return True
    return any(match in description for match in title_matches)


def filter_collection_packages(packages: Sequence[PackageData], config: CollectionConfig) -> list[PackageData]:
    return [
        package
        for package in _require_package_list(packages)
        if package.get("is_published") and is_package_in_collection(package, config)
    ]


def build_collection_aggregate(packages: Sequence[PackageData], config: CollectionConfig) -> CollectionAggregate:
    collection_packages = filter_collection_packages(packages, config)

    prices = positive_prices(collection_packages)
    duration_buckets = count_duration_buckets(collection_packages)

    return {
        "config": config,
        "package_count": len(collection_packages),
        "price_min": min(prices) if prices else None,
        "price_median": median(prices),
        "price_max": max(prices) if prices else None,
        "top_tags": top_keys_by_count(
            tag_frequencies(collection_packages, exclude_matches=config.tag_matches),
            limit=TOP_TAG_LIMIT,
        ),
        "duration_buckets": duration_buckets,
        "top_duration_buckets": top_duration_bucket_labels(duration_buckets),
        "top_inclusions": mine_inclusions(
            collection_packages,
            threshold_percent=COLLECTION_INCLUSION_THRESHOLD_PERCENT,
        ),
        "top_destinations": count_destinations(collection_packages),
        "featured_packages": rank_featured(collection_packages, limit=config.featured_limit),
        "all_packages": collection_packages,
    }
