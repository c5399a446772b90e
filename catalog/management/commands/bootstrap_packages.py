from __future__ import annotations

from dataclasses import dataclass

from django.core.management.base import BaseCommand, CommandParser

from catalog.models import FlightPackage

STANDARD_INCLUSIONS: tuple[str, ...] = (
    "Return flights from London",
    "Airport transfers",
    "Daily breakfast",
)


@dataclass(frozen=True)
class PackageSeed:
    package_id: int
    slug: str
    title: str
    category: str
    description: str
    duration: str
    price: float | None
    tags: tuple[str, ...]
    hotel_name: str
    extra_inclusions: tuple[str, ...] = ()
    display_order: int | None = None


DEMO_PACKAGE_SEEDS: tuple[PackageSeed, ...] = (
    PackageSeed(
        package_id=501,
        slug="danube-river-cruise",
        title="Danube River Cruise",
        category="Hungary",
        description="Sail from Budapest to Vienna aboard a boutique river ship with guided city walks.",
        duration="7 Nights",
        price=1899,
        tags=("River Cruise", "Luxury"),
        hotel_name="MS Danube Jewel",
        extra_inclusions=("All meals on board",),
        display_order=1,
    ),
    PackageSeed(
        package_id=502,
        slug="rhine-river-cruise",
        title="Rhine Castles by River",
        category="Germany",
        description="A cruise past castles and vineyards between Basel and Amsterdam.",
        duration="10 Nights / 11 Days",
        price=2499,
        tags=("River Cruise", "Culture"),
        hotel_name="MS Rhine Princess",
        extra_inclusions=("All meals on board",),
        display_order=2,
    ),
    PackageSeed(
        package_id=503,
        slug="golden-triangle-classic",
        title="Classic Golden Triangle Tour",
        category="India",
        description="Delhi, Agra and Jaipur with a sunrise visit to the Taj Mahal.",
        duration="8 Days",
        price=1299,
        tags=("Culture", "Heritage"),
        hotel_name="The Oberoi New Delhi",
        extra_inclusions=("English-speaking guide",),
        display_order=3,
    ),
    PackageSeed(
        package_id=504,
        slug="golden-triangle-and-goa",
        title="Golden Triangle and Goa Beaches",
        category="India",
        description="A twin-centre holiday pairing Rajasthan palaces with a Goa beach stay.",
        duration="12 Nights",
        price=1749,
        tags=("Twin Centre", "Beach", "Culture"),
        hotel_name="The Oberoi New Delhi",
        display_order=4,
    ),
    PackageSeed(
        package_id=505,
        slug="dubai-and-maldives",
        title="Dubai and Maldives Twin Centre",
        category="Maldives",
        description="City lights in Dubai followed by an overwater villa in the Maldives.",
        duration="9 Nights",
        price=3299,
        tags=("Twin Centre", "Luxury", "Beach"),
        hotel_name="Sun Siyam Iru Fushi",
    ),
    PackageSeed(
        package_id=506,
        slug="vietnam-cambodia-multi-centre",
        title="Vietnam and Cambodia Explorer",
        category="Vietnam",
        description="A multi-centre journey through Hanoi, Halong Bay, Hoi An and Siem Reap.",
        duration="14 Nights",
        price=2199,
        tags=("Multi Centre", "Adventure"),
        hotel_name="Sofitel Legend Metropole",
    ),
    PackageSeed(
        package_id=507,
        slug="sri-lanka-solo-discovery",
        title="Sri Lanka Solo Discovery",
        category="Sri Lanka",
        description="Small-group touring for solo travellers with no single supplement.",
        duration="11 Nights",
        price=None,
        tags=("Solo Travel", "Wildlife"),
        hotel_name="Cinnamon Lodge Habarana",
    ),
)


class Command(BaseCommand):
    help = "Create or refresh demo flight packages so collection and destination pages have content."

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "--unpublished",
            action="store_true",
            help="Seed packages as drafts instead of publishing them.",
        )
        parser.add_argument(
            "--verbose",
            action="store_true",
            help="Print detailed progress lines for each seeded package.",
        )

    def _vprint(self, verbose_enabled: bool, message: str) -> None:
        if verbose_enabled:
            self.stdout.write(f"[catalog][verbose] {message}")

    def handle(self, *args, **options):  # type: ignore[no-untyped-def]
        verbose_enabled = bool(options.get("verbose"))
        publish = not bool(options.get("unpublished"))

        self.stdout.write("Bootstrapping flight package records...")
        self._vprint(verbose_enabled, f"publish={publish}")

        created_count = 0
        updated_count = 0

        for seed in DEMO_PACKAGE_SEEDS:
            package, created = FlightPackage.objects.update_or_create(
                pk=seed.package_id,
                defaults={
                    "slug": seed.slug,
                    "title": seed.title,
                    "category": seed.category,
                    "description": seed.description,
                    "excerpt": seed.description,
                    "duration": seed.duration,
                    "price": seed.price,
                    "currency": "GBP",
                    "tags": list(seed.tags),
                    "whats_included": [*STANDARD_INCLUSIONS, *seed.extra_inclusions],
                    "highlights": [],
                    "accommodations": [{"name": seed.hotel_name, "description": "", "images": []}],
                    "display_order": seed.display_order,
                    "is_published": publish,
                },
            )

            if created:
                created_count += 1
                self._vprint(verbose_enabled, f"Created package id={package.pk} slug={package.slug}")
            else:
                updated_count += 1
                self._vprint(verbose_enabled, f"Updated package id={package.pk} slug={package.slug}")

        self.stdout.write(
            self.style.SUCCESS(
                "Packages bootstrap complete. "
                f"created={created_count}, "
                f"updated={updated_count}"
            )
        )
