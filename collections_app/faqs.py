from __future__ import annotations

from typing import Final

from .aggregation import CollectionAggregate, format_price
from .site import FaqItem, RenderConfig

MAX_COLLECTION_FAQS: Final[int] = 14


def _singular(value: str) -> str:
    return value[:-1] if value.endswith("s") else value


def generate_collection_faqs(aggregate: CollectionAggregate, render_config: RenderConfig) -> list[FaqItem]:
    """
    Build the collection FAQ list in a fixed candidate order.

    Entries backed by empty aggregate data are skipped, so the list length
    varies while the relative order never does. The HTML FAQ section and the
    FAQPage JSON-LD are both rendered from this one list.
    """

    config = aggregate["config"]
    name = config.name
    name_lower = name.lower()
    singular_lower = _singular(name_lower)
    contact_email = render_config.contact_email
    symbol = render_config.currency_symbol

    top_inclusions = aggregate["top_inclusions"]
    top_duration_buckets = aggregate["top_duration_buckets"]
    top_destinations = aggregate["top_destinations"]
    top_tags = aggregate["top_tags"]
    price_min = aggregate["price_min"]

    inclusions_text = ""
    if top_inclusions:
        common = ", ".join(item["name"].lower() for item in top_inclusions[:5])
        inclusions_text = f"Common inclusions are: {common}."

    faqs: list[FaqItem] = [
        {
            "question": f"What's included in your {name_lower} packages from the UK?",
            "answer": (
                f"Our {name_lower} packages typically include return flights from UK airports, accommodation, "
                f"and transfers between destinations. {inclusions_text} Each package clearly lists all inclusions."
            ),
        },
        {
            "question": f"Do your {name_lower} include flights from the UK?",
            "answer": (
                f"Yes, most of our {name_lower} packages include return flights from UK airports. Check individual "
                "package details for specific flight inclusions and departure airports available."
            ),
        },
    ]

    if top_duration_buckets:
        faqs.append(
            {
                "question": f"How long are your {name_lower} typically?",
                "answer": (
                    f"Most of our {name_lower} last {' or '.join(top_duration_buckets)}. We offer trips ranging "
                    "from short breaks to extended adventures to suit your schedule."
                ),
            }
        )

    if price_min is not None:
        faqs.append(
            {
                "question": f"What is the starting price for {name_lower}?",
                "answer": (
                    f"{name} packages start from {symbol}{format_price(price_min)} per person. Prices vary based "
                    "on departure dates, accommodation choices, and package inclusions."
                ),
            }
        )

    if top_destinations:
        destinations_text = ", ".join(item["name"] for item in top_destinations[:4])
        faqs.append(
            {
                "question": f"Which destinations do your {name_lower} cover?",
                "answer": (
                    f"Our {name_lower} collection features trips to {destinations_text} and more. Browse our "
                    "packages to explore different destinations and itineraries."
                ),
            }
        )

    faqs.append(
        {
            "question": f"Can I customise a {singular_lower} package?",
            "answer": (
                f"Absolutely! We can tailor any {singular_lower} to your preferences. Contact us at {contact_email} "
                "to adjust dates, upgrade hotels, add excursions, or create a bespoke itinerary."
            ),
        }
    )
    faqs.append(
        {
            "question": f"Do I need travel insurance for {name_lower}?",
            "answer": (
                "Travel insurance is not included in our packages but is strongly recommended. We advise "
                "comprehensive coverage for cancellations, medical emergencies, and trip interruption."
            ),
        }
    )
    faqs.append(
        {
            "question": "How do I book and get confirmation?",
            "answer": (
                f"To book, complete our enquiry form or email {contact_email}. Once your booking is confirmed and "
                "payment received, you'll receive all travel documents and vouchers by email."
            ),
        }
    )

    if top_tags:
        faqs.append(
            {
                "question": f"What types of {name_lower} do you offer?",
                "answer": (
                    f"Our {name_lower} collection includes {', '.join(top_tags[:5])} themed trips. Browse our "
                    "packages to find the perfect experience for you."
                ),
            }
        )

    faqs.extend(
        [
            {
                "question": f"Are {name_lower} suitable for families?",
                "answer": (
                    f"Many of our {name_lower} are perfect for families. Contact us to discuss family-friendly "
                    "options, child pricing, and connecting room arrangements."
                ),
            },
            {
                "question": f"What is the best time to book {name_lower}?",
                "answer": (
                    "We recommend booking 3-6 months in advance for the best availability and prices. Peak seasons "
                    "fill up quickly, so early booking is advisable."
                ),
            },
            {
                "question": "Are airport transfers included?",
                "answer": (
                    f"Many of our {name_lower} packages include airport transfers for a seamless experience. This "
                    "is noted in each package's \"What's Included\" section."
                ),
            },
            {
                "question": f"How do I contact you about {name_lower}?",
                "answer": (
                    f"For any questions about our {name_lower} packages, email {contact_email} or use our online "
                    "enquiry form. Our travel experts are happy to help."
                ),
            },
        ]
    )

    return faqs[:MAX_COLLECTION_FAQS]
