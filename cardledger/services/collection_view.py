"""
Read-only views over a card collection.

Filtering, sorting and totals used by collection listings. None of these
touch the store; they operate on a snapshot returned by CardSyncService.
"""

from collections.abc import Iterable
from decimal import Decimal
from typing import Any, Literal

from cardledger.config import settings
from cardledger.models.card import Card

SortKey = Literal[
    "id",
    "name",
    "category",
    "amount",
    "market_price",
    "total_value",
    "latest_sale_price",
    "latest_sale_date",
    "last_updated",
]


def filter_cards(
    cards: Iterable[Card],
    category: str | None = None,
    search: str | None = None,
) -> list[Card]:
    """
    Filter cards by exact category and free-text search.

    The search is case-insensitive and matches the name, the category, or
    any part of the ID.
    """
    filtered = list(cards)

    if category:
        filtered = [card for card in filtered if card.category == category]

    needle = (search or "").strip().lower()
    if needle:
        filtered = [
            card
            for card in filtered
            if needle in card.name.lower()
            or needle in str(card.id)
            or needle in card.category.lower()
        ]

    return filtered


def sort_cards(cards: Iterable[Card], key: SortKey = "id", descending: bool = False) -> list[Card]:
    """
    Sort cards by a field or derived value.

    Text compares case-insensitively. Cards with an unknown value for the
    key always sort last, whichever the direction.
    """

    def value(card: Card) -> Any:
        field = getattr(card, key)
        return field.casefold() if isinstance(field, str) else field

    cards = list(cards)
    known = [card for card in cards if value(card) is not None]
    unknown = [card for card in cards if value(card) is None]
    return sorted(known, key=value, reverse=descending) + unknown


def collection_value(cards: Iterable[Card]) -> Decimal:
    """Sum of total_value over cards with a known price."""
    return sum(
        (card.total_value for card in cards if card.total_value is not None),
        Decimal(0),
    )


def product_url(card_id: int) -> str:
    """Marketplace product page for a card."""
    return settings.product_url.format(card_id=card_id)
