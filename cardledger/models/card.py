from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal


def placeholder_name(card_id: int) -> str:
    """Display name used when the marketplace does not supply one."""
    return f"Card #{card_id}"


@dataclass(slots=True)
class Card:
    """
    A tracked marketplace product plus the user's annotations.

    Provider-owned fields (name, prices, sale data, last_updated) come from
    the marketplace. User-owned fields (category, amount) are only ever
    changed by explicit user edits.

    Attributes:
        id: Marketplace product ID, the collection's primary key
        name: Product name, or a placeholder when the provider has none
        category: User-assigned category, empty when uncategorized
        market_price: Current market price, None when unknown
        lowest_price: Lowest current listing, None when unknown
        latest_sale_price: Price of the most recent sale, None when unknown
        latest_sale_date: Local time of the most recent sale
        last_updated: Local time the last successful fetch completed
        amount: Number of copies owned, always at least 1
    """

    id: int
    name: str = ""
    category: str = ""
    market_price: Decimal | None = None
    lowest_price: Decimal | None = None
    latest_sale_price: Decimal | None = None
    latest_sale_date: datetime | None = None
    last_updated: datetime | None = None
    amount: int = 1

    @property
    def price(self) -> Decimal | None:
        """Market price, falling back to the lowest listing."""
        if self.market_price is not None:
            return self.market_price
        return self.lowest_price

    @property
    def total_value(self) -> Decimal | None:
        """Price times amount owned, None when the price is unknown."""
        price = self.price
        if price is None:
            return None
        return price * self.amount


def merge(old: Card, fresh: Card) -> Card:
    """
    Combine a stored card with freshly fetched data.

    Returns a new Card carrying the provider-owned fields of `fresh` and the
    user-owned fields (category, amount) of `old`. Neither input is modified.
    """
    return replace(fresh, category=old.category, amount=old.amount)
