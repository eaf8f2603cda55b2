"""
TCGplayer pricing client.

Builds a Card snapshot for one product from two independent endpoints:

- details: product name, market price and lowest listed price (GET)
- latest sales: most recent transaction price and date (POST with an empty
  JSON body, which the endpoint requires)

Failures are isolated per endpoint. Missing or malformed fields are left
unset rather than defaulted, so an unknown price is never reported as 0.
"""

import json
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any

import httpx

from cardledger.config import settings
from cardledger.models.card import Card, placeholder_name
from cardledger.parsers.timestamps import parse_timestamp

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Raised when the marketplace cannot be reached for a card."""

    def __init__(self, card_id: int, message: str) -> None:
        self.card_id = card_id
        super().__init__(message)


def _as_decimal(value: Any) -> Decimal | None:
    """Convert a finite JSON number to Decimal. Anything else is unknown."""
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, int):
        number = Decimal(value)
    elif isinstance(value, float):
        number = Decimal(str(value))
    else:
        return None
    return number if number.is_finite() else None


def _decode_object(response: httpx.Response) -> dict[str, Any] | None:
    """Decode a JSON object body, keeping numbers at decimal precision."""
    try:
        payload = json.loads(response.content, parse_float=Decimal)
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


def apply_details(card: Card, payload: dict[str, Any]) -> None:
    """Copy name and listing prices from a details payload onto `card`."""
    name = payload.get("productName")
    card.name = name if isinstance(name, str) and name else placeholder_name(card.id)
    card.market_price = _as_decimal(payload.get("marketPrice"))
    card.lowest_price = _as_decimal(payload.get("lowestPrice"))


def apply_latest_sale(card: Card, payload: dict[str, Any]) -> None:
    """
    Copy the most recent sale from a latest-sales payload onto `card`.

    The provider lists sales newest first; only the first entry is used.
    """
    sales = payload.get("data")
    if not isinstance(sales, list) or not sales:
        return

    latest = sales[0]
    if not isinstance(latest, dict):
        return

    card.latest_sale_price = _as_decimal(latest.get("purchasePrice"))
    card.latest_sale_date = parse_timestamp(latest.get("orderDate"))


class PriceSource:
    """
    Stateless client for marketplace pricing data.

    Each fetch opens its own connection pool; no state is kept between calls.
    """

    def __init__(
        self,
        details_url: str | None = None,
        latest_sales_url: str | None = None,
        timeout: float | None = None,
        user_agent: str | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            details_url: URL template with a {card_id} placeholder.
                Defaults to settings.details_url.
            latest_sales_url: URL template with a {card_id} placeholder.
                Defaults to settings.latest_sales_url.
            timeout: Per-request timeout in seconds. Defaults to
                settings.request_timeout.
            user_agent: User-Agent header. Defaults to settings.user_agent.
        """
        self.details_url = details_url or settings.details_url
        self.latest_sales_url = latest_sales_url or settings.latest_sales_url
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self.user_agent = user_agent or settings.user_agent

    def _headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
            "Accept-Language": "en-US,en;q=0.5",
        }

    async def fetch(self, card_id: int) -> Card:
        """
        Fetch a fresh snapshot of a card.

        The returned card always has id, name and last_updated set. Price and
        sale fields are set only when the provider returned them.

        Args:
            card_id: Marketplace product ID

        Returns:
            Card with provider-owned fields populated. User-owned fields
            (category, amount) are left at their defaults.

        Raises:
            FetchError: If neither endpoint could be reached
        """
        card = Card(id=card_id, last_updated=datetime.now().astimezone())

        async with httpx.AsyncClient(timeout=self.timeout, headers=self._headers()) as client:
            details_reached = await self._fetch_details(client, card)
            sales_reached = await self._fetch_latest_sale(client, card)

        if not card.name:
            card.name = placeholder_name(card_id)

        if not details_reached and not sales_reached:
            raise FetchError(card_id, f"Could not reach the marketplace for card {card_id}")

        return card

    async def _fetch_details(self, client: httpx.AsyncClient, card: Card) -> bool:
        """
        Populate name and listing prices.

        Returns:
            False if the request never got a response, True otherwise
        """
        url = self.details_url.format(card_id=card.id)
        try:
            response = await client.get(url)
        except httpx.TransportError as e:
            logger.warning("Details request for card %d failed: %s", card.id, e)
            return False
        except httpx.RequestError as e:
            logger.debug("Details request for card %d errored: %s", card.id, e)
            return True

        if not response.is_success:
            logger.debug("Details for card %d returned HTTP %d", card.id, response.status_code)
            return True

        payload = _decode_object(response)
        if payload is None:
            logger.debug("Details for card %d were not a JSON object", card.id)
            return True

        apply_details(card, payload)
        return True

    async def _fetch_latest_sale(self, client: httpx.AsyncClient, card: Card) -> bool:
        """
        Populate the most recent sale.

        Returns:
            False if the request never got a response, True otherwise
        """
        url = self.latest_sales_url.format(card_id=card.id)
        try:
            response = await client.post(url, json={})
        except httpx.TransportError as e:
            logger.warning("Latest sales request for card %d failed: %s", card.id, e)
            return False
        except httpx.RequestError as e:
            logger.debug("Latest sales request for card %d errored: %s", card.id, e)
            return True

        if not response.is_success:
            logger.debug("Latest sales for card %d returned HTTP %d", card.id, response.status_code)
            return True

        payload = _decode_object(response)
        if payload is None:
            logger.debug("Latest sales for card %d were not a JSON object", card.id)
            return True

        apply_latest_sale(card, payload)
        return True
