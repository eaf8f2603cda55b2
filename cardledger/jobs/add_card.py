"""
Add a card to the collection, or re-fetch one already tracked.

Usage:
    python -m cardledger.jobs.add_card 123456 --category Fire --amount 2
"""

import argparse
import asyncio
import logging

from cardledger.models.card import Card
from cardledger.models.failure import InvalidInputError
from cardledger.parsers.card_input import parse_amount, parse_card_id
from cardledger.services.card_sync import CardSyncService, get_card_sync_service

logger = logging.getLogger(__name__)


async def run_add(
    card_id: int,
    category: str | None = None,
    amount: int | None = None,
    service: CardSyncService | None = None,
) -> Card | None:
    """
    Fetch and store one card.

    Returns:
        The stored card, or None if it could not be fetched
    """
    service = service or get_card_sync_service()

    logger.info("Fetching card %d...", card_id)
    card = await service.add_or_refresh(card_id, category=category, amount=amount)

    if card is None:
        logger.warning("Could not fetch card %d. Check the ID and try again.", card_id)
    else:
        logger.info("Added card: %s (x%d)", card.name, card.amount)
    return card


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Add a card to the collection")
    parser.add_argument("card_id", help="Marketplace product ID")
    parser.add_argument("--category", help="Category to assign")
    parser.add_argument("--amount", help="Quantity owned")
    args = parser.parse_args(argv)

    try:
        card_id = parse_card_id(args.card_id)
        amount = parse_amount(args.amount) if args.amount is not None else None
    except InvalidInputError as e:
        logger.error("%s", e.message)
        return 2

    card = asyncio.run(run_add(card_id, category=args.category, amount=amount))
    return 0 if card is not None else 1


if __name__ == "__main__":
    raise SystemExit(main())
