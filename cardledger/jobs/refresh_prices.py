"""
Refresh marketplace pricing for the whole collection.

Can be run as a standalone script or called from a scheduler.
"""

import asyncio
import logging

from cardledger.models.card import Card
from cardledger.services.card_sync import CardSyncService, get_card_sync_service

logger = logging.getLogger(__name__)


def log_progress(current: int, total: int) -> None:
    """Progress callback reporting each processed card."""
    logger.info("Refreshed %d/%d cards", current, total)


async def run_refresh(service: CardSyncService | None = None) -> list[Card]:
    """
    Refresh every stored card.

    Args:
        service: Service to use. Defaults to the shared instance.

    Returns:
        The collection after the refresh
    """
    service = service or get_card_sync_service()

    cards = await service.load_all()
    if not cards:
        logger.info("No cards to refresh.")
        return []

    logger.info("Refreshing %d cards...", len(cards))
    updated = await service.refresh_all(progress=log_progress)
    logger.info("Price refresh complete.")
    return updated


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_refresh())


if __name__ == "__main__":
    main()
