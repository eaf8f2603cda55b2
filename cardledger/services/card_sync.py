"""
Card synchronization service.

Reconciles the stored collection with fresh marketplace data. The store and
the price source know nothing about each other; this service is where the
collection's invariants are enforced:

- one card per ID (every write is an upsert by ID)
- category and amount are user-owned and survive every refresh
- a card that cannot be refreshed keeps its previous data
- amount is always at least 1

Every mutating call returns a fresh snapshot read back from the store's
point of view, so callers never need to keep their own copy in sync.
"""

import asyncio
import logging
from collections.abc import Callable

from cardledger.config import settings
from cardledger.models.card import Card, merge
from cardledger.parsers.card_input import validate_amount
from cardledger.services.card_store import CardStore
from cardledger.services.price_source import FetchError, PriceSource

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class CardSyncService:
    """
    Orchestrates PriceSource and CardStore.

    Each mutating operation holds a lock across its load-modify-save cycle,
    so overlapping calls from the same process cannot lose each other's
    updates.
    """

    def __init__(
        self,
        store: CardStore | None = None,
        source: PriceSource | None = None,
        refresh_concurrency: int | None = None,
    ) -> None:
        """
        Initialize the service.

        Args:
            store: Collection store. Defaults to a CardStore on settings.cards_file.
            source: Pricing client. Defaults to a PriceSource built from settings.
            refresh_concurrency: Cards fetched at once by refresh_all.
                Defaults to settings.refresh_concurrency.
        """
        self.store = store or CardStore()
        self.source = source or PriceSource()
        concurrency = (
            refresh_concurrency if refresh_concurrency is not None else settings.refresh_concurrency
        )
        self.refresh_concurrency = max(1, concurrency)
        self._lock = asyncio.Lock()

    async def _fetch(self, card_id: int) -> Card | None:
        try:
            return await self.source.fetch(card_id)
        except FetchError as e:
            logger.warning("Fetch failed for card %d: %s", card_id, e)
            return None

    def _find(self, cards: list[Card], card_id: int) -> Card | None:
        return next((card for card in cards if card.id == card_id), None)

    async def load_all(self) -> list[Card]:
        """Return the full stored collection."""
        return self.store.load_all()

    async def get(self, card_id: int) -> Card | None:
        """Return a single stored card, or None if it is not tracked."""
        return self._find(self.store.load_all(), card_id)

    async def add_or_refresh(
        self,
        card_id: int,
        category: str | None = None,
        amount: int | None = None,
    ) -> Card | None:
        """
        Fetch a card and store it.

        When the card is already tracked its category and amount are kept
        unless overridden here. The caller is responsible for confirming that
        refreshing an existing card is intended.

        Args:
            card_id: Marketplace product ID
            category: Category to assign. None or empty keeps the current one.
            amount: Quantity to assign. None keeps the current one (1 for a
                new card).

        Returns:
            The stored card, or None if the marketplace could not be reached

        Raises:
            InvalidInputError: If amount is less than 1
            StoreWriteError: If the collection could not be saved
        """
        if amount is not None:
            validate_amount(amount)

        async with self._lock:
            fresh = await self._fetch(card_id)
            if fresh is None:
                return None

            existing = self._find(self.store.load_all(), card_id)
            card = merge(existing, fresh) if existing is not None else fresh

            if category:
                card.category = category
            if amount is not None:
                card.amount = amount

            self.store.upsert(card)

        logger.info("Stored card %d (%s)", card.id, card.name)
        return card

    async def refresh_one(self, card_id: int) -> Card | None:
        """
        Refresh pricing for one card, keeping its category and amount.

        Returns:
            The refreshed card, or None if the fetch failed. The store is
            untouched on failure.

        Raises:
            StoreWriteError: If the collection could not be saved
        """
        async with self._lock:
            existing = self._find(self.store.load_all(), card_id)

            fresh = await self._fetch(card_id)
            if fresh is None:
                return None

            card = merge(existing, fresh) if existing is not None else fresh
            self.store.upsert(card)

        return card

    async def refresh_all(self, progress: ProgressCallback | None = None) -> list[Card]:
        """
        Refresh pricing for every stored card.

        Cards that fail to refresh are kept exactly as they were. The result
        keeps the store's order and is saved once, after every card has been
        processed.

        Args:
            progress: Called with (processed, total) after each card

        Returns:
            The full collection after the refresh

        Raises:
            StoreWriteError: If the collection could not be saved
        """
        async with self._lock:
            cards = self.store.load_all()
            total = len(cards)
            if not cards:
                return []

            semaphore = asyncio.Semaphore(self.refresh_concurrency)
            processed = 0

            async def refresh(card: Card) -> Card:
                nonlocal processed
                async with semaphore:
                    fresh = await self._fetch(card.id)

                processed += 1
                if progress is not None:
                    progress(processed, total)

                return merge(card, fresh) if fresh is not None else card

            updated = list(await asyncio.gather(*(refresh(card) for card in cards)))
            self.store.save_all(updated)

        failed = sum(1 for old, new in zip(cards, updated) if old is new)
        logger.info("Refreshed %d of %d cards", total - failed, total)
        return updated

    async def set_category(self, card_id: int, category: str) -> Card | None:
        """
        Assign a category. An empty string clears it.

        Returns:
            The updated card, or None if the card is not tracked
        """
        async with self._lock:
            cards = self.store.load_all()
            card = self._find(cards, card_id)
            if card is None:
                return None

            card.category = category
            self.store.save_all(cards)

        return card

    async def set_amount(self, card_id: int, amount: int) -> Card | None:
        """
        Assign the quantity owned.

        Returns:
            The updated card, or None if the card is not tracked

        Raises:
            InvalidInputError: If amount is less than 1
        """
        validate_amount(amount)

        async with self._lock:
            cards = self.store.load_all()
            card = self._find(cards, card_id)
            if card is None:
                return None

            card.amount = amount
            self.store.save_all(cards)

        return card

    async def list_categories(self) -> list[str]:
        """Distinct non-empty categories in ascending order."""
        cards = self.store.load_all()
        return sorted({card.category for card in cards if card.category})

    async def delete(self, card_id: int) -> bool:
        """
        Stop tracking a card.

        Returns:
            True if the card was removed, False if it was not tracked
        """
        async with self._lock:
            return self.store.delete(card_id)


# Default service instance
_service: CardSyncService | None = None


def get_card_sync_service() -> CardSyncService:
    """
    Get the default service instance.

    Returns:
        Singleton CardSyncService
    """
    global _service
    if _service is None:
        _service = CardSyncService()
    return _service


def reset_card_sync_service() -> None:
    """Drop the default instance so the next call rebuilds it from settings."""
    global _service
    _service = None
