"""
CardLedger services.

Persistence, marketplace pricing, and the synchronization logic that ties
them together.
"""

from cardledger.services.card_store import CardStore, card_from_record, card_to_record
from cardledger.services.card_sync import (
    CardSyncService,
    ProgressCallback,
    get_card_sync_service,
    reset_card_sync_service,
)
from cardledger.services.collection_view import (
    collection_value,
    filter_cards,
    product_url,
    sort_cards,
)
from cardledger.services.price_source import FetchError, PriceSource

__all__ = [
    "CardStore",
    "CardSyncService",
    "FetchError",
    "PriceSource",
    "ProgressCallback",
    "card_from_record",
    "card_to_record",
    "collection_value",
    "filter_cards",
    "get_card_sync_service",
    "product_url",
    "reset_card_sync_service",
    "sort_cards",
]
