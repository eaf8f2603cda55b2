from pathlib import Path

import pytest

from cardledger.services.card_store import CardStore
from cardledger.services.card_sync import CardSyncService
from tests.fakes import FakePriceSource


@pytest.fixture
def cards_path(tmp_path: Path) -> Path:
    return tmp_path / "cards.json"


@pytest.fixture
def store(cards_path: Path) -> CardStore:
    return CardStore(cards_path)


@pytest.fixture
def source() -> FakePriceSource:
    return FakePriceSource()


@pytest.fixture
def service(store: CardStore, source: FakePriceSource) -> CardSyncService:
    """Service over a temporary store with sequential refresh."""
    return CardSyncService(store=store, source=source, refresh_concurrency=1)
