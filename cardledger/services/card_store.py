"""
JSON file persistence for the card collection.

The whole collection lives in one indented JSON array. Keys are written in
the PascalCase used by earlier versions of the collection file and matched
case-insensitively on load, so files from either version load unchanged.

Every mutation is a full load-modify-save cycle. The store is not safe
against another process writing the same file.
"""

import json
import logging
import os
import tempfile
from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any

from cardledger.config import settings
from cardledger.models.card import Card
from cardledger.models.failure import StoreReadError, StoreWriteError
from cardledger.parsers.timestamps import parse_timestamp

logger = logging.getLogger(__name__)


class _RecordError(ValueError):
    """A stored record has a field of the wrong type."""


def _decimal_to_json(value: Decimal | None) -> float | int | None:
    # JSON has no Infinity or NaN
    if value is None or not value.is_finite():
        return None
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _datetime_to_json(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def card_to_record(card: Card) -> dict[str, Any]:
    """Serialize a card to its stored JSON object."""
    return {
        "Id": card.id,
        "Name": card.name,
        "Category": card.category,
        "MarketPrice": _decimal_to_json(card.market_price),
        "LowestPrice": _decimal_to_json(card.lowest_price),
        "LatestSalePrice": _decimal_to_json(card.latest_sale_price),
        "LatestSaleDate": _datetime_to_json(card.latest_sale_date),
        "LastUpdated": _datetime_to_json(card.last_updated),
        "Amount": card.amount,
    }


def _read_int(record: dict[str, Any], key: str, default: int) -> int:
    value = record.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise _RecordError(f"{key} must be an integer, got {value!r}")
    return value


def _read_str(record: dict[str, Any], key: str) -> str:
    value = record.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise _RecordError(f"{key} must be a string, got {value!r}")
    return value


def _read_decimal(record: dict[str, Any], key: str) -> Decimal | None:
    value = record.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int | float | Decimal):
        raise _RecordError(f"{key} must be a number, got {value!r}")
    number = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    return number if number.is_finite() else None


def _read_datetime(record: dict[str, Any], key: str) -> datetime | None:
    value = record.get(key)
    if value is None:
        return None
    parsed = parse_timestamp(value, assume_utc=False)
    if parsed is None:
        raise _RecordError(f"{key} must be an ISO timestamp, got {value!r}")
    return parsed


def card_from_record(raw: dict[str, Any]) -> Card:
    """
    Deserialize a stored JSON object into a card.

    Keys are matched case-insensitively. Unknown keys are ignored and
    missing keys take the field's default.

    Raises:
        ValueError: If a present field has the wrong type
    """
    record = {str(key).lower(): value for key, value in raw.items()}

    amount = _read_int(record, "amount", 1)
    card_id = _read_int(record, "id", 0)
    if amount < 1:
        logger.warning("Card %d stored with amount %d, using 1", card_id, amount)
        amount = 1

    return Card(
        id=card_id,
        name=_read_str(record, "name"),
        category=_read_str(record, "category"),
        market_price=_read_decimal(record, "marketprice"),
        lowest_price=_read_decimal(record, "lowestprice"),
        latest_sale_price=_read_decimal(record, "latestsaleprice"),
        latest_sale_date=_read_datetime(record, "latestsaledate"),
        last_updated=_read_datetime(record, "lastupdated"),
        amount=amount,
    )


class CardStore:
    """Whole-collection persistence in a single JSON file."""

    def __init__(self, path: Path | None = None) -> None:
        """
        Initialize the store.

        Args:
            path: Location of the collection file. Defaults to
                settings.cards_file.
        """
        self.path = Path(path) if path is not None else settings.cards_file

    def load(self) -> list[Card]:
        """
        Load the collection, reporting unreadable content.

        A missing or blank file is an empty collection, not an error.

        Raises:
            StoreReadError: If the file cannot be read or parsed
        """
        if not self.path.exists():
            return []

        try:
            text = self.path.read_text(encoding="utf-8-sig")
        except OSError as e:
            raise StoreReadError(str(self.path), str(e)) from e

        if not text.strip():
            return []

        try:
            data = json.loads(text, parse_float=Decimal)
        except ValueError as e:
            raise StoreReadError(str(self.path), f"Invalid JSON: {e}") from e

        if data is None:
            return []
        if not isinstance(data, list):
            raise StoreReadError(str(self.path), "Expected a JSON array of cards")

        cards: list[Card] = []
        seen: set[int] = set()
        for index, raw in enumerate(data):
            if not isinstance(raw, dict):
                raise StoreReadError(str(self.path), f"Entry {index} is not an object")
            try:
                card = card_from_record(raw)
            except ValueError as e:
                raise StoreReadError(str(self.path), f"Entry {index}: {e}") from e

            if card.id in seen:
                logger.warning("Ignoring duplicate entry for card %d in %s", card.id, self.path)
                continue
            seen.add(card.id)
            cards.append(card)

        return cards

    def load_all(self) -> list[Card]:
        """
        Load the collection, treating unreadable content as empty.

        Never raises for read or parse failures; they are logged instead.
        """
        try:
            return self.load()
        except StoreReadError as e:
            logger.warning("%s (%s); starting with an empty collection", e.message, e.detail)
            return []

    def save_all(self, cards: Iterable[Card]) -> None:
        """
        Replace the stored collection.

        The file is written to a temporary sibling and moved into place, so
        a failed write leaves the previous file intact.

        Raises:
            StoreWriteError: If the file cannot be written
        """
        payload = json.dumps([card_to_record(card) for card in cards], indent=2)
        tmp_name: str | None = None

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_name = f.name
                f.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StoreWriteError(str(self.path), str(e)) from e

    def upsert(self, card: Card) -> None:
        """Replace the card with the same ID, or append it."""
        cards = self.load_all()
        for index, existing in enumerate(cards):
            if existing.id == card.id:
                cards[index] = card
                break
        else:
            cards.append(card)

        self.save_all(cards)

    def delete(self, card_id: int) -> bool:
        """
        Remove every card with the given ID.

        Returns:
            True if anything was removed. Nothing is written otherwise.
        """
        cards = self.load_all()
        remaining = [card for card in cards if card.id != card_id]
        if len(remaining) == len(cards):
            return False

        self.save_all(remaining)
        return True

    def is_writable(self) -> bool:
        """Check whether the collection file can be created or replaced."""
        directory = self.path.parent
        while not directory.exists():
            if directory == directory.parent:
                return False
            directory = directory.parent
        return os.access(directory, os.W_OK)
