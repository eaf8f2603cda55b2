"""Tests for JSON card persistence."""

import json
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

import pytest

from cardledger.models.card import Card
from cardledger.models.failure import StoreReadError, StoreWriteError
from cardledger.services.card_store import CardStore, card_from_record, card_to_record
from tests.fakes import make_card

LEGACY_FILE = """[
  {
    "Id": 517045,
    "Name": "Charizard ex",
    "Category": "Fire",
    "MarketPrice": 120.5,
    "LowestPrice": 110,
    "LatestSalePrice": 118.25,
    "LatestSaleDate": "2024-05-01T14:03:11-04:00",
    "LastUpdated": "2024-06-01T09:15:42.1234567-04:00",
    "Amount": 2
  },
  {
    "Id": 88,
    "Name": "Card #88",
    "Category": "",
    "MarketPrice": null,
    "LowestPrice": null,
    "LatestSalePrice": null,
    "LatestSaleDate": null,
    "LastUpdated": "2024-06-01T09:15:43.5-04:00",
    "Amount": 1
  }
]"""


class TestLoadResilience:
    def test_missing_file_is_empty(self, store: CardStore) -> None:
        """A missing file loads as an empty collection."""
        assert store.load_all() == []

    def test_empty_file_is_empty(self, store: CardStore, cards_path: Path) -> None:
        cards_path.write_text("")
        assert store.load_all() == []

    def test_whitespace_file_is_empty(self, store: CardStore, cards_path: Path) -> None:
        cards_path.write_text("  \n\t ")
        assert store.load_all() == []

    def test_invalid_json_is_empty(self, store: CardStore, cards_path: Path) -> None:
        cards_path.write_text("[{not json")
        assert store.load_all() == []

    def test_wrong_shape_is_empty(self, store: CardStore, cards_path: Path) -> None:
        cards_path.write_text('{"Id": 1}')
        assert store.load_all() == []

    def test_bad_field_type_is_empty(self, store: CardStore, cards_path: Path) -> None:
        cards_path.write_text('[{"Id": "abc"}]')
        assert store.load_all() == []

    def test_strict_load_reports_corruption(self, store: CardStore, cards_path: Path) -> None:
        """load() distinguishes a corrupt file from an empty one."""
        cards_path.write_text("[{not json")

        with pytest.raises(StoreReadError, match="Could not read"):
            store.load()

    def test_strict_load_missing_file_is_empty(self, store: CardStore) -> None:
        assert store.load() == []

    def test_out_of_range_timestamp_is_empty(self, store: CardStore, cards_path: Path) -> None:
        """A stored date that cannot be converted to local time is corrupt data."""
        cards_path.write_text('[{"Id": 1, "LastUpdated": "0001-01-01T00:00:00+05:00"}]')

        assert store.load_all() == []
        with pytest.raises(StoreReadError):
            store.load()

    def test_non_finite_prices_are_unknown(self, store: CardStore, cards_path: Path) -> None:
        cards_path.write_text('[{"Id": 1, "MarketPrice": Infinity, "LowestPrice": NaN}]')

        [card] = store.load_all()

        assert card.market_price is None
        assert card.lowest_price is None


class TestLoadFormat:
    def test_reads_legacy_file(self, store: CardStore, cards_path: Path) -> None:
        """Files written by the earlier desktop version load unchanged."""
        cards_path.write_text(LEGACY_FILE)

        cards = store.load_all()

        assert [c.id for c in cards] == [517045, 88]
        charizard = cards[0]
        assert charizard.name == "Charizard ex"
        assert charizard.category == "Fire"
        assert charizard.market_price == Decimal("120.5")
        assert charizard.lowest_price == Decimal("110")
        assert charizard.latest_sale_price == Decimal("118.25")
        assert charizard.latest_sale_date == datetime(
            2024, 5, 1, 14, 3, 11, tzinfo=timezone(timedelta(hours=-4))
        )
        assert charizard.last_updated is not None
        assert charizard.last_updated.microsecond == 123456
        assert charizard.amount == 2

        assert cards[1].market_price is None
        assert cards[1].latest_sale_date is None

    def test_keys_are_case_insensitive(self, store: CardStore, cards_path: Path) -> None:
        cards_path.write_text('[{"id": 5, "NAME": "Pikachu", "marketprice": 1.25, "aMoUnT": 3}]')

        [card] = store.load_all()

        assert card.id == 5
        assert card.name == "Pikachu"
        assert card.market_price == Decimal("1.25")
        assert card.amount == 3

    def test_missing_fields_take_defaults(self, store: CardStore, cards_path: Path) -> None:
        cards_path.write_text('[{"Id": 9}]')

        [card] = store.load_all()

        assert card == Card(id=9)

    def test_unknown_fields_are_ignored(self, store: CardStore, cards_path: Path) -> None:
        cards_path.write_text('[{"Id": 9, "Rarity": "Holo", "Notes": ["a"]}]')

        [card] = store.load_all()

        assert card.id == 9

    def test_non_positive_amount_is_clamped(self, store: CardStore, cards_path: Path) -> None:
        cards_path.write_text('[{"Id": 9, "Amount": 0}]')

        [card] = store.load_all()

        assert card.amount == 1

    def test_duplicate_ids_keep_first(self, store: CardStore, cards_path: Path) -> None:
        cards_path.write_text('[{"Id": 9, "Name": "First"}, {"Id": 9, "Name": "Second"}]')

        cards = store.load_all()

        assert len(cards) == 1
        assert cards[0].name == "First"


class TestSave:
    def test_save_then_load_keeps_values(self, store: CardStore) -> None:
        card = make_card(
            3,
            category="Water",
            amount=2,
            market_price=Decimal("12.34"),
            lowest_price=None,
            latest_sale_price=Decimal("11.99"),
            latest_sale_date=datetime(2024, 5, 30, 18, 0, tzinfo=timezone.utc),
        )

        store.save_all([card])
        [loaded] = store.load_all()

        assert loaded == card

    def test_writes_indented_pascal_case(self, store: CardStore, cards_path: Path) -> None:
        store.save_all([make_card(3)])

        text = cards_path.read_text()
        data = json.loads(text)

        assert text.startswith("[\n  {")
        assert set(data[0]) == {
            "Id",
            "Name",
            "Category",
            "MarketPrice",
            "LowestPrice",
            "LatestSalePrice",
            "LatestSaleDate",
            "LastUpdated",
            "Amount",
        }

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        store = CardStore(tmp_path / "nested" / "dir" / "cards.json")

        store.save_all([make_card(1)])

        assert [c.id for c in store.load_all()] == [1]

    def test_leaves_no_temp_files(self, store: CardStore, cards_path: Path) -> None:
        store.save_all([make_card(1)])
        store.save_all([make_card(2)])

        assert [p.name for p in cards_path.parent.iterdir()] == ["cards.json"]

    def test_write_failure_raises(self, tmp_path: Path) -> None:
        """Write failures surface instead of being swallowed."""
        target = tmp_path / "cards.json"
        target.mkdir()
        store = CardStore(target)

        with pytest.raises(StoreWriteError, match="Could not save"):
            store.save_all([make_card(1)])

        assert list(tmp_path.iterdir()) == [target]


class TestUpsertAndDelete:
    def test_upsert_appends_new_card(self, store: CardStore) -> None:
        store.save_all([make_card(1)])

        store.upsert(make_card(2))

        assert [c.id for c in store.load_all()] == [1, 2]

    def test_upsert_replaces_in_place(self, store: CardStore) -> None:
        store.save_all([make_card(1), make_card(2), make_card(3)])

        store.upsert(make_card(2, name="Replaced"))

        cards = store.load_all()
        assert [c.id for c in cards] == [1, 2, 3]
        assert cards[1].name == "Replaced"

    def test_upsert_into_missing_file(self, store: CardStore) -> None:
        store.upsert(make_card(1))

        assert [c.id for c in store.load_all()] == [1]

    def test_delete_removes_card(self, store: CardStore) -> None:
        store.save_all([make_card(1), make_card(2)])

        assert store.delete(1) is True
        assert [c.id for c in store.load_all()] == [2]

    def test_delete_missing_is_noop(self, store: CardStore, cards_path: Path) -> None:
        store.save_all([make_card(1)])
        before = cards_path.read_text()

        assert store.delete(99) is False
        assert cards_path.read_text() == before

    def test_delete_without_file_does_not_create_it(
        self, store: CardStore, cards_path: Path
    ) -> None:
        assert store.delete(1) is False
        assert not cards_path.exists()


class TestRecords:
    def test_non_finite_prices_written_as_null(self) -> None:
        card = Card(id=1, market_price=Decimal("Infinity"), lowest_price=Decimal("NaN"))
        record = card_to_record(card)
        assert record["MarketPrice"] is None
        assert record["LowestPrice"] is None

    def test_record_round_trip(self) -> None:
        card = make_card(11, category="Grass", amount=5)
        assert card_from_record(json.loads(json.dumps(card_to_record(card)))) == card

    def test_integral_prices_written_as_integers(self) -> None:
        record = card_to_record(Card(id=1, market_price=Decimal("10.00")))
        assert record["MarketPrice"] == 10
        assert isinstance(record["MarketPrice"], int)

    def test_bool_is_not_an_id(self) -> None:
        with pytest.raises(ValueError):
            card_from_record({"Id": True})


class TestIsWritable:
    def test_missing_directory_under_writable_parent(self, tmp_path: Path) -> None:
        assert CardStore(tmp_path / "new" / "cards.json").is_writable() is True
