from cardledger.parsers.card_input import parse_amount, parse_card_id, validate_amount
from cardledger.parsers.timestamps import parse_timestamp

__all__ = [
    "parse_amount",
    "parse_card_id",
    "parse_timestamp",
    "validate_amount",
]
