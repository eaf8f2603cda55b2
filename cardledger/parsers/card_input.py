"""
Validation of identifiers and quantities typed by a user.

Input is rejected here, before any remote or store interaction, with an
InvalidInputError the caller can show and recover from.
"""

from cardledger.models.failure import InvalidInputError


def parse_card_id(text: str) -> int:
    """
    Parse a marketplace product ID.

    Accepts surrounding whitespace. Rejects anything that is not a
    positive integer.

    Raises:
        InvalidInputError: If the text is not a valid card ID
    """
    value = text.strip()
    if not value.isdecimal() or int(value) < 1:
        raise InvalidInputError(
            "card_id",
            text,
            "Please enter a valid card ID (numbers only).",
        )
    return int(value)


def parse_amount(text: str) -> int:
    """
    Parse a quantity owned.

    Raises:
        InvalidInputError: If the text is not an integer of 1 or more
    """
    value = text.strip()
    try:
        amount = int(value)
    except ValueError:
        amount = 0
    return validate_amount(amount, raw=text)


def validate_amount(amount: int, raw: object = None) -> int:
    """Return `amount` unchanged if it is at least 1."""
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 1:
        raise InvalidInputError(
            "amount",
            amount if raw is None else raw,
            "Please enter a valid quantity (1 or more).",
        )
    return amount
