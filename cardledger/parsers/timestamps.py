"""
Timestamp parsing for marketplace and stored dates.

The marketplace returns ISO-8601-ish strings ("2024-05-01T18:03:11.123Z",
"2024-05-01T18:03:11.1234567+00:00", "2024-05-01 18:03:11"). Stored files
written by older versions use seven fractional digits. Both are normalized
before handing them to datetime.fromisoformat.
"""

import re
from datetime import datetime, timezone

# Fractional seconds longer than microseconds
_LONG_FRACTION = re.compile(r"(\.\d{6})\d+")
# Fractional seconds shorter than microseconds
_SHORT_FRACTION = re.compile(r"\.(\d{1,5})(?=\D|$)")


def _normalize(value: str) -> str:
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _LONG_FRACTION.sub(r"\1", text)
    return _SHORT_FRACTION.sub(lambda m: "." + m.group(1).ljust(6, "0"), text)


def parse_timestamp(value: object, assume_utc: bool = True) -> datetime | None:
    """
    Parse an ISO-ish timestamp into a timezone-aware local datetime.

    Args:
        value: Raw value from a JSON payload
        assume_utc: Treat values without an offset as UTC (True) or as
            local time (False)

    Returns:
        Aware datetime in the local timezone, or None when the value is not
        a parseable string.
    """
    if not isinstance(value, str) or not value.strip():
        return None

    try:
        parsed = datetime.fromisoformat(_normalize(value))
        if parsed.tzinfo is None:
            if not assume_utc:
                return parsed.astimezone()
            parsed = parsed.replace(tzinfo=timezone.utc)
        # Converting values near datetime.min or datetime.max overflows
        return parsed.astimezone()
    except (ValueError, OverflowError, OSError):
        return None
