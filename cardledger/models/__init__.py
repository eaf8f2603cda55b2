from cardledger.models.card import Card, merge, placeholder_name
from cardledger.models.failure import (
    ApiResponse,
    CardFetchFailedError,
    CardNotFoundError,
    FailureDetail,
    FailureKind,
    InvalidInputError,
    KnownError,
    OutcomeType,
    StoreReadError,
    StoreWriteError,
)

__all__ = [
    "ApiResponse",
    "Card",
    "CardFetchFailedError",
    "CardNotFoundError",
    "FailureDetail",
    "FailureKind",
    "InvalidInputError",
    "KnownError",
    "OutcomeType",
    "StoreReadError",
    "StoreWriteError",
    "merge",
    "placeholder_name",
]
