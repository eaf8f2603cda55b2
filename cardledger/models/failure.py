"""
Failure classification for CardLedger.

Known, explainable failures are raised as KnownError subclasses and rendered
by the HTTP layer as an ApiResponse envelope. Remote and parse failures never
reach this level: they are absorbed where they happen and degrade to partial
data. Only caller input errors, lookups of untracked cards, unreachable
marketplace fetches and storage failures surface.
"""

from enum import Enum

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    EXTERNAL_API_ERROR = "external_api_error"
    STORAGE_ERROR = "storage_error"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    KNOWN_FAILURE = "known_failure"


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class ApiResponse(BaseModel):
    """Response envelope for a known failure."""

    outcome: OutcomeType
    failure: FailureDetail

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse":
        """Create a known failure response."""
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
            ),
        )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse:
        """Convert to an ApiResponse."""
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class InvalidInputError(KnownError):
    """Caller supplied an identifier or quantity that cannot be used."""

    def __init__(self, field: str, value: object, message: str) -> None:
        self.field = field
        self.value = value
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=message,
            detail=f"{field}={value!r}",
            suggestion="Correct the value and try again.",
            status_code=400,
        )


class CardNotFoundError(KnownError):
    """The card is not in the collection."""

    def __init__(self, card_id: int) -> None:
        self.card_id = card_id
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"Card {card_id} is not in the collection.",
            suggestion="Add the card before editing or refreshing it.",
            status_code=404,
        )


class CardFetchFailedError(KnownError):
    """The marketplace could not be reached for the card."""

    def __init__(self, card_id: int) -> None:
        self.card_id = card_id
        super().__init__(
            kind=FailureKind.EXTERNAL_API_ERROR,
            message=f"Could not fetch card with ID {card_id}. Please verify the ID is correct.",
            suggestion="Check the ID and your connection, then try again.",
            status_code=404,
        )


class StoreReadError(KnownError):
    """The card file exists but could not be read or parsed."""

    def __init__(self, path: str, detail: str | None = None) -> None:
        self.path = path
        super().__init__(
            kind=FailureKind.STORAGE_ERROR,
            message=f"Could not read card collection from {path}.",
            detail=detail,
            suggestion="Check that the file is valid JSON.",
            status_code=500,
        )


class StoreWriteError(KnownError):
    """
    The card file could not be written.

    Always propagated: a lost write must never be reported as success.
    """

    def __init__(self, path: str, detail: str | None = None) -> None:
        self.path = path
        super().__init__(
            kind=FailureKind.STORAGE_ERROR,
            message=f"Could not save card collection to {path}.",
            detail=detail,
            suggestion="Check disk space and file permissions.",
            status_code=500,
        )
