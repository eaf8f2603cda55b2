"""
Card collection API endpoints.

Thin HTTP adapter over CardSyncService. Every route returns a fresh snapshot
from the store.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from cardledger.models.card import Card
from cardledger.models.failure import CardFetchFailedError, CardNotFoundError
from cardledger.services.card_sync import CardSyncService, get_card_sync_service
from cardledger.services.collection_view import (
    SortKey,
    collection_value,
    filter_cards,
    product_url,
    sort_cards,
)

router = APIRouter(prefix="/cards", tags=["cards"])

Service = Annotated[CardSyncService, Depends(get_card_sync_service)]


class CardResponse(BaseModel):
    """A tracked card with derived values."""

    id: int
    name: str
    category: str
    amount: int
    market_price: Decimal | None = None
    lowest_price: Decimal | None = None
    latest_sale_price: Decimal | None = None
    latest_sale_date: datetime | None = None
    last_updated: datetime | None = None
    price: Decimal | None = None
    total_value: Decimal | None = None
    product_url: str

    @classmethod
    def from_card(cls, card: Card) -> "CardResponse":
        return cls(
            id=card.id,
            name=card.name,
            category=card.category,
            amount=card.amount,
            market_price=card.market_price,
            lowest_price=card.lowest_price,
            latest_sale_price=card.latest_sale_price,
            latest_sale_date=card.latest_sale_date,
            last_updated=card.last_updated,
            price=card.price,
            total_value=card.total_value,
            product_url=product_url(card.id),
        )


class CardListResponse(BaseModel):
    """A listing of cards with the value of the listed cards."""

    cards: list[CardResponse] = Field(default_factory=list)
    count: int = 0
    total_value: Decimal = Decimal(0)

    @classmethod
    def from_cards(cls, cards: list[Card]) -> "CardListResponse":
        return cls(
            cards=[CardResponse.from_card(card) for card in cards],
            count=len(cards),
            total_value=collection_value(cards),
        )


class AddCardRequest(BaseModel):
    """Request model for adding or re-fetching a card."""

    card_id: int = Field(..., ge=1, description="Marketplace product ID")
    category: str | None = Field(
        default=None,
        description="Category to assign. Omit to keep the current category.",
    )
    amount: int | None = Field(
        default=None,
        description="Quantity owned. Omit to keep the current amount (1 for new cards).",
    )


class CategoryUpdateRequest(BaseModel):
    """Request model for assigning a category. Empty clears it."""

    category: str = ""


class AmountUpdateRequest(BaseModel):
    """Request model for assigning the quantity owned."""

    amount: int


class CategoriesResponse(BaseModel):
    """Distinct categories in use."""

    categories: list[str] = Field(default_factory=list)


class DeleteResponse(BaseModel):
    """Response model for delete operations."""

    card_id: int
    deleted: bool
    message: str = ""


@router.get("", response_model=CardListResponse)
async def list_cards(
    service: Service,
    category: str | None = None,
    search: str | None = None,
    sort: SortKey = "id",
    descending: bool = False,
) -> CardListResponse:
    """
    List tracked cards.

    Optionally filtered by exact category and a case-insensitive search over
    name, ID and category. total_value covers the listed cards only.
    """
    cards = await service.load_all()
    cards = sort_cards(filter_cards(cards, category=category, search=search), sort, descending)
    return CardListResponse.from_cards(cards)


@router.get("/categories", response_model=CategoriesResponse)
async def list_categories(service: Service) -> CategoriesResponse:
    """Distinct non-empty categories in ascending order."""
    return CategoriesResponse(categories=await service.list_categories())


@router.post("/refresh", response_model=CardListResponse)
async def refresh_all_cards(service: Service) -> CardListResponse:
    """
    Refresh pricing for every tracked card.

    Cards that cannot be refreshed keep their previous data.
    """
    return CardListResponse.from_cards(await service.refresh_all())


@router.get("/{card_id}", response_model=CardResponse)
async def get_card(card_id: int, service: Service) -> CardResponse:
    """Get a single tracked card. Returns 404 if it is not tracked."""
    card = await service.get(card_id)
    if card is None:
        raise CardNotFoundError(card_id)
    return CardResponse.from_card(card)


@router.post("", response_model=CardResponse, status_code=status.HTTP_201_CREATED)
async def add_card(request: AddCardRequest, service: Service) -> CardResponse:
    """
    Fetch a card from the marketplace and track it.

    If the card is already tracked its data is refreshed; category and amount
    are kept unless supplied. Returns 404 if the marketplace cannot be reached.
    """
    card = await service.add_or_refresh(
        request.card_id,
        category=request.category,
        amount=request.amount,
    )
    if card is None:
        raise CardFetchFailedError(request.card_id)
    return CardResponse.from_card(card)


@router.post("/{card_id}/refresh", response_model=CardResponse)
async def refresh_card(card_id: int, service: Service) -> CardResponse:
    """Refresh one card's pricing, keeping its category and amount."""
    card = await service.refresh_one(card_id)
    if card is None:
        raise CardFetchFailedError(card_id)
    return CardResponse.from_card(card)


@router.put("/{card_id}/category", response_model=CardResponse)
async def update_category(
    card_id: int,
    request: CategoryUpdateRequest,
    service: Service,
) -> CardResponse:
    """Assign or clear a card's category."""
    card = await service.set_category(card_id, request.category.strip())
    if card is None:
        raise CardNotFoundError(card_id)
    return CardResponse.from_card(card)


@router.put("/{card_id}/amount", response_model=CardResponse)
async def update_amount(
    card_id: int,
    request: AmountUpdateRequest,
    service: Service,
) -> CardResponse:
    """
    Assign the quantity owned.

    Returns 400 for amounts below 1 and 404 if the card is not tracked.
    """
    card = await service.set_amount(card_id, request.amount)
    if card is None:
        raise CardNotFoundError(card_id)
    return CardResponse.from_card(card)


@router.delete("/{card_id}", response_model=DeleteResponse)
async def delete_card(
    card_id: int,
    service: Service,
) -> DeleteResponse:
    """Stop tracking a card. Deleting an untracked card is not an error."""
    deleted = await service.delete(card_id)

    if deleted:
        message = f"Card {card_id} has been removed from your collection."
    else:
        message = "No card found to delete."

    return DeleteResponse(card_id=card_id, deleted=deleted, message=message)
