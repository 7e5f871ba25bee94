"""API routes for managing flashcards."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from backend.api.schemas import CardCreateRequest, CardResponse, ResetResponse
from backend.database import DeckHandle, get_deck

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cards", tags=["cards"])


@router.post("", response_model=CardResponse, status_code=201)
async def add_card(
    request: CardCreateRequest,
    deck: DeckHandle = Depends(get_deck),
) -> CardResponse:
    """Add a new flashcard."""
    card_id = deck.store.add(request.question, request.answer)
    deck.commit()
    return CardResponse.from_card(deck.store.get(card_id))


@router.get("", response_model=list[CardResponse])
async def list_cards(deck: DeckHandle = Depends(get_deck)) -> list[CardResponse]:
    """List all flashcards ordered by id."""
    return [CardResponse.from_card(card) for card in deck.store.list_cards()]


@router.get("/{card_id}", response_model=CardResponse)
async def view_card(card_id: int, deck: DeckHandle = Depends(get_deck)) -> CardResponse:
    """View a single flashcard."""
    return CardResponse.from_card(deck.store.get(card_id))


@router.delete("/{card_id}", response_model=CardResponse)
async def delete_card(card_id: int, deck: DeckHandle = Depends(get_deck)) -> CardResponse:
    """Delete a flashcard and return what was removed."""
    card = deck.store.delete(card_id)
    deck.commit()
    return CardResponse.from_card(card)


@router.post("/reset", response_model=ResetResponse)
async def reset_statistics(
    confirm: bool = False,
    deck: DeckHandle = Depends(get_deck),
) -> ResetResponse:
    """Reset every card's statistics. Requires ``confirm=true``."""
    if not confirm:
        raise HTTPException(status_code=400, detail="Pass confirm=true to reset all statistics")

    count = deck.store.reset_statistics()
    deck.commit()
    return ResetResponse(cards_reset=count)
