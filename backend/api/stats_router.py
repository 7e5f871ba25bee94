"""API routes for deck statistics."""

from fastapi import APIRouter, Depends

from backend.api.schemas import DeckStatsResponse
from backend.database import DeckHandle, get_deck

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("", response_model=DeckStatsResponse)
async def get_deck_stats(deck: DeckHandle = Depends(get_deck)) -> DeckStatsResponse:
    """Get overall review statistics for the deck."""
    return DeckStatsResponse.from_stats(deck.store.stats())
