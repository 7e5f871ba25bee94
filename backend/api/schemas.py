"""Pydantic schemas for API request/response models."""

from datetime import date

from pydantic import BaseModel, Field

from backend.models.card import Card, Difficulty
from backend.models.deck import DeckStats
from backend.srs.session import GradeRecord, Outcome, SessionSummary

# --- Cards ---


class CardCreateRequest(BaseModel):
    """Request to add a new flashcard."""

    question: str = Field(min_length=1)
    answer: str = Field(min_length=1)


class CardResponse(BaseModel):
    """A flashcard with its review statistics."""

    id: int
    question: str
    answer: str
    difficulty: Difficulty
    times_reviewed: int
    correct_count: int
    last_reviewed: date | None
    success_rate: float | None

    @classmethod
    def from_card(cls, card: Card) -> "CardResponse":
        meta = card.metadata
        return cls(
            id=card.id,
            question=card.question,
            answer=card.answer,
            difficulty=meta.difficulty,
            times_reviewed=meta.times_reviewed,
            correct_count=meta.correct_count,
            last_reviewed=meta.last_reviewed,
            success_rate=meta.success_rate,
        )


class ResetResponse(BaseModel):
    cards_reset: int


# --- Session ---


class SessionStartResponse(BaseModel):
    """Response when starting a new quiz session."""

    session_id: str
    card_ids: list[int]
    total_cards: int


class PresentResponse(BaseModel):
    """The card currently presented, with its answer for the client to reveal."""

    card_id: int
    question: str
    answer: str
    remaining: int


class GradeRequest(BaseModel):
    """Request to grade a presented card."""

    card_id: int
    outcome: Outcome


class GradeResponse(BaseModel):
    """Response after grading a card."""

    card_id: int
    outcome: Outcome
    difficulty: Difficulty
    times_reviewed: int
    correct_count: int
    remaining: int
    session_complete: bool


class SessionSummaryResponse(BaseModel):
    """Results of a finished quiz session."""

    total_presented: int
    correct_count: int
    accuracy: float
    by_difficulty: dict[Difficulty, int]
    by_outcome: dict[Outcome, int]

    @classmethod
    def from_summary(cls, summary: SessionSummary) -> "SessionSummaryResponse":
        return cls(
            total_presented=summary.total_presented,
            correct_count=summary.correct_count,
            accuracy=round(summary.accuracy, 3),
            by_difficulty=summary.by_difficulty,
            by_outcome=summary.by_outcome,
        )


# --- Stats ---


class DeckStatsResponse(BaseModel):
    """Overall statistics for the deck."""

    total_cards: int
    total_reviews: int
    total_correct: int
    success_rate: float | None
    by_difficulty: dict[Difficulty, int]

    @classmethod
    def from_stats(cls, stats: DeckStats) -> "DeckStatsResponse":
        rate = stats.success_rate
        return cls(
            total_cards=stats.total_cards,
            total_reviews=stats.total_reviews,
            total_correct=stats.total_correct,
            success_rate=round(rate, 3) if rate is not None else None,
            by_difficulty=stats.by_difficulty,
        )


def grade_response(
    record: GradeRecord, card: Card, remaining: int, complete: bool
) -> GradeResponse:
    return GradeResponse(
        card_id=record.card_id,
        outcome=record.outcome,
        difficulty=record.difficulty,
        times_reviewed=card.metadata.times_reviewed,
        correct_count=card.metadata.correct_count,
        remaining=remaining,
        session_complete=complete,
    )
