"""API routes for quiz sessions."""

import logging
import random
import uuid

from fastapi import APIRouter, Depends, HTTPException

from backend.api.schemas import (
    GradeRequest,
    GradeResponse,
    PresentResponse,
    SessionStartResponse,
    SessionSummaryResponse,
    grade_response,
)
from backend.config import settings
from backend.database import DeckHandle, get_deck
from backend.errors import InvalidStateError, NoCardsAvailableError
from backend.srs.difficulty import DifficultyThresholds
from backend.srs.session import QuizSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/session", tags=["session"])

# In-memory session store, one process serving one deck
_active_sessions: dict[str, QuizSession] = {}


def _get_session(session_id: str) -> QuizSession:
    quiz = _active_sessions.get(session_id)
    if quiz is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return quiz


@router.post("/start", response_model=SessionStartResponse)
async def session_start(
    max_count: int | None = None,
    seed: int | None = None,
    deck: DeckHandle = Depends(get_deck),
) -> SessionStartResponse:
    """Start a new quiz session over the deck."""
    quiz = QuizSession(
        deck.store,
        thresholds=DifficultyThresholds.from_settings(settings),
        rng=random.Random(seed),
    )
    if max_count is None:
        max_count = settings.default_max_cards

    try:
        card_ids = quiz.start(max_count)
    except NoCardsAvailableError:
        raise HTTPException(status_code=404, detail="No cards available for review") from None

    session_id = str(uuid.uuid4())
    _active_sessions[session_id] = quiz
    logger.info("Session %s started with %d cards", session_id, len(card_ids))

    return SessionStartResponse(
        session_id=session_id,
        card_ids=card_ids,
        total_cards=len(card_ids),
    )


@router.get("/next/{session_id}", response_model=PresentResponse)
async def session_next(session_id: str) -> PresentResponse:
    """Present the next card in the session."""
    quiz = _get_session(session_id)
    if quiz.is_finished:
        raise HTTPException(status_code=410, detail="Session is complete")

    try:
        question, answer = quiz.present()
    except InvalidStateError:
        # The rest of the queue was deleted from the deck
        if quiz.is_finished:
            raise HTTPException(status_code=410, detail="Session is complete") from None
        raise
    return PresentResponse(
        card_id=quiz.current_card_id,
        question=question,
        answer=answer,
        remaining=quiz.remaining,
    )


@router.post("/grade/{session_id}", response_model=GradeResponse)
async def session_grade(
    session_id: str,
    request: GradeRequest,
    deck: DeckHandle = Depends(get_deck),
) -> GradeResponse:
    """Grade a presented card and save the deck."""
    quiz = _get_session(session_id)
    if quiz.is_finished:
        raise HTTPException(status_code=410, detail="Session is complete")

    record = quiz.grade(request.card_id, request.outcome)
    deck.commit()

    return grade_response(
        record,
        quiz.store.get(request.card_id),
        remaining=quiz.remaining,
        complete=quiz.is_finished,
    )


@router.post("/quit/{session_id}", response_model=SessionSummaryResponse)
async def session_quit(session_id: str) -> SessionSummaryResponse:
    """Stop the session early and return its summary."""
    quiz = _get_session(session_id)
    if not quiz.is_finished:
        quiz.quit()
    return SessionSummaryResponse.from_summary(quiz.summary())


@router.get("/summary/{session_id}", response_model=SessionSummaryResponse)
async def session_summary(session_id: str) -> SessionSummaryResponse:
    """Get the summary of a finished session."""
    return SessionSummaryResponse.from_summary(_get_session(session_id).summary())


@router.post("/end/{session_id}")
async def session_end(session_id: str) -> dict:
    """End a session and clean up."""
    quiz = _active_sessions.pop(session_id, None)
    if quiz is None:
        raise HTTPException(status_code=404, detail="Session not found")

    if not quiz.is_finished:
        quiz.quit()
    summary = quiz.summary()
    return {
        "status": "ended",
        "total_presented": summary.total_presented,
        "correct": summary.correct_count,
    }
