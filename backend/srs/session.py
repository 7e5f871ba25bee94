"""Quiz session engine.

Runs one study session over a card store: picks a random order of cards,
presents them one at a time, records the learner's self-grades, and
reports a summary once the session is finished.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from backend.config import today
from backend.errors import InvalidInputError, InvalidStateError, NoCardsAvailableError
from backend.models.card import Difficulty
from backend.models.deck import CardStore
from backend.srs.difficulty import DEFAULT_THRESHOLDS, DifficultyThresholds, classify
from backend.srs.queue import build_queue

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    """The learner's self-reported recall for one presentation."""

    CORRECT_EASY = "correct_easy"
    CORRECT_MEDIUM = "correct_medium"
    WRONG = "wrong"

    @property
    def is_correct(self) -> bool:
        return self is not Outcome.WRONG

    @classmethod
    def parse(cls, value: Outcome | str) -> Outcome:
        """Accept an Outcome, its value, or a one-letter CLI key (c/g/w)."""
        if isinstance(value, Outcome):
            return value
        key = str(value).strip().lower()
        if key in OUTCOME_KEYS:
            return OUTCOME_KEYS[key]
        try:
            return cls(key)
        except ValueError:
            raise InvalidInputError(f"Unknown grade outcome: {value!r}") from None


OUTCOME_KEYS = {
    "c": Outcome.CORRECT_EASY,
    "g": Outcome.CORRECT_MEDIUM,
    "w": Outcome.WRONG,
}


class SessionState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PRESENTING = "presenting"
    GRADED = "graded"
    FINISHED = "finished"


ACTIVE_STATES = frozenset({SessionState.RUNNING, SessionState.PRESENTING, SessionState.GRADED})


@dataclass
class GradeRecord:
    """One grade applied during a session."""

    card_id: int
    outcome: Outcome
    difficulty: Difficulty  # the card's difficulty right after this grade


@dataclass
class SessionSummary:
    """Results of a finished session."""

    total_presented: int = 0
    correct_count: int = 0
    by_difficulty: dict[Difficulty, int] = field(
        default_factory=lambda: {d: 0 for d in Difficulty}
    )
    by_outcome: dict[Outcome, int] = field(default_factory=lambda: {o: 0 for o in Outcome})

    @property
    def accuracy(self) -> float:
        """Return the fraction of correct grades (0.0 for an empty session)."""
        if self.total_presented == 0:
            return 0.0
        return self.correct_count / self.total_presented


class QuizSession:
    """State machine for one quiz over a card store.

    IDLE -> RUNNING -> PRESENTING <-> GRADED -> FINISHED. The session never
    reads input itself; callers hand it grades as values.
    """

    def __init__(
        self,
        store: CardStore,
        thresholds: DifficultyThresholds = DEFAULT_THRESHOLDS,
        rng: random.Random | None = None,
        clock: Callable[[], date] = today,
    ) -> None:
        self.store = store
        self.thresholds = thresholds
        self.rng = rng or random.Random()
        self.clock = clock
        self.state = SessionState.IDLE
        self.current_card_id: int | None = None
        self.grades: list[GradeRecord] = []
        self._queue: list[int] = []
        self._cursor = 0

    @property
    def order(self) -> list[int]:
        """Return the card ids selected for this session."""
        return list(self._queue)

    @property
    def remaining(self) -> int:
        """Return the number of queued cards not yet presented."""
        if self.state is SessionState.FINISHED:
            return 0
        return len(self._queue) - self._cursor

    @property
    def next_card_id(self) -> int | None:
        if self._cursor < len(self._queue):
            return self._queue[self._cursor]
        return None

    @property
    def is_finished(self) -> bool:
        return self.state is SessionState.FINISHED

    def start(self, max_count: int | None = None) -> list[int]:
        """Select a random order of cards and start the session.

        Args:
            max_count: Maximum number of cards to quiz (None means all).

        Returns:
            The selected card ids in presentation order.

        Raises:
            NoCardsAvailableError: If the store is empty. The session is
                finished and never runs.
        """
        if self.state is not SessionState.IDLE:
            raise InvalidStateError(f"Session already started (state: {self.state.value})")

        if len(self.store) == 0:
            self.state = SessionState.FINISHED
            raise NoCardsAvailableError()

        self._queue = build_queue(self.store.cards, max_count=max_count, rng=self.rng)
        if not self._queue:
            self.state = SessionState.FINISHED
            logger.info("Session started with no cards selected")
            return []

        self.state = SessionState.RUNNING
        logger.info("Started quiz session: %d of %d cards", len(self._queue), len(self.store))
        return self.order

    def present(self, card_id: int | None = None) -> tuple[str, str]:
        """Present a card and return its question and answer.

        Without ``card_id`` the next queued card is presented. Revealing the
        answer is left to the caller.
        """
        self._require_active("present")
        if card_id is None:
            self._skip_deleted()
            card_id = self.next_card_id
            if card_id is None:
                self._finish()
                raise InvalidStateError("No cards left to present")

        card = self.store.get(card_id)
        if card_id == self.next_card_id:
            self._cursor += 1

        self.current_card_id = card_id
        self.state = SessionState.PRESENTING
        return card.question, card.answer

    def grade(self, card_id: int, outcome: Outcome | str) -> GradeRecord:
        """Record a grade for a card and recompute its difficulty.

        Grading the same card more than once counts every grade.
        """
        if self.state not in (SessionState.PRESENTING, SessionState.GRADED):
            raise InvalidStateError(f"Cannot grade in state {self.state.value}")
        outcome = Outcome.parse(outcome)
        card = self.store.get(card_id)

        meta = card.metadata
        meta.times_reviewed += 1
        if outcome.is_correct:
            meta.correct_count += 1
        meta.last_reviewed = self.clock()
        meta.difficulty = classify(meta.times_reviewed, meta.correct_count, self.thresholds)

        record = GradeRecord(card_id=card_id, outcome=outcome, difficulty=meta.difficulty)
        self.grades.append(record)
        logger.debug(
            "Graded card #%d as %s -> %s (%d/%d)",
            card_id,
            outcome.value,
            meta.difficulty.value,
            meta.correct_count,
            meta.times_reviewed,
        )

        self.state = SessionState.GRADED
        self._skip_deleted()
        if self.next_card_id is None:
            self._finish()
        return record

    def quit(self) -> None:
        """End the session early. Unshown cards are left untouched."""
        self._require_active("quit")
        logger.info("Quiz ended early with %d cards unshown", self.remaining)
        self._finish()

    def summary(self) -> SessionSummary:
        """Summarize the grades of a finished session."""
        if self.state is not SessionState.FINISHED:
            raise InvalidStateError("Session summary is only available once finished")

        summary = SessionSummary(total_presented=len(self.grades))
        for record in self.grades:
            if record.outcome.is_correct:
                summary.correct_count += 1
            summary.by_difficulty[record.difficulty] += 1
            summary.by_outcome[record.outcome] += 1
        return summary

    def _require_active(self, action: str) -> None:
        if self.state not in ACTIVE_STATES:
            raise InvalidStateError(f"Cannot {action} in state {self.state.value}")

    def _skip_deleted(self) -> None:
        # Queued cards may be deleted from the store while the session runs.
        while self._cursor < len(self._queue) and self._queue[self._cursor] not in self.store:
            logger.warning("Skipping card #%d: deleted during the session", self._queue[self._cursor])
            self._cursor += 1

    def _finish(self) -> None:
        self.state = SessionState.FINISHED
        self.current_card_id = None
        logger.info("Quiz session finished: %d grades recorded", len(self.grades))


def start_session(
    store: CardStore,
    max_count: int | None = None,
    thresholds: DifficultyThresholds = DEFAULT_THRESHOLDS,
    seed: int | None = None,
) -> QuizSession:
    """Create a session over ``store`` and start it.

    Args:
        store: The card store to quiz from.
        max_count: Maximum number of cards (None means all).
        thresholds: Difficulty thresholds used when grading.
        seed: Optional seed for a reproducible card order.

    Returns:
        A started QuizSession.
    """
    session = QuizSession(store, thresholds=thresholds, rng=random.Random(seed))
    session.start(max_count)
    return session
