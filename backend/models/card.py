"""Flashcard and review metadata models."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class Difficulty(str, Enum):
    """How hard a card is, derived from its success rate."""

    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


@dataclass
class ReviewMetadata:
    """Review statistics owned by a single card.

    ``difficulty`` is only ever assigned from the classifier after a grade,
    or reset together with the counters.
    """

    difficulty: Difficulty = Difficulty.MEDIUM
    times_reviewed: int = 0
    correct_count: int = 0
    last_reviewed: date | None = None

    @property
    def success_rate(self) -> float | None:
        """Return correct/reviewed, or None if the card was never reviewed."""
        if self.times_reviewed == 0:
            return None
        return self.correct_count / self.times_reviewed


@dataclass
class Card:
    """A question/answer pair with its review statistics."""

    id: int
    question: str
    answer: str
    metadata: ReviewMetadata = field(default_factory=ReviewMetadata)
