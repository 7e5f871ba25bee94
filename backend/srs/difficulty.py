"""Difficulty classification from review statistics.

A card's difficulty is a bucket over its historical success rate:

- never reviewed: Medium (no data yet)
- success rate >= 0.8: Easy
- success rate >= 0.5: Medium
- otherwise: Hard

Boundaries resolve to the easier bucket. The thresholds and the comparison
can be changed through ``DifficultyThresholds``.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from backend.errors import InvalidInputError
from backend.models.card import Difficulty

if TYPE_CHECKING:
    from backend.config import Settings

DEFAULT_EASY_THRESHOLD = 0.8
DEFAULT_MEDIUM_THRESHOLD = 0.5


@dataclass(frozen=True)
class DifficultyThresholds:
    """Success-rate boundaries for the Easy and Medium buckets."""

    easy: float = DEFAULT_EASY_THRESHOLD
    medium: float = DEFAULT_MEDIUM_THRESHOLD
    inclusive: bool = True  # rate == threshold lands in the easier bucket

    def __post_init__(self) -> None:
        if not 0.0 <= self.medium <= self.easy <= 1.0:
            raise ValueError(
                f"Thresholds must satisfy 0 <= medium <= easy <= 1, "
                f"got medium={self.medium}, easy={self.easy}"
            )

    @classmethod
    def from_settings(cls, settings: "Settings") -> "DifficultyThresholds":
        """Build thresholds from application settings."""
        return cls(
            easy=settings.easy_threshold,
            medium=settings.medium_threshold,
            inclusive=settings.inclusive_thresholds,
        )

    def reaches(self, rate: float, threshold: float) -> bool:
        return rate >= threshold if self.inclusive else rate > threshold


DEFAULT_THRESHOLDS = DifficultyThresholds()


def classify(
    times_reviewed: int,
    correct_count: int,
    thresholds: DifficultyThresholds = DEFAULT_THRESHOLDS,
) -> Difficulty:
    """Map review counts to a difficulty label.

    Args:
        times_reviewed: Total number of reviews.
        correct_count: Number of reviews graded as correct.
        thresholds: Bucket boundaries (defaults to 0.8 / 0.5, inclusive).

    Returns:
        The difficulty bucket for the success rate.

    Raises:
        InvalidInputError: If the counts are negative or inconsistent.
    """
    if times_reviewed < 0 or correct_count < 0:
        raise InvalidInputError("Review counts cannot be negative")
    if correct_count > times_reviewed:
        raise InvalidInputError(
            f"correct_count ({correct_count}) exceeds times_reviewed ({times_reviewed})"
        )

    if times_reviewed == 0:
        return Difficulty.MEDIUM

    rate = correct_count / times_reviewed
    if thresholds.reaches(rate, thresholds.easy):
        return Difficulty.EASY
    if thresholds.reaches(rate, thresholds.medium):
        return Difficulty.MEDIUM
    return Difficulty.HARD
