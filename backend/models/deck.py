"""In-memory card store with identifier allocation."""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

from backend.errors import CardNotFoundError, InvalidInputError
from backend.models.card import Card, Difficulty, ReviewMetadata

logger = logging.getLogger(__name__)


@dataclass
class DeckStats:
    """Aggregate statistics over every card in a store."""

    total_cards: int = 0
    total_reviews: int = 0
    total_correct: int = 0
    by_difficulty: dict[Difficulty, int] = field(
        default_factory=lambda: {d: 0 for d in Difficulty}
    )

    @property
    def success_rate(self) -> float | None:
        """Return the overall success rate, or None before any review."""
        if self.total_reviews == 0:
            return None
        return self.total_correct / self.total_reviews


@dataclass
class CardStore:
    """Owns every card of a deck and the next identifier to hand out.

    Identifiers are never reused: ``next_id`` only grows, and deleting a card
    leaves it untouched.
    """

    cards: dict[int, Card] = field(default_factory=dict)
    next_id: int = 1

    def __post_init__(self) -> None:
        for key, card in self.cards.items():
            if key != card.id:
                raise ValueError(f"Card stored under #{key} has id {card.id}")
        if self.next_id < 1:
            raise ValueError(f"next_id must be positive, got {self.next_id}")
        if self.cards and self.next_id <= max(self.cards):
            raise ValueError(
                f"next_id {self.next_id} does not exceed highest card id {max(self.cards)}"
            )

    def __len__(self) -> int:
        return len(self.cards)

    def __contains__(self, card_id: object) -> bool:
        return card_id in self.cards

    def __iter__(self) -> Iterator[Card]:
        return iter(self.list_cards())

    def add(self, question: str, answer: str) -> int:
        """Add a new card with default metadata and return its id.

        Raises:
            InvalidInputError: If the question or answer is empty.
        """
        question = question.strip()
        answer = answer.strip()
        if not question:
            raise InvalidInputError("Question cannot be empty")
        if not answer:
            raise InvalidInputError("Answer cannot be empty")

        card_id = self.next_id
        self.cards[card_id] = Card(id=card_id, question=question, answer=answer)
        self.next_id += 1
        logger.info("Added card #%d", card_id)
        return card_id

    def get(self, card_id: int) -> Card:
        """Return the card with the given id.

        Raises:
            CardNotFoundError: If no such card exists.
        """
        try:
            return self.cards[card_id]
        except KeyError:
            raise CardNotFoundError(card_id) from None

    def delete(self, card_id: int) -> Card:
        """Remove a card and return it. Its id is never handed out again."""
        card = self.get(card_id)
        del self.cards[card_id]
        logger.info("Deleted card #%d", card_id)
        return card

    def list_cards(self) -> list[Card]:
        """Return all cards ordered by id."""
        return [self.cards[card_id] for card_id in sorted(self.cards)]

    def reset_statistics(self) -> int:
        """Reset every card's review metadata and return how many were reset."""
        for card in self.cards.values():
            card.metadata = ReviewMetadata()
        logger.info("Reset statistics for %d cards", len(self.cards))
        return len(self.cards)

    def stats(self) -> DeckStats:
        """Summarize review totals and the difficulty spread of the deck."""
        stats = DeckStats(total_cards=len(self.cards))
        for card in self.cards.values():
            stats.total_reviews += card.metadata.times_reviewed
            stats.total_correct += card.metadata.correct_count
            stats.by_difficulty[card.metadata.difficulty] += 1
        return stats
