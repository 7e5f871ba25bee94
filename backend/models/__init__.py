"""Flashcard data model: cards, review metadata and the card store."""

from backend.models.card import Card, Difficulty, ReviewMetadata
from backend.models.deck import CardStore, DeckStats

__all__ = ["Card", "CardStore", "DeckStats", "Difficulty", "ReviewMetadata"]
