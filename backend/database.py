"""Deck file handle and FastAPI dependency."""

import logging
from dataclasses import dataclass
from pathlib import Path

from fastapi import Request

from backend.config import settings
from backend.models.deck import CardStore
from backend.storage import open_deck, save

logger = logging.getLogger(__name__)


@dataclass
class DeckHandle:
    """A card store loaded once and written back to its file after mutations."""

    path: Path
    store: CardStore

    @classmethod
    def open(cls, path: Path) -> "DeckHandle":
        return cls(path=path, store=open_deck(path))

    def commit(self) -> None:
        save(self.store, self.path)


def get_deck(request: Request) -> DeckHandle:
    """Return the app's deck, loading it from ``settings.data_file`` on first use."""
    handle: DeckHandle | None = getattr(request.app.state, "deck", None)
    if handle is None:
        handle = DeckHandle.open(settings.data_file)
        request.app.state.deck = handle
        logger.info("Opened deck %s", handle.path)
    return handle
