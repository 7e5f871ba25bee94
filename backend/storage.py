"""JSON persistence for card stores.

The on-disk layout is::

    {
      "cards": {"<id>": {"id": 1, "question": "...", "answer": "...",
                         "metadata": {"difficulty": "Medium",
                                      "times_reviewed": 0,
                                      "correct_count": 0,
                                      "last_reviewed": null}}},
      "next_id": 2
    }

Saves go through a temporary file in the same directory that is then
renamed over the destination, so a failed write never leaves a truncated
deck behind.
"""

import contextlib
import json
import logging
import os
import re
import stat
import tempfile
from datetime import date, datetime
from pathlib import Path
from typing import Any

from pydantic import (
    BaseModel,
    Field,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
    model_validator,
)

from backend.errors import CorruptDeckError, DeckNotFoundError, StorageIOError
from backend.models.card import Card, Difficulty, ReviewMetadata
from backend.models.deck import CardStore

logger = logging.getLogger(__name__)

ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")
DEFAULT_FILE_MODE = 0o644


class MetadataRecord(BaseModel):
    difficulty: Difficulty
    times_reviewed: StrictInt = Field(ge=0)
    correct_count: StrictInt = Field(ge=0)
    last_reviewed: date | None

    @field_validator("last_reviewed", mode="before")
    @classmethod
    def check_date_string(cls, value: object) -> object:
        # Only null or a plain YYYY-MM-DD date; no timestamps or datetimes.
        if value is None:
            return None
        if isinstance(value, date) and not isinstance(value, datetime):
            return value
        if not isinstance(value, str) or not ISO_DATE.fullmatch(value):
            raise ValueError("last_reviewed must be a YYYY-MM-DD string or null")
        try:
            return date.fromisoformat(value)
        except ValueError:
            raise ValueError(f"invalid date {value!r}") from None

    @model_validator(mode="after")
    def check_counts(self) -> "MetadataRecord":
        if self.correct_count > self.times_reviewed:
            raise ValueError("correct_count exceeds times_reviewed")
        return self


class CardRecord(BaseModel):
    id: StrictInt = Field(ge=1)
    question: StrictStr = Field(min_length=1)
    answer: StrictStr = Field(min_length=1)
    metadata: MetadataRecord

    @field_validator("question", "answer")
    @classmethod
    def check_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must contain non-whitespace text")
        return value


class DeckRecord(BaseModel):
    """Top-level document of a deck file."""

    cards: dict[str, CardRecord]
    next_id: StrictInt = Field(ge=1)

    @model_validator(mode="after")
    def check_ids(self) -> "DeckRecord":
        seen: set[int] = set()
        for key, card in self.cards.items():
            if key != str(card.id):
                raise ValueError(f"card stored under key {key!r} has id {card.id}")
            if card.id in seen:
                raise ValueError(f"duplicate card id {card.id}")
            seen.add(card.id)
        if seen and self.next_id <= max(seen):
            raise ValueError(f"next_id {self.next_id} does not exceed highest card id {max(seen)}")
        return self

    @classmethod
    def from_store(cls, store: CardStore) -> "DeckRecord":
        return cls(
            cards={
                str(card.id): CardRecord(
                    id=card.id,
                    question=card.question,
                    answer=card.answer,
                    metadata=MetadataRecord(
                        difficulty=card.metadata.difficulty,
                        times_reviewed=card.metadata.times_reviewed,
                        correct_count=card.metadata.correct_count,
                        last_reviewed=card.metadata.last_reviewed,
                    ),
                )
                for card in store.list_cards()
            },
            next_id=store.next_id,
        )

    def to_store(self) -> CardStore:
        cards = {
            record.id: Card(
                id=record.id,
                question=record.question,
                answer=record.answer,
                metadata=ReviewMetadata(
                    difficulty=record.metadata.difficulty,
                    times_reviewed=record.metadata.times_reviewed,
                    correct_count=record.metadata.correct_count,
                    last_reviewed=record.metadata.last_reviewed,
                ),
            )
            for record in self.cards.values()
        }
        return CardStore(cards=cards, next_id=self.next_id)


def _reject_duplicate_keys(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in pairs:
        if key in result:
            raise CorruptDeckError(f"Duplicate key {key!r} in deck file")
        result[key] = value
    return result


def loads(text: str) -> CardStore:
    """Parse a deck document.

    Raises:
        CorruptDeckError: If the text is not a valid deck document.
    """
    try:
        data = json.loads(text, object_pairs_hook=_reject_duplicate_keys)
    except json.JSONDecodeError as exc:
        raise CorruptDeckError(f"Deck file is not valid JSON: {exc}") from exc

    try:
        record = DeckRecord.model_validate(data)
    except ValidationError as exc:
        raise CorruptDeckError(f"Deck file does not match the schema: {exc}") from exc
    return record.to_store()


def dumps(store: CardStore) -> str:
    """Serialize a store to a deck document with cards in id order."""
    data = DeckRecord.from_store(store).model_dump(mode="json")
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def load(path: str | os.PathLike[str]) -> CardStore:
    """Load a card store from ``path``.

    Raises:
        DeckNotFoundError: If the file does not exist.
        CorruptDeckError: If the file exists but is not a valid deck.
        StorageIOError: If the file cannot be read.
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        raise DeckNotFoundError(path) from None
    except OSError as exc:
        raise StorageIOError(f"Could not read {path}: {exc}") from exc

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise CorruptDeckError(f"Deck file {path} is not UTF-8: {exc}") from exc

    store = loads(text)
    logger.info("Loaded %d cards from %s", len(store), path)
    return store


def open_deck(path: str | os.PathLike[str]) -> CardStore:
    """Load a card store, starting with an empty one if the file is missing.

    Every other load failure propagates.
    """
    try:
        return load(path)
    except DeckNotFoundError:
        logger.warning("No deck at %s, starting with an empty deck", path)
        return CardStore()


def _file_mode(path: Path) -> int:
    """Return the permission bits to give a freshly written deck file."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        return DEFAULT_FILE_MODE


def save(store: CardStore, path: str | os.PathLike[str]) -> None:
    """Atomically write ``store`` to ``path``.

    Raises:
        StorageIOError: If the deck could not be written. The previous file,
            if any, is left as it was.
    """
    path = Path(path)
    payload = dumps(store).encode("utf-8")
    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        with os.fdopen(fd, "wb") as fh:
            fh.write(payload)
            fh.flush()
            os.fsync(fh.fileno())
        os.chmod(tmp_name, _file_mode(path))
        os.replace(tmp_name, path)
    except OSError as exc:
        if tmp_name is not None:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_name)
        raise StorageIOError(f"Could not write {path}: {exc}") from exc

    logger.info("Saved %d cards to %s", len(store), path)
