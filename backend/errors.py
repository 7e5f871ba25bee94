"""Error taxonomy shared by the store, the quiz engine and the codec.

Core operations raise these instead of printing or exiting; the CLI and the
HTTP API decide how to present them.
"""

from enum import Enum


class ErrorKind(Enum):
    """Broad category of a flashcard failure."""

    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    CORRUPT = "corrupt"
    IO_FAILURE = "io_failure"
    INVALID_STATE = "invalid_state"


class FlashcardError(Exception):
    """Base class for all flashcard errors."""

    kind: ErrorKind


class InvalidInputError(FlashcardError, ValueError):
    kind = ErrorKind.INVALID_INPUT


class NotFoundError(FlashcardError, LookupError):
    kind = ErrorKind.NOT_FOUND


class CardNotFoundError(NotFoundError):
    def __init__(self, card_id: int) -> None:
        super().__init__(f"Flashcard #{card_id} not found")
        self.card_id = card_id


class DeckNotFoundError(NotFoundError):
    def __init__(self, path: object) -> None:
        super().__init__(f"No deck file at {path}")
        self.path = path


class CorruptDeckError(FlashcardError):
    kind = ErrorKind.CORRUPT


class StorageIOError(FlashcardError):
    kind = ErrorKind.IO_FAILURE


class InvalidStateError(FlashcardError):
    kind = ErrorKind.INVALID_STATE


class NoCardsAvailableError(InvalidStateError):
    def __init__(self) -> None:
        super().__init__("No flashcards to quiz! Add some first.")
