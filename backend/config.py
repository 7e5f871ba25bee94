from datetime import UTC, date, datetime
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime."""
    return datetime.now(UTC).replace(tzinfo=None)


def today() -> date:
    """Return the current UTC calendar date, used to stamp reviews."""
    return utcnow().date()


class Settings(BaseSettings):
    app_name: str = "Flashcards"
    data_file: Path = Path("flashcards.json")
    easy_threshold: float = Field(default=0.8, ge=0.0, le=1.0)
    medium_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    inclusive_thresholds: bool = True
    default_max_cards: int | None = Field(default=None, ge=0)
    debug: bool = False

    model_config = {"env_prefix": "FLASHCARDS_", "env_file": ".env"}

    @model_validator(mode="after")
    def check_threshold_order(self) -> "Settings":
        if self.medium_threshold > self.easy_threshold:
            raise ValueError(
                f"medium_threshold ({self.medium_threshold}) must not exceed "
                f"easy_threshold ({self.easy_threshold})"
            )
        return self


settings = Settings()
