"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from backend.config import Settings
from backend.srs.difficulty import DifficultyThresholds


def test_defaults() -> None:
    config = Settings(_env_file=None)
    thresholds = DifficultyThresholds.from_settings(config)
    assert thresholds == DifficultyThresholds(easy=0.8, medium=0.5, inclusive=True)


def test_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLASHCARDS_EASY_THRESHOLD", "0.9")
    monkeypatch.setenv("FLASHCARDS_INCLUSIVE_THRESHOLDS", "false")
    config = Settings(_env_file=None)
    assert config.easy_threshold == 0.9
    assert config.inclusive_thresholds is False


@pytest.mark.parametrize(
    "overrides",
    [
        {"easy_threshold": 1.5},
        {"medium_threshold": -0.1},
        {"medium_threshold": 0.9, "easy_threshold": 0.5},
        {"default_max_cards": -1},
    ],
)
def test_rejects_bad_values(overrides: dict) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **overrides)


def test_rejects_bad_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLASHCARDS_MEDIUM_THRESHOLD", "0.95")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)
