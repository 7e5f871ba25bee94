"""Tests for deck persistence: schema validation, round trips and atomic saves."""

import json
import os
import stat
from datetime import date
from pathlib import Path

import pytest

from backend.errors import CorruptDeckError, DeckNotFoundError, NotFoundError, StorageIOError
from backend.models.card import Difficulty, ReviewMetadata
from backend.models.deck import CardStore
from backend.storage import dumps, load, loads, open_deck, save


def _make_store() -> CardStore:
    store = CardStore()
    store.add("2+2", "4")
    store.add("capital of Nepal", "Kathmandu")
    store.add("नमस्ते", "hello")
    store.get(2).metadata = ReviewMetadata(
        difficulty=Difficulty.EASY,
        times_reviewed=5,
        correct_count=5,
        last_reviewed=date(2026, 10, 18),
    )
    store.delete(3)
    store.add("3+3", "6")
    return store


def _valid_document() -> dict:
    return {
        "cards": {
            "1": {
                "id": 1,
                "question": "2+2",
                "answer": "4",
                "metadata": {
                    "difficulty": "Hard",
                    "times_reviewed": 3,
                    "correct_count": 1,
                    "last_reviewed": "2026-10-19",
                },
            }
        },
        "next_id": 2,
    }


class TestRoundTrip:
    def test_save_then_load(self, tmp_path: Path) -> None:
        store = _make_store()
        path = tmp_path / "deck.json"
        save(store, path)
        assert load(path) == store

    def test_empty_store(self, tmp_path: Path) -> None:
        path = tmp_path / "deck.json"
        save(CardStore(), path)
        loaded = load(path)
        assert loaded == CardStore()
        assert loaded.next_id == 1

    def test_next_id_survives_deletion(self, tmp_path: Path) -> None:
        store = CardStore()
        store.add("a", "1")
        store.add("b", "2")
        store.delete(2)
        path = tmp_path / "deck.json"
        save(store, path)
        assert load(path).add("c", "3") == 3

    def test_document_layout(self) -> None:
        data = json.loads(dumps(_make_store()))
        assert list(data) == ["cards", "next_id"]
        assert list(data["cards"]) == ["1", "2", "4"]
        card = data["cards"]["2"]
        assert list(card) == ["id", "question", "answer", "metadata"]
        assert card["metadata"] == {
            "difficulty": "Easy",
            "times_reviewed": 5,
            "correct_count": 5,
            "last_reviewed": "2026-10-18",
        }
        assert data["cards"]["1"]["metadata"]["last_reviewed"] is None
        assert data["next_id"] == 5

    def test_loads_valid_document(self) -> None:
        store = loads(json.dumps(_valid_document()))
        card = store.get(1)
        assert card.metadata.difficulty == Difficulty.HARD
        assert card.metadata.last_reviewed == date(2026, 10, 19)
        assert store.next_id == 2

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "dir" / "deck.json"
        save(_make_store(), path)
        assert path.exists()


class TestLoadErrors:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(DeckNotFoundError) as excinfo:
            load(tmp_path / "missing.json")
        assert isinstance(excinfo.value, NotFoundError)

    def test_open_deck_missing_file_is_empty(self, tmp_path: Path) -> None:
        assert open_deck(tmp_path / "missing.json") == CardStore()

    def test_open_deck_surfaces_corruption(self, tmp_path: Path) -> None:
        path = tmp_path / "deck.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CorruptDeckError):
            open_deck(path)

    def test_invalid_json(self) -> None:
        with pytest.raises(CorruptDeckError):
            loads("{")

    def test_not_utf8(self, tmp_path: Path) -> None:
        path = tmp_path / "deck.json"
        path.write_bytes(b"\xff\xfe\x00garbage")
        with pytest.raises(CorruptDeckError):
            load(path)

    def test_unreadable_path(self, tmp_path: Path) -> None:
        with pytest.raises(StorageIOError):
            load(tmp_path)  # a directory, not a file

    def test_top_level_not_object(self) -> None:
        with pytest.raises(CorruptDeckError):
            loads("[]")

    def test_missing_next_id(self) -> None:
        doc = _valid_document()
        del doc["next_id"]
        with pytest.raises(CorruptDeckError):
            loads(json.dumps(doc))

    def test_missing_card_field(self) -> None:
        doc = _valid_document()
        del doc["cards"]["1"]["answer"]
        with pytest.raises(CorruptDeckError):
            loads(json.dumps(doc))

    def test_missing_last_reviewed_key(self) -> None:
        doc = _valid_document()
        del doc["cards"]["1"]["metadata"]["last_reviewed"]
        with pytest.raises(CorruptDeckError):
            loads(json.dumps(doc))

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("times_reviewed", "3"),
            ("times_reviewed", -1),
            ("correct_count", 1.5),
            ("difficulty", "Impossible"),
            ("last_reviewed", "yesterday"),
            ("last_reviewed", 0),
            ("last_reviewed", 1760832000),
            ("last_reviewed", "2026-10-19T00:00:00"),
            ("last_reviewed", "2026-02-30"),
            ("last_reviewed", "20261019"),
        ],
    )
    def test_bad_metadata_values(self, field: str, value: object) -> None:
        doc = _valid_document()
        doc["cards"]["1"]["metadata"][field] = value
        with pytest.raises(CorruptDeckError):
            loads(json.dumps(doc))

    def test_wrong_id_type(self) -> None:
        doc = _valid_document()
        doc["cards"]["1"]["id"] = "1"
        with pytest.raises(CorruptDeckError):
            loads(json.dumps(doc))

    def test_empty_question(self) -> None:
        doc = _valid_document()
        doc["cards"]["1"]["question"] = ""
        with pytest.raises(CorruptDeckError):
            loads(json.dumps(doc))

    @pytest.mark.parametrize("field", ["question", "answer"])
    def test_blank_text(self, field: str) -> None:
        doc = _valid_document()
        doc["cards"]["1"][field] = "   \n\t"
        with pytest.raises(CorruptDeckError):
            loads(json.dumps(doc))

    def test_correct_exceeds_reviewed(self) -> None:
        doc = _valid_document()
        doc["cards"]["1"]["metadata"]["correct_count"] = 4
        with pytest.raises(CorruptDeckError):
            loads(json.dumps(doc))

    def test_next_id_not_above_max(self) -> None:
        doc = _valid_document()
        doc["next_id"] = 1
        with pytest.raises(CorruptDeckError):
            loads(json.dumps(doc))

    def test_key_id_mismatch(self) -> None:
        doc = _valid_document()
        doc["cards"]["7"] = doc["cards"]["1"]
        doc["next_id"] = 8
        with pytest.raises(CorruptDeckError):
            loads(json.dumps(doc))

    def test_duplicate_keys(self) -> None:
        card = json.dumps(_valid_document()["cards"]["1"])
        text = f'{{"cards": {{"1": {card}, "1": {card}}}, "next_id": 2}}'
        with pytest.raises(CorruptDeckError):
            loads(text)


class TestAtomicSave:
    def test_overwrites_existing(self, tmp_path: Path) -> None:
        path = tmp_path / "deck.json"
        save(_make_store(), path)
        save(CardStore(), path)
        assert load(path) == CardStore()

    def test_leaves_no_temporary_files(self, tmp_path: Path) -> None:
        path = tmp_path / "deck.json"
        save(_make_store(), path)
        save(_make_store(), path)
        assert [p.name for p in tmp_path.iterdir()] == ["deck.json"]

    def test_failed_replace_keeps_previous_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = tmp_path / "deck.json"
        original = _make_store()
        save(original, path)

        def broken_replace(src: str, dst: object) -> None:
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", broken_replace)
        changed = _make_store()
        changed.add("new", "card")
        with pytest.raises(StorageIOError):
            save(changed, path)

        assert load(path) == original
        assert [p.name for p in tmp_path.iterdir()] == ["deck.json"]

    def test_unwritable_destination(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("", encoding="utf-8")
        with pytest.raises(StorageIOError):
            save(CardStore(), blocker / "deck.json")

    def test_new_file_is_world_readable(self, tmp_path: Path) -> None:
        path = tmp_path / "deck.json"
        save(_make_store(), path)
        assert stat.S_IMODE(path.stat().st_mode) == 0o644

    def test_keeps_existing_permissions(self, tmp_path: Path) -> None:
        path = tmp_path / "deck.json"
        save(_make_store(), path)
        path.chmod(0o640)
        save(CardStore(), path)
        assert stat.S_IMODE(path.stat().st_mode) == 0o640
