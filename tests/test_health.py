from collections.abc import Iterator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from backend.config import settings
from backend.main import app


@pytest.fixture
def data_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point the app at a fresh deck file and drop any cached deck."""
    path = tmp_path / "flashcards.json"
    monkeypatch.setattr(settings, "data_file", path)
    app.state.deck = None
    yield path
    app.state.deck = None


@pytest.mark.asyncio
async def test_health_check() -> None:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_missing_deck_starts_empty(data_file: Path) -> None:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        assert (await client.get("/api/cards")).json() == []
        response = await client.get("/api/cards/1")
    assert response.status_code == 404
    assert response.json() == {"detail": "Flashcard #1 not found", "kind": "not_found"}


@pytest.mark.asyncio
async def test_blank_card_reports_invalid_input(data_file: Path) -> None:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post("/api/cards", json={"question": "  ", "answer": "x"})
    assert response.status_code == 400
    assert response.json()["kind"] == "invalid_input"
    assert not data_file.exists()


@pytest.mark.asyncio
async def test_corrupt_deck_reports_server_error(data_file: Path) -> None:
    data_file.write_text('{"cards": {}, "next_id": 0}', encoding="utf-8")
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/cards")
    assert response.status_code == 500
    assert response.json()["kind"] == "corrupt"
