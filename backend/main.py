"""FastAPI application entry point and configuration."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backend.api.cards_router import router as cards_router
from backend.api.session_router import router as session_router
from backend.api.stats_router import router as stats_router
from backend.config import settings
from backend.errors import ErrorKind, FlashcardError

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_STATE: 409,
    ErrorKind.CORRUPT: 500,
    ErrorKind.IO_FAILURE: 500,
}

app = FastAPI(
    title=settings.app_name,
    description="Personal flashcard deck with self-graded quiz sessions",
    version="0.1.0",
)

app.include_router(cards_router)
app.include_router(session_router)
app.include_router(stats_router)


@app.exception_handler(FlashcardError)
async def flashcard_error_handler(request: Request, exc: FlashcardError) -> JSONResponse:
    """Translate core errors into HTTP responses."""
    status = ERROR_STATUS[exc.kind]
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status, content={"detail": str(exc), "kind": exc.kind.value})


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Return service status."""
    return {"status": "ok"}
