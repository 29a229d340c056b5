"""FastAPI application for the document API."""

from __future__ import annotations

from fastapi import FastAPI

from mdd.utils.logging_config import get_logger
from server.routers.documents import router as documents_router
from server.server_config import APP_DESCRIPTION, APP_TITLE

logger = get_logger(__name__)

app = FastAPI(title=APP_TITLE, description=APP_DESCRIPTION)
app.include_router(documents_router)


@app.get("/health")
def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}
