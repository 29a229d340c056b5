"""Configuration for the HTTP server."""

from __future__ import annotations

import os

from mdd.config import MDD_FILE_EXTENSION, MDD_MAX_CONTENT_SIZE

MAX_CONTENT_SIZE = MDD_MAX_CONTENT_SIZE
DEFAULT_DOCUMENT_PATH = f"document{MDD_FILE_EXTENSION}"

SERVER_HOST = os.getenv("HOST", "127.0.0.1")
SERVER_PORT = int(os.getenv("PORT", "8000"))
SERVER_RELOAD = os.getenv("RELOAD", "false").lower() == "true"

APP_TITLE = "mdd"
APP_DESCRIPTION = "Validate and transform MDD business documents."
