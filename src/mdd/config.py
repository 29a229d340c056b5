"""Local configuration for mdd."""

from __future__ import annotations

import os
from pathlib import Path


DEFAULT_FILE_EXTENSION = ".mdd"
DEFAULT_LONG_PARAGRAPH_THRESHOLD = 200
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_MAX_CONTENT_SIZE = 1_000_000

# Only documents whose path carries this extension receive the MDD passes.
MDD_FILE_EXTENSION = os.getenv("MDD_FILE_EXTENSION", DEFAULT_FILE_EXTENSION)
MDD_LONG_PARAGRAPH_THRESHOLD = int(
    os.getenv("MDD_LONG_PARAGRAPH_THRESHOLD", str(DEFAULT_LONG_PARAGRAPH_THRESHOLD))
)
MDD_LOG_LEVEL = os.getenv("MDD_LOG_LEVEL", DEFAULT_LOG_LEVEL)
MDD_MAX_CONTENT_SIZE = int(os.getenv("MDD_MAX_CONTENT_SIZE", str(DEFAULT_MAX_CONTENT_SIZE)))

# External tooling may point these at its own copies of the bundled resources.
_requirements_override = os.getenv("MDD_REQUIREMENTS_PATH")
_vocabulary_override = os.getenv("MDD_VOCABULARY_PATH")
MDD_REQUIREMENTS_PATH = Path(_requirements_override).expanduser().resolve() if _requirements_override else None
MDD_VOCABULARY_PATH = Path(_vocabulary_override).expanduser().resolve() if _vocabulary_override else None
