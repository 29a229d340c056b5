"""Load the document-type requirement table and frontmatter vocabulary."""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from mdd.config import MDD_REQUIREMENTS_PATH, MDD_VOCABULARY_PATH
from mdd.exceptions import ConfigurationError
from mdd.schemas import RequirementsTable, Vocabulary

logger = logging.getLogger(__name__)

REQUIREMENTS_RESOURCE = "document_type_requirements.json"
VOCABULARY_RESOURCE = "vocabulary.json"

_ModelT = TypeVar("_ModelT", bound=BaseModel)


def load_requirements(path: Path | None = None) -> RequirementsTable:
    """Load a requirements table.

    Args:
        path: JSON file shaped ``{"documentTypes": {...}}``. Defaults to
            ``MDD_REQUIREMENTS_PATH`` and then to the bundled resource.

    Raises:
        ConfigurationError: If the file is missing, not JSON, or malformed.
    """
    return _load_model(RequirementsTable, path or MDD_REQUIREMENTS_PATH, REQUIREMENTS_RESOURCE)


def load_vocabulary(path: Path | None = None) -> Vocabulary:
    """Load the document-type, status and semantic-class vocabulary."""
    return _load_model(Vocabulary, path or MDD_VOCABULARY_PATH, VOCABULARY_RESOURCE)


@lru_cache(maxsize=1)
def default_requirements() -> RequirementsTable:
    """Shared read-only requirements table."""
    return load_requirements()


@lru_cache(maxsize=1)
def default_vocabulary() -> Vocabulary:
    """Shared read-only vocabulary."""
    return load_vocabulary()


def _load_model(model: type[_ModelT], path: Path | None, resource_name: str) -> _ModelT:
    raw = _read_resource(path, resource_name)
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"{path or resource_name} is not valid JSON: {exc}") from exc
    try:
        loaded = model.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"{path or resource_name} is malformed: {exc}") from exc
    logger.debug("Loaded configuration resource", extra={"resource": str(path or resource_name)})
    return loaded


def _read_resource(path: Path | None, resource_name: str) -> str:
    if path is None:
        return resources.files("mdd").joinpath("data").joinpath(resource_name).read_text(encoding="utf-8")
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read configuration resource {path}: {exc}") from exc
