"""Test setup for mdd."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from mdd.schemas import DocumentTree, Node  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for pytest.

    This allows running integration tests selectively:
        pytest -m integration       # run only integration tests
        pytest -m "not integration" # skip integration tests
    """
    config.addinivalue_line(
        "markers",
        "integration: marks tests that run the parser, passes and outer surfaces together",
    )


@pytest.fixture
def paragraphs_tree() -> Callable[..., DocumentTree]:
    """Build an MDD tree whose top-level children are plain paragraphs."""

    def build(*texts: str, path: str = "document.mdd") -> DocumentTree:
        return DocumentTree(path=path, children=[Node.paragraph(text) for text in texts])

    return build


@pytest.fixture
def frontmatter_doc() -> Callable[..., str]:
    """Render a document with a frontmatter block and an optional body."""

    def render(*fields: str, body: str = "") -> str:
        return "---\n" + "\n".join(fields) + "\n---\n" + body

    return render
