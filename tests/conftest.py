"""
Shared pytest fixtures for unfold tests.

Fixtures are loaded from the fixtures/ directory at project root and, for
documents, parsed into typed trees.

Adapter mocking infrastructure is also provided here for testing
adapters without hitting real Google APIs.
"""

import json
from pathlib import Path
from typing import Any, Generator
from unittest.mock import MagicMock, patch

import pytest

from extractors.doc_tree import parse_document
from models import DocumentTree

PROJECT_ROOT = Path(__file__).parent.parent
FIXTURES_DIR = PROJECT_ROOT / "fixtures"


def load_fixture(category: str, name: str) -> dict[str, Any]:
    """
    Load a JSON fixture by category and name.

    Example:
        load_fixture("docs", "basic")  # loads fixtures/docs/basic.json
    """
    fixture_path = FIXTURES_DIR / category / f"{name}.json"
    with open(fixture_path) as f:
        data: dict[str, Any] = json.load(f)
    return data


# ============================================================================
# Docs Fixtures
# ============================================================================

@pytest.fixture
def docs_raw() -> dict[str, Any]:
    """Raw documents.get response for a small proposal doc."""
    return load_fixture("docs", "basic")


@pytest.fixture
def docs_response(docs_raw: dict[str, Any]) -> DocumentTree:
    """The same document, parsed."""
    return parse_document(docs_raw)


# ============================================================================
# Gmail Fixtures
# ============================================================================

@pytest.fixture
def gmail_message_raw() -> dict[str, Any]:
    """Raw messages.get(format=full) response: alternative body + PDF + inline invite."""
    return load_fixture("gmail", "multipart")


@pytest.fixture
def gmail_payload(gmail_message_raw: dict[str, Any]) -> dict[str, Any]:
    return gmail_message_raw["payload"]


# ============================================================================
# Adapter Mocking Infrastructure
# ============================================================================

@pytest.fixture
def mock_docs_service() -> MagicMock:
    """Create a mock Google Docs service."""
    return MagicMock()


@pytest.fixture
def mock_gmail_service() -> MagicMock:
    """Create a mock Gmail service."""
    return MagicMock()


@pytest.fixture
def patch_docs_service(mock_docs_service: MagicMock) -> Generator[MagicMock, None, None]:
    """Fixture that patches get_docs_service and yields the mock."""
    with patch("adapters.docs.get_docs_service", return_value=mock_docs_service):
        yield mock_docs_service


@pytest.fixture
def patch_gmail_service(mock_gmail_service: MagicMock) -> Generator[MagicMock, None, None]:
    """Fixture that patches get_gmail_service and yields the mock."""
    with patch("adapters.gmail.get_gmail_service", return_value=mock_gmail_service):
        yield mock_gmail_service


@pytest.fixture(autouse=True)
def no_retry_sleep() -> Generator[None, None, None]:
    """Retries in adapter tests shouldn't actually wait."""
    with patch("retry.time.sleep"):
        yield
