"""
Tests for docs adapter using mocked services and real fixtures.

Mocks the Docs API service, feeds fixture data, and verifies the adapter
parses into a DocumentTree and converts API failures.
"""

from typing import Any
from unittest.mock import MagicMock

import pytest

from adapters.docs import (
    DOCUMENT_FIELDS,
    METADATA_FIELDS,
    fetch_document,
    fetch_document_metadata,
    fetch_document_raw,
)
from models import DocumentMetadata, DocumentTree, ErrorKind, MalformedTreeError, UnfoldError
from tests.helpers import mock_api_chain, raw_paragraph, seal_service
from tests.mock_utils import make_http_error


class TestFetchDocument:

    def test_parses_fixture(self, patch_docs_service: MagicMock, docs_raw: dict[str, Any]) -> None:
        mock_api_chain(patch_docs_service, "documents.get.execute", docs_raw)
        seal_service(patch_docs_service)

        doc = fetch_document("1aBcD-basic-doc")

        assert isinstance(doc, DocumentTree)
        assert doc.title == "Project Proposal"
        assert len(doc.content) == 7

    def test_requests_tabs_content(self, patch_docs_service: MagicMock) -> None:
        mock_api_chain(patch_docs_service, "documents.get.execute", {"title": "T", "tabs": []})

        fetch_document_raw("doc123")

        patch_docs_service.documents.return_value.get.assert_called_once_with(
            documentId="doc123",
            includeTabsContent=True,
            fields=DOCUMENT_FIELDS,
        )

    def test_tabbed_response(self, patch_docs_service: MagicMock) -> None:
        response = {
            "documentId": "doc123",
            "title": "Tabbed",
            "tabs": [{"documentTab": {"body": {"content": [raw_paragraph("Hello\n")]}}}],
        }
        mock_api_chain(patch_docs_service, "documents.get.execute", response)

        doc = fetch_document("doc123")

        assert doc.content[0].runs[0].text == "Hello\n"

    def test_malformed_response_raises(self, patch_docs_service: MagicMock) -> None:
        response = {"title": "Odd", "body": {"content": [{"hologram": {}}]}}
        mock_api_chain(patch_docs_service, "documents.get.execute", response)

        with pytest.raises(MalformedTreeError):
            fetch_document("doc123")


class TestFetchDocumentMetadata:

    def test_requests_metadata_fields_only(self, patch_docs_service: MagicMock) -> None:
        mock_api_chain(
            patch_docs_service, "documents.get.execute",
            {"documentId": "doc123", "title": "Notes", "revisionId": "r9"},
        )
        seal_service(patch_docs_service)

        metadata = fetch_document_metadata("doc123")

        assert metadata == DocumentMetadata(document_id="doc123", title="Notes", revision_id="r9")
        patch_docs_service.documents.return_value.get.assert_called_once_with(
            documentId="doc123", fields=METADATA_FIELDS,
        )

    def test_not_found(self, patch_docs_service: MagicMock) -> None:
        mock_api_chain(
            patch_docs_service, "documents.get.execute",
            side_effect=make_http_error(404, "Requested entity was not found."),
        )

        with pytest.raises(UnfoldError) as exc_info:
            fetch_document_metadata("missing")
        assert exc_info.value.kind == ErrorKind.NOT_FOUND


class TestFetchDocumentErrors:

    def test_not_found(self, patch_docs_service: MagicMock) -> None:
        mock_api_chain(
            patch_docs_service, "documents.get.execute",
            side_effect=make_http_error(404, "Requested entity was not found."),
        )

        with pytest.raises(UnfoldError) as exc_info:
            fetch_document("missing")
        assert exc_info.value.kind == ErrorKind.NOT_FOUND

    def test_transient_failure_retried(
        self, patch_docs_service: MagicMock, docs_raw: dict[str, Any]
    ) -> None:
        execute = mock_api_chain(
            patch_docs_service, "documents.get.execute",
            side_effect=[make_http_error(503, "Backend error"), docs_raw],
        )

        doc = fetch_document("1aBcD-basic-doc")

        assert doc.document_id == "1aBcD-basic-doc"
        assert execute.call_count == 2

    def test_permission_denied_not_retried(self, patch_docs_service: MagicMock) -> None:
        execute = mock_api_chain(
            patch_docs_service, "documents.get.execute",
            side_effect=make_http_error(403, "Forbidden"),
        )

        with pytest.raises(UnfoldError) as exc_info:
            fetch_document("private")
        assert exc_info.value.kind == ErrorKind.PERMISSION_DENIED
        assert execute.call_count == 1
