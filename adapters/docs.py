"""
Docs adapter — Google Docs API wrapper.

Fetches a document and parses it into a DocumentTree, or fetches just its
identity when the content isn't needed.
"""

from typing import Any

from adapters.services import get_docs_service
from extractors.doc_tree import parse_document
from extractors.docs import extract_metadata
from logging_config import log_fetch, log_fetched
from models import DocumentMetadata, DocumentTree
from retry import with_retry


# includeTabsContent gives us all tabs + body content in one call.
# Cannot mix tabs() with legacy document-level fields (body).
DOCUMENT_FIELDS = "documentId,title,revisionId,tabs"

METADATA_FIELDS = "documentId,title,revisionId"


@with_retry(max_attempts=3, delay_ms=1000)
def fetch_document_raw(document_id: str) -> dict[str, Any]:
    """
    Fetch the raw documents.get response.

    Raises:
        UnfoldError: On API failure (converted by @with_retry)
    """
    service = get_docs_service()
    log_fetch("document", document_id, fields=DOCUMENT_FIELDS)

    doc: dict[str, Any] = (
        service.documents()
        .get(
            documentId=document_id,
            includeTabsContent=True,
            fields=DOCUMENT_FIELDS,
        )
        .execute()
    )

    log_fetched("document", document_id, tabs=len(doc.get("tabs", [])))
    return doc


def fetch_document(document_id: str) -> DocumentTree:
    """
    Fetch and parse a document.

    Args:
        document_id: The document ID (from URL or API)

    Returns:
        DocumentTree ready for the docs extractors

    Raises:
        UnfoldError: On API failure
        MalformedTreeError: If the response contains an unknown element kind
    """
    return parse_document(fetch_document_raw(document_id))


@with_retry(max_attempts=3, delay_ms=1000)
def fetch_document_metadata(document_id: str) -> DocumentMetadata:
    """Id, title and revision only. No body content is transferred."""
    service = get_docs_service()
    log_fetch("document metadata", document_id, fields=METADATA_FIELDS)

    raw: dict[str, Any] = (
        service.documents()
        .get(documentId=document_id, fields=METADATA_FIELDS)
        .execute()
    )

    log_fetched("document metadata", document_id)
    return extract_metadata(raw)
