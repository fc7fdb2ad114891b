"""
Docs Extractor — Pure functions for projecting documents.

Each function walks the document once with a single projection and returns
its result. Accepts a parsed DocumentTree or a raw documents.get response.
No API calls, no caching.
"""

from typing import Any

from models import (
    DocStats,
    DocumentMetadata,
    DocumentTree,
    FormattedRun,
    Heading,
    Link,
    PlainTextResult,
    TableMatrix,
)

from .doc_tree import parse_document, walk_content
from .projections import (
    FormattedRunProjection,
    HeadingProjection,
    LinkProjection,
    PlainTextProjection,
    TableProjection,
    compute_stats,
)


def _as_document(doc: DocumentTree | dict[str, Any]) -> DocumentTree:
    if isinstance(doc, DocumentTree):
        return doc
    return parse_document(doc)


def extract_plain_text(doc: DocumentTree | dict[str, Any]) -> PlainTextResult:
    """
    All document text in reading order, table cells included.

    Section breaks become a single newline. Trailing whitespace is kept.
    """
    document = _as_document(doc)
    projection = PlainTextProjection()
    walk_content(document.content, projection)
    return PlainTextResult(title=document.title, content=projection.result())


def extract_headings(doc: DocumentTree | dict[str, Any]) -> list[Heading]:
    """Heading outline, including headings inside table cells. Empty headings are skipped."""
    projection = HeadingProjection()
    walk_content(_as_document(doc).content, projection)
    return projection.result()


def extract_tables(doc: DocumentTree | dict[str, Any]) -> list[TableMatrix]:
    """
    Every top-level table as rows of trimmed cell strings.

    Nested tables are flattened into their parent cell's text rather than
    producing tables of tables.
    """
    projection = TableProjection()
    walk_content(_as_document(doc).content, projection)
    return projection.result()


def extract_links(doc: DocumentTree | dict[str, Any]) -> list[Link]:
    projection = LinkProjection()
    walk_content(_as_document(doc).content, projection)
    return projection.result()


def extract_formatted_runs(doc: DocumentTree | dict[str, Any]) -> list[FormattedRun]:
    projection = FormattedRunProjection()
    walk_content(_as_document(doc).content, projection)
    return projection.result()


def extract_stats(doc: DocumentTree | dict[str, Any]) -> DocStats:
    """Word/character/paragraph counts, derived from the plain-text projection."""
    return compute_stats(extract_plain_text(doc).content)


def extract_metadata(doc: DocumentTree | dict[str, Any]) -> DocumentMetadata:
    """
    Document id, title and revision.

    A raw response is read directly rather than parsed, so a metadata-only
    documents.get (fields=documentId,title,revisionId) is enough.
    """
    if isinstance(doc, DocumentTree):
        return DocumentMetadata(doc.document_id, doc.title, doc.revision_id)
    return DocumentMetadata(
        document_id=doc.get("documentId", ""),
        title=doc.get("title", "Untitled"),
        revision_id=doc.get("revisionId"),
    )
