"""
Type definitions for unfold.

Dataclasses defining the contracts between layers:
- Adapters fetch raw API trees and hand them to the parsers
- Parsers build the immutable node types below
- Extractors walk the nodes and return the result types at the bottom

These types make the adapter→extractor contract explicit and IDE-checkable.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal


# ============================================================================
# ERROR TYPES
# ============================================================================

class ErrorKind(Enum):
    """Categories of errors for consistent handling."""
    AUTH_EXPIRED = "auth_expired"        # Token needs refresh
    NOT_FOUND = "not_found"              # Resource doesn't exist
    PERMISSION_DENIED = "permission_denied"  # No access to resource
    RATE_LIMITED = "rate_limited"        # Hit API quota
    NETWORK_ERROR = "network_error"      # Connection failed
    INVALID_INPUT = "invalid_input"      # Bad parameters
    MALFORMED_TREE = "malformed_tree"    # Unknown node kind / missing children
    DECODE_FAILED = "decode_failed"      # Leaf payload couldn't be decoded
    UNKNOWN = "unknown"                  # Unexpected error


class UnfoldError(Exception):
    """
    Structured error for consistent handling across layers.

    Adapters raise these on API failures, parsers and walkers on bad trees.
    The CLI catches and formats them.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        return {
            "error": True,
            "kind": self.kind.value,
            "message": self.message,
            "retryable": self.retryable,
            **self.details,
        }


class MalformedTreeError(UnfoldError):
    """
    A structural node of unrecognised kind, or one missing a mandatory
    child collection. Fatal for the current call.
    """

    def __init__(self, node_kind: str, path: str, reason: str = "unrecognised node kind"):
        where = path or "<root>"
        super().__init__(
            ErrorKind.MALFORMED_TREE,
            f"{reason}: {node_kind!r} at {where}",
            details={"node_kind": node_kind, "path": path},
        )
        self.node_kind = node_kind
        self.path = path


class LeafDecodeError(UnfoldError):
    """
    A single encoded leaf failed to decode.

    Recoverable: the message walker records it as a PartialError and keeps
    going. The path is filled in by whoever knows where the leaf sits.
    """

    def __init__(self, reason: str, path: str = ""):
        super().__init__(
            ErrorKind.DECODE_FAILED,
            reason,
            details={"path": path},
        )
        self.reason = reason
        self.path = path


def format_path(path: tuple[int, ...]) -> str:
    """Render an index path as dot-joined sibling positions ("1.0")."""
    return ".".join(str(i) for i in path)


# ============================================================================
# DOCUMENT TREE TYPES
# ============================================================================

@dataclass(frozen=True)
class TextStyle:
    """Run style. Absent flags are False, absent link is None."""
    bold: bool = False
    italic: bool = False
    underline: bool = False
    link: str | None = None


@dataclass(frozen=True)
class TextRun:
    """One contiguous run of identically styled text."""
    text: str
    style: TextStyle = field(default_factory=TextStyle)


@dataclass(frozen=True)
class TextRunContainer:
    """A paragraph. heading_level is set (1-6) when it is a heading."""
    runs: list[TextRun]
    heading_level: int | None = None


@dataclass(frozen=True)
class StructuralBreak:
    """Section break. No text, but a boundary for text joining."""


@dataclass(frozen=True)
class TableCell:
    """A table cell is a full content sub-tree."""
    content: list["ContentNode"]


@dataclass(frozen=True)
class TableRow:
    cells: list[TableCell]


@dataclass(frozen=True)
class Table:
    rows: list[TableRow]


@dataclass(frozen=True)
class ContentsBlock:
    """Table of contents. Its content is walked like ordinary content."""
    content: list["ContentNode"]


ContentNode = TextRunContainer | StructuralBreak | Table | ContentsBlock


@dataclass(frozen=True)
class DocumentTree:
    """
    Parsed document, ready for the docs extractors.

    Multi-tab documents are flattened to one content sequence by the parser.
    """
    title: str
    document_id: str
    content: list[ContentNode]
    revision_id: str | None = None


# ============================================================================
# MESSAGE TREE TYPES
# ============================================================================

TextSubtype = Literal["plain", "html"]


@dataclass(frozen=True)
class TextLeaf:
    """
    An encoded text/plain or text/html body part.

    encoding is the transfer encoding of data; charset is the one declared
    in the part's Content-Type header (utf-8 when none is declared).
    """
    subtype: TextSubtype
    data: str  # base64url as delivered by the Gmail API
    mime_type: str
    encoding: str = "base64url"
    filename: str = ""
    charset: str = "utf-8"


@dataclass(frozen=True)
class AttachmentLeaf:
    """
    Binary content, normally referenced rather than inlined.

    ref is the Gmail attachmentId. Parts that arrive inline with no
    attachmentId keep their encoded data in inline_data and have ref None.
    """
    filename: str
    mime_type: str
    size: int
    ref: str | None
    inline_data: str | None = None


@dataclass(frozen=True)
class MultipartContainer:
    mime_type: str
    parts: list["MessagePart"]


MessagePart = TextLeaf | AttachmentLeaf | MultipartContainer


# ============================================================================
# DOCUMENT RESULT TYPES
# ============================================================================

@dataclass
class DocumentMetadata:
    """Identity of a document without its content."""
    document_id: str
    title: str
    revision_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "documentId": self.document_id,
            "title": self.title,
            "revisionId": self.revision_id,
        }


@dataclass
class PlainTextResult:
    title: str
    content: str

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "content": self.content}


@dataclass
class Heading:
    level: int
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"level": self.level, "text": self.text}


@dataclass
class Link:
    text: str
    url: str

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "url": self.url}


@dataclass
class FormattedRun:
    """One styled run. link is None when the run isn't linked."""
    text: str
    bold: bool = False
    italic: bool = False
    underline: bool = False
    link: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "bold": self.bold,
            "italic": self.italic,
            "underline": self.underline,
            "link": self.link,
        }


@dataclass
class DocStats:
    words: int
    characters: int
    paragraphs: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "words": self.words,
            "characters": self.characters,
            "paragraphs": self.paragraphs,
        }


# A table is rows of cell strings
TableMatrix = list[list[str]]


# ============================================================================
# MESSAGE RESULT TYPES
# ============================================================================

@dataclass
class AttachmentRecord:
    """
    Attachment manifest entry.

    path + ref are enough to fetch the binary later, even though the tree
    itself isn't kept around.
    """
    filename: str
    mime_type: str
    size: int
    ref: str | None
    path: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "type": self.mime_type,
            "size": self.size,
            "ref": self.ref,
            "path": self.path,
        }


@dataclass
class PartialError:
    """A leaf that couldn't be decoded. Extraction carried on without it."""
    path: str
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "reason": self.reason}


@dataclass
class MessageBody:
    """
    Result of walking one message tree.

    Bodies accumulate across every text leaf of the matching subtype, in
    traversal order.
    """
    text_body: str = ""
    html_body: str = ""
    attachments: list[AttachmentRecord] = field(default_factory=list)
    partial_errors: list[PartialError] = field(default_factory=list)

    # Caller's preference order, used by preferred_body
    preference: tuple[TextSubtype, ...] = ("plain", "html")

    def body_for(self, subtype: TextSubtype) -> str:
        return self.text_body if subtype == "plain" else self.html_body

    @property
    def preferred_subtype(self) -> TextSubtype | None:
        """First subtype in preference order that has content."""
        for subtype in self.preference:
            if self.body_for(subtype):
                return subtype
        return None

    @property
    def preferred_body(self) -> str:
        subtype = self.preferred_subtype
        return self.body_for(subtype) if subtype else ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "textBody": self.text_body,
            "htmlBody": self.html_body,
            "attachments": [a.to_dict() for a in self.attachments],
            "partialErrors": [e.to_dict() for e in self.partial_errors],
        }


@dataclass
class MessageHeaders:
    """
    Envelope of one message: addressing headers plus Gmail's own metadata.

    Missing headers are empty strings. is_unread and is_starred are read
    off the UNREAD and STARRED system labels.
    """
    message_id: str = ""
    thread_id: str = ""
    sender: str = ""
    to: str = ""
    cc: str = ""
    bcc: str = ""
    subject: str = ""
    date: str = ""
    snippet: str = ""
    label_ids: list[str] = field(default_factory=list)

    @property
    def is_unread(self) -> bool:
        return "UNREAD" in self.label_ids

    @property
    def is_starred(self) -> bool:
        return "STARRED" in self.label_ids

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.message_id,
            "threadId": self.thread_id,
            "from": self.sender,
            "to": self.to,
            "cc": self.cc,
            "bcc": self.bcc,
            "subject": self.subject,
            "date": self.date,
            "snippet": self.snippet,
            "labelIds": list(self.label_ids),
            "isUnread": self.is_unread,
            "isStarred": self.is_starred,
        }
