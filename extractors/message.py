"""
Message Extractor — Pure functions for Gmail message payloads.

parse_message_part() turns a Gmail API payload into MessagePart nodes.
extract_message_body() walks the tree once, accumulating text/html bodies
and an attachment manifest. A leaf that fails to decode is reported in
partial_errors and the walk carries on. extract_message_headers() reads the
envelope (From, To, Subject...) and Gmail labels off the raw message.

Index paths are dot-joined sibling positions below the root container
("1.0"), which matches Gmail's own partId numbering. A leaf root has the
empty path.
"""

import re
from typing import Any

from models import (
    AttachmentLeaf,
    AttachmentRecord,
    LeafDecodeError,
    MalformedTreeError,
    MessageBody,
    MessageHeaders,
    MessagePart,
    MultipartContainer,
    PartialError,
    TextLeaf,
    TextSubtype,
    format_path,
)

from .decoders import charset_from_content_type, decode_text_leaf


TEXT_SUBTYPES: dict[str, TextSubtype] = {
    "text/plain": "plain",
    "text/html": "html",
}

DEFAULT_PREFERENCE: tuple[TextSubtype, ...] = ("plain", "html")

# ASCII digits only
PART_INDEX = re.compile(r"[0-9]+")


# =============================================================================
# PARSING
# =============================================================================


def parse_message_part(raw: dict[str, Any], path: tuple[int, ...] = ()) -> MessagePart:
    """
    Build a MessagePart tree from a Gmail API payload.

    Accepts either the payload itself or a whole message (with 'payload').
    Containers are filled in from an explicit stack, so deeply nested
    multiparts don't hit the recursion limit.

    Raises:
        MalformedTreeError: On a part with no mimeType, or a multipart part
            with no child parts
    """
    if not path and "payload" in raw:
        raw = raw["payload"]

    roots: list[MessagePart] = []
    # (raw part, its path, the list it belongs in), popped in document order
    stack: list[tuple[dict[str, Any], tuple[int, ...], list[MessagePart]]] = [(raw, path, roots)]

    while stack:
        part, part_path, siblings = stack.pop()
        mime_type = part.get("mimeType")
        if not mime_type:
            raise MalformedTreeError("<no mimeType>", format_path(part_path), "part has no mimeType")

        if "parts" in part:
            container = MultipartContainer(mime_type=mime_type, parts=[])
            siblings.append(container)
            children = [
                (child, part_path + (i,), container.parts)
                for i, child in enumerate(part["parts"])
            ]
            stack.extend(reversed(children))
        elif mime_type.startswith("multipart/"):
            raise MalformedTreeError(mime_type, format_path(part_path), "missing parts")
        else:
            siblings.append(_parse_leaf(part, mime_type))

    return roots[0]


def _parse_leaf(part: dict[str, Any], mime_type: str) -> TextLeaf | AttachmentLeaf:
    body = part.get("body", {})
    filename = part.get("filename", "")

    if body.get("attachmentId"):
        return AttachmentLeaf(
            filename=filename,
            mime_type=mime_type,
            size=body.get("size", 0),
            ref=body["attachmentId"],
        )

    if mime_type in TEXT_SUBTYPES:
        return TextLeaf(
            subtype=TEXT_SUBTYPES[mime_type],
            data=body.get("data", ""),
            mime_type=mime_type,
            filename=filename,
            charset=charset_from_content_type(_header(part, "Content-Type")),
        )

    # Non-text part delivered inline (calendar invites, small images)
    return AttachmentLeaf(
        filename=filename,
        mime_type=mime_type,
        size=body.get("size", 0),
        ref=None,
        inline_data=body.get("data"),
    )


def _header(part: dict[str, Any], name: str) -> str:
    """First value of a header on a part. Header names are case-insensitive."""
    wanted = name.lower()
    for header in part.get("headers", []):
        if header.get("name", "").lower() == wanted:
            return header.get("value", "")
    return ""


def extract_message_headers(raw: dict[str, Any]) -> MessageHeaders:
    """
    Envelope headers and Gmail metadata for a messages.get response.

    A bare payload works too; the message-level fields are then empty.
    """
    payload = raw.get("payload", raw)
    return MessageHeaders(
        message_id=raw.get("id", ""),
        thread_id=raw.get("threadId", ""),
        sender=_header(payload, "From"),
        to=_header(payload, "To"),
        cc=_header(payload, "Cc"),
        bcc=_header(payload, "Bcc"),
        subject=_header(payload, "Subject"),
        date=_header(payload, "Date"),
        snippet=raw.get("snippet", ""),
        label_ids=list(raw.get("labelIds", [])),
    )


def _as_part(root: MessagePart | dict[str, Any]) -> MessagePart:
    if isinstance(root, (TextLeaf, AttachmentLeaf, MultipartContainer)):
        return root
    return parse_message_part(root)


# =============================================================================
# WALKING
# =============================================================================


def extract_message_body(
    root: MessagePart | dict[str, Any],
    preference: tuple[TextSubtype, ...] = DEFAULT_PREFERENCE,
) -> MessageBody:
    """
    Walk a message tree into text body, html body and attachment manifest.

    Every text leaf is appended to the body of its subtype in traversal
    order, so same-subtype leaves in different branches accumulate.

    Args:
        root: Parsed MessagePart or raw Gmail payload
        preference: Subtype order used by MessageBody.preferred_body

    Returns:
        MessageBody with partial_errors listing any leaves that failed
        to decode

    Raises:
        MalformedTreeError: If a node isn't one of the known MessagePart types
    """
    part = _as_part(root)
    result = MessageBody(preference=tuple(preference))
    text_parts: dict[TextSubtype, list[str]] = {"plain": [], "html": []}

    if isinstance(part, MultipartContainer):
        stack = [(child, (i,)) for i, child in enumerate(part.parts)]
    else:
        stack = [(part, ())]
    stack.reverse()

    while stack:
        node, path = stack.pop()

        if isinstance(node, MultipartContainer):
            children = [(child, path + (i,)) for i, child in enumerate(node.parts)]
            stack.extend(reversed(children))
        elif isinstance(node, TextLeaf):
            try:
                text_parts[node.subtype].append(decode_text_leaf(node))
            except LeafDecodeError as e:
                result.partial_errors.append(PartialError(path=format_path(path), reason=e.reason))
        elif isinstance(node, AttachmentLeaf):
            result.attachments.append(AttachmentRecord(
                filename=node.filename,
                mime_type=node.mime_type,
                size=node.size,
                ref=node.ref,
                path=format_path(path),
            ))
        else:
            raise MalformedTreeError(type(node).__name__, format_path(path))

    result.text_body = "".join(text_parts["plain"])
    result.html_body = "".join(text_parts["html"])
    return result


def find_part(root: MessagePart | dict[str, Any], path: str) -> MessagePart:
    """
    Locate the part at an index path produced by extract_message_body.

    Raises:
        MalformedTreeError: If the path doesn't lead to a part in this tree
    """
    node = _as_part(root)
    if not path:
        return node

    walked: tuple[int, ...] = ()
    for segment in path.split("."):
        if not PART_INDEX.fullmatch(segment):
            raise MalformedTreeError(path, format_path(walked), "invalid part path")
        index = int(segment)
        if not isinstance(node, MultipartContainer) or index >= len(node.parts):
            raise MalformedTreeError(path, format_path(walked), "no part at path")
        node = node.parts[index]
        walked += (index,)

    return node
