"""
Gmail adapter — Gmail API wrapper.

Fetches messages for the message extractor, and attachment content for a
follow-up fetch by reference or by part path.
"""

from typing import Any

from adapters.services import get_gmail_service
from extractors.decoders import decode_binary
from extractors.message import find_part, parse_message_part
from logging_config import log_fetch, log_fetched
from models import AttachmentLeaf, ErrorKind, MessagePart, UnfoldError
from retry import with_retry


# The MIME tree plus what extract_message_headers reads off the message
MESSAGE_FIELDS = "id,threadId,snippet,labelIds,payload"


@with_retry(max_attempts=3, delay_ms=1000)
def fetch_message_raw(message_id: str) -> dict[str, Any]:
    """
    Fetch a message with its full MIME payload.

    Raises:
        UnfoldError: On API failure (converted by @with_retry)
    """
    service = get_gmail_service()
    log_fetch("message", message_id, format="full")

    msg: dict[str, Any] = (
        service.users()
        .messages()
        .get(userId="me", id=message_id, format="full", fields=MESSAGE_FIELDS)
        .execute()
    )

    log_fetched("message", message_id, parts=len(msg.get("payload", {}).get("parts", [])))
    return msg


def fetch_message(message_id: str) -> dict[str, Any]:
    """
    Fetch a message, checking it actually carries a payload.

    Returns the raw response so callers can read both the headers
    (extract_message_headers) and the tree (parse_message_part).

    Raises:
        UnfoldError: On API failure, or NOT_FOUND if there's no payload
    """
    msg = fetch_message_raw(message_id)
    if "payload" not in msg:
        raise UnfoldError(ErrorKind.NOT_FOUND, f"Message {message_id} has no payload")
    return msg


def fetch_message_payload(message_id: str) -> MessagePart:
    """
    Fetch a message and parse its payload into a MessagePart tree.

    Raises:
        UnfoldError: On API failure
        MalformedTreeError: If the payload has an unusable part
    """
    return parse_message_part(fetch_message(message_id)["payload"])


@with_retry(max_attempts=3, delay_ms=1000)
def fetch_attachment(message_id: str, attachment_id: str) -> bytes:
    """
    Download attachment content by reference.

    Args:
        message_id: The message the attachment belongs to
        attachment_id: AttachmentRecord.ref from extract_message_body

    Raises:
        UnfoldError: On API failure
        LeafDecodeError: If the returned data isn't valid base64url
    """
    service = get_gmail_service()
    log_fetch("attachment", attachment_id, message=message_id)

    response = (
        service.users()
        .messages()
        .attachments()
        .get(userId="me", messageId=message_id, id=attachment_id)
        .execute()
    )

    content = decode_binary(response.get("data", ""))
    log_fetched("attachment", attachment_id, bytes=len(content))
    return content


def fetch_attachment_at_path(message_id: str, path: str) -> bytes:
    """
    Download the attachment at an index path.

    Re-fetches the payload (trees aren't kept between calls), locates the
    part, then downloads by reference or decodes inline data.

    Raises:
        UnfoldError: On API failure, or if the part isn't an attachment
        MalformedTreeError: If nothing exists at path
    """
    part = find_part(fetch_message_payload(message_id), path)
    if not isinstance(part, AttachmentLeaf):
        raise UnfoldError(
            ErrorKind.INVALID_INPUT,
            f"Part {path or '<root>'} of message {message_id} is not an attachment",
        )

    if part.ref:
        return fetch_attachment(message_id, part.ref)
    return decode_binary(part.inline_data or "")
