"""
Leaf decoders — turn encoded payloads into text or bytes.

Gmail delivers body data as base64url and leaves the bytes in whatever
charset the sender declared. Decoding is strict: a payload that doesn't
decode cleanly raises LeafDecodeError rather than being silently mangled,
so the message walker can report exactly which part was bad.
"""

import base64
import binascii
import codecs
from email.message import Message

from models import LeafDecodeError, TextLeaf


DEFAULT_CHARSET = "utf-8"


def decode_base64url(data: str) -> bytes:
    """
    Decode base64url (or standard base64) with or without padding.

    Raises:
        LeafDecodeError: On illegal characters or a truncated final quantum
    """
    cleaned = data.strip().replace("-", "+").replace("_", "/")
    if len(cleaned.rstrip("=")) % 4 == 1:
        raise LeafDecodeError(f"truncated base64 payload ({len(cleaned)} chars)")
    cleaned += "=" * (-len(cleaned) % 4)
    try:
        return base64.b64decode(cleaned, validate=True)
    except binascii.Error as e:
        raise LeafDecodeError(f"invalid base64 payload: {e}") from e


def decode_binary(data: str) -> bytes:
    """Decode attachment content as returned by messages.attachments.get."""
    return decode_base64url(data)


def charset_from_content_type(content_type: str | None) -> str:
    """
    The charset parameter of a Content-Type header value, lowercased.

    Falls back to utf-8 when the header is absent, carries no charset, or
    names a charset Python doesn't know.
    """
    if not content_type:
        return DEFAULT_CHARSET

    header = Message()
    header["Content-Type"] = content_type
    charset = header.get_content_charset()
    if not charset:
        return DEFAULT_CHARSET

    try:
        codecs.lookup(charset)
    except LookupError:
        return DEFAULT_CHARSET
    return charset


def decode_text_leaf(leaf: TextLeaf) -> str:
    """
    Decode a text leaf to a string using its declared charset.

    Raises:
        LeafDecodeError: On an unsupported transfer encoding, bad base64,
            or bytes that aren't valid in the declared charset
    """
    if leaf.encoding != "base64url":
        raise LeafDecodeError(f"unsupported transfer encoding {leaf.encoding!r}")
    if not leaf.data:
        return ""

    raw = decode_base64url(leaf.data)
    try:
        return raw.decode(leaf.charset)
    except UnicodeDecodeError as e:
        raise LeafDecodeError(
            f"{leaf.mime_type} payload is not valid {leaf.charset}: {e.reason}"
        ) from e
