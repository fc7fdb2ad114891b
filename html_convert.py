"""
Readable text for a message body.

HTML bodies are stripped of email cruft and converted to markdown with
markitdown, streamed from memory. Lives outside extractors/ because it
leans on a heavyweight converter and logs when it has to fall back; the
message extractor itself only ever returns raw bodies.
"""

import html as html_lib
import io
import re

from logging_config import logger
from models import MessageBody


# Email-client noise removed before conversion, applied in order
EMAIL_CRUFT: list[tuple[str, re.Pattern[str]]] = [
    # 7.<br style="display:none"/>1.<br/>26 anti-scraping trick
    ("hidden line break", re.compile(r'<br\s+style="[^"]*display:\s*none[^"]*"\s*/?>', re.I)),
    ("outlook conditional", re.compile(r"<!--\[if\s+.*?\]>.*?<!\[endif\]-->", re.I | re.S)),
    ("tracking pixel", re.compile(r"""<img[^>]*(?:width|height)=["']1["'][^>]*/?>""", re.I)),
    ("hidden element", re.compile(r'<([a-z0-9]+)[^>]*style="[^"]*display:\s*none[^"]*"[^>]*>.*?</\1>', re.I | re.S)),
    ("spacer cell", re.compile(r"<td[^>]*>(?:\s|&nbsp;)*</td>", re.I)),
    ("empty block", re.compile(r"<(p|div)[^>]*>(?:\s|&nbsp;)*</\1>", re.I)),
]

_TAG = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")


def clean_email_html(html: str) -> str:
    for _name, pattern in EMAIL_CRUFT:
        html = pattern.sub("", html)
    return html


def strip_tags(html: str) -> str:
    """Last-resort text: drop tags, unescape entities, collapse whitespace."""
    text = html_lib.unescape(_TAG.sub(" ", html))
    return _WHITESPACE.sub(" ", text).strip()


def html_to_markdown(html: str) -> tuple[str, bool]:
    """
    Convert an HTML body to markdown.

    Returns:
        Tuple of (text, used_fallback). used_fallback is True when
        markitdown produced nothing usable and tags were stripped instead.
    """
    if not html.strip():
        return "", False

    from markitdown import MarkItDown, StreamInfo

    stream = io.BytesIO(html.encode("utf-8"))
    info = StreamInfo(mimetype="text/html", extension=".html", charset="utf-8")
    try:
        markdown = MarkItDown().convert_stream(stream, stream_info=info).markdown
    except Exception as e:
        logger.warning(f"markitdown failed on HTML body, stripping tags: {e}")
        markdown = ""

    if markdown.strip():
        return markdown.strip(), False
    return strip_tags(html), True


def extract_message_text(body: MessageBody) -> tuple[str, list[str]]:
    """
    Readable text for a message, following body.preference.

    Plain bodies are returned trimmed; HTML bodies are cleaned and
    converted. Partial decode failures become warnings.

    Returns:
        Tuple of (text, warnings_list)
    """
    warnings = [
        f"Part {e.path or '<root>'} could not be decoded: {e.reason}"
        for e in body.partial_errors
    ]

    subtype = body.preferred_subtype
    if subtype is None:
        warnings.append("Message has no body content")
        return "", warnings
    if subtype == "plain":
        return body.text_body.strip(), warnings

    text, used_fallback = html_to_markdown(clean_email_html(body.html_body))
    if used_fallback:
        warnings.append("HTML conversion produced no text, used tag stripping")
    return text, warnings
