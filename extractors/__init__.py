"""
Extractors — Pure functions for content extraction.

No API calls, no logging. Parse raw trees, walk them, return results.
Easily testable with fixtures.
"""

from .doc_tree import parse_document, walk_content, DocumentVisitor
from .docs import (
    extract_plain_text,
    extract_headings,
    extract_tables,
    extract_links,
    extract_formatted_runs,
    extract_stats,
    extract_metadata,
)
from .message import (
    parse_message_part,
    extract_message_body,
    extract_message_headers,
    find_part,
)

__all__ = [
    "parse_document",
    "walk_content",
    "DocumentVisitor",
    "extract_plain_text",
    "extract_headings",
    "extract_tables",
    "extract_links",
    "extract_formatted_runs",
    "extract_stats",
    "extract_metadata",
    "parse_message_part",
    "extract_message_body",
    "extract_message_headers",
    "find_part",
]
