#!/usr/bin/env python3
"""
CLI interface for unfold.

Usage:
    unfold doc headings --file doc.json
    unfold doc text --id <document_id>
    unfold doc metadata --id <document_id>
    unfold message --file message.json --prefer html --text

Reads a raw API response from a file (or fetches it by ID) and prints the
requested projection as JSON.
"""

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Callable

from extractors import (
    extract_formatted_runs,
    extract_headings,
    extract_links,
    extract_message_body,
    extract_message_headers,
    extract_metadata,
    extract_plain_text,
    extract_stats,
    extract_tables,
    parse_document,
    parse_message_part,
)
from logging_config import configure_logging, log_partial_errors, logger
from models import DocumentTree, ErrorKind, UnfoldError


def _items(results: list[Any]) -> list[Any]:
    return [r.to_dict() if hasattr(r, "to_dict") else r for r in results]


DOC_OPERATIONS: dict[str, Callable[[DocumentTree], Any]] = {
    "text": lambda doc: extract_plain_text(doc).to_dict(),
    "headings": lambda doc: _items(extract_headings(doc)),
    "tables": lambda doc: extract_tables(doc),
    "links": lambda doc: _items(extract_links(doc)),
    "runs": lambda doc: _items(extract_formatted_runs(doc)),
    "stats": lambda doc: extract_stats(doc).to_dict(),
    "metadata": lambda doc: extract_metadata(doc).to_dict(),
}


def _load_json(path: str) -> dict[str, Any]:
    """Read a saved API response. Unreadable or non-JSON files are bad input."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        raise UnfoldError(ErrorKind.INVALID_INPUT, f"Cannot read {path}: {e.strerror or e}") from e
    except ValueError as e:
        raise UnfoldError(ErrorKind.INVALID_INPUT, f"{path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise UnfoldError(ErrorKind.INVALID_INPUT, f"{path} does not hold a JSON object")
    return data


def cmd_doc(args: argparse.Namespace) -> Any:
    """Project a Google Doc."""
    if args.file:
        raw = _load_json(args.file)
        if args.operation == "metadata":
            return extract_metadata(raw).to_dict()
        doc = parse_document(raw)
    elif args.operation == "metadata":
        from adapters.docs import fetch_document_metadata
        return fetch_document_metadata(args.id).to_dict()
    else:
        from adapters.docs import fetch_document
        doc = fetch_document(args.id)
    return DOC_OPERATIONS[args.operation](doc)


def cmd_message(args: argparse.Namespace) -> Any:
    """Extract headers, bodies and attachment manifest from a Gmail message."""
    if args.file:
        raw = _load_json(args.file)
    else:
        from adapters.gmail import fetch_message
        raw = fetch_message(args.id)

    preference = ("html", "plain") if args.prefer == "html" else ("plain", "html")
    body = extract_message_body(parse_message_part(raw), preference)
    log_partial_errors(f"message {args.file or args.id}", body.partial_errors)

    result: dict[str, Any] = {"headers": extract_message_headers(raw).to_dict()}
    result.update(body.to_dict())
    result["preferredBody"] = body.preferred_body

    if args.text:
        from html_convert import extract_message_text
        text, warnings = extract_message_text(body)
        result["readableText"] = text
        result["warnings"] = warnings
    return result


def _add_source(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--file", help="Path to a raw API response (JSON)")
    source.add_argument("--id", help="Fetch by ID (needs a token, see UNFOLD_TOKEN_FILE)")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Project Google Docs and Gmail trees into flat shapes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    unfold doc text --file fixtures/docs/basic.json
    unfold doc tables --id 1abc123def456
    unfold message --file fixtures/gmail/multipart.json
    unfold message --id 18c2f0a1b2c3d4e5 --prefer html
    unfold message --id 18c2f0a1b2c3d4e5 --text
""",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # doc
    doc_p = subparsers.add_parser("doc", help="Project a document")
    doc_p.add_argument("operation", choices=sorted(DOC_OPERATIONS))
    _add_source(doc_p)
    doc_p.set_defaults(func=cmd_doc)

    # message
    msg_p = subparsers.add_parser("message", help="Extract message headers, bodies and attachments")
    _add_source(msg_p)
    msg_p.add_argument(
        "--prefer",
        choices=["plain", "html"],
        default="plain",
        help="Preferred body subtype (default: plain)",
    )
    msg_p.add_argument(
        "--text",
        action="store_true",
        help="Also render the preferred body as readable text (HTML via markitdown)",
    )
    msg_p.set_defaults(func=cmd_message)

    args = parser.parse_args(argv)
    configure_logging(os.environ.get("UNFOLD_LOG_LEVEL", "WARNING"))

    try:
        result = args.func(args)
    except UnfoldError as e:
        logger.error(f"{args.command} failed: {e.message}")
        print(json.dumps(e.to_dict(), indent=2))
        return 1

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
