"""
Shared test helpers for unfold.

Centralizes mock wiring and tree-building patterns that repeat across
test files.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock, seal

from models import TextRun, TextRunContainer, TextStyle, Table, TableCell, TableRow


def mock_api_chain(
    mock_service: MagicMock,
    chain: str,
    response: Any = None,
    *,
    side_effect: Any = None,
) -> MagicMock:
    """Set up a mock Google API response for a chained call.

    Each part of the chain except the last is treated as a callable method
    (traversed via .return_value). Returns the final mock method for
    assertions.

    Examples:
        mock_api_chain(service, "documents.get.execute", {"title": "Doc"})
        # equivalent to: service.documents().get().execute.return_value = {...}

        mock_api_chain(service, "users.messages.get.execute", side_effect=HttpError(...))
    """
    parts = chain.split(".")
    obj = mock_service
    for part in parts[:-1]:
        obj = getattr(obj, part).return_value
    final = getattr(obj, parts[-1])
    if side_effect is not None:
        final.side_effect = side_effect
    elif response is not None:
        final.return_value = response
    return final


def seal_service(mock_service: MagicMock) -> None:
    """Seal a mock service after all mock_api_chain() calls.

    Without seal, a renamed API method in production code silently gets a
    fresh MagicMock instead of raising AttributeError.
    """
    seal(mock_service)


# ============================================================================
# Tree builders
# ============================================================================


def para(*runs: str | TextRun, heading: int | None = None) -> TextRunContainer:
    """Paragraph from plain strings and/or prebuilt runs."""
    return TextRunContainer(
        runs=[r if isinstance(r, TextRun) else TextRun(r) for r in runs],
        heading_level=heading,
    )


def link(text: str, url: str) -> TextRun:
    return TextRun(text, TextStyle(link=url))


def table(*rows: list[Any]) -> Table:
    """Table from rows of cells. A str cell becomes one paragraph; a list is used as content."""
    return Table([
        TableRow([
            TableCell([para(cell)] if isinstance(cell, str) else list(cell))
            for cell in row
        ])
        for row in rows
    ])


def raw_paragraph(*texts: str, style: str = "NORMAL_TEXT") -> dict[str, Any]:
    """Docs API paragraph element."""
    return {
        "paragraph": {
            "elements": [{"textRun": {"content": t, "textStyle": {}}} for t in texts],
            "paragraphStyle": {"namedStyleType": style},
        }
    }


def raw_part(mime_type: str, data: str | None = None, **extra: Any) -> dict[str, Any]:
    """Gmail API leaf part."""
    body: dict[str, Any] = {"size": len(data or "")}
    if data is not None:
        body["data"] = data
    if "attachment_id" in extra:
        body["attachmentId"] = extra.pop("attachment_id")
    return {"mimeType": mime_type, "filename": extra.pop("filename", ""), "body": body, **extra}
