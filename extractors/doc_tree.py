"""
Document tree — parse Docs API responses and walk the result.

parse_document() turns a documents.get response into DocumentTree nodes.
walk_content() traverses those nodes in document order and reports what it
finds to a DocumentVisitor. Projections (see projections.py) are visitors.

Parsing and the walk both use explicit work stacks, so deeply nested tables
don't hit the interpreter's recursion limit.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterator

from models import (
    ContentNode,
    ContentsBlock,
    DocumentTree,
    MalformedTreeError,
    StructuralBreak,
    Table,
    TableCell,
    TableRow,
    TextRun,
    TextRunContainer,
    TextStyle,
    format_path,
)


HEADING_STYLES = {f"HEADING_{n}": n for n in range(1, 7)}

# Paragraph elements that are recognised but carry no run text
TEXTLESS_PARAGRAPH_ELEMENTS = frozenset({
    "footnoteReference",
    "inlineObjectElement",
    "horizontalRule",
    "pageBreak",
    "columnBreak",
    "equation",
    "autoText",
    "person",
    "richLink",
    "dateElement",
})

_POSITION_KEYS = ("startIndex", "endIndex")


# =============================================================================
# PARSING
# =============================================================================


def parse_document(raw: dict[str, Any]) -> DocumentTree:
    """
    Build a DocumentTree from a Docs API documents.get response.

    Handles both the modern multi-tab format (tabs[].documentTab.body) and
    the legacy single-body format. Tabs, including child tabs, are
    flattened in reading order.

    Raises:
        MalformedTreeError: On unknown element kinds or missing child lists
    """
    tabs = raw.get("tabs")
    content: list[ContentNode] = []

    if tabs:
        for body, path in _tab_bodies(tabs):
            content.extend(_parse_body(body, path))
    else:
        content = _parse_body(raw.get("body"), "body")

    return DocumentTree(
        title=raw.get("title", "Untitled"),
        document_id=raw.get("documentId", ""),
        content=content,
        revision_id=raw.get("revisionId"),
    )


def _tab_bodies(tabs: list[dict[str, Any]]) -> Iterator[tuple[dict[str, Any] | None, str]]:
    """Each tab's body with its path, child tabs right after their parent."""
    stack = [(tab, f"tabs.{i}") for i, tab in enumerate(tabs)]
    stack.reverse()

    while stack:
        tab, path = stack.pop()
        document_tab = tab.get("documentTab")
        if document_tab is None:
            raise MalformedTreeError("tab", path, "missing documentTab")
        yield document_tab.get("body"), f"{path}.documentTab.body"

        children = [(child, f"{path}.childTabs.{i}") for i, child in enumerate(tab.get("childTabs", []))]
        stack.extend(reversed(children))


def _parse_body(body: dict[str, Any] | None, path: str) -> list[ContentNode]:
    if body is None or "content" not in body:
        raise MalformedTreeError("body", path, "missing content")
    return _parse_elements(body["content"], f"{path}.content")


def _element_kind(element: dict[str, Any]) -> str:
    """The element's kind is its one non-positional key."""
    return next((k for k in element if k not in _POSITION_KEYS), "<empty>")


# A raw element waiting to be parsed: (element, its path, the list it goes in)
_Pending = tuple[dict[str, Any], str, list[ContentNode]]


def _pending(elements: list[dict[str, Any]], path: str, out: list[ContentNode]) -> list[_Pending]:
    return [(element, f"{path}.{i}", out) for i, element in enumerate(elements)]


def _parse_elements(elements: list[dict[str, Any]], path: str) -> list[ContentNode]:
    """
    Parse a content list and everything nested inside it.

    Tables and tables of contents are appended empty and their content
    lists filled as nested elements come off the stack, which keeps
    parsing iterative and errors in document order.
    """
    nodes: list[ContentNode] = []
    stack = _pending(elements, path, nodes)
    stack.reverse()

    while stack:
        element, here, out = stack.pop()
        kind = _element_kind(element)

        if kind == "paragraph":
            out.append(_parse_paragraph(element["paragraph"], f"{here}.paragraph"))
        elif kind == "sectionBreak":
            out.append(StructuralBreak())
        elif kind == "table":
            table, nested = _parse_table_shell(element["table"], f"{here}.table")
            out.append(table)
            stack.extend(reversed(nested))
        elif kind == "tableOfContents":
            toc = element["tableOfContents"]
            if "content" not in toc:
                raise MalformedTreeError(kind, here, "missing content")
            block = ContentsBlock([])
            out.append(block)
            stack.extend(reversed(_pending(toc["content"], f"{here}.tableOfContents.content", block.content)))
        else:
            raise MalformedTreeError(kind, here)

    return nodes


def _parse_paragraph(paragraph: dict[str, Any], path: str) -> TextRunContainer:
    if "elements" not in paragraph:
        raise MalformedTreeError("paragraph", path, "missing elements")

    runs: list[TextRun] = []
    for i, elem in enumerate(paragraph["elements"]):
        kind = _element_kind(elem)
        if kind == "textRun":
            text_run = elem["textRun"]
            runs.append(TextRun(
                text=text_run.get("content", ""),
                style=_parse_style(text_run.get("textStyle", {})),
            ))
        elif kind not in TEXTLESS_PARAGRAPH_ELEMENTS:
            raise MalformedTreeError(kind, f"{path}.elements.{i}")

    named_style = paragraph.get("paragraphStyle", {}).get("namedStyleType", "NORMAL_TEXT")
    return TextRunContainer(runs=runs, heading_level=HEADING_STYLES.get(named_style))


def _parse_style(text_style: dict[str, Any]) -> TextStyle:
    # Internal links (headingId, bookmarkId) have no url
    return TextStyle(
        bold=bool(text_style.get("bold", False)),
        italic=bool(text_style.get("italic", False)),
        underline=bool(text_style.get("underline", False)),
        link=text_style.get("link", {}).get("url"),
    )


def _parse_table_shell(table: dict[str, Any], path: str) -> tuple[Table, list[_Pending]]:
    """A Table with empty cells, plus the cell elements still to parse into them."""
    if "tableRows" not in table:
        raise MalformedTreeError("table", path, "missing tableRows")

    rows: list[TableRow] = []
    nested: list[_Pending] = []
    for r, row in enumerate(table["tableRows"]):
        row_path = f"{path}.tableRows.{r}"
        if "tableCells" not in row:
            raise MalformedTreeError("tableRow", row_path, "missing tableCells")

        cells: list[TableCell] = []
        for c, cell in enumerate(row["tableCells"]):
            cell_path = f"{row_path}.tableCells.{c}"
            if "content" not in cell:
                raise MalformedTreeError("tableCell", cell_path, "missing content")
            parsed = TableCell([])
            cells.append(parsed)
            nested.extend(_pending(cell["content"], f"{cell_path}.content", parsed.content))
        rows.append(TableRow(cells))

    return Table(rows), nested


# =============================================================================
# WALKING
# =============================================================================


class DocumentVisitor:
    """
    Receives traversal events in document order. Every hook is a no-op,
    so a projection only overrides what it cares about.

    Cell boundaries fire twice per cell, once before its content and once
    after.
    """

    def on_text_run(self, run: TextRun) -> None:
        pass

    def on_link(self, text: str, url: str) -> None:
        pass

    def on_heading_start(self, level: int) -> None:
        pass

    def on_heading_end(self) -> None:
        pass

    def on_section_break(self) -> None:
        pass

    def on_table_start(self) -> None:
        pass

    def on_row_start(self) -> None:
        pass

    def on_table_cell_boundary(self) -> None:
        pass

    def on_row_end(self) -> None:
        pass

    def on_table_end(self) -> None:
        pass


@dataclass(frozen=True)
class _Visit:
    node: ContentNode
    path: tuple[int, ...]


# Work items: a node still to visit, or a deferred event
_Step = _Visit | Callable[[], None]


def walk_content(nodes: list[ContentNode], visitor: DocumentVisitor) -> None:
    """
    Traverse nodes depth-first, left to right, feeding visitor.

    Raises:
        MalformedTreeError: If a node isn't one of the known ContentNode types
    """
    stack: list[_Step] = _visits(nodes, ())
    stack.reverse()

    while stack:
        step = stack.pop()
        if not isinstance(step, _Visit):
            step()
            continue

        node, path = step.node, step.path
        if isinstance(node, TextRunContainer):
            _emit_container(node, visitor)
        elif isinstance(node, StructuralBreak):
            visitor.on_section_break()
        elif isinstance(node, Table):
            stack.extend(reversed(_table_steps(node, path, visitor)))
        elif isinstance(node, ContentsBlock):
            stack.extend(reversed(_visits(node.content, path)))
        else:
            raise MalformedTreeError(type(node).__name__, format_path(path))


def _visits(nodes: list[ContentNode], parent: tuple[int, ...]) -> list[_Step]:
    return [_Visit(node, parent + (i,)) for i, node in enumerate(nodes)]


def _emit_container(container: TextRunContainer, visitor: DocumentVisitor) -> None:
    heading = container.heading_level is not None
    if heading:
        visitor.on_heading_start(container.heading_level)

    for run in container.runs:
        visitor.on_text_run(run)
        if run.style.link:
            visitor.on_link(run.text, run.style.link)

    if heading:
        visitor.on_heading_end()


def _table_steps(table: Table, path: tuple[int, ...], visitor: DocumentVisitor) -> list[_Step]:
    """Lay out a table's events and cell visits in order."""
    steps: list[_Step] = [visitor.on_table_start]
    for r, row in enumerate(table.rows):
        steps.append(visitor.on_row_start)
        for c, cell in enumerate(row.cells):
            steps.append(visitor.on_table_cell_boundary)
            steps.extend(_visits(cell.content, path + (r, c)))
            steps.append(visitor.on_table_cell_boundary)
        steps.append(visitor.on_row_end)
    steps.append(visitor.on_table_end)
    return steps
