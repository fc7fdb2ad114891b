"""
Projections — one accumulator per output shape.

Each projection is a DocumentVisitor that owns its own buffers and builds
its result as walk_content() feeds it events. A fresh instance per call;
nothing is shared between calls.
"""

import re

from models import DocStats, FormattedRun, Heading, Link, TableMatrix, TextRun

from .doc_tree import DocumentVisitor


PARAGRAPH_SEPARATOR = re.compile(r"\n{2,}")


class PlainTextProjection(DocumentVisitor):
    """
    All run text, concatenated.

    Section breaks add exactly one newline. A heading that produced text is
    followed by one unless that text already ended with a newline. Nothing
    is trimmed.
    """

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._heading_start = 0

    def _append(self, text: str) -> None:
        if text:
            self._parts.append(text)

    def on_text_run(self, run: TextRun) -> None:
        self._append(run.text)

    def on_section_break(self) -> None:
        self._append("\n")

    def on_heading_start(self, level: int) -> None:
        self._heading_start = len(self._parts)

    def on_heading_end(self) -> None:
        # Only a heading that produced text gets terminated
        if len(self._parts) > self._heading_start and not self._parts[-1].endswith("\n"):
            self._append("\n")

    def result(self) -> str:
        return "".join(self._parts)


class HeadingProjection(DocumentVisitor):
    """
    Ordered heading outline.

    A heading collects run text from its start until the next structural
    event. Headings whose trimmed text is empty are dropped.
    """

    def __init__(self) -> None:
        self._headings: list[Heading] = []
        self._level: int | None = None
        self._buffer: list[str] = []

    def _close(self) -> None:
        if self._level is not None:
            text = "".join(self._buffer).strip()
            if text:
                self._headings.append(Heading(level=self._level, text=text))
        self._level = None
        self._buffer = []

    def on_heading_start(self, level: int) -> None:
        self._close()
        self._level = level

    def on_text_run(self, run: TextRun) -> None:
        if self._level is not None:
            self._buffer.append(run.text)

    def on_heading_end(self) -> None:
        self._close()

    def on_section_break(self) -> None:
        self._close()

    def on_table_start(self) -> None:
        self._close()

    def on_table_cell_boundary(self) -> None:
        self._close()

    def result(self) -> list[Heading]:
        self._close()
        return self._headings


class TableProjection(DocumentVisitor):
    """
    One matrix of cell strings per top-level table.

    Only the outermost table's rows and cells shape the matrix. A nested
    table's text is folded into the enclosing cell's string.
    """

    def __init__(self) -> None:
        self._tables: list[TableMatrix] = []
        self._depth = 0
        self._table: TableMatrix = []
        self._row: list[str] = []
        self._cell: list[str] | None = None

    def on_table_start(self) -> None:
        self._depth += 1
        if self._depth == 1:
            self._table = []

    def on_row_start(self) -> None:
        if self._depth == 1:
            self._row = []

    def on_table_cell_boundary(self) -> None:
        if self._depth != 1:
            return
        if self._cell is None:
            self._cell = []
        else:
            self._row.append("".join(self._cell).strip())
            self._cell = None

    def on_text_run(self, run: TextRun) -> None:
        if self._cell is not None:
            self._cell.append(run.text)

    def on_row_end(self) -> None:
        if self._depth == 1:
            self._table.append(self._row)

    def on_table_end(self) -> None:
        if self._depth == 1:
            self._tables.append(self._table)
        self._depth -= 1

    def result(self) -> list[TableMatrix]:
        return self._tables


class LinkProjection(DocumentVisitor):
    """Every linked run as (text, url). Text is the run's own, untrimmed."""

    def __init__(self) -> None:
        self._links: list[Link] = []

    def on_link(self, text: str, url: str) -> None:
        self._links.append(Link(text=text, url=url))

    def result(self) -> list[Link]:
        return self._links


class FormattedRunProjection(DocumentVisitor):
    """One record per run, wherever it sits. Adjacent runs are never merged."""

    def __init__(self) -> None:
        self._runs: list[FormattedRun] = []

    def on_text_run(self, run: TextRun) -> None:
        self._runs.append(FormattedRun(
            text=run.text,
            bold=run.style.bold,
            italic=run.style.italic,
            underline=run.style.underline,
            link=run.style.link,
        ))

    def result(self) -> list[FormattedRun]:
        return self._runs


def compute_stats(text: str) -> DocStats:
    """
    Word, character and paragraph counts for plain text.

    Words are maximal non-whitespace runs. Characters are code points, not
    bytes. Paragraphs are non-blank spans separated by two or more newlines.
    """
    return DocStats(
        words=len(text.split()),
        characters=len(text),
        paragraphs=sum(1 for p in PARAGRAPH_SEPARATOR.split(text) if p.strip()),
    )
