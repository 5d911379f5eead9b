from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List, Sequence

from .row import TableRow

TABLE_PATTERN = re.compile(
    r"(?P<open><table\b[^>]*>)(?P<body>.*?)(?P<close></table\s*>)",
    re.IGNORECASE | re.DOTALL,
)
ROW_PATTERN = re.compile(
    r"(?P<open><tr\b[^>]*>)(?P<body>.*?)"
    r"(?:</tr\s*>|(?=<tr\b)|(?=</t(?:head|body|foot)\s*>)|\Z)",
    re.IGNORECASE | re.DOTALL,
)
CELL_PATTERN = re.compile(
    r"<(?P<name>t[dh])\b(?P<attribs>[^>]*)>(?P<content>.*?)"
    r"(?:</t[dh]\s*>|(?=<t[dh]\b)|\Z)",
    re.IGNORECASE | re.DOTALL,
)


@dataclass(slots=True)
class RowFragment:
    """The raw pieces of one ``<tr>``, positioned relative to the table body."""

    open_tag: str
    cells: list[re.Match]
    start: int
    end: int


def iter_tables(text: str) -> Iterator[re.Match]:
    return TABLE_PATTERN.finditer(text)


def iter_row_fragments(table_body: str) -> Iterator[RowFragment]:
    for row_match in ROW_PATTERN.finditer(table_body):
        yield RowFragment(
            open_tag=row_match.group("open"),
            cells=list(CELL_PATTERN.finditer(row_match.group("body"))),
            start=row_match.start(),
            end=row_match.end(),
        )


def build_grid(fragments: Sequence[RowFragment]) -> List[TableRow]:
    """Create every row first, then populate them top to bottom.

    All rows must exist before population starts so that spans can be written
    into the rows below the one being populated.
    """
    grid = [TableRow(fragment.open_tag) for fragment in fragments]
    for index, (row, fragment) in enumerate(zip(grid, fragments)):
        row.add_raw_cells(grid, index, fragment.cells)
    return grid


def parse_table_html(html: str) -> List[TableRow]:
    """Resolve the rows of a single table (or a bare run of ``<tr>`` markup)."""
    match = TABLE_PATTERN.search(html)
    body = match.group("body") if match else html
    return build_grid(list(iter_row_fragments(body)))
