from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, MutableSequence

from .attributes import CLEAN_TYPE_PATTERN
from .cell import CellMatch, TableCell

logger = logging.getLogger(__name__)


class CleanType(str, Enum):
    """Cleaning directive taken from ``data-cleantype`` on the ``<tr>`` tag.

    auto:        use the automatic settings; only useful to override another value.
    clean:       always remove the row.
    header:      treat the row as a header and show or hide it accordingly.
    keep:        always keep the row.
    normal:      treat the row as a normal row and show or hide it accordingly.
    tableheader: remove the row if the whole table goes, otherwise always keep it.
    """

    AUTO = "auto"
    CLEAN = "clean"
    HEADER = "header"
    KEEP = "keep"
    NORMAL = "normal"
    TABLEHEADER = "tableheader"

    @classmethod
    def from_open_tag(cls, open_tag: str) -> CleanType:
        match = CLEAN_TYPE_PATTERN.search(open_tag)
        if not match:
            return cls.AUTO
        try:
            return cls(match.group("cleantype").lower())
        except ValueError:
            return cls.AUTO


class RowStateError(RuntimeError):
    pass


class TableRow:
    """A ``<tr>`` and the cells that occupy its columns once spans are resolved."""

    def __init__(self, open_tag: str) -> None:
        self.open_tag = open_tag
        self.clean_type = CleanType.from_open_tag(open_tag)
        self.cells: dict[int, TableCell] = {}
        self.is_header = True
        self.has_content = False
        self.cell_count = 0
        self._populated = False

    def __repr__(self) -> str:
        return (
            f"TableRow(open_tag={self.open_tag!r}, clean_type={self.clean_type.value}, "
            f"cells={self.cell_count}/{self.get_column_count()}, "
            f"is_header={self.is_header}, has_content={self.has_content})"
        )

    def add_raw_cells(
        self,
        grid: MutableSequence[TableRow],
        row_index: int,
        raw_cells: Iterable[CellMatch],
    ) -> None:
        """Place this row's cells and project their spans into the rows below.

        Rows must be populated top to bottom: the column of each new cell is
        the first one not already claimed by a span from an earlier row.
        """
        if self._populated:
            raise RowStateError(f"row {row_index} has already been populated")
        assert grid[row_index] is self, f"grid[{row_index}] is not this row"
        self._populated = True

        col = 0
        row_count = len(grid)
        for raw_cell in raw_cells:
            while col in self.cells:
                col += 1

            cell = TableCell.from_match(raw_cell)
            self._set_cell(col, cell)
            if cell.rowspan > 1 or cell.colspan > 1:
                span_cell = TableCell.span_child(cell)
                for r in range(cell.rowspan):
                    target_row = row_index + r
                    if target_row >= row_count:
                        break
                    for c in range(cell.colspan):
                        if r or c:
                            grid[target_row]._set_cell(col + c, span_cell)

            self.is_header = self.is_header and cell.is_header
            self.has_content = self.has_content or (
                not cell.is_header and bool(cell.content.strip())
            )
            col += 1

    def decrement_rowspan(self) -> None:
        """Shrink every span that reaches into this row, once per origin."""
        seen: list[TableCell] = []
        for cell in self.cells.values():
            parent = cell.parent
            if parent is not None and not any(parent is other for other in seen):
                seen.append(parent)
                parent.decrement_rowspan()

    def get_column_count(self) -> int:
        return len(self.cells)

    def to_html(self) -> str:
        lines = [self.open_tag]
        for _, cell in sorted(self.cells.items()):
            html = cell.to_html()
            if html:
                lines.append(html)
        return "\n".join(lines) + "\n</tr>\n"

    def update_has_content(self, strip_images: bool) -> None:
        has_content = False
        for cell in self.cells.values():
            if cell.parent is None and not cell.is_header:
                # Images spanning several columns in a data row are always wanted.
                protected_image = cell.colspan > 1
                trimmed = cell.get_trimmed_content(strip_images and not protected_image)
                has_content = has_content or bool(trimmed)
        self.has_content = has_content

    def _set_cell(self, col: int, cell: TableCell) -> None:
        if col in self.cells:
            assert cell.parent is not None, f"origin cell placed over occupied column {col}"
            # Overlapping spans: the first claim on a slot wins.
            logger.debug("Column %d already occupied, span reference skipped", col)
            return
        if cell.parent is None:
            self.cell_count += 1
        self.cells[col] = cell
