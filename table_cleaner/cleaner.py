from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Sequence

from tqdm import tqdm

from .config import CleanConfig
from .row import CleanType, TableRow
from .table_parser import TABLE_PATTERN, RowFragment, build_grid, iter_row_fragments, iter_tables

ROLE_CLEAN = "clean"
ROLE_HEADER = "header"
ROLE_KEEP = "keep"
ROLE_NORMAL = "normal"
ROLE_PROTECTED = "protected"
ROLE_TABLEHEADER = "tableheader"


@dataclass(slots=True)
class TableCleanResult:
    index: int
    html: str
    rows_total: int
    rows_removed: int
    columns: int
    table_removed: bool = False

    @property
    def changed(self) -> bool:
        return self.table_removed or self.rows_removed > 0


@dataclass(slots=True)
class FileCleanResult:
    source_path: Path
    output_path: Path | None
    tables: list[TableCleanResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    status: str = "success"


class TableCleaner:
    """Drops empty rows, orphaned headers and empty tables from markup."""

    def __init__(self, config: CleanConfig, logger: logging.Logger | None = None) -> None:
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

    def process_directory(
        self,
        progress_callback: Callable[[int, int, Path], None] | None = None,
    ) -> list[FileCleanResult]:
        source_paths = sorted(
            path for path in self.config.input_dir.iterdir()
            if path.is_file() and path.suffix.lower() in self.config.suffixes
        )
        if not source_paths:
            raise FileNotFoundError(f"No markup files found in {self.config.input_dir}")

        self.config.output_dir.mkdir(parents=True, exist_ok=True)
        results: list[FileCleanResult] = []

        total = len(source_paths)
        iterator: Iterable[Path]
        if progress_callback is None:
            iterator = tqdm(source_paths, desc="Cleaning", unit="file")
        else:
            iterator = source_paths

        for idx, source_path in enumerate(iterator, start=1):
            results.append(self.process_file(source_path))
            if progress_callback is not None:
                progress_callback(idx, total, source_path)
        return results

    def process_file(self, source_path: Path) -> FileCleanResult:
        output_path = self.config.output_dir / source_path.name
        try:
            text = source_path.read_text(encoding="utf-8")
            cleaned, tables = self.clean_text(text)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(cleaned, encoding="utf-8")
        except Exception as exc:  # noqa: BLE001
            msg = f"Cleaning failed: {exc}"
            self.logger.exception("[%s] %s", source_path.name, msg)
            return FileCleanResult(
                source_path=source_path,
                output_path=None,
                errors=[msg],
                status="failed",
            )

        status = "success" if tables else "no_tables"
        self.logger.info(
            "[%s] %d table(s), %d removed, %d row(s) removed, output: %s",
            source_path.name,
            len(tables),
            sum(1 for table in tables if table.table_removed),
            sum(table.rows_removed for table in tables),
            output_path,
        )
        return FileCleanResult(
            source_path=source_path,
            output_path=output_path,
            tables=tables,
            status=status,
        )

    def clean_text(self, text: str) -> tuple[str, list[TableCleanResult]]:
        pieces: list[str] = []
        results: list[TableCleanResult] = []
        pos = 0
        for index, match in enumerate(iter_tables(text)):
            result = self._clean_table_match(match, index)
            results.append(result)
            pieces.append(text[pos:match.start()])
            pieces.append(result.html)
            pos = match.end()
        pieces.append(text[pos:])
        return "".join(pieces), results

    def clean_table(self, table_html: str, index: int = 0) -> TableCleanResult:
        match = TABLE_PATTERN.search(table_html)
        if match is None:
            raise ValueError("No <table> element found")
        return self._clean_table_match(match, index)

    def _clean_table_match(self, match: re.Match, index: int) -> TableCleanResult:
        body = match.group("body")
        fragments = list(iter_row_fragments(body))
        rows = build_grid(fragments)
        columns = max((row.get_column_count() for row in rows), default=0)
        if self.config.clean_images:
            for row in rows:
                row.update_has_content(True)

        roles = [self._row_role(row, idx) for idx, row in enumerate(rows)]
        survives = any(
            role == ROLE_KEEP or (role in (ROLE_NORMAL, ROLE_PROTECTED) and row.has_content)
            for row, role in zip(rows, roles)
        )
        if not survives and self.config.remove_empty_tables:
            self.logger.debug("Table %d has no content, removed", index)
            return TableCleanResult(
                index=index,
                html="",
                rows_total=len(rows),
                rows_removed=len(rows),
                columns=columns,
                table_removed=True,
            )

        wanted = self._select_rows(rows, roles)
        removed: set[int] = set()
        # Bottom-up so that removing lower rows shrinks the spans of the rows above first.
        for idx in reversed(range(len(rows))):
            if wanted[idx]:
                continue
            row = rows[idx]
            if self._spans_surviving_rows(rows, idx, removed):
                self.logger.debug("Table %d row %d still spans rows below, kept", index, idx)
                continue
            row.decrement_rowspan()
            removed.add(idx)

        if not removed:
            html = match.group(0)
        else:
            rebuilt = self._rebuild_body(body, fragments, rows, removed)
            html = f"{match.group('open')}\n{rebuilt}{match.group('close')}"
            self.logger.debug("Table %d: %d of %d row(s) removed", index, len(removed), len(rows))
        return TableCleanResult(
            index=index,
            html=html,
            rows_total=len(rows),
            rows_removed=len(removed),
            columns=columns,
        )

    @staticmethod
    def _spans_surviving_rows(rows: Sequence[TableRow], idx: int, removed: set[int]) -> bool:
        """True if a kept row below still holds a span reference to an origin in row ``idx``."""
        origins = [cell for cell in rows[idx].cells.values() if cell.parent is None and cell.rowspan > 1]
        if not origins:
            return False
        for below in range(idx + 1, len(rows)):
            if below in removed:
                continue
            for cell in rows[below].cells.values():
                if any(cell.parent is origin for origin in origins):
                    return True
        return False

    def _row_role(self, row: TableRow, idx: int) -> str:
        clean_type = row.clean_type
        if clean_type == CleanType.AUTO:
            if idx < self.config.protect_rows:
                return ROLE_PROTECTED
            # A row made only of span references from above is not a header.
            if row.is_header and row.cell_count > 0:
                return ROLE_HEADER
            return ROLE_NORMAL
        return {
            CleanType.CLEAN: ROLE_CLEAN,
            CleanType.HEADER: ROLE_HEADER,
            CleanType.KEEP: ROLE_KEEP,
            CleanType.NORMAL: ROLE_NORMAL,
            CleanType.TABLEHEADER: ROLE_TABLEHEADER,
        }[clean_type]

    def _select_rows(self, rows: Sequence[TableRow], roles: Sequence[str]) -> list[bool]:
        """A header is wanted only if some wanted row follows it before the next header."""
        wanted = [False] * len(rows)
        pending_headers: list[int] = []
        previous_role: str | None = None
        for idx, (row, role) in enumerate(zip(rows, roles)):
            if role == ROLE_HEADER:
                if previous_role != ROLE_HEADER:
                    pending_headers = []
                pending_headers.append(idx)
            elif role in (ROLE_PROTECTED, ROLE_TABLEHEADER):
                wanted[idx] = True
            elif role == ROLE_KEEP or (role == ROLE_NORMAL and row.has_content):
                wanted[idx] = True
                for header_idx in pending_headers:
                    wanted[header_idx] = True
                pending_headers = []
            previous_role = role
        return wanted

    def _rebuild_body(
        self,
        body: str,
        fragments: Sequence[RowFragment],
        rows: Sequence[TableRow],
        removed: set[int],
    ) -> str:
        pieces: list[str] = []
        pos = 0
        for idx, (fragment, row) in enumerate(zip(fragments, rows)):
            self._append_gap(pieces, body[pos:fragment.start])
            if idx not in removed:
                pieces.append(row.to_html())
            pos = fragment.end
        self._append_gap(pieces, body[pos:])
        return "".join(pieces)

    @staticmethod
    def _append_gap(pieces: list[str], gap: str) -> None:
        # Whitespace between rows is dropped; to_html() supplies the line breaks.
        gap = gap.strip()
        if gap:
            pieces.append(gap + "\n")
