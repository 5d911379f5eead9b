from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True)
class CleanConfig:
    input_dir: Path
    output_dir: Path
    log_dir: Path
    report_file: Path | None = None
    clean_images: bool = False
    protect_rows: int = 1  # top rows kept for as long as the table survives
    remove_empty_tables: bool = True
    suffixes: tuple[str, ...] = (".html", ".htm", ".txt", ".wiki")
