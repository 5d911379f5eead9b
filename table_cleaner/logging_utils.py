from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"


def setup_file_logger(log_dir: Path, level: int = logging.INFO) -> logging.Logger:
    """Send the ``table_cleaner`` loggers to ``<log_dir>/processing.log``.

    Module loggers (``table_cleaner.row`` and friends) propagate here, so span
    conflicts reported while rows are resolved end up in the same file when
    ``level`` is DEBUG. Calling this twice for one directory adds one handler.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = (log_dir / "processing.log").absolute()
    logger = logging.getLogger("table_cleaner")
    logger.setLevel(level)

    if not any(isinstance(handler, logging.FileHandler) and handler.baseFilename == str(log_file)
               for handler in logger.handlers):
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)

    return logger
