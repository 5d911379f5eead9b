from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from table_cleaner.cleaner import TableCleaner
from table_cleaner.config import CleanConfig
from table_cleaner.logging_utils import setup_file_logger
from table_cleaner.reporting import write_report


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Remove empty rows and tables from table markup")
    subparsers = parser.add_subparsers(dest="command", required=True)

    files_parser = subparsers.add_parser("clean-files", help="Clean every markup file in a directory")
    files_parser.add_argument("input_dir", type=Path, help="Directory of files to clean")
    files_parser.add_argument("output_dir", type=Path, help="Directory for cleaned files")
    files_parser.add_argument("--report", type=Path, default=None, help="Write a .xlsx or .csv report")

    text_parser = subparsers.add_parser("clean-text", help="Clean one file and print the result")
    text_parser.add_argument("file", type=Path, help="Markup file to clean")

    for sub in (files_parser, text_parser):
        sub.add_argument("--clean-images", action="store_true", help="Ignore images when checking for content")
        sub.add_argument("--protect-rows", type=int, default=1, help="Rows at the top of each table to keep (default 1)")
        sub.add_argument("--keep-empty-tables", action="store_true", help="Never remove a whole table")
        sub.add_argument("--verbose", action="store_true", help="Log span conflicts and per-table decisions")

    return parser.parse_args(argv)


def clean_files(args: argparse.Namespace) -> int:
    output_dir = args.output_dir
    if not args.input_dir.exists():
        raise FileNotFoundError(f"Input directory does not exist: {args.input_dir}")
    output_dir.mkdir(parents=True, exist_ok=True)
    config = CleanConfig(
        input_dir=args.input_dir,
        output_dir=output_dir,
        log_dir=output_dir / "logs",
        report_file=args.report,
        clean_images=args.clean_images,
        protect_rows=args.protect_rows,
        remove_empty_tables=not args.keep_empty_tables,
    )
    logger = setup_file_logger(config.log_dir, logging.DEBUG if args.verbose else logging.INFO)
    logger.info("Cleaning directory: %s", config.input_dir)
    cleaner = TableCleaner(config, logger)
    results = cleaner.process_directory()

    for result in results:
        for err in result.errors:
            print(f"[error] {result.source_path.name}: {err}")

    if config.report_file is not None:
        write_report(results, config.report_file)
        print(f"Report written: {config.report_file}")

    total = len(results)
    success = sum(1 for r in results if r.status != "failed")
    print(f"Done: {success}/{total} file(s)")
    print(f"Output directory: {config.output_dir}")
    return 0 if success else 1


def clean_text(args: argparse.Namespace) -> int:
    if not args.file.exists():
        raise FileNotFoundError(f"File does not exist: {args.file}")
    config = CleanConfig(
        input_dir=args.file.parent,
        output_dir=args.file.parent,
        log_dir=args.file.parent / "logs",
        clean_images=args.clean_images,
        protect_rows=args.protect_rows,
        remove_empty_tables=not args.keep_empty_tables,
    )
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s | %(name)s | %(message)s")
    cleaner = TableCleaner(config)
    cleaned, _ = cleaner.clean_text(args.file.read_text(encoding="utf-8"))
    sys.stdout.write(cleaned)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.command == "clean-files":
        return clean_files(args)
    if args.command == "clean-text":
        return clean_text(args)
    raise ValueError("Unknown command")


if __name__ == "__main__":
    sys.exit(main())
