from __future__ import annotations

from pathlib import Path

import pandas as pd

from .cleaner import FileCleanResult


def build_summary_dataframe(results: list[FileCleanResult]) -> pd.DataFrame:
    records = []
    for result in results:
        records.append(
            {
                "file": result.source_path.name,
                "status": result.status,
                "tables": len(result.tables),
                "tables_removed": sum(1 for table in result.tables if table.table_removed),
                "rows_total": sum(table.rows_total for table in result.tables),
                "rows_removed": sum(table.rows_removed for table in result.tables),
                "output": str(result.output_path) if result.output_path else "",
                "errors": "; ".join(result.errors),
            }
        )
    return pd.DataFrame(records)


def build_detail_dataframe(results: list[FileCleanResult]) -> pd.DataFrame:
    detail_records = []
    for result in results:
        for table in result.tables:
            detail_records.append(
                {
                    "file": result.source_path.name,
                    "table": table.index,
                    "columns": table.columns,
                    "rows_total": table.rows_total,
                    "rows_removed": table.rows_removed,
                    "table_removed": table.table_removed,
                }
            )
    return pd.DataFrame(
        detail_records,
        columns=["file", "table", "columns", "rows_total", "rows_removed", "table_removed"],
    )


def write_report(results: list[FileCleanResult], output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    summary_df = build_summary_dataframe(results)
    detail_df = build_detail_dataframe(results)

    if output_path.suffix.lower() != ".xlsx":
        summary_df.to_csv(output_path, index=False, encoding="utf-8-sig")
        detail_path = output_path.with_name(f"{output_path.stem}_tables{output_path.suffix}")
        detail_df.to_csv(detail_path, index=False, encoding="utf-8-sig")
        return

    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        summary_df.to_excel(writer, sheet_name="Summary", index=False)
        detail_df.to_excel(writer, sheet_name="Tables", index=False)
