"""Summarize reduction fact tables with DuckDB.

The parquet tables listed in `<facts_dir>/index.json` are exposed as views on
an in-memory connection, so the same queries can be reproduced from the duckdb
shell against the files on disk.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import duckdb

from outputs.facts import FACTS_INDEX_NAME

SUMMARY_SQL = """
SELECT
    count(*) AS indirect_sites,
    coalesce(sum(CASE WHEN is_empty THEN 1 ELSE 0 END), 0) AS empty_sites,
    coalesce(sum(original_count), 0) AS original_targets,
    coalesce(sum(reduced_count), 0) AS reduced_targets,
    count(DISTINCT defining_file || '$' || function_name) AS functions
FROM reduced_call_sites
"""

TOP_FUNCTIONS_SQL = """
SELECT
    defining_file,
    function_name,
    count(*) AS sites,
    sum(original_count) AS original_targets,
    sum(reduced_count) AS reduced_targets,
    sum(CASE WHEN is_empty THEN 1 ELSE 0 END) AS empty_sites
FROM reduced_call_sites
GROUP BY defining_file, function_name
ORDER BY reduced_targets DESC, original_targets DESC, defining_file, function_name
LIMIT {limit}
"""


def _sql_string(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _load_registry(facts_dir: Path) -> dict[str, Any]:
    index_path = facts_dir / FACTS_INDEX_NAME
    if not index_path.is_file():
        raise FileNotFoundError(f"{FACTS_INDEX_NAME} not found under {facts_dir}")
    data = json.loads(index_path.read_text())
    if not isinstance(data, dict) or not isinstance(data.get("tables"), list):
        raise ValueError(f"{index_path} is missing its tables list")
    return data


def connect_facts(facts_dir: str | Path) -> duckdb.DuckDBPyConnection:
    facts_dir = Path(facts_dir).resolve()
    registry = _load_registry(facts_dir)
    con = duckdb.connect(database=":memory:")
    for entry in registry["tables"]:
        if not isinstance(entry, dict):
            continue
        name = entry.get("name")
        paths = entry.get("paths")
        if not isinstance(name, str) or not name.strip():
            continue
        if not isinstance(paths, list) or not paths:
            continue
        abs_paths = [str(facts_dir / path) for path in paths if isinstance(path, str) and path.strip()]
        if not abs_paths:
            continue
        if len(abs_paths) == 1:
            source = f"read_parquet({_sql_string(abs_paths[0])})"
        else:
            source = "read_parquet([" + ", ".join(_sql_string(p) for p in abs_paths) + "])"
        con.execute(f"CREATE OR REPLACE VIEW {name} AS SELECT * FROM {source}")
    return con


def _run_sql(con: duckdb.DuckDBPyConnection, sql: str) -> tuple[list[str], list[tuple[Any, ...]]]:
    result = con.execute(sql)
    columns = [desc[0] for desc in result.description] if result.description else []
    rows = result.fetchall() if columns else []
    return columns, rows


def _rows_to_dicts(columns: list[str], rows: list[tuple[Any, ...]]) -> list[dict[str, Any]]:
    return [{col: value for col, value in zip(columns, row)} for row in rows]


def build_report(facts_dir: str | Path, *, top: int = 20) -> dict[str, Any]:
    con = connect_facts(facts_dir)
    try:
        columns, rows = _run_sql(con, SUMMARY_SQL)
        summary = _rows_to_dicts(columns, rows)[0]
        columns, rows = _run_sql(con, TOP_FUNCTIONS_SQL.format(limit=max(0, int(top))))
        functions = _rows_to_dicts(columns, rows)
    finally:
        con.close()
    return {"summary": summary, "top_functions": functions}


def _markdown_table(headers: list[str], rows: list[list[str]]) -> str:
    if not headers:
        return ""
    divider = ["---"] * len(headers)
    header_line = "| " + " | ".join(headers) + " |"
    divider_line = "| " + " | ".join(divider) + " |"
    lines = [header_line, divider_line]
    for row in rows:
        lines.append("| " + " | ".join(row) + " |")
    return "\n".join(lines)


def render_markdown(report: dict[str, Any]) -> str:
    summary = report["summary"]
    lines = ["# Call target reduction", ""]
    for key in ("functions", "indirect_sites", "empty_sites", "original_targets", "reduced_targets"):
        lines.append(f"- {key}: {summary.get(key)}")
    lines.append("")
    functions = report["top_functions"]
    if functions:
        headers = list(functions[0].keys())
        table_rows = [[str(item[key]) for key in headers] for item in functions]
        lines.append(_markdown_table(headers, table_rows))
    else:
        lines.append("_no indirect call sites_")
    return "\n".join(lines) + "\n"
