"""Parquet fact tables describing a reduction run.

The tables are for offline inspection (`callgraph-lens report`, or DuckDB
directly); the reduced call graph file stays the authoritative output.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

from lens_config import FACTS_SCHEMA
from observed.edges import Edge
from outputs.io import atomic_publish, write_json
from pipeline.types import FactTable
from reduction.engine import SiteReduction
from symbols import normalize_symbol

FACTS_INDEX_NAME = "index.json"


def _arrow_type(type_name: str):
    import pyarrow as pa

    if type_name == "string":
        return pa.string()
    if type_name == "int64":
        return pa.int64()
    if type_name == "bool":
        return pa.bool_()
    if type_name == "list<string>":
        return pa.list_(pa.string())
    raise ValueError(f"Unsupported fact column type: {type_name}")


def reduced_call_sites_table(sites: Iterable[SiteReduction]) -> FactTable:
    rows = [
        {
            "site_index": idx,
            "defining_file": site.defining_file,
            "function_name": site.function,
            "line": site.position[0],
            "col": site.position[1],
            "original_count": site.original_count,
            "reduced_count": site.reduced_count,
            "is_empty": site.empty,
            "targets": list(site.targets),
        }
        for idx, site in enumerate(sites)
    ]
    return FactTable(
        name="reduced_call_sites",
        rows=rows,
        primary_key=["site_index"],
        schema=[
            ("site_index", "int64"),
            ("defining_file", "string"),
            ("function_name", "string"),
            ("line", "int64"),
            ("col", "int64"),
            ("original_count", "int64"),
            ("reduced_count", "int64"),
            ("is_empty", "bool"),
            ("targets", "list<string>"),
        ],
        description="One row per indirect call site with its candidate counts before and after reduction.",
    )


def observed_edges_table(edges: Iterable[Edge]) -> FactTable:
    rows = [
        {
            "caller": caller,
            "callee": callee,
            "caller_normalized": normalize_symbol(caller),
            "callee_normalized": normalize_symbol(callee),
        }
        for caller, callee in sorted(set(edges))
    ]
    return FactTable(
        name="observed_edges",
        rows=rows,
        primary_key=["caller", "callee"],
        schema=[
            ("caller", "string"),
            ("callee", "string"),
            ("caller_normalized", "string"),
            ("callee_normalized", "string"),
        ],
        description="Raw runtime edges with the normalized names used for matching.",
    )


def write_fact_tables(facts_dir: Path, tables: Iterable[FactTable]) -> dict[str, Any]:
    import pyarrow as pa
    import pyarrow.parquet as pq

    facts_dir = Path(facts_dir)

    registry_tables: list[dict[str, Any]] = []
    for table in tables:
        schema_fields = [
            pa.field(name, _arrow_type(type_name), nullable=True)
            for name, type_name in table.schema
        ]
        schema = pa.schema(schema_fields)
        arrow_table = pa.Table.from_pylist(table.rows, schema=schema)
        filename = f"{table.name}.parquet"
        atomic_publish(
            facts_dir / filename,
            lambda temp_path, data=arrow_table: pq.write_table(data, temp_path),
        )
        registry_tables.append(
            {
                "name": table.name,
                "version": table.version,
                "primary_key": list(table.primary_key),
                "paths": [filename],
                "schema": [
                    {"name": name, "type": type_name}
                    for name, type_name in table.schema
                ],
                "row_count": arrow_table.num_rows,
                "description": table.description,
            }
        )

    registry_tables.sort(key=lambda entry: entry.get("name") or "")
    registry = {
        "schema": FACTS_SCHEMA,
        "tables": registry_tables,
        "table_count": len(registry_tables),
    }
    write_json(facts_dir / FACTS_INDEX_NAME, registry)
    return registry
