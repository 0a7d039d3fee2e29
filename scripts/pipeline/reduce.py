"""Reduction pipeline: load graph, load evidence, reduce, publish.

Ordering matters for failure safety. The graph and the edges document are both
read and validated before anything is written, so a fatal input error leaves
the filesystem exactly as it was. The reduced graph is then published through
the atomic temp-file-and-rename protocol.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from callgraph.codec import read_callgraph
from lens_config import ReduceOptions
from observed.edges import ObservedEdgeIndex, load_edges_document
from outputs.facts import observed_edges_table, reduced_call_sites_table, write_fact_tables
from outputs.writers import write_callgraph
from pipeline.phases import phase
from pipeline.types import ReduceOutcome
from reduction.engine import reduce_callgraph, summarize_callgraph


def run_reduce(
    graph_path: str | os.PathLike[str],
    edges_path: str | os.PathLike[str],
    output_path: str | os.PathLike[str],
    options: ReduceOptions | dict[str, Any] | None = None,
    profiler: Any = None,
) -> ReduceOutcome:
    options = ReduceOptions.from_options(options)

    with phase(profiler, "decode_callgraph"):
        decoded = read_callgraph(graph_path, strict=options.strict)
    summary = summarize_callgraph(decoded.graph)

    with phase(profiler, "load_edges"):
        edges = load_edges_document(edges_path)
        index = ObservedEdgeIndex.from_edges(edges)

    with phase(profiler, "reduce"):
        result = reduce_callgraph(decoded.graph, index)

    with phase(profiler, "write_callgraph"):
        write_callgraph(output_path, result.graph)

    facts_registry = None
    if options.facts_dir:
        with phase(profiler, "write_facts"):
            facts_registry = write_fact_tables(
                Path(options.facts_dir),
                [reduced_call_sites_table(result.sites), observed_edges_table(edges)],
            )

    if profiler is not None:
        profiler.metadata.update(
            {
                "graph_path": str(graph_path),
                "edges_path": str(edges_path),
                "output_path": str(output_path),
                "functions": summary["functions"],
                "observed_callers": len(index),
                "observed_edges": index.edge_count,
                "skipped_lines": len(decoded.errors),
            }
        )

    return ReduceOutcome(
        summary=summary,
        result=result,
        index=index,
        decode_errors=decoded.errors,
        facts_registry=facts_registry,
    )
