"""Human-readable run summaries written to stderr."""

from __future__ import annotations

import sys
from typing import Iterable, TextIO

from lens_errors import MalformedLineError
from reduction.engine import ReductionStats


def format_graph_summary(summary: dict) -> list[str]:
    functions = summary["functions"]
    with_indirect = summary["functions_with_indirect_calls"]
    percent = summary["indirect_percent"]
    percent_text = "n/a" if percent is None else f"{round(percent, 3)}%"
    return [
        f"functions: {functions}",
        f"functions with indirect calls: {with_indirect} ({percent_text})",
    ]


def format_stats(stats: ReductionStats) -> list[str]:
    mean = stats.mean_reduction_ratio
    mean_text = "n/a (no indirect call sites processed)" if mean is None else f"{mean:.6f}"
    return [
        f"call sites: {stats.call_sites}",
        f"empty indirect calls: {stats.empty_indirect_calls}",
        f"original targets: {stats.original_targets}",
        f"reduced targets: {stats.reduced_targets}",
        f"mean reduction ratio: {mean_text}",
    ]


def format_decode_errors(errors: Iterable[MalformedLineError]) -> list[str]:
    return [f"skipped malformed {error}" for error in errors]


def emit(lines: Iterable[str], stream: TextIO | None = None) -> None:
    stream = stream or sys.stderr
    for line in lines:
        print(line, file=stream)
