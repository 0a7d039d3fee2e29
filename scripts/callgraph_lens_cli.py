#!/usr/bin/env python3
"""Reduce indirect call targets in a points-to call graph using runtime evidence."""

from __future__ import annotations

import argparse
import json
import sys

from callgraph.codec import read_callgraph
from lens_config import (
    CALLGRAPH_LENS_VERSION,
    DEFAULT_EDGES_DATABASE,
    DEFAULT_REPORT_TOP,
    ReduceOptions,
)
from lens_errors import LensError
from lens_profile import LensProfiler
from observed.edges import load_edges_document
from observed.store import EdgeStore
from pipeline.reduce import run_reduce
from reduction.diagnostics import emit, format_decode_errors, format_graph_summary, format_stats
from reduction.report import build_report, render_markdown
from reduction.verify import verify_reduction


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="callgraph-lens", description=__doc__)
    parser.add_argument("--version", action="version", version=CALLGRAPH_LENS_VERSION)
    sub = parser.add_subparsers(dest="command", required=True)

    reduce_parser = sub.add_parser("reduce", help="Prune indirect call targets to observed edges.")
    reduce_parser.add_argument("graph", help="Input call graph (e.g. ciltrees/calls.steen)")
    reduce_parser.add_argument("edges", help="Observed edges JSON (missing file = no evidence)")
    reduce_parser.add_argument("output", help="Where to publish the reduced call graph")
    reduce_parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Abort on the first malformed line instead of skipping it.",
    )
    reduce_parser.add_argument(
        "--facts",
        default=None,
        help="Optional directory for parquet fact tables.",
    )
    reduce_parser.add_argument(
        "--profile",
        default=None,
        help="Optional path for a phase timing JSON file.",
    )

    merge_parser = sub.add_parser("merge-edges", help="Union edges documents into a persistent store.")
    merge_parser.add_argument(
        "--store",
        default=DEFAULT_EDGES_DATABASE,
        help="Edge store JSON file, created if missing (default: %(default)s)",
    )
    merge_parser.add_argument("documents", nargs="+", help="Edges documents to merge in")

    verify_parser = sub.add_parser("verify", help="Check a reduced graph against its original.")
    verify_parser.add_argument("original")
    verify_parser.add_argument("reduced")

    report_parser = sub.add_parser("report", help="Summarize parquet facts from a reduce run.")
    report_parser.add_argument("facts", help="Facts directory written by `reduce --facts`")
    report_parser.add_argument(
        "--top",
        type=int,
        default=DEFAULT_REPORT_TOP,
        help="Number of functions to list (default: %(default)s)",
    )
    report_parser.add_argument(
        "--format",
        choices=("markdown", "json"),
        default="markdown",
        help="Output format (default: %(default)s)",
    )
    return parser.parse_args(argv)


def _cmd_reduce(args: argparse.Namespace) -> int:
    raw_options = {"facts_dir": args.facts, "profile_path": args.profile}
    if args.strict is not None:
        raw_options["strict"] = args.strict
    options = ReduceOptions.from_options(raw_options)
    profiler = None
    if options.profile_enabled:
        profiler = LensProfiler(options.profile_path or f"{args.output}.profile.json")

    outcome = run_reduce(args.graph, args.edges, args.output, options, profiler=profiler)

    emit(format_decode_errors(outcome.decode_errors))
    emit(format_graph_summary(outcome.summary))
    emit(format_stats(outcome.result.stats))
    if outcome.facts_registry is not None:
        emit([f"facts: {outcome.facts_registry['table_count']} tables in {options.facts_dir}"])
    if profiler is not None:
        profiler.write_profile()
    return 0


def _cmd_merge_edges(args: argparse.Namespace) -> int:
    store = EdgeStore(args.store)
    for document in args.documents:
        added = store.add(load_edges_document(document))
        emit([f"{document}: {added} new edges"])
    result = store.save()
    emit(
        [
            f"edge store {args.store}: {result.previous_count} -> {result.total_count} "
            f"(+{result.added_count})"
        ]
    )
    return 0


def _cmd_verify(args: argparse.Namespace) -> int:
    original = read_callgraph(args.original, strict=True).graph
    reduced = read_callgraph(args.reduced, strict=True).graph
    problems = verify_reduction(original, reduced)
    if problems:
        emit(problems)
        emit([f"{len(problems)} problems found"])
        return 1
    emit([f"ok: {len(reduced)} entries verified"])
    return 0


def _cmd_report(args: argparse.Namespace) -> int:
    report = build_report(args.facts, top=args.top)
    if args.format == "json":
        sys.stdout.write(json.dumps(report, indent=2, sort_keys=True) + "\n")
    else:
        sys.stdout.write(render_markdown(report))
    return 0


COMMANDS = {
    "reduce": _cmd_reduce,
    "merge-edges": _cmd_merge_edges,
    "verify": _cmd_verify,
    "report": _cmd_report,
}


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    try:
        return COMMANDS[args.command](args)
    except (LensError, OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


def run() -> None:
    raise SystemExit(main(sys.argv[1:]))


if __name__ == "__main__":
    run()
