"""Check that a reduced call graph is a valid reduction of its original.

A valid reduction keeps every entry in order, leaves direct call sites and
positions unchanged, and only ever removes indirect candidates.
"""

from __future__ import annotations

from callgraph.codec import encode_call_site, encode_node
from callgraph.types import CallGraph, FunctionEntry


def _entry_label(index: int, entry: FunctionEntry) -> str:
    return f"entry {index + 1} ({entry.defining_file}${encode_node(entry.node)})"


def _check_entry(index: int, original: FunctionEntry, reduced: FunctionEntry) -> list[str]:
    label = _entry_label(index, original)
    if original.defining_file != reduced.defining_file or original.node != reduced.node:
        return [f"{label}: function changed to {_entry_label(index, reduced)}"]
    if len(original.call_sites) != len(reduced.call_sites):
        return [
            f"{label}: call site count changed "
            f"({len(original.call_sites)} -> {len(reduced.call_sites)})"
        ]

    problems: list[str] = []
    for site_index, (before, after) in enumerate(zip(original.call_sites, reduced.call_sites)):
        where = f"{label} site {site_index + 1}"
        if before.is_indirect != after.is_indirect or before.position != after.position:
            problems.append(f"{where}: kind or position changed")
            continue
        if not before.is_indirect:
            if before != after:
                problems.append(
                    f"{where}: direct call changed "
                    f"({encode_call_site(before)} -> {encode_call_site(after)})"
                )
            continue
        allowed = set(before.targets)
        added = [node for node in after.targets if node not in allowed]
        if added:
            names = ", ".join(encode_node(node) for node in added)
            problems.append(f"{where}: introduced new targets {names}")
    return problems


def verify_reduction(original: CallGraph, reduced: CallGraph) -> list[str]:
    if len(original) != len(reduced):
        return [f"entry count changed ({len(original)} -> {len(reduced)})"]
    problems: list[str] = []
    for index, (before, after) in enumerate(zip(original, reduced)):
        problems.extend(_check_entry(index, before, after))
    return problems
