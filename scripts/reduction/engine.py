"""Prune indirect call-site targets down to the callees observed at runtime.

For every function, the observed-callee set of its normalized name filters
each indirect call site's candidate list. Direct call sites pass through
untouched. A site with no surviving candidate is kept with an empty target
list rather than widened back to the static set: an empty list means "no
runtime evidence" and enforcement has to flag it.

Each entry is reduced independently of every other entry and only reads the
observed-edge index, so `reduce_entry` can be mapped over a graph in any order
and the partial `ReductionStats` merged afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from callgraph.types import CallGraph, CallSite, FunctionEntry
from observed.edges import ObservedEdgeIndex
from symbols import normalize_symbol


@dataclass
class ReductionStats:
    call_sites: int = 0
    empty_indirect_calls: int = 0
    original_targets: int = 0
    reduced_targets: int = 0
    reduction_ratio_sum: float = 0.0

    @property
    def mean_reduction_ratio(self) -> float | None:
        """Mean reduced/original ratio over non-empty sites; None if there were none."""
        if self.call_sites == 0:
            return None
        return self.reduction_ratio_sum / self.call_sites

    def merge(self, other: ReductionStats) -> ReductionStats:
        return ReductionStats(
            call_sites=self.call_sites + other.call_sites,
            empty_indirect_calls=self.empty_indirect_calls + other.empty_indirect_calls,
            original_targets=self.original_targets + other.original_targets,
            reduced_targets=self.reduced_targets + other.reduced_targets,
            reduction_ratio_sum=self.reduction_ratio_sum + other.reduction_ratio_sum,
        )

    def as_dict(self) -> dict:
        return {
            "call_sites": self.call_sites,
            "empty_indirect_calls": self.empty_indirect_calls,
            "original_targets": self.original_targets,
            "reduced_targets": self.reduced_targets,
            "mean_reduction_ratio": self.mean_reduction_ratio,
        }


@dataclass(frozen=True)
class SiteReduction:
    defining_file: str
    function: str
    position: tuple[int, int]
    original_count: int
    reduced_count: int
    targets: tuple[str, ...]

    @property
    def empty(self) -> bool:
        return self.reduced_count == 0


@dataclass
class ReductionResult:
    graph: CallGraph
    stats: ReductionStats
    sites: list[SiteReduction] = field(default_factory=list)


def _filter_site(site: CallSite, observed: frozenset[str]) -> CallSite:
    kept = tuple(node for node in site.targets if normalize_symbol(node.name) in observed)
    return site.with_targets(kept)


def reduce_entry(
    entry: FunctionEntry,
    index: ObservedEdgeIndex,
) -> tuple[FunctionEntry, ReductionStats, list[SiteReduction]]:
    stats = ReductionStats()
    if not entry.has_indirect_calls:
        return entry, stats, []

    observed = index.targets_for(normalize_symbol(entry.node.name))
    sites: list[CallSite] = []
    records: list[SiteReduction] = []
    for site in entry.call_sites:
        if not site.is_indirect:
            sites.append(site)
            continue
        reduced = _filter_site(site, observed)
        original_count = len(site.targets)
        reduced_count = len(reduced.targets)
        if reduced_count == 0:
            stats.empty_indirect_calls += 1
        else:
            stats.call_sites += 1
            stats.original_targets += original_count
            stats.reduced_targets += reduced_count
            stats.reduction_ratio_sum += reduced_count / original_count
        sites.append(reduced)
        records.append(
            SiteReduction(
                defining_file=entry.defining_file,
                function=entry.node.name,
                position=site.position,
                original_count=original_count,
                reduced_count=reduced_count,
                targets=tuple(node.name for node in reduced.targets),
            )
        )
    reduced_entry = FunctionEntry(
        defining_file=entry.defining_file,
        node=entry.node,
        call_sites=tuple(sites),
    )
    return reduced_entry, stats, records


def reduce_callgraph(graph: Iterable[FunctionEntry], index: ObservedEdgeIndex) -> ReductionResult:
    """Reduce every entry of `graph`, preserving order. The input is not modified."""
    result = ReductionResult(graph=[], stats=ReductionStats())
    for entry in graph:
        reduced_entry, stats, records = reduce_entry(entry, index)
        result.graph.append(reduced_entry)
        result.stats = result.stats.merge(stats)
        result.sites.extend(records)
    return result


def summarize_callgraph(graph: CallGraph) -> dict:
    functions = len(graph)
    with_indirect = sum(1 for entry in graph if entry.has_indirect_calls)
    percent = None
    if functions:
        percent = with_indirect / functions * 100
    return {
        "functions": functions,
        "functions_with_indirect_calls": with_indirect,
        "indirect_percent": percent,
    }
