from __future__ import annotations

import pytest

from callgraph.codec import decode_text, encode_callgraph
from conftest import EDGES, GRAPH_TEXT, REDUCED_TEXT
from observed.edges import ObservedEdgeIndex
from reduction.engine import ReductionStats, reduce_callgraph, reduce_entry, summarize_callgraph

SCENARIO_LINE = "a.c$foo:func:1$true:(10, 3){bar:func:2/baz:func:3}\n"


def _reduce(text: str, edges):
    graph = decode_text(text, strict=True).graph
    return graph, reduce_callgraph(graph, ObservedEdgeIndex.from_edges(edges))


def test_prunes_to_observed_target() -> None:
    _, result = _reduce(SCENARIO_LINE, [("foo", "bar")])
    assert encode_callgraph(result.graph) == "a.c$foo:func:1$true:(10, 3){bar:func:2}\n"
    stats = result.stats
    assert stats.call_sites == 1
    assert stats.empty_indirect_calls == 0
    assert stats.original_targets == 2
    assert stats.reduced_targets == 1
    assert stats.mean_reduction_ratio == pytest.approx(0.5)


def test_no_evidence_empties_the_site() -> None:
    _, result = _reduce(SCENARIO_LINE, [])
    assert encode_callgraph(result.graph) == "a.c$foo:func:1$true:(10, 3){}\n"
    assert result.stats.empty_indirect_calls == 1
    assert result.stats.call_sites == 0
    assert result.stats.original_targets == 0
    assert result.stats.mean_reduction_ratio is None
    assert result.sites[0].empty


def test_matches_through_symbol_normalization() -> None:
    _, result = _reduce(GRAPH_TEXT, EDGES)
    assert encode_callgraph(result.graph) == REDUCED_TEXT
    assert result.stats.call_sites == 2
    assert result.stats.original_targets == 5
    assert result.stats.reduced_targets == 3
    assert result.stats.mean_reduction_ratio == pytest.approx((0.5 + 2 / 3) / 2)


def test_direct_calls_and_order_untouched() -> None:
    graph, result = _reduce(GRAPH_TEXT, [])
    assert [entry.node for entry in result.graph] == [entry.node for entry in graph]
    for before, after in zip(graph, result.graph):
        for site_before, site_after in zip(before.call_sites, after.call_sites):
            assert site_before.position == site_after.position
            if not site_before.is_indirect:
                assert site_before == site_after


def test_reduced_targets_are_a_subset() -> None:
    graph, result = _reduce(GRAPH_TEXT, EDGES + [["main", "write"], ["foo", "unrelated"]])
    for before, after in zip(graph, result.graph):
        for site_before, site_after in zip(before.call_sites, after.call_sites):
            assert len(site_after.targets) <= len(site_before.targets)
            assert set(site_after.targets) <= set(site_before.targets)


def test_unobserved_caller_empties_every_indirect_site() -> None:
    _, result = _reduce(GRAPH_TEXT, [("somebody_else", "bar")])
    for entry in result.graph:
        for site in entry.call_sites:
            if site.is_indirect:
                assert site.targets == ()
    assert result.stats.empty_indirect_calls == 2


def test_input_graph_is_not_modified() -> None:
    graph, _ = _reduce(GRAPH_TEXT, [])
    assert encode_callgraph(graph) == GRAPH_TEXT


def test_reduction_is_deterministic() -> None:
    graph = decode_text(GRAPH_TEXT).graph
    index = ObservedEdgeIndex.from_edges(EDGES)
    first = reduce_callgraph(graph, index)
    second = reduce_callgraph(graph, index)
    assert first.graph == second.graph
    assert first.stats == second.stats
    assert first.sites == second.sites


def test_entry_without_indirect_calls_passes_through() -> None:
    entry = decode_text("a.c$main:func:4$false:(2, 1){foo:func:1}\n").graph[0]
    reduced, stats, records = reduce_entry(entry, ObservedEdgeIndex.from_edges([]))
    assert reduced is entry
    assert stats == ReductionStats()
    assert records == []


def test_site_records() -> None:
    _, result = _reduce(GRAPH_TEXT, EDGES)
    main_site = result.sites[1]
    assert main_site.function == "main"
    assert main_site.position == (5, 7)
    assert (main_site.original_count, main_site.reduced_count) == (3, 2)
    assert main_site.targets == ("open64", "read")


def test_stats_merge_sums_partials() -> None:
    merged = ReductionStats(1, 0, 2, 1, 0.5).merge(ReductionStats(1, 2, 4, 4, 1.0))
    assert merged == ReductionStats(2, 2, 6, 5, 1.5)
    assert merged.mean_reduction_ratio == pytest.approx(0.75)
    assert merged.as_dict()["empty_indirect_calls"] == 2


def test_summarize_callgraph() -> None:
    summary = summarize_callgraph(decode_text(GRAPH_TEXT).graph)
    assert summary["functions"] == 3
    assert summary["functions_with_indirect_calls"] == 2
    assert summary["indirect_percent"] == pytest.approx(200 / 3)
    assert summarize_callgraph([])["indirect_percent"] is None
