"""Persistent, append-only store of observed edges.

Each profiling session reads the prior store, unions in what it observed and
republishes the whole document atomically. Edges are only ever added, so the
runtime evidence grows monotonically across sessions.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable

from lens_config import EDGE_STORE_SCHEMA
from observed.edges import Edge, load_edges_document
from outputs.io import write_json


@dataclass(frozen=True)
class MergeResult:
    previous_count: int
    added_count: int
    total_count: int


def edge_store_payload(edges: Iterable[Edge]) -> dict:
    ordered = sorted(set(edges))
    return {
        "schema": EDGE_STORE_SCHEMA,
        "edges": [[caller, callee] for caller, callee in ordered],
    }


class EdgeStore:
    def __init__(self, path: str | os.PathLike[str]):
        self.path = path
        self._edges: set[Edge] = set(load_edges_document(path))
        self._loaded_count = len(self._edges)

    @property
    def edges(self) -> list[Edge]:
        return sorted(self._edges)

    def __len__(self) -> int:
        return len(self._edges)

    def add(self, edges: Iterable[Edge]) -> int:
        before = len(self._edges)
        self._edges.update((caller, callee) for caller, callee in edges)
        return len(self._edges) - before

    def save(self) -> MergeResult:
        write_json(self.path, edge_store_payload(self._edges))
        total = len(self._edges)
        return MergeResult(
            previous_count=self._loaded_count,
            added_count=total - self._loaded_count,
            total_count=total,
        )


def merge_edge_store(path: str | os.PathLike[str], new_edges: Iterable[Edge]) -> MergeResult:
    store = EdgeStore(path)
    store.add(new_edges)
    return store.save()
