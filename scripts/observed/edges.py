"""Load observed-edge documents and index them by normalized caller.

An edges document is the JSON the branch-trace collector persists:

    {"edges": [["caller_symbol", "callee_symbol"], ...]}

A missing document means no runtime evidence yet and loads as an empty list.
A document that exists but cannot be read is fatal: reducing against a corrupt
observation set would silently over-prune the policy.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from lens_errors import EdgesDocumentError
from symbols import normalize_symbol

Edge = tuple[str, str]

_EMPTY: frozenset[str] = frozenset()


def parse_edges_payload(payload: Any, source: Any = "<memory>") -> list[Edge]:
    if not isinstance(payload, dict):
        raise EdgesDocumentError(source, "top-level value must be a JSON object")
    if "edges" not in payload:
        raise EdgesDocumentError(source, "missing 'edges' key")
    raw_edges = payload["edges"]
    if not isinstance(raw_edges, list):
        raise EdgesDocumentError(source, "'edges' must be a list")
    edges: list[Edge] = []
    for index, item in enumerate(raw_edges):
        if (
            not isinstance(item, (list, tuple))
            or len(item) != 2
            or not all(isinstance(name, str) for name in item)
        ):
            raise EdgesDocumentError(source, f"edge #{index} is not a [caller, callee] string pair")
        edges.append((item[0], item[1]))
    return edges


def load_edges_document(path: str | os.PathLike[str]) -> list[Edge]:
    if not os.path.exists(path):
        return []
    try:
        with open(path, encoding="utf-8") as handle:
            payload = json.load(handle)
    except json.JSONDecodeError as exc:
        raise EdgesDocumentError(path, f"not valid JSON ({exc})") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise EdgesDocumentError(path, str(exc)) from exc
    return parse_edges_payload(payload, path)


@dataclass(frozen=True)
class ObservedEdgeIndex:
    """Normalized caller -> normalized callees seen at runtime. Read-only."""

    targets: Mapping[str, frozenset[str]]

    @classmethod
    def from_edges(cls, edges: Iterable[Edge]) -> ObservedEdgeIndex:
        building: dict[str, set[str]] = {}
        for caller, callee in edges:
            building.setdefault(normalize_symbol(caller), set()).add(normalize_symbol(callee))
        frozen = {caller: frozenset(callees) for caller, callees in building.items()}
        return cls(targets=MappingProxyType(frozen))

    def targets_for(self, caller: str) -> frozenset[str]:
        """Callees observed for an already-normalized caller name."""
        return self.targets.get(caller, _EMPTY)

    def callers(self) -> list[str]:
        return sorted(self.targets)

    @property
    def edge_count(self) -> int:
        return sum(len(callees) for callees in self.targets.values())

    def __len__(self) -> int:
        return len(self.targets)
