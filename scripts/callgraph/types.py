from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FunctionNode:
    name: str
    kind: str
    id: str


@dataclass(frozen=True)
class CallSite:
    is_indirect: bool
    position: tuple[int, int]
    targets: tuple[FunctionNode, ...]

    def with_targets(self, targets: tuple[FunctionNode, ...]) -> CallSite:
        return CallSite(is_indirect=self.is_indirect, position=self.position, targets=targets)


@dataclass(frozen=True)
class FunctionEntry:
    """One call graph row: a defined function and its call sites in order."""

    defining_file: str
    node: FunctionNode
    call_sites: tuple[CallSite, ...] = ()

    @property
    def has_indirect_calls(self) -> bool:
        return any(site.is_indirect for site in self.call_sites)


# Input order is significant; consumers may index the output by line.
CallGraph = list[FunctionEntry]
