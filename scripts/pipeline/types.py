from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from lens_errors import MalformedLineError
from observed.edges import ObservedEdgeIndex
from reduction.engine import ReductionResult


@dataclass
class FactTable:
    """Parquet fact table definition."""

    name: str
    rows: list[dict[str, Any]]
    primary_key: list[str]
    schema: list[tuple[str, str]]
    version: str = "v1"
    description: str | None = None


@dataclass
class ReduceOutcome:
    """Everything a reduction run produced, for diagnostics and follow-up writers."""

    summary: dict[str, Any]
    result: ReductionResult
    index: ObservedEdgeIndex
    decode_errors: list[MalformedLineError] = field(default_factory=list)
    facts_registry: dict[str, Any] | None = None
