"""Constants and option parsing for callgraph_lens.

The grammar separators below are part of the on-disk call graph format shared
with the points-to analysis; changing any of them breaks interoperability.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping

CALLGRAPH_LENS_VERSION = "0.1.0-dev"

FIELD_SEPARATOR = "$"
NODE_SEPARATOR = ":"
TARGET_SEPARATOR = "/"
TARGETS_OPEN = "{"
TARGETS_CLOSE = "}"
RESERVED_CHARS = frozenset(
    (FIELD_SEPARATOR, NODE_SEPARATOR, TARGET_SEPARATOR, TARGETS_OPEN, TARGETS_CLOSE)
)

TEMP_SUFFIX = ".tmp"
DEFAULT_EDGES_DATABASE = "indirect-branches.json"

EDGE_STORE_SCHEMA = {"name": "callgraph_lens_edges", "version": "v1"}
FACTS_SCHEMA = {"name": "callgraph_lens_facts", "version": "v1"}
PROFILE_SCHEMA = {"name": "callgraph_lens_profile", "version": "v1"}

DEFAULT_REPORT_TOP = 20


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return bool(default)
    return str(value).strip().lower() not in ("", "0", "false", "no", "off")


def _parse_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    lowered = str(value).strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    return default


def default_strict() -> bool:
    return _env_flag("CALLGRAPH_LENS_STRICT", False)


def default_profile() -> bool:
    return _env_flag("CALLGRAPH_LENS_PROFILE", False)


@dataclass(frozen=True)
class ReduceOptions:
    """Normalized options for a reduction run."""

    strict: bool = False
    facts_dir: str | None = None
    profile_path: str | None = None

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None) -> ReduceOptions:
        if isinstance(options, ReduceOptions):
            return options
        options = options or {}
        strict = _parse_bool(options.get("strict"), default_strict())
        facts_dir = options.get("facts_dir")
        if not isinstance(facts_dir, str) or not facts_dir.strip():
            facts_dir = None
        profile_path = options.get("profile_path")
        if not isinstance(profile_path, str) or not profile_path.strip():
            profile_path = None
        return cls(
            strict=strict,
            facts_dir=facts_dir,
            profile_path=profile_path,
        )

    @property
    def profile_enabled(self) -> bool:
        return self.profile_path is not None or default_profile()
