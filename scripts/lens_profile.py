"""Phase timing for reduction runs.

When profiling is enabled (`--profile PATH` or `CALLGRAPH_LENS_PROFILE=1`),
each pipeline phase is timed and the totals are written as JSON. The output
is a debugging aid and is not read back by anything.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any

from lens_config import PROFILE_SCHEMA
from outputs.io import write_json


class LensProfiler:
    def __init__(self, output_path=None):
        self.output_path = output_path
        self.timings: dict[str, dict[str, Any]] = {}
        self.metadata: dict[str, Any] = {}

    @contextmanager
    def phase(self, name):
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            self.add_timing(name, elapsed)

    def add_timing(self, name, seconds):
        if not name:
            return
        if seconds is None:
            return
        entry = self.timings.get(name)
        if entry is None:
            entry = {"seconds": 0.0, "count": 0}
            self.timings[name] = entry
        entry["seconds"] += float(seconds)
        entry["count"] += 1

    def build_payload(self):
        total = sum(entry["seconds"] for entry in self.timings.values())
        return {
            "schema": PROFILE_SCHEMA,
            "unit": "seconds",
            "total_seconds": total,
            "phases": self.timings,
            "metadata": self.metadata,
        }

    def write_profile(self):
        if not self.output_path:
            return
        write_json(self.output_path, self.build_payload())
