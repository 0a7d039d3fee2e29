from __future__ import annotations

import json
from pathlib import Path

import pytest

GRAPH_TEXT = (
    "a.c$foo:func:1$true:(10, 3){bar:func:2/baz:func:3}\n"
    "a.c$main:func:4$false:(2, 1){foo:func:1}$true:(5, 7){open64:ext:9/read:ext:10/write:ext:11}\n"
    "b.c$leaf:func:5\n"
)

EDGES = [
    ["foo", "bar"],
    ["main", "__GI___open64"],
    ["main", "read@GLIBC_2.2.5"],
]

REDUCED_TEXT = (
    "a.c$foo:func:1$true:(10, 3){bar:func:2}\n"
    "a.c$main:func:4$false:(2, 1){foo:func:1}$true:(5, 7){open64:ext:9/read:ext:10}\n"
    "b.c$leaf:func:5\n"
)


@pytest.fixture
def graph_file(tmp_path: Path) -> Path:
    path = tmp_path / "calls.steen"
    path.write_text(GRAPH_TEXT)
    return path


@pytest.fixture
def edges_file(tmp_path: Path) -> Path:
    path = tmp_path / "indirect-branches.json"
    path.write_text(json.dumps({"edges": EDGES}))
    return path
