"""Writers for call graph outputs."""

from __future__ import annotations

from typing import Iterable

from callgraph.codec import encode_callgraph
from callgraph.types import FunctionEntry

from .io import PathLike, atomic_write_text


def write_callgraph(path: PathLike, graph: Iterable[FunctionEntry]) -> None:
    # Encode fully before touching the filesystem so an encode error writes nothing.
    content = encode_callgraph(graph)
    atomic_write_text(path, content)
