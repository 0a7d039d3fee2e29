"""Filesystem helpers for callgraph_lens outputs.

JSON formatting (indentation, sorted keys, ASCII escaping) is kept stable so
that edge stores and registries diff cleanly between profiling sessions.
Everything that replaces a file readers may be watching goes through
`atomic_publish`.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Callable

from lens_config import TEMP_SUFFIX
from lens_errors import PersistenceError

PathLike = str | os.PathLike[str]


def ensure_dir(path: PathLike) -> None:
    os.makedirs(path, exist_ok=True)


def temp_path_for(path: PathLike) -> Path:
    dest = Path(path)
    return dest.with_name(dest.name + TEMP_SUFFIX)


def atomic_publish(path: PathLike, write: Callable[[Path], None]) -> None:
    """Publish a file at `path` by having `write` fill a sibling temp path, then renaming.

    Observers see either the previous file or the complete new one. A failure
    before the rename leaves the destination untouched.
    """
    dest = Path(path)
    temp_path = temp_path_for(dest)
    try:
        ensure_dir(dest.parent)
        write(temp_path)
        os.replace(temp_path, dest)
    except OSError as exc:
        try:
            temp_path.unlink()
        except OSError:
            pass
        raise PersistenceError(dest, exc) from exc


def atomic_write_text(path: PathLike, content: str) -> None:
    def _write(temp_path: Path) -> None:
        with open(temp_path, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())

    atomic_publish(path, _write)


def dumps_json(obj: Any) -> str:
    return json.dumps(obj, indent=2, sort_keys=True, ensure_ascii=True) + "\n"


def write_json(path: PathLike, obj: Any) -> None:
    atomic_write_text(path, dumps_json(obj))
