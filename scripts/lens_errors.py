"""Exception types raised by callgraph_lens.

Library code raises these; only the CLI turns them into stderr output and an
exit code.
"""

from __future__ import annotations


class LensError(Exception):
    """Base class for every error callgraph_lens reports to its caller."""


class MalformedLineError(LensError, ValueError):
    def __init__(self, line_number: int, line: str, reason: str):
        self.line_number = line_number
        self.line = line
        self.reason = reason
        super().__init__(f"line {line_number}: {reason}")


class EdgesDocumentError(LensError, ValueError):
    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"invalid edges document {path}: {reason}")


class PersistenceError(LensError, OSError):
    def __init__(self, path, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"failed to write {path}: {cause}")
