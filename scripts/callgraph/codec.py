"""Decode and encode the line-oriented call graph format.

Grammar (one function per line):

    <file>$<name>:<kind>:<id>[$<call-site>]*
    <call-site> := (true|false):(<int>, <int>){<node>[/<node>]*}

The encoder is the exact inverse of the decoder: `encode_callgraph` applied to
the result of `decode_text` reproduces every well-formed input line byte for
byte. Malformed lines raise `MalformedLineError`; `decode_callgraph` either
stops at the first one (strict) or skips it and keeps going.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Iterable

from callgraph.types import CallGraph, CallSite, FunctionEntry, FunctionNode
from lens_config import (
    FIELD_SEPARATOR,
    NODE_SEPARATOR,
    RESERVED_CHARS,
    TARGET_SEPARATOR,
    TARGETS_CLOSE,
    TARGETS_OPEN,
)
from lens_errors import MalformedLineError

_BOOL_TOKENS = {"true": True, "false": False}
_POSITION_SEPARATOR = ", "


@dataclass
class DecodeResult:
    graph: CallGraph
    errors: list[MalformedLineError] = field(default_factory=list)


class _LineParser:
    def __init__(self, line_number: int, line: str):
        self.line_number = line_number
        self.line = line

    def fail(self, reason: str) -> MalformedLineError:
        return MalformedLineError(self.line_number, self.line, reason)

    def parse_int(self, text: str) -> int:
        digits = text[1:] if text.startswith("-") else text
        if not digits or not digits.isascii() or not digits.isdigit():
            raise self.fail(f"invalid position component {text!r}")
        # Only canonical decimal survives a byte-exact round trip.
        if (len(digits) > 1 and digits[0] == "0") or text == "-0":
            raise self.fail(f"non-canonical position component {text!r}")
        return int(text)

    def parse_node(self, token: str) -> FunctionNode:
        parts = token.split(NODE_SEPARATOR)
        if len(parts) != 3:
            raise self.fail(f"node {token!r} must have 3 ':'-separated fields, got {len(parts)}")
        name, kind, node_id = parts
        # The encoder rejects these too, so catch them here per line.
        bad = RESERVED_CHARS.intersection(name + kind + node_id)
        if bad:
            raise self.fail(f"node {token!r} contains reserved characters {sorted(bad)}")
        if not name:
            raise self.fail(f"node {token!r} has an empty name")
        return FunctionNode(name=name, kind=kind, id=node_id)

    def parse_call_site(self, token: str) -> CallSite:
        flag, sep, rest = token.partition(NODE_SEPARATOR)
        if not sep or flag not in _BOOL_TOKENS:
            raise self.fail(f"call site {token!r} must start with 'true:' or 'false:'")
        is_indirect = _BOOL_TOKENS[flag]

        if not rest.startswith("("):
            raise self.fail(f"call site {token!r} is missing its position")
        close = rest.find(")")
        if close < 0:
            raise self.fail(f"call site {token!r} has an unterminated position")
        first, sep, second = rest[1:close].partition(_POSITION_SEPARATOR)
        if not sep:
            raise self.fail(f"call site {token!r} position must be '(<int>, <int>)'")
        position = (self.parse_int(first), self.parse_int(second))

        body = rest[close + 1:]
        if not (body.startswith(TARGETS_OPEN) and body.endswith(TARGETS_CLOSE)) or len(body) < 2:
            raise self.fail(f"call site {token!r} targets must be enclosed in '{{}}'")
        node_list = body[1:-1]
        if TARGETS_OPEN in node_list or TARGETS_CLOSE in node_list:
            raise self.fail(f"call site {token!r} has nested braces")

        if not node_list:
            if not is_indirect:
                raise self.fail(f"direct call site {token!r} has no target")
            return CallSite(is_indirect=True, position=position, targets=())
        if is_indirect:
            nodes = tuple(self.parse_node(item) for item in node_list.split(TARGET_SEPARATOR))
        else:
            if TARGET_SEPARATOR in node_list:
                raise self.fail(f"direct call site {token!r} has more than one target")
            nodes = (self.parse_node(node_list),)
        return CallSite(is_indirect=is_indirect, position=position, targets=nodes)

    def parse_entry(self, text: str) -> FunctionEntry:
        fields = text.split(FIELD_SEPARATOR)
        if len(fields) < 2:
            raise self.fail("missing function node field")
        defining_file, node_token = fields[0], fields[1]
        node = self.parse_node(node_token)
        sites = []
        for token in fields[2:]:
            if not token:
                raise self.fail("empty call site field")
            sites.append(self.parse_call_site(token))
        return FunctionEntry(defining_file=defining_file, node=node, call_sites=tuple(sites))


def _strip_terminator(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def decode_line(line: str, line_number: int = 1) -> FunctionEntry | None:
    """Decode one line; returns None for a blank line."""
    text = _strip_terminator(line)
    if not text.strip():
        return None
    return _LineParser(line_number, text).parse_entry(text)


def decode_callgraph(lines: Iterable[str], *, strict: bool = False) -> DecodeResult:
    result = DecodeResult(graph=[])
    for line_number, line in enumerate(lines, start=1):
        try:
            entry = decode_line(line, line_number)
        except MalformedLineError as exc:
            if strict:
                raise
            result.errors.append(exc)
            continue
        if entry is not None:
            result.graph.append(entry)
    return result


def decode_text(text: str, *, strict: bool = False) -> DecodeResult:
    return decode_callgraph(text.split("\n"), strict=strict)


def read_callgraph(path: str | os.PathLike[str], *, strict: bool = False) -> DecodeResult:
    with open(path, encoding="utf-8", newline="") as handle:
        return decode_callgraph(handle, strict=strict)


def _check_field(value: str, reserved: frozenset[str] = RESERVED_CHARS) -> str:
    bad = reserved.intersection(value)
    if bad:
        raise ValueError(f"field {value!r} contains reserved characters {sorted(bad)}")
    return value


def encode_node(node: FunctionNode) -> str:
    return NODE_SEPARATOR.join(
        (_check_field(node.name), _check_field(node.kind), _check_field(node.id))
    )


def encode_call_site(site: CallSite) -> str:
    flag = "true" if site.is_indirect else "false"
    first, second = site.position
    nodes = TARGET_SEPARATOR.join(encode_node(node) for node in site.targets)
    return f"{flag}:({first}{_POSITION_SEPARATOR}{second}){TARGETS_OPEN}{nodes}{TARGETS_CLOSE}"


def encode_entry(entry: FunctionEntry) -> str:
    # Source paths may contain ':' and '/'; only the field separator is reserved.
    fields = [
        _check_field(entry.defining_file, frozenset(FIELD_SEPARATOR)),
        encode_node(entry.node),
    ]
    fields.extend(encode_call_site(site) for site in entry.call_sites)
    return FIELD_SEPARATOR.join(fields)


def encode_callgraph(graph: Iterable[FunctionEntry]) -> str:
    return "".join(encode_entry(entry) + "\n" for entry in graph)
