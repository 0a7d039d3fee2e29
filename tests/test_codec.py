from __future__ import annotations

import pytest

from callgraph.codec import (
    decode_callgraph,
    decode_line,
    decode_text,
    encode_callgraph,
    encode_entry,
    read_callgraph,
)
from callgraph.types import CallSite, FunctionEntry, FunctionNode
from conftest import GRAPH_TEXT
from lens_errors import MalformedLineError


def test_decode_indirect_call_site() -> None:
    entry = decode_line("a.c$foo:func:1$true:(10, 3){bar:func:2/baz:func:3}")
    assert entry == FunctionEntry(
        defining_file="a.c",
        node=FunctionNode(name="foo", kind="func", id="1"),
        call_sites=(
            CallSite(
                is_indirect=True,
                position=(10, 3),
                targets=(
                    FunctionNode(name="bar", kind="func", id="2"),
                    FunctionNode(name="baz", kind="func", id="3"),
                ),
            ),
        ),
    )


def test_decode_function_without_calls() -> None:
    entry = decode_line("b.c$leaf:func:5\n")
    assert entry is not None
    assert entry.call_sites == ()
    assert entry.node.name == "leaf"


def test_decode_strips_crlf_and_skips_blank_lines() -> None:
    result = decode_callgraph(["a.c$foo:func:1\r\n", "\n", "   \n", "b.c$bar:func:2\n"])
    assert [entry.node.name for entry in result.graph] == ["foo", "bar"]
    assert result.errors == []


def test_decode_accepts_emptied_indirect_site() -> None:
    entry = decode_line("a.c$foo:func:1$true:(10, 3){}")
    assert entry is not None
    assert entry.call_sites[0].targets == ()


def test_round_trip_is_byte_exact() -> None:
    text = GRAPH_TEXT + (
        "src/lib/x.c$f:decl:77$true:(-1, 0){}$false:(3, 12){g:func:8}\n"
        "x.c$h::$true:(1, 2){k::}\n"
    )
    result = decode_text(text, strict=True)
    assert encode_callgraph(result.graph) == text
    assert decode_text(encode_callgraph(result.graph)).graph == result.graph


@pytest.mark.parametrize(
    "line, fragment",
    [
        ("a.c", "missing function node"),
        ("a.c$foo:func", "3 ':'-separated fields"),
        ("a.c$:func:1", "empty name"),
        ("a.c$foo:func:1$maybe:(1, 2){x:f:1}", "'true:' or 'false:'"),
        ("a.c$foo:func:1$true:1, 2){x:f:1}", "missing its position"),
        ("a.c$foo:func:1$true:(1, 2{x:f:1}", "unterminated position"),
        ("a.c$foo:func:1$true:(1,2){x:f:1}", "position must be"),
        ("a.c$foo:func:1$true:(01, 2){x:f:1}", "non-canonical"),
        ("a.c$foo:func:1$true:(x, 2){x:f:1}", "invalid position"),
        ("a.c$foo:func:1$true:(1, 2)x:f:1", "enclosed in"),
        ("a.c$foo:func:1$false:(1, 2){a:f:1/b:f:2}", "more than one target"),
        ("a.c$foo:func:1$false:(1, 2){}", "no target"),
        ("a.c$foo:func:1$true:(1, 2){a:f/b:f:2}", "3 ':'-separated fields"),
        ("a.c$foo:func:1$", "empty call site"),
        ("b.c$we/ird:func:3", "reserved characters"),
        ("b.c$foo:fu{nc:3", "reserved characters"),
        ("a.c$foo:func:1$false:(1, 2){ba}r:f:2}", "nested braces"),
    ],
)
def test_malformed_lines_raise(line: str, fragment: str) -> None:
    with pytest.raises(MalformedLineError) as excinfo:
        decode_line(line, 7)
    assert excinfo.value.line_number == 7
    assert fragment in excinfo.value.reason


def test_non_strict_decode_skips_and_records_errors() -> None:
    result = decode_text("a.c$foo:func:1\na.c$broken\nb.c$bar:func:2\n")
    assert [entry.node.name for entry in result.graph] == ["foo", "bar"]
    assert len(result.errors) == 1
    assert result.errors[0].line_number == 2
    assert str(result.errors[0]).startswith("line 2:")


def test_strict_decode_raises_first_error() -> None:
    with pytest.raises(MalformedLineError):
        decode_text("a.c$foo:func:1\na.c$broken\n", strict=True)


def test_encode_rejects_reserved_characters() -> None:
    entry = FunctionEntry(defining_file="a.c", node=FunctionNode(name="a/b", kind="f", id="1"))
    with pytest.raises(ValueError):
        encode_entry(entry)


def test_encode_allows_paths_in_defining_file() -> None:
    entry = FunctionEntry(defining_file="src/c:d.c", node=FunctionNode(name="a", kind="f", id="1"))
    assert encode_entry(entry) == "src/c:d.c$a:f:1"


def test_read_callgraph_from_file(graph_file) -> None:
    result = read_callgraph(graph_file)
    assert len(result.graph) == 3
    assert encode_callgraph(result.graph) == GRAPH_TEXT
