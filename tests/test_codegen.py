from hypothesis import given, strategies as st
import pytest

from csemit.codegen import TextSink
from csemit.diagnostics import ScopeOrderError
from csemit.model import INT, TypeReference


def test_lazy_indentation_and_blank_lines() -> None:
    sink = TextSink()
    sink.append_line("a")
    with sink.block():
        sink.append_line("b")
        sink.append_line()
        sink.append("c").append("d").append_line()
    sink.append_line("e")
    # blank lines carry no indentation
    assert sink.to_text() == "a\n\tb\n\n\tcd\ne\n"


def test_empty_append_writes_nothing() -> None:
    sink = TextSink()
    with sink.block():
        sink.append("").append_line()
    assert str(sink) == "\n"


def test_custom_indent_unit() -> None:
    sink = TextSink(indent="    ")
    with sink.enter_indented_scope():
        with sink.block():
            sink.append_line("x")
    assert sink.to_text() == "        x\n"


_ops = st.lists(st.sampled_from(["open", "close", "line"]), max_size=40)


@given(_ops)
def test_indentation_matches_open_scopes(ops: list[str]) -> None:
    sink = TextSink()
    scopes = []
    expected: list[str] = []
    for op in ops:
        if op == "open":
            scopes.append(sink.block())
        elif op == "close" and scopes:
            scopes.pop().release()
        elif op == "line":
            sink.append_line("x")
            expected.append("\t" * len(scopes) + "x")
    while scopes:
        scopes.pop().release()
    assert sink.level == 0
    assert sink.to_text().splitlines() == expected


def test_out_of_order_release_raises() -> None:
    sink = TextSink()
    outer = sink.block()
    inner = sink.block()
    with pytest.raises(ScopeOrderError, match="depth 1"):
        outer.release()
    inner.release()
    outer.release()
    assert sink.level == 0


def test_double_release_is_noop() -> None:
    sink = TextSink()
    scope = sink.block()
    scope.release()
    scope.release()
    assert scope.released
    assert sink.level == 0


def test_names_written_through_sink() -> None:
    sink = TextSink()
    sink.append_type_reference(INT).append_char(" ")
    sink.append_namespace("A.B").append_char(" ")
    sink.append_doc_reference(TypeReference.named("A", "Foo"), "Bar")
    assert sink.to_text() == 'int global::A.B cref="A.Foo.Bar"'
