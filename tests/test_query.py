import libcst as cst
import pytest

from csemit.cst_source import Compilation, CstSyntaxProvider, annotation_to_reference, csharp_literal
from csemit.generator import marker_attribute
from csemit.model import (
    DOUBLE,
    LONG,
    STRING,
    Accessibility,
    GeneratedTypeKind,
    TypeReference,
)
from csemit.names import render_type_reference
from csemit.query import CancellationToken, OperationCancelledError, for_type_with_attribute

MODELS = '''
from typing import ClassVar, Optional

from markers import export


@export
class User:
    count: ClassVar[int] = 0
    id: int
    name: str | None = None
    tags: list[str] = []


class Plain:
    x: int


@export(kind="record")
class Point(Base):
    x: float = 0.0
    y: float = -1.5


@export
class _Hidden:
    note: Optional[str] = "n/a"
'''


def _values(compilation: Compilation, **kwargs):
    provider = CstSyntaxProvider(compilation)
    return for_type_with_attribute(provider, marker_attribute()).transform(
        lambda symbol, attributes, token: (symbol, attributes), **kwargs
    )


def test_marked_classes_become_symbols() -> None:
    results = _values(Compilation({"app.models": MODELS})).collect()
    symbols = [s for s, _ in results]
    assert [s.name for s in symbols] == ["User", "Point", "_Hidden"]

    user, point, hidden = symbols
    assert user.namespace == ("app", "models")
    assert user.kind is GeneratedTypeKind.CLASS
    assert [f.name for f in user.fields] == ["id", "name", "tags"]
    id_field, name_field, tags_field = user.fields
    assert id_field.type == LONG and id_field.required and id_field.default is None
    assert name_field.type == STRING.as_nullable() and name_field.default == "null" and not name_field.required
    assert tags_field.default is None and not tags_field.required

    assert point.kind is GeneratedTypeKind.RECORD
    assert point.bases == (TypeReference("Base", ("app", "models")),)
    assert [(f.type, f.default) for f in point.fields] == [(DOUBLE, "0.0"), (DOUBLE, "-1.5")]

    assert hidden.accessibility is Accessibility.INTERNAL
    assert hidden.fields[0].default == '"n/a"'


def test_attribute_arguments_are_reported() -> None:
    results = dict((s.name, attrs) for s, attrs in _values(Compilation({"app.models": MODELS})))
    assert results["User"][0].arguments == ()
    assert results["Point"][0].arguments == ('kind = "record"',)
    assert results["Point"][0].attribute_type == TypeReference.named("Csemit", "ExportAttribute")


def test_predicate_filters_nodes() -> None:
    provider = CstSyntaxProvider(Compilation({"app.models": MODELS}))
    values = (
        for_type_with_attribute(provider, marker_attribute())
        .where(lambda node, token: not node.name.value.startswith("_"))
        .transform(lambda symbol, attributes, token: symbol.name)
    )
    assert values.collect() == ["User", "Point"]


def test_values_recompute_on_each_iteration() -> None:
    calls: list[str] = []
    provider = CstSyntaxProvider(Compilation({"app.models": MODELS}))
    values = for_type_with_attribute(provider, marker_attribute()).transform(
        lambda symbol, attributes, token: calls.append(symbol.name)
    )
    list(values)
    list(values)
    assert calls == ["User", "Point", "_Hidden"] * 2


def test_cancellation_raises() -> None:
    token = CancellationToken()
    values = _values(Compilation({"app.models": MODELS}), cancellation=token)
    token.cancel()
    assert token.cancelled
    with pytest.raises(OperationCancelledError):
        values.collect()


def test_unparsable_module_is_skipped(caplog) -> None:
    compilation = Compilation({"app.models": MODELS}).with_module("broken", "class (:\n")
    names = [s.name for s, _ in _values(compilation)]
    assert names == ["User", "Point", "_Hidden"]
    assert "Skipping broken" in caplog.text


def test_modules_loaded_from_directory(tmp_path) -> None:
    (tmp_path / "pkg").mkdir()
    (tmp_path / "pkg" / "__init__.py").write_text("", encoding="utf-8")
    (tmp_path / "pkg" / "dto.py").write_text(MODELS, encoding="utf-8")
    (tmp_path / "__pycache__").mkdir()
    (tmp_path / "__pycache__" / "junk.py").write_text("x = 1\n", encoding="utf-8")
    compilation = Compilation.from_directory(tmp_path)
    assert sorted(compilation.modules) == ["pkg", "pkg.dto"]


@pytest.mark.parametrize(
    "annotation, expected",
    [
        ("int", "long"),
        ("Optional[str]", "string?"),
        ("bool | None", "bool?"),
        ("list[int]", "global::System.Collections.Generic.List<long>"),
        ("tuple[int, ...]", "global::System.Collections.Generic.List<long>"),
        ("set[str]", "global::System.Collections.Generic.HashSet<string>"),
        ("dict[str, float]", "global::System.Collections.Generic.Dictionary<string, double>"),
        ("bytes", "byte[]"),
        ("'Other'", "global::app.Other"),
        ("pkg.Thing", "global::pkg.Thing"),
        ("Box[int]", "global::app.Box<long>"),
        ("Union[int, str]", "object"),
        ("datetime", "global::System.DateTime"),
    ],
)
def test_annotation_mapping(annotation: str, expected: str) -> None:
    ref = annotation_to_reference(cst.parse_expression(annotation), ("app",))
    assert render_type_reference(ref) == expected


@pytest.mark.parametrize(
    "source, expected",
    [
        ('"hi"', '"hi"'),
        ("'a\"b'", '"a\\"b"'),
        ("True", "true"),
        ("None", "null"),
        ("3", "3"),
        ("-2", "-2"),
        ("foo(1)", "foo(1)"),
    ],
)
def test_literal_rendering(source: str, expected: str) -> None:
    assert csharp_literal(cst.parse_expression(source), cst.parse_module("")) == expected


GENERIC_MODELS = '''
from typing import Generic, Protocol, TypeVar

T = TypeVar("T")


@export
class Box(Generic[T]):
    item: T


@export
class Reader(Protocol[T], Base):
    data: bytes = b"x"
    label: str = "ok"
'''


def test_generic_and_protocol_bases_are_dropped() -> None:
    box, reader = [s for s, _ in _values(Compilation({"app": GENERIC_MODELS}))]
    assert box.bases == ()
    assert reader.bases == (TypeReference("Base", ("app",)),)


def test_bytes_default_is_not_a_csharp_literal() -> None:
    _, reader = [s for s, _ in _values(Compilation({"app": GENERIC_MODELS}))]
    data, label = reader.fields
    assert data.default is None and not data.required
    assert label.default == '"ok"'
    module = cst.parse_module("")
    assert csharp_literal(cst.parse_expression('"ok"'), module) == '"ok"'


def test_unknown_kind_is_skipped(caplog) -> None:
    code = MODELS + '''

@export(kind="enum")
class Color:
    name: str


@export(kind=Kinds.RECORD)
class Shape:
    sides: int
'''
    names = [s.name for s, _ in _values(Compilation({"app.models": code}))]
    assert names == ["User", "Point", "_Hidden"]
    assert "Skipping Color: unsupported kind" in caplog.text
    assert "Skipping Shape: unsupported kind" in caplog.text
