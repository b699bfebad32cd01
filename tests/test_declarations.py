from hypothesis import given, strategies as st
import pytest

from csemit.codegen import TextSink
from csemit.declarations import OpeningTypeBuilder
from csemit.diagnostics import BuilderClosedError, ScopeOrderError
from csemit.model import INT, STRING, Accessibility, GeneratedTypeKind, TypeReference


@pytest.mark.parametrize(
    "kind, keyword",
    [
        (GeneratedTypeKind.CLASS, "class"),
        (GeneratedTypeKind.INTERFACE, "interface"),
        (GeneratedTypeKind.STRUCT, "struct"),
        (GeneratedTypeKind.RECORD, "record"),
        (GeneratedTypeKind.RECORD_STRUCT, "record struct"),
    ],
)
def test_header_keywords(kind: GeneratedTypeKind, keyword: str) -> None:
    sink = TextSink()
    (
        OpeningTypeBuilder(sink, "Foo", kind)
        .with_accessibility(Accessibility.PUBLIC)
        .with_partial()
        .commit_header()
        .open_body()
        .close()
    )
    assert sink.to_text() == f"public partial {keyword} Foo\n{{\n}}\n"


def test_header_without_modifiers() -> None:
    sink = TextSink()
    OpeningTypeBuilder(sink, "Foo", GeneratedTypeKind.STRUCT).commit_header().open_body().close()
    assert sink.to_text() == "struct Foo\n{\n}\n"


def test_unknown_kind_rejected() -> None:
    with pytest.raises(ValueError, match="Unsupported type kind"):
        OpeningTypeBuilder(TextSink(), "Foo", "enum")  # type: ignore[arg-type]


def test_inheritance_list() -> None:
    sink = TextSink()
    (
        OpeningTypeBuilder(sink, "Foo", GeneratedTypeKind.CLASS)
        .commit_header()
        .append_inheritance(TypeReference.named("A", "Base"))
        .append_inheritance_name("B", "IFoo")
        .append_inheritance_name(None, "IBar")
        .append_inheritance(TypeReference.named("System", "IEquatable", TypeReference("Foo")))
    )
    assert sink.to_text() == (
        "class Foo : global::A.Base, global::B.IFoo, IBar, global::System.IEquatable<global::Foo>"
    )


def test_inheritances_with_getter_skip_none() -> None:
    sink = TextSink()
    (
        OpeningTypeBuilder(sink, "Foo", GeneratedTypeKind.CLASS)
        .commit_header()
        .append_inheritances(
            ["IA", "skip", "IB"],
            lambda s: None if s == "skip" else TypeReference.named("N", s),
        )
    )
    assert sink.to_text() == "class Foo : global::N.IA, global::N.IB"


@given(st.lists(st.from_regex(r"I[A-Z][a-z]{0,4}", fullmatch=True), max_size=6))
def test_inheritance_separators(names: list[str]) -> None:
    sink = TextSink()
    builder = OpeningTypeBuilder(sink, "Foo", GeneratedTypeKind.CLASS).commit_header()
    builder.append_inheritances(TypeReference(n) for n in names)
    text = sink.to_text()
    assert text.count(" : ") == (1 if names else 0)
    assert text.count(", ") == max(len(names) - 1, 0)


def test_members_separated_by_blank_lines() -> None:
    sink = TextSink()
    with OpeningTypeBuilder(sink, "Foo", GeneratedTypeKind.CLASS).commit_header().open_body() as type_builder:
        type_builder.build_property(INT, "A").with_implicit_getter().commit()
        type_builder.build_property(STRING, "B").with_implicit_getter().commit()
        type_builder.build_method("M").open_parameters().open_body().close()
    assert sink.to_text() == (
        "class Foo\n"
        "{\n"
        "\tint A { get; }\n"
        "\n"
        "\tstring B { get; }\n"
        "\n"
        "\tvoid M()\n"
        "\t{\n"
        "\t}\n"
        "}\n"
    )
    assert sink.level == 0


def test_closed_type_rejects_members() -> None:
    sink = TextSink()
    type_builder = OpeningTypeBuilder(sink, "Foo", GeneratedTypeKind.CLASS).commit_header().open_body()
    type_builder.close()
    type_builder.close()
    assert sink.to_text().count("}") == 1
    with pytest.raises(BuilderClosedError):
        type_builder.build_property(INT, "A")
    with pytest.raises(BuilderClosedError):
        type_builder.build_method("M")


def test_closing_type_with_open_method_body_raises() -> None:
    sink = TextSink()
    type_builder = OpeningTypeBuilder(sink, "Foo", GeneratedTypeKind.CLASS).commit_header().open_body()
    type_builder.build_method("M").open_parameters().open_body()
    with pytest.raises(ScopeOrderError, match="depth"):
        type_builder.close()
