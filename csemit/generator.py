from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path

from . import __version__
from .cst_source import Compilation, CstSyntaxProvider
from .declarations import TypeBuilder
from .model import (
    OBJECT,
    STRING,
    Accessibility,
    AttributeDescriptor,
    GeneratedTypeKind,
    TypeReference,
    TypeSymbol,
    split_namespace,
)
from .query import NONE_TOKEN, CancellationToken, for_type_with_attribute
from .source import (
    DirectorySourceContext,
    GeneratorAttribute,
    SourceBuilder,
    SourceContext,
    add_attribute_source,
    hint_name,
)

logger = logging.getLogger(__name__)

DEFAULT_ATTRIBUTE = "Csemit.ExportAttribute"

GENERATED_CODE = AttributeDescriptor(
    TypeReference.named("System.CodeDom.Compiler", "GeneratedCodeAttribute"),
    ('"csemit"', f'"{__version__}"'),
)


@dataclass
class GeneratorConfig:
    attribute_name: str = DEFAULT_ATTRIBUTE
    namespace: str | None = None  # overrides the module path
    emit_attribute_source: bool = True
    emit_to_string: bool = True
    partial: bool = True


@dataclass
class GeneratedType:
    symbol: TypeSymbol
    namespace: tuple[str, ...]
    builder: SourceBuilder

    @property
    def hint_name(self) -> str:
        return hint_name(self.namespace, self.symbol.name)


@dataclass
class GenerationResult:
    hint_names: list[str] = field(default_factory=list)
    diagnostics: dict[str, list[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.diagnostics


def pascal_case(name: str) -> str:
    parts = [p for p in name.split("_") if p]
    if not parts:
        return name
    return "".join(p[:1].upper() + p[1:] for p in parts)


def marker_attribute(full_name: str = DEFAULT_ATTRIBUTE) -> GeneratorAttribute:
    """C# source of the marker attribute itself, built with the same builders."""
    namespace = split_namespace(full_name)[:-1]
    type_name = split_namespace(full_name)[-1]
    sb = SourceBuilder().append_file_namespace(namespace)
    sb.sink.append_line("[global::System.AttributeUsage(global::System.AttributeTargets.Class, Inherited = false)]")
    with (
        sb.build_class(type_name)
        .with_accessibility(Accessibility.INTERNAL)
        .commit_header()
        .append_inheritance_name("System", "Attribute")
        .open_body() as type_builder
    ):
        (
            type_builder.build_property(STRING.as_nullable(), "Kind")
            .with_accessibility(Accessibility.PUBLIC)
            .with_implicit_getter()
            .with_implicit_setter()
            .commit()
        )
    return GeneratorAttribute(
        generated_file_path=hint_name(namespace, type_name),
        source_code=sb.to_text(),
        type_name=type_name,
        type_full_name=full_name,
    )


class DtoGenerator:
    """Emit one partial C# type per exported Python class."""

    def __init__(self, config: GeneratorConfig | None = None) -> None:
        self.config = config or GeneratorConfig()

    def generate(self, symbol: TypeSymbol) -> GeneratedType:
        namespace = split_namespace(self.config.namespace) if self.config.namespace else symbol.namespace
        bases = tuple(
            replace(b, namespace=namespace) if b.namespace == symbol.namespace and not b.is_type_parameter else b
            for b in symbol.bases
        )

        sb = SourceBuilder().append_file_namespace(namespace)
        with (
            sb.build_type(symbol.name, symbol.kind)
            .with_accessibility(symbol.accessibility)
            .with_partial(self.config.partial)
            .commit_header()
            .append_inheritances(bases)
            .open_body() as type_builder
        ):
            self._append_properties(type_builder, symbol)
            if self.config.emit_to_string and symbol.kind is not GeneratedTypeKind.INTERFACE:
                self._append_to_string(type_builder, symbol)

        logger.info("Generated %s.%s", ".".join(namespace), symbol.name)
        return GeneratedType(symbol, namespace, sb)

    def _append_properties(self, type_builder: TypeBuilder, symbol: TypeSymbol) -> None:
        interface = symbol.kind is GeneratedTypeKind.INTERFACE
        for fld in symbol.fields:
            prop = type_builder.build_property(fld.type, pascal_case(fld.name)).with_implicit_getter()
            if interface:
                prop.commit()
                continue
            prop = (
                prop.with_attributes([GENERATED_CODE])
                .with_accessibility(Accessibility.PUBLIC)
                .with_implicit_setter(init_only=True)
                .with_required(fld.required)
            )
            if fld.default is not None:
                prop.with_initializer(fld.default)
            prop.commit()

    def _append_to_string(self, type_builder: TypeBuilder, symbol: TypeSymbol) -> None:
        names = [pascal_case(f.name) for f in symbol.fields]
        members = ", ".join(n + " = {" + n + "}" for n in names)
        body = '$"' + symbol.name + (" {{ " + members + " }}" if members else "") + '"'
        (
            type_builder.build_method("ToString", STRING)
            .with_inherit_doc(OBJECT, "ToString")
            .with_attributes([GENERATED_CODE])
            .with_accessibility(Accessibility.PUBLIC)
            .with_override()
            .open_parameters()
            .append_expression(body)
        )


def run_generation(
    root: Path,
    context: SourceContext,
    config: GeneratorConfig | None = None,
    cancellation: CancellationToken = NONE_TOKEN,
) -> GenerationResult:
    config = config or GeneratorConfig()
    attribute = marker_attribute(config.attribute_name)
    generator = DtoGenerator(config)
    result = GenerationResult()

    if config.emit_attribute_source:
        add_attribute_source(context, attribute)
        result.hint_names.append(attribute.generated_file_path)

    provider = CstSyntaxProvider(Compilation.from_directory(root))
    values = for_type_with_attribute(provider, attribute).transform(
        lambda symbol, attributes, token: generator.generate(symbol),
        cancellation,
    )
    for generated in values:
        name = generated.builder.add_to_context_named(context, generated.namespace, generated.symbol.name)
        result.hint_names.append(name)
        diagnostics = generated.builder.sink.diagnostics
        if diagnostics:
            result.diagnostics[name] = [str(d) for d in diagnostics]
    logger.info("Generated %d file(s) from %s", len(result.hint_names), root)
    return result


def generate_to_directory(root: Path, out_dir: Path, config: GeneratorConfig | None = None) -> GenerationResult:
    return run_generation(root, DirectorySourceContext(out_dir), config)
