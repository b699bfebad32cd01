from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable

from .codegen import TextSink
from .declarations import OpeningTypeBuilder
from .model import GeneratedTypeKind, TypeSymbol, split_namespace

logger = logging.getLogger(__name__)

ENCODING = "utf-8"
GENERATED_SUFFIX = ".g.cs"
PREAMBLE: tuple[str, ...] = ("// <auto-generated/>", "#nullable enable")


# ---------- registration boundary ----------

@runtime_checkable
class SourceContext(Protocol):
    """Receives finished files, e.g. a compiler's generator context."""

    def add_source(self, hint_name: str, text: str, encoding: str) -> None: ...


@dataclass
class InMemorySourceContext:
    sources: dict[str, str] = field(default_factory=dict)

    def add_source(self, hint_name: str, text: str, encoding: str = ENCODING) -> None:
        if hint_name in self.sources:
            raise ValueError(f"Duplicate hint name: {hint_name}")
        self.sources[hint_name] = text


@dataclass
class DirectorySourceContext:
    root: Path
    written: list[Path] = field(default_factory=list)

    def add_source(self, hint_name: str, text: str, encoding: str = ENCODING) -> None:
        path = self.root / hint_name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding=encoding)
        self.written.append(path)
        logger.info("Wrote %s", path)


@dataclass(frozen=True)
class GeneratorAttribute:
    """Source bundle of an attribute the generator ships to its consumers."""
    generated_file_path: str
    source_code: str
    type_name: str
    type_full_name: str

    @property
    def namespace(self) -> tuple[str, ...]:
        return split_namespace(self.type_full_name)[:-1]


def add_attribute_source(context: SourceContext, attribute: GeneratorAttribute) -> SourceContext:
    context.add_source(attribute.generated_file_path, attribute.source_code, ENCODING)
    return context


def hint_name(namespace: str | tuple[str, ...] | None, file_name: str, suffix: str = GENERATED_SUFFIX) -> str:
    return ".".join((*split_namespace(namespace), file_name)) + suffix


# ---------- file builder ----------

class SourceBuilder:
    """One generated file: preamble, optional file-scoped namespace, type declarations."""

    def __init__(self, header: bool = True, sink: TextSink | None = None) -> None:
        self.sink = sink if sink is not None else TextSink()
        if header:
            for line in PREAMBLE:
                self.sink.append_line(line)
            self.sink.append_line()

    def append_file_namespace(self, namespace: str | tuple[str, ...] | None) -> SourceBuilder:
        segments = split_namespace(namespace)
        if segments:
            self.sink.append("namespace ").append(".".join(segments)).append_line(";")
            self.sink.append_line()
        return self

    def build_type(self, name: str, kind: GeneratedTypeKind) -> OpeningTypeBuilder:
        return OpeningTypeBuilder(self.sink, name, kind)

    def build_class(self, name: str) -> OpeningTypeBuilder:
        return self.build_type(name, GeneratedTypeKind.CLASS)

    def build_interface(self, name: str) -> OpeningTypeBuilder:
        return self.build_type(name, GeneratedTypeKind.INTERFACE)

    def build_struct(self, name: str) -> OpeningTypeBuilder:
        return self.build_type(name, GeneratedTypeKind.STRUCT)

    def build_record(self, name: str) -> OpeningTypeBuilder:
        return self.build_type(name, GeneratedTypeKind.RECORD)

    def build_record_struct(self, name: str) -> OpeningTypeBuilder:
        return self.build_type(name, GeneratedTypeKind.RECORD_STRUCT)

    def to_text(self) -> str:
        return self.sink.to_text()

    def __str__(self) -> str:
        return self.to_text()

    def add_to_context(self, context: SourceContext, symbol: TypeSymbol) -> str:
        return self.add_to_context_named(context, symbol.namespace, symbol.name)

    def add_to_context_named(
        self,
        context: SourceContext,
        namespace: str | tuple[str, ...] | None,
        file_name: str,
        suffix: str = GENERATED_SUFFIX,
    ) -> str:
        name = hint_name(namespace, file_name, suffix)
        context.add_source(name, self.to_text(), ENCODING)
        logger.debug("Registered %s (%d diagnostics)", name, len(self.sink.diagnostics))
        return name
