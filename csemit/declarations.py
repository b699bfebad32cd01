from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TypeVar

from .codegen import IndentationScope, TextSink
from .diagnostics import BuilderClosedError
from .members import MethodBuilder, PropertyBuilder
from .model import Accessibility, GeneratedTypeKind, TypeReference, split_namespace

logger = logging.getLogger(__name__)

_T = TypeVar("_T")

# Returns the inherited type for a source item, or None to skip it.
InterfaceGetter = Callable[[_T], "TypeReference | None"]

_TYPE_KEYWORDS: dict[GeneratedTypeKind, str] = {
    GeneratedTypeKind.CLASS: "class",
    GeneratedTypeKind.INTERFACE: "interface",
    GeneratedTypeKind.STRUCT: "struct",
    GeneratedTypeKind.RECORD: "record",
    GeneratedTypeKind.RECORD_STRUCT: "record struct",
}


class OpeningTypeBuilder:
    """Type header: ``[accessibility] [partial] <kind> <name>``."""

    def __init__(self, sink: TextSink, name: str, kind: GeneratedTypeKind) -> None:
        keyword = _TYPE_KEYWORDS.get(kind) if isinstance(kind, GeneratedTypeKind) else None
        if keyword is None:
            raise ValueError(f"Unsupported type kind {kind!r}. Allowed: {[k.name for k in _TYPE_KEYWORDS]}")
        self._sink = sink
        self._name = name
        self._keyword = keyword
        self._accessibility = Accessibility.NOT_APPLICABLE
        self._is_partial = False

    def with_partial(self, value: bool = True) -> OpeningTypeBuilder:
        self._is_partial = value
        return self

    def with_accessibility(self, accessibility: Accessibility) -> OpeningTypeBuilder:
        self._accessibility = accessibility
        return self

    def commit_header(self) -> TypeInheritanceBuilder:
        sink = self._sink
        if self._accessibility is not Accessibility.NOT_APPLICABLE:
            sink.append(self._accessibility.keyword).append_char(" ")
        if self._is_partial:
            sink.append("partial ")
        sink.append(self._keyword).append_char(" ").append(self._name)
        logger.debug("Opened %s %s", self._keyword, self._name)
        return TypeInheritanceBuilder(sink)


class TypeInheritanceBuilder:
    def __init__(self, sink: TextSink) -> None:
        self._sink = sink
        self._inheritance_written = False

    def append_inheritance(self, type_ref: TypeReference) -> TypeInheritanceBuilder:
        """Append a base class or interface. Whether it may legally appear here is not checked."""
        self._write_separator()
        self._sink.append_type_reference(type_ref)
        return self

    def append_inheritance_name(self, namespace: str | tuple[str, ...] | None, name: str) -> TypeInheritanceBuilder:
        """Append a base type by namespace and name, without any checks."""
        self._write_separator()
        if split_namespace(namespace):
            self._sink.append_namespace(namespace).append_char(".")
        self._sink.append(name)
        return self

    def append_inheritances(
        self,
        items: Iterable[_T],
        getter: InterfaceGetter[_T] | None = None,
    ) -> TypeInheritanceBuilder:
        for item in items:
            type_ref = getter(item) if getter is not None else item
            if type_ref is None:
                continue
            self.append_inheritance(type_ref)  # type: ignore[arg-type]
        return self

    def open_body(self) -> TypeBuilder:
        self._sink.append_line()
        self._sink.append_line("{")
        return TypeBuilder(self._sink)

    def _write_separator(self) -> None:
        if self._inheritance_written:
            self._sink.append(", ")
        else:
            self._sink.append(" : ")
            self._inheritance_written = True


class TypeBuilder:
    """Dispenses members of one type; closing it writes the closing brace."""

    def __init__(self, sink: TextSink) -> None:
        self._sink = sink
        self._scope: IndentationScope = sink.block()
        self._any_member_written = False
        self._closed = False

    def build_property(self, property_type: TypeReference, name: str) -> PropertyBuilder:
        self._separate_members()
        return PropertyBuilder(self._sink, property_type, name)

    def build_method(self, name: str, return_type: TypeReference | None = None) -> MethodBuilder:
        self._separate_members()
        return MethodBuilder(self._sink, name, return_type)

    def close(self) -> None:
        if self._closed:
            return
        self._scope.release()
        self._sink.append_line("}")
        self._closed = True

    def _separate_members(self) -> None:
        if self._closed:
            raise BuilderClosedError("Type is already closed.")
        if self._any_member_written:
            self._sink.append_line()
        else:
            self._any_member_written = True

    def __enter__(self) -> TypeBuilder:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
