from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum

from .codegen import IndentationScope, TextSink
from .diagnostics import (
    INITIALIZER_DROPPED,
    MODIFIER_NOT_ACTIVE,
    NO_ACCESSOR,
    BuilderClosedError,
    report,
)
from .model import (
    Accessibility,
    AttributeDescriptor,
    MethodDescriptor,
    RefKind,
    TypeReference,
)

logger = logging.getLogger(__name__)


class VirtualModifier(Enum):
    NONE = ""
    ABSTRACT = "abstract"
    VIRTUAL = "virtual"
    OVERRIDE = "override"


# -----------------------------
# Shared member surface
# -----------------------------

class _MemberBuilder:
    """Documentation, attributes and modifiers common to properties and methods."""

    def __init__(self, sink: TextSink, name: str) -> None:
        self._sink = sink
        self._name = name
        self._inherit_doc: tuple[TypeReference, str] | None = None
        self._attributes: tuple[AttributeDescriptor, ...] = ()
        self._accessibility = Accessibility.NOT_APPLICABLE
        self._is_static = False
        self._is_new = False
        self._virtual_modifier = VirtualModifier.NONE

    def with_inherit_doc(self, type_ref: TypeReference, member_name: str):
        self._inherit_doc = (type_ref, member_name)
        return self

    def with_attributes(self, attributes: Iterable[AttributeDescriptor]):
        self._attributes = tuple(attributes)
        return self

    def with_accessibility(self, accessibility: Accessibility):
        self._accessibility = accessibility
        return self

    def with_static(self, value: bool = True):
        self._is_static = value
        return self

    def with_new(self, value: bool = True):
        """``new`` hides a member inherited from a base type."""
        self._is_new = value
        return self

    def with_virtual(self, value: bool = True):
        return self._with_virtual_modifier(VirtualModifier.VIRTUAL, value)

    def with_abstract(self, value: bool = True):
        return self._with_virtual_modifier(VirtualModifier.ABSTRACT, value)

    def with_override(self, value: bool = True):
        return self._with_virtual_modifier(VirtualModifier.OVERRIDE, value)

    def clear_virtual_modifier(self):
        self._virtual_modifier = VirtualModifier.NONE
        return self

    @property
    def virtual_modifier(self) -> VirtualModifier:
        return self._virtual_modifier

    def _with_virtual_modifier(self, modifier: VirtualModifier, value: bool):
        if value:
            self._virtual_modifier = modifier
        elif self._virtual_modifier is modifier:
            self._virtual_modifier = VirtualModifier.NONE
        else:
            report(
                self._sink.diagnostics,
                MODIFIER_NOT_ACTIVE,
                f"'{modifier.value}' is not set on '{self._name}'; use clear_virtual_modifier().",
            )
        return self

    def _append_documentation_and_attributes(self) -> None:
        sink = self._sink
        if self._inherit_doc is not None:
            type_ref, member = self._inherit_doc
            sink.append("/// <inheritdoc ").append_doc_reference(type_ref, member).append_line("/>")

        for attribute in self._attributes:
            sink.append_char("[").append_type_reference(attribute.attribute_type)
            if attribute.arguments:
                sink.append_char("(").append(",".join(attribute.arguments)).append_char(")")
            sink.append_line("]")

    def _append_accessibility(self) -> None:
        if self._accessibility is not Accessibility.NOT_APPLICABLE:
            self._sink.append(self._accessibility.keyword).append_char(" ")

    def _append_virtual_modifier(self) -> None:
        if self._virtual_modifier is not VirtualModifier.NONE:
            self._sink.append(self._virtual_modifier.value).append_char(" ")


# -----------------------------
# Properties
# -----------------------------

class PropertyBuilder(_MemberBuilder):
    def __init__(self, sink: TextSink, property_type: TypeReference, name: str) -> None:
        super().__init__(sink, name)
        self._property_type = property_type
        self._is_required = False
        self._implicit_getter = False
        self._implicit_setter = False
        self._init_only = False
        self._getter_expression: str | None = None
        self._initializer: str | None = None

    def with_required(self, value: bool = True) -> PropertyBuilder:
        self._is_required = value
        return self

    def with_implicit_getter(self, value: bool = True) -> PropertyBuilder:
        self._implicit_getter = value
        return self

    def with_implicit_setter(self, value: bool = True, init_only: bool = False) -> PropertyBuilder:
        self._implicit_setter = value
        self._init_only = init_only
        return self

    def with_explicit_getter_expression(self, expression: str) -> PropertyBuilder:
        self._getter_expression = expression
        return self

    def with_initializer(self, expression: str) -> PropertyBuilder:
        self._initializer = expression
        return self

    def commit(self) -> None:
        """Write the property declaration. The builder must not be used afterward."""
        sink = self._sink
        self._append_documentation_and_attributes()

        self._append_accessibility()
        if self._is_static:
            sink.append("static ")
        if self._is_required:
            sink.append("required ")
        if self._is_new:
            sink.append("new ")
        self._append_virtual_modifier()

        sink.append_type_reference(self._property_type).append_char(" ").append(self._name)

        setter = "init;" if self._init_only else "set;"
        if self._getter_expression is not None:
            sink.append(" => ").append(self._getter_expression).append_char(";")
            if self._initializer is not None:
                report(
                    sink.diagnostics,
                    INITIALIZER_DROPPED,
                    f"Initializer of '{self._name}' dropped: an expression-bodied getter is set.",
                )
        elif self._implicit_getter and self._implicit_setter:
            sink.append(f" {{ get; {setter} }}")
        elif self._implicit_getter:
            sink.append(" { get; }")
        elif self._implicit_setter:
            sink.append(f" {{ {setter} }}")
        else:
            report(sink.diagnostics, NO_ACCESSOR, f"No accessor configured for property '{self._name}'.")

        if self._initializer is not None and self._getter_expression is None:
            sink.append(" = ").append(self._initializer).append_char(";")

        sink.append_line()
        logger.debug("Committed property %s", self._name)


# -----------------------------
# Methods
# -----------------------------

class MethodBuilder(_MemberBuilder):
    def __init__(self, sink: TextSink, name: str, return_type: TypeReference | None = None) -> None:
        super().__init__(sink, name)
        self._return_type = return_type  # None means void
        self._is_async = False
        self._is_partial = False

    def with_async(self, value: bool = True) -> MethodBuilder:
        self._is_async = value
        return self

    def with_partial(self, value: bool = True) -> MethodBuilder:
        self._is_partial = value
        return self

    def open_parameters(self) -> MethodParametersBuilder:
        self._append_documentation_and_signature()
        logger.debug("Opened parameters of %s", self._name)
        return MethodParametersBuilder(self._sink)

    def _append_documentation_and_signature(self) -> None:
        sink = self._sink
        self._append_documentation_and_attributes()

        self._append_accessibility()
        if self._is_static:
            sink.append("static ")
        if self._is_new:
            sink.append("new ")
        self._append_virtual_modifier()
        if self._is_partial:
            sink.append("partial ")
        if self._is_async:
            sink.append("async ")

        if self._return_type is not None:
            sink.append_type_reference(self._return_type).append_char(" ")
        else:
            sink.append("void ")
        sink.append(self._name).append_char("(")


class MethodParametersBuilder:
    def __init__(self, sink: TextSink) -> None:
        self._sink = sink
        self._any_written = False

    def add_parameter(self, type_ref: TypeReference, name: str, default: str | None = None) -> MethodParametersBuilder:
        self._separate()
        self._sink.append_type_reference(type_ref).append_char(" ").append(name)
        if default is not None:
            self._sink.append(" = ").append(default)
        return self

    def add_ref_parameter(self, type_ref: TypeReference, name: str) -> MethodParametersBuilder:
        return self._add_by_reference(RefKind.REF, type_ref, name)

    def add_out_parameter(self, type_ref: TypeReference, name: str) -> MethodParametersBuilder:
        return self._add_by_reference(RefKind.OUT, type_ref, name)

    def add_in_parameter(self, type_ref: TypeReference, name: str) -> MethodParametersBuilder:
        return self._add_by_reference(RefKind.IN, type_ref, name)

    def add_params_parameter(self, element_type: TypeReference, name: str) -> MethodParametersBuilder:
        self._separate()
        self._sink.append("params ").append_type_reference(element_type).append("[] ").append(name)
        return self

    def add_parameters_from(self, method: MethodDescriptor) -> MethodParametersBuilder:
        """Copy the parameter list of an existing method, modifiers and defaults included."""
        sink = self._sink
        for parameter in method.parameters:
            self._separate()
            if parameter.ref_kind is not RefKind.NONE:
                sink.append(parameter.ref_kind.value).append_char(" ")
            if parameter.is_params:
                sink.append("params ")
            sink.append_type_reference(parameter.type).append_char(" ").append(parameter.name)
            if parameter.has_explicit_default:
                sink.append(" = ").append(default_literal(parameter.explicit_default))
        return self

    def open_body(self) -> MethodBodyBuilder:
        self._sink.append_line(")")
        return MethodBodyBuilder(self._sink)

    def append_abstract(self) -> None:
        """Close the declaration without a body (abstract or interface member)."""
        self._sink.append_line(");")

    def append_expression(self, expression: str) -> None:
        self._sink.append(") => ").append(expression).append_line(";")

    def _add_by_reference(self, ref_kind: RefKind, type_ref: TypeReference, name: str) -> MethodParametersBuilder:
        self._separate()
        self._sink.append(ref_kind.value).append_char(" ").append_type_reference(type_ref).append_char(" ").append(name)
        return self

    def _separate(self) -> None:
        if self._any_written:
            self._sink.append(", ")
        else:
            self._any_written = True


def default_literal(value: object | None) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class MethodBodyBuilder:
    def __init__(self, sink: TextSink) -> None:
        self._sink = sink
        sink.append_line("{")
        self._scope: IndentationScope = sink.block()
        self._closed = False

    def append_line(self, code: str = "") -> MethodBodyBuilder:
        self._check_open()
        self._sink.append_line(code)
        return self

    def append_return(self, expression: str) -> MethodBodyBuilder:
        self._check_open()
        self._sink.append("return ").append(expression).append_line(";")
        return self

    def append_throw(self, exception_expression: str) -> MethodBodyBuilder:
        self._check_open()
        self._sink.append("throw ").append(exception_expression).append_line(";")
        return self

    def close(self) -> None:
        if self._closed:
            return
        self._scope.release()
        self._sink.append_line("}")
        self._closed = True

    def _check_open(self) -> None:
        if self._closed:
            raise BuilderClosedError("Method body is already closed.")

    def __enter__(self) -> MethodBodyBuilder:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
