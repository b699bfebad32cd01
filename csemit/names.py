from __future__ import annotations

from .diagnostics import UnsupportedTypeReferenceError
from .model import SpecialType, TypeReference, split_namespace

GLOBAL_PREFIX = "global::"

# C# keywords standing in for the qualified names of built-in types.
KEYWORD_ALIASES: dict[SpecialType, str] = {
    SpecialType.BOOLEAN: "bool",
    SpecialType.OBJECT: "object",
    SpecialType.VOID: "void",
    SpecialType.CHAR: "char",
    SpecialType.SBYTE: "sbyte",
    SpecialType.BYTE: "byte",
    SpecialType.INT16: "short",
    SpecialType.UINT16: "ushort",
    SpecialType.INT32: "int",
    SpecialType.UINT32: "uint",
    SpecialType.INT64: "long",
    SpecialType.UINT64: "ulong",
    SpecialType.DECIMAL: "decimal",
    SpecialType.SINGLE: "float",
    SpecialType.DOUBLE: "double",
    SpecialType.STRING: "string",
}


def render_namespace(namespace: str | tuple[str, ...] | None, include_global: bool = True) -> str:
    """Dotted namespace, ``global::``-prefixed unless disabled. Global namespace is empty."""
    segments = split_namespace(namespace)
    if not segments:
        return ""
    prefix = GLOBAL_PREFIX if include_global else ""
    return prefix + ".".join(segments)


def render_type_reference(
    ref: TypeReference,
    allow_keyword_alias: bool = True,
    for_documentation: bool = False,
) -> str:
    """Render ``ref`` as C# code, or as documentation (``cref``) syntax."""
    parts: list[str] = []
    _render(ref, allow_keyword_alias, for_documentation, parts)
    return "".join(parts)


def render_doc_reference(ref: TypeReference, member_name: str) -> str:
    """``cref="Ns.Type.Member"``, ready to sit inside a documentation tag."""
    return f'cref="{render_type_reference(ref, for_documentation=True)}.{member_name}"'


def _render(ref: TypeReference, allow_keyword: bool, for_doc: bool, out: list[str]) -> None:
    if ref.is_type_parameter:
        out.append(ref.name)
        return

    if len(ref.type_arguments) == 1:
        if ref.special_type is SpecialType.NULLABLE_T:
            _render(ref.type_arguments[0], allow_keyword, for_doc, out)
            out.append("?")
            return
        if ref.special_type is SpecialType.ARRAY:
            if ref.array_rank != 1:
                raise UnsupportedTypeReferenceError(
                    f"Multi-dimensional arrays are not supported (rank {ref.array_rank})."
                )
            _render(ref.type_arguments[0], allow_keyword, for_doc, out)
            out.append("[]")
            if ref.nullable:
                out.append("?")
            return

    if allow_keyword:
        keyword = KEYWORD_ALIASES.get(ref.special_type)
        if keyword is not None:
            out.append(keyword)
            if ref.nullable and ref.special_type is not SpecialType.VOID:
                out.append("?")
            return

    if not for_doc:
        out.append(GLOBAL_PREFIX)
    if ref.namespace:
        out.append(".".join(ref.namespace))
        out.append(".")
    out.append(ref.name)

    if ref.type_arguments:
        out.append("{" if for_doc else "<")
        for i, arg in enumerate(ref.type_arguments):
            if i > 0:
                out.append(", ")
            _render(arg, allow_keyword, for_doc, out)
        out.append("}" if for_doc else ">")
    # annotation follows the argument list: List<T>? not List?<T>
    if ref.nullable:
        out.append("?")
