from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

"""Immutable descriptors handed to the emission engine.

The host (a compiler, or the LibCST source in :mod:`csemit.cst_source`)
reduces its live symbols to these values; builders only ever read them.
"""


# -----------------------------
# Enumerations
# -----------------------------

class SpecialType(Enum):
    NONE = "none"
    BOOLEAN = "Boolean"
    VOID = "Void"
    CHAR = "Char"
    SBYTE = "SByte"
    BYTE = "Byte"
    INT16 = "Int16"
    UINT16 = "UInt16"
    INT32 = "Int32"
    UINT32 = "UInt32"
    INT64 = "Int64"
    UINT64 = "UInt64"
    DECIMAL = "Decimal"
    SINGLE = "Single"
    DOUBLE = "Double"
    STRING = "String"
    OBJECT = "Object"
    NULLABLE_T = "Nullable"
    ARRAY = "Array"


class Accessibility(Enum):
    NOT_APPLICABLE = ""
    PUBLIC = "public"
    INTERNAL = "internal"
    PROTECTED = "protected"
    PRIVATE = "private"
    PROTECTED_INTERNAL = "protected internal"
    PRIVATE_PROTECTED = "private protected"

    @property
    def keyword(self) -> str:
        return self.value


class GeneratedTypeKind(Enum):
    """Kind of generated type declaration."""
    CLASS = "class"
    INTERFACE = "interface"
    STRUCT = "struct"
    RECORD = "record"
    RECORD_STRUCT = "record struct"


class RefKind(Enum):
    NONE = ""
    REF = "ref"
    OUT = "out"
    IN = "in"


# -----------------------------
# Type references
# -----------------------------

@dataclass(frozen=True)
class TypeReference:
    name: str
    namespace: tuple[str, ...] = ()
    type_arguments: tuple[TypeReference, ...] = ()
    nullable: bool = False
    special_type: SpecialType = SpecialType.NONE
    is_type_parameter: bool = False
    array_rank: int = 1

    @classmethod
    def named(
        cls,
        namespace: str | tuple[str, ...],
        name: str,
        *type_arguments: TypeReference,
        nullable: bool = False,
    ) -> TypeReference:
        return cls(
            name=name,
            namespace=split_namespace(namespace),
            type_arguments=tuple(type_arguments),
            nullable=nullable,
        )

    @classmethod
    def primitive(cls, special_type: SpecialType, nullable: bool = False) -> TypeReference:
        if special_type in (SpecialType.NONE, SpecialType.NULLABLE_T, SpecialType.ARRAY):
            raise ValueError(f"{special_type} is not a primitive type")
        return cls(
            name=special_type.value,
            namespace=("System",),
            nullable=nullable,
            special_type=special_type,
        )

    @classmethod
    def type_parameter(cls, name: str) -> TypeReference:
        return cls(name=name, is_type_parameter=True)

    @property
    def is_global(self) -> bool:
        return not self.namespace

    @property
    def full_name(self) -> str:
        return ".".join((*self.namespace, self.name))

    def as_nullable(self, nullable: bool = True) -> TypeReference:
        return replace(self, nullable=nullable)

    def with_type_arguments(self, *type_arguments: TypeReference) -> TypeReference:
        return replace(self, type_arguments=tuple(type_arguments))


def split_namespace(namespace: str | tuple[str, ...] | None) -> tuple[str, ...]:
    if namespace is None:
        return ()
    if isinstance(namespace, str):
        return tuple(seg for seg in namespace.split(".") if seg)
    return tuple(namespace)


def nullable_value_of(inner: TypeReference) -> TypeReference:
    """``System.Nullable<inner>``, rendered as ``inner?``."""
    return TypeReference(
        name="Nullable",
        namespace=("System",),
        type_arguments=(inner,),
        special_type=SpecialType.NULLABLE_T,
    )


def array_of(element: TypeReference, rank: int = 1, nullable: bool = False) -> TypeReference:
    return TypeReference(
        name="Array",
        namespace=("System",),
        type_arguments=(element,),
        nullable=nullable,
        special_type=SpecialType.ARRAY,
        array_rank=rank,
    )


# Shorthands used throughout the generator and tests.
BOOL = TypeReference.primitive(SpecialType.BOOLEAN)
INT = TypeReference.primitive(SpecialType.INT32)
LONG = TypeReference.primitive(SpecialType.INT64)
DOUBLE = TypeReference.primitive(SpecialType.DOUBLE)
STRING = TypeReference.primitive(SpecialType.STRING)
OBJECT = TypeReference.primitive(SpecialType.OBJECT)
VOID = TypeReference.primitive(SpecialType.VOID)


# -----------------------------
# Attributes, parameters, symbols
# -----------------------------

@dataclass(frozen=True)
class AttributeDescriptor:
    attribute_type: TypeReference
    arguments: tuple[str, ...] = ()  # literal C# text, already rendered


@dataclass(frozen=True)
class ParameterDescriptor:
    name: str
    type: TypeReference
    ref_kind: RefKind = RefKind.NONE
    is_params: bool = False
    has_explicit_default: bool = False
    explicit_default: object | None = None


@dataclass(frozen=True)
class MethodDescriptor:
    name: str
    parameters: tuple[ParameterDescriptor, ...] = ()
    return_type: TypeReference | None = None


@dataclass(frozen=True)
class FieldSymbol:
    """An annotated field of a host type (``name: annotation = default``)."""
    name: str
    type: TypeReference
    default: str | None = None  # C# literal text
    required: bool = True


@dataclass(frozen=True)
class TypeSymbol:
    name: str
    namespace: tuple[str, ...] = ()
    accessibility: Accessibility = Accessibility.PUBLIC
    kind: GeneratedTypeKind = GeneratedTypeKind.CLASS
    bases: tuple[TypeReference, ...] = ()
    fields: tuple[FieldSymbol, ...] = ()

    def as_reference(self) -> TypeReference:
        return TypeReference(name=self.name, namespace=self.namespace)
