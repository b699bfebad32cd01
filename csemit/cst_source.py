from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

import libcst as cst

from .model import (
    BOOL,
    DOUBLE,
    LONG,
    OBJECT,
    STRING,
    VOID,
    Accessibility,
    AttributeDescriptor,
    FieldSymbol,
    GeneratedTypeKind,
    SpecialType,
    TypeReference,
    TypeSymbol,
    array_of,
    split_namespace,
)
from .query import (
    NONE_TOKEN,
    AttributeSyntaxContext,
    CancellationToken,
    ContextTransform,
    IncrementalValues,
    NodePredicate,
)

"""Python modules as a symbol source.

Plays the host compiler's part for the query adapter: module-level classes
carrying a decorator are the "declarations with attribute X", the module
path is their namespace and annotated class attributes are their fields.
"""

logger = logging.getLogger(__name__)

_GENERIC_NS = ("System", "Collections", "Generic")

_SIMPLE_TYPES: dict[str, TypeReference] = {
    "str": STRING,
    "int": LONG,
    "float": DOUBLE,
    "bool": BOOL,
    "object": OBJECT,
    "Any": OBJECT,
    "None": VOID,
    "bytes": array_of(TypeReference.primitive(SpecialType.BYTE)),
    "Decimal": TypeReference.primitive(SpecialType.DECIMAL),
    "datetime": TypeReference.named("System", "DateTime"),
    "date": TypeReference.named("System", "DateOnly"),
    "UUID": TypeReference.named("System", "Guid"),
}

_LIST_NAMES = {"list", "List", "Sequence", "Iterable", "tuple", "Tuple"}
_SET_NAMES = {"set", "Set", "frozenset", "FrozenSet", "AbstractSet"}
_DICT_NAMES = {"dict", "Dict", "Mapping", "MutableMapping"}
_IGNORED_BASES = {"object", "Generic", "Protocol"}


# ---------- compilation snapshot ----------

@dataclass
class Compilation:
    """Module name -> source text; one immutable-by-convention snapshot."""
    modules: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_directory(cls, root: Path) -> Compilation:
        modules: dict[str, str] = {}
        for path in sorted(root.rglob("*.py")):
            if any(part in {".git", ".venv", "venv", "__pycache__"} for part in path.relative_to(root).parts):
                continue
            modules[module_name(path.relative_to(root))] = path.read_text(encoding="utf-8")
        logger.debug("Loaded %d modules from %s", len(modules), root)
        return cls(modules)

    def with_module(self, name: str, code: str) -> Compilation:
        return Compilation({**self.modules, name: code})


def module_name(relative: Path) -> str:
    parts = list(relative.with_suffix("").parts)
    if parts and parts[-1] == "__init__":
        parts.pop()
    return ".".join(parts)


# ---------- helpers ----------

def _attr_name(node: cst.BaseExpression) -> str | None:
    """Return dotted name for an Attribute/Name, e.g., 'models.export'."""
    if isinstance(node, cst.Name):
        return node.value
    if isinstance(node, cst.Attribute):
        left = _attr_name(node.value)
        if left:
            return f"{left}.{node.attr.value}"
    return None


def _candidate_names(fully_qualified_name: str) -> set[str]:
    """Spellings a decorator may use for the attribute, lower-cased (``@export`` matches ``ExportAttribute``)."""
    simple = fully_qualified_name.rsplit(".", 1)[-1]
    names = {fully_qualified_name, simple}
    for n in list(names):
        if n.endswith("Attribute") and len(n) > len("Attribute"):
            names.add(n[: -len("Attribute")])
    return {n.lower() for n in names}


def csharp_literal(expr: cst.BaseExpression, module: cst.Module) -> str:
    """Re-render a Python literal as C# literal text; other expressions verbatim."""
    if isinstance(expr, (cst.SimpleString, cst.ConcatenatedString)):
        value = expr.evaluated_value
        if isinstance(value, str):
            return json.dumps(value, ensure_ascii=False)
    if isinstance(expr, (cst.Integer, cst.Float)):
        return str(expr.evaluated_value)
    if isinstance(expr, cst.Name) and expr.value in {"True", "False", "None"}:
        return {"True": "true", "False": "false", "None": "null"}[expr.value]
    if isinstance(expr, cst.UnaryOperation) and isinstance(expr.operator, cst.Minus):
        return "-" + csharp_literal(expr.expression, module)
    return module.code_for_node(expr)


def is_literal(expr: cst.BaseExpression) -> bool:
    if isinstance(expr, (cst.SimpleString, cst.ConcatenatedString)):
        # bytes have no C# literal form
        return isinstance(expr.evaluated_value, str)
    if isinstance(expr, (cst.Integer, cst.Float)):
        return True
    if isinstance(expr, cst.Name):
        return expr.value in {"True", "False", "None"}
    if isinstance(expr, cst.UnaryOperation):
        return is_literal(expr.expression)
    return False


def annotation_to_reference(expr: cst.BaseExpression, namespace: tuple[str, ...] = ()) -> TypeReference:
    """Map a Python annotation onto a C# type reference."""
    if isinstance(expr, cst.SimpleString):
        value = expr.evaluated_value
        if isinstance(value, str):
            try:
                return annotation_to_reference(cst.parse_expression(value), namespace)
            except cst.ParserSyntaxError:
                logger.warning("Unparsable forward reference %r; using object", value)
                return OBJECT

    if isinstance(expr, cst.BinaryOperation) and isinstance(expr.operator, cst.BitOr):
        left, right = expr.left, expr.right
        if isinstance(right, cst.Name) and right.value == "None":
            return annotation_to_reference(left, namespace).as_nullable()
        if isinstance(left, cst.Name) and left.value == "None":
            return annotation_to_reference(right, namespace).as_nullable()
        return OBJECT

    if isinstance(expr, cst.Subscript):
        base = _attr_name(expr.value) or ""
        simple = base.rsplit(".", 1)[-1]
        args = [
            el.slice.value
            for el in expr.slice
            if isinstance(el.slice, cst.Index)
        ]
        args = [a for a in args if not isinstance(a, cst.Ellipsis)]
        refs = [annotation_to_reference(a, namespace) for a in args]
        if simple == "Optional" and len(refs) == 1:
            return refs[0].as_nullable()
        if simple == "Union":
            non_none = [a for a, r in zip(args, refs) if not (isinstance(a, cst.Name) and a.value == "None")]
            if len(non_none) == 1 and len(refs) == 2:
                return annotation_to_reference(non_none[0], namespace).as_nullable()
            return OBJECT
        if simple in _LIST_NAMES and refs:
            return TypeReference.named(_GENERIC_NS, "List", refs[0])
        if simple in _SET_NAMES and refs:
            return TypeReference.named(_GENERIC_NS, "HashSet", refs[0])
        if simple in _DICT_NAMES and len(refs) == 2:
            return TypeReference.named(_GENERIC_NS, "Dictionary", *refs)
        ref = annotation_to_reference(expr.value, namespace)
        return ref.with_type_arguments(*refs)

    dotted = _attr_name(expr)
    if dotted is None:
        return OBJECT
    simple = dotted.rsplit(".", 1)[-1]
    if simple in _SIMPLE_TYPES:
        return _SIMPLE_TYPES[simple]
    if "." in dotted:
        ns, _, name = dotted.rpartition(".")
        return TypeReference.named(ns, name)
    return TypeReference(name=dotted, namespace=namespace)


def _type_kind(call: cst.Call, module: cst.Module) -> GeneratedTypeKind | None:
    """The ``kind=`` keyword of the decorator, or None when it names no known kind."""
    for arg in call.args:
        if arg.keyword is not None and arg.keyword.value == "kind":
            raw = csharp_literal(arg.value, module).strip('"')
            try:
                return GeneratedTypeKind(raw)
            except ValueError:
                return None
    return GeneratedTypeKind.CLASS


def _base_name(expr: cst.BaseExpression) -> str:
    """Simple name of a base class, looking through ``Generic[T]``-style subscripts."""
    if isinstance(expr, cst.Subscript):
        expr = expr.value
    return (_attr_name(expr) or "").rsplit(".", 1)[-1]


def _fields(node: cst.ClassDef, module: cst.Module, namespace: tuple[str, ...]) -> tuple[FieldSymbol, ...]:
    out: list[FieldSymbol] = []
    body = node.body.body if isinstance(node.body, cst.IndentedBlock) else ()
    for stmt in body:
        if not isinstance(stmt, cst.SimpleStatementLine):
            continue
        for small in stmt.body:
            if not isinstance(small, cst.AnnAssign) or not isinstance(small.target, cst.Name):
                continue
            annotation = small.annotation.annotation
            if (_attr_name(annotation) or "").endswith("ClassVar") or (
                isinstance(annotation, cst.Subscript)
                and (_attr_name(annotation.value) or "").endswith("ClassVar")
            ):
                continue
            value = small.value
            out.append(
                FieldSymbol(
                    name=small.target.value,
                    type=annotation_to_reference(annotation, namespace),
                    default=csharp_literal(value, module) if value is not None and is_literal(value) else None,
                    required=value is None,
                )
            )
    return tuple(out)


# ---------- provider ----------

class CstSyntaxProvider:
    """Answers attribute queries over a :class:`Compilation` using LibCST."""

    def __init__(self, compilation: Compilation) -> None:
        self.compilation = compilation

    def for_attribute_with_metadata_name(
        self,
        fully_qualified_name: str,
        predicate: NodePredicate,
        transform: ContextTransform,
        cancellation: CancellationToken = NONE_TOKEN,
    ) -> IncrementalValues:
        names = _candidate_names(fully_qualified_name)
        attribute_type = TypeReference.named(*_split_full_name(fully_qualified_name))

        def produce() -> Iterator:
            for mod_name, code in sorted(self.compilation.modules.items()):
                cancellation.raise_if_cancelled()
                try:
                    module = cst.parse_module(code)
                except cst.ParserSyntaxError as e:
                    logger.warning("Skipping %s: %s", mod_name, e)
                    continue
                namespace = split_namespace(mod_name)
                for node in module.body:
                    if not isinstance(node, cst.ClassDef):
                        continue
                    matches = [d for d in node.decorators if (_decorator_name(d) or "").lower() in names]
                    if not matches or not predicate(node, cancellation):
                        continue
                    symbol = self._symbol(node, module, namespace, matches[0])
                    if symbol is None:
                        continue
                    attributes = tuple(
                        AttributeDescriptor(attribute_type, _decorator_arguments(d, module)) for d in matches
                    )
                    logger.debug("Matched %s.%s", mod_name, symbol.name)
                    yield transform(AttributeSyntaxContext(node, symbol, attributes), cancellation)

        return IncrementalValues(produce)

    def _symbol(
        self,
        node: cst.ClassDef,
        module: cst.Module,
        namespace: tuple[str, ...],
        decorator: cst.Decorator,
    ) -> TypeSymbol | None:
        name = node.name.value
        kind: GeneratedTypeKind | None = GeneratedTypeKind.CLASS
        if isinstance(decorator.decorator, cst.Call):
            kind = _type_kind(decorator.decorator, module)
        if kind is None:
            logger.warning(
                "Skipping %s: unsupported kind in %s. Allowed: %s",
                name,
                module.code_for_node(decorator.decorator),
                [k.value for k in GeneratedTypeKind],
            )
            return None
        bases = tuple(
            annotation_to_reference(b.value, namespace)
            for b in node.bases
            if b.keyword is None and _base_name(b.value) not in _IGNORED_BASES
        )
        return TypeSymbol(
            name=name,
            namespace=namespace,
            accessibility=Accessibility.INTERNAL if name.startswith("_") else Accessibility.PUBLIC,
            kind=kind,
            bases=bases,
            fields=_fields(node, module, namespace),
        )


def _split_full_name(fully_qualified_name: str) -> tuple[str, str]:
    ns, _, name = fully_qualified_name.rpartition(".")
    return ns, name


def _decorator_name(decorator: cst.Decorator) -> str | None:
    expr = decorator.decorator
    if isinstance(expr, cst.Call):
        expr = expr.func
    return _attr_name(expr)


def _decorator_arguments(decorator: cst.Decorator, module: cst.Module) -> tuple[str, ...]:
    expr = decorator.decorator
    if not isinstance(expr, cst.Call):
        return ()
    rendered: list[str] = []
    for arg in expr.args:
        text = csharp_literal(arg.value, module)
        rendered.append(f"{arg.keyword.value} = {text}" if arg.keyword is not None else text)
    return tuple(rendered)
