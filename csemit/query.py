"""Attribute-driven symbol queries.

Routes a host's "every declaration carrying attribute X" query into the
typed ``(symbol, attributes) -> T`` transform that generators are written
against. No emission happens here.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar

import libcst as cst

from .model import AttributeDescriptor, TypeSymbol
from .source import GeneratorAttribute

logger = logging.getLogger(__name__)

_T = TypeVar("_T")
_N = TypeVar("_N")
_S = TypeVar("_S")


class OperationCancelledError(Exception):
    pass


class CancellationToken:
    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError("Operation was cancelled.")


NONE_TOKEN = CancellationToken()


@dataclass(frozen=True)
class AttributeSyntaxContext(Generic[_N, _S]):
    """A matched declaration: its syntax node, its symbol and the matching attributes."""
    target_node: _N
    target_symbol: _S
    attributes: tuple[AttributeDescriptor, ...]


NodePredicate = Callable[[Any, CancellationToken], bool]
ContextTransform = Callable[[AttributeSyntaxContext[Any, Any], CancellationToken], _T]


class IncrementalValues(Generic[_T]):
    """Lazy sequence recomputed on every iteration."""

    def __init__(self, produce: Callable[[], Iterator[_T]]) -> None:
        self._produce = produce

    def __iter__(self) -> Iterator[_T]:
        return self._produce()

    def collect(self) -> list[_T]:
        return list(self)


class SyntaxValueProvider(Protocol):
    def for_attribute_with_metadata_name(
        self,
        fully_qualified_name: str,
        predicate: NodePredicate,
        transform: ContextTransform[_T],
        cancellation: CancellationToken = ...,
    ) -> IncrementalValues[_T]: ...


class SymbolValuesProvider(Generic[_N, _S]):
    def __init__(
        self,
        syntax_provider: SyntaxValueProvider,
        attribute: GeneratorAttribute,
        node_type: type[_N],
        predicate: Callable[[_N, CancellationToken], bool] | None = None,
    ) -> None:
        self.syntax_provider = syntax_provider
        self.attribute = attribute
        self.node_type = node_type
        self.predicate = predicate

    def where(self, predicate: Callable[[_N, CancellationToken], bool]) -> SymbolValuesProvider[_N, _S]:
        return SymbolValuesProvider(self.syntax_provider, self.attribute, self.node_type, predicate)

    def transform(
        self,
        fn: Callable[[_S, tuple[AttributeDescriptor, ...], CancellationToken], _T],
        cancellation: CancellationToken = NONE_TOKEN,
    ) -> IncrementalValues[_T]:
        def composed_transform(context: AttributeSyntaxContext[_N, _S], token: CancellationToken) -> _T:
            return fn(context.target_symbol, context.attributes, token)

        logger.debug("Querying declarations marked with %s", self.attribute.type_full_name)
        return self.syntax_provider.for_attribute_with_metadata_name(
            self.attribute.type_full_name,
            self._composed_predicate(),
            composed_transform,
            cancellation,
        )

    def _composed_predicate(self) -> NodePredicate:
        node_type = self.node_type
        wrapped = self.predicate

        def predicate(node: Any, token: CancellationToken) -> bool:
            if not isinstance(node, node_type):
                return False
            return wrapped(node, token) if wrapped is not None else True

        return predicate


def for_type_with_attribute(
    syntax_provider: SyntaxValueProvider,
    attribute: GeneratorAttribute,
) -> SymbolValuesProvider[Any, TypeSymbol]:
    """Query class declarations carrying ``attribute``."""
    return SymbolValuesProvider(syntax_provider, attribute, cst.ClassDef)

