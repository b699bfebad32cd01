from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .diagnostics import Diagnostic, ScopeOrderError
from .model import TypeReference
from .names import render_doc_reference, render_namespace, render_type_reference

logger = logging.getLogger(__name__)


@dataclass
class TextSink:
    """
    Append-only, indentation-aware text buffer shared by every builder of
    one emission session. Indentation is written lazily, on the first
    non-empty write of each line, so blank lines carry no trailing tabs.
    """
    indent: str = "\t"
    newline: str = "\n"
    chunks: list[str] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    _level: int = 0
    _fresh_line: bool = True

    @property
    def level(self) -> int:
        return self._level

    # ---------- raw writes ----------

    def append(self, text: str) -> TextSink:
        if not text:
            return self
        self._ensure_indentation()
        self.chunks.append(text)
        return self

    def append_char(self, c: str) -> TextSink:
        self._ensure_indentation()
        self.chunks.append(c)
        return self

    def append_line(self, text: str = "") -> TextSink:
        if text:
            self._ensure_indentation()
            self.chunks.append(text)
        self.chunks.append(self.newline)
        self._fresh_line = True
        return self

    def _ensure_indentation(self) -> None:
        if not self._fresh_line:
            return
        if self._level > 0:
            self.chunks.append(self.indent * self._level)
        self._fresh_line = False

    # ---------- names ----------

    def append_namespace(self, namespace: str | tuple[str, ...] | None, include_global: bool = True) -> TextSink:
        return self.append(render_namespace(namespace, include_global))

    def append_type_reference(
        self,
        ref: TypeReference,
        allow_keyword_alias: bool = True,
        for_documentation: bool = False,
    ) -> TextSink:
        return self.append(render_type_reference(ref, allow_keyword_alias, for_documentation))

    def append_doc_reference(self, ref: TypeReference, member_name: str) -> TextSink:
        return self.append(render_doc_reference(ref, member_name))

    # ---------- indentation ----------

    def block(self) -> IndentationScope:
        """Acquire one indentation level; release it with ``with`` or ``release()``."""
        return IndentationScope(self)

    enter_indented_scope = block

    def to_text(self) -> str:
        return "".join(self.chunks)

    def __str__(self) -> str:
        return self.to_text()


class IndentationScope:
    def __init__(self, sink: TextSink) -> None:
        self.sink = sink
        sink._level += 1
        self._depth = sink._level
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            return
        if self.sink._level != self._depth:
            raise ScopeOrderError(
                f"Releasing indentation scope at depth {self._depth} "
                f"while the sink is at depth {self.sink._level}."
            )
        self.sink._level -= 1
        self._released = True

    def __enter__(self) -> IndentationScope:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
