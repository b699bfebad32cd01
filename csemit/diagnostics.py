from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class EmissionError(Exception):
    """Base class for hard failures raised while emitting source text."""


class UnsupportedTypeReferenceError(EmissionError):
    """The type reference has no valid rendering (e.g. multi-dimensional arrays)."""


class ScopeOrderError(EmissionError):
    """An indentation scope was released while an inner scope was still open."""


class BuilderClosedError(EmissionError):
    """A builder was used after its closing call."""


# Diagnostic codes for caller misuse that is tolerated but reported.
NO_ACCESSOR = "CSE001"
INITIALIZER_DROPPED = "CSE002"
MODIFIER_NOT_ACTIVE = "CSE003"


@dataclass(frozen=True)
class Diagnostic:
    code: str
    message: str

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


def report(diagnostics: list[Diagnostic], code: str, message: str) -> Diagnostic:
    """Record a non-fatal diagnostic and log it."""
    diag = Diagnostic(code, message)
    diagnostics.append(diag)
    logger.warning("%s", diag)
    return diag
