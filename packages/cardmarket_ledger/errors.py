"""Error taxonomy and the warn-and-skip result type.

Per-row problems are not exceptions: validators and the sale builder return an
:class:`Outcome` holding either a value or ``None`` together with the
:class:`RowWarning` entries explaining what happened. Exceptions are reserved
for the file collaborators (:class:`LedgerIOError`) and for configuration
(:class:`ConfigError`). :class:`ConstructionError` only travels inside the
builder and is converted to a warning at its boundary.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Generic, TypeVar

from .logging_setup import get_logger

T = TypeVar("T")

_logger = get_logger("cardmarket_ledger.errors")


class WarningKind(StrEnum):
    VALIDATION = "validation"
    FALLBACK = "fallback"
    CONSTRUCTION = "construction"


@dataclass(frozen=True, slots=True)
class RowWarning:
    """A recoverable problem with a single row, record or order.

    ``payload`` keeps the offending input (raw row, order mapping) so the
    operator can find it in the export.
    """

    kind: WarningKind
    message: str
    context: str
    payload: Mapping[str, Any] | None = None

    def __str__(self) -> str:
        return f"{self.context}: {self.message}"


@dataclass(frozen=True, slots=True)
class Outcome(Generic[T]):
    value: T | None
    warnings: tuple[RowWarning, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.value is not None


class LedgerError(Exception):
    """Base class for errors raised by ``cardmarket_ledger``."""


class ConstructionError(LedgerError):
    """A validated record had a shape the transaction builder cannot use."""


class ConfigError(LedgerError):
    """Configuration (environment or account-mapping file) is unusable."""


class LedgerIOError(LedgerError):
    """A file collaborator failed; the message is prefixed with its context."""

    def __init__(self, context: str, cause: BaseException | str) -> None:
        self.context = context
        self.cause_message = str(cause)
        super().__init__(f"{context}: {self.cause_message}")


def warn(
    kind: WarningKind,
    message: str,
    context: str,
    payload: Mapping[str, Any] | None = None,
) -> RowWarning:
    """Log a row-level warning and return it for accumulation."""

    _logger.warning("%s:%s %s payload=%r", context, kind.value, message, payload)
    return RowWarning(kind=kind, message=message, context=context, payload=payload)


def handle_error(error: BaseException, context: str) -> LedgerIOError:
    """Log ``error`` and wrap it as ``"<context>: <cause>"``.

    Callers ``raise handle_error(e, "...") from e`` so the original traceback
    stays attached. An error that is already a :class:`LedgerIOError` is
    returned unchanged to avoid stacking contexts.
    """

    if isinstance(error, LedgerIOError):
        return error
    _logger.error(
        "io:failed context=%r error=%s message=%s",
        context,
        error.__class__.__name__,
        error,
    )
    return LedgerIOError(context, error)


__all__ = [
    "ConfigError",
    "ConstructionError",
    "LedgerError",
    "LedgerIOError",
    "Outcome",
    "RowWarning",
    "WarningKind",
    "handle_error",
    "warn",
]
