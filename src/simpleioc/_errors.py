from __future__ import annotations

from typing import Any

from ._types import type_name


class IocError(Exception):
    """Base class for every error raised by simpleioc."""


class ConfigurationError(IocError, ValueError):
    """Raised synchronously when a binding is declared or configured incorrectly."""


class ResolveError(IocError, RuntimeError):
    """Raised when a type cannot be resolved.

    `chain` lists the types that were being resolved when the failure happened,
    outermost first. `attempts` collects one diagnostic line per constructor
    candidate that was tried and rejected.
    """

    def __init__(
        self,
        message: str = "",
        *,
        chain: list[Any] | None = None,
        attempts: list[str] | None = None,
    ) -> None:
        self.chain = list(chain or [])
        self.attempts = list(attempts or [])
        if self.chain:
            message = f"{message} (resolution chain: {' -> '.join(type_name(t) for t in self.chain)})"
        if self.attempts:
            message = "\n  ".join([message, *self.attempts])
        super().__init__(message)


class ObjectDisposedError(IocError, RuntimeError):
    """Raised when an object is used after it has been disposed."""
