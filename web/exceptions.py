"""Error types raised by the evaluation report pipeline and record store."""
from __future__ import annotations

from typing import Optional


GENERATION_ERROR_PREFIX = "No se pudo generar el documento: "


class DocumentGenerationError(Exception):
    """A document generation call failed.

    The message always carries the user-facing prefix followed by the
    message of the underlying cause.
    """

    def __init__(self, cause: str, *, operation: str = "document generation"):
        self.cause = cause
        self.operation = operation
        super().__init__(f"{GENERATION_ERROR_PREFIX}{cause}")

    @classmethod
    def wrap(cls, exc: BaseException, operation: str = "document generation") -> "DocumentGenerationError":
        """Build an instance of ``cls`` from an arbitrary exception."""
        if isinstance(exc, DocumentGenerationError):
            return cls(exc.cause, operation=operation)
        return cls(str(exc) or exc.__class__.__name__, operation=operation)


class DecodeError(DocumentGenerationError):
    """The embedded evidence image payload is not valid."""


class RenderError(DocumentGenerationError):
    """The composed document could not be serialized."""


class MissingReference(LookupError):
    """A required Teacher or Evaluation record does not exist."""

    def __init__(self, kind: str, record_id: Optional[str]):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} '{record_id}' not found")


class DuplicateDniError(ValueError):
    """Another teacher is already registered with the same DNI."""

    def __init__(self, dni: str, updating: bool = False):
        self.dni = dni
        if updating:
            message = f"El DNI {dni} ya está registrado para otro docente"
        else:
            message = f"El DNI {dni} ya está registrado"
        super().__init__(message)
