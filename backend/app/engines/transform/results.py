"""
Value types crossing the sandbox boundary: RawOutcome (what the engine produced)
and TransformResult (what the caller gets back), plus the failure taxonomy.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    ENGINE_UNAVAILABLE = "engine_unavailable"
    INPUT_ENCODING_ERROR = "input_encoding_error"
    VALIDATION = "validation"
    SCRIPT_ERROR = "script_error"
    RESOURCE_LIMIT = "resource_limit"
    OUTPUT_ENCODING_ERROR = "output_encoding_error"
    OUTPUT_SHAPE_ERROR = "output_shape_error"

    @property
    def is_client_error(self) -> bool:
        """True when the failure comes from the script or its input, not the host."""
        return self in _CLIENT_ERROR_KINDS


_CLIENT_ERROR_KINDS = frozenset(
    {ErrorKind.VALIDATION, ErrorKind.SCRIPT_ERROR, ErrorKind.RESOURCE_LIMIT}
)


class TransformError(ValueError):
    """Raised by TransformResult.unwrap() when the transform failed."""

    def __init__(self, kind: ErrorKind, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details


class EngineUnavailableError(RuntimeError):
    """The engine provider could not create an execution context."""

    pass


class OutcomeKind(str, Enum):
    COMPLETED = "completed"
    THROWN = "thrown"
    ABORTED = "aborted"


@dataclass(frozen=True)
class RawOutcome:
    """
    Result of evaluating a program in a context.

    - completed: value is whatever the program yielded (a JSON string by protocol).
    - thrown: payload is the thrown value, already copied out of the context.
    - aborted: the engine stopped evaluation (time/memory budget); reason says why.
    """

    kind: OutcomeKind
    value: Any = None
    payload: Any = None
    reason: str | None = None

    @classmethod
    def completed(cls, value: Any) -> RawOutcome:
        return cls(kind=OutcomeKind.COMPLETED, value=value)

    @classmethod
    def thrown(cls, payload: Any) -> RawOutcome:
        return cls(kind=OutcomeKind.THROWN, payload=payload)

    @classmethod
    def aborted(cls, reason: str) -> RawOutcome:
        return cls(kind=OutcomeKind.ABORTED, reason=reason)


@dataclass(frozen=True)
class TransformFailure:
    kind: ErrorKind
    message: str
    details: Any = None


@dataclass(frozen=True)
class TransformResult:
    """Value(str), Empty (value and failure both None) or Failure."""

    value: str | None = None
    failure: TransformFailure | None = None

    @classmethod
    def of(cls, value: str) -> TransformResult:
        return cls(value=value)

    @classmethod
    def empty(cls) -> TransformResult:
        return cls()

    @classmethod
    def failed(
        cls, kind: ErrorKind, message: str, details: Any = None
    ) -> TransformResult:
        return cls(failure=TransformFailure(kind=kind, message=message, details=details))

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def is_empty(self) -> bool:
        return self.failure is None and self.value is None

    def unwrap(self) -> str | None:
        """Return the value (None for Empty); raise TransformError on failure."""
        if self.failure is not None:
            raise TransformError(
                self.failure.kind, self.failure.message, self.failure.details
            )
        return self.value
