"""
Engine provider contract: a long-lived factory of fresh, isolated execution contexts.
"""

from __future__ import annotations

import abc
import threading
from enum import Enum

from app.engines.transform.results import RawOutcome


class ScriptDialect(str, Enum):
    JAVASCRIPT = "javascript"
    PYTHON = "python"


class ExecutionContext(abc.ABC):
    """
    One isolated interpreter instance. Used for a single program evaluation and
    then disposed; dispose() frees engine resources at most once.
    """

    def __init__(self) -> None:
        self._disposed = False
        self._dispose_lock = threading.Lock()

    @property
    def disposed(self) -> bool:
        return self._disposed

    @abc.abstractmethod
    def evaluate(self, program: str) -> RawOutcome:
        """Run program text to completion and report how it ended."""

    @abc.abstractmethod
    def _close(self) -> None:
        """Free engine-side resources."""

    def dispose(self) -> None:
        with self._dispose_lock:
            if self._disposed:
                return
            self._disposed = True
        self._close()


class EngineProvider(abc.ABC):
    """Stateless with respect to invocations; new_context() may be called concurrently."""

    dialect: ScriptDialect

    @abc.abstractmethod
    def new_context(self) -> ExecutionContext:
        """Create a fresh context. Raise on resource exhaustion."""
