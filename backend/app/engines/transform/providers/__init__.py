"""
Engine providers: JavaScript (V8 via py_mini_racer) and Python (RestrictedPython).
"""

import functools

from app.core.config import settings

from .base import EngineProvider, ExecutionContext, ScriptDialect
from .javascript import JavaScriptEngineProvider
from .python import PythonEngineProvider


def make_engine_provider(
    dialect: ScriptDialect | str,
    *,
    timeout_ms: int | None = None,
    max_memory: int | None = None,
) -> EngineProvider:
    """Build a provider for the given script dialect."""
    dialect = ScriptDialect(dialect)
    if dialect == ScriptDialect.PYTHON:
        return PythonEngineProvider(timeout_ms=timeout_ms)
    return JavaScriptEngineProvider(timeout_ms=timeout_ms, max_memory=max_memory)


@functools.lru_cache(maxsize=1)
def get_engine_provider() -> EngineProvider:
    """Process-wide provider configured from SANDBOX_* settings."""
    return make_engine_provider(
        settings.SANDBOX_ENGINE,
        timeout_ms=settings.SANDBOX_TIMEOUT_MS,
        max_memory=settings.SANDBOX_MAX_MEMORY_BYTES,
    )


__all__ = [
    "EngineProvider",
    "ExecutionContext",
    "JavaScriptEngineProvider",
    "PythonEngineProvider",
    "ScriptDialect",
    "get_engine_provider",
    "make_engine_provider",
]
