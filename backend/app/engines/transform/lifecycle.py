"""
Context lifecycle: one fresh context per invocation, released exactly once.
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager

from app.engines.transform.providers import EngineProvider, ExecutionContext
from app.engines.transform.results import EngineUnavailableError

_log = logging.getLogger(__name__)


class ContextLifecycleManager:
    """
    acquire() -> context, release(context). Prefer scoped(), which releases on
    every exit path including exceptions raised by the caller's block.
    """

    def __init__(self, provider: EngineProvider) -> None:
        self._provider = provider

    def acquire(self) -> ExecutionContext:
        try:
            return self._provider.new_context()
        except Exception as e:
            _log.error("Engine provider could not create a context: %s", e, exc_info=True)
            raise EngineUnavailableError(f"Script engine unavailable: {e}") from e

    def release(self, context: ExecutionContext | None) -> None:
        """Dispose the context. No-op for None or an already disposed context."""
        if context is None or context.disposed:
            return
        try:
            context.dispose()
        except Exception:
            _log.exception("Failed to dispose execution context")

    @contextmanager
    def scoped(self) -> Generator[ExecutionContext, None, None]:
        context = self.acquire()
        try:
            yield context
        finally:
            self.release(context)
