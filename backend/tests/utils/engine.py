"""Engine provider test double that counts context creation and disposal."""

import threading

from app.engines.transform.providers import (
    EngineProvider,
    ExecutionContext,
    ScriptDialect,
)
from app.engines.transform.results import RawOutcome


class _CountingContext(ExecutionContext):
    def __init__(self, provider: "CountingEngineProvider", inner: ExecutionContext | None) -> None:
        super().__init__()
        self._provider = provider
        self._inner = inner

    def evaluate(self, program: str) -> RawOutcome:
        self._provider.programs.append(program)
        if self._provider.evaluate_error is not None:
            raise self._provider.evaluate_error
        if self._inner is None:
            return self._provider.outcome
        return self._inner.evaluate(program)

    def _close(self) -> None:
        with self._provider.lock:
            self._provider.disposed += 1
        if self._inner is not None:
            self._inner.dispose()


class CountingEngineProvider(EngineProvider):
    """
    Wraps a real provider (inner) or returns a fixed outcome for every evaluation.
    created/disposed count contexts; programs records evaluated program text.
    """

    def __init__(
        self,
        inner: EngineProvider | None = None,
        *,
        outcome: RawOutcome | None = None,
        evaluate_error: Exception | None = None,
        create_error: Exception | None = None,
    ) -> None:
        self.inner = inner
        self.dialect = inner.dialect if inner is not None else ScriptDialect.JAVASCRIPT
        self.outcome = outcome if outcome is not None else RawOutcome.completed('"ok"')
        self.evaluate_error = evaluate_error
        self.create_error = create_error
        self.created = 0
        self.disposed = 0
        self.programs: list[str] = []
        self.lock = threading.Lock()

    def new_context(self) -> ExecutionContext:
        if self.create_error is not None:
            raise self.create_error
        inner = self.inner.new_context() if self.inner is not None else None
        with self.lock:
            self.created += 1
        return _CountingContext(self, inner)
