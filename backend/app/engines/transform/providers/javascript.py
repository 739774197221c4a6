"""
JavaScript engine provider backed by V8 isolates (py_mini_racer).

Each context is its own MiniRacer instance; nothing but strings crosses the boundary.
The program runs under a small harness evaluated in the same isolate which copies a
thrown value out as JSON, so plain objects thrown by `fail()` keep their shape.
"""

from __future__ import annotations

import json
from typing import Any

from py_mini_racer import (
    JSEvalException,
    JSOOMException,
    JSTimeoutException,
    MiniRacer,
)

from app.engines.transform.results import RawOutcome

from .base import EngineProvider, ExecutionContext, ScriptDialect

# Built-ins are captured before the untrusted program runs, so redefining
# JSON or Error inside a script cannot change how its outcome is reported.
_HARNESS = """(function (src) {
  var stringify = JSON.stringify;
  var parse = JSON.parse;
  var NativeError = Error;
  function dump(e) {
    if (e instanceof NativeError) {
      return { name: String(e.name), message: String(e.message) };
    }
    try {
      var s = stringify(e);
      return s === undefined ? String(e) : parse(s);
    } catch (_) {
      return String(e);
    }
  }
  try {
    return stringify({ ok: true, value: (0, eval)(src) });
  } catch (e) {
    return stringify({ ok: false, error: dump(e) });
  }
})(%s)"""


def _unpack(envelope: Any) -> RawOutcome:
    if not isinstance(envelope, str):
        return RawOutcome.completed(None)
    try:
        data = json.loads(envelope)
    except ValueError:
        return RawOutcome.completed(None)
    if not isinstance(data, dict):
        return RawOutcome.completed(None)
    if data.get("ok") is True:
        return RawOutcome.completed(data.get("value"))
    return RawOutcome.thrown(data.get("error"))


class JavaScriptContext(ExecutionContext):
    def __init__(
        self,
        *,
        timeout_ms: int | None = None,
        max_memory: int | None = None,
    ) -> None:
        super().__init__()
        self._timeout_ms = timeout_ms
        self._max_memory = max_memory
        self._vm = MiniRacer()

    def evaluate(self, program: str) -> RawOutcome:
        code = _HARNESS % json.dumps(program)
        try:
            envelope = self._vm.eval(
                code, timeout=self._timeout_ms, max_memory=self._max_memory
            )
        except JSTimeoutException:
            return RawOutcome.aborted(
                f"Script execution timed out after {self._timeout_ms} ms"
            )
        except JSOOMException:
            return RawOutcome.aborted("Script execution exceeded the memory limit")
        except JSEvalException as e:
            # Only reachable when the thrown value itself cannot be stringified.
            return RawOutcome.thrown({"name": "Error", "message": str(e)})
        return _unpack(envelope)

    def _close(self) -> None:
        self._vm.close()


class JavaScriptEngineProvider(EngineProvider):
    """
    Factory of V8-backed contexts. Holds only limits; contexts are never reused.
    """

    dialect = ScriptDialect.JAVASCRIPT

    def __init__(
        self,
        *,
        timeout_ms: int | None = None,
        max_memory: int | None = None,
    ) -> None:
        self.timeout_ms = timeout_ms if timeout_ms and timeout_ms > 0 else None
        self.max_memory = max_memory if max_memory and max_memory > 0 else None

    def new_context(self) -> JavaScriptContext:
        return JavaScriptContext(timeout_ms=self.timeout_ms, max_memory=self.max_memory)
