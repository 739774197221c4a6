"""
RestrictedPython engine provider: transform scripts written in Python.

Scripts see RestrictedPython's safe builtins plus list/dict/set/min/max/sum/sorted,
a `json` namespace holding only loads/dumps, and date/datetime/timedelta. Imports,
open/exec/eval, underscore attributes and writes to non-container objects are
rejected by RestrictedPython's guards.

Each context is a fresh globals namespace; nothing is shared between contexts
except immutable builtins and classes.
"""

import json
import signal
import threading
from datetime import date, datetime, timedelta
from types import SimpleNamespace
from typing import Any

from RestrictedPython import compile_restricted
from RestrictedPython.Eval import default_guarded_getitem, default_guarded_getiter
from RestrictedPython.Guards import (
    full_write_guard,
    guarded_iter_unpack_sequence,
    safe_builtins,
    safer_getattr,
)

from app.engines.transform.results import RawOutcome

from .base import EngineProvider, ExecutionContext, ScriptDialect

# Name the composed program assigns its JSON-encoded output to.
RESULT_NAME = "result"

_CONTAINER_BUILTINS = {
    "list": list,
    "dict": dict,
    "set": set,
    "min": min,
    "max": max,
    "sum": sum,
    "sorted": sorted,
}


class ScriptTimeoutError(BaseException):
    """
    Raised inside the evaluation when the time budget elapses. Not an Exception
    subclass, so a script's `except Exception` does not swallow it.
    """

    pass


def compile_script(script: str, filename: str = "<transform>") -> Any:
    """Compile with RestrictedPython. Raises SyntaxError listing every error found."""
    return compile_restricted(script, filename, "exec")


def build_restricted_globals() -> dict[str, Any]:
    """Fresh globals for one context."""
    return {
        "__builtins__": {**safe_builtins, **_CONTAINER_BUILTINS},
        "__name__": "transform",
        "_getattr_": safer_getattr,
        "_getiter_": default_guarded_getiter,
        "_getitem_": default_guarded_getitem,
        "_iter_unpack_sequence_": guarded_iter_unpack_sequence,
        "_write_": full_write_guard,
        # The module itself would expose json.codecs, json.decoder, ...
        "json": SimpleNamespace(loads=json.loads, dumps=json.dumps),
        "date": date,
        "datetime": datetime,
        "timedelta": timedelta,
    }


def _exec_with_timeout(code: object, g: dict[str, Any], timeout_ms: int) -> None:
    """
    exec(code, g) under a repeating ITIMER_REAL alarm; raises ScriptTimeoutError
    once the budget has elapsed, even if the script caught the alarm and finished
    or failed some other way. Main thread on Unix only.
    """
    message = f"Script execution timed out after {timeout_ms} ms"
    timed_out = False

    def _handler(signum: int, frame: Any) -> None:
        nonlocal timed_out
        timed_out = True
        raise ScriptTimeoutError(message)

    seconds = timeout_ms / 1000.0
    old = signal.signal(signal.SIGALRM, _handler)
    try:
        # The interval re-fires the alarm while a script keeps swallowing it.
        signal.setitimer(signal.ITIMER_REAL, seconds, seconds)
        try:
            exec(code, g)  # noqa: S102 - RestrictedPython compiled code
        finally:
            signal.setitimer(signal.ITIMER_REAL, 0)
    except Exception:
        if timed_out:
            raise ScriptTimeoutError(message) from None
        raise
    finally:
        signal.signal(signal.SIGALRM, old)
    if timed_out:
        raise ScriptTimeoutError(message)


def _can_use_alarm() -> bool:
    return hasattr(signal, "setitimer") and (
        threading.current_thread() is threading.main_thread()
    )


def _dump_exception(exc: Exception) -> Any:
    """Copy what the script raised into plain JSON-like data."""
    if len(exc.args) == 1 and isinstance(exc.args[0], dict):
        try:
            return json.loads(json.dumps(exc.args[0], default=str))
        except (TypeError, ValueError, RecursionError):
            # Cyclic or otherwise unencodable payload.
            return {"name": type(exc).__name__, "message": "unserializable thrown value"}
    if isinstance(exc, SyntaxError) and exc.args and isinstance(exc.args[0], (tuple, list)):
        # compile_restricted reports every error it found as a tuple of lines.
        return {"name": "SyntaxError", "message": "; ".join(str(m) for m in exc.args[0])}
    try:
        message = str(exc)
    except Exception:
        message = type(exc).__name__
    return {"name": type(exc).__name__, "message": message}


class PythonContext(ExecutionContext):
    def __init__(self, *, timeout_ms: int | None = None) -> None:
        super().__init__()
        self._timeout_ms = timeout_ms
        self._globals = build_restricted_globals()

    def evaluate(self, program: str) -> RawOutcome:
        try:
            code = compile_script(program)
            if self._timeout_ms and _can_use_alarm():
                _exec_with_timeout(code, self._globals, self._timeout_ms)
            else:
                exec(code, self._globals)  # noqa: S102 - RestrictedPython compiled code
        except ScriptTimeoutError as e:
            return RawOutcome.aborted(str(e))
        except Exception as e:
            return RawOutcome.thrown(_dump_exception(e))
        return RawOutcome.completed(self._globals.get(RESULT_NAME))

    def _close(self) -> None:
        self._globals.clear()


class PythonEngineProvider(EngineProvider):
    """
    Factory of RestrictedPython contexts. The timeout is enforced with SIGALRM,
    so it only applies when evaluating on the main thread.
    """

    dialect = ScriptDialect.PYTHON

    def __init__(self, *, timeout_ms: int | None = None) -> None:
        self.timeout_ms = timeout_ms if timeout_ms and timeout_ms > 0 else None

    def new_context(self) -> PythonContext:
        return PythonContext(timeout_ms=self.timeout_ms)
