"""
Execution driver: evaluates program text in a context, synchronously.
"""

import json
import logging
import time
from typing import Any

from app.engines.transform.providers import ExecutionContext
from app.engines.transform.results import OutcomeKind, RawOutcome

_log = logging.getLogger(__name__)


def _transport_safe(payload: Any) -> Any:
    """
    Thrown payloads are JSON-like by construction; re-encode anyway so the
    classifier only ever sees plain dict/list/str/number/bool/None.
    """
    try:
        return json.loads(json.dumps(payload, default=str))
    except (TypeError, ValueError, RecursionError):
        return str(payload)


def run(context: ExecutionContext, program: str) -> RawOutcome:
    """
    Evaluate program in context and return the RawOutcome.

    Interpreter-level failures (syntax errors, thrown values, engine limits) come
    back as THROWN/ABORTED outcomes. A disposed context or a provider returning
    something other than a RawOutcome is a host bug and raises.
    """
    if context.disposed:
        raise RuntimeError("Cannot evaluate in a disposed execution context")
    started = time.perf_counter()
    outcome = context.evaluate(program)
    elapsed_ms = (time.perf_counter() - started) * 1000
    if not isinstance(outcome, RawOutcome):
        raise TypeError(f"Engine returned {type(outcome).__name__}, expected RawOutcome")
    _log.debug("Transform program finished: outcome=%s elapsed_ms=%.1f", outcome.kind.value, elapsed_ms)
    if outcome.kind == OutcomeKind.THROWN:
        return RawOutcome.thrown(_transport_safe(outcome.payload))
    return outcome
