"""
Result classifier: RawOutcome -> TransformResult.

A completed program yields JSON text (the script's output encoded once), so the
value is decoded once here and then judged by type: null -> Empty, string ->
Value, anything else -> OutputShapeError.
"""

import json
from typing import Any

from app.engines.transform.results import (
    ErrorKind,
    OutcomeKind,
    RawOutcome,
    TransformResult,
)

NON_STRING_OUTPUT_MESSAGE = "non-string, non-null transform output"


def is_validation_payload(payload: Any) -> bool:
    return isinstance(payload, dict) and payload.get("type") == "validation"


def stringify_thrown(payload: Any) -> str:
    """Human-readable form of a thrown value (no engine internals beyond it)."""
    if isinstance(payload, str):
        return payload
    if isinstance(payload, dict) and "name" in payload and "message" in payload:
        return f"{payload['name']}: {payload['message']}"
    return json.dumps(payload, ensure_ascii=False)


def _classify_thrown(payload: Any) -> TransformResult:
    if is_validation_payload(payload):
        message = payload.get("message")
        return TransformResult.failed(
            ErrorKind.VALIDATION,
            message if isinstance(message, str) else stringify_thrown(message),
        )
    return TransformResult.failed(
        ErrorKind.SCRIPT_ERROR, stringify_thrown(payload), details=payload
    )


def _classify_completed(value: Any) -> TransformResult:
    if not isinstance(value, str):
        return TransformResult.failed(
            ErrorKind.OUTPUT_ENCODING_ERROR,
            f"Transform program returned {type(value).__name__}, expected JSON text",
        )
    try:
        output = json.loads(value)
    except ValueError as e:
        return TransformResult.failed(
            ErrorKind.OUTPUT_ENCODING_ERROR,
            f"Transform program output is not valid JSON: {e}",
        )
    if output is None:
        return TransformResult.empty()
    if isinstance(output, str):
        return TransformResult.of(output)
    return TransformResult.failed(
        ErrorKind.OUTPUT_SHAPE_ERROR,
        NON_STRING_OUTPUT_MESSAGE,
        details={"type": type(output).__name__},
    )


def classify(outcome: RawOutcome) -> TransformResult:
    if outcome.kind == OutcomeKind.THROWN:
        return _classify_thrown(outcome.payload)
    if outcome.kind == OutcomeKind.ABORTED:
        return TransformResult.failed(
            ErrorKind.RESOURCE_LIMIT, outcome.reason or "Script execution aborted"
        )
    return _classify_completed(outcome.value)
