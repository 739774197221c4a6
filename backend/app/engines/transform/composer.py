"""
Script composer: wraps a transform script into one self-contained program.

The program defines fail(message), splices in the script (which defines
build(data)), binds the input as a JSON literal to `data`, calls build(data) and
yields JSON-encoded output. The script text is not inspected or sanitized; only
the input is escaped.
"""

import json
from typing import Any

from app.engines.transform.providers import ScriptDialect

_JAVASCRIPT_TEMPLATE = """(function () {
  function fail(message) { throw ({ type: "validation", message: message }); }
%(script)s
;
  const data = %(data)s;
  const out = build(data);
  return JSON.stringify(out);
})();
"""

_PYTHON_TEMPLATE = """def fail(message):
    raise Exception({"type": "validation", "message": message})


%(script)s


data = json.loads(%(data)s)
result = json.dumps(build(data))
"""


class InputEncodingError(ValueError):
    """The input value has no canonical JSON encoding (NaN, sets, objects...)."""

    pass


def encode_input(data: Any) -> str:
    """
    Canonical JSON text for data: ASCII only (every non-ASCII character, including
    U+2028/U+2029, is \\u-escaped), compact separators, key order preserved.
    """
    try:
        return json.dumps(data, ensure_ascii=True, allow_nan=False, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise InputEncodingError(f"Input is not JSON-serializable: {e}") from e


def compose_javascript(script: str, data: Any) -> str:
    # JSON text is a valid JavaScript expression.
    return _JAVASCRIPT_TEMPLATE % {"script": script, "data": encode_input(data)}


def compose_python(script: str, data: Any) -> str:
    # The canonical text is pure ASCII, so its JSON string form is also a valid
    # Python string literal; json.loads inside the sandbox restores the value.
    return _PYTHON_TEMPLATE % {"script": script, "data": json.dumps(encode_input(data))}


_COMPOSERS = {
    ScriptDialect.JAVASCRIPT: compose_javascript,
    ScriptDialect.PYTHON: compose_python,
}


def compose(script: str, data: Any, dialect: ScriptDialect | str = ScriptDialect.JAVASCRIPT) -> str:
    """Build the program text for dialect. Raises InputEncodingError for bad input."""
    return _COMPOSERS[ScriptDialect(dialect)](script, data)
