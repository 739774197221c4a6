"""
DataTransformer: transform(script, data) -> TransformResult.

Acquires a fresh context, composes the program, runs it, classifies the outcome
and disposes the context on every path. Interpreter-level failures come back as
TransformResult failures; only host bugs raise.
"""

import logging
from typing import Any

from app.engines.transform import classifier, composer, driver
from app.engines.transform.lifecycle import ContextLifecycleManager
from app.engines.transform.providers import EngineProvider, get_engine_provider
from app.engines.transform.results import (
    EngineUnavailableError,
    ErrorKind,
    TransformResult,
)

_log = logging.getLogger(__name__)


def _log_failure(result: TransformResult) -> None:
    failure = result.failure
    if failure is None:
        return
    if failure.kind.is_client_error:
        _log.warning("Transform rejected: kind=%s message=%s", failure.kind.value, failure.message)
    elif failure.kind == ErrorKind.OUTPUT_ENCODING_ERROR:
        # Engine or composition contract breach, not a script defect.
        _log.error("Transform output encoding broken: %s", failure.message)
    else:
        _log.error("Transform failed: kind=%s message=%s", failure.kind.value, failure.message)


class DataTransformer:
    """
    Run untrusted transform scripts against JSON input in isolated contexts.
    One context per call; no context or script state is kept between calls.
    """

    def __init__(self, provider: EngineProvider | None = None) -> None:
        self.provider = provider or get_engine_provider()
        self.lifecycle = ContextLifecycleManager(self.provider)

    def transform(self, script: str, data: Any) -> TransformResult:
        result = self._transform(script, data)
        _log_failure(result)
        return result

    def _transform(self, script: str, data: Any) -> TransformResult:
        try:
            with self.lifecycle.scoped() as context:
                try:
                    program = composer.compose(script, data, self.provider.dialect)
                except composer.InputEncodingError as e:
                    return TransformResult.failed(ErrorKind.INPUT_ENCODING_ERROR, str(e))
                outcome = driver.run(context, program)
                return classifier.classify(outcome)
        except EngineUnavailableError as e:
            return TransformResult.failed(ErrorKind.ENGINE_UNAVAILABLE, str(e))


def data_transform(script: str, data: Any, *, provider: EngineProvider | None = None) -> str | None:
    """
    Run script's build(data) and return its string output, or None.
    Raises TransformError for every failure kind.
    """
    return DataTransformer(provider).transform(script, data).unwrap()
