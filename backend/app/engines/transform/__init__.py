"""
Sandboxed data transform engine.

Exports: DataTransformer, data_transform, TransformResult, ErrorKind, TransformError.
"""

from .results import (
    EngineUnavailableError,
    ErrorKind,
    RawOutcome,
    TransformError,
    TransformFailure,
    TransformResult,
)
from .transformer import DataTransformer, data_transform

__all__ = [
    "DataTransformer",
    "EngineUnavailableError",
    "ErrorKind",
    "RawOutcome",
    "TransformError",
    "TransformFailure",
    "TransformResult",
    "data_transform",
]
