"""
Engines: sandboxed data transform (JavaScript via V8, Python via RestrictedPython).
"""

from app.engines.transform import DataTransformer, TransformResult, data_transform

__all__ = [
    "DataTransformer",
    "TransformResult",
    "data_transform",
]
