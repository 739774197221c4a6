"""
Document identity derivation.

The tenant's identity factory script turns the document data into an identity
string; the stored identity is its SHA-256 hex digest. A factory returning null
means the document carries no identity.
"""

import hashlib
from typing import Any

from app.engines.transform import DataTransformer


def hash_identity(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def derive_identity(
    factory: str, data: Any, transformer: DataTransformer
) -> dict[str, str] | None:
    """
    Return {"number": sha256(value)} or None when the factory yields null.
    Raises TransformError when the factory fails.
    """
    value = transformer.transform(factory, data).unwrap()
    if value is None:
        return None
    return {"number": hash_identity(value)}
