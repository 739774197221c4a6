"""
Pydantic schemas for the identity and transform APIs.
"""

from typing import Any

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


class IdentityRequest(BaseModel):
    """Body for POST /identity."""

    # Checked in the route so a non-object answers 400 INVALID_DATA, not 422.
    data: Any = Field(default=None, description="Document data passed to build(data).")


class Identity(BaseModel):
    number: str = Field(..., description="SHA-256 hex digest of the factory output.")


class IdentityResponse(BaseModel):
    identity: Identity | None = None


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ErrorItem(BaseModel):
    message: str


class InvalidDataResponse(BaseModel):
    """400 body when the factory script rejects the data."""

    message: str = "INVALID_DATA"
    errors: list[ErrorItem] = Field(default_factory=list)
