"""Pydantic schemas package."""
from qrpass.schemas.token import (
    ClaimSet,
    ErrorResponse,
    IssuedToken,
    ItemPayload,
    StandardClaims,
    TokenRejectedResponse,
    VerifyResponse,
)

__all__ = [
    # Claim schemas
    "ItemPayload",
    "StandardClaims",
    "ClaimSet",
    "IssuedToken",
    # Response schemas
    "VerifyResponse",
    "ErrorResponse",
    "TokenRejectedResponse",
]
