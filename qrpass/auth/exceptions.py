"""Errors raised by token issuance and verification."""

from enum import StrEnum
from typing import Any


class RejectionReason(StrEnum):
    """Stage-specific reason a presented token was rejected."""

    HEADER_MISSING = "header_missing"
    HEADER_MALFORMED = "header_malformed"
    MALFORMED = "malformed"
    BAD_SIGNATURE = "bad_signature"
    MISSING_EXPIRATION = "missing_expiration"
    INVALID_EXPIRATION = "invalid_expiration"
    EXPIRED = "expired"
    MISSING_JTI = "missing_jti"
    INVALID_JTI = "invalid_jti"
    INVALID_CLAIMS = "invalid_claims"


REJECTION_MESSAGES: dict[RejectionReason, str] = {
    RejectionReason.HEADER_MISSING: "authorization header missing",
    RejectionReason.HEADER_MALFORMED: "invalid authorization header format",
    RejectionReason.MALFORMED: "token verification failed: malformed token",
    RejectionReason.BAD_SIGNATURE: "token verification failed: signature mismatch",
    RejectionReason.MISSING_EXPIRATION: "expiration claim missing in token",
    RejectionReason.INVALID_EXPIRATION: "invalid expiration format in token",
    RejectionReason.EXPIRED: "token has expired",
    RejectionReason.MISSING_JTI: "jti claim missing in token",
    RejectionReason.INVALID_JTI: "invalid jti format in token",
    RejectionReason.INVALID_CLAIMS: "token claims do not match the expected item payload",
}


class TokenError(Exception):
    """Base class for token lifecycle errors."""


class TokenSigningError(TokenError):
    """The cryptographic primitive failed while signing a claim set."""


class TokenVerificationError(TokenError):
    """A presented token was rejected at one of the verification stages."""

    def __init__(self, reason: RejectionReason, message: str | None = None) -> None:
        self.reason = reason
        self.message = message or REJECTION_MESSAGES[reason]
        super().__init__(self.message)


class PayloadValidationError(TokenError):
    """The payload bound correctly but violates the item domain rules."""

    def __init__(self, errors: list[dict[str, Any]]) -> None:
        self.errors = errors
        fields = ", ".join(str(e["field"]) for e in errors)
        super().__init__(f"Invalid payload fields: {fields}")
