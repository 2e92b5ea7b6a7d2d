"""Pydantic schemas for item payloads and token claim sets."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from qrpass.constants import (
    APPLICATION_CLAIMS,
    CLAIM_EXPIRATION,
    CLAIM_JWT_ID,
    MAX_AMOUNT,
    MAX_ITEM_CODE_LENGTH,
    MAX_PRICE,
)


class ItemPayload(BaseModel):
    """Caller-supplied item data, bound strictly from the request body.

    Binding only checks the shape. Range checks live in
    :meth:`domain_errors` so a structurally valid but nonsensical payload can
    be reported separately from a payload that failed to bind.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    item_code: str
    price: int
    amount: int

    def domain_errors(self) -> list[dict[str, Any]]:
        """Return every domain rule the payload violates (empty if valid)."""
        errors: list[dict[str, Any]] = []
        if not self.item_code.strip():
            errors.append({"field": "item_code", "message": "must not be blank"})
        elif len(self.item_code) > MAX_ITEM_CODE_LENGTH:
            errors.append(
                {
                    "field": "item_code",
                    "message": f"must be at most {MAX_ITEM_CODE_LENGTH} characters",
                }
            )
        if not 0 <= self.price <= MAX_PRICE:
            errors.append({"field": "price", "message": f"must be between 0 and {MAX_PRICE}"})
        if not 0 <= self.amount <= MAX_AMOUNT:
            errors.append({"field": "amount", "message": f"must be between 0 and {MAX_AMOUNT}"})
        return errors


class StandardClaims(BaseModel):
    """Registered claims: expiration and the per-token identifier."""

    model_config = ConfigDict(frozen=True)

    exp: datetime
    jti: str | None = None


class ClaimSet(BaseModel):
    """Typed view over the claims carried by one token."""

    model_config = ConfigDict(frozen=True)

    item: ItemPayload
    standard: StandardClaims
    extra: dict[str, Any] = Field(default_factory=dict)

    def to_jwt_claims(self) -> dict[str, Any]:
        """Flatten to the JSON claim mapping that gets signed."""
        claims: dict[str, Any] = dict(self.extra)
        claims.update(self.item.model_dump())
        claims[CLAIM_EXPIRATION] = int(self.standard.exp.timestamp())
        if self.standard.jti is not None:
            claims[CLAIM_JWT_ID] = self.standard.jti
        return claims

    @classmethod
    def from_jwt_claims(
        cls, claims: dict[str, Any], *, exp: datetime, jti: str | None
    ) -> "ClaimSet":
        """Build from a decoded claim mapping whose standard claims were already checked.

        Raises ``pydantic.ValidationError`` if the application claims are absent
        or carry the wrong types.
        """
        item = ItemPayload.model_validate({k: claims.get(k) for k in APPLICATION_CLAIMS})
        reserved = {*APPLICATION_CLAIMS, CLAIM_EXPIRATION, CLAIM_JWT_ID}
        extra = {k: v for k, v in claims.items() if k not in reserved}
        return cls(item=item, standard=StandardClaims(exp=exp.astimezone(UTC), jti=jti), extra=extra)


class IssuedToken(BaseModel):
    """A freshly signed token together with the claims it carries."""

    model_config = ConfigDict(frozen=True)

    token: str
    claims: ClaimSet

    @property
    def jti(self) -> str | None:
        return self.claims.standard.jti

    @property
    def expires_at(self) -> datetime:
        return self.claims.standard.exp


class VerifyResponse(BaseModel):
    """Static body returned for an authenticated token."""

    message: str = "Successfully authenticated!"


class ErrorResponse(BaseModel):
    """Error body for issuance failures."""

    error: str
    detail: list[dict[str, Any]] | None = None


class TokenRejectedResponse(BaseModel):
    """Error body for a rejected token or authorization header."""

    detail: str
    reason: str
