"""Token issuance: item payload in, signed compact JWT out."""

import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from jose import jwt
from jose.exceptions import JOSEError

from qrpass.auth.exceptions import PayloadValidationError, TokenSigningError
from qrpass.schemas.token import ClaimSet, IssuedToken, ItemPayload, StandardClaims

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_LIFETIME = timedelta(hours=1)


def now_utc() -> datetime:
    return datetime.now(UTC)


class TokenIssuer:
    """Sign item payloads into short-lived HS256 tokens.

    The instance holds only read-only configuration, so a single issuer can be
    shared across concurrent requests.
    """

    def __init__(
        self,
        secret_key: str,
        *,
        algorithm: str = "HS256",
        lifetime: timedelta = DEFAULT_TOKEN_LIFETIME,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        if lifetime <= timedelta(0):
            raise ValueError("lifetime must be positive")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._lifetime = lifetime
        self._clock = clock

    @property
    def lifetime(self) -> timedelta:
        return self._lifetime

    def build_claims(self, payload: ItemPayload) -> ClaimSet:
        """Validate *payload* and attach a fresh expiration and ``jti``."""
        errors = payload.domain_errors()
        if errors:
            raise PayloadValidationError(errors)

        # NumericDate has whole-second resolution; truncate so exp is exact
        issued_at = self._clock().astimezone(UTC).replace(microsecond=0)
        standard = StandardClaims(exp=issued_at + self._lifetime, jti=str(uuid.uuid4()))
        return ClaimSet(item=payload, standard=standard)

    def issue(self, payload: ItemPayload) -> IssuedToken:
        """Build and sign a claim set for *payload*.

        Raises:
            PayloadValidationError: the payload violates a domain rule.
            TokenSigningError: the signing primitive failed.
        """
        claims = self.build_claims(payload)
        try:
            token = jwt.encode(claims.to_jwt_claims(), self._secret_key, algorithm=self._algorithm)
        except JOSEError as exc:
            logger.error("Token signing failed for jti=%s", claims.standard.jti)
            raise TokenSigningError("Failed to sign JWT") from exc

        logger.info(
            "Issued token jti=%s item_code=%s exp=%s",
            claims.standard.jti,
            payload.item_code,
            claims.standard.exp.isoformat(),
        )
        return IssuedToken(token=token, claims=claims)
