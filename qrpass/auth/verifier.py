"""Token verification: compact JWT in, authenticated claim set out.

Verification is a linear pipeline. Each stage either passes the token on or
raises :class:`TokenVerificationError` carrying the reason of the stage that
failed::

    Received -> Parsed -> SignatureChecked -> ExpirationChecked -> Authenticated

``exp`` is checked here rather than by ``jose.jwt.decode`` so the current
time comes from the injected clock and each failure keeps its own reason.
"""

import json
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from jose import jws
from jose.exceptions import JOSEError
from jose.utils import base64url_decode, base64url_encode
from pydantic import ValidationError

from qrpass.auth.exceptions import RejectionReason, TokenVerificationError
from qrpass.auth.issuer import now_utc
from qrpass.constants import CLAIM_EXPIRATION, CLAIM_JWT_ID
from qrpass.schemas.token import ClaimSet

logger = logging.getLogger(__name__)


class TokenVerifier:
    """Verify tokens produced by :class:`~qrpass.auth.issuer.TokenIssuer`.

    Args:
        secret_key: Shared HMAC secret; must match the issuer's.
        algorithm: The only signature algorithm accepted.
        clock: Source of the current time, in UTC.
        require_jti: Reject tokens whose ``jti`` is missing or not a string.
            When false such tokens are accepted and a warning is logged.
    """

    def __init__(
        self,
        secret_key: str,
        *,
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = now_utc,
        require_jti: bool = False,
    ) -> None:
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._clock = clock
        self._require_jti = require_jti

    @property
    def require_jti(self) -> bool:
        return self._require_jti

    def verify(self, token: str) -> ClaimSet:
        """Return the authenticated claim set for *token*.

        Raises:
            TokenVerificationError: with the reason of the first failing stage.
        """
        claims = self._parse(token)
        self._check_signature(token)
        exp = self._check_expiration(claims)
        jti = self._check_jti(claims)

        try:
            claim_set = ClaimSet.from_jwt_claims(claims, exp=exp, jti=jti)
        except ValidationError as exc:
            raise TokenVerificationError(RejectionReason.INVALID_CLAIMS) from exc

        logger.debug("Authenticated token jti=%s claims=%s", jti, claim_set.item.model_dump())
        return claim_set

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    @staticmethod
    def _parse(token: str) -> dict[str, Any]:
        # Split on the first two dots only; anything after them is signature text
        segments = token.split(".", 2) if token else []
        if len(segments) != 3:
            raise TokenVerificationError(RejectionReason.MALFORMED)
        header_segment, claims_segment, _ = segments
        try:
            header = json.loads(base64url_decode(header_segment.encode("ascii")))
            claims = json.loads(base64url_decode(claims_segment.encode("ascii")))
        except ValueError as exc:
            raise TokenVerificationError(RejectionReason.MALFORMED) from exc
        if not isinstance(header, dict) or not isinstance(claims, dict):
            raise TokenVerificationError(RejectionReason.MALFORMED)
        return claims

    @staticmethod
    def _is_canonical_signature(token: str) -> bool:
        """True if the signature segment is the exact unpadded base64url of its bytes.

        The lenient decoder ignores the unused low bits of the final character
        and skips characters outside the alphabet, so several texts can decode
        to the same digest.
        """
        segment = token.split(".", 2)[2]
        try:
            raw = base64url_decode(segment.encode("ascii"))
        except ValueError:
            return False
        return base64url_encode(raw) == segment.encode("ascii")

    def _check_signature(self, token: str) -> None:
        if not self._is_canonical_signature(token):
            raise TokenVerificationError(RejectionReason.BAD_SIGNATURE)
        # jws.verify compares digests with hmac.compare_digest
        try:
            jws.verify(token, self._secret_key, algorithms=[self._algorithm])
        except JOSEError as exc:
            raise TokenVerificationError(RejectionReason.BAD_SIGNATURE) from exc

    def _check_expiration(self, claims: dict[str, Any]) -> datetime:
        if CLAIM_EXPIRATION not in claims:
            raise TokenVerificationError(RejectionReason.MISSING_EXPIRATION)

        raw = claims[CLAIM_EXPIRATION]
        if isinstance(raw, bool) or not isinstance(raw, int | float):
            raise TokenVerificationError(RejectionReason.INVALID_EXPIRATION)
        try:
            exp = datetime.fromtimestamp(raw, tz=UTC)
        except (OverflowError, OSError, ValueError) as exc:
            raise TokenVerificationError(RejectionReason.INVALID_EXPIRATION) from exc

        if self._clock() >= exp:
            raise TokenVerificationError(RejectionReason.EXPIRED)
        return exp

    def _check_jti(self, claims: dict[str, Any]) -> str | None:
        if CLAIM_JWT_ID not in claims:
            if self._require_jti:
                raise TokenVerificationError(RejectionReason.MISSING_JTI)
            logger.warning("jti claim missing in token")
            return None

        jti = claims[CLAIM_JWT_ID]
        if not isinstance(jti, str):
            if self._require_jti:
                raise TokenVerificationError(RejectionReason.INVALID_JTI)
            logger.warning("invalid jti format in token: %s", type(jti).__name__)
            return None
        return jti
