"""FastAPI dependencies for bearer-token authentication."""

from typing import Annotated

from fastapi import Depends, Header

from qrpass.auth.exceptions import RejectionReason, TokenVerificationError
from qrpass.constants import BEARER_PREFIX
from qrpass.dependencies import Verifier
from qrpass.schemas.token import ClaimSet


def extract_bearer_token(authorization: str | None) -> str:
    """Return the token part of an ``Authorization: Bearer <token>`` header.

    The header must be strictly longer than the ``"Bearer "`` prefix; whatever
    follows the prefix length is handed to the verifier as-is.
    """
    if not authorization:
        raise TokenVerificationError(RejectionReason.HEADER_MISSING)
    if len(authorization) <= len(BEARER_PREFIX):
        raise TokenVerificationError(RejectionReason.HEADER_MALFORMED)
    return authorization[len(BEARER_PREFIX) :]


async def get_bearer_token(
    authorization: Annotated[str | None, Header()] = None,
) -> str:
    """Dependency that pulls the raw token out of the Authorization header."""
    return extract_bearer_token(authorization)


BearerToken = Annotated[str, Depends(get_bearer_token)]


async def get_authenticated_claims(token: BearerToken, verifier: Verifier) -> ClaimSet:
    """Verify the presented token and return its claim set."""
    return verifier.verify(token)


# Convenience type alias
AuthenticatedClaims = Annotated[ClaimSet, Depends(get_authenticated_claims)]
