"""Token issuance and verification endpoints."""

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, Response

from qrpass.auth.dependencies import AuthenticatedClaims
from qrpass.auth.exceptions import PayloadValidationError, TokenSigningError
from qrpass.dependencies import Encoder, Issuer
from qrpass.rate_limit import TOKEN_ENDPOINT_LIMIT, limiter
from qrpass.schemas.token import (
    ErrorResponse,
    ItemPayload,
    TokenRejectedResponse,
    VerifyResponse,
)
from qrpass.services.qr_service import QRCodeEncodingError

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@router.post(
    "/generate_qr",
    response_class=Response,
    responses={
        200: {"content": {"image/png": {}}, "description": "QR code encoding the signed token"},
        400: {"model": ErrorResponse, "description": "Request body failed to bind"},
        422: {"model": ErrorResponse, "description": "Payload violates item rules"},
        500: {"model": ErrorResponse, "description": "Signing or rendering failed"},
    },
)
@limiter.limit(TOKEN_ENDPOINT_LIMIT)
async def generate_qr(
    request: Request,
    payload: ItemPayload,
    issuer: Issuer,
    encoder: Encoder,
) -> Response:
    """Sign the item payload and return it as a PNG QR code."""
    try:
        issued = issuer.issue(payload)
    except PayloadValidationError as exc:
        return _error(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            ErrorResponse(error="Invalid payload", detail=exc.errors),
        )
    except TokenSigningError:
        logger.exception("Failed to sign token for item_code=%s", payload.item_code)
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorResponse(error="Failed to sign JWT")
        )

    try:
        png = encoder.encode(issued.token)
    except QRCodeEncodingError:
        logger.exception("Failed to render QR code for jti=%s", issued.jti)
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ErrorResponse(error="Failed to generate QR code"),
        )

    return Response(content=png, media_type="image/png")


@router.post(
    "/verify_token",
    response_model=VerifyResponse,
    responses={401: {"model": TokenRejectedResponse, "description": "Token rejected"}},
)
@limiter.limit(TOKEN_ENDPOINT_LIMIT)
async def verify_token(request: Request, claims: AuthenticatedClaims) -> VerifyResponse:
    """Authenticate the bearer token presented in the Authorization header."""
    logger.info(
        "Token authenticated jti=%s item_code=%s",
        claims.standard.jti,
        claims.item.item_code,
    )
    return VerifyResponse()
