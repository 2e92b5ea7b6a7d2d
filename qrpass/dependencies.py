"""Dependency injection for FastAPI."""

from dataclasses import dataclass
from datetime import timedelta
from typing import Annotated

from fastapi import Depends, Request

from qrpass.auth.issuer import TokenIssuer
from qrpass.auth.verifier import TokenVerifier
from qrpass.config import Settings
from qrpass.services.qr_service import QRCodeEncoder

# ---------------------------------------------------------------------------
# Lifespan helpers: called from main.py to build the shared token components
# ---------------------------------------------------------------------------


def create_issuer(settings: Settings) -> TokenIssuer:
    """Create the token issuer from the configured secret and lifetime."""
    return TokenIssuer(
        settings.token_secret_key,
        algorithm=settings.token_algorithm,
        lifetime=timedelta(minutes=settings.token_lifetime_minutes),
    )


def create_verifier(settings: Settings) -> TokenVerifier:
    """Create the token verifier sharing the issuer's secret."""
    return TokenVerifier(
        settings.token_secret_key,
        algorithm=settings.token_algorithm,
        require_jti=settings.token_require_jti,
    )


def create_qr_encoder(settings: Settings) -> QRCodeEncoder:
    """Create the PNG QR renderer."""
    return QRCodeEncoder(
        error_correction=settings.qr_error_correction,
        image_size=settings.qr_image_size,
    )


@dataclass(frozen=True)
class TokenComponents:
    """Immutable bundle of the issuer, verifier and encoder.

    Used by entry-points without a FastAPI app (the CLI) and by the lifespan
    to populate ``app.state``.
    """

    issuer: TokenIssuer
    verifier: TokenVerifier
    encoder: QRCodeEncoder

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenComponents":
        """Factory that wires all three components from one settings object."""
        return cls(
            issuer=create_issuer(settings),
            verifier=create_verifier(settings),
            encoder=create_qr_encoder(settings),
        )


# ---------------------------------------------------------------------------
# FastAPI dependencies: pull components from app.state (set in lifespan)
# ---------------------------------------------------------------------------


def get_token_issuer(request: Request) -> TokenIssuer:
    """Dependency that provides the token issuer from app.state."""
    return request.app.state.token_issuer


def get_token_verifier(request: Request) -> TokenVerifier:
    """Dependency that provides the token verifier from app.state."""
    return request.app.state.token_verifier


def get_qr_encoder(request: Request) -> QRCodeEncoder:
    """Dependency that provides the QR encoder from app.state."""
    return request.app.state.qr_encoder


# ---------------------------------------------------------------------------
# Type aliases for cleaner dependency injection
# ---------------------------------------------------------------------------
Issuer = Annotated[TokenIssuer, Depends(get_token_issuer)]
Verifier = Annotated[TokenVerifier, Depends(get_token_verifier)]
Encoder = Annotated[QRCodeEncoder, Depends(get_qr_encoder)]
