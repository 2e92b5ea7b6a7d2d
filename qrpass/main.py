"""FastAPI application entry point."""

import logging
import re
import uuid as _uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.types import ASGIApp, Message, Receive, Scope, Send
from structlog.contextvars import bound_contextvars

from qrpass import __version__
from qrpass.api.v1.router import api_router
from qrpass.auth.exceptions import TokenError, TokenVerificationError
from qrpass.config import get_settings
from qrpass.dependencies import TokenComponents
from qrpass.rate_limit import limiter
from qrpass.schemas.token import ItemPayload
from qrpass.utils.logging import setup_logging

logger = logging.getLogger(__name__)

SERVICE_NAME = "qrpass-service"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager: builds the token components once."""
    settings = get_settings()
    logger.info("Starting QR pass service...")
    logger.info("Environment: %s", settings.environment)
    logger.info("Debug mode: %s", settings.debug)
    logger.info("Token lifetime: %s minutes", settings.token_lifetime_minutes)

    try:
        components = TokenComponents.from_settings(settings)
    except ValueError:
        logger.exception("Failed to initialise token components")
        raise

    app.state.token_issuer = components.issuer
    app.state.token_verifier = components.verifier
    app.state.qr_encoder = components.encoder

    yield

    logger.info("Shutting down QR pass service...")


# ---------------------------------------------------------------------------
# Request ID middleware: pure ASGI (no BaseHTTPMiddleware overhead)
# ---------------------------------------------------------------------------

# Caller-supplied IDs outside this alphabet or length are replaced
_REQUEST_ID_PATTERN = re.compile(r"[A-Za-z0-9._-]{1,128}")


def _resolve_request_id(scope: Scope) -> str:
    for name, value in scope.get("headers", []):
        if name == b"x-request-id":
            supplied = value.decode("latin-1")
            if _REQUEST_ID_PATTERN.fullmatch(supplied):
                return supplied
            break
    return str(_uuid.uuid4())


class RequestIDMiddleware:
    """Tag each request with an ID, echo it back and bind it to the log context.

    A well-formed ``X-Request-ID`` from the caller is reused so traces can be
    correlated across services; anything else is replaced with a UUID4.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = _resolve_request_id(scope)
        scope.setdefault("state", {})["request_id"] = request_id
        header = (b"x-request-id", request_id.encode("ascii"))

        async def send_with_request_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                message["headers"] = [*message.get("headers", []), header]
            await send(message)

        with bound_contextvars(request_id=request_id):
            await self.app(scope, receive, send_with_request_id)


# ---------------------------------------------------------------------------
# Security headers middleware: pure ASGI
# ---------------------------------------------------------------------------

_SECURITY_HEADERS: list[tuple[bytes, bytes]] = [
    (b"x-content-type-options", b"nosniff"),
    (b"x-frame-options", b"DENY"),
    (b"referrer-policy", b"no-referrer"),
    (b"cache-control", b"no-store"),
]
_HSTS_HEADER = (b"strict-transport-security", b"max-age=63072000; includeSubDomains")


class SecurityHeadersMiddleware:
    """Mark every response as non-cacheable and non-embeddable.

    Responses carry freshly signed credentials. HSTS is added in production
    only, where the service sits behind TLS.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        extra = [*_SECURITY_HEADERS]
        if get_settings().is_production:
            extra.append(_HSTS_HEADER)

        async def send_with_security_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                message["headers"] = [*message.get("headers", []), *extra]
            await send(message)

        await self.app(scope, receive, send_with_security_headers)


# ---------------------------------------------------------------------------
# Exception handlers: map token errors to 400/401, never leak internals
# ---------------------------------------------------------------------------


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def _binding_error_handler(request: Request, exc: RequestValidationError):
        logger.info("Request body failed to bind on %s", request.url.path)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Failed to bind request", "detail": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(TokenVerificationError)
    async def _token_rejected_handler(request: Request, exc: TokenVerificationError):
        logger.warning("Token rejected on %s: %s", request.url.path, exc.reason.value)
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"detail": exc.message, "reason": exc.reason.value},
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_application() -> FastAPI:
    """Application factory."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title="QR Pass Service API",
        description="Issues short-lived signed item passes as QR codes and verifies them.",
        version=__version__,
        debug=settings.debug,
        docs_url="/docs" if settings.is_development else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]  # slowapi typing mismatch
    app.add_middleware(SlowAPIMiddleware)

    # Request ID and security headers (outermost = runs first)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000"] if settings.is_development else [],
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )

    _register_exception_handlers(app)

    app.include_router(api_router, prefix="/api/v1")

    # ------------------------------------------------------------------
    # Health check endpoints (no prefix)
    # ------------------------------------------------------------------

    @app.get("/health", tags=["Health"])
    async def health_check() -> dict[str, str]:
        """Liveness check: is the process running?"""
        return {
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": __version__,
        }

    @app.get("/ready", tags=["Health"])
    async def readiness_check(request: Request):
        """Readiness check: can a token be signed, verified and rendered?"""
        checks: dict[str, str] = {}
        state = request.app.state

        try:
            issued = state.token_issuer.issue(
                ItemPayload(item_code="readiness-check", price=0, amount=0)
            )
            state.token_verifier.verify(issued.token)
            checks["signing"] = "ok"
        except (AttributeError, TokenError):
            logger.exception("Readiness check failed to sign and verify a token")
            checks["signing"] = "unavailable"

        checks["qr_encoder"] = "ok" if getattr(state, "qr_encoder", None) else "unavailable"

        all_ok = all(v == "ok" for v in checks.values())
        payload = {
            "status": "ready" if all_ok else "degraded",
            "checks": checks,
        }

        if not all_ok:
            return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=payload)
        return payload

    @app.get("/api/v1/ping", tags=["Health"])
    async def ping() -> dict:
        """Simple ping endpoint for debugging."""
        return {"ping": "pong"}

    return app


# Create the application instance
app = create_application()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("qrpass.main:app", host=settings.api_host, port=settings.api_port)
