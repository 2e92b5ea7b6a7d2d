"""Shared test fixtures for the QR pass service."""

import os

# Configure settings before any app imports trigger Settings() validation.
os.environ.setdefault("TOKEN_SECRET_KEY", "test-secret-for-unit-tests-0123456789")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from collections.abc import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from qrpass.auth.issuer import TokenIssuer  # noqa: E402
from qrpass.auth.verifier import TokenVerifier  # noqa: E402
from qrpass.config import get_settings  # noqa: E402
from qrpass.main import app  # noqa: E402
from qrpass.schemas.token import ItemPayload  # noqa: E402
from qrpass.services.qr_service import QRCodeEncoder  # noqa: E402
from tests.helpers.clock import FrozenClock  # noqa: E402

# ---------------------------------------------------------------------------
# Token components
# ---------------------------------------------------------------------------


@pytest.fixture()
def secret() -> str:
    return get_settings().token_secret_key


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture()
def issuer(secret, clock) -> TokenIssuer:
    return TokenIssuer(secret, clock=clock)


@pytest.fixture()
def verifier(secret, clock) -> TokenVerifier:
    return TokenVerifier(secret, clock=clock)


@pytest.fixture()
def strict_verifier(secret, clock) -> TokenVerifier:
    return TokenVerifier(secret, clock=clock, require_jti=True)


@pytest.fixture()
def payload() -> ItemPayload:
    return ItemPayload(item_code="SKU-1", price=500, amount=2)


# ---------------------------------------------------------------------------
# HTTP client fixture (FastAPI app with explicit token components)
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture()
async def client(issuer, verifier) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the FastAPI app.

    ASGITransport does not run the lifespan, so the components it would build
    are placed on ``app.state`` here, sharing the test's frozen clock.
    """
    app.state.token_issuer = issuer
    app.state.token_verifier = verifier
    app.state.qr_encoder = QRCodeEncoder()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
