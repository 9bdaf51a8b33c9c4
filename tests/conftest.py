"""Pytest configuration and shared fixtures for all tests.

This module provides shared test fixtures including:
- Token service with fixed test secrets
- Razorpay gateway wired to an httpx.MockTransport stub
- Environment isolation for settings tests
"""

from collections.abc import AsyncIterator
from typing import Any

import pytest
import pytest_asyncio

from larnik_trust.payments import RazorpayGateway
from larnik_trust.tokens import TokenService
from tests.fixtures.razorpay_fixtures import RazorpayStub
from tests.fixtures.token_fixtures import ACCESS_SECRET, REFRESH_SECRET

_CONFIG_ENV_VARS = (
    "JWT_SECRET",
    "JWT_REFRESH_SECRET",
    "JWT_EXPIRES_IN",
    "JWT_REFRESH_EXPIRES_IN",
    "JWT_ISSUER",
    "JWT_AUDIENCE",
    "JWT_ALGORITHM",
    "RAZORPAY_KEY_ID",
    "RAZORPAY_KEY_SECRET",
    "RAZORPAY_WEBHOOK_SECRET",
    "RAZORPAY_BASE_URL",
    "RAZORPAY_TIMEOUT_SECONDS",
    "LOG_LEVEL",
    "ENVIRONMENT",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove every configuration variable so tests control the environment."""
    for name in _CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def token_service() -> TokenService:
    """Token service with default lifetimes and fixed test secrets."""
    return TokenService(ACCESS_SECRET, REFRESH_SECRET)


@pytest.fixture
def student_claims() -> dict[str, Any]:
    """Standard principal claims for a student."""
    return {"sub": "64f1c2a9e4b0a1b2c3d4e5f6", "role": "student", "university": "uni_42"}


@pytest_asyncio.fixture
async def razorpay_stub() -> AsyncIterator[RazorpayStub]:
    """Fresh Razorpay stub for each test; its clients are closed afterwards."""
    stub = RazorpayStub()

    yield stub

    await stub.aclose()


@pytest.fixture
def gateway(razorpay_stub: RazorpayStub) -> RazorpayGateway:
    """Razorpay gateway that talks to razorpay_stub."""
    return razorpay_stub.gateway()
