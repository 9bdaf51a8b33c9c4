"""Session credential issuance and verification."""

from larnik_trust.tokens.service import (
    REGISTERED_CLAIMS,
    TokenService,
    extract_bearer_token,
)

__all__ = [
    "REGISTERED_CLAIMS",
    "TokenService",
    "extract_bearer_token",
]
