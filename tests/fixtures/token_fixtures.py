"""Fixed secrets and helpers for credential tests."""

import base64
import json

ACCESS_SECRET = "test-access-secret-0123456789abcdef0123"
REFRESH_SECRET = "test-refresh-secret-0123456789abcdef012"


def _b64url_decode(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def replace_claims(token: str, **changes: object) -> str:
    """Rewrite the payload segment of a JWS while keeping its original signature."""
    header, payload, signature = token.split(".")
    claims = json.loads(_b64url_decode(payload))
    claims.update(changes)
    new_payload = _b64url_encode(json.dumps(claims, separators=(",", ":")).encode("utf-8"))
    return f"{header}.{new_payload}.{signature}"


def corrupt_signature(token: str) -> str:
    """Change the first character of the signature segment (six full data bits)."""
    header, payload, signature = token.split(".")
    replacement = "B" if signature[0] == "A" else "A"
    return f"{header}.{payload}.{replacement}{signature[1:]}"
