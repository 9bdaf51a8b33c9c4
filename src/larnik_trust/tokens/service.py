"""Issuance and verification of session credentials.

Access and refresh credentials share one claim shape but are signed with
independent secrets and lifetimes. A credential signed for one purpose
fails verification as the other, so leaking one secret never lets an
attacker forge the other kind of credential.

Expiry is the only invalidation mechanism; there is no revocation list.
Issuance and verification read time from the same injected clock.
"""

from collections.abc import Callable, Mapping
from datetime import datetime, timedelta, timezone
from typing import Any, NoReturn

import jwt

from larnik_trust.config import TokenSettings
from larnik_trust.logging_config import get_logger
from larnik_trust.models import (
    CredentialError,
    InvalidCredential,
    InvalidRefreshCredential,
    TokenPair,
)

logger = get_logger(__name__)

# Claims the service sets itself; callers may not supply them.
REGISTERED_CLAIMS = frozenset({"iss", "aud", "iat", "exp", "nbf"})

SUPPORTED_ALGORITHMS = frozenset({"HS256", "HS384", "HS512"})

# Claims PyJWT requires to be strings when present.
STRING_CLAIMS = ("sub", "jti")

# Checked in order: InvalidSignatureError is a DecodeError subclass.
_FAILURE_REASONS: tuple[tuple[type[jwt.PyJWTError], str], ...] = (
    (jwt.ExpiredSignatureError, "expired"),
    (jwt.InvalidAudienceError, "audience_mismatch"),
    (jwt.InvalidIssuerError, "issuer_mismatch"),
    (jwt.MissingRequiredClaimError, "missing_claim"),
    (jwt.ImmatureSignatureError, "not_yet_valid"),
    (jwt.InvalidSignatureError, "bad_signature"),
    (jwt.InvalidAlgorithmError, "algorithm_not_allowed"),
    (jwt.DecodeError, "malformed"),
)


def _failure_reason(error: jwt.PyJWTError) -> str:
    for error_type, reason in _FAILURE_REASONS:
        if isinstance(error, error_type):
            return reason
    return "invalid"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _is_timestamp(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _lifetime_failure(payload: Mapping[str, Any], now: int) -> str | None:
    """Return the rejection reason for the time-based claims, or None."""
    exp, iat, nbf = payload["exp"], payload["iat"], payload.get("nbf")
    if not _is_timestamp(exp) or not _is_timestamp(iat):
        return "malformed"
    if nbf is not None and not _is_timestamp(nbf):
        return "malformed"
    if exp <= now:
        return "expired"
    if iat > now or (nbf is not None and nbf > now):
        return "not_yet_valid"
    return None


class TokenService:
    """
    Stateless issuer and verifier for access and refresh credentials.

    All configuration is passed in explicitly so tests can inject their own
    secrets and clock. Instances hold only immutable values and are safe to
    share between threads and tasks.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        *,
        access_ttl: timedelta = timedelta(hours=24),
        refresh_ttl: timedelta = timedelta(days=7),
        issuer: str = "larnik-lms",
        audience: str = "larnik-users",
        algorithm: str = "HS256",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Initialize the token service.

        Args:
            access_secret: HMAC secret for access credentials
            refresh_secret: HMAC secret for refresh credentials (must differ)
            access_ttl: Access credential lifetime
            refresh_ttl: Refresh credential lifetime
            issuer: Value written to and required in the ``iss`` claim
            audience: Value written to and required in the ``aud`` claim
            algorithm: HMAC JWS algorithm
            clock: Returns the current UTC time; used for ``iat``/``exp`` when
                issuing and for the expiry check when verifying

        Raises:
            ValueError: If a secret is empty, the secrets are equal, a TTL is
                not positive, or the algorithm is not an HMAC algorithm
        """
        if not access_secret or not refresh_secret:
            raise ValueError("Access and refresh secrets must be non-empty")
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh secrets must differ")
        if access_ttl <= timedelta(0) or refresh_ttl <= timedelta(0):
            raise ValueError("Credential lifetimes must be positive")
        if algorithm not in SUPPORTED_ALGORITHMS:
            raise ValueError(f"Unsupported signing algorithm: {algorithm}")

        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.issuer = issuer
        self.audience = audience
        self.algorithm = algorithm
        self._clock = clock or _utcnow

    @classmethod
    def from_settings(
        cls,
        token_settings: TokenSettings,
        clock: Callable[[], datetime] | None = None,
    ) -> "TokenService":
        """Build a token service from loaded configuration."""
        return cls(
            access_secret=token_settings.secret.get_secret_value(),
            refresh_secret=token_settings.refresh_secret.get_secret_value(),
            access_ttl=token_settings.expires_in,
            refresh_ttl=token_settings.refresh_expires_in,
            issuer=token_settings.issuer,
            audience=token_settings.audience,
            algorithm=token_settings.algorithm,
            clock=clock,
        )

    def issue_access_token(self, claims: Mapping[str, Any]) -> str:
        """
        Sign an access credential for ``claims``.

        Args:
            claims: Principal claims (at least a subject id and a role)

        Returns:
            Compact JWS string

        Raises:
            ValueError: If claims are empty, contain registered claim names, or
                carry a non-string ``sub``/``jti``
        """
        return self._issue(claims, self._access_secret, self.access_ttl)

    def issue_refresh_token(self, claims: Mapping[str, Any]) -> str:
        """Sign a refresh credential for ``claims``; see issue_access_token."""
        return self._issue(claims, self._refresh_secret, self.refresh_ttl)

    def verify_access_token(self, token: str) -> dict[str, Any]:
        """
        Verify an access credential and return the claims it was issued with.

        Raises:
            InvalidCredential: For any verification failure, regardless of cause
        """
        return self._verify(token, self._access_secret, InvalidCredential, "access")

    def verify_refresh_token(self, token: str) -> dict[str, Any]:
        """
        Verify a refresh credential and return the claims it was issued with.

        Raises:
            InvalidRefreshCredential: For any verification failure
        """
        return self._verify(token, self._refresh_secret, InvalidRefreshCredential, "refresh")

    def issue_token_pair(self, claims: Mapping[str, Any]) -> TokenPair:
        """Issue an access and a refresh credential for the same principal."""
        return TokenPair(
            access_token=self.issue_access_token(claims),
            refresh_token=self.issue_refresh_token(claims),
            expires_in=int(self.access_ttl.total_seconds()),
        )

    def refresh_session(self, refresh_token: str) -> TokenPair:
        """
        Exchange a valid refresh credential for a new credential pair.

        Raises:
            InvalidRefreshCredential: If the refresh credential does not verify
        """
        claims = self.verify_refresh_token(refresh_token)
        pair = self.issue_token_pair(claims)
        logger.info("session_refreshed", role=claims.get("role"))
        return pair

    def _issue(self, claims: Mapping[str, Any], secret: str, ttl: timedelta) -> str:
        if not isinstance(claims, Mapping) or not claims:
            raise ValueError("Claims must be a non-empty mapping")

        reserved = REGISTERED_CLAIMS.intersection(claims)
        if reserved:
            raise ValueError(
                f"Claims may not set registered fields: {', '.join(sorted(reserved))}"
            )
        for name in STRING_CLAIMS:
            if name in claims and not isinstance(claims[name], str):
                raise ValueError(f"Claim '{name}' must be a string")

        issued_at = self._clock()
        payload = {
            **claims,
            "iss": self.issuer,
            "aud": self.audience,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + ttl).timestamp()),
        }
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def _verify(
        self,
        token: str,
        secret: str,
        error_type: type[CredentialError],
        credential_kind: str,
    ) -> dict[str, Any]:
        if not isinstance(token, str) or not token:
            self._reject(error_type, credential_kind, "missing")

        # Time-based claims are checked below against the service clock.
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                options={
                    "require": ["exp", "iat", "iss", "aud"],
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                },
            )
        except jwt.PyJWTError as e:
            self._reject(
                error_type, credential_kind, _failure_reason(e), error_type=type(e).__name__
            )

        reason = _lifetime_failure(payload, int(self._clock().timestamp()))
        if reason:
            self._reject(error_type, credential_kind, reason)

        return {key: value for key, value in payload.items() if key not in REGISTERED_CLAIMS}

    @staticmethod
    def _reject(
        failure: type[CredentialError],
        credential_kind: str,
        reason: str,
        **context: Any,
    ) -> NoReturn:
        logger.warning(
            "credential_rejected", credential_kind=credential_kind, reason=reason, **context
        )
        raise failure() from None


def extract_bearer_token(authorization: str | None) -> str:
    """
    Extract the credential from an ``Authorization: Bearer <token>`` header.

    Raises:
        InvalidCredential: If the header is missing or not a bearer header
    """
    if not authorization:
        raise InvalidCredential()

    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token or " " in token:
        raise InvalidCredential()
    return token
