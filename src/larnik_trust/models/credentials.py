"""Session credential models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TokenPair:
    """
    Access and refresh credentials issued together for one principal.

    Attributes:
        access_token: Short-lived credential presented on every request
        refresh_token: Longer-lived credential exchanged for a new pair
        expires_in: Access credential lifetime in seconds
        token_type: Authorization scheme clients should use
    """

    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "Bearer"

    def to_dict(self) -> dict[str, str | int]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_in": self.expires_in,
            "token_type": self.token_type,
        }
