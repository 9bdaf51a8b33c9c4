"""Configuration management for the Larnik trust boundary.

Settings are loaded once at process start with :func:`load_settings` and are
frozen afterwards. The token service and payment gateway receive the values
they need through their constructors; nothing in this package reads the
environment after startup.
"""

import re
from datetime import timedelta

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$")
_DURATION_UNITS = {
    "": 1,
    "s": 1,
    "m": 60,
    "h": 60 * 60,
    "d": 24 * 60 * 60,
    "w": 7 * 24 * 60 * 60,
}


def parse_duration(value: str | int | float | timedelta) -> timedelta:
    """
    Parse a compact duration such as ``"24h"`` or ``"7d"``.

    Bare integers are interpreted as seconds, matching the expiry syntax the
    LMS frontend and deployment scripts already use.

    Raises:
        ValueError: If the value is not a positive duration
    """
    if isinstance(value, timedelta):
        duration = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        duration = timedelta(seconds=value)
    elif isinstance(value, str):
        match = _DURATION_PATTERN.match(value.lower())
        if not match:
            raise ValueError(f"Invalid duration: {value!r}")
        amount, unit = match.groups()
        duration = timedelta(seconds=int(amount) * _DURATION_UNITS[unit])
    else:
        raise ValueError(f"Invalid duration: {value!r}")

    if duration <= timedelta(0):
        raise ValueError("Duration must be positive")
    return duration


class TokenSettings(BaseSettings):
    """Signing secrets and registered-claim constants for session credentials."""

    model_config = SettingsConfigDict(
        env_prefix="JWT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    secret: SecretStr = Field(description="HMAC secret for access credentials")
    refresh_secret: SecretStr = Field(description="HMAC secret for refresh credentials")
    expires_in: timedelta = Field(
        default=timedelta(hours=24), description="Access credential lifetime"
    )
    refresh_expires_in: timedelta = Field(
        default=timedelta(days=7), description="Refresh credential lifetime"
    )
    issuer: str = Field(default="larnik-lms", description="Fixed iss claim")
    audience: str = Field(default="larnik-users", description="Fixed aud claim")
    algorithm: str = Field(default="HS256", description="JWS signing algorithm")

    @field_validator("expires_in", "refresh_expires_in", mode="before")
    @classmethod
    def _parse_duration(cls, value: object) -> timedelta:
        return parse_duration(value)  # type: ignore[arg-type]

    @model_validator(mode="after")
    def _check_secrets(self) -> "TokenSettings":
        access = self.secret.get_secret_value()
        refresh = self.refresh_secret.get_secret_value()
        if not access or not refresh:
            raise ValueError("JWT_SECRET and JWT_REFRESH_SECRET must be non-empty")
        if access == refresh:
            raise ValueError("JWT_SECRET and JWT_REFRESH_SECRET must differ")
        return self


class RazorpaySettings(BaseSettings):
    """Razorpay API credentials and client settings."""

    model_config = SettingsConfigDict(
        env_prefix="RAZORPAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    key_id: str = Field(description="Razorpay API key id")
    key_secret: SecretStr = Field(description="Razorpay API key secret")
    webhook_secret: SecretStr = Field(description="Secret configured on the Razorpay webhook")
    base_url: str = Field(
        default="https://api.razorpay.com/v1", description="Razorpay REST API base URL"
    )
    timeout_seconds: float = Field(default=15.0, gt=0, le=60, description="Request timeout")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    log_level: str = Field(default="INFO", description="Logging level")
    environment: str = Field(default="development", description="Environment name")

    tokens: TokenSettings = Field(default_factory=TokenSettings)
    razorpay: RazorpaySettings = Field(default_factory=RazorpaySettings)


def load_settings() -> Settings:
    """Read settings from the environment (and ``.env``) once at startup."""
    return Settings()
