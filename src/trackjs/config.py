"""Configuration loading and validation.

This module is responsible for:

- Loading `.env` into the process environment (without overriding existing vars).
- Converting environment variables into strongly-typed Pydantic models.
- Validating required fields and providing actionable error messages.
"""

import os
from typing import TypeVar

import dotenv
from pydantic import BaseModel, Field, field_validator

from .models import Application, CodeVersion, Credentials, Token
from .transport import capture_url

_T = TypeVar("_T", int, float)


def _get_required_env(name: str) -> str:
    """Read a required env var or raise a helpful error."""
    value = os.getenv(name, "").strip()
    if not value:
        raise ValueError(f"{name} is required. Please set it in your .env file.")
    if value.startswith("your_") and value.endswith("_here"):
        raise ValueError(f"{name} is required. Please replace the placeholder value in your .env file.")
    return value


def _get_env_str(name: str, default: str = "") -> str:
    """Read an optional string env var."""
    return os.getenv(name, default).strip()


def _get_env_number(name: str, default: _T, cast: type[_T]) -> _T:
    """Read an int/float env var with a default."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a {cast.__name__}. Got: {raw!r}") from exc


def _get_env_optional_float(name: str) -> float | None:
    """Read a float env var, returning None when unset."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a float. Got: {raw!r}") from exc


class TrackJSConfig(BaseModel):
    """Configuration for submitting reports to TrackJS."""

    token: str = Field(..., description="TrackJS account token")
    application: str = Field(default="", description="TrackJS application key")
    code_version: str = Field(default="", description="Version of the reporting code (e.g. commit hash)")

    # Optional tuning knobs
    max_attempts: int = Field(default=60, description="Max capture attempts while rate limited (HTTP 429)")
    retry_delay: float = Field(default=1.0, description="Delay between rate-limited attempts (seconds)")
    request_timeout: float | None = Field(default=None, description="Per-request HTTP timeout (seconds)")
    send_timeout: float | None = Field(default=None, description="Deadline for a whole send incl. retries (seconds)")

    @property
    def capture_url(self) -> str:
        """Get the capture URL for the configured token."""
        return capture_url(self.token)

    @property
    def credentials(self) -> Credentials:
        """Credentials bound into every report."""
        return Credentials(
            token=Token(self.token),
            application=Application(self.application),
            code_version=CodeVersion(self.code_version),
        )

    @field_validator("max_attempts")
    def validate_max_attempts(cls, v: int) -> int:
        """At least one attempt is always made."""
        if v < 1:
            raise ValueError(f"max_attempts must be >= 1. Got: {v}")
        return v

    @field_validator("retry_delay")
    def validate_retry_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"retry_delay must be >= 0. Got: {v}")
        return v

    @field_validator("request_timeout", "send_timeout")
    def validate_timeouts(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError(f"timeouts must be > 0 when set. Got: {v}")
        return v


class Config(BaseModel):
    """Top-level application configuration."""

    trackjs: TrackJSConfig = Field(..., description="TrackJS configuration")


def load_config() -> Config:
    """Load application configuration from environment variables.

    Notes:
    - Calls `dotenv.load_dotenv()` so local `.env` values are visible to the process.
    - Raises `ValueError` with actionable messages when required configuration is
      missing or still contains placeholder values.
    """
    dotenv.load_dotenv()

    trackjs = TrackJSConfig(
        token=_get_required_env("TRACKJS_TOKEN"),
        application=_get_env_str("TRACKJS_APPLICATION"),
        code_version=_get_env_str("TRACKJS_CODE_VERSION"),
        max_attempts=_get_env_number("TRACKJS_MAX_ATTEMPTS", 60, int),
        retry_delay=_get_env_number("TRACKJS_RETRY_DELAY", 1.0, float),
        request_timeout=_get_env_optional_float("TRACKJS_REQUEST_TIMEOUT"),
        send_timeout=_get_env_optional_float("TRACKJS_SEND_TIMEOUT"),
    )
    return Config(trackjs=trackjs)
