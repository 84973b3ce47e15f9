"""Data models for TrackJS reports.

These models describe what a caller hands to the reporter. The wire format
sent to the capture endpoint lives in `trackjs.payload`.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Literal, NewType

from pydantic import BaseModel, ConfigDict, Field

# Distinct nominal types so a token is never passed where an application is expected.
Token = NewType("Token", str)
Application = NewType("Application", str)
CodeVersion = NewType("CodeVersion", str)
Scope = NewType("Scope", str)

Severity = Literal["error", "warning", "info", "debug", "log"]

ConsoleSeverity = Literal["error", "warn", "info", "debug", "log"]

CONSOLE_SEVERITY: dict[str, ConsoleSeverity] = {
    "error": "error",
    "warning": "warn",
    "info": "info",
    "debug": "debug",
    "log": "log",
}


SCOPE_METADATA_KEY = "scope"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def scoped_metadata(scope: str, metadata: dict[str, str]) -> dict[str, str]:
    """Metadata as sent for a report: the bound scope first, unless the report sets its own `scope`."""
    if not scope or SCOPE_METADATA_KEY in metadata:
        return dict(metadata)
    return {SCOPE_METADATA_KEY: scope, **metadata}


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(tz=timezone.utc)


def to_millis(ts: datetime) -> int:
    """Convert a datetime to integer milliseconds since the epoch (naive means UTC)."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return (ts - _EPOCH) // timedelta(milliseconds=1)


class _Model(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class Credentials(_Model):
    """Account credentials bound to a reporter once."""

    token: Token
    application: Application = Application("")
    code_version: CodeVersion = CodeVersion("")


class Context(_Model):
    """Descriptive context about where reports originate.

    Every field is optional; absent strings are empty and absent numbers are zero.
    """

    session_id: str = ""
    user_id: str = ""
    start_time: datetime | None = None
    original_url: str = ""
    referrer: str = ""
    user_agent: str = ""
    viewport_height: int = 0
    viewport_width: int = 0

    def age_ms(self, at: datetime) -> int:
        """Milliseconds elapsed between `start_time` and `at` (0 when unknown)."""
        if self.start_time is None:
            return 0
        return max(0, to_millis(at) - to_millis(self.start_time))


class Report(_Model):
    """A single reportable event."""

    severity: Severity
    message: str
    metadata: dict[str, str] = Field(default_factory=dict)

    @property
    def console_severity(self) -> ConsoleSeverity:
        """Severity label used in the `console` section of the payload."""
        return CONSOLE_SEVERITY[self.severity]
