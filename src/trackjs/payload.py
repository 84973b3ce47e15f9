"""Wire models for the TrackJS capture payload.

The capture endpoint accepts many telemetry categories (stack traces,
navigation, network, visitor activity, bind stacks). This library does not
collect them; those fields are sent as empty placeholders so the payload keeps
the shape the endpoint expects.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models import ConsoleSeverity, Context, Credentials, Report, Scope, scoped_metadata
from .version import __version__

# Library version, sent in the payload and as the `v` query parameter.
AGENT_VERSION = __version__
AGENT_PLATFORM = "browser"


def format_timestamp(ts: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with millisecond precision (`...Z`)."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class ConsoleEntry(_WireModel):
    message: str
    severity: ConsoleSeverity
    timestamp: str


class Customer(_WireModel):
    application: str
    correlation_id: str
    session_id: str
    token: str
    user_id: str
    version: str


class Environment(_WireModel):
    age: int
    dependencies: dict[str, str] = Field(default_factory=dict)
    original_url: str
    referrer: str
    user_agent: str
    viewport_height: int
    viewport_width: int


class MetadataEntry(_WireModel):
    key: str
    value: str


class CapturePayload(_WireModel):
    """Top-level capture document."""

    agent_platform: str = AGENT_PLATFORM
    bind_stack: None = None
    bind_time: None = None
    console: list[ConsoleEntry]
    customer: Customer
    entry: Literal["direct"] = "direct"
    environment: Environment
    file: str = ""
    message: str
    metadata: list[MetadataEntry]
    nav: list[Any] = Field(default_factory=list)
    network: list[Any] = Field(default_factory=list)
    stack: str = ""
    throttled: int = 0
    timestamp: str
    url: str = ""
    version: str = AGENT_VERSION
    visitor: list[Any] = Field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        """Dump to a JSON-ready dict using the endpoint's camelCase field names."""
        return self.model_dump(mode="json", by_alias=True)


def _metadata_entries(scope: Scope, metadata: dict[str, str]) -> list[MetadataEntry]:
    return [MetadataEntry(key=k, value=v) for k, v in scoped_metadata(scope, metadata).items()]


def build_payload(
    *,
    credentials: Credentials,
    context: Context,
    scope: Scope,
    report: Report,
    correlation_id: uuid.UUID,
    timestamp: datetime,
) -> CapturePayload:
    """Map one report and its bound credentials/context into a `CapturePayload`."""
    ts = format_timestamp(timestamp)
    return CapturePayload(
        console=[ConsoleEntry(message=report.message, severity=report.console_severity, timestamp=ts)],
        customer=Customer(
            application=credentials.application,
            correlation_id=str(correlation_id),
            session_id=context.session_id,
            token=credentials.token,
            user_id=context.user_id,
            version=credentials.code_version,
        ),
        environment=Environment(
            age=context.age_ms(timestamp),
            original_url=context.original_url,
            referrer=context.referrer,
            user_agent=context.user_agent,
            viewport_height=context.viewport_height,
            viewport_width=context.viewport_width,
        ),
        message=report.message,
        metadata=_metadata_entries(scope, report.metadata),
        timestamp=ts,
    )


def encode_payload(
    *,
    credentials: Credentials,
    context: Context,
    scope: Scope,
    report: Report,
    correlation_id: uuid.UUID,
    timestamp: datetime,
) -> dict[str, Any]:
    """Encode a report into the JSON document POSTed to the capture endpoint."""
    return build_payload(
        credentials=credentials,
        context=context,
        scope=scope,
        report=report,
        correlation_id=correlation_id,
        timestamp=timestamp,
    ).to_wire()
