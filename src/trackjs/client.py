"""Async reporter for the TrackJS capture API.

A reporter binds credentials, context and scope once. Each send:

- captures the current time,
- derives a correlation identifier from the report and that time,
- encodes the capture payload,
- POSTs it through the transport, retrying while rate limited (HTTP 429).

Reporters hold no mutable state, so one instance can be shared by any number
of concurrent tasks.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .identifier import generate_correlation_id
from .models import Context, Credentials, Report, Scope, Severity, to_millis, utc_now
from .payload import encode_payload
from .retry import RateLimitRetryPolicy
from .transport import CaptureTransport, Transport, TransportFailure, capture_url

if TYPE_CHECKING:
    from .config import TrackJSConfig

logger = logging.getLogger(__name__)


class TrackJSReporter:
    """Sends reports to TrackJS on behalf of one application.

    Members:
    - Credentials: `credentials` (token, application, code version)
    - Context: `context` (session/user/page details, all optional)
    - Scope: `scope` (namespace added to every report's metadata when set)
    - Transport: `transport` (single HTTP POST)
    - Retry policy: `retry_policy` (fixed-delay retry on 429)
    - Send timeout: `send_timeout` (deadline for a whole send, None for no deadline)
    """

    def __init__(
        self,
        credentials: Credentials,
        *,
        context: Context | None = None,
        scope: str = "",
        transport: Transport | None = None,
        retry_policy: RateLimitRetryPolicy | None = None,
        send_timeout: float | None = None,
    ):
        """Create a reporter bound to `credentials`, optionally overriding its collaborators."""
        self.credentials = credentials
        self.context = context or Context()
        self.scope = Scope(scope)
        self.url: str = capture_url(self.credentials.token)

        self.transport: Transport = transport or CaptureTransport()
        self.retry_policy = retry_policy or RateLimitRetryPolicy()
        self.send_timeout = send_timeout

    @classmethod
    def from_config(cls, config: TrackJSConfig, **kwargs: Any) -> TrackJSReporter:
        """Create a reporter from `TrackJSConfig` credentials and tuning knobs.

        Keyword arguments are passed through to the constructor and take precedence.
        """
        kwargs.setdefault("transport", CaptureTransport(timeout=config.request_timeout))
        kwargs.setdefault(
            "retry_policy",
            RateLimitRetryPolicy(max_attempts=config.max_attempts, delay=config.retry_delay),
        )
        kwargs.setdefault("send_timeout", config.send_timeout)
        return cls(config.credentials, **kwargs)

    def _derive(self, **overrides: Any) -> TrackJSReporter:
        values: dict[str, Any] = {
            "context": self.context,
            "scope": self.scope,
            "transport": self.transport,
            "retry_policy": self.retry_policy,
            "send_timeout": self.send_timeout,
        }
        values.update(overrides)
        return TrackJSReporter(self.credentials, **values)

    def with_scope(self, scope: str) -> TrackJSReporter:
        """Return a reporter sharing everything but the scope."""
        return self._derive(scope=scope)

    def with_context(self, context: Context) -> TrackJSReporter:
        """Return a reporter sharing everything but the context."""
        return self._derive(context=context)

    async def send(
        self,
        severity: Severity,
        message: str,
        metadata: Mapping[str, str] | None = None,
    ) -> uuid.UUID:
        """Send one report and return its correlation identifier.

        Raises:
        - `HttpStatusFailure` for non-2xx responses other than 429
        - `RetriesExhausted` when still rate limited after `max_attempts`
        - `TransportFailure` for network errors, request timeouts, or when
          `send_timeout` expires
        """
        report = Report(severity=severity, message=message, metadata=dict(metadata or {}))
        timestamp = utc_now()

        correlation_id = generate_correlation_id(
            credentials=self.credentials,
            context=self.context,
            scope=self.scope,
            report=report,
            timestamp_ms=to_millis(timestamp),
        )
        payload = encode_payload(
            credentials=self.credentials,
            context=self.context,
            scope=self.scope,
            report=report,
            correlation_id=correlation_id,
            timestamp=timestamp,
        )

        attempts = self.retry_policy.run(lambda: self.transport.send(self.url, payload))
        if self.send_timeout is None:
            await attempts
        else:
            try:
                await asyncio.wait_for(attempts, timeout=self.send_timeout)
            except asyncio.TimeoutError as exc:
                raise TransportFailure(
                    kind="timeout",
                    detail=f"no accepted response within {self.send_timeout}s",
                ) from exc

        logger.debug("Delivered %s report %s", severity, correlation_id)
        return correlation_id

    async def error(self, message: str, metadata: Mapping[str, str] | None = None) -> uuid.UUID:
        """Send an error report."""
        return await self.send("error", message, metadata)

    async def warning(self, message: str, metadata: Mapping[str, str] | None = None) -> uuid.UUID:
        """Send a warning report."""
        return await self.send("warning", message, metadata)

    async def info(self, message: str, metadata: Mapping[str, str] | None = None) -> uuid.UUID:
        return await self.send("info", message, metadata)

    async def debug(self, message: str, metadata: Mapping[str, str] | None = None) -> uuid.UUID:
        return await self.send("debug", message, metadata)

    async def log(self, message: str, metadata: Mapping[str, str] | None = None) -> uuid.UUID:
        return await self.send("log", message, metadata)
