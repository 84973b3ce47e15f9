"""HTTP transport for the TrackJS capture endpoint.

The HTTP call uses `requests` executed in a thread so a pending capture never
blocks the event loop.
"""

from __future__ import annotations

import asyncio
from typing import Any, Literal, Protocol
from urllib.parse import urlencode

import requests  # type: ignore

from .payload import AGENT_VERSION

CAPTURE_BASE_URL = "https://capture.trackjs.com/capture"

FailureKind = Literal["network", "timeout"]


class TrackJSError(RuntimeError):
    """Base class for failures reported by this library."""


class TransportFailure(TrackJSError):
    """The request never produced an HTTP response (connectivity or timeout)."""

    def __init__(self, *, kind: FailureKind, detail: str = ""):
        """Create a failure of the given kind with an optional detail message."""
        self.kind = kind
        self.detail = detail
        super().__init__(f"TrackJS capture {kind} failure: {detail}" if detail else f"TrackJS capture {kind} failure")


class HttpStatusFailure(TrackJSError):
    """The capture endpoint answered with a non-2xx status."""

    def __init__(self, *, status_code: int, body: str | None = None):
        """Create an error capturing the HTTP status code and response body (if any)."""
        self.status_code = status_code
        self.body = body
        super().__init__(f"TrackJS capture HTTP {status_code}: {body}" if body else f"TrackJS capture HTTP {status_code}")

    @property
    def rate_limited(self) -> bool:
        return self.status_code == 429


class RetriesExhausted(HttpStatusFailure):
    """Still rate limited (429) after the configured number of attempts."""

    def __init__(self, *, attempts: int, last_error: HttpStatusFailure):
        """Wrap the last 429 failure together with the number of attempts made."""
        super().__init__(status_code=last_error.status_code, body=last_error.body)
        self.attempts = attempts
        self.last_error = last_error


def capture_url(token: str, version: str = AGENT_VERSION) -> str:
    """Build the capture URL for an account token."""
    return f"{CAPTURE_BASE_URL}?{urlencode({'token': token, 'v': version})}"


class Transport(Protocol):
    async def send(self, url: str, payload: dict[str, Any]) -> None:
        """POST one encoded payload; raise `TrackJSError` subclasses on failure."""


class CaptureTransport:
    """Single-shot JSON POST to the capture endpoint.

    No timeout is applied unless `timeout` is given; the call then waits until
    the endpoint answers or the network layer fails it.
    """

    def __init__(self, *, timeout: float | None = None) -> None:
        self.timeout = timeout

    async def send(self, url: str, payload: dict[str, Any]) -> None:
        """Send the payload, mapping the outcome to success or a typed failure.

        Raises:
        - `HttpStatusFailure` for non-2xx responses
        - `TransportFailure` for timeouts and other transport errors
        """

        def _do_request() -> None:
            """Execute the HTTP request synchronously (runs in a worker thread)."""
            try:
                resp = requests.post(url, json=payload, timeout=self.timeout)
            except requests.Timeout as exc:
                raise TransportFailure(kind="timeout", detail=str(exc)) from exc
            except requests.RequestException as exc:
                raise TransportFailure(kind="network", detail=str(exc)) from exc

            if 200 <= resp.status_code < 300:
                return None
            raise HttpStatusFailure(status_code=resp.status_code, body=resp.text or None)

        await asyncio.to_thread(_do_request)
