"""Client library for submitting error and log reports to TrackJS.

The reporter builds the capture payload, derives a correlation identifier
locally, and POSTs the report, retrying while the account is rate limited.
"""

from .client import TrackJSReporter
from .config import Config, TrackJSConfig, load_config
from .identifier import generate_correlation_id
from .models import Application, CodeVersion, Context, Credentials, Report, Scope, Severity, Token
from .payload import AGENT_VERSION, CapturePayload, build_payload, encode_payload
from .retry import RateLimitRetryPolicy
from .transport import (
    CaptureTransport,
    HttpStatusFailure,
    RetriesExhausted,
    TrackJSError,
    Transport,
    TransportFailure,
    capture_url,
)
from .version import __version__

__all__ = [
    "__version__",
    "AGENT_VERSION",
    "Application",
    "CapturePayload",
    "CaptureTransport",
    "CodeVersion",
    "Config",
    "Context",
    "Credentials",
    "HttpStatusFailure",
    "RateLimitRetryPolicy",
    "Report",
    "RetriesExhausted",
    "Scope",
    "Severity",
    "Token",
    "TrackJSConfig",
    "TrackJSError",
    "TrackJSReporter",
    "Transport",
    "TransportFailure",
    "build_payload",
    "capture_url",
    "encode_payload",
    "generate_correlation_id",
    "load_config",
]
