"""Correlation identifier derivation.

Identifiers are derived from report content rather than a system random source:

- A canonical JSON buffer of the report (metadata as sent, scope included),
  credentials and context is hashed with 32-bit MurmurHash3, seeded with the
  capture time in milliseconds.
- The hash XOR the timestamp seeds a PRNG, which is stepped once for 128 bits.

Two reports with identical content captured in the same millisecond get the
same identifier. Identifiers are for tracing only and uniqueness is best-effort.
"""

from __future__ import annotations

import json
import random
import uuid

import mmh3

from .models import Context, Credentials, Report, Scope, scoped_metadata

_MASK_32 = 0xFFFFFFFF


def _canonical_buffer(*, credentials: Credentials, context: Context, scope: Scope, report: Report) -> str:
    """Encode the identifying fields as compact, key-sorted JSON."""
    data = {
        "severity": report.severity,
        "message": report.message,
        "token": credentials.token,
        "application": credentials.application,
        "code_version": credentials.code_version,
        "context": context.model_dump(mode="json"),
        "metadata": scoped_metadata(scope, report.metadata),
    }
    return json.dumps(data, separators=(",", ":"), sort_keys=True, ensure_ascii=False)


def generate_correlation_id(
    *,
    credentials: Credentials,
    context: Context,
    scope: Scope,
    report: Report,
    timestamp_ms: int,
) -> uuid.UUID:
    """Derive a version-4 shaped UUID for a report captured at `timestamp_ms`."""
    buffer = _canonical_buffer(credentials=credentials, context=context, scope=scope, report=report)
    digest = mmh3.hash(buffer, timestamp_ms & _MASK_32, False)
    rng = random.Random(digest ^ timestamp_ms)
    return uuid.UUID(int=rng.getrandbits(128), version=4)
