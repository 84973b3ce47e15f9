from __future__ import annotations

import asyncio

import pytest

from trackjs.retry import RateLimitRetryPolicy
from trackjs.transport import HttpStatusFailure, RetriesExhausted, TransportFailure


class _ScriptedOperation:
    """Raises the scripted outcomes in order; `None` means success."""

    def __init__(self, outcomes: list[BaseException | None]) -> None:
        self._outcomes = list(outcomes)
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        outcome = self._outcomes[min(self.calls, len(self._outcomes)) - 1]
        if outcome is not None:
            raise outcome
        return "ok"


@pytest.mark.asyncio
async def test_always_rate_limited_exhausts_attempts() -> None:
    operation = _ScriptedOperation([HttpStatusFailure(status_code=429)])
    policy = RateLimitRetryPolicy(max_attempts=3, delay=0)

    with pytest.raises(RetriesExhausted) as excinfo:
        await policy.run(operation)

    assert operation.calls == 3
    assert excinfo.value.attempts == 3
    assert excinfo.value.status_code == 429
    assert excinfo.value.last_error.status_code == 429


@pytest.mark.asyncio
async def test_other_status_is_not_retried() -> None:
    operation = _ScriptedOperation([HttpStatusFailure(status_code=500), None])
    policy = RateLimitRetryPolicy(max_attempts=60, delay=0)

    with pytest.raises(HttpStatusFailure) as excinfo:
        await policy.run(operation)

    assert not isinstance(excinfo.value, RetriesExhausted)
    assert excinfo.value.status_code == 500
    assert operation.calls == 1


@pytest.mark.asyncio
async def test_transport_failure_is_not_retried() -> None:
    operation = _ScriptedOperation([TransportFailure(kind="network"), None])
    policy = RateLimitRetryPolicy(max_attempts=5, delay=0)

    with pytest.raises(TransportFailure):
        await policy.run(operation)
    assert operation.calls == 1


@pytest.mark.asyncio
async def test_rate_limited_once_then_succeeds(monkeypatch: pytest.MonkeyPatch) -> None:
    slept: list[float] = []

    async def fake_sleep(seconds: float) -> None:
        slept.append(seconds)

    monkeypatch.setattr("trackjs.retry.asyncio.sleep", fake_sleep)

    operation = _ScriptedOperation([HttpStatusFailure(status_code=429), None])
    policy = RateLimitRetryPolicy(max_attempts=2, delay=1.0)

    assert await policy.run(operation) == "ok"
    assert operation.calls == 2
    assert slept == [1.0]


@pytest.mark.asyncio
async def test_single_attempt_policy_does_not_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    slept: list[float] = []

    async def fake_sleep(seconds: float) -> None:
        slept.append(seconds)

    monkeypatch.setattr("trackjs.retry.asyncio.sleep", fake_sleep)

    operation = _ScriptedOperation([HttpStatusFailure(status_code=429)])
    with pytest.raises(RetriesExhausted):
        await RateLimitRetryPolicy(max_attempts=1, delay=1.0).run(operation)

    assert operation.calls == 1
    assert slept == []


@pytest.mark.asyncio
async def test_cancellation_during_delay_stops_retries() -> None:
    operation = _ScriptedOperation([HttpStatusFailure(status_code=429)])
    policy = RateLimitRetryPolicy(max_attempts=60, delay=10.0)

    task = asyncio.create_task(policy.run(operation))
    await asyncio.sleep(0.01)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert operation.calls == 1


def test_defaults_match_rate_limit_window() -> None:
    policy = RateLimitRetryPolicy()
    assert policy.max_attempts == 60
    assert policy.delay == 1.0


@pytest.mark.parametrize("kwargs", [{"max_attempts": 0}, {"delay": -0.1}])
def test_invalid_policy_arguments(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        RateLimitRetryPolicy(**kwargs)
