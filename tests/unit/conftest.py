from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _inline_blocking_calls(monkeypatch: pytest.MonkeyPatch):
    """Call the transport's blocking `requests.post` directly on the event loop.

    Unit tests replace `requests.post` with in-process fakes, so there is nothing
    to offload; running inline keeps fake call order deterministic and leaves no
    executor threads behind after a send is cancelled.
    """

    async def _to_thread(func, /, *args, **kwargs):  # noqa: ANN001
        return func(*args, **kwargs)

    monkeypatch.setattr("trackjs.transport.asyncio.to_thread", _to_thread)
    yield
