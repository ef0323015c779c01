import asyncio
import os

import pytest

# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clear_evented_env(monkeypatch):
    """Keep EVENTED_* variables from the developer's shell out of the tests."""
    for key in list(os.environ):
        if key.startswith("EVENTED_"):
            monkeypatch.delenv(key, raising=False)


# ---------------------------------------------------------------------------
# Async helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def sleep():
    """Delay helper for waiting on work that listeners started but dispatch
    does not await."""

    async def _sleep(ms: float = 0) -> None:
        await asyncio.sleep(ms / 1000)

    return _sleep
