from __future__ import annotations

from pathlib import Path

import httpx
import pytest
from dotenv import load_dotenv

from agent_relay.core.config import get_settings

# Load dotenv files early so Settings sees test overrides
TEST_ROOT = Path(__file__).resolve().parent
load_dotenv(TEST_ROOT / ".env", override=False)

OFFLINE_ALLOWED_HOSTS = frozenset({"mock", "localhost", "127.0.0.1"})


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Drop the cached Settings so env changes made by a test are picked up."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _global_offline_http_guard(monkeypatch: pytest.MonkeyPatch):
    """Block real network calls; only hosts served by ``httpx.MockTransport`` are allowed."""
    orig_sync = httpx.Client.request
    orig_async = httpx.AsyncClient.request

    def _check(url) -> None:
        host = httpx.URL(str(url)).host
        if host not in OFFLINE_ALLOWED_HOSTS:
            raise RuntimeError(f"External HTTP blocked by global offline guard: {url}")

    def offline_sync(self, method, url, *args, **kwargs):
        _check(url)
        return orig_sync(self, method, url, *args, **kwargs)

    async def offline_async(self, method, url, *args, **kwargs):
        _check(url)
        return await orig_async(self, method, url, *args, **kwargs)

    monkeypatch.setattr(httpx.Client, "request", offline_sync, raising=True)
    monkeypatch.setattr(httpx.AsyncClient, "request", offline_async, raising=True)
