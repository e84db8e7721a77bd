"""Fixtures for CLI command tests.

Commands reach the model through :func:`jyotish.runtime.open_service`;
here it is replaced with a service over the scripted :class:`FakeModel`
and an in-memory cache, while preferences and config still live in the
isolated XDG directories.
"""

from __future__ import annotations

import contextlib

import pytest

from jyotish.cache import TTLCache
from jyotish.service import ReadingService


@pytest.fixture
def stub_service(isolated_config, monkeypatch, fake_model, memory_store, clock, sleeps):
    """Route every command's service through the fake model.

    Returns the fake model so tests can queue replies and inspect calls.
    """

    @contextlib.asynccontextmanager
    async def fake_open_service(config, cache_dir=None):
        from jyotish.runtime import open_preferences

        with open_preferences() as prefs:
            yield ReadingService(
                fake_model,
                TTLCache(memory_store, clock=clock),
                config,
                preferences=prefs,
                sleep=sleeps,
            )

    monkeypatch.setattr("jyotish.runtime.open_service", fake_open_service)
    return fake_model


@pytest.fixture
def app():
    from jyotish.app import app

    return app
