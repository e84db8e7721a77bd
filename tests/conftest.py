"""Shared test fixtures for jyotish.

Provides a scripted stand-in for the generative model, a controllable
clock, in-memory cache stores, isolated config environments, output
state management, and a CLI runner. These fixtures are automatically
discovered by pytest and available to all test modules without explicit
imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import pytest

from jyotish.cache import MemoryStore, TTLCache
from jyotish.models import GlobalConfig
from jyotish.output import OutputFormat, OutputManager, reset_output, set_output
from jyotish.service import ReadingService


HOROSCOPE = {
    "overview": "A steady day with room for reflection.",
    "career": "Finish what you started before taking on more.",
    "health": "Rest well; the body asks for routine.",
    "relationships": "An old friend reaches out.",
    "finance": "Avoid impulsive purchases.",
    "spirituality": "Morning meditation brings clarity.",
    "luckyColor": "Saffron",
    "luckyNumber": "9",
}

KUNDALI = {
    "report": "## Summary\n\nJupiter dominates the chart.",
    "chart": {"1": ["Mo"], "4": ["Ju", "Sa"], "10": ["Su"]},
    "lagnaSign": 5,
}


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Model and clock doubles
# ---------------------------------------------------------------------------


class FakeModel:
    """Scripted model backend that records every request.

    Queue replies with :meth:`reply`; each ``generate`` call pops the next
    one.  A reply that is an exception instance is raised instead of
    returned.
    """

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self._replies: list[Any] = []

    def reply(self, *items: Any) -> FakeModel:
        self._replies.extend(items)
        return self

    async def generate(
        self,
        contents: Any,
        *,
        model: str,
        system_instruction: Optional[str] = None,
        response_mime_type: Optional[str] = None,
        response_schema: Optional[dict[str, Any]] = None,
        thinking_budget: Optional[int] = None,
    ) -> str:
        self.calls.append(
            {
                "contents": contents,
                "model": model,
                "system_instruction": system_instruction,
                "response_mime_type": response_mime_type,
                "response_schema": response_schema,
                "thinking_budget": thinking_budget,
            }
        )
        if not self._replies:
            raise AssertionError("unexpected model call")
        item = self._replies.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


class FakeClock:
    """Wall clock that only moves when told to."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SleepRecorder:
    """Async sleep replacement that records the requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def fake_model() -> FakeModel:
    return FakeModel()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleeps() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def horoscope_json() -> str:
    """A well-formed horoscope answer, as the model returns it."""
    return json.dumps(HOROSCOPE)


@pytest.fixture
def kundali_json() -> str:
    return json.dumps(KUNDALI)


# ---------------------------------------------------------------------------
# Cache and service fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def cache(memory_store: MemoryStore, clock: FakeClock) -> TTLCache:
    """A TTL cache over an in-memory store, driven by the fake clock."""
    return TTLCache(memory_store, clock=clock)


@pytest.fixture
def service(fake_model: FakeModel, cache: TTLCache, sleeps: SleepRecorder) -> ReadingService:
    """A ReadingService wired to the fake model with default config.

    Backoff sleeps are recorded, not slept.
    """
    return ReadingService(fake_model, cache, GlobalConfig(), sleep=sleeps)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME, XDG_CACHE_HOME, and XDG_DATA_HOME to
    subdirectories of tmp_path so that tests never touch real user
    config or the real reading cache. Clears all JYOTISH_* environment
    variables and the API key, and changes the working directory to
    tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("jyotish.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in ["JYOTISH_LANGUAGE", "JYOTISH_API_KEY_SOURCE", "API_KEY"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def plain_output() -> OutputManager:
    """Install a PLAIN-format, colourless OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Set up JSON output for tests that check JSON-formatted output."""
    output = OutputManager(format=OutputFormat.JSON, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
