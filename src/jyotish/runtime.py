"""Wiring between the CLI and the reading service.

:func:`open_service` assembles the persistent store, the TTL cache, the
model client and the :class:`~jyotish.service.ReadingService` for one CLI
invocation and tears them down afterwards.  :func:`run_service` runs an
async action against that service on a fresh event loop and turns a
:class:`~jyotish.exceptions.JyotishError` into an error message plus the
error's exit code.
"""

from __future__ import annotations

import asyncio
import contextlib
from pathlib import Path
from typing import AsyncIterator, Awaitable, Callable, Iterator, Optional, TypeVar

import typer

from jyotish.cache import DiskStore, NullStore, Preferences, TTLCache
from jyotish.client import GeminiClient
from jyotish.config import get_cache_dir, resolve_config, resolve_credential
from jyotish.exceptions import JyotishError
from jyotish.models import GlobalConfig
from jyotish.output import error, suggest
from jyotish.service import ReadingService

T = TypeVar("T")


@contextlib.contextmanager
def open_preferences(cache_dir: Optional[Path] = None) -> Iterator[Preferences]:
    """Yield :class:`~jyotish.cache.Preferences` backed by the disk store."""
    store = DiskStore(cache_dir or get_cache_dir())
    try:
        yield Preferences(store)
    finally:
        store.close()


@contextlib.asynccontextmanager
async def open_service(
    config: GlobalConfig,
    cache_dir: Optional[Path] = None,
) -> AsyncIterator[ReadingService]:
    """Build a :class:`ReadingService` for *config*.

    The API key is resolved lazily from ``config.api_key_source`` so that a
    cached reading can be shown without one.  When the cache is disabled,
    readings go to a :class:`~jyotish.cache.NullStore` while preferences
    still persist on disk.
    """
    disk = DiskStore(cache_dir or get_cache_dir())
    cache = TTLCache(disk if config.cache.enabled else NullStore())
    try:
        async with GeminiClient(
            config.model,
            api_key=lambda: resolve_credential(config.api_key_source),
        ) as client:
            yield ReadingService(client, cache, config, preferences=Preferences(disk))
    finally:
        disk.close()


def context_config(ctx: typer.Context) -> GlobalConfig:
    """Resolve the effective config from the root callback's options."""
    obj = ctx.obj or {}
    return resolve_config(cli_language=obj.get("language"))


def run_service(
    ctx: typer.Context,
    action: Callable[[ReadingService], Awaitable[T]],
) -> T:
    """Run *action* against a fresh service and return its result.

    Raises:
        typer.Exit: With the error's exit code when a
            :class:`~jyotish.exceptions.JyotishError` escapes.
    """

    async def _main() -> T:
        async with open_service(config) as service:
            return await action(service)

    try:
        config = context_config(ctx)
        return asyncio.run(_main())
    except JyotishError as exc:
        error(str(exc))
        if exc.retryable:
            suggest("The request may succeed if you run the command again.")
        raise typer.Exit(code=exc.exit_code) from None
