"""Cache commands -- inspect and empty the reading cache."""

from __future__ import annotations

import typer

from jyotish.cache import DiskStore, TTLCache
from jyotish.config import get_cache_dir
from jyotish.output import format_response, info, success

cache_app = typer.Typer(no_args_is_help=True)


@cache_app.command("stats")
def cache_stats() -> None:
    """Show how many records the cache holds and where."""
    store = DiskStore(get_cache_dir())
    try:
        format_response(TTLCache(store).stats())
    finally:
        store.close()


@cache_app.command("clear")
def cache_clear(ctx: typer.Context) -> None:
    """Delete every cached reading (and the saved moon sign).

    Asks for confirmation unless ``--force`` is active.
    """
    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force and not typer.confirm("Delete all cached readings?"):
        info("Cancelled.")
        raise typer.Exit()

    store = DiskStore(get_cache_dir())
    try:
        TTLCache(store).clear()
    finally:
        store.close()
    success("Cache cleared.")
