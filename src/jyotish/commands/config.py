"""``jyotish config`` -- inspect and edit ``config.json``.

Keys use dot paths into :class:`~jyotish.models.GlobalConfig`, e.g.
``language``, ``retry.max_attempts`` or ``cache.ttl_hours.weekly``. Every
edit is validated as a whole config before it is saved, so the TTL
ordering and retry bounds cannot be broken one key at a time.
"""

from __future__ import annotations

from typing import Any, Callable

import typer

from jyotish.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


def _truthy(raw: str) -> bool:
    return raw.strip().lower() in ("true", "1", "yes", "on")


# Checked in order: bool is a subclass of int.
_COERCERS: list[tuple[type, str, Callable[[str], Any]]] = [
    (bool, "boolean", _truthy),
    (int, "integer", int),
    (float, "number", float),
]


def _parent_of(data: dict[str, Any], key: str) -> tuple[dict[str, Any], str]:
    """Walk *key* down to the dict that owns its last segment."""
    *path, leaf = key.split(".")
    node = data
    for part in path:
        child = node.get(part)
        if not isinstance(child, dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=2)
        node = child
    if leaf not in node or isinstance(node[leaf], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)
    return node, leaf


def _coerce(key: str, current: Any, raw: str) -> Any:
    for kind, label, convert in _COERCERS:
        if isinstance(current, kind):
            try:
                return convert(raw)
            except ValueError:
                error(f"Expected {label} for {key}, got: {raw}")
                raise typer.Exit(code=2) from None
    return raw


@config_app.command("show")
def config_show() -> None:
    """Print the saved settings (defaults where nothing is saved).

    Example::

        jyotish --json config show
    """
    from jyotish.config import global_config_path, load_global_config

    info(f"Config file: {global_config_path()}")
    format_response(load_global_config().model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Dot path, e.g. 'cache.ttl_hours.daily'."),
    value: str = typer.Argument(help="New value; converted to the key's type."),
) -> None:
    """Change one setting.

    Example::

        jyotish config set language Hindi
        jyotish config set retry.initial_delay 0.5
        jyotish config set cache.enabled false
    """
    from jyotish.config import load_global_config, save_global_config
    from jyotish.models import GlobalConfig

    data = load_global_config().model_dump(mode="json")
    parent, leaf = _parent_of(data, key)
    parent[leaf] = _coerce(key, parent[leaf], value)

    try:
        updated = GlobalConfig.model_validate(data)
    except ValueError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_global_config(updated)
    success(f"Set {key} = {parent[leaf]}")


@config_app.command("reset")
def config_reset(ctx: typer.Context) -> None:
    """Restore default settings. Prompts unless ``--force``."""
    from jyotish.config import save_global_config
    from jyotish.models import GlobalConfig

    force = bool(ctx.obj and ctx.obj.get("force"))
    if not force and not typer.confirm("Reset language, models, retry and cache settings?"):
        info("Cancelled.")
        raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
