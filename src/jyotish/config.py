"""Where jyotish keeps its files, and how settings and the API key are found.

Three directories, resolved per platform:

=========  ==============================  =====================
kind       Linux / BSD                     macOS / Windows
=========  ==============================  =====================
config     ``$XDG_CONFIG_HOME/jyotish``    ``~/.jyotish``
cache      ``$XDG_CACHE_HOME/jyotish``     ``~/.jyotish/cache``
data       ``$XDG_DATA_HOME/jyotish``      ``~/.jyotish/logs``
=========  ==============================  =====================

The config directory holds one ``config.json`` (a
:class:`~jyotish.models.GlobalConfig`). Settings are layered by
:func:`resolve_config`: command-line flags, then ``JYOTISH_*`` environment
variables, then the file, then defaults. The model API key is never stored
in the file; ``api_key_source`` says where to read it from
(:func:`resolve_credential`).
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
import tempfile
from pathlib import Path
from typing import Callable, Optional

from jyotish.exceptions import ConfigError
from jyotish.models import GlobalConfig, Language

_APP_NAME = "jyotish"
_CONFIG_FILENAME = "config.json"

# kind -> (XDG env var, default under $HOME, subdirectory of ~/.jyotish)
_LAYOUT: dict[str, tuple[str, tuple[str, ...], Optional[str]]] = {
    "config": ("XDG_CONFIG_HOME", (".config",), None),
    "cache": ("XDG_CACHE_HOME", (".cache",), "cache"),
    "data": ("XDG_DATA_HOME", (".local", "share"), "logs"),
}


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(kind: str) -> Path:
    env_var, home_default, fallback_sub = _LAYOUT[kind]
    if _is_xdg_platform():
        base = os.environ.get(env_var)
        path = Path(base) if base else Path.home().joinpath(*home_default)
        path = path / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
        if fallback_sub:
            path = path / fallback_sub
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Directory holding ``config.json`` and the saved preferences."""
    return _app_dir("config")


def get_cache_dir() -> Path:
    """Directory holding cached readings.

    Safe to delete at any time; readings are fetched again on demand.
    """
    return _app_dir("cache")


def get_data_dir() -> Path:
    """Directory holding crash logs."""
    return _app_dir("data")


def _atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* in one rename.

    The temporary file sits next to *path* so ``os.replace`` never crosses
    a filesystem. If anything fails the temporary file is removed and
    *path* keeps its previous content.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    handle, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(handle, "w", encoding="utf-8") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


# --- config.json ---


def global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Read ``config.json``, or return defaults when there is none.

    Raises:
        ConfigError: The file is not JSON or fails validation (for
            example TTLs that are not daily <= weekly <= monthly).
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        return GlobalConfig.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    payload = json.dumps(config.model_dump(mode="json"), indent=2, ensure_ascii=False)
    _atomic_write(global_config_path(), payload + "\n")


def resolve_config(
    cli_language: Optional[str] = None,
    cli_api_key_source: Optional[str] = None,
) -> GlobalConfig:
    """Return the effective settings for this run.

    ``-l/--language`` beats ``JYOTISH_LANGUAGE``, which beats the file.
    ``api_key_source`` follows the same order with
    ``JYOTISH_API_KEY_SOURCE``.

    Raises:
        ConfigError: Invalid config file, or a language jyotish does not
            offer readings in.
    """
    config = load_global_config()

    language = cli_language or os.environ.get("JYOTISH_LANGUAGE")
    if language:
        try:
            config.language = Language.parse(language)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc

    source = cli_api_key_source or os.environ.get("JYOTISH_API_KEY_SOURCE")
    if source:
        config.api_key_source = source
    return config


# --- API key sources ---


def _key_from_env(var_name: str) -> str:
    value = os.environ.get(var_name)
    if not value:
        raise ConfigError(f"{var_name} missing. Set the {var_name} environment variable.")
    return value


def _key_from_file(location: str) -> str:
    path = Path(location).expanduser()
    if not path.is_file():
        raise ConfigError(f"Credential file not found: {path} (source: file:{location})")
    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc


def _key_from_prompt(_: str) -> str:
    if not sys.stdin.isatty():
        raise ConfigError("Cannot prompt for the API key: stdin is not a TTY (source: prompt)")
    return getpass.getpass("Enter API key: ")


_KEY_SOURCES: dict[str, Callable[[str], str]] = {
    "env": _key_from_env,
    "file": _key_from_file,
    "prompt": _key_from_prompt,
}


def resolve_credential(source: str) -> str:
    """Read the model API key from ``env:VAR``, ``file:PATH`` or ``prompt``.

    Raises:
        ConfigError: The variable is unset, the file is missing, stdin is
            not a terminal, or *source* has an unknown scheme.
    """
    scheme, sep, rest = source.partition(":")
    reader = _KEY_SOURCES.get(scheme)
    if reader is None or (scheme == "prompt") == bool(sep):
        raise ConfigError(f"Unknown credential source format: {source}")
    return reader(rest)
