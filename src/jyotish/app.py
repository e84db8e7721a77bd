"""The ``jyotish`` command line.

Reading commands sit at the top level (``horoscope``, ``kundali``,
``match``, ``numerology``, ``palm``, ``coords``, ``sync``); ``ask``,
``sign``, ``cache`` and ``config`` are sub-command groups.

:func:`main` is the console script. A :class:`~jyotish.exceptions.JyotishError`
that escapes a command ends the process with that error's exit code; any
other exception is written to ``<data dir>/logs/crash-*.log``.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from jyotish import __version__
from jyotish.commands.ask import ask_app
from jyotish.commands.cache import cache_app
from jyotish.commands.config import config_app
from jyotish.commands.readings import (
    coords_command,
    horoscope_command,
    kundali_command,
    match_command,
    numerology_command,
    palm_command,
    sync_command,
)
from jyotish.commands.sign import sign_app
from jyotish.exit_codes import EXIT_GENERIC_FAILURE

EXIT_INTERRUPTED = 130

app = typer.Typer(
    name="jyotish",
    help="Vedic astrology readings from a generative model.",
    no_args_is_help=True,
    add_completion=True,
    rich_markup_mode="rich",
)

for _name, _command in (
    ("horoscope", horoscope_command),
    ("kundali", kundali_command),
    ("match", match_command),
    ("numerology", numerology_command),
    ("palm", palm_command),
    ("coords", coords_command),
    ("sync", sync_command),
):
    app.command(_name)(_command)

app.add_typer(ask_app, name="ask", help="Ask follow-up questions about a reading.")
app.add_typer(sign_app, name="sign", help="Save or show your moon sign.")
app.add_typer(cache_app, name="cache", help="Inspect or clear the reading cache.")
app.add_typer(config_app, name="config", help="View or change saved settings.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"jyotish {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True,
        help="Print the jyotish version.",
    ),
    language: Optional[str] = typer.Option(
        None, "--language", "-l", help="Reading language (English, Hindi, Tamil, ...)."
    ),
    json_output: bool = typer.Option(False, "--json", help="Emit readings as JSON."),
    plain_output: bool = typer.Option(False, "--plain", help="Emit readings as plain text."),
    no_color: bool = typer.Option(False, "--no-color", help="No colour or Rich markup."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only the reading, warnings and errors."),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Report cache hits, misses and retries."
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompts."),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Save the reading to this file."
    ),
) -> None:
    """Install the output manager and share global flags through ``ctx.obj``."""
    from jyotish.output import OutputFormat, OutputManager, set_output

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = OutputFormat.AUTO

    set_output(
        OutputManager(
            format=fmt, no_color=no_color, quiet=quiet, verbose=verbose, output_file=output_file
        )
    )
    ctx.ensure_object(dict)
    ctx.obj.update(language=language, force=force, verbose=verbose)


def _setup_signal_handlers() -> None:
    def _on_sigint(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)

    signal.signal(signal.SIGINT, _on_sigint)


def _write_crash_log() -> str:
    """Save the traceback being handled and return the log's path."""
    from jyotish.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    log_path.write_text(traceback.format_exc(), encoding="utf-8")
    return str(log_path)


def main() -> None:
    from jyotish.exceptions import JyotishError
    from jyotish.output import error

    _setup_signal_handlers()
    try:
        app()
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except JyotishError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception:
        error(f"Unexpected error. Debug log: {_write_crash_log()}")
        sys.exit(EXIT_GENERIC_FAILURE)
