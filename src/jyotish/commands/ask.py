"""Ask commands -- follow-up questions about a reading.

Provides the ``jyotish ask`` sub-command group.  Answers are never
cached.  A conversation can be continued by passing the previous turns as
a JSON file of ``{"role": "user" | "model", "text": ...}`` objects with
``--history``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from pydantic import TypeAdapter, ValidationError

from jyotish import numerology
from jyotish.commands.render import render_text
from jyotish.exceptions import InvalidUsageError
from jyotish.models import ChatMessage, ReadingKind, TextReading
from jyotish.output import error
from jyotish.runtime import run_service

ask_app = typer.Typer(no_args_is_help=True)

_HISTORY = TypeAdapter(list[ChatMessage])


def load_history(path: Optional[Path]) -> list[ChatMessage]:
    """Load a chat history file, exiting with a usage error if it is malformed."""
    if path is None:
        return []
    try:
        return _HISTORY.validate_python(json.loads(path.read_text(encoding="utf-8")))
    except (OSError, json.JSONDecodeError, ValidationError) as exc:
        error(f"Invalid history file {path}: {exc}")
        raise typer.Exit(code=InvalidUsageError.exit_code) from None


@ask_app.command("kundali")
def ask_kundali(
    ctx: typer.Context,
    question: str = typer.Argument(..., help="Your question."),
    context_file: Path = typer.Option(
        ...,
        "--context-file",
        "-c",
        exists=True,
        dir_okay=False,
        help="A saved kundali report (e.g. from `jyotish kundali -o report.md`).",
    ),
    history: Optional[Path] = typer.Option(
        None, "--history", exists=True, dir_okay=False, help="JSON chat history."
    ),
) -> None:
    """Ask a question about your kundali.

    Example::

        jyotish ask kundali "When is a good time to change jobs?" -c asha.md
    """
    context = context_file.read_text(encoding="utf-8")
    turns = load_history(history)
    answer = run_service(ctx, lambda s: s.ask_kundali_question(question, context, turns))
    render_text(TextReading(kind=ReadingKind.ANSWER, markdown=answer), question)


@ask_app.command("numerology")
def ask_numerology(
    ctx: typer.Context,
    question: str = typer.Argument(..., help="Your question."),
    dob: str = typer.Option(..., "--dob", help="Date of birth, YYYY-MM-DD."),
    history: Optional[Path] = typer.Option(
        None, "--history", exists=True, dir_okay=False, help="JSON chat history."
    ),
) -> None:
    """Ask a numerologist about your numbers."""
    try:
        profile = numerology.calculate(dob)
    except InvalidUsageError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    turns = load_history(history)
    answer = run_service(ctx, lambda s: s.ask_numerology_question(question, profile, turns))
    render_text(TextReading(kind=ReadingKind.ANSWER, markdown=answer), question)
