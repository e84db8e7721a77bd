"""Terminal output for readings and diagnostics.

Two streams, never mixed:

* **stdout** carries the reading itself -- rendered Markdown, tables, or
  JSON -- so ``jyotish horoscope leo > today.md`` captures nothing else.
* **stderr** carries every diagnostic: status lines, cache hits and
  retries (``--verbose``), warnings and errors.

How a reading looks depends on :class:`OutputFormat`. ``AUTO`` renders
with Rich on an interactive terminal and falls back to plain text when
piped or when colour is off (``--no-color``, ``NO_COLOR``, ``TERM=dumb``).
``--json`` emits the reading's JSON instead; ``-o FILE`` writes it to a
file.

The :class:`OutputManager` built by :func:`~jyotish.app.main_callback` is
installed globally with :func:`set_output`. The cache, retry and service
layers report through the module-level helpers (:func:`debug`,
:func:`warning`, ...) instead of being handed a manager.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, NamedTuple, Optional

from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """How readings are written to stdout.

    ``AUTO`` becomes ``RICH`` on a colour-capable TTY and ``PLAIN``
    otherwise; ``--json`` and ``--plain`` force the other two.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class _Level(NamedTuple):
    prefix: str
    markup: str
    hidden_when_quiet: bool


# Rich markup templates take the escaped message as ``{}``.
_LEVELS: dict[str, _Level] = {
    "info": _Level("", "{}", True),
    "success": _Level("", "[green]{}[/green]", True),
    "warning": _Level("Warning: ", "[yellow]Warning:[/yellow] {}", False),
    "error": _Level("Error: ", "[bold red]Error:[/bold red] {}", False),
    "suggest": _Level("→ ", "[dim]→ {}[/dim]", True),
    "debug": _Level("[debug] ", "[dim]\\[debug] {}[/dim]", True),
}


class OutputManager:
    """Routes readings to stdout and diagnostics to stderr.

    Args:
        format: Requested reading format; ``AUTO`` is resolved here.
        no_color: Disable colour and Rich markup on both streams.
        quiet: Hide info, success and suggestion lines. Warnings, errors
            and the reading itself are always shown.
        verbose: Show debug lines (cache hits and misses, retries,
            requests).
        output_file: Write the reading to this path instead of stdout.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
        output_file: Optional[str] = None,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._output_file = output_file

        if format != OutputFormat.AUTO:
            self._format = format
        elif _is_tty() and not self._no_color:
            self._format = OutputFormat.RICH
        else:
            self._format = OutputFormat.PLAIN

        rich_stdout = self._format == OutputFormat.RICH
        self._stdout = Console(file=sys.stdout, no_color=self._no_color, force_terminal=rich_stdout)
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # ------------------------------------------------------------------ #
    # Readings (stdout)
    # ------------------------------------------------------------------ #

    def format_response(self, data: Any) -> None:
        """Write structured data: JSON, ``key<TAB>value`` lines, or highlighted JSON."""
        if self._output_file:
            self._replace_file(_to_text(data))
        elif self._format == OutputFormat.JSON:
            self.print_data(_to_json(data))
        elif self._format == OutputFormat.PLAIN:
            for line in _plain_lines(data):
                self.print_data(line)
        elif isinstance(data, (dict, list)):
            self._stdout.print(Syntax(_to_json(data), "json", theme="monokai", word_wrap=True))
        else:
            self._stdout.print(str(data))

    def print_markdown(self, text: str, title: Optional[str] = None) -> None:
        """Write a Markdown reading under an optional title.

        Rich mode renders the Markdown below a rule; plain mode prints the
        source; JSON mode emits ``{"title": ..., "markdown": ...}``. With
        ``-o`` the file gets the source with the title as a ``#`` heading.
        """
        if self._output_file:
            self._replace_file(f"# {title}\n\n{text}" if title else text)
        elif self._format == OutputFormat.JSON:
            self.print_data(_to_json({"title": title, "markdown": text}))
        elif self._format == OutputFormat.PLAIN:
            if title:
                self.print_data(f"{title}\n")
            self.print_data(text)
        else:
            if title:
                self._stdout.rule(f"[bold magenta]{escape(title)}[/bold magenta]")
            self._stdout.print(Markdown(text))

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Write a table: JSON records, tab-separated lines, or a Rich table.

        With ``-o`` the tab-separated form is appended to the file, so a
        table can follow a Markdown reading in the same report.
        """
        if self._format == OutputFormat.JSON:
            self.print_data(_to_json([dict(zip(headers, row)) for row in rows]))
        elif self._format == OutputFormat.PLAIN or self._output_file:
            lines = [title] if title else []
            lines += ["\t".join(headers), *("\t".join(row) for row in rows)]
            for line in lines:
                self.print_data(line)
        else:
            table = Table(title=title, show_header=True, header_style="bold cyan")
            for header in headers:
                table.add_column(header)
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)

    def print_data(self, text: str) -> None:
        """Write raw text to stdout, or append it to the ``-o`` file."""
        if not self._output_file:
            print(text, file=sys.stdout, flush=True)
            return
        with open(self._output_file, "a", encoding="utf-8") as f:
            f.write(text if text.endswith("\n") else text + "\n")

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        self._diagnostic("info", message)

    def success(self, message: str) -> None:
        self._diagnostic("success", message)

    def warning(self, message: str) -> None:
        """Warnings are shown even with ``--quiet``."""
        self._diagnostic("warning", message)

    def error(self, message: str) -> None:
        """Errors are always shown."""
        self._diagnostic("error", message)

    def suggest(self, message: str) -> None:
        """A next step for the user, e.g. retrying a failed reading."""
        self._diagnostic("suggest", message)

    def debug(self, message: str) -> None:
        """Only shown with ``--verbose``."""
        if self._verbose:
            self._diagnostic("debug", message)

    def _diagnostic(self, level: str, message: str) -> None:
        style = _LEVELS[level]
        if style.hidden_when_quiet and self._quiet:
            return
        if self._no_color:
            print(f"{style.prefix}{message}", file=sys.stderr, flush=True)
        else:
            # Model and validation messages may contain [brackets].
            self._stderr.print(style.markup.format(escape(message)))

    def _replace_file(self, content: str) -> None:
        assert self._output_file is not None
        with open(self._output_file, "w", encoding="utf-8") as f:
            f.write(content if content.endswith("\n") else content + "\n")


# ------------------------------------------------------------------ #
# Rendering helpers
# ------------------------------------------------------------------ #


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _to_text(data: Any) -> str:
    return _to_json(data) if isinstance(data, (dict, list)) else str(data)


def _plain_lines(data: Any) -> list[str]:
    if isinstance(data, dict):
        return [f"{key}\t{value}" for key, value in data.items()]
    if isinstance(data, list):
        return [
            "\t".join(str(v) for v in item.values()) if isinstance(item, dict) else str(item)
            for item in data
        ]
    return [str(data)]


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (to anything) or ``TERM=dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the global manager; tests call this between runs."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_markdown(text: str, title: Optional[str] = None) -> None:
    get_output().print_markdown(text, title)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def error(message: str) -> None:
    get_output().error(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def debug(message: str) -> None:
    get_output().debug(message)
