"""Sign commands -- remember which moon sign is yours."""

from __future__ import annotations

import typer

from jyotish.commands.readings import parse_sign
from jyotish.output import format_response, info, success
from jyotish.runtime import open_preferences

sign_app = typer.Typer(no_args_is_help=True)


@sign_app.command("set")
def sign_set(sign: str = typer.Argument(..., help="Moon sign (English or Vedic name).")) -> None:
    """Save your moon sign for `jyotish horoscope` and `jyotish sync`."""
    chosen = parse_sign(sign)
    with open_preferences() as prefs:
        prefs.set_user_sign(chosen)
    success(f"Saved moon sign: {chosen.value} ({chosen.rashi})")


@sign_app.command("show")
def sign_show() -> None:
    """Show the saved moon sign."""
    with open_preferences() as prefs:
        sign = prefs.get_user_sign()
    if sign is None:
        info("No moon sign saved. Run: jyotish sign set <sign>")
        return
    format_response({"sign": sign.value, "rashi": sign.rashi})
