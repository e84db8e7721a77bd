"""Reading commands -- horoscope, kundali, matchmaking, numerology, palmistry.

Each command collects its inputs from the command line, asks the
:class:`~jyotish.service.ReadingService` for the reading (served from the
cache when possible), and renders it with :mod:`jyotish.commands.render`.
Use the global ``-o`` option to save a reading to a file.
"""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from jyotish import numerology
from jyotish.commands.render import (
    render_coordinates,
    render_horoscope,
    render_kundali,
    render_numerology_profile,
    render_text,
)
from jyotish.exceptions import InvalidUsageError
from jyotish.models import BirthDetails, MatchmakingDetails, MoonSign, Timeframe
from jyotish.output import error, info
from jyotish.runtime import open_preferences, run_service


def parse_sign(value: str) -> MoonSign:
    try:
        return MoonSign.parse(value)
    except ValueError as exc:
        error(str(exc))
        raise typer.Exit(code=InvalidUsageError.exit_code) from None


def birth_details(
    name: str,
    dob: str,
    tob: str,
    place: str,
    who: str = "",
) -> BirthDetails:
    """Validate birth data from CLI options, exiting with usage error on bad input."""
    try:
        return BirthDetails(name=name, dob=dob, tob=tob, location=place)
    except ValidationError as exc:
        fields = ", ".join(f"{who}{err['loc'][0]}" for err in exc.errors())
        error(f"Invalid birth details ({fields}). Use --dob YYYY-MM-DD and --tob HH:MM.")
        raise typer.Exit(code=InvalidUsageError.exit_code) from None


def horoscope_command(
    ctx: typer.Context,
    sign: Optional[str] = typer.Argument(
        None, help="Moon sign (English or Vedic name). Defaults to your saved sign."
    ),
    timeframe: Timeframe = typer.Option(
        Timeframe.DAILY, "--timeframe", "-t", help="daily, weekly or monthly."
    ),
) -> None:
    """Show the horoscope for a moon sign.

    Example::

        jyotish horoscope leo --timeframe weekly
        jyotish --language Hindi horoscope
    """
    if sign is not None:
        chosen = parse_sign(sign)
    else:
        with open_preferences() as prefs:
            chosen = prefs.get_user_sign() or MoonSign.ARIES
        info(f"Using moon sign {chosen.value}")

    result = run_service(ctx, lambda s: s.get_horoscope(chosen, timeframe))
    render_horoscope(result, chosen, timeframe)


def kundali_command(
    ctx: typer.Context,
    name: str = typer.Option(..., "--name", help="Full name."),
    dob: str = typer.Option(..., "--dob", help="Date of birth, YYYY-MM-DD."),
    tob: str = typer.Option(..., "--tob", help="Time of birth, HH:MM (24h)."),
    place: str = typer.Option(..., "--place", help="Place of birth."),
) -> None:
    """Generate a life-long Janma Kundali report.

    Example::

        jyotish kundali --name Asha --dob 1990-07-23 --tob 06:45 --place Pune -o asha.md
    """
    details = birth_details(name, dob, tob, place)
    info("Consulting the stars; a full kundali can take a minute...")
    result = run_service(ctx, lambda s: s.get_kundali_analysis(details))
    render_kundali(result, details.name)


def match_command(
    ctx: typer.Context,
    boy_name: str = typer.Option(..., "--boy-name"),
    boy_dob: str = typer.Option(..., "--boy-dob", help="YYYY-MM-DD."),
    boy_tob: str = typer.Option(..., "--boy-tob", help="HH:MM."),
    boy_place: str = typer.Option(..., "--boy-place"),
    girl_name: str = typer.Option(..., "--girl-name"),
    girl_dob: str = typer.Option(..., "--girl-dob", help="YYYY-MM-DD."),
    girl_tob: str = typer.Option(..., "--girl-tob", help="HH:MM."),
    girl_place: str = typer.Option(..., "--girl-place"),
) -> None:
    """Ashtakoot Milan compatibility report for two charts."""
    details = MatchmakingDetails(
        boy=birth_details(boy_name, boy_dob, boy_tob, boy_place, who="boy "),
        girl=birth_details(girl_name, girl_dob, girl_tob, girl_place, who="girl "),
    )
    reading = run_service(ctx, lambda s: s.get_matchmaking(details))
    render_text(reading, f"{details.boy.name} & {details.girl.name}")


def numerology_command(
    ctx: typer.Context,
    dob: str = typer.Argument(..., help="Date of birth, YYYY-MM-DD."),
    analyse: bool = typer.Option(
        True, "--analyse/--no-analyse", help="Ask the model to interpret the numbers."
    ),
) -> None:
    """Compute mulank, bhagyank and the Loshu grid, then interpret them.

    The numbers are computed locally; ``--no-analyse`` skips the model call.
    """
    try:
        profile = numerology.calculate(dob)
    except InvalidUsageError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    render_numerology_profile(profile)
    if analyse:
        reading = run_service(ctx, lambda s: s.get_numerology_analysis(profile))
        render_text(reading, f"Numerology reading for {profile.dob}")


def palm_command(
    ctx: typer.Context,
    image: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="Photo of the palm."
    ),
) -> None:
    """Read a palm from a photo.  Palm readings are never cached."""
    mime_type = mimetypes.guess_type(image.name)[0] or "image/jpeg"
    if not mime_type.startswith("image/"):
        error(f"{image} does not look like an image ({mime_type})")
        raise typer.Exit(code=InvalidUsageError.exit_code)

    data = image.read_bytes()
    reading = run_service(ctx, lambda s: s.get_palmistry_analysis(data, mime_type))
    render_text(reading, "Palm reading")


def coords_command(
    ctx: typer.Context,
    location: str = typer.Argument(..., help="Place name to geocode."),
) -> None:
    """Look up latitude and longitude for a birth place."""
    result = run_service(ctx, lambda s: s.get_coordinates(location))
    render_coordinates(result)


def sync_command(ctx: typer.Context) -> None:
    """Refresh today's horoscope for your saved sign in the cache.

    Meant for a login script or cron job; failures only print a warning.
    """
    result = run_service(ctx, lambda s: s.sync_preferred_horoscope())
    if result is not None:
        info("Daily horoscope is up to date.")
