"""Rendering bridge -- maps reading models onto the output system.

Each ``render_*`` function takes a result model from
:class:`~jyotish.service.ReadingService` and prints it through the global
:class:`~jyotish.output.OutputManager`.  In JSON mode the model is dumped
with its wire (camelCase) field names so that the output can be fed back
into anything that consumes the model's JSON; otherwise readings become
tables and rendered Markdown.
"""

from __future__ import annotations

from pydantic import BaseModel

from jyotish.models import (
    Coordinates,
    KundaliResponse,
    MoonSign,
    NumerologyProfile,
    PredictionResult,
    TextReading,
    Timeframe,
)
from jyotish.output import OutputFormat, format_response, get_output, print_markdown, print_table


def _as_json(model: BaseModel) -> bool:
    if get_output().format != OutputFormat.JSON:
        return False
    format_response(model.model_dump(mode="json", by_alias=True))
    return True


def render_horoscope(result: PredictionResult, sign: MoonSign, timeframe: Timeframe) -> None:
    if _as_json(result):
        return
    rows = [
        ["Overview", result.overview],
        ["Career", result.career],
        ["Health", result.health],
        ["Relationships", result.relationships],
        ["Finance", result.finance],
        ["Spirituality", result.spirituality],
        ["Lucky colour", result.lucky_color],
        ["Lucky number", result.lucky_number],
    ]
    title = f"{sign.symbol} {sign.value} ({sign.rashi}) -- {timeframe.value} horoscope"
    print_table(["Aspect", "Reading"], rows, title=title)


def render_kundali(result: KundaliResponse, name: str) -> None:
    if _as_json(result):
        return
    lagna = list(MoonSign)[result.lagna_sign - 1]
    print_markdown(result.report, title=f"Janma Kundali -- {name}")
    rows = [
        [house, ", ".join(result.chart.get(house, [])) or "-"]
        for house in (str(n) for n in range(1, 13))
    ]
    print_table(["House", "Planets"], rows, title=f"Lagna: {lagna.value} ({lagna.rashi})")


def render_numerology_profile(profile: NumerologyProfile) -> None:
    if _as_json(profile):
        return
    print_table(
        ["Number", "Value"],
        [["Mulank", str(profile.mulank)], ["Bhagyank", str(profile.bhagyank)]],
        title=f"Numerology for {profile.dob}",
    )
    grid = [["-" if cell is None else str(cell) for cell in row] for row in profile.loshu]
    print_table(["", "", ""], grid, title="Loshu grid")


def render_coordinates(result: Coordinates) -> None:
    if _as_json(result):
        return
    print_table(
        ["Place", "Latitude", "Longitude"],
        [[result.formatted_address, f"{result.lat:.4f}", f"{result.lng:.4f}"]],
    )


def render_text(reading: TextReading, title: str) -> None:
    if _as_json(reading):
        return
    print_markdown(reading.markdown, title=title)
