"""Deterministic cache keys for each kind of reading.

Two requests that mean the same thing must land on the same key, so
every part is normalised before it is joined: enum members are rendered
by value, surrounding whitespace is stripped, inner whitespace runs become
a single ``_``, and everything is lower-cased.  ``"New  Delhi "`` and
``"new delhi"`` therefore share a coordinates entry.
"""

from __future__ import annotations

import enum
import re

from jyotish.models import BirthDetails, Language, MatchmakingDetails, MoonSign, Timeframe

_WHITESPACE = re.compile(r"\s+")


def normalise(part: object) -> str:
    """Normalise one key component."""
    if isinstance(part, enum.Enum):
        part = part.value
    return _WHITESPACE.sub("_", str(part).strip()).lower()


def _join(family: str, *parts: object) -> str:
    return "_".join([family, *(normalise(p) for p in parts)])


def horoscope(sign: MoonSign, timeframe: Timeframe, language: Language) -> str:
    return _join("horo", sign, timeframe, language)


def kundali(details: BirthDetails, language: Language) -> str:
    return _join(
        "kundali", details.name, details.dob, details.tob, details.location, language
    )


def match(details: MatchmakingDetails, language: Language) -> str:
    boy, girl = details.boy, details.girl
    return _join(
        "match",
        boy.name, boy.dob, boy.tob, boy.location,
        girl.name, girl.dob, girl.tob, girl.location,
        language,
    )


def numerology(dob: str, language: Language) -> str:
    return _join("num", dob, language)


def coordinates(location: str) -> str:
    return _join("coords", location)
