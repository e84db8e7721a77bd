"""Prompt text and response schemas sent to the model.

Every prompt states the language the reading must be written in and, for
anything time-sensitive, the current date.  The ``now`` argument exists so
tests can pin the date.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Optional

from jyotish.models import (
    BirthDetails,
    Language,
    MatchmakingDetails,
    MoonSign,
    NumerologyProfile,
    Timeframe,
)

HOROSCOPE_FIELDS: dict[str, str] = {
    "overview": "General summary of the period",
    "career": "Job and professional outlook",
    "health": "Physical and mental well-being",
    "relationships": "Love, family, and social life",
    "finance": "Money and investment guidance",
    "spirituality": "Inner growth and peace",
    "luckyColor": "The color for the period",
    "luckyNumber": "The number for the period",
}

HOROSCOPE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        name: {"type": "STRING", "description": description}
        for name, description in HOROSCOPE_FIELDS.items()
    },
    "required": list(HOROSCOPE_FIELDS),
}


def current_date(now: Optional[datetime] = None) -> str:
    """Format *now* like ``March 5, 2026 09:30 AM``."""
    now = now or datetime.now()
    return f"{now:%B} {now.day}, {now:%Y %I:%M %p}"


def coordinates(location: str) -> str:
    return (
        f'Find the latitude and longitude of "{location}". Return JSON with keys: '
        "lat (number), lng (number), formattedAddress (string)."
    )


def horoscope(
    sign: MoonSign,
    timeframe: Timeframe,
    language: Language,
    now: Optional[datetime] = None,
) -> str:
    return (
        f"You are a Vedic astrologer. Today is {current_date(now)}. "
        f"Write the {timeframe.value} horoscope for the moon sign {sign.value} "
        f"({sign.rashi}) in {language.value}, grounded in the planetary transits "
        "that matter for this period."
    )


def kundali(details: BirthDetails, language: Language) -> str:
    return f"""You are a master Vedic astrologer. Prepare a complete Janma Kundali reading for
{details.name}, born {details.dob} at {details.tob} in {details.location}.
Write it in {language.value}.

Cover, as Markdown sections:
1. Summary of the dominant planetary influences.
2. Core traits from the Lagna (ascendant) and Moon sign.
3. Planetary positions with degrees and nakshatras.
4. All twelve houses and what each predicts.
5. The Mahadasha and Antardasha timeline across the whole life.
6. Career, relationships and health by decade.
7. Remedies: gemstones, rudraksha, mantras and charity.

Answer with one JSON object:
- "report": the full reading as Markdown (string)
- "chart": houses "1" to "12" mapped to arrays of planet abbreviations, e.g. {{"1": ["Mo"], "2": []}}
- "lagnaSign": the sign number (1-12) occupying the first house"""


def kundali_chat_instruction(context: str, language: Language, now: Optional[datetime] = None) -> str:
    return (
        "You are the user's personal Vedic guide. Answer using this kundali: "
        f"{context}. Language: {language.value}. Today is {current_date(now)}."
    )


def numerology_context(profile: NumerologyProfile) -> str:
    return (
        f"Date of birth: {profile.dob}, Mulank: {profile.mulank}, "
        f"Bhagyank: {profile.bhagyank}, Loshu grid: {json.dumps(profile.loshu)}"
    )


def numerology_chat_instruction(
    profile: NumerologyProfile,
    language: Language,
    now: Optional[datetime] = None,
) -> str:
    return (
        "You are a master numerologist. Answer from these numbers: "
        f"{numerology_context(profile)}. Language: {language.value}. "
        f"Today is {current_date(now)}. Cover name correction, career and life path "
        "where relevant."
    )


def numerology(profile: NumerologyProfile, language: Language) -> str:
    return (
        f"Give a numerology reading for {numerology_context(profile)}. "
        "Explain the life path, the meaning of the present and missing numbers in "
        f"the Loshu grid, and practical guidance. Write Markdown in {language.value}."
    )


def matchmaking(details: MatchmakingDetails, language: Language) -> str:
    boy, girl = details.boy, details.girl
    return (
        "Prepare an Ashtakoot Milan compatibility report.\n"
        f"Boy: {boy.name}, born {boy.dob} at {boy.tob} in {boy.location}.\n"
        f"Girl: {girl.name}, born {girl.dob} at {girl.tob} in {girl.location}.\n"
        "Score each of the eight kootas, give the total Guna score out of 36, and "
        f"offer detailed relationship guidance. Write Markdown in {language.value}."
    )


def palmistry(language: Language) -> str:
    return (
        "Read the palm in this photo: personality, longevity, wealth and career. "
        f"Give specific life predictions in {language.value}, as Markdown."
    )
