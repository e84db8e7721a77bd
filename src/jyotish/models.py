"""Canonical Pydantic models shared across all jyotish modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`ModelConfig`, :class:`RetryPolicy`, :class:`CacheTTLConfig`,
    :class:`CacheConfig`, and :class:`GlobalConfig`.

**Request models** -- what the user tells us about themselves:
    :class:`Language`, :class:`MoonSign`, :class:`Timeframe`,
    :class:`BirthDetails`, :class:`MatchmakingDetails`, and
    :class:`ChatMessage`.

**Result models** -- one explicit type per kind of content the model
returns, so that cached payloads are re-validated on the way out:
    :class:`Coordinates`, :class:`PredictionResult`,
    :class:`KundaliResponse`, :class:`NumerologyProfile`, and
    :class:`TextReading`.

Result models keep the camelCase wire names the model is asked to produce
as aliases (``luckyColor``, ``lagnaSign``) and accept either spelling on
input via ``populate_by_name``.
"""

from __future__ import annotations

import enum
from datetime import date, time
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# --- Request enums ---


class Language(str, enum.Enum):
    """Languages a reading can be written in."""

    ENGLISH = "English"
    HINDI = "Hindi"
    BENGALI = "Bengali"
    MARATHI = "Marathi"
    TELUGU = "Telugu"
    TAMIL = "Tamil"
    GUJARATI = "Gujarati"
    KANNADA = "Kannada"
    ODIA = "Odia"
    MALAYALAM = "Malayalam"
    PUNJABI = "Punjabi"

    @classmethod
    def parse(cls, value: str) -> Language:
        """Look up a language by name, ignoring case.

        Raises:
            ValueError: If *value* names no supported language.
        """
        for member in cls:
            if member.value.lower() == value.strip().lower():
                return member
        raise ValueError(f"Unsupported language: {value!r}")


_RASHI_NAMES = {
    "Aries": "Mesha",
    "Taurus": "Vrishabha",
    "Gemini": "Mithuna",
    "Cancer": "Karka",
    "Leo": "Simha",
    "Virgo": "Kanya",
    "Libra": "Tula",
    "Scorpio": "Vrishchika",
    "Sagittarius": "Dhanu",
    "Capricorn": "Makara",
    "Aquarius": "Kumbha",
    "Pisces": "Meena",
}

_SIGN_SYMBOLS = "♈♉♊♋♌♍♎♏♐♑♒♓"


class MoonSign(str, enum.Enum):
    """The twelve moon signs, in zodiac order."""

    ARIES = "Aries"
    TAURUS = "Taurus"
    GEMINI = "Gemini"
    CANCER = "Cancer"
    LEO = "Leo"
    VIRGO = "Virgo"
    LIBRA = "Libra"
    SCORPIO = "Scorpio"
    SAGITTARIUS = "Sagittarius"
    CAPRICORN = "Capricorn"
    AQUARIUS = "Aquarius"
    PISCES = "Pisces"

    @property
    def rashi(self) -> str:
        """Vedic (Sanskrit) name of the sign, e.g. ``Mesha`` for Aries."""
        return _RASHI_NAMES[self.value]

    @property
    def position(self) -> int:
        """One-based position in the zodiac (Aries is 1)."""
        return list(MoonSign).index(self) + 1

    @property
    def symbol(self) -> str:
        return _SIGN_SYMBOLS[self.position - 1]

    @classmethod
    def parse(cls, value: str) -> MoonSign:
        """Look up a sign by its English or Vedic name, ignoring case.

        Raises:
            ValueError: If *value* names no sign.
        """
        wanted = value.strip().lower()
        for member in cls:
            if wanted in (member.value.lower(), member.rashi.lower()):
                return member
        raise ValueError(f"Unknown moon sign: {value!r}")


class Timeframe(str, enum.Enum):
    """Granularity of a horoscope."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class ReadingKind(str, enum.Enum):
    """Discriminator for free-form Markdown readings."""

    MATCHMAKING = "matchmaking"
    NUMEROLOGY = "numerology"
    PALMISTRY = "palmistry"
    ANSWER = "answer"


# --- Configuration models ---


class ModelConfig(BaseModel):
    """Which generative model endpoint to call and how."""

    base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Root of the generateContent REST API",
    )
    flash_model: str = Field(
        default="gemini-3-flash-preview",
        description="Fast model used for horoscopes, coordinates and numerology",
    )
    pro_model: str = Field(
        default="gemini-3-pro-preview",
        description="Stronger model used for kundali, matchmaking, palmistry and chat",
    )
    timeout: int = Field(default=120, description="Request timeout in seconds")
    kundali_thinking_budget: int = Field(
        default=20000, description="Thinking token budget for the kundali report"
    )


class RetryPolicy(BaseModel):
    """Exponential backoff settings for calls to the model.

    The delay before attempt *n + 1* is
    ``initial_delay * backoff_multiplier ** (n - 1)``, so the defaults
    wait 2 s and then 4 s.
    """

    max_attempts: int = Field(
        default=2, ge=0, description="Retries after the first attempt"
    )
    initial_delay: float = Field(
        default=2.0, ge=0, description="Seconds to wait before the first retry"
    )
    backoff_multiplier: float = Field(
        default=2.0, gt=0, description="Factor applied to the delay after each retry"
    )


class CacheTTLConfig(BaseModel):
    """Time-to-live in hours per kind of cached content.

    ``-1`` means the entry never expires. Horoscope TTLs must not shrink as
    the timeframe grows: a monthly reading may not expire before a daily one.
    """

    daily: int = Field(default=12, ge=-1)
    weekly: int = Field(default=168, ge=-1)
    monthly: int = Field(default=720, ge=-1)
    kundali: int = Field(default=720, ge=-1)
    matchmaking: int = Field(default=720, ge=-1)
    numerology: int = Field(default=720, ge=-1)
    coordinates: int = Field(default=720, ge=-1)

    @model_validator(mode="after")
    def _check_monotonic(self) -> CacheTTLConfig:
        def rank(hours: int) -> float:
            return float("inf") if hours == -1 else hours

        if not rank(self.daily) <= rank(self.weekly) <= rank(self.monthly):
            raise ValueError("horoscope TTLs must satisfy daily <= weekly <= monthly")
        return self

    def for_timeframe(self, timeframe: Timeframe) -> int:
        """Return the horoscope TTL in hours for *timeframe*."""
        return getattr(self, timeframe.value)


class CacheConfig(BaseModel):
    """Reading cache settings stored in :class:`GlobalConfig`."""

    enabled: bool = Field(default=True, description="Enable the reading cache")
    ttl_hours: CacheTTLConfig = Field(default_factory=CacheTTLConfig)


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/jyotish/config.json``.

    Loaded and saved by :func:`~jyotish.config.load_global_config` and
    :func:`~jyotish.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by environment variables or
    CLI flags. See :func:`~jyotish.config.resolve_config` for the full
    precedence chain.
    """

    language: Language = Language.ENGLISH
    api_key_source: str = Field(
        default="env:API_KEY",
        description="Credential source for the model API key: env:VAR, file:/path, prompt",
    )
    model: ModelConfig = Field(default_factory=ModelConfig)
    retry: RetryPolicy = Field(default_factory=RetryPolicy)
    cache: CacheConfig = Field(default_factory=CacheConfig)


# --- Request models ---


class BirthDetails(BaseModel):
    """Birth data for one person.

    Any spelling ``fromisoformat`` accepts is stored in one form:
    ``dob`` as ``YYYY-MM-DD`` and ``tob`` as 24-hour ``HH:MM`` (seconds
    dropped). Both go into prompts and cache keys, so one birth gets one key.
    """

    name: str = Field(min_length=1)
    dob: str
    tob: str
    location: str = Field(min_length=1)
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @field_validator("dob")
    @classmethod
    def _check_dob(cls, value: str) -> str:
        return date.fromisoformat(value.strip()).isoformat()

    @field_validator("tob")
    @classmethod
    def _check_tob(cls, value: str) -> str:
        return time.fromisoformat(value.strip()).strftime("%H:%M")


class MatchmakingDetails(BaseModel):
    """The two charts compared by an Ashtakoot compatibility reading."""

    boy: BirthDetails
    girl: BirthDetails


class ChatMessage(BaseModel):
    """One turn of a follow-up conversation about a reading."""

    role: Literal["user", "model"]
    text: str


# --- Result models ---


class Coordinates(BaseModel):
    """Geocoded birth place."""

    model_config = ConfigDict(populate_by_name=True)

    lat: float
    lng: float
    formatted_address: str = Field(default="", alias="formattedAddress")


class PredictionResult(BaseModel):
    """Structured horoscope for one sign and timeframe."""

    model_config = ConfigDict(populate_by_name=True)

    overview: str
    career: str
    health: str
    relationships: str
    finance: str
    spirituality: str
    lucky_color: str = Field(alias="luckyColor")
    lucky_number: str = Field(alias="luckyNumber")

    @field_validator("lucky_number", mode="before")
    @classmethod
    def _number_as_text(cls, value: object) -> object:
        # Models sometimes answer 7 instead of "7".
        if isinstance(value, int):
            return str(value)
        return value


class KundaliResponse(BaseModel):
    """Natal chart report: Markdown text plus the planets in each house."""

    model_config = ConfigDict(populate_by_name=True)

    report: str
    chart: dict[str, list[str]] = Field(default_factory=dict)
    lagna_sign: int = Field(alias="lagnaSign", ge=1, le=12)


class NumerologyProfile(BaseModel):
    """Locally computed numbers for a birth date.

    See :func:`jyotish.numerology.calculate`.
    """

    dob: str
    mulank: int = Field(ge=1, le=9)
    bhagyank: int = Field(ge=1, le=9)
    loshu: list[list[Optional[int]]]


class TextReading(BaseModel):
    """A free-form Markdown reading tagged with what produced it."""

    kind: ReadingKind
    markdown: str
