"""Readings: the cache-then-retry template applied to every kind of content.

:class:`ReadingService` is what the CLI talks to.  Each cached operation
follows the same steps (see :meth:`ReadingService.cached`):

1. Build a deterministic key with :mod:`jyotish.cache.keys`.
2. Look it up in the :class:`~jyotish.cache.TTLCache`; a hit is returned
   without touching the model or the retry loop.
3. On a miss, call the model through :func:`~jyotish.retry.with_retry`.
4. Store the result with the TTL for its kind of content and return it.
5. If the call fails for good, the error propagates and nothing is cached.

Chat answers and palm readings skip steps 1, 2 and 4.

The model is reached through any object with an async ``generate``
method shaped like :meth:`jyotish.client.GeminiClient.generate`, so tests
substitute a fake.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional, Protocol, TypeVar

from pydantic import BaseModel, ValidationError

from jyotish import prompts
from jyotish.cache import Preferences, TTLCache, hours, keys
from jyotish.client.gemini import Contents, history_contents, image_part, text_part
from jyotish.client.response import parse_ai_response
from jyotish.exceptions import DecodeError, JyotishError
from jyotish.models import (
    BirthDetails,
    ChatMessage,
    Coordinates,
    GlobalConfig,
    KundaliResponse,
    Language,
    MatchmakingDetails,
    MoonSign,
    NumerologyProfile,
    PredictionResult,
    ReadingKind,
    TextReading,
    Timeframe,
)
from jyotish.output import debug, warning
from jyotish.retry import with_retry

M = TypeVar("M", bound=BaseModel)

KUNDALI_SILENT = "The cosmos is currently silent."
NUMBERS_UNCLEAR = "The numbers are currently unclear."

_JSON = "application/json"


class ModelBackend(Protocol):
    async def generate(
        self,
        contents: Contents,
        *,
        model: str,
        system_instruction: Optional[str] = None,
        response_mime_type: Optional[str] = None,
        response_schema: Optional[dict[str, Any]] = None,
        thinking_budget: Optional[int] = None,
    ) -> str: ...


def decode_model(model_type: type[M], text: str) -> M:
    """Parse JSON model output into *model_type*.

    Raises:
        DecodeError: The text is not JSON, or the JSON has the wrong shape.
    """
    data = parse_ai_response(text)
    try:
        return model_type.model_validate(data)
    except ValidationError as exc:
        raise DecodeError(
            f"Decoding failed: response does not match {model_type.__name__} "
            f"({exc.error_count()} errors)"
        ) from exc


class ReadingService:
    """Fetches readings from the model with caching and retry.

    Args:
        client: Model backend, normally an open
            :class:`~jyotish.client.GeminiClient`.
        cache: Reading cache.
        config: Effective configuration (language default, model names,
            retry policy, TTL table).
        preferences: Saved user preferences; required only by
            :meth:`sync_preferred_horoscope`.
        sleep: Backoff sleep passed through to the retry loop.
    """

    def __init__(
        self,
        client: ModelBackend,
        cache: TTLCache,
        config: Optional[GlobalConfig] = None,
        preferences: Optional[Preferences] = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self._cache = cache
        self._config = config or GlobalConfig()
        self._preferences = preferences or Preferences(cache.store)
        self._sleep = sleep

    @property
    def config(self) -> GlobalConfig:
        return self._config

    @property
    def preferences(self) -> Preferences:
        return self._preferences

    # ------------------------------------------------------------------ #
    # Template
    # ------------------------------------------------------------------ #

    async def cached(
        self,
        key: str,
        operation: Callable[[], Awaitable[M]],
        ttl_hours: int,
        model_type: type[M],
    ) -> M:
        """Return the cached *model_type* for *key*, or fetch and cache it.

        A cached payload that no longer validates against *model_type* is
        dropped and fetched again.
        """
        hit = self._cache.get(key)
        if hit is not None:
            try:
                result = model_type.model_validate(hit)
            except ValidationError:
                debug(f"Discarding stale cache entry {key}")
                self._cache.invalidate(key)
            else:
                debug(f"Cache hit: {key}")
                return result

        debug(f"Cache miss: {key}")
        result = await self._call(operation)
        self._cache.put(key, result.model_dump(mode="json", by_alias=True), hours(ttl_hours))
        return result

    async def _call(self, operation: Callable[[], Awaitable[Any]]) -> Any:
        return await with_retry(operation, self._config.retry, sleep=self._sleep)

    def _language(self, language: Optional[Language]) -> Language:
        return language or self._config.language

    # ------------------------------------------------------------------ #
    # Cached readings
    # ------------------------------------------------------------------ #

    async def get_coordinates(self, location: str) -> Coordinates:
        """Geocode a birth place."""
        model = self._config.model

        async def fetch() -> Coordinates:
            text = await self._client.generate(
                prompts.coordinates(location),
                model=model.flash_model,
                response_mime_type=_JSON,
            )
            return decode_model(Coordinates, text)

        return await self.cached(
            keys.coordinates(location),
            fetch,
            self._config.cache.ttl_hours.coordinates,
            Coordinates,
        )

    async def get_horoscope(
        self,
        sign: MoonSign,
        timeframe: Timeframe = Timeframe.DAILY,
        language: Optional[Language] = None,
    ) -> PredictionResult:
        """Structured horoscope for *sign*; cached per sign, timeframe and language."""
        language = self._language(language)
        model = self._config.model

        async def fetch() -> PredictionResult:
            text = await self._client.generate(
                prompts.horoscope(sign, timeframe, language),
                model=model.flash_model,
                response_mime_type=_JSON,
                response_schema=prompts.HOROSCOPE_SCHEMA,
            )
            return decode_model(PredictionResult, text)

        return await self.cached(
            keys.horoscope(sign, timeframe, language),
            fetch,
            self._config.cache.ttl_hours.for_timeframe(timeframe),
            PredictionResult,
        )

    async def get_kundali_analysis(
        self,
        details: BirthDetails,
        language: Optional[Language] = None,
    ) -> KundaliResponse:
        """Full natal chart report; cached per birth details and language."""
        language = self._language(language)
        model = self._config.model

        async def fetch() -> KundaliResponse:
            text = await self._client.generate(
                prompts.kundali(details, language),
                model=model.pro_model,
                response_mime_type=_JSON,
                thinking_budget=model.kundali_thinking_budget,
            )
            return decode_model(KundaliResponse, text)

        return await self.cached(
            keys.kundali(details, language),
            fetch,
            self._config.cache.ttl_hours.kundali,
            KundaliResponse,
        )

    async def get_matchmaking(
        self,
        details: MatchmakingDetails,
        language: Optional[Language] = None,
    ) -> TextReading:
        language = self._language(language)
        model = self._config.model

        async def fetch() -> TextReading:
            text = await self._client.generate(
                prompts.matchmaking(details, language), model=model.pro_model,
            )
            return TextReading(kind=ReadingKind.MATCHMAKING, markdown=text)

        return await self.cached(
            keys.match(details, language),
            fetch,
            self._config.cache.ttl_hours.matchmaking,
            TextReading,
        )

    async def get_numerology_analysis(
        self,
        profile: NumerologyProfile,
        language: Optional[Language] = None,
    ) -> TextReading:
        language = self._language(language)
        model = self._config.model

        async def fetch() -> TextReading:
            text = await self._client.generate(
                prompts.numerology(profile, language), model=model.flash_model,
            )
            return TextReading(kind=ReadingKind.NUMEROLOGY, markdown=text)

        return await self.cached(
            keys.numerology(profile.dob, language),
            fetch,
            self._config.cache.ttl_hours.numerology,
            TextReading,
        )

    # ------------------------------------------------------------------ #
    # Uncached readings
    # ------------------------------------------------------------------ #

    async def get_palmistry_analysis(
        self,
        image: bytes,
        mime_type: str = "image/jpeg",
        language: Optional[Language] = None,
    ) -> TextReading:
        """Read a palm photo.  Never cached."""
        language = self._language(language)
        contents = [
            {"role": "user", "parts": [image_part(image, mime_type), text_part(prompts.palmistry(language))]}
        ]

        async def fetch() -> TextReading:
            text = await self._client.generate(contents, model=self._config.model.pro_model)
            return TextReading(kind=ReadingKind.PALMISTRY, markdown=text)

        return await self._call(fetch)

    async def ask_kundali_question(
        self,
        question: str,
        context: str,
        history: Optional[list[ChatMessage]] = None,
        language: Optional[Language] = None,
    ) -> str:
        """Answer a follow-up question about a kundali report."""
        language = self._language(language)

        async def fetch() -> str:
            text = await self._client.generate(
                history_contents(history or [], question),
                model=self._config.model.pro_model,
                system_instruction=prompts.kundali_chat_instruction(context, language),
            )
            return text or KUNDALI_SILENT

        return await self._call(fetch)

    async def ask_numerology_question(
        self,
        question: str,
        profile: NumerologyProfile,
        history: Optional[list[ChatMessage]] = None,
        language: Optional[Language] = None,
    ) -> str:
        """Answer a follow-up question about a numerology profile."""
        language = self._language(language)

        async def fetch() -> str:
            text = await self._client.generate(
                history_contents(history or [], question),
                model=self._config.model.pro_model,
                system_instruction=prompts.numerology_chat_instruction(profile, language),
            )
            return text or NUMBERS_UNCLEAR

        return await self._call(fetch)

    # ------------------------------------------------------------------ #
    # Background refresh
    # ------------------------------------------------------------------ #

    async def sync_preferred_horoscope(
        self,
        language: Optional[Language] = None,
    ) -> Optional[PredictionResult]:
        """Warm the cache with today's horoscope for the preferred sign.

        Falls back to Aries when no sign is saved.  Failures are reported
        as a warning and ``None`` is returned.
        """
        sign = self._preferences.get_user_sign() or MoonSign.ARIES
        try:
            return await self.get_horoscope(sign, Timeframe.DAILY, language)
        except JyotishError as exc:
            warning(f"Background sync failed for {sign.value}: {exc}")
            return None
