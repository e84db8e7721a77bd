"""Asynchronous client for the Gemini ``generateContent`` REST API.

This module provides :class:`GeminiClient`, a thin wrapper around
:class:`httpx.AsyncClient` that builds ``generateContent`` requests,
injects the API key, and maps HTTP failures onto the
:mod:`jyotish.exceptions` hierarchy so that :func:`jyotish.retry.with_retry`
can tell transient failures from terminal ones.

The client performs exactly one HTTP call per :meth:`GeminiClient.generate`;
retry and caching live in :class:`~jyotish.service.ReadingService`.

See Also:
    :mod:`jyotish.client.response` for decoding the returned text.
"""

from __future__ import annotations

import base64
from typing import Any, Callable, Optional, Union

import httpx

from jyotish.client.response import extract_text
from jyotish.exceptions import (
    AuthError,
    ConfigError,
    ConnectionError_,
    InvalidUsageError,
    NotFoundError,
    RateLimitError,
    ServerError,
)
from jyotish.models import ChatMessage, ModelConfig
from jyotish.output import get_output

ApiKey = Union[str, Callable[[], str], None]
Contents = Union[str, list[dict[str, Any]]]


def text_part(text: str) -> dict[str, Any]:
    return {"text": text}


def image_part(data: bytes, mime_type: str = "image/jpeg") -> dict[str, Any]:
    """Build an inline image part from raw bytes."""
    return {
        "inlineData": {
            "mimeType": mime_type,
            "data": base64.b64encode(data).decode("ascii"),
        }
    }


def history_contents(history: list[ChatMessage], question: str) -> list[dict[str, Any]]:
    """Turn a chat history plus a new question into ``contents`` entries."""
    contents = [
        {"role": message.role, "parts": [text_part(message.text)]}
        for message in history
    ]
    contents.append({"role": "user", "parts": [text_part(question)]})
    return contents


class GeminiClient:
    """Asynchronous client for one Gemini endpoint.

    Must be used as an async context manager so that the underlying
    :class:`httpx.AsyncClient` is opened and closed.

    Args:
        config: Endpoint root, model names and timeout.
        api_key: The API key, a zero-argument callable returning it, or
            ``None``.  A callable is only invoked when a request is about
            to be sent, so cached readings never require a key.
        transport: Optional httpx transport (tests pass
            :class:`httpx.MockTransport`).

    Example::

        async with GeminiClient(ModelConfig(), api_key="...") as client:
            text = await client.generate("Hello", model="gemini-3-flash-preview")
    """

    def __init__(
        self,
        config: ModelConfig,
        api_key: ApiKey = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._api_key = api_key
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> GeminiClient:
        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    async def generate(
        self,
        contents: Contents,
        *,
        model: str,
        system_instruction: Optional[str] = None,
        response_mime_type: Optional[str] = None,
        response_schema: Optional[dict[str, Any]] = None,
        thinking_budget: Optional[int] = None,
    ) -> str:
        """Send one ``generateContent`` request and return the answer text.

        Args:
            contents: A prompt string, or a list of ``Content`` dicts
                (``{"role": ..., "parts": [...]}``).
            model: Model name, e.g. ``gemini-3-flash-preview``.
            system_instruction: Optional system prompt.
            response_mime_type: Set to ``application/json`` to request JSON.
            response_schema: Optional OpenAPI-style schema for JSON output.
            thinking_budget: Optional thinking token budget.

        Returns:
            The text of the first candidate (possibly empty).

        Raises:
            ConfigError: No API key is available.
            InvalidUsageError: HTTP 400.
            AuthError: HTTP 401 / 403.
            NotFoundError: HTTP 404.
            RateLimitError: HTTP 429.
            ServerError: HTTP 5xx or any other error status.
            ConnectionError_: Any httpx transport failure: refused or dropped
                connections, proxy errors, timeouts.
        """
        assert self._client is not None, "Client not initialised -- use as async context manager"

        api_key = self._resolve_api_key()
        body = self._build_body(
            contents, system_instruction, response_mime_type, response_schema, thinking_budget,
        )
        path = f"/models/{model}:generateContent"
        get_output().debug(f"POST {path}")

        try:
            response = await self._client.post(
                path,
                json=body,
                headers={"x-goog-api-key": api_key},
            )
        except httpx.TransportError as exc:
            raise ConnectionError_(f"Connection to {self._config.base_url} failed: {exc}") from exc

        self._map_response_error(response)

        try:
            payload = response.json()
        except ValueError:
            payload = None
        return extract_text(payload)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _resolve_api_key(self) -> str:
        key = self._api_key() if callable(self._api_key) else self._api_key
        if not key:
            raise ConfigError("API_KEY missing.")
        return key

    @staticmethod
    def _build_body(
        contents: Contents,
        system_instruction: Optional[str],
        response_mime_type: Optional[str],
        response_schema: Optional[dict[str, Any]],
        thinking_budget: Optional[int],
    ) -> dict[str, Any]:
        if isinstance(contents, str):
            contents = [{"role": "user", "parts": [text_part(contents)]}]
        body: dict[str, Any] = {"contents": contents}

        if system_instruction:
            body["systemInstruction"] = {"parts": [text_part(system_instruction)]}

        generation: dict[str, Any] = {}
        if response_mime_type:
            generation["responseMimeType"] = response_mime_type
        if response_schema:
            generation["responseSchema"] = response_schema
        if thinking_budget is not None:
            generation["thinkingConfig"] = {"thinkingBudget": thinking_budget}
        if generation:
            body["generationConfig"] = generation
        return body

    def _map_response_error(self, response: httpx.Response) -> None:
        """Raise a typed exception for error HTTP status codes."""
        status = response.status_code
        if status < 400:
            return

        try:
            detail = response.json()
            if isinstance(detail, dict) and isinstance(detail.get("error"), dict):
                msg = detail["error"].get("message") or ""
            else:
                msg = str(detail)
        except ValueError:
            msg = response.text[:200] if response.text else ""

        prefix = f"HTTP {status}"
        full_msg = f"{prefix}: {msg}" if msg else prefix

        if status == 400:
            raise InvalidUsageError(full_msg)
        if status in (401, 403):
            raise AuthError(full_msg)
        if status == 404:
            raise NotFoundError(full_msg)
        if status == 429:
            raise RateLimitError(full_msg)
        raise ServerError(full_msg)
