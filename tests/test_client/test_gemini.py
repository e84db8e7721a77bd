"""Tests for the asynchronous Gemini client."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx
import pytest

from jyotish.client import GeminiClient, history_contents, image_part, text_part
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


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _answer(text: str, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code=status_code,
        json={"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]},
    )


def _generate(handler, api_key: Any = "secret", contents: Any = "Hi", **kwargs: Any) -> str:
    """Run one generate() call against an httpx.MockTransport."""
    model = kwargs.pop("model", "gemini-3-flash-preview")

    async def main() -> str:
        async with GeminiClient(
            ModelConfig(), api_key=api_key, transport=httpx.MockTransport(handler)
        ) as client:
            return await client.generate(contents, model=model, **kwargs)

    return asyncio.run(main())


class _Recorder:
    """MockTransport handler that records requests and replies with *response*."""

    def __init__(self, response: httpx.Response | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self.response = response or _answer("hello")

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response

    @property
    def body(self) -> dict[str, Any]:
        return json.loads(self.requests[-1].content)


# ---------------------------------------------------------------------------
# Request building
# ---------------------------------------------------------------------------


class TestRequest:
    def test_posts_to_generate_content(self) -> None:
        handler = _Recorder()
        assert _generate(handler) == "hello"
        request = handler.requests[0]
        assert request.method == "POST"
        assert request.url.host == "generativelanguage.googleapis.com"
        assert request.url.path == "/v1beta/models/gemini-3-flash-preview:generateContent"

    def test_api_key_header(self) -> None:
        handler = _Recorder()
        _generate(handler, api_key="k-123")
        assert handler.requests[0].headers["x-goog-api-key"] == "k-123"

    def test_plain_prompt_becomes_user_turn(self) -> None:
        handler = _Recorder()
        _generate(handler, contents="Where is Pune?")
        assert handler.body == {
            "contents": [{"role": "user", "parts": [{"text": "Where is Pune?"}]}]
        }

    def test_generation_options(self) -> None:
        handler = _Recorder()
        schema = {"type": "OBJECT", "properties": {}}
        _generate(
            handler,
            model="gemini-3-pro-preview",
            system_instruction="Be brief.",
            response_mime_type="application/json",
            response_schema=schema,
            thinking_budget=20000,
        )
        body = handler.body
        assert body["systemInstruction"] == {"parts": [{"text": "Be brief."}]}
        assert body["generationConfig"] == {
            "responseMimeType": "application/json",
            "responseSchema": schema,
            "thinkingConfig": {"thinkingBudget": 20000},
        }
        assert handler.requests[0].url.path.endswith("/gemini-3-pro-preview:generateContent")

    def test_structured_contents_passed_through(self) -> None:
        handler = _Recorder()
        contents = [{"role": "user", "parts": [image_part(b"\x89PNG", "image/png"), text_part("Read")]}]
        _generate(handler, contents=contents)
        part = handler.body["contents"][0]["parts"][0]
        assert part == {"inlineData": {"mimeType": "image/png", "data": "iVBORw=="}}


class TestHelpers:
    def test_history_contents(self) -> None:
        history = [
            ChatMessage(role="user", text="Will I travel?"),
            ChatMessage(role="model", text="Yes, in spring."),
        ]
        contents = history_contents(history, "Where to?")
        assert [c["role"] for c in contents] == ["user", "model", "user"]
        assert contents[-1]["parts"] == [{"text": "Where to?"}]

    def test_history_contents_empty(self) -> None:
        assert history_contents([], "Q") == [{"role": "user", "parts": [{"text": "Q"}]}]


# ---------------------------------------------------------------------------
# API key resolution
# ---------------------------------------------------------------------------


class TestApiKey:
    @pytest.mark.parametrize("api_key", [None, "", lambda: ""])
    def test_missing_key_raises_before_request(self, api_key: Any) -> None:
        handler = _Recorder()
        with pytest.raises(ConfigError, match="API_KEY missing."):
            _generate(handler, api_key=api_key)
        assert handler.requests == []

    def test_callable_resolved_per_request(self) -> None:
        calls = []

        def source() -> str:
            calls.append(1)
            return "lazy-key"

        handler = _Recorder()

        async def main() -> None:
            async with GeminiClient(
                ModelConfig(), api_key=source, transport=httpx.MockTransport(handler)
            ) as client:
                assert calls == []
                await client.generate("Hi", model="m")

        asyncio.run(main())
        assert calls == [1]
        assert handler.requests[0].headers["x-goog-api-key"] == "lazy-key"

    def test_credential_error_propagates(self) -> None:
        def source() -> str:
            raise ConfigError("API_KEY missing. Set the API_KEY environment variable.")

        with pytest.raises(ConfigError, match="Set the API_KEY"):
            _generate(_Recorder(), api_key=source)


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


class TestErrorMapping:
    @pytest.mark.parametrize(
        "status,exc_type",
        [
            (400, InvalidUsageError),
            (401, AuthError),
            (403, AuthError),
            (404, NotFoundError),
            (429, RateLimitError),
            (500, ServerError),
            (503, ServerError),
        ],
    )
    def test_status_codes(self, status: int, exc_type: type) -> None:
        response = httpx.Response(
            status, json={"error": {"code": status, "message": "went wrong"}}
        )
        with pytest.raises(exc_type, match=f"HTTP {status}: went wrong"):
            _generate(_Recorder(response))

    def test_non_json_error_body(self) -> None:
        response = httpx.Response(502, text="Bad Gateway")
        with pytest.raises(ServerError, match="HTTP 502: Bad Gateway"):
            _generate(_Recorder(response))

    def test_connect_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ConnectionError_, match="connection refused"):
            _generate(handler)

    def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(ConnectionError_):
            _generate(handler)

    @pytest.mark.parametrize(
        "transport_error",
        [
            httpx.RemoteProtocolError("peer closed connection"),
            httpx.ProxyError("proxy refused"),
            httpx.ReadError("connection reset"),
        ],
    )
    def test_every_transport_error_is_connection_error(self, transport_error) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise transport_error

        with pytest.raises(ConnectionError_) as excinfo:
            _generate(handler)
        assert excinfo.value.retryable
        assert excinfo.value.exit_code == 6


# ---------------------------------------------------------------------------
# Response decoding
# ---------------------------------------------------------------------------


class TestResponseText:
    def test_blocked_response_is_empty(self) -> None:
        response = httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}})
        assert _generate(_Recorder(response)) == ""

    def test_thought_parts_skipped(self) -> None:
        response = httpx.Response(
            200,
            json={
                "candidates": [
                    {
                        "content": {
                            "parts": [
                                {"text": "Let me think...", "thought": True},
                                {"text": "Answer."},
                            ]
                        }
                    }
                ]
            },
        )
        assert _generate(_Recorder(response)) == "Answer."

    def test_non_json_success_body(self) -> None:
        response = httpx.Response(200, text="<html>")
        assert _generate(_Recorder(response)) == ""

    def test_requires_context_manager(self) -> None:
        client = GeminiClient(ModelConfig(), api_key="k")
        with pytest.raises(AssertionError):
            asyncio.run(client.generate("Hi", model="m"))
