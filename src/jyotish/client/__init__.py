"""Generative model client for jyotish.

Provides :class:`GeminiClient`, an async wrapper around :mod:`httpx` for
the Gemini ``generateContent`` API, plus helpers to build request parts
and decode responses.

Example::

    from jyotish.client import GeminiClient, parse_ai_response

    async with GeminiClient(config.model, api_key=key) as client:
        data = parse_ai_response(await client.generate(prompt, model=name))
"""

from jyotish.client.gemini import GeminiClient, history_contents, image_part, text_part
from jyotish.client.response import extract_text, parse_ai_response

__all__ = [
    "GeminiClient",
    "extract_text",
    "history_contents",
    "image_part",
    "parse_ai_response",
    "text_part",
]
