"""jyotish -- Vedic astrology readings from a generative model, on the command line.

The package turns birth data into prompts for a Gemini model and renders
the answers as horoscopes, kundali reports, numerology, palmistry and
matchmaking readings.  Every model call goes through a persistent TTL
cache and a retry loop with exponential backoff, so repeating a request
is free until its reading goes stale.

Typical workflow::

    export API_KEY=...
    jyotish sign set leo
    jyotish horoscope --timeframe weekly
    jyotish kundali --name Asha --dob 1990-07-23 --tob 06:45 --place Pune

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and credential resolution.
    cache: TTL cache, key builders and persistent stores.
    retry: Exponential backoff with transient/terminal classification.
    client: Async Gemini client and response decoding.
    service: Cached, retried reading operations.
    numerology: Locally computed mulank, bhagyank and Loshu grid.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.3.0"
