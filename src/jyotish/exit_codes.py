"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~jyotish.exceptions.JyotishError` subclass.
Shell wrappers can inspect the exit code to tell a missing API key apart
from a flaky network without parsing stderr.

Example::

    $ jyotish horoscope aries
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the API key was rejected
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred (also used for configuration problems)."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or malformed birth data."""

EXIT_AUTH_FAILURE = 3
"""The model endpoint rejected the API key."""

EXIT_NOT_FOUND = 4
"""The requested model or endpoint does not exist (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""The model endpoint returned an HTTP 5xx server error."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_RATE_LIMITED = 7
"""The model endpoint kept answering HTTP 429 after all retries."""

EXIT_DECODE_ERROR = 8
"""The model answered, but its output could not be decoded."""
