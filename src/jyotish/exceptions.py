"""Exception hierarchy for jyotish.

All exceptions inherit from :class:`JyotishError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`jyotish.exit_codes`
and a ``retryable`` flag read by :func:`jyotish.retry.is_retryable`.
The top-level error handler in :func:`jyotish.app.main` catches
``JyotishError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    JyotishError (exit 1, retryable)
    +-- InvalidUsageError   (exit 2, terminal)
    +-- AuthError           (exit 3, terminal)
    +-- NotFoundError       (exit 4, terminal)
    +-- ServerError         (exit 5, retryable)
    +-- ConnectionError_    (exit 6, retryable)
    +-- RateLimitError      (exit 7, retryable)
    +-- DecodeError         (exit 8, terminal)
    +-- ConfigError         (exit 1, terminal)
"""

from jyotish.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_DECODE_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_RATE_LIMITED,
    EXIT_SERVER_ERROR,
)


class JyotishError(Exception):
    """Base exception for all jyotish errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`jyotish.exit_codes`, and a class-level
    ``retryable`` flag. Transient failures (network, rate limit, 5xx) are
    retryable; configuration and validation failures are terminal and are
    surfaced on the first attempt.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE
    retryable: bool = True

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(JyotishError):
    """Raised for invalid CLI arguments or malformed birth data."""

    exit_code = EXIT_INVALID_USAGE
    retryable = False


class AuthError(JyotishError):
    """Raised when the model endpoint rejects the API key (HTTP 401 / 403)."""

    exit_code = EXIT_AUTH_FAILURE
    retryable = False


class NotFoundError(JyotishError):
    """Raised when the model endpoint returns HTTP 404 (unknown model name)."""

    exit_code = EXIT_NOT_FOUND
    retryable = False


class ServerError(JyotishError):
    """Raised when the model endpoint returns an HTTP 5xx server error."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(JyotishError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class RateLimitError(JyotishError):
    """Raised when the model endpoint answers HTTP 429 (quota or rate limit)."""

    exit_code = EXIT_RATE_LIMITED


class DecodeError(JyotishError):
    """Raised when model output is empty or is not the JSON that was requested.

    Terminal: asking the same model the same question again rarely fixes
    malformed output, so the retry wrapper surfaces it immediately.
    """

    exit_code = EXIT_DECODE_ERROR
    retryable = False


class ConfigError(JyotishError):
    """Raised for configuration problems (missing API key, invalid JSON, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE
    retryable = False
