"""Custom exception hierarchy for logcore.

All application exceptions inherit from :class:`LogCoreError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "openai", "anthropic", "url") caused the failure.

The hierarchy is organized by workflow stage:

    LogCoreError  (base -- catch-all for any logcore error)
    +-- InputError          (request validation: missing / ambiguous source)
    +-- LoadError           (loading a file, URL, or raw text)
    +-- GenerationError     (any LLM call failure or schema violation)
    +-- ConfigurationError  (missing or inconsistent run configuration)
    +-- PipelineError       (orchestration invariant violated)

None of these are retried.  A raised error terminates the run; the caller
receives exactly one terminal error describing the failing stage.
"""


class LogCoreError(Exception):
    """Base exception for all logcore errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[openai] API error: quota exceeded``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Input / loading errors
# ---------------------------------------------------------------------------

class InputError(LogCoreError):
    """Raised when a request names no source, or more than one source."""

    def __init__(
        self,
        message: str = "No input source provided (path, url, or text required)",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class LoadError(LogCoreError):
    """Raised when a source is unreachable, unreadable, too large, or empty."""

    def __init__(
        self,
        message: str = "Failed to load source",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Generation errors
# ---------------------------------------------------------------------------

class GenerationError(LogCoreError):
    """Raised when an LLM call fails or its output violates the requested schema."""

    def __init__(
        self,
        message: str = "LLM generation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Orchestration / configuration errors
# ---------------------------------------------------------------------------

class ConfigurationError(LogCoreError):
    """Raised when run configuration is invalid or missing."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class PipelineError(LogCoreError):
    """Raised when pipeline orchestration hits an invalid state (e.g. zero chunks)."""

    def __init__(
        self,
        message: str = "Pipeline orchestration failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
