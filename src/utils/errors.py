"""Custom exception hierarchy for the smart-link track resolver.

All application exceptions inherit from :class:`ResolverError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "acrcloud", "spotify", "sqlite") caused the failure.

The hierarchy is organized by resolution stage:

    ResolverError  (base -- catch-all for any resolver error)
    +-- IdentificationError      (primary fingerprint identification)
    +-- CatalogSearchError       (secondary catalog search)
    +-- PersistenceError         (cache store / caller record writes)
    +-- ConfigurationError       (startup / invalid thresholds)
    +-- RateLimitError           (provider rate-limit exceeded)
    +-- ProviderUnavailableError (external service down / not configured)

Providers raise these; the orchestrator catches them at its stage
boundaries and degrades to "source absent" instead of failing the request.
"""


class ResolverError(Exception):
    """Base exception for all resolver errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[acrcloud] HTTP 503``.
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
# Resolution stage errors
# ---------------------------------------------------------------------------

class IdentificationError(ResolverError):
    """Raised when the fingerprint identification provider call fails."""

    def __init__(
        self,
        message: str = "Track identification failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class CatalogSearchError(ResolverError):
    """Raised when a streaming catalog lookup or search fails."""

    def __init__(
        self,
        message: str = "Catalog search failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class PersistenceError(ResolverError):
    """Raised when a resolution or caller record cannot be written."""

    def __init__(
        self,
        message: str = "Persistence failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External service / provider errors
# ---------------------------------------------------------------------------

class ProviderUnavailableError(ResolverError):
    """Raised when an external service is unreachable or not configured."""

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class RateLimitError(ResolverError):
    """Raised when an API answers HTTP 429.

    The resolver does not retry; the source is treated as absent for the
    current request.
    """

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class ConfigurationError(ResolverError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
