"""
Custom exceptions for the flights_cli package.

Provides a hierarchy of exceptions for clear error handling at the
command-line boundary. Every error raised here is reported on stderr
and terminates the invocation with a non-zero exit status.
"""

from typing import Iterable


class FlightsCliError(Exception):
    """Base exception for all flights_cli errors."""

    pass


# -------------------------------
# Input validation
# -------------------------------


class ValidationError(FlightsCliError, ValueError):
    """Raised when a CLI field cannot be normalized into a valid request."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(message)


class InvalidChoiceError(ValidationError):
    """Raised when a value is not one of an enumerated set of choices."""

    def __init__(self, field: str, choices: Iterable[object]) -> None:
        self.choices = tuple(choices)
        choices_str = ", ".join(str(choice) for choice in self.choices)
        super().__init__(field, f"{field} must be one of: {choices_str}")


class UnknownAirlineError(ValidationError):
    """Raised when an airline token is neither a carrier code nor a known name."""

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(
            "airlines",
            f"Unknown airline '{token}'. Use 2-letter code (e.g. UA) or common name.",
        )


# -------------------------------
# Configuration
# -------------------------------


class ConfigurationError(FlightsCliError):
    """Raised when required configuration is missing or invalid."""

    pass


class MissingApiKeyError(ConfigurationError):
    """Raised when no SerpAPI key is given explicitly or via the environment."""

    def __init__(self, env_var: str = "SERPAPI_KEY") -> None:
        self.env_var = env_var
        super().__init__(f"Missing SerpAPI key. Use --api-key or set {env_var}.")


# -------------------------------
# Provider (SerpAPI)
# -------------------------------


class ProviderError(FlightsCliError):
    """Base exception for failures talking to the flight search provider."""

    pass


class ProviderHTTPError(ProviderError):
    """Raised when the provider answers with a non-success HTTP status."""

    def __init__(self, status_code: int, reason: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        status = f"{status_code} {reason}" if reason else str(status_code)
        super().__init__(f"SerpAPI request failed ({status})")


class ProviderTimeoutError(ProviderError):
    """Raised when the provider does not answer within the request timeout."""

    def __init__(self, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(f"SerpAPI request timed out after {timeout_seconds:g} seconds")


class ProviderTransportError(ProviderError):
    """Raised on network-level failures (DNS, connection refused, TLS)."""

    def __init__(self, message: str) -> None:
        super().__init__(f"SerpAPI request failed: {message}")


class ProviderResponseError(ProviderError):
    """Raised when the provider response body is not the expected JSON shape."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Invalid SerpAPI response: {message}")


class ProviderAPIError(ProviderError):
    """Raised when a well-formed provider payload reports an error itself."""

    def __init__(self, provider_message: str) -> None:
        self.provider_message = provider_message
        super().__init__(f"SerpAPI error: {provider_message}")
