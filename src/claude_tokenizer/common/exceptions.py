"""Exceptions raised across the gateway and client."""
from __future__ import annotations


class TokenizerError(Exception):
    """Base exception for token counting errors."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(self.message)


class StartupConfigurationError(TokenizerError):
    """A required setting (such as the Anthropic API key) is missing."""


class VendorUnavailable(TokenizerError):
    """A best-effort estimator (tiktoken, Gemini) could not produce a count."""

    def __init__(self, vendor: str, message: str, cause: Exception | None = None) -> None:
        super().__init__(message, cause)
        self.vendor = vendor


class PrimaryCountingFailure(TokenizerError):
    """The Anthropic count_tokens call failed; the request cannot be answered."""

    public_message = "Failed to count tokens"


class ClientRequestError(TokenizerError):
    """Empty or malformed input; answered with an empty result, not an error."""
