"""Application error types."""

from __future__ import annotations


class SurveyDeskError(Exception):
    """Base application error."""


class ConfigurationError(SurveyDeskError):
    """Key material or another required setting is missing or malformed."""


class DecryptionError(SurveyDeskError):
    """A stored secret failed authentication or could not be decoded."""


class InvalidSessionError(SurveyDeskError):
    """A session token is forged, expired, not yet valid, or malformed."""


class Forbidden(SurveyDeskError):
    """The caller is authenticated but lacks the required role."""


class MissingCredentialError(SurveyDeskError):
    """No per-user or server-wide credential exists for an integration.

    Parameters
    ----------
    integration : str
        Integration slug that could not be resolved.
    """

    def __init__(self, integration: str) -> None:
        self.integration = integration
        super().__init__(f"No API key configured for {integration}")


class ProviderError(SurveyDeskError):
    """Forms provider request failed.

    Parameters
    ----------
    message : str
        Error message.
    status_code : int | None, default=None
        Upstream HTTP status code if available.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ProviderAuthError(ProviderError):
    """The provider rejected the credential."""


class ProviderNotFoundError(ProviderError):
    """Requested provider resource was not found."""


class ProviderRateLimitError(ProviderError):
    """Caller hit the provider rate limit."""
