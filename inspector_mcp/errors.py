"""Exception hierarchy for the Inspector MCP adapter.

Errors fall into four groups:
- ConfigurationError: the credential or a setting is missing/invalid
- TransportError: the remote API could not be reached, answered non-2xx,
  or returned a body that is not JSON
- NotFoundError: a get-by-name lookup failed (details deliberately withheld)
- FatalStartupError: the stdio session could not be started
"""


class InspectorError(Exception):
    """Base exception for adapter errors."""


class ConfigurationError(InspectorError):
    """Raised when configuration is missing or invalid."""


class TransportError(InspectorError):
    """Raised when a call to the remote API fails."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        """Initialize transport error.

        Args:
            message: Error message
            status_code: HTTP status code (if a response was received)
            body: Raw response body text (if a response was received)
        """
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class NotFoundError(InspectorError):
    """Raised when a prompt or resource lookup fails."""


class FatalStartupError(InspectorError):
    """Raised when the server cannot start."""
