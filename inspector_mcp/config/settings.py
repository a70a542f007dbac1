"""Typed runtime settings for the Inspector MCP adapter."""

from dataclasses import dataclass, field

from inspector_mcp import __version__
from inspector_mcp.errors import ConfigurationError

API_BASE = "https://inspector.gridinsoft.com/mcp/v1"
API_KEY_ENV = "GRIDINSOFT_API_KEY"
API_KEY_URL = "https://inspector.gridinsoft.com/profile"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
LOG_FORMATS = ("text", "json")


@dataclass(frozen=True)
class Settings:
    """Process-wide settings, built once at startup.

    Attributes:
        api_key: Bearer credential for the remote API (None when not configured)
        base_url: Remote API base URL
        timeout_seconds: Connect/read timeout handed to the HTTP client
        server_name: Name reported during MCP initialization
        server_version: Version reported during MCP initialization
        log_level: Logging level name
        log_format: "text" or "json"
    """

    api_key: str | None = field(default=None, repr=False)
    base_url: str = API_BASE
    timeout_seconds: float = 30.0
    server_name: str = "gridinsoft-inspector"
    server_version: str = __version__
    log_level: str = "WARNING"
    log_format: str = "text"

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.api_key is not None and not self.api_key.strip():
            object.__setattr__(self, "api_key", None)

        if isinstance(self.timeout_seconds, bool) or not isinstance(
            self.timeout_seconds, (int, float)
        ):
            msg = f"timeout_seconds must be a number, got {self.timeout_seconds!r}"
            raise ConfigurationError(msg)

        if self.timeout_seconds <= 0:
            msg = f"timeout_seconds must be > 0, got {self.timeout_seconds}"
            raise ConfigurationError(msg)

        level = str(self.log_level).upper()
        if level not in LOG_LEVELS:
            msg = f"log_level must be one of {', '.join(LOG_LEVELS)}, got '{self.log_level}'"
            raise ConfigurationError(msg)
        object.__setattr__(self, "log_level", level)

        if self.log_format not in LOG_FORMATS:
            msg = f"log_format must be 'text' or 'json', got '{self.log_format}'"
            raise ConfigurationError(msg)

        if not str(self.server_name).strip():
            msg = "server_name must not be empty"
            raise ConfigurationError(msg)

    @property
    def has_credential(self) -> bool:
        return self.api_key is not None

    def missing_credential_message(self) -> str:
        return (
            f"Error: {API_KEY_ENV} is not set. Please get your API key at "
            f"{API_KEY_URL} and add it to your configuration."
        )
