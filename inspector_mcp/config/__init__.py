"""Configuration for the Inspector MCP adapter."""

from inspector_mcp.config.loader import load_settings
from inspector_mcp.config.settings import API_BASE, API_KEY_ENV, Settings

__all__ = ["API_BASE", "API_KEY_ENV", "Settings", "load_settings"]
