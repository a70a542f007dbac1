"""Logging setup for the adapter."""

from inspector_mcp.observability.logging import JSONFormatter, configure_logging

__all__ = ["JSONFormatter", "configure_logging"]
