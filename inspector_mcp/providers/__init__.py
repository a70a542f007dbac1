"""Clients for the remote Inspector API."""

from inspector_mcp.providers.inspector_api import InspectorApiClient

__all__ = ["InspectorApiClient"]
