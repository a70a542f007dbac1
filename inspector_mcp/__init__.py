"""
Inspector MCP: a Model Context Protocol adapter for the GridinSoft Inspector API.

The adapter speaks MCP over stdio and forwards each request to the remote
Inspector HTTP API, relaying protocol-compliant results back to the client.

Public API modules:
- inspector_mcp.server: MCP transport adapter and request router
- inspector_mcp.providers: HTTP client for the remote API
- inspector_mcp.config: Settings loading
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("gridinsoft-inspector-mcp")
except PackageNotFoundError:
    # Development checkout, not installed via pip
    __version__ = "1.0.5"

__all__ = ["__version__"]
