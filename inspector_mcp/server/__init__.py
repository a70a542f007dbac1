"""MCP Server Core - Protocol Implementation.

This package contains the adapter between MCP and the Inspector API:
- mcp_server.py: stdio transport adapter and process entry point
- router.py: operation -> HTTP call translation and result normalization
- routes.py: routing table and per-operation failure policies
- schemas.py: boundary models for remote payloads
"""

from inspector_mcp.server.mcp_server import InspectorMCPServer, serve
from inspector_mcp.server.router import Router
from inspector_mcp.server.routes import ROUTES, FailurePolicy, Operation, Route

__all__ = [
    "ROUTES",
    "FailurePolicy",
    "InspectorMCPServer",
    "Operation",
    "Route",
    "Router",
    "serve",
]
