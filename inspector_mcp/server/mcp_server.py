"""MCP stdio server backed by the Inspector API.

This module provides the transport adapter that:
1. Captures settings (and the API key) once at startup
2. Builds a Router bound to those settings
3. Registers handlers for tools, prompts and resources
4. Serves a single client session over stdin/stdout

Architecture:
- MCP client -> InspectorMCPServer -> Router -> Inspector HTTP API
- Handlers contain no business logic; every failure is converted to the
  operation's documented failure shape before it reaches the SDK

Example:
    # Start the server (normally launched by an MCP client)
    GRIDINSOFT_API_KEY=... python -m inspector_mcp serve
"""

import asyncio
import logging
import sys
from collections.abc import Awaitable
from typing import Any

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError

from inspector_mcp.config import Settings, load_settings
from inspector_mcp.errors import ConfigurationError, FatalStartupError, InspectorError
from inspector_mcp.observability import configure_logging
from inspector_mcp.server.router import Router
from inspector_mcp.server.routes import FailurePolicy, Operation, get_route
from inspector_mcp.server.schemas import PassthroughResult

logger = logging.getLogger(__name__)


class InspectorMCPServer:
    """MCP server that relays every request to the Inspector API.

    Attributes:
        settings: Settings captured at startup
        router: Router performing the HTTP calls
        server: Low-level MCP server instance
    """

    def __init__(self, settings: Settings, router: Router | None = None) -> None:
        """Initialize the server.

        Args:
            settings: Process settings
            router: Optional router override (tests inject one with a stubbed client)
        """
        self.settings = settings
        self.router = router or Router(settings)
        self.server: Server = Server(settings.server_name, version=settings.server_version)
        logger.info("Created MCP server: %s %s", settings.server_name, settings.server_version)

        self._register_handlers()

    def _register_handlers(self) -> None:
        """Register one handler per request type.

        Handlers go straight into the request table: the SDK's call_tool
        decorator re-lists tools before each call and drops the remote
        isError flag. Registered request types also drive capability
        negotiation, which advertises exactly tools, prompts and resources.
        """
        handlers = self.server.request_handlers
        handlers[types.ListToolsRequest] = self._list_tools
        handlers[types.CallToolRequest] = self._call_tool
        handlers[types.ListPromptsRequest] = self._list_prompts
        handlers[types.GetPromptRequest] = self._get_prompt
        handlers[types.ListResourcesRequest] = self._list_resources
        handlers[types.ReadResourceRequest] = self._read_resource

        logger.debug("Registered %s request handlers", len(handlers))

    async def _dispatch(self, operation: Operation, call: Awaitable[Any]) -> Any:
        """Await a router call, converting anything that escapes it.

        PROPAGATE operations surface as protocol errors; every other operation
        falls back to its degraded or in-band error result.
        """
        route = get_route(operation)
        try:
            return await call
        except McpError:
            raise
        except InspectorError as e:
            if route.policy is not FailurePolicy.PROPAGATE:
                return self.router.contain(operation, e)
            raise McpError(types.ErrorData(code=types.INTERNAL_ERROR, message=str(e))) from e
        except Exception as e:
            logger.exception("Unexpected error in %s handler", operation.value)
            if route.policy is not FailurePolicy.PROPAGATE:
                return self.router.contain(operation, e)
            raise McpError(
                types.ErrorData(code=types.INTERNAL_ERROR, message=route.failure_message)
            ) from e

    async def _list_tools(self, req: types.ListToolsRequest) -> types.ServerResult:
        result = await self._dispatch(Operation.LIST_TOOLS, self.router.list_tools())
        if isinstance(result, PassthroughResult):
            result = result.to_result()
        return types.ServerResult(result)

    async def _call_tool(self, req: types.CallToolRequest) -> types.ServerResult:
        name = req.params.name
        arguments = req.params.arguments or {}
        logger.info("Tool call: %s", name)
        result = await self._dispatch(
            Operation.CALL_TOOL, self.router.call_tool(name, arguments)
        )
        return types.ServerResult(result)

    async def _list_prompts(self, req: types.ListPromptsRequest) -> types.ServerResult:
        result = await self._dispatch(Operation.LIST_PROMPTS, self.router.list_prompts())
        return types.ServerResult(result)

    async def _get_prompt(self, req: types.GetPromptRequest) -> types.ServerResult:
        result = await self._dispatch(
            Operation.GET_PROMPT, self.router.get_prompt(req.params.name)
        )
        return types.ServerResult(result)

    async def _list_resources(self, req: types.ListResourcesRequest) -> types.ServerResult:
        result = await self._dispatch(Operation.LIST_RESOURCES, self.router.list_resources())
        return types.ServerResult(result)

    async def _read_resource(self, req: types.ReadResourceRequest) -> types.ServerResult:
        # The SDK parses params.uri as AnyUrl before dispatch, so the relayed
        # string is its normalized form (lowercased host, "/" path for bare
        # http(s) origins). Custom schemes such as inspector:// pass unchanged.
        result = await self._dispatch(
            Operation.READ_RESOURCE, self.router.read_resource(str(req.params.uri))
        )
        return types.ServerResult(result)

    async def run(self) -> None:
        """Serve one MCP session over stdio until the stream closes."""
        logger.info("Starting Inspector MCP server on stdio")

        async with self.router.client:
            async with stdio_server() as (read, write):
                await self.server.run(
                    read,
                    write,
                    self.server.create_initialization_options(),
                )


def serve(settings: Settings | None = None) -> None:
    """Start the stdio server.

    Settings are loaded from the environment when not supplied. The process
    exits with status 1 on a startup failure and 0 on Ctrl-C.

    Args:
        settings: Optional pre-built settings
    """
    configure_logging()
    try:
        try:
            settings = settings or load_settings()
        except ConfigurationError as e:
            msg = f"Invalid configuration: {e}"
            raise FatalStartupError(msg) from e

        configure_logging(settings.log_level, settings.log_format)
        asyncio.run(InspectorMCPServer(settings).run())

    except KeyboardInterrupt:
        logger.info("Server stopped by user")
        sys.exit(0)

    except Exception as e:
        logger.exception("Fatal error: %s", e)
        sys.exit(1)


__all__ = [
    "InspectorMCPServer",
    "serve",
]
