"""Request router between MCP operations and the Inspector API.

The router turns each MCP operation into exactly one HTTP call (or none,
when a credential-gated operation runs without a credential) and
normalizes the remote JSON into mcp.types result models.

Failures never escape as raw exceptions. Each operation follows the policy
recorded in the routing table:
- discovery operations (tools/prompts/resources list) degrade to empty lists
- tools/call returns an in-band error result
- prompts/get and resources/read raise a generic error
"""

import logging
from collections.abc import Callable
from typing import Any

from mcp import types
from pydantic import ValidationError

from inspector_mcp.config.settings import Settings
from inspector_mcp.errors import ConfigurationError, NotFoundError, TransportError
from inspector_mcp.providers.inspector_api import InspectorApiClient
from inspector_mcp.server.routes import FailurePolicy, Operation, get_route
from inspector_mcp.server.schemas import (
    PassthroughResult,
    RemoteCallResult,
    ToolDescriptor,
    error_result,
)

logger = logging.getLogger(__name__)

# Errors that count as a failed remote call
CONTAINED_ERRORS = (TransportError, ValidationError)

_DEGRADED_RESULTS: dict[Operation, Callable[[], types.Result]] = {
    Operation.LIST_TOOLS: lambda: types.ListToolsResult(tools=[]),
    Operation.LIST_PROMPTS: lambda: types.ListPromptsResult(prompts=[]),
    Operation.LIST_RESOURCES: lambda: types.ListResourcesResult(resources=[]),
}


def normalize_tool_list(payload: Any) -> types.ListToolsResult | PassthroughResult:
    """Narrow a remote tool listing to the MCP tool schema.

    Malformed tool entries are skipped; the rest of the listing is kept.

    Args:
        payload: Decoded /tools response

    Returns:
        ListToolsResult with name/description/inputSchema per tool, in the
        remote order, or PassthroughResult for objects without a tools list

    Raises:
        TransportError: If the payload is not a JSON object
        ValidationError: If a relayed object carries reserved keys of the wrong type
    """
    if isinstance(payload, dict) and isinstance(payload.get("tools"), list):
        tools = []
        for index, entry in enumerate(payload["tools"]):
            try:
                tools.append(ToolDescriptor.model_validate(entry).to_tool())
            except ValidationError as e:
                logger.warning(
                    "Skipping malformed tool entry %s: %s", index, e.errors(include_url=False)
                )
        return types.ListToolsResult(tools=tools)

    if isinstance(payload, dict):
        logger.info("Unrecognised tools/list payload, relaying it unchanged")
        return PassthroughResult(payload=payload)

    msg = f"Malformed tools/list payload: expected an object, got {type(payload).__name__}"
    raise TransportError(msg)


class Router:
    """Maps the six MCP operations onto the Inspector API.

    Attributes:
        settings: Settings captured at startup
        client: HTTP client for the remote API
    """

    def __init__(self, settings: Settings, client: InspectorApiClient | None = None) -> None:
        """Initialize router.

        Args:
            settings: Process settings (carries the credential)
            client: Optional API client (built from settings when omitted)
        """
        self.settings = settings
        self.client = client or InspectorApiClient(
            base_url=settings.base_url,
            api_key=settings.api_key,
            timeout_s=settings.timeout_seconds,
        )

    async def _fetch(
        self,
        operation: Operation,
        param: str | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        route = get_route(operation)
        if route.requires_credential and not self.settings.has_credential:
            raise ConfigurationError(self.settings.missing_credential_message())
        return await self.client.request(route.method, route.build_path(param), body)

    def contain(self, operation: Operation, error: Exception) -> types.Result:
        """Apply the operation's failure policy to an error.

        Args:
            operation: Operation that failed
            error: The failure

        Returns:
            Empty collection (DEGRADE) or error tool result (IN_BAND)

        Raises:
            NotFoundError: For PROPAGATE operations, with a generic message
        """
        route = get_route(operation)
        logger.warning(
            "%s failed: %s",
            operation.value,
            error,
            extra={
                "operation": operation.value,
                "status_code": getattr(error, "status_code", None),
            },
        )

        if route.policy is FailurePolicy.DEGRADE:
            return _DEGRADED_RESULTS[operation]()
        if route.policy is FailurePolicy.IN_BAND:
            return error_result(f"Error: {error}")
        raise NotFoundError(route.failure_message) from error

    async def list_tools(self) -> types.ListToolsResult | PassthroughResult:
        try:
            payload = await self._fetch(Operation.LIST_TOOLS)
            return normalize_tool_list(payload)
        except CONTAINED_ERRORS as e:
            return self.contain(Operation.LIST_TOOLS, e)

    async def call_tool(
        self, name: str, arguments: dict[str, Any] | None = None
    ) -> types.CallToolResult:
        """Invoke a remote tool.

        Without a credential this returns the configuration error result
        immediately and makes no HTTP call.
        """
        if not self.settings.has_credential:
            logger.warning("Tool call '%s' refused: no API key configured", name)
            return error_result(self.settings.missing_credential_message())

        try:
            payload = await self._fetch(
                Operation.CALL_TOOL,
                body={"name": name, "arguments": arguments or {}},
            )
            return RemoteCallResult.model_validate(payload).to_result()
        except CONTAINED_ERRORS as e:
            return self.contain(Operation.CALL_TOOL, e)
        except Exception as e:
            logger.exception("Unexpected error calling tool '%s'", name)
            return self.contain(Operation.CALL_TOOL, e)

    async def list_prompts(self) -> types.ListPromptsResult:
        try:
            payload = await self._fetch(Operation.LIST_PROMPTS)
            return types.ListPromptsResult.model_validate(payload)
        except CONTAINED_ERRORS as e:
            return self.contain(Operation.LIST_PROMPTS, e)

    async def get_prompt(self, name: str) -> types.GetPromptResult:
        """Fetch a prompt by name.

        Raises:
            ConfigurationError: If no credential is configured
            NotFoundError: If the remote call fails or returns a malformed prompt
        """
        try:
            payload = await self._fetch(Operation.GET_PROMPT, param=name)
            return types.GetPromptResult.model_validate(payload)
        except CONTAINED_ERRORS as e:
            return self.contain(Operation.GET_PROMPT, e)

    async def list_resources(self) -> types.ListResourcesResult:
        try:
            payload = await self._fetch(Operation.LIST_RESOURCES)
            return types.ListResourcesResult.model_validate(payload)
        except CONTAINED_ERRORS as e:
            return self.contain(Operation.LIST_RESOURCES, e)

    async def read_resource(self, uri: str) -> types.ReadResourceResult:
        """Read a resource by URI.

        Raises:
            ConfigurationError: If no credential is configured
            NotFoundError: If the remote call fails or returns a malformed body
        """
        try:
            payload = await self._fetch(Operation.READ_RESOURCE, param=uri)
            return types.ReadResourceResult.model_validate(payload)
        except CONTAINED_ERRORS as e:
            return self.contain(Operation.READ_RESOURCE, e)
