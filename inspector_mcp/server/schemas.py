"""Boundary schemas for remote API payloads.

Remote JSON is validated into mcp.types result models before it crosses
the protocol boundary. The remote tool schema is a superset of the MCP
one (e.g. it carries cost metadata); ToolDescriptor narrows it.
"""

from typing import Any

from mcp import types
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ToolDescriptor(BaseModel):
    """Public part of a remote tool definition.

    Example:
        >>> ToolDescriptor.model_validate(
        ...     {"name": "scan_url", "description": "d", "inputSchema": {}, "cost": 5}
        ... ).to_tool().model_dump(exclude_none=True)
        {'name': 'scan_url', 'description': 'd', 'inputSchema': {}}
    """

    name: str
    description: str | None = None
    inputSchema: dict[str, Any] = Field(default_factory=lambda: {"type": "object"})

    model_config = ConfigDict(extra="ignore")

    def to_tool(self) -> types.Tool:
        return types.Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.inputSchema,
        )


class RemoteCallResult(BaseModel):
    """Fields of a remote /tools/call payload that are forwarded."""

    content: list[types.ContentBlock]
    isError: bool = False

    model_config = ConfigDict(extra="ignore")

    def to_result(self) -> types.CallToolResult:
        return types.CallToolResult(content=self.content, isError=self.isError)


class PassthroughResult(BaseModel):
    """Tool listing in an unrecognised shape, relayed verbatim.

    Only produced for tools/list when the payload is a JSON object without
    a ``tools`` sequence.
    """

    payload: dict[str, Any]

    @field_validator("payload")
    @classmethod
    def _check_reserved_keys(cls, value: dict[str, Any]) -> dict[str, Any]:
        # Reserved keys such as _meta must already have their protocol types
        types.EmptyResult.model_validate(value)
        return value

    def to_result(self) -> types.EmptyResult:
        # Result models allow extra fields, so every key is kept
        return types.EmptyResult.model_validate(self.payload)


def error_result(text: str) -> types.CallToolResult:
    """Build a single-text-block tool result flagged as an error."""
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        isError=True,
    )
