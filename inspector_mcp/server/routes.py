"""Routing table between MCP operations and remote API endpoints.

Each operation maps to exactly one HTTP call and carries its own failure
policy:

| Operation       | Method | Path                  | Policy    |
|-----------------|--------|-----------------------|-----------|
| tools/list      | GET    | /tools                | DEGRADE   |
| tools/call      | POST   | /tools/call           | IN_BAND   |
| prompts/list    | GET    | /prompts              | DEGRADE   |
| prompts/get     | GET    | /prompts/get?name=    | PROPAGATE |
| resources/list  | GET    | /resources            | DEGRADE   |
| resources/read  | GET    | /resources/read?uri=  | PROPAGATE |
"""

from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote

# Characters left unescaped by JavaScript's encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"


class Operation(str, Enum):
    """MCP operations handled by the adapter."""

    LIST_TOOLS = "tools/list"
    CALL_TOOL = "tools/call"
    LIST_PROMPTS = "prompts/list"
    GET_PROMPT = "prompts/get"
    LIST_RESOURCES = "resources/list"
    READ_RESOURCE = "resources/read"


class FailurePolicy(str, Enum):
    """What an operation returns when the remote call fails.

    DEGRADE: return an empty collection
    IN_BAND: return an error payload flagged with isError
    PROPAGATE: raise a generic error to the protocol layer
    """

    DEGRADE = "degrade"
    IN_BAND = "in_band"
    PROPAGATE = "propagate"


@dataclass(frozen=True)
class Route:
    """One row of the routing table.

    Attributes:
        operation: MCP operation served by this route
        method: HTTP method
        path: Path relative to the API base URL
        policy: Failure handling for this operation
        query_param: Name of the single query parameter, if the route takes one
        requires_credential: Refuse locally when no credential is configured
        failure_message: Generic message raised under PROPAGATE
    """

    operation: Operation
    method: str
    path: str
    policy: FailurePolicy
    query_param: str | None = None
    requires_credential: bool = False
    failure_message: str = ""

    def build_path(self, value: str | None = None) -> str:
        """Return the request path, appending the encoded query value."""
        if self.query_param is None:
            return self.path
        if value is None:
            msg = f"Route {self.operation.value} requires a '{self.query_param}' value"
            raise ValueError(msg)
        return f"{self.path}?{self.query_param}={encode_uri_component(value)}"


def encode_uri_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


ROUTES: dict[Operation, Route] = {
    route.operation: route
    for route in (
        Route(Operation.LIST_TOOLS, "GET", "/tools", FailurePolicy.DEGRADE),
        Route(
            Operation.CALL_TOOL,
            "POST",
            "/tools/call",
            FailurePolicy.IN_BAND,
            requires_credential=True,
        ),
        Route(Operation.LIST_PROMPTS, "GET", "/prompts", FailurePolicy.DEGRADE),
        Route(
            Operation.GET_PROMPT,
            "GET",
            "/prompts/get",
            FailurePolicy.PROPAGATE,
            query_param="name",
            requires_credential=True,
            failure_message="Error fetching prompt details",
        ),
        Route(Operation.LIST_RESOURCES, "GET", "/resources", FailurePolicy.DEGRADE),
        Route(
            Operation.READ_RESOURCE,
            "GET",
            "/resources/read",
            FailurePolicy.PROPAGATE,
            query_param="uri",
            requires_credential=True,
            failure_message="Error reading resource",
        ),
    )
}


def get_route(operation: Operation) -> Route:
    return ROUTES[operation]
