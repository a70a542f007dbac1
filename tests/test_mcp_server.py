"""
Transport adapter tests.

Handlers are invoked through the low-level server's request table, the
same path the SDK uses when a message arrives on stdio.
"""

from importlib.metadata import version

import httpx
import pytest
from mcp import types
from mcp.server.lowlevel import NotificationOptions
from mcp.shared.exceptions import McpError

from inspector_mcp.config import Settings
from inspector_mcp.errors import ConfigurationError
from inspector_mcp.server import mcp_server
from inspector_mcp.server.mcp_server import InspectorMCPServer, serve
from tests.stubs import StubApi, make_router


def _server(settings, stub: StubApi) -> InspectorMCPServer:
    return InspectorMCPServer(settings, router=make_router(settings, stub))


async def _handle(server: InspectorMCPServer, request: types.Request) -> types.Result:
    handler = server.server.request_handlers[type(request)]
    response = await handler(request)
    return response.root


class TestCapabilities:
    """Capability negotiation."""

    def test_sdk_is_a_1x_release(self) -> None:
        # The request table and McpError are the 1.x low-level server API
        assert version("mcp").split(".")[0] == "1"

    def test_declares_tools_prompts_resources(self, settings, stub: StubApi) -> None:
        server = _server(settings, stub)

        capabilities = server.server.get_capabilities(NotificationOptions(), {})

        assert capabilities.tools is not None
        assert capabilities.prompts is not None
        assert capabilities.resources is not None
        assert capabilities.logging is None

    def test_server_identity_comes_from_settings(self, settings, stub: StubApi) -> None:
        server = _server(settings, stub)

        options = server.server.create_initialization_options()

        assert options.server_name == "gridinsoft-inspector"
        assert options.server_version == settings.server_version


class TestToolHandlers:
    """tools/list and tools/call over the protocol boundary."""

    @pytest.mark.asyncio
    async def test_list_tools_is_narrowed(self, settings, stub: StubApi) -> None:
        stub.responses["/tools"] = httpx.Response(
            200,
            json={"tools": [{"name": "scan_url", "description": "d", "inputSchema": {}, "cost": 5}]},
        )
        server = _server(settings, stub)

        result = await _handle(server, types.ListToolsRequest(method="tools/list"))

        assert isinstance(result, types.ListToolsResult)
        assert result.model_dump(mode="json", exclude_none=True) == {
            "tools": [{"name": "scan_url", "description": "d", "inputSchema": {}}]
        }

    @pytest.mark.asyncio
    async def test_list_tools_passthrough_keeps_payload(self, settings, stub: StubApi) -> None:
        stub.responses["/tools"] = httpx.Response(200, json={"catalog": ["scan_url"]})
        server = _server(settings, stub)

        result = await _handle(server, types.ListToolsRequest(method="tools/list"))

        assert result.model_dump(mode="json", exclude_none=True) == {"catalog": ["scan_url"]}

    @pytest.mark.asyncio
    async def test_list_tools_bad_reserved_key_degrades(self, settings, stub: StubApi) -> None:
        stub.responses["/tools"] = httpx.Response(200, json={"_meta": "v2", "catalog": []})
        server = _server(settings, stub)

        result = await _handle(server, types.ListToolsRequest(method="tools/list"))

        assert isinstance(result, types.ListToolsResult)
        assert result.tools == []

    @pytest.mark.asyncio
    async def test_call_tool_keeps_remote_error_flag(self, settings, stub: StubApi) -> None:
        stub.responses["/tools/call"] = httpx.Response(
            200,
            json={"content": [{"type": "text", "text": "domain is blacklisted"}], "isError": True},
        )
        server = _server(settings, stub)

        result = await _handle(
            server,
            types.CallToolRequest(
                method="tools/call",
                params=types.CallToolRequestParams(
                    name="inspect_domain", arguments={"domain": "example.com"}
                ),
            ),
        )

        assert isinstance(result, types.CallToolResult)
        assert result.isError is True
        assert result.content[0].text == "domain is blacklisted"
        # One HTTP call: no tool listing precedes the call
        assert [request.url.path for request in stub.requests] == ["/mcp/v1/tools/call"]

    @pytest.mark.asyncio
    async def test_call_tool_without_credential(self, anon_settings, stub: StubApi) -> None:
        server = _server(anon_settings, stub)

        result = await _handle(
            server,
            types.CallToolRequest(
                method="tools/call",
                params=types.CallToolRequestParams(
                    name="inspect_domain", arguments={"domain": "example.com"}
                ),
            ),
        )

        assert result.isError is True
        assert "https://inspector.gridinsoft.com/profile" in result.content[0].text
        assert stub.requests == []

    @pytest.mark.asyncio
    async def test_unexpected_error_in_call_is_contained(
        self, settings, stub: StubApi, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        server = _server(settings, stub)

        async def broken(name, arguments):
            raise RuntimeError("bug")

        monkeypatch.setattr(server.router, "call_tool", broken)

        result = await _handle(
            server,
            types.CallToolRequest(
                method="tools/call",
                params=types.CallToolRequestParams(name="scan_url", arguments={}),
            ),
        )

        assert result.isError is True
        assert result.content[0].text == "Error: bug"

    @pytest.mark.asyncio
    async def test_unexpected_error_in_listing_degrades(
        self, settings, stub: StubApi, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        server = _server(settings, stub)

        async def broken():
            raise RuntimeError("bug")

        monkeypatch.setattr(server.router, "list_tools", broken)

        result = await _handle(server, types.ListToolsRequest(method="tools/list"))

        assert result.tools == []


class TestPromptAndResourceHandlers:
    """Discovery degrades; lookups raise protocol errors."""

    @pytest.mark.asyncio
    async def test_list_prompts_server_error(self, settings, stub: StubApi) -> None:
        stub.responses["/prompts"] = httpx.Response(500, text="boom")
        server = _server(settings, stub)

        result = await _handle(server, types.ListPromptsRequest(method="prompts/list"))

        assert result.prompts == []

    @pytest.mark.asyncio
    async def test_list_resources_server_error(self, settings, stub: StubApi) -> None:
        stub.responses["/resources"] = httpx.Response(500, text="boom")
        server = _server(settings, stub)

        result = await _handle(server, types.ListResourcesRequest(method="resources/list"))

        assert result.resources == []

    @pytest.mark.asyncio
    async def test_get_prompt_not_found(self, settings, stub: StubApi) -> None:
        stub.responses["/prompts/get"] = httpx.Response(404, text="no such prompt: internal-id-7")
        server = _server(settings, stub)

        with pytest.raises(McpError) as exc_info:
            await _handle(
                server,
                types.GetPromptRequest(
                    method="prompts/get",
                    params=types.GetPromptRequestParams(name="missing"),
                ),
            )

        assert exc_info.value.error.code == types.INTERNAL_ERROR
        assert exc_info.value.error.message == "Error fetching prompt details"

    @pytest.mark.asyncio
    async def test_read_resource_server_error(self, settings, stub: StubApi) -> None:
        stub.responses["/resources/read"] = httpx.Response(500, text="boom")
        server = _server(settings, stub)

        with pytest.raises(McpError) as exc_info:
            await _handle(
                server,
                types.ReadResourceRequest(
                    method="resources/read",
                    params=types.ReadResourceRequestParams(uri="inspector://reports/latest"),
                ),
            )

        assert exc_info.value.error.message == "Error reading resource"

    @pytest.mark.asyncio
    async def test_read_resource_without_credential(self, anon_settings, stub: StubApi) -> None:
        server = _server(anon_settings, stub)

        with pytest.raises(McpError) as exc_info:
            await _handle(
                server,
                types.ReadResourceRequest(
                    method="resources/read",
                    params=types.ReadResourceRequestParams(uri="inspector://reports/latest"),
                ),
            )

        assert "GRIDINSOFT_API_KEY" in exc_info.value.error.message
        assert stub.requests == []

    @pytest.mark.asyncio
    async def test_read_resource_success(self, settings, stub: StubApi) -> None:
        stub.responses["/resources/read"] = httpx.Response(
            200,
            json={
                "contents": [
                    {"uri": "inspector://reports/latest", "mimeType": "text/plain", "text": "ok"}
                ]
            },
        )
        server = _server(settings, stub)

        result = await _handle(
            server,
            types.ReadResourceRequest(
                method="resources/read",
                params=types.ReadResourceRequestParams(uri="inspector://reports/latest"),
            ),
        )

        assert isinstance(result, types.ReadResourceResult)
        assert result.contents[0].text == "ok"

    @pytest.mark.asyncio
    async def test_read_resource_relays_parsed_uri(self, settings, stub: StubApi) -> None:
        stub.responses["/resources/read"] = httpx.Response(200, json={"contents": []})
        server = _server(settings, stub)
        requests = [
            types.ReadResourceRequest(
                method="resources/read",
                params=types.ReadResourceRequestParams(uri=uri),
            )
            for uri in ("inspector://reports/latest", "https://Example.com")
        ]

        for request in requests:
            await _handle(server, request)

        relayed = [sent.url.params["uri"] for sent in stub.requests]
        assert relayed == [str(request.params.uri) for request in requests]
        assert relayed[0] == "inspector://reports/latest"


class TestServe:
    """Process entry point exit codes."""

    def test_invalid_configuration_exits_1(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        def broken_settings():
            msg = "timeout_seconds must be positive"
            raise ConfigurationError(msg)

        monkeypatch.setattr(mcp_server, "load_settings", broken_settings)

        with pytest.raises(SystemExit) as exc_info:
            serve()

        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Fatal error: Invalid configuration: timeout_seconds must be positive" in (
            captured.err
        )

    def test_keyboard_interrupt_exits_0(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def interrupted(coro):
            coro.close()
            raise KeyboardInterrupt

        monkeypatch.setattr(mcp_server.asyncio, "run", interrupted)

        with pytest.raises(SystemExit) as exc_info:
            serve(Settings(api_key="test-key"))

        assert exc_info.value.code == 0

    def test_runtime_failure_exits_1(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        def failing(coro):
            coro.close()
            msg = "stdio closed"
            raise RuntimeError(msg)

        monkeypatch.setattr(mcp_server.asyncio, "run", failing)

        with pytest.raises(SystemExit) as exc_info:
            serve(Settings(api_key="test-key"))

        assert exc_info.value.code == 1
        assert "Fatal error: stdio closed" in capsys.readouterr().err
